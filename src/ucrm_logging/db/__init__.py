from .session import create_log_engine, create_session_factory, sqlite_file

__all__ = ["create_log_engine", "create_session_factory", "sqlite_file"]
