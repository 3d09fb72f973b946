from .base import Base
from .log import LogRecord

__all__ = ["Base", "LogRecord"]
