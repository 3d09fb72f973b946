"""
Application start-up wiring.

Call `bootstrap()` once from the entry point: it configures diagnostics from
the settings and returns the registry the application should hold on to.
Sink initialization errors propagate, so the entry point decides whether to
abort.
"""

from typing import Optional

from .config import Settings
from .diagnostics import configure_diagnostics, get_logger
from .registry import LoggerRegistry, new_registry

logger = get_logger("ucrm_logging.bootstrap")


def bootstrap(settings: Optional[Settings] = None) -> LoggerRegistry:
    if settings is None:
        from .config import settings as default_settings

        settings = default_settings

    configure_diagnostics(
        level=settings.logging.diagnostics_level,
        fmt=settings.logging.diagnostics_format.value,
    )
    registry = new_registry(settings)
    logger.info(
        "registry_ready",
        data_path=str(settings.plugin.data_path),
        database=settings.database_url,
        console_echo=settings.logging.console_echo,
    )
    return registry
