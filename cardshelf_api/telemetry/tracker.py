"""
Application Insights Telemetry Tracker

Forwards custom events and exceptions to Azure Application Insights when a
connection string is configured. Every event is also recorded by the
development logger.
"""

import logging
from typing import Any

from opencensus.ext.azure.log_exporter import AzureLogHandler

from .config import get_telemetry_config
from .context import get_request_context
from .dev_logger import log_dev_event

# Global instance (singleton)
_app_insights_logger: logging.Logger | None = None


def initialize_telemetry() -> logging.Logger | None:
    """
    Initialize Application Insights telemetry.

    Call this once at application startup.

    Returns:
        Logger instance if successful, None if disabled or connection string missing
    """
    global _app_insights_logger

    if _app_insights_logger is not None:
        return _app_insights_logger

    config = get_telemetry_config()

    if not config.enabled:
        logging.info("[Telemetry] Telemetry disabled by configuration")
        return None

    if not config.app_insights_connection_string:
        logging.warning(
            "[Telemetry] No Application Insights connection string found. Telemetry disabled."
        )
        return None

    try:
        logger = logging.getLogger("cardshelf_telemetry")
        logger.setLevel(logging.INFO)

        azure_handler = AzureLogHandler(connection_string=config.app_insights_connection_string)

        def callback_function(envelope):
            envelope.data.baseData.properties.update(get_request_context())
            envelope.data.baseData.properties["app_id"] = config.app_id
            envelope.data.baseData.properties["environment"] = config.environment
            return True

        azure_handler.add_telemetry_processor(callback_function)
        logger.addHandler(azure_handler)

        _app_insights_logger = logger
        logging.info("[Telemetry] Application Insights initialized successfully")

        return logger

    except Exception as e:
        logging.error(f"[Telemetry] Failed to initialize Application Insights: {e}")
        return None


def _merged_properties(properties: dict[str, Any] | None) -> dict[str, Any]:
    config = get_telemetry_config()
    return {
        **get_request_context(),
        "app_id": config.app_id,
        "environment": config.environment,
        **(properties or {}),
    }


def track_event(name: str, properties: dict[str, Any] | None = None) -> None:
    """
    Track a custom event.

    Request context (request_id, user_id) and app identity are merged into
    the event properties.
    """
    merged_properties = _merged_properties(properties)

    log_dev_event(name, merged_properties)

    if _app_insights_logger:
        _app_insights_logger.info(name, extra={"custom_dimensions": merged_properties})


def track_exception(
    exception: Exception, properties: dict[str, Any] | None = None, level: str = "ERROR"
) -> None:
    """Track an exception with its type and message."""
    merged_properties = _merged_properties(
        {
            "error_type": type(exception).__name__,
            "error_message": str(exception),
            **(properties or {}),
        }
    )

    log_dev_event("exception", merged_properties)

    if _app_insights_logger:
        log_level = getattr(logging, level.upper(), logging.ERROR)
        _app_insights_logger.log(
            log_level,
            f"Exception: {type(exception).__name__}",
            exc_info=exception,
            extra={"custom_dimensions": merged_properties},
        )


def flush_telemetry() -> None:
    """Flush telemetry immediately (useful before application shutdown)."""
    if _app_insights_logger:
        for handler in _app_insights_logger.handlers:
            if hasattr(handler, "flush"):
                handler.flush()
