"""
Monitoring and Tracing Configuration Module.

Pydantic Logfire integration for the API server:
- FastAPI endpoint and SQLAlchemy tracing
- Business events (bookings, assignments, reward distributions)
- Error tracking

Logfire is driven by the ``settings.monitoring`` view (``LOGFIRE_ENABLED``,
``LOGFIRE_TOKEN`` and friends). Until :func:`initialize_logfire` succeeds the
helpers below only touch the standard logger, so the server runs unchanged
without a Logfire token.
"""

from typing import TYPE_CHECKING, Any, Optional

import logfire
from fastapi import FastAPI

from .logging_config import get_logger

if TYPE_CHECKING:
    from diligence_labs.server.core.config import MonitoringConfig

logger = get_logger(__name__)

_configured = False


def is_logfire_configured() -> bool:
    return _configured


def _instrument(config: "MonitoringConfig", app: Optional[FastAPI]) -> None:
    if config.trace_sqlalchemy:
        try:
            from diligence_labs.core.database import engine

            logfire.instrument_sqlalchemy(engine=engine.sync_engine)
            logger.info("Logfire: SQLAlchemy instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument SQLAlchemy: {e}")

    if config.trace_fastapi and app is not None:
        try:
            logfire.instrument_fastapi(app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")


def initialize_logfire(app: Optional[FastAPI] = None, config: Optional["MonitoringConfig"] = None) -> None:
    """
    Configure Logfire and instrument the database engine and the app.

    Does nothing unless Logfire is enabled and a token is present. A failure
    to configure is logged and leaves the helpers in logger-only mode.

    Args:
        app: Application to instrument; FastAPI tracing is skipped without it
        config: Monitoring settings, ``settings.monitoring`` by default
    """
    global _configured

    if config is None:
        from diligence_labs.server.core.config import settings

        config = settings.monitoring

    if not config.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return
    if not config.token:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set; monitoring stays off.")
        return

    try:
        logfire.configure(
            token=config.token,
            service_name=config.service_name,
            service_version=config.service_version,
            environment=config.environment,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return

    _configured = True
    _instrument(config, app)
    logger.info(f"Logfire monitoring initialized: environment={config.environment}, service={config.service_name}")


def _emit(level: str, message: str, **attributes: Any) -> None:
    if not _configured:
        return
    try:
        getattr(logfire, level)(message, **attributes)
    except Exception:
        logger.debug(f"Could not send to Logfire: {message}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    _emit("info", "API request completed", method=method, path=path, status_code=status_code, duration_ms=duration_ms)


def log_business_event(event: str, **attributes: Any) -> None:
    """
    Record a business event such as a booking or a reward distribution.

    The event always goes to the standard logger, with the attributes
    nested under the ``attributes`` record extra, and to Logfire when it is
    configured.

    Args:
        event: Short dotted event name (e.g. ``consultation.booked``)
        **attributes: Structured attributes attached to the event
    """
    logger.info(f"Business event: {event}", extra={"event": event, "attributes": attributes})
    _emit("info", "Business event {event}", event=event, **attributes)


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    _emit(
        "error",
        "{error_type}: {error_message}",
        error_type=error_type,
        error_message=error_message,
        **(context or {}),
    )
