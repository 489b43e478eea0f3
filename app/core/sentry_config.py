# app/core/sentry_config.py
"""
Sentry configuration for error tracking in production.

Sentry captures exceptions, errors, and performance data from production
environments for monitoring and debugging.
"""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from app.core.config import APP_NAME, APP_VERSION, is_production

logger = logging.getLogger(__name__)

#: Request headers replaced with "[Filtered]" before an event leaves the process.
SENSITIVE_HEADERS = ("cookie", "authorization", "x-api-key")


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized, False otherwise.
    """
    sentry_dsn = os.getenv("SENTRY_DSN", "").strip()

    if not is_production():
        logger.info("Sentry disabled in development mode")
        return False

    if not sentry_dsn:
        logger.warning(
            "SENTRY_DSN not set. Error tracking disabled. "
            "Set SENTRY_DSN environment variable to enable Sentry in production."
        )
        return False

    environment = os.getenv("SENTRY_ENVIRONMENT", "production")

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # Breadcrumbs from INFO and above
        event_level=logging.ERROR,  # Send errors and above as events
    )

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[
            FastApiIntegration(),
            StarletteIntegration(),
            logging_integration,
        ],
        traces_sample_rate=0.1,
        sample_rate=1.0,
        release=os.getenv("RELEASE_VERSION", f"{APP_NAME}@{APP_VERSION}"),
        environment=environment,
        # Employee names and bank accounts are personal data
        send_default_pii=False,
        attach_stacktrace=True,
        before_send=before_send_hook,
    )

    logger.info(f"Sentry initialized successfully (environment: {environment})")
    return True


def before_send_hook(event, hint):
    """
    Filter sensitive data before sending to Sentry.

    Args:
        event: Sentry event data
        hint: Additional context

    Returns:
        Modified event or None to drop the event
    """
    request = event.get("request")
    if request:
        headers = request.get("headers")
        if headers:
            for header in SENSITIVE_HEADERS:
                if header in headers:
                    headers[header] = "[Filtered]"

        # Request bodies carry salaries and bank accounts
        if "data" in request:
            request["data"] = "[Filtered]"

    return event


def capture_exception(error: Exception, context: dict | None = None) -> None:
    """
    Capture an exception to Sentry with additional context.

    Without an initialized client this is a no-op inside sentry_sdk.

    Args:
        error: Exception to capture
        context: Named context blocks, e.g. {"request": {"path": ...}}
    """
    if context:
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_context(key, value)
            sentry_sdk.capture_exception(error)
    else:
        sentry_sdk.capture_exception(error)
