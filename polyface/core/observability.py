"""
Observability module for PolyFace API.

Provides error tracking and performance monitoring using GlitchTip
(open-source, Sentry-compatible).
"""

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from polyface.config.settings import settings


def init_observability() -> None:
    """Initialize GlitchTip/Sentry observability."""
    if not settings.GLITCHTIP_DSN:
        print("[Observability] Disabled - no DSN configured")
        return

    traces_sample_rate = settings.GLITCHTIP_TRACES_SAMPLE_RATE
    profiles_sample_rate = settings.GLITCHTIP_PROFILES_SAMPLE_RATE

    if settings.is_development:
        traces_sample_rate = 1.0
        profiles_sample_rate = 1.0

    sentry_sdk.init(
        dsn=settings.GLITCHTIP_DSN,
        environment=settings.APP_ENV,
        release=f"polyface-api@{settings.APP_VERSION}",
        traces_sample_rate=traces_sample_rate,
        profiles_sample_rate=profiles_sample_rate,
        send_default_pii=False,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
            HttpxIntegration(),
        ],
        before_send=_before_send,
    )

    print(f"[Observability] Initialized for {settings.APP_ENV}")


def _before_send(event: dict, hint: dict) -> dict | None:
    """Filter events before sending to GlitchTip."""
    if "exc_info" in hint:
        exc_type, exc_value, _ = hint["exc_info"]

        # User-facing domain errors are expected outcomes, not bugs
        from polyface.core.exceptions import PolyFaceError

        if isinstance(exc_value, PolyFaceError):
            return None

        exc_message = str(exc_value).lower()
        if any(
            msg in exc_message
            for msg in ["connection refused", "connection reset", "broken pipe"]
        ):
            return None

    return event


def set_user_context(user_id: str, email: str | None = None) -> None:
    """Set user context for error reports."""
    sentry_sdk.set_user({"id": user_id, "email": email})

