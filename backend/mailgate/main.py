"""
mailgate API
FastAPI application for inbound email intake and action token verification.
"""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from mailgate import __version__
from mailgate.config import Settings
from mailgate.routers import email_intake, token_verification

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings:    Configuration; read from the environment when omitted.
        http_client: AsyncClient used for outbound dispatch. When omitted,
                     each dispatch opens its own short-lived client.
    """
    app = FastAPI(
        title="mailgate",
        description="Inbound email intake filter and action token verifier",
        version=__version__,
    )
    app.state.settings = settings if settings is not None else Settings.from_env()
    app.state.http_client = http_client

    app.include_router(email_intake.router, prefix="/api/email-intake", tags=["email-intake"])
    app.include_router(token_verification.router, tags=["tokens"])

    @app.on_event("startup")
    async def log_configuration_state() -> None:
        """Warn at startup about missing settings; values are never logged."""
        checks = _config_checks(app.state.settings)
        missing = [name for name, present in checks.items() if not present]
        if missing:
            logger.warning("mailgate started with missing configuration: %s", ", ".join(missing))
        else:
            logger.info("mailgate started; all required configuration present")

    @app.get("/")
    async def root():
        return {"message": "mailgate", "version": __version__}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/health/config")
    async def health_config():
        """
        Report which required settings are present.

        Token verification answers 401 both for bad tokens and for a missing
        signing key, so this is where operators see the difference.
        Returns 503 when anything is missing.
        """
        checks = _config_checks(app.state.settings)
        ok = all(checks.values())
        return JSONResponse(
            status_code=200 if ok else 503,
            content={"status": "ok" if ok else "misconfigured", "configured": checks},
        )

    return app


def _config_checks(settings: Settings) -> dict[str, bool]:
    """Presence of each required setting, keyed by its env var name."""
    return {
        "ACTION_ENDPOINT_URL": bool(settings.action_endpoint_url),
        "ACTION_SECRET": bool(settings.action_secret),
        "ACTION_TOKEN_SECRET": bool(settings.token_secret),
        "INBOUND_WEBHOOK_SECRET": bool(settings.inbound_webhook_secret),
    }


app = create_app()
