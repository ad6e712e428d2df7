"""FastAPI integration for the XSS defender.

Routes receive a `DefenseContext` through dependency injection. The context is
resolved once per request from the global policy and the matched endpoint:

1.  **Disabled**: if `policy.defender_enabled` is False, values are only
    whitespace-trimmed.
2.  **Ignored**: if the endpoint is marked with `@xss_ignore`, same as above.
3.  **Active**: otherwise the shared `DefenderEngine` is used.

The shared policy and engine are never mutated by a request.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

import xss_defender.engines.instances as services
from xss_defender.app.policy import policy
from xss_defender.engines.defender_engine import DefenderEngine, WhitespaceOnlyEngine
from xss_defender.engines.errors import UnsupportedDefenseStrategyError, XssRiskDetectedError

logger = logging.getLogger("xss_defender.api")

IGNORE_MARKER = "__xss_defender_ignore__"

COMMON_WARN_MESSAGE = "it might expose a risk to your http request, please make sure you really need to do this."

_whitespace_only = WhitespaceOnlyEngine()


def xss_ignore(endpoint):
    """Marks a route handler so its input bypasses the defender.

    Usage:
        @app.post("/raw")
        @xss_ignore
        async def raw(ctx: DefenseContext = Depends(get_defense_context)):
            ...

    The decorator must sit below the route decorator so the marked function
    is the one registered.
    """
    setattr(endpoint, IGNORE_MARKER, True)
    return endpoint


def is_ignored(endpoint) -> bool:
    """Returns True if `endpoint` was marked with `xss_ignore`."""
    return bool(getattr(endpoint, IGNORE_MARKER, False))


class DefenseContext:
    """The defender as it applies to one request.

    Attributes:
        enabled (bool): Whether input is actually defended.
        engine (DefenderEngine): The engine to run; a whitespace-only engine
            when `enabled` is False.
    """

    def __init__(self, engine: DefenderEngine, enabled: bool = True):
        self.enabled = enabled
        self.engine = engine if enabled else _whitespace_only

    def defend(self, text):
        return self.engine.defend(text)

    def defend_payload(self, data):
        return self.engine.defend_payload(data)

    def defend_form(self, fields):
        return self.engine.defend_form(fields)


def get_defense_context(request: Request) -> DefenseContext:
    """FastAPI dependency resolving the `DefenseContext` of a request."""
    if not policy.defender_enabled:
        logger.warning("You have disabled the XSS defender, " + COMMON_WARN_MESSAGE)
        return DefenseContext(services.defender_service, enabled=False)

    endpoint = request.scope.get("endpoint")
    if endpoint is not None and is_ignored(endpoint):
        logger.warning(
            f"You have ignored the XSS defender for the request mapping '{request.url.path}', "
            + COMMON_WARN_MESSAGE
        )
        return DefenseContext(services.defender_service, enabled=False)

    if services.defender_service is None:
        # Startup did not run (e.g. engine used outside the lifespan)
        raise RuntimeError("DefenderEngine is not initialized. Call initialize_services() first.")

    return DefenseContext(services.defender_service)


async def xss_risk_handler(request: Request, exc: XssRiskDetectedError):
    """Maps a detection to a rejected-input response."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "XSS risk detected", "offending_text": exc.offending_text},
    )


async def unsupported_strategy_handler(request: Request, exc: UnsupportedDefenseStrategyError):
    """A misconfigured strategy is a server defect, not a client error."""
    logger.critical(f"❌ {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "XSS defender is misconfigured"},
    )


def register_exception_handlers(app: FastAPI):
    """Installs the defender's exception handlers on `app`."""
    app.add_exception_handler(XssRiskDetectedError, xss_risk_handler)
    app.add_exception_handler(UnsupportedDefenseStrategyError, unsupported_strategy_handler)
