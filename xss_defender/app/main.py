"""Main application entry point for the XSS Defender service.

This module initializes the FastAPI application and defines the API
endpoints. Every endpoint takes its input through a `DefenseContext`, so the
defender policy (strategy, global toggle, per-route ignore) is enforced in one
place.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request

# Local imports
import xss_defender.engines.instances as services
from xss_defender.app.config import DataPayload, TextPayload, settings
from xss_defender.app.integration import (
    DefenseContext,
    get_defense_context,
    register_exception_handlers,
    xss_ignore,
)
from xss_defender.app.policy import policy

# Setup Logger
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("xss_defender.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manages application lifecycle resources.

    - **Startup**: Builds the defender engines from the policy. An unknown
      strategy aborts startup here.
    - **Shutdown**: Nothing to release; the engines hold no resources.
    """
    logger.info("🚀 XSS Defender starting up...")
    services.initialize_services()

    yield

    logger.info("🛑 XSS Defender shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)


@app.get("/health")
async def health_check():
    """Returns the operational status and the active defender policy."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc),
        "defender": {
            "enabled": policy.defender_enabled,
            "strategy": policy.strategy,
            "escape_after_trim": policy.escape_after_trim,
        },
    }


@app.post("/defend/text")
async def defend_text(body: TextPayload, ctx: DefenseContext = Depends(get_defense_context)):
    """Defends a single value and returns the result."""
    return {"result": ctx.defend(body.text)}


@app.post("/ingest/data")
async def ingest_data(body: DataPayload, ctx: DefenseContext = Depends(get_defense_context)):
    """Defends every string value of a JSON document.

    Raises:
        XssRiskDetectedError: Under THROW; mapped to HTTP 400 by the
            registered exception handler.
    """
    data = ctx.defend_payload(body.payload)
    return {"status": "success", "payload": data}


@app.post("/ingest/form")
async def ingest_form(request: Request, ctx: DefenseContext = Depends(get_defense_context)):
    """Defends the text fields of a urlencoded or multipart form.

    Repeated fields are returned as lists; uploaded files are not echoed.
    """
    form = await request.form()

    fields = {}
    for name, value in form.multi_items():
        if not isinstance(value, str):
            continue
        if name in fields:
            previous = fields[name]
            fields[name] = previous + [value] if isinstance(previous, list) else [previous, value]
        else:
            fields[name] = value

    return {"status": "success", "fields": ctx.defend_form(fields)}


@app.post("/ingest/raw")
@xss_ignore
async def ingest_raw(body: DataPayload, ctx: DefenseContext = Depends(get_defense_context)):
    """Accepts markup as-is; string values are only whitespace-trimmed."""
    data = ctx.defend_payload(body.payload)
    return {"status": "success", "payload": data}
