import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from tokensync.api.deps import get_settings
from tokensync.api.routes import variables
from tokensync.components.transform import TRANSFORMER_INFO
from tokensync.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules on startup (fail-fast)
    if settings.rules_path.exists():
        try:
            rules = load_rules(settings.rules_path)
        except ValueError as e:
            logger.critical(f"Rules load failed: {e}")
            sys.exit(1)
        logging.basicConfig(level=getattr(logging, rules.logging.level))
        logger.info(f"Rules loaded from {settings.rules_path}")
    else:
        logging.basicConfig(level=logging.INFO)
        logger.info("No rules file found, using defaults")

    yield


app = FastAPI(
    title="tokensync API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
app.include_router(variables.router, prefix="/api/variables", tags=["Variables"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "api",
        "transformer": TRANSFORMER_INFO.id,
        "version": TRANSFORMER_INFO.version,
    }
