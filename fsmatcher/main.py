"""
FsMatcher HTTP host - runs the matcher as a local sidecar service.

  POST /init   → install rule set + format map
  POST /match  → evaluate one scanned file
  GET  /health → {"status": "ok", ...}
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI

from fsmatcher.api.routes.health import router as health_router
from fsmatcher.api.routes.match import router as match_router
from fsmatcher.config import settings
from fsmatcher.core import facade

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("fsmatcher")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.rule_config_path and settings.format_config_path:
        rule_doc = Path(settings.rule_config_path).read_text(encoding="utf-8")
        format_doc = Path(settings.format_config_path).read_text(encoding="utf-8")
        facade.init_matcher(rule_doc, format_doc)
        logger.info(f"Loaded rule config from {settings.rule_config_path}")
    yield


app = FastAPI(
    title="FsMatcher",
    description="DLP rule matching for content scanner findings",
    version=facade.DATE,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(match_router)
