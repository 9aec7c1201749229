"""
Matcher routes - POST /init and POST /match.

Thin HTTP wrappers around the native bridge, for hosts that run the
matcher as a sidecar process instead of embedding it.

/match hashes and describes any path the client names, so the sidecar
must only listen on a trusted local interface (e.g. 127.0.0.1).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from fsmatcher.api.dependencies import get_config_store
from fsmatcher.bridge import native
from fsmatcher.core.config_store import ConfigStore

logger = logging.getLogger("fsmatcher.api")
router = APIRouter()


class InitRequest(BaseModel):
    file_scan_rule: str = Field(..., description="Rule set JSON document")
    file_scan_format: str = Field(..., description="Format map JSON document")


class InitResponse(BaseModel):
    code: int


class MatchRequest(BaseModel):
    raw_result: str = Field(..., description="Scanner result JSON for the file")
    file_path: str = Field(..., min_length=1, description="Path of the scanned file")


class MatchResponse(BaseModel):
    code: int
    result: str = Field(default="", description="Sensitive file record JSON, or empty")


@router.post("/init", response_model=InitResponse)
async def init(req: InitRequest, store: ConfigStore = Depends(get_config_store)):
    code = native.init_matcher(req.file_scan_rule, req.file_scan_format, store=store)
    return InitResponse(code=code)


@router.post("/match", response_model=MatchResponse)
async def match(req: MatchRequest, store: ConfigStore = Depends(get_config_store)):
    # Hashing is blocking file I/O
    code, handle = await run_in_threadpool(
        native.match_rule, req.raw_result, req.file_path, store
    )
    if handle is None:
        return MatchResponse(code=code)
    with handle:
        return MatchResponse(code=code, result=handle.text())
