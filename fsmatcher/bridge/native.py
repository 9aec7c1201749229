"""
Native bridge - the four-call contract exposed to embedding hosts.

Hosts talk to the matcher with UTF-8 byte strings (or str) and integer
status codes. Every successful match_rule() hands back a
MatchResultHandle that owns the result bytes; the host must release it
exactly once with drop_result() (or by using it as a context manager).
"""

from __future__ import annotations

import logging
import threading

from fsmatcher.core import facade
from fsmatcher.core.config_store import ConfigStore, global_store
from fsmatcher.logging_setup import setup_logger

logger = logging.getLogger("fsmatcher.bridge")

# No error
ERR_OK = 0
# Parameter error
ERR_PARAM = 1


class MatchResultHandle:
    """Owned UTF-8 result of match_rule(); released exactly once."""

    def __init__(self, payload: bytes) -> None:
        self._payload: bytes | None = payload
        self._lock = threading.Lock()

    @property
    def released(self) -> bool:
        return self._payload is None

    @property
    def value(self) -> bytes:
        payload = self._payload
        if payload is None:
            raise ValueError("match result already released")
        return payload

    def text(self) -> str:
        return self.value.decode("utf-8")

    def release(self) -> None:
        with self._lock:
            if self._payload is None:
                raise ValueError("match result already released")
            self._payload = None

    def __enter__(self) -> MatchResultHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.released:
            self.release()


def _to_text(value: bytes | str) -> str | None:
    """Decode host input; None when it is not valid UTF-8 text."""
    try:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        if isinstance(value, str):
            value.encode("utf-8")
            return value
    except UnicodeError:
        return None
    return None


def init_logger(log_path: bytes | str | None = None) -> int:
    """Set up file logging. Undecodable paths fall back to the default directory."""
    path = _to_text(log_path) if log_path is not None else None
    try:
        setup_logger(path or None)
    except (OSError, ValueError) as e:
        logger.error(f"[Bridge] init_logger failed: {e}")
        return ERR_PARAM
    return ERR_OK


def init_matcher(
    file_scan_rule: bytes | str,
    file_scan_format: bytes | str,
    store: ConfigStore = global_store,
) -> int:
    str_file_scan_rule = _to_text(file_scan_rule)
    if str_file_scan_rule is None:
        return ERR_PARAM

    str_file_scan_format = _to_text(file_scan_format)
    if str_file_scan_format is None:
        return ERR_PARAM

    facade.init_matcher(str_file_scan_rule, str_file_scan_format, store=store)
    return ERR_OK


def match_rule(
    raw_result: bytes | str,
    file_path: bytes | str,
    store: ConfigStore = global_store,
) -> tuple[int, MatchResultHandle | None]:
    """Check one file. On ERR_OK the handle holds "" or the record JSON."""
    str_raw_result = _to_text(raw_result)
    if str_raw_result is None:
        return ERR_PARAM, None

    str_file_path = _to_text(file_path)
    if str_file_path is None:
        return ERR_PARAM, None

    match_result = facade.match_rule(str_raw_result, str_file_path, store=store)
    try:
        payload = match_result.encode("utf-8")
    except UnicodeError:
        return ERR_PARAM, None
    # A C string cannot carry an interior NUL
    if b"\x00" in payload:
        logger.error("[Bridge] match result contains NUL byte")
        return ERR_PARAM, None

    return ERR_OK, MatchResultHandle(payload)


def drop_result(handle: MatchResultHandle) -> None:
    """Release a handle returned by match_rule(). Raises ValueError on double release."""
    handle.release()
