"""
Entry Facade - JSON in, JSON out.

init_matcher() installs the rule set and format map; match_rule() runs a
security check for one file and returns the serialized record, or "" when
nothing matched.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError

from fsmatcher.core.config_store import ConfigStore, MatcherConfig, global_store
from fsmatcher.core.matcher import file_security_check
from fsmatcher.models.rule_models import GlobalFileScanFormat, GlobalFileScanRule

logger = logging.getLogger("fsmatcher.init")

VERSION = "0c6f2b1e-58d4-4a49-9d0a-7f3e2c91a6b5"
DATE = "2026.10.18"


def _parse_or_default(model: type[BaseModel], document: str, label: str) -> BaseModel:
    try:
        return model.model_validate_json(document)
    except ValidationError as e:
        logger.warning(f"[Init] invalid {label} document, falling back to empty default: {e}")
        return model()


def init_matcher(
    str_file_scan_rule: str,
    str_file_scan_format: str,
    store: ConfigStore = global_store,
) -> MatcherConfig:
    """Parse both documents and install them; malformed input installs an empty config."""
    logger.info(f"[Version] Matcher lib version info: {DATE} (build: {VERSION})")
    logger.info(f"[Init] init matcher with RULE:\n{str_file_scan_rule}")
    logger.info(f"[Init] init matcher with FORMAT:\n{str_file_scan_format}")

    file_scan_rule = _parse_or_default(GlobalFileScanRule, str_file_scan_rule, "rule")
    file_scan_format = _parse_or_default(GlobalFileScanFormat, str_file_scan_format, "format")
    return store.initialize(file_scan_rule, file_scan_format)


def match_rule(
    str_raw_result: str,
    str_file_path: str,
    store: ConfigStore = global_store,
) -> str:
    """Serialized SensitiveFileRecord, or "" when the file is not sensitive."""
    result = file_security_check(str_raw_result, str_file_path, store=store)
    if result is None:
        return ""
    try:
        return result.to_json()
    except (ValueError, TypeError) as e:
        logger.error(f"[SecurityCheck] Failed to serialize result: {e}")
        return ""
