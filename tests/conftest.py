"""
Test fixtures shared across all FsMatcher tests.
"""

import json

import pytest

from fsmatcher.core.config_store import ConfigStore, MatcherConfig
from fsmatcher.models.rule_models import (
    DictionaryEntry,
    FileScanRule,
    GlobalFileScanFormat,
    GlobalFileScanRule,
)


def make_rule(**overrides) -> FileScanRule:
    fields = {
        "id": 1,
        "code": "R1",
        "level": 2,
        "file_types": [],
        "min_file_size": 0,
        "max_file_size": 1_000_000,
        "check_file_encrypted": False,
        "check_file_suffix": False,
        "expr": "",
        "expr_context": {},
        "md5_check": False,
    }
    fields.update(overrides)
    return FileScanRule.model_validate(fields)


def make_config(rules, dictionary=None, formats=None, version="v1") -> MatcherConfig:
    return MatcherConfig(
        file_scan_rule=GlobalFileScanRule(
            config_version=version,
            file_scan_rules=tuple(rules),
            file_digital_dictionary={
                key: DictionaryEntry.model_validate(value)
                for key, value in (dictionary or {}).items()
            },
        ),
        file_scan_format=GlobalFileScanFormat(format=formats or {}),
    )


def make_raw_result(data=None, sub_data=None, **overrides) -> str:
    payload = {
        "categoryId": 3,
        "desc": "scanner description",
        "format": "docx",
        "data": data if data is not None else [{"id": 101, "length": 4, "location": "body"}],
        "encrypted": 0,
        "hidden": 0,
    }
    payload.update(overrides)
    if sub_data is not None:
        payload["subFileData"] = sub_data
    return json.dumps(payload)


@pytest.fixture
def store():
    """A fresh, uninitialized configuration store."""
    return ConfigStore()


@pytest.fixture
def sized_file(tmp_path):
    """Factory for files with an exact logical size."""

    def _make(size: int, name: str = "sample.docx"):
        path = tmp_path / name
        path.write_bytes(b"x" * size)
        return path

    return _make


@pytest.fixture
def sample_file(sized_file):
    return sized_file(100)


@pytest.fixture
def rule_document():
    """Rule set document as an administrator would push it."""
    return json.dumps(
        {
            "config_version": "2026-10-01",
            "file_scan_rules": [
                {
                    "id": 1,
                    "code": "ANY_FILE",
                    "level": 1,
                    "file_types": [],
                    "min_file_size": 0,
                    "max_file_size": 1000000,
                    "check_file_encrypted": False,
                    "check_file_suffix": False,
                    "expr": "",
                    "expr_context": {},
                    "md5_check": False,
                },
                {
                    "id": 2,
                    "code": "ID_CARD_BULK",
                    "level": 3,
                    "file_types": [7],
                    "min_file_size": 0,
                    "max_file_size": 1000000,
                    "check_file_encrypted": False,
                    "check_file_suffix": False,
                    "expr": "body5 == 1 && body101 >= limit",
                    "expr_context": {"variables": {"limit": {"Int": 4}}},
                    "md5_check": False,
                },
            ],
            "file_digital_dictionary": {
                "101": {"target_id": 5, "target_threshold": 10, "value": 6},
            },
        }
    )


@pytest.fixture
def format_document():
    return json.dumps({"format": {"docx": [7, 8], "pdf": [9]}})
