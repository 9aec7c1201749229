"""
Rule Configuration Models - rule set, digital dictionary and format map.

These mirror the JSON documents an administrator pushes through
init_matcher(). All models are frozen: once loaded they are shared by
every concurrent evaluation and must never change.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fsmatcher.core.expression import EvalContext

# evalexpr serializes values as externally tagged enums, e.g. {"Int": 3}
_TAGGED_VALUE_KEYS = {"Int", "Float", "Boolean", "String"}

ContextValue = int | float | bool | str


def _untag(name: str, value: Any) -> ContextValue:
    if isinstance(value, dict) and len(value) == 1:
        tag, inner = next(iter(value.items()))
        if tag in _TAGGED_VALUE_KEYS:
            value = inner
    if isinstance(value, (bool, int, float, str)):
        return value
    raise ValueError(f"unsupported value for context variable '{name}': {value!r}")


class DictionaryEntry(BaseModel):
    """A weighted contribution towards a dictionary bucket."""

    model_config = ConfigDict(frozen=True)

    target_id: int = Field(..., description="Dictionary bucket this entry feeds")
    target_threshold: int = Field(..., description="Running total that fires the bucket")
    value: int = Field(..., description="Weight contributed per occurrence")


class FileScanRule(BaseModel):
    """A single administrator-defined detection rule."""

    model_config = ConfigDict(frozen=True)

    id: int
    code: str
    level: int
    file_types: frozenset[int] = Field(
        default_factory=frozenset, description="Accepted type codes. Empty = any type"
    )
    min_file_size: int = Field(..., ge=0, description="Inclusive lower size bound")
    max_file_size: int = Field(..., ge=0, description="Exclusive upper size bound")
    check_file_encrypted: bool = False
    check_file_suffix: bool = False
    expr: str = ""
    expr_context: dict[str, ContextValue] = Field(
        default_factory=dict, description="Variables pre-seeded before evaluation"
    )
    md5_check: bool = False

    @field_validator("expr_context", mode="before")
    @classmethod
    def _normalize_context(cls, raw: Any) -> Any:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            return raw
        # Accept both a bare mapping and the {"variables": {...}} wrapper
        variables = raw["variables"] if isinstance(raw.get("variables"), dict) else raw
        return {name: _untag(name, value) for name, value in variables.items()}

    def size_in_range(self, size: int) -> bool:
        """Half-open size window [min_file_size, max_file_size)."""
        return self.min_file_size <= size < self.max_file_size

    def seed_context(self) -> EvalContext:
        """A fresh copy of the pre-seeded expression context."""
        return EvalContext(variables=dict(self.expr_context))


class GlobalFileScanRule(BaseModel):
    """The complete rule set document."""

    model_config = ConfigDict(frozen=True)

    config_version: str = ""
    file_scan_rules: tuple[FileScanRule, ...] = ()
    file_digital_dictionary: dict[int, DictionaryEntry] = Field(default_factory=dict)


class GlobalFileScanFormat(BaseModel):
    """Mapping from a scanner format string to the type codes it counts as."""

    model_config = ConfigDict(frozen=True)

    format: dict[str, frozenset[int]] = Field(default_factory=dict)

    def types_for(self, format_key: str) -> frozenset[int]:
        return self.format.get(format_key, frozenset())
