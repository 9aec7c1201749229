"""
Sensitive File Report Models - the record emitted when a file matches.

Field names follow the downstream reporting contract; Python attribute
names are kept descriptive and mapped through serialization aliases.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MatchedRule(BaseModel):
    """Identity of a rule that fired: (id, code, level)."""

    model_config = ConfigDict(frozen=True)

    id: int
    code: str
    level: int = Field(default=0, exclude=True)

    def sort_key(self) -> tuple[int, str, int]:
        return (self.id, self.code, self.level)


class SensitiveFileInfo(BaseModel):
    """Identity and filesystem metadata of a matched file."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., serialization_alias="name")
    file_type: str = Field(..., serialization_alias="type")
    file_size: int = Field(..., serialization_alias="size")
    file_path: str = Field(..., serialization_alias="path")
    file_sha256: str = Field(..., serialization_alias="sha256_hash")
    file_md5: str = Field(..., serialization_alias="md5_hash")
    create_time: int = 0
    update_time: int = 0
    access_time: int = Field(default=0, serialization_alias="visit_time")
    desc: str = Field(default="", exclude=True)


class SensitiveFileRecord(BaseModel):
    """Top-level match output for one file."""

    file_info: SensitiveFileInfo = Field(..., serialization_alias="file")
    file_securities: list[MatchedRule] = Field(default_factory=list)
    engine_result: str = Field(..., description="Raw scanner payload, verbatim")
    file_url: str = ""
    found_time: int = Field(..., description="Discovery time, Unix seconds")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
