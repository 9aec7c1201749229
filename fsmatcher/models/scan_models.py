"""
Scan Result Models - the content scanner's raw findings for one file.

A primary finding may carry one level of sub-findings (archive members,
embedded objects). Both share a single type; nesting stops at one level
because RawScanResult is the only model with a sub-finding field.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from fsmatcher.core.expression import EvalContext
    from fsmatcher.models.rule_models import DictionaryEntry


class FindingItem(BaseModel):
    """One hit reported by the scanner."""

    id: int = Field(..., description="Dictionary lookup id")
    length: int = Field(default=0, description="Hit length / weight")
    location: str = Field(..., description="Where in the file the hit was found")


class ScanFinding(BaseModel):
    """A scanner finding for a file or for one logical part of it."""

    model_config = ConfigDict(populate_by_name=True)

    category_id: int = Field(..., alias="categoryId")
    desc: str = ""
    format: str
    data: list[FindingItem]
    encrypted: int = 0
    hidden: int = 0

    @property
    def dlp_type(self) -> int:
        return self.category_id

    @property
    def is_encrypted(self) -> bool:
        return self.encrypted != 0

    @property
    def is_hidden(self) -> bool:
        return self.hidden != 0

    def build_context(
        self,
        context: EvalContext,
        dictionary: dict[int, DictionaryEntry],
    ) -> EvalContext:
        """Enrich a rule's expression context with this finding's signals."""
        from fsmatcher.core.context_builder import enrich_context

        return enrich_context(context, self.data, dictionary)


class RawScanResult(ScanFinding):
    """Top-level scanner payload, optionally carrying sub-findings."""

    sub_data: list[ScanFinding] | None = Field(default=None, alias="subFileData")

    def findings(self) -> list[ScanFinding]:
        """The primary finding followed by every sub-finding, in order."""
        return [self, *(self.sub_data or [])]
