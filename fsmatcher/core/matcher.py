"""
Rule Matching Engine - decides which rules fire for a scanned file.

For the primary finding and then each sub-finding, every rule runs
through a fixed filter pipeline, stopping at the first failed check:

    1. encryption flag       (rule requires an encrypted finding)
    2. hidden/suffix flag    (rule requires a hidden finding)
    3. type filter           (dlp type or format-mapped types)
    4. size filter           ([min_file_size, max_file_size), empty files never match)
    5. expression            (optional; must evaluate to boolean True)

Hits are collected per finding and merged into one set keyed by
(id, code, level), so a rule firing in several findings is reported once.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from fsmatcher.core.config_store import ConfigStore, MatcherConfig, global_store
from fsmatcher.core.expression import ExpressionEngine, is_true
from fsmatcher.core.file_identity import FileIdentityResolver, logical_size, md5_file
from fsmatcher.errors import (
    ExpressionBuildError,
    ExpressionEvalError,
    FileAccessError,
    NotInitializedError,
)
from fsmatcher.models.report_models import MatchedRule, SensitiveFileRecord
from fsmatcher.models.rule_models import FileScanRule
from fsmatcher.models.scan_models import RawScanResult, ScanFinding

logger = logging.getLogger("fsmatcher.matcher")


class _FileFacts:
    """Per-call file properties, read lazily and at most once."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.size = logical_size(path)
        self._md5: str | None = None

    @property
    def md5(self) -> str:
        if self._md5 is None:
            try:
                self._md5 = md5_file(self.path)
            except OSError as e:
                logger.warning(f"[SecurityCheck] md5 unavailable for {self.path}: {e}")
                self._md5 = ""
        return self._md5


class FsMatcher:
    """Evaluates scanner findings against one configuration snapshot."""

    def __init__(
        self,
        config: MatcherConfig,
        expression_engine: ExpressionEngine | None = None,
        resolver: FileIdentityResolver | None = None,
    ) -> None:
        self.config = config
        self.expression_engine = expression_engine or ExpressionEngine()
        self.resolver = resolver or FileIdentityResolver()

    def check_file(
        self,
        raw_result_string: str,
        matcher_file: str | os.PathLike[str],
    ) -> SensitiveFileRecord | None:
        """
        Full security check for one file.

        Returns None when the payload does not parse, the primary finding
        has no items, no rule fires, or the matched file cannot be read.
        """
        path = Path(matcher_file)
        logger.info(f"[SecurityCheck] check file: {path}")

        try:
            raw_result = RawScanResult.model_validate_json(raw_result_string)
        except ValidationError as e:
            logger.warning(f"[SecurityCheck] Failed to parse raw scan result: {e}")
            return None

        if not raw_result.data:
            return None

        hit_rules = self.evaluate(raw_result, path)
        if not hit_rules:
            return None

        try:
            return self.resolver.resolve(
                path,
                raw_result.desc,
                raw_result_string,
                raw_result.format,
                list(hit_rules),
            )
        except FileAccessError as e:
            logger.error(f"[SecurityCheck] Failed to update file info: {e}")
            return None

    def evaluate(self, raw_result: RawScanResult, matcher_file: Path) -> set[MatchedRule]:
        """Matched rules across the primary finding and all sub-findings."""
        facts = _FileFacts(matcher_file)
        hit_rules: set[MatchedRule] = set()
        for finding in raw_result.findings():
            hit_rules |= self.match_finding(finding, facts)
        return hit_rules

    def match_finding(self, finding: ScanFinding, facts: _FileFacts) -> set[MatchedRule]:
        """Matched rules for a single finding, with its own accumulator state."""
        match_types = self.config.file_scan_format.types_for(finding.format)
        hits: set[MatchedRule] = set()

        for rule in self.config.file_scan_rule.file_scan_rules:
            if not self._passes_filters(rule, finding, match_types, facts.size):
                continue
            if rule.expr and not self._expression_holds(rule, finding, facts):
                continue
            hits.add(MatchedRule(id=rule.id, code=rule.code, level=rule.level))

        return hits

    @staticmethod
    def _passes_filters(
        rule: FileScanRule,
        finding: ScanFinding,
        match_types: frozenset[int],
        file_size: int,
    ) -> bool:
        if rule.check_file_encrypted and not finding.is_encrypted:
            return False

        if rule.check_file_suffix and not finding.is_hidden:
            return False

        if (
            rule.file_types
            and finding.dlp_type not in rule.file_types
            and rule.file_types.isdisjoint(match_types)
        ):
            return False

        if file_size == 0 or not rule.size_in_range(file_size):
            return False

        return True

    def _expression_holds(
        self,
        rule: FileScanRule,
        finding: ScanFinding,
        facts: _FileFacts,
    ) -> bool:
        try:
            expression = self.expression_engine.build(rule.expr)
        except ExpressionBuildError as e:
            logger.warning(
                f"[Security ID:{rule.id}] Failed to build expression on data: {rule.expr} ({e})"
            )
            return False

        dictionary = self.config.file_scan_rule.file_digital_dictionary
        context = finding.build_context(rule.seed_context(), dictionary)
        if rule.md5_check:
            context.set_value("md5", facts.md5)

        try:
            result = expression.evaluate(context)
        except ExpressionEvalError as e:
            logger.warning(
                f"[Security ID:{rule.id}] Failed to evaluate expression on data: "
                f"{rule.expr}, context: {context.variables} ({e})"
            )
            return False

        return is_true(result)


def file_security_check(
    raw_result_string: str,
    matcher_file: str | os.PathLike[str],
    store: ConfigStore = global_store,
) -> SensitiveFileRecord | None:
    """Run check_file against the store's current configuration."""
    try:
        config = store.get()
    except NotInitializedError:
        logger.error("[SecurityCheck] matcher config not initialized!")
        return None
    return FsMatcher(config).check_file(raw_result_string, matcher_file)
