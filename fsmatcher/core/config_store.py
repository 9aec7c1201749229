"""
Rule Configuration Store - process-wide holder of the active rule set.

The store keeps one immutable MatcherConfig snapshot. Installing a
snapshot takes a lock; readers grab the current reference and work on it
without locking, so evaluations already in flight keep the snapshot they
started with.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from fsmatcher.errors import NotInitializedError
from fsmatcher.models.rule_models import GlobalFileScanFormat, GlobalFileScanRule

logger = logging.getLogger("fsmatcher.init")


@dataclass(frozen=True)
class MatcherConfig:
    """Rule set plus format map, read-only once built."""

    file_scan_rule: GlobalFileScanRule
    file_scan_format: GlobalFileScanFormat

    @property
    def config_version(self) -> str:
        return self.file_scan_rule.config_version


class ConfigStore:
    """One-time-write, many-reader configuration holder."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._config: MatcherConfig | None = None

    def initialize(
        self,
        file_scan_rule: GlobalFileScanRule,
        file_scan_format: GlobalFileScanFormat,
    ) -> MatcherConfig:
        config = MatcherConfig(file_scan_rule=file_scan_rule, file_scan_format=file_scan_format)
        with self._lock:
            if self._config is not None:
                logger.warning(
                    f"[Init] replacing configuration {self._config.config_version!r} "
                    f"with {config.config_version!r}"
                )
            self._config = config
        return config

    @property
    def initialized(self) -> bool:
        return self._config is not None

    def get(self) -> MatcherConfig:
        """Current snapshot; raises NotInitializedError before initialize()."""
        config = self._config
        if config is None:
            raise NotInitializedError()
        return config


# Process-wide store used by the facade and the bridge
global_store = ConfigStore()
