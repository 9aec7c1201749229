"""
Context & Threshold Accumulator - turns finding items into expression variables.

Each item binds `<location><id> = length`. Items whose id appears in the
digital dictionary also feed a running total under `<location><target_id>`;
once that total reaches the entry's threshold the key is bound to 1 and
stops accumulating for the rest of the finding.

The first contribution to a key only seeds the running total and is not
compared against the threshold. Existing rule sets depend on this, so a
single heavy item never fires a bucket on its own.
"""

from __future__ import annotations

from collections.abc import Iterable

from fsmatcher.core.expression import EvalContext
from fsmatcher.errors import ExpectedBooleanError
from fsmatcher.models.rule_models import DictionaryEntry
from fsmatcher.models.scan_models import FindingItem

CVT_BOOL_TO_INT = "cvtBoolToInt"


def cvt_bool_to_int(argument: object) -> int:
    """Map True/False to 1/0; anything else is a type error."""
    if not isinstance(argument, bool):
        raise ExpectedBooleanError(argument)
    return 1 if argument else 0


class ThresholdAccumulator:
    """Running dictionary totals for a single finding."""

    def __init__(self, dictionary: dict[int, DictionaryEntry]) -> None:
        self.dictionary = dictionary
        self.totals: dict[str, int] = {}
        self.fired: set[str] = set()

    def feed(self, item: FindingItem) -> str | None:
        """
        Account for one item.

        Returns the mapped key if this item pushed it over its threshold,
        otherwise None.
        """
        entry = self.dictionary.get(item.id)
        if entry is None:
            return None

        mapped_key = f"{item.location}{entry.target_id}"
        if mapped_key in self.fired:
            return None

        current = self.totals.get(mapped_key)
        if current is None:
            self.totals[mapped_key] = entry.value
            return None

        new_total = current + entry.value
        if new_total >= entry.target_threshold:
            self.fired.add(mapped_key)
            return mapped_key

        self.totals[mapped_key] = new_total
        return None


def enrich_context(
    context: EvalContext,
    items: Iterable[FindingItem],
    dictionary: dict[int, DictionaryEntry],
) -> EvalContext:
    """
    Bind every item and every fired dictionary bucket into `context`.

    `context` is mutated and returned; callers pass a copy of the rule's
    seeded context so nothing leaks between rules or findings.
    """
    accumulator = ThresholdAccumulator(dictionary)

    for item in items:
        fired_key = accumulator.feed(item)
        if fired_key is not None:
            context.set_value(fired_key, 1)
        context.set_value(f"{item.location}{item.id}", int(item.length))

    context.set_function(CVT_BOOL_TO_INT, cvt_bool_to_int)
    return context
