"""
Tests for the Context & Threshold Accumulator.
"""

import pytest

from fsmatcher.core.context_builder import (
    CVT_BOOL_TO_INT,
    ThresholdAccumulator,
    cvt_bool_to_int,
    enrich_context,
)
from fsmatcher.core.expression import EvalContext
from fsmatcher.errors import ExpectedBooleanError
from fsmatcher.models.rule_models import DictionaryEntry
from fsmatcher.models.scan_models import FindingItem


def _items(*specs):
    return [FindingItem(id=i, length=length, location=loc) for i, length, loc in specs]


@pytest.fixture
def dictionary():
    return {7: DictionaryEntry(target_id=5, target_threshold=10, value=6)}


def test_item_variables_always_bound():
    context = enrich_context(EvalContext(), _items((1, 3, "body"), (2, 8, "title")), {})
    assert context.variables == {"body1": 3, "title2": 8}


def test_threshold_fires_on_second_contribution(dictionary):
    accumulator = ThresholdAccumulator(dictionary)
    first, second = _items((7, 1, "body"), (7, 1, "body"))

    assert accumulator.feed(first) is None
    assert accumulator.totals["body5"] == 6
    assert accumulator.feed(second) == "body5"
    assert "body5" in accumulator.fired


def test_fired_key_is_not_rebound_or_reaccumulated(dictionary):
    accumulator = ThresholdAccumulator(dictionary)
    items = _items((7, 1, "body"), (7, 1, "body"), (7, 1, "body"))

    results = [accumulator.feed(item) for item in items]

    assert results == [None, "body5", None]
    # running total stays at the seed; the fired key no longer accumulates
    assert accumulator.totals["body5"] == 6


def test_enrich_binds_fired_key(dictionary):
    context = enrich_context(EvalContext(), _items((7, 3, "body"), (7, 3, "body")), dictionary)
    assert context.variables["body5"] == 1
    assert context.variables["body7"] == 3


def test_below_threshold_does_not_bind(dictionary):
    context = enrich_context(EvalContext(), _items((7, 3, "body")), dictionary)
    assert "body5" not in context.variables


def test_locations_accumulate_separately(dictionary):
    context = enrich_context(EvalContext(), _items((7, 1, "body"), (7, 1, "header")), dictionary)
    assert "body5" not in context.variables
    assert "header5" not in context.variables


def test_heavy_seed_alone_never_fires():
    # The first contribution only seeds the total, even when it alone meets the threshold
    dictionary = {1: DictionaryEntry(target_id=9, target_threshold=10, value=50)}
    context = enrich_context(EvalContext(), _items((1, 1, "body")), dictionary)
    assert "body9" not in context.variables


def test_heavy_item_first_then_light_item_fires():
    dictionary = {
        1: DictionaryEntry(target_id=9, target_threshold=100, value=12),
        2: DictionaryEntry(target_id=9, target_threshold=10, value=1),
    }
    context = enrich_context(EvalContext(), _items((1, 1, "body"), (2, 1, "body")), dictionary)
    assert context.variables["body9"] == 1


def test_light_item_first_then_heavy_item_does_not_fire():
    # Same items in reverse order: the second item's own threshold decides
    dictionary = {
        1: DictionaryEntry(target_id=9, target_threshold=100, value=12),
        2: DictionaryEntry(target_id=9, target_threshold=10, value=1),
    }
    context = enrich_context(EvalContext(), _items((2, 1, "body"), (1, 1, "body")), dictionary)
    assert "body9" not in context.variables


def test_fired_set_is_order_independent_for_light_items(dictionary):
    forward = enrich_context(
        EvalContext(), _items((7, 1, "body"), (3, 2, "body"), (7, 1, "body")), dictionary
    )
    backward = enrich_context(
        EvalContext(), _items((7, 1, "body"), (7, 1, "body"), (3, 2, "body")), dictionary
    )
    assert forward.variables == backward.variables


def test_item_binding_overrides_fired_key_on_collision():
    # An item whose own key equals the bucket key is bound after the bucket
    dictionary = {5: DictionaryEntry(target_id=5, target_threshold=2, value=1)}
    context = enrich_context(EvalContext(), _items((5, 40, "body"), (5, 40, "body")), dictionary)
    assert context.variables["body5"] == 40


def test_seeded_variables_are_kept():
    context = enrich_context(EvalContext(variables={"limit": 3}), _items((1, 2, "body")), {})
    assert context.variables["limit"] == 3
    assert context.variables["body1"] == 2


def test_cvt_bool_to_int_registered():
    context = enrich_context(EvalContext(), [], {})
    assert context.functions[CVT_BOOL_TO_INT] is cvt_bool_to_int


def test_cvt_bool_to_int_values():
    assert cvt_bool_to_int(True) == 1
    assert cvt_bool_to_int(False) == 0


@pytest.mark.parametrize("value", [1, 0, "true", None, 1.0])
def test_cvt_bool_to_int_rejects_non_boolean(value):
    with pytest.raises(ExpectedBooleanError):
        cvt_bool_to_int(value)
