"""Tests for the proportional allocation engine."""

import pytest

from models import BudgetCategory
from services.allocation import (
    PRESETS,
    apply_preset,
    can_commit,
    describe,
    display,
    find_preset,
    initialize,
    is_valid,
    project,
    redistribute,
    total,
)

BASE = {"necesidades": 50.0, "gustos": 30.0, "ahorro": 20.0}


@pytest.fixture
def tied_categories():
    """Two categories share an order; name breaks the tie."""
    return [
        BudgetCategory(id="vivienda", name="Vivienda", order=1, default_percentage=40),
        BudgetCategory(id="ahorro", name="Ahorro", order=2, default_percentage=20),
        BudgetCategory(id="comida", name="Comida", order=1, default_percentage=40),
    ]


class TestInitialize:
    def test_uses_defaults_when_nothing_saved(self, categories):
        assert initialize(categories, {}) == BASE

    def test_saved_percentage_overrides_default(self, categories):
        result = initialize(categories, {"gustos": 25, "ahorro": 25})
        assert result == {"necesidades": 50.0, "gustos": 25.0, "ahorro": 25.0}

    def test_saved_zero_is_kept(self, categories):
        result = initialize(categories, {"ahorro": 0})
        assert result["ahorro"] == 0.0

    def test_display_order_follows_category_order(self, categories):
        result = initialize(list(reversed(categories)), {})
        assert list(result) == ["necesidades", "gustos", "ahorro"]

    def test_same_order_sorts_by_name(self, tied_categories):
        result = initialize(tied_categories, {})
        assert list(result) == ["comida", "vivienda", "ahorro"]


class TestValidity:
    def test_total(self):
        assert total(BASE) == 100

    def test_exact_hundred_is_valid(self):
        assert is_valid(BASE)
        assert can_commit(BASE)

    def test_within_tolerance(self):
        assert can_commit({"a": 33.333, "b": 33.333, "c": 33.333})
        assert can_commit({"a": 50.005, "b": 50})

    def test_ninety_nine_blocks_commit(self):
        assert not can_commit({"necesidades": 50, "gustos": 30, "ahorro": 19})

    def test_over_hundred_blocks_commit(self):
        assert not can_commit({"a": 60, "b": 50})


class TestRedistribute:
    def test_preserves_ratio_of_untouched_categories(self):
        result = redistribute(BASE, "necesidades", 70)
        assert result["necesidades"] == 70
        assert result["gustos"] == pytest.approx(18)
        assert result["ahorro"] == pytest.approx(12)
        assert total(result) == pytest.approx(100)

    def test_does_not_mutate_input(self):
        before = dict(BASE)
        redistribute(BASE, "gustos", 10)
        assert BASE == before

    @pytest.mark.parametrize("value", [0, 1, 12.5, 33, 50, 77.7, 99, 99.99])
    @pytest.mark.parametrize("changed", ["necesidades", "gustos", "ahorro"])
    def test_total_stays_at_hundred(self, changed, value):
        result = redistribute(BASE, changed, value)
        assert can_commit(result)

    def test_total_stays_valid_across_many_drags(self):
        allocation = dict(BASE)
        for cid, value in [("gustos", 41), ("ahorro", 7.3), ("necesidades", 63.2), ("gustos", 12)] * 10:
            allocation = redistribute(allocation, cid, value)
        assert can_commit(allocation)

    @pytest.mark.parametrize("value", [0, 10, 45.5, 90])
    def test_ratio_between_others_unchanged(self, value):
        start = {"a": 40.0, "b": 35.0, "c": 15.0, "d": 10.0}
        result = redistribute(start, "a", value)
        assert result["b"] / result["c"] == pytest.approx(35 / 15)
        assert result["c"] / result["d"] == pytest.approx(15 / 10)

    def test_dragging_to_zero_with_others_summing_to_hundred(self):
        result = redistribute({"a": 0.0, "b": 30.0, "c": 70.0}, "a", 0)
        assert result == {"a": 0.0, "b": 30.0, "c": 70.0}

    def test_degenerate_all_others_zero(self):
        result = redistribute({"a": 100.0, "b": 0.0, "c": 0.0}, "a", 100)
        assert result == {"a": 100.0, "b": 0.0, "c": 0.0}

    def test_degenerate_others_zero_forces_changed_to_hundred(self):
        # Moving the only non-zero slider down cannot free room for siblings
        result = redistribute({"a": 100.0, "b": 0.0, "c": 0.0}, "a", 40)
        assert result == {"a": 100.0, "b": 0.0, "c": 0.0}

    def test_full_slider_zeroes_the_rest(self):
        result = redistribute(BASE, "ahorro", 100)
        assert result == {"necesidades": 0.0, "gustos": 0.0, "ahorro": 100.0}

    def test_clamps_above_range(self):
        result = redistribute(BASE, "gustos", 140)
        assert result == {"necesidades": 0.0, "gustos": 100.0, "ahorro": 0.0}

    def test_clamps_below_range(self):
        result = redistribute(BASE, "gustos", -20)
        assert result["gustos"] == 0
        assert result["necesidades"] == pytest.approx(100 * 50 / 70)
        assert result["ahorro"] == pytest.approx(100 * 20 / 70)

    def test_restores_hundred_from_invalid_start(self):
        result = redistribute({"a": 50.0, "b": 30.0, "c": 19.0}, "a", 50)
        assert can_commit(result)
        assert result["b"] / result["c"] == pytest.approx(30 / 19)


class TestPresets:
    def test_apply_preset_overwrites_prior_state(self, categories):
        assert apply_preset(categories, [60, 20, 20]) == {
            "necesidades": 60.0,
            "gustos": 20.0,
            "ahorro": 20.0,
        }

    def test_apply_preset_is_idempotent(self, categories):
        once = apply_preset(categories, [70, 20, 10])
        twice = apply_preset(categories, [70, 20, 10])
        assert once == twice

    def test_short_preset_fills_with_zero(self, categories):
        assert apply_preset(categories, [100]) == {
            "necesidades": 100.0,
            "gustos": 0.0,
            "ahorro": 0.0,
        }

    def test_preset_is_not_validated(self, categories):
        result = apply_preset(categories, [10, 10, 10])
        assert not can_commit(result)

    def test_preset_follows_name_tie_break(self, tied_categories):
        assert apply_preset(tied_categories, [50, 30, 20]) == {
            "comida": 50.0,
            "vivienda": 30.0,
            "ahorro": 20.0,
        }

    def test_builtin_presets_sum_to_hundred(self):
        for preset in PRESETS:
            assert sum(preset["values"]) == 100

    def test_find_preset(self):
        assert find_preset("60 · 20 · 20") == [60, 20, 20]
        assert find_preset("nope") is None


class TestProjection:
    def test_projects_available_income(self):
        amounts = project(BASE, 10000)
        assert amounts == {"necesidades": 5000, "gustos": 3000, "ahorro": 2000}

    def test_no_rounding(self):
        amounts = project({"a": 33.3333, "b": 66.6667}, 1000)
        assert amounts["a"] == pytest.approx(333.333)

    def test_display_rounds_labels_only(self):
        allocation = {"a": 33.6, "b": 66.4}
        assert display(allocation) == {"a": 34, "b": 66}
        assert allocation["a"] == 33.6

    def test_describe_payload(self):
        payload = describe(BASE, 10000)
        assert payload["is_valid"] is True
        assert payload["total"] == 100
        assert payload["amounts"]["gustos"] == 3000

    def test_describe_without_income_has_no_amounts(self):
        assert "amounts" not in describe(BASE)
