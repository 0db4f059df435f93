"""Tests for secret inventory comparison"""
import pytest

from kv_compare.diff.comparator import SecretComparator, compare_inventories
from kv_compare.diff.models import ComparisonSummary, VerdictType
from kv_compare.inventory.models import Inventory, SecretValue


def _inv(label, values):
    return Inventory.from_values(label, values)


INVENTORY_PAIRS = [
    ({"a": "1", "b": "2"}, {"a": "1", "c": "3"}),
    ({"a": "1"}, {"a": "2"}),
    ({}, {}),
    ({"a": "1", "b": ""}, {}),
    ({"x": SecretValue.unresolved()}, {"x": SecretValue.unresolved(), "y": "v"}),
    ({"k1": "v", "k2": SecretValue.unresolved(), "k3": ""}, {"k1": "v", "k2": "v2", "k3": "", "k4": "z"}),
]


class TestScenarios:
    """Reference scenarios"""

    def test_scenario_a_one_sided_secrets(self):
        result = compare_inventories(_inv("S", {"a": "1", "b": "2"}), _inv("T", {"a": "1", "c": "3"}))
        s = result.summary
        assert (s.matching, s.differing, s.source_only, s.target_only, s.total) == (1, 0, 1, 1, 3)
        assert result.verdict_for("b") is VerdictType.SOURCE_ONLY
        assert result.verdict_for("c") is VerdictType.TARGET_ONLY
        assert s.match_rate_percent == pytest.approx(33.3, abs=0.05)

    def test_scenario_b_different_value(self):
        result = compare_inventories(_inv("S", {"a": "1"}), _inv("T", {"a": "2"}))
        s = result.summary
        assert (s.matching, s.differing, s.total) == (0, 1, 1)
        diff = result.diffs["a"]
        assert diff.verdict is VerdictType.DIFFER
        assert diff.source_value.value == "1"
        assert diff.target_value.value == "2"
        assert s.match_rate == 0.0

    def test_scenario_c_empty_stores(self):
        result = compare_inventories(_inv("S", {}), _inv("T", {}))
        assert result.summary.total == 0
        assert result.summary.match_rate == 0.0
        assert not result.has_differences


class TestClassification:
    """Per-name classification rules"""

    def test_unresolved_vs_resolved_differs(self):
        result = compare_inventories(_inv("S", {"a": SecretValue.unresolved()}), _inv("T", {"a": "1"}))
        assert result.verdict_for("a") is VerdictType.DIFFER

    def test_unresolved_on_both_sides_matches(self):
        result = compare_inventories(
            _inv("S", {"a": SecretValue.unresolved("timeout")}),
            _inv("T", {"a": SecretValue.unresolved("forbidden")}),
        )
        assert result.verdict_for("a") is VerdictType.MATCH

    def test_unresolved_is_not_absent(self):
        """A failed read on one side is never reported as a one-sided secret"""
        result = compare_inventories(_inv("S", {"a": "1"}), _inv("T", {"a": SecretValue.unresolved()}))
        assert result.verdict_for("a") is VerdictType.DIFFER
        assert result.summary.source_only == 0

    def test_empty_string_differs_from_unresolved(self):
        result = compare_inventories(_inv("S", {"a": ""}), _inv("T", {"a": SecretValue.unresolved()}))
        assert result.verdict_for("a") is VerdictType.DIFFER

    def test_comparison_uses_full_values_beyond_display_limit(self):
        """Two long values that only differ at the end must not match"""
        long_a = "x" * 400 + "a"
        long_b = "x" * 400 + "b"
        result = compare_inventories(_inv("S", {"k": long_a}), _inv("T", {"k": long_b}))
        assert result.verdict_for("k") is VerdictType.DIFFER

    def test_absent_side_is_none(self):
        result = compare_inventories(_inv("S", {"a": "1"}), _inv("T", {}))
        assert result.diffs["a"].target_value is None

    def test_unknown_name_has_no_verdict(self):
        result = compare_inventories(_inv("S", {"a": "1"}), _inv("T", {"a": "1"}))
        assert result.verdict_for("zzz") is None

    def test_unresolved_counts_in_summary(self, dev_inventory, stage_inventory):
        result = SecretComparator().compare(dev_inventory, stage_inventory, "dev", "stage")
        assert result.summary.source_unresolved == 0
        assert result.summary.target_unresolved == 1
        assert result.target_warning == "1 of 4 secrets could not be retrieved"
        assert result.source_warning is None


class TestProperties:
    """Invariants that hold for any pair of inventories"""

    @pytest.mark.parametrize("source_values,target_values", INVENTORY_PAIRS)
    def test_counts_cover_the_name_union(self, source_values, target_values):
        result = compare_inventories(_inv("S", source_values), _inv("T", target_values))
        s = result.summary
        union = set(source_values) | set(target_values)
        assert s.matching + s.differing + s.source_only + s.target_only == s.total == len(union)
        assert set(result.diffs) == union

    @pytest.mark.parametrize("source_values,target_values", INVENTORY_PAIRS)
    def test_symmetry(self, source_values, target_values):
        forward = compare_inventories(_inv("S", source_values), _inv("T", target_values)).summary
        backward = compare_inventories(_inv("T", target_values), _inv("S", source_values)).summary
        assert forward.source_only == backward.target_only
        assert forward.target_only == backward.source_only
        assert forward.matching == backward.matching
        assert forward.differing == backward.differing

    @pytest.mark.parametrize("values", [pair[0] for pair in INVENTORY_PAIRS])
    def test_idempotence(self, values):
        inventory = _inv("S", values)
        s = compare_inventories(inventory, inventory).summary
        assert s.matching == len(values)
        assert s.differing == s.source_only == s.target_only == 0

    def test_compare_does_not_mutate_inputs(self, dev_inventory, stage_inventory):
        before = (dict(dev_inventory.secrets), dict(stage_inventory.secrets))
        compare_inventories(dev_inventory, stage_inventory)
        assert (dict(dev_inventory.secrets), dict(stage_inventory.secrets)) == before

    def test_diffs_sorted_by_name(self):
        result = compare_inventories(_inv("S", {"b": "1", "a": "1"}), _inv("T", {"c": "1"}))
        assert list(result.diffs) == ["a", "b", "c"]


class TestComparisonResult:
    """Result helpers"""

    def test_differences_excludes_matches(self, dev_inventory, stage_inventory):
        result = compare_inventories(dev_inventory, stage_inventory)
        names = [d.name for d in result.differences]
        assert names == ["db-password", "dev-only", "feature-flag", "stage-only"]
        assert [d.name for d in result.diffs_by_verdict(VerdictType.MATCH)] == ["api-key"]

    def test_labels_and_metadata(self, dev_inventory, stage_inventory):
        result = compare_inventories(dev_inventory, stage_inventory, "Dev", "Stage")
        assert (result.source_label, result.target_label) == ("Dev", "Stage")
        assert result.generated_at
        assert result.tool_version

    def test_diffs_are_read_only(self, dev_inventory, stage_inventory):
        result = compare_inventories(dev_inventory, stage_inventory)
        with pytest.raises(TypeError):
            result.diffs["new"] = None


class TestComparisonSummary:
    """Summary statistics"""

    def test_natural_language_summary(self):
        summary = ComparisonSummary(total=5, matching=2, differing=1, source_only=2, target_only=0)
        assert summary.natural_language_summary == (
            "2 of 5 secrets match; 1 with different values, 2 only in source"
        )

    def test_natural_language_summary_all_match(self):
        assert ComparisonSummary(total=3, matching=3).natural_language_summary == "All 3 secrets match"

    def test_to_dict_includes_match_rate(self):
        data = ComparisonSummary(total=4, matching=1, differing=3).to_dict()
        assert data["match_rate"] == pytest.approx(0.25)
        assert data["differing"] == 3
