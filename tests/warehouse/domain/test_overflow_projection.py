"""Tests for the pure bundle projection used by the overflow checks."""

from types import SimpleNamespace

from warehouse.grosir.overflow import describe_overflow, project_bundle


def _tolerance(current_excess, max_excess_units):
    return SimpleNamespace(current_excess=current_excess, max_excess_units=max_excess_units)


class TestProjectBundle:
    def test_sibling_over_maximum_overflows(self):
        projections = project_bundle(
            {"S": 4, "M": 4, "L": 4},
            {"S": _tolerance(8, 8), "M": _tolerance(0, 8), "L": _tolerance(8, 8)},
        )
        overflowing = [p["size"] for p in projections if p["overflows"]]
        assert overflowing == ["S", "L"]

    def test_landing_exactly_on_maximum_is_allowed(self):
        [projection] = project_bundle({"S": 4}, {"S": _tolerance(4, 8)})
        assert projection["after_bundle"] == 8
        assert projection["overflows"] is False

    def test_sizes_without_tolerance_are_skipped(self):
        projections = project_bundle({"S": 4, "XL": 2}, {"S": _tolerance(0, 8)})
        assert [p["size"] for p in projections] == ["S"]

    def test_missing_excess_counts_as_zero(self):
        [projection] = project_bundle({"S": 4}, {"S": _tolerance(None, 8)})
        assert projection["current_excess"] == 0


class TestDescribeOverflow:
    def test_format(self):
        [projection] = project_bundle({"S": 4}, {"S": _tolerance(8, 8)})
        assert describe_overflow(projection) == "S (8 + 4 = 12 > 8)"
