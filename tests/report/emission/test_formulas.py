"""
Unit Tests for Formula Expressions

Each expression is checked for both its rendered text and its value.
"""

import pytest

from attainment_toolkit.report.aggregation import BandingPolicy
from attainment_toolkit.report.emission import (
    Average,
    CellRange,
    CountAtLeast,
    Number,
    Ref,
    Sum,
    banding_formula,
    class_percent,
    guarded_percent,
    row_sum,
)


def resolver(values):
    """Resolver over {(column, row): value}; blanks read as 0."""
    return lambda column, row: values.get((column, row), 0.0)


class TestRanges:
    """Tests for references and ranges."""

    def test_render_when_single_column_span_then_a1_range(self):
        assert CellRange.column_span(4, 14, 20).render() == "D14:D20"

    def test_render_when_single_cell_range_then_single_address(self):
        assert CellRange(4, 5, 4, 5).render() == "D5"

    def test_is_empty_when_last_row_before_first_then_true(self):
        assert CellRange.column_span(4, 4, 3).is_empty


class TestRowSum:
    """Tests for row_sum()."""

    def test_row_sum_when_contiguous_then_single_range(self):
        expr = row_sum((4, 5, 6), 4)
        assert expr.render() == "SUM(D4:F4)"
        assert expr.evaluate(resolver({(4, 4): 8, (5, 4): 6, (6, 4): 16})) == 30

    def test_row_sum_when_gap_then_comma_list(self):
        assert row_sum((4, 6, 7), 5).render() == "SUM(D5,F5:G5)"

    def test_row_sum_when_single_column_then_reference(self):
        assert row_sum((10,), 4).render() == "SUM(J4)"

    def test_row_sum_when_no_columns_then_literal_zero(self):
        expr = row_sum((), 4)
        assert expr.render() == "0"
        assert expr.evaluate(resolver({})) == 0

    def test_sum_when_empty_range_operand_then_ignored(self):
        expr = Sum((CellRange.column_span(4, 5, 4), Ref(5, 5)))
        assert expr.render() == "SUM(E5)"


class TestAggregates:
    """Tests for Average and CountAtLeast."""

    def test_average_when_values_then_iferror_wrapped(self):
        expr = Average(CellRange.column_span(4, 4, 5))
        assert expr.render() == "IFERROR(AVERAGE(D4:D5),0)"
        assert expr.evaluate(resolver({(4, 4): 8, (4, 5): 5})) == 6.5

    def test_average_when_empty_range_then_zero(self):
        expr = Average(CellRange.column_span(4, 4, 3))
        assert expr.render() == "0"
        assert expr.evaluate(resolver({})) == 0.0

    def test_count_when_threshold_then_inclusive(self):
        expr = CountAtLeast(CellRange.column_span(9, 4, 6), 65)
        assert expr.render() == 'COUNTIF(I4:I6,">=65")'
        assert expr.evaluate(resolver({(9, 4): 65.0, (9, 5): 64.99, (9, 6): 90})) == 2

    def test_count_when_fractional_threshold_then_rendered_exactly(self):
        """The rendered threshold reads back as the threshold that was evaluated."""
        expr = CountAtLeast(CellRange.column_span(8, 4, 4), 65.000001)
        rendered = expr.render()
        assert rendered == 'COUNTIF(H4,">=65.000001")'
        threshold = rendered.split(">=")[1].rstrip('")')
        assert float(threshold) == 65.000001
        assert expr.evaluate(resolver({(8, 4): 65.0})) == 0


class TestGuardedFormulas:
    """Tests for percent, class percent and banding formulas."""

    def test_guarded_percent_when_attempted_zero_then_zero(self):
        expr = guarded_percent(Ref(7, 4), Ref(8, 4))
        assert expr.render() == "IF(H4=0,0,G4/H4*100)"
        assert expr.evaluate(resolver({(7, 4): 0, (8, 4): 0})) == 0

    def test_guarded_percent_when_attempted_positive_then_percentage(self):
        expr = guarded_percent(Ref(7, 4), Ref(8, 4))
        assert expr.evaluate(resolver({(7, 4): 14, (8, 4): 20})) == pytest.approx(70.0)

    def test_class_percent_when_no_students_then_error_trapped(self):
        expr = class_percent(Ref(9, 8), 0)
        assert expr.render() == "IFERROR(I8/0*100,0)"
        assert expr.evaluate(resolver({(9, 8): 0})) == 0

    def test_class_percent_when_students_then_share(self):
        expr = class_percent(Ref(9, 8), 3)
        assert expr.evaluate(resolver({(9, 8): 1})) == pytest.approx(33.333333)

    def test_banding_when_with_zero_floor_then_nested_if_with_zero(self):
        expr = banding_formula(Ref(9, 9), BandingPolicy.WITH_ZERO_FLOOR)
        assert expr.render() == "IF(I9>=60,3,IF(I9>=50,2,IF(I9>0,1,0)))"
        assert expr.evaluate(resolver({(9, 9): 0})) == 0
        assert expr.evaluate(resolver({(9, 9): 55})) == 2

    def test_banding_when_no_zero_floor_then_else_one(self):
        expr = banding_formula(Ref(8, 9), BandingPolicy.NO_ZERO_FLOOR)
        assert expr.render() == "IF(H9>=60,3,IF(H9>=50,2,1))"
        assert expr.evaluate(resolver({(8, 9): 0})) == 1
        assert expr.evaluate(resolver({(8, 9): 60})) == 3

    def test_number_when_fractional_then_compact(self):
        assert Number(65.5).render() == "65.5"
        assert Number(65.0).render() == "65"

    def test_number_when_many_significant_digits_then_not_truncated(self):
        assert Number(65.000001).render() == "65.000001"
        assert Number(1 / 3).render() == repr(1 / 3)
