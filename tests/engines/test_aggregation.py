"""
Tests for the daily aggregator.

Covers:
- Grouping by exact date
- Independent summing of every category
- No de-duplication, no gap emission
- Ascending output order
"""

from datetime import date
from decimal import Decimal

from cashbook_engines.aggregation import DaySummary, aggregate_by_day


class TestAggregateByDay:
    """Tests for aggregate_by_day."""

    def test_empty_input(self):
        assert aggregate_by_day(records=[]) == {}

    def test_single_record(self, make_record):
        record = make_record(date(2024, 3, 1), gross_sales="1000", card_payment="200")
        result = aggregate_by_day(records=[record])

        summary = result[date(2024, 3, 1)]
        assert summary.gross_sales == Decimal("1000")
        assert summary.card_payment == Decimal("200")
        assert summary.record_count == 1

    def test_same_day_records_summed_per_category(self, make_record):
        """Each record contributes to a different category on the same day."""
        day = date(2024, 3, 5)
        records = [
            make_record(day, gross_sales="500", credit="50"),
            make_record(day, gross_sales="300", top_ups="20"),
            make_record(day, expenses="40", transfers="100"),
            make_record(day, manual_deposit="200", credit_repayments="15"),
        ]
        summary = aggregate_by_day(records=records)[day]

        assert summary.gross_sales == Decimal("800")
        assert summary.credit == Decimal("50")
        assert summary.top_ups == Decimal("20")
        assert summary.transfers == Decimal("100")
        assert summary.expenses == Decimal("40")
        assert summary.manual_deposit == Decimal("200")
        assert summary.credit_repayments == Decimal("15")
        assert summary.record_count == 4

    def test_identical_records_not_deduplicated(self, make_record):
        record = make_record(date(2024, 3, 2), gross_sales="10")
        summary = aggregate_by_day(records=[record, record])[date(2024, 3, 2)]
        assert summary.gross_sales == Decimal("20")
        assert summary.record_count == 2

    def test_dates_without_records_not_emitted(self, make_record):
        records = [
            make_record(date(2024, 3, 1), gross_sales="1"),
            make_record(date(2024, 3, 4), gross_sales="1"),
        ]
        assert list(aggregate_by_day(records=records)) == [date(2024, 3, 1), date(2024, 3, 4)]

    def test_output_ascending_for_unordered_input(self, make_record):
        records = [
            make_record(date(2024, 3, 20), gross_sales="1"),
            make_record(date(2024, 3, 3), gross_sales="1"),
            make_record(date(2024, 3, 11), gross_sales="1"),
            make_record(date(2024, 3, 3), gross_sales="1"),
        ]
        keys = list(aggregate_by_day(records=records))
        assert keys == sorted(keys)
        assert len(keys) == 3

    def test_exact_decimal_sums(self, make_record):
        day = date(2024, 3, 1)
        records = [make_record(day, gross_sales="0.1") for _ in range(10)]
        assert aggregate_by_day(records=records)[day].gross_sales == Decimal("1.0")

    def test_accepts_generator(self, make_record):
        day = date(2024, 3, 1)
        result = aggregate_by_day(records=(make_record(day, gross_sales="2") for _ in range(3)))
        assert result[day].gross_sales == Decimal("6")


class TestDaySummary:
    """Tests for the DaySummary value."""

    def test_zero_summary(self):
        summary = DaySummary.zero(date(2024, 3, 9))
        assert summary.is_empty
        assert all(v == Decimal("0") for v in summary.amounts().values())

    def test_non_empty(self):
        assert not DaySummary(date=date(2024, 3, 1), record_count=1).is_empty
