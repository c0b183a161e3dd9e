"""
Hypothesis-based property tests for the reconciliation pipeline.

Property-based testing using Hypothesis to generate arbitrary months and
movement sets and verify the reconciliation invariants hold.

Properties checked:
- Grid length equals the calendar length of the month, ascending, no gaps
- Days without records are all-zero and carry the balance forward
- Accumulation is a left fold with zero carry-in
- Identical inputs give equal outputs; input order is irrelevant
- Summary totals equal the export column sums
- Credit repayments never move a balance
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from cashbook_engines.month_grid import build_month_grid
from cashbook_engines.movement import MovementRecord, PaymentBreakdown
from cashbook_engines.projector import (
    project_category_totals,
    project_export_rows,
    project_summary,
)
from cashbook_engines.reconciler import reconcile_month
from cashbook_kernel.domain.values import YearMonth

BRANCH = "branch-1"

_SETTINGS = settings(
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("100000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)

# Mostly zero, like real rows where a single category is filled in.
sparse_amounts = st.one_of(st.just(Decimal("0")), amounts)

year_months = st.builds(
    YearMonth,
    year=st.integers(min_value=1900, max_value=2100),
    month=st.integers(min_value=1, max_value=12),
)


@composite
def movement_in(draw, year_month: YearMonth) -> MovementRecord:
    day = draw(st.integers(min_value=1, max_value=year_month.days_in_month))
    return MovementRecord(
        date=date(year_month.year, year_month.month, day),
        branch_id=BRANCH,
        gross_sales=draw(amounts),
        payment=PaymentBreakdown(
            credit=draw(sparse_amounts),
            credit_repayments=draw(sparse_amounts),
            top_ups=draw(sparse_amounts),
            card_payment=draw(sparse_amounts),
            transfers=draw(sparse_amounts),
        ),
        expenses=draw(sparse_amounts),
        manual_deposit=draw(sparse_amounts),
    )


@composite
def month_with_records(draw, max_records: int = 40):
    year_month = draw(year_months)
    records = draw(st.lists(movement_in(year_month), max_size=max_records))
    return year_month, records


class TestGridProperties:
    """Month grid shape."""

    @given(year_month=year_months)
    @_SETTINGS
    def test_grid_length_and_order(self, year_month):
        grid = build_month_grid(year_month.year, year_month.month, {})

        assert len(grid) == calendar.monthrange(year_month.year, year_month.month)[1]
        dates = [day.date for day in grid]
        assert dates[0] == year_month.first_day
        for earlier, later in zip(dates, dates[1:]):
            assert later - earlier == timedelta(days=1)


class TestFoldProperties:
    """Balance fold invariants."""

    @given(data=month_with_records())
    @_SETTINGS
    def test_left_fold_identity(self, data):
        year_month, records = data
        reconciled = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)

        previous = Decimal("0")
        for day in reconciled:
            assert day.accumulated_balance == (
                previous + day.day_balance - day.summary.manual_deposit
            )
            previous = day.accumulated_balance
        assert reconciled.accumulated_balance_end_of_month == previous

    @given(data=month_with_records())
    @_SETTINGS
    def test_empty_days_carry_forward(self, data):
        year_month, records = data
        reconciled = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)

        previous = Decimal("0")
        for day in reconciled:
            if day.summary.is_empty:
                assert all(v == 0 for v in day.summary.amounts().values())
                assert day.day_balance == 0
                assert day.accumulated_balance == previous
            previous = day.accumulated_balance

    @given(data=month_with_records(), seed=st.randoms(use_true_random=False))
    @_SETTINGS
    def test_deterministic_and_order_independent(self, data, seed):
        year_month, records = data
        shuffled = list(records)
        seed.shuffle(shuffled)

        first = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)
        again = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)
        reordered = reconcile_month(branch_id=BRANCH, year_month=year_month, records=shuffled)

        assert first == again
        assert first == reordered

    @given(data=month_with_records(), repayment=amounts)
    @_SETTINGS
    def test_credit_repayments_never_move_balance(self, data, repayment):
        year_month, records = data
        extra = MovementRecord(
            date=year_month.first_day,
            branch_id=BRANCH,
            gross_sales=Decimal("0"),
            payment=PaymentBreakdown(credit_repayments=repayment),
        )

        base = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)
        repaid = reconcile_month(
            branch_id=BRANCH, year_month=year_month, records=records + [extra],
        )

        assert [d.accumulated_balance for d in base] == [d.accumulated_balance for d in repaid]
        assert [d.day_balance for d in base] == [d.day_balance for d in repaid]


class TestProjectionProperties:
    """Screen and export agree."""

    @given(data=month_with_records())
    @_SETTINGS
    def test_summary_equals_export_sums(self, data):
        year_month, records = data
        reconciled = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)
        summary = project_summary(reconciled)
        exact_rows = project_export_rows(reconciled, places=None)
        rounded_rows = project_export_rows(reconciled)

        assert sum((r.gross_sales for r in exact_rows), Decimal("0")) == summary.total_sales
        assert sum((r.expenses for r in exact_rows), Decimal("0")) == summary.total_expenses
        assert summary.net_balance == summary.total_sales - summary.total_expenses
        assert summary.day_count == len(exact_rows) == year_month.days_in_month
        # Cent-precision inputs: rounding is exact, so rounded rows agree too.
        assert sum((r.gross_sales for r in rounded_rows), Decimal("0")) == summary.total_sales
        assert rounded_rows[-1].accumulated_balance == summary.accumulated_balance_end_of_month

    @given(data=month_with_records())
    @_SETTINGS
    def test_category_totals_equal_column_sums(self, data):
        year_month, records = data
        reconciled = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)
        rows = project_export_rows(reconciled, places=None)

        for name, total in project_category_totals(reconciled).items():
            assert sum((getattr(r, name) for r in rows), Decimal("0")) == total

    @given(data=month_with_records(max_records=10))
    @_SETTINGS
    def test_totals_match_raw_records(self, data):
        year_month, records = data
        reconciled = reconcile_month(branch_id=BRANCH, year_month=year_month, records=records)

        assert reconciled.totals.gross_sales == sum(
            (r.gross_sales for r in records), Decimal("0"),
        )
        assert reconciled.totals.manual_deposit == sum(
            (r.manual_deposit for r in records), Decimal("0"),
        )
