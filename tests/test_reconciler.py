"""Tests for row-sum vs. printed-total reconciliation."""

import pytest

from invoice_ledger.reconciler import MatchStatus, TotalsReconciler


@pytest.fixture
def reconciler():
    return TotalsReconciler()


def test_matching_total(reconciler, sample_invoice):
    summary = reconciler.reconcile_invoice(sample_invoice)

    assert summary.status is MatchStatus.MATCHED
    assert summary.is_match
    assert summary.calculated_total == pytest.approx(500.00)
    assert summary.difference == pytest.approx(0.0)


def test_mismatched_total(reconciler, make_row):
    rows = [
        make_row(extended_case_cost=250.00),
        make_row(extended_case_cost=230.00),
    ]
    summary = reconciler.reconcile(rows, 500.00)

    assert summary.status is MatchStatus.MISMATCHED
    assert summary.difference == pytest.approx(-20.00)
    assert summary.discrepancy == pytest.approx(20.00)


def test_difference_equal_to_tolerance_is_a_mismatch(reconciler, make_row):
    summary = reconciler.reconcile([make_row(extended_case_cost=100.05)], 100.00)
    assert summary.status is MatchStatus.MISMATCHED


def test_difference_just_below_tolerance_matches(reconciler, make_row):
    summary = reconciler.reconcile([make_row(extended_case_cost=100.049999)], 100.00)
    assert summary.status is MatchStatus.MATCHED


@pytest.mark.parametrize("invoice_total", [None, 0, 0.0, -12.5])
def test_missing_total_is_not_evaluated(reconciler, make_row, invoice_total):
    summary = reconciler.reconcile([make_row(extended_case_cost=10.0)], invoice_total)

    assert summary.status is MatchStatus.NOT_EVALUATED
    assert not summary.is_evaluated
    assert summary.difference is None
    assert summary.discrepancy is None


def test_aggregates(reconciler, make_row):
    rows = [
        make_row(qty=2, units=12, case_cost=10.0, extended_case_cost=20.0),
        make_row(qty=-1, units=None, case_cost=None, extended_case_cost=-5.0),
        make_row(qty=None, units=6, case_cost=3.5, extended_case_cost=None),
    ]
    summary = reconciler.reconcile(rows, 15.0)

    assert summary.item_count == 3
    assert summary.total_quantity == pytest.approx(1.0)
    assert summary.total_units == 18
    assert summary.total_case_cost == pytest.approx(13.5)
    assert summary.calculated_total == pytest.approx(15.0)
    assert summary.status is MatchStatus.MATCHED


def test_empty_invoice(reconciler):
    summary = reconciler.reconcile([], 10.0)

    assert summary.item_count == 0
    assert summary.calculated_total == 0.0
    assert summary.status is MatchStatus.MISMATCHED


def test_reconcile_is_pure(reconciler, sample_invoice):
    first = reconciler.reconcile_invoice(sample_invoice)
    second = reconciler.reconcile_invoice(sample_invoice)
    assert first == second


def test_tolerance_override(make_row):
    summary = TotalsReconciler(tolerance=1.0).reconcile(
        [make_row(extended_case_cost=100.5)], 100.0
    )
    assert summary.is_match


def test_to_dict(reconciler, sample_invoice):
    payload = reconciler.reconcile_invoice(sample_invoice).to_dict()

    assert payload['status'] == 'matched'
    assert payload['item_count'] == 3


def test_difference_is_compared_to_six_decimals(reconciler, make_row):
    summary = reconciler.reconcile([make_row(extended_case_cost=0.05)], 1e-9)

    assert summary.difference == 0.05
    assert summary.status is MatchStatus.MISMATCHED
