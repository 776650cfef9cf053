"""Tests for add/edit/delete transitions on InvoiceData."""

import pytest

from invoice_ledger.calculator import DerivedFieldCalculator, LineItemField
from invoice_ledger.models import InvoiceData
from invoice_ledger.pipeline import AddRow, DeleteRow, EditRow, MutationPipeline, apply_action


@pytest.fixture
def pipeline():
    return MutationPipeline()


def test_add_appends_manual_entry(pipeline, sample_invoice):
    data = pipeline.apply(sample_invoice, AddRow())

    assert data.row_count == 4
    new_row = data.line_items[-1]
    assert new_row.row_index == 4
    assert new_row.qty == 1
    assert new_row.case_cost == 0.0
    assert new_row.extended_case_cost == 0.0
    assert new_row.confidence == 1.0
    assert new_row.notes == "Manual Entry"


def test_add_to_empty_invoice(pipeline):
    data = pipeline.apply(InvoiceData.empty(), AddRow())
    assert [r.row_index for r in data.line_items] == [1]


def test_manual_entry_note_override(sample_invoice):
    data = MutationPipeline(manual_entry_note="Typed in").apply(sample_invoice, AddRow())
    assert data.line_items[-1].notes == "Typed in"


def test_add_keeps_total_and_validates_missing_fields(pipeline, sample_invoice):
    from invoice_ledger.postprocessor import RowValidator
    from invoice_ledger.reconciler import TotalsReconciler

    data = pipeline.apply(sample_invoice, AddRow())

    assert TotalsReconciler().reconcile_invoice(data).is_match
    assert RowValidator().validate(data.line_items[-1]).critical_field_missing


def test_edit_recomputes_the_row(pipeline, sample_invoice):
    data = pipeline.apply(sample_invoice, EditRow(0, LineItemField.QTY, 12))

    assert data.line_items[0].qty == 12
    assert data.line_items[0].extended_case_cost == pytest.approx(240.0)
    assert data.line_items[1] == sample_invoice.line_items[1]


def test_edit_accepts_field_name(pipeline, sample_invoice):
    data = pipeline.apply(sample_invoice, EditRow(1, "item_description", "Cheetos"))
    assert data.line_items[1].item_description == "Cheetos"


def test_edit_with_unknown_field_fails_at_construction():
    with pytest.raises(ValueError):
        EditRow(0, "color", "red")


def test_delete_renumbers_contiguously(pipeline, sample_invoice):
    data = pipeline.apply(sample_invoice, DeleteRow(1))

    assert data.row_count == 2
    assert [r.row_index for r in data.line_items] == [1, 2]
    assert [r.item_code for r in data.line_items] == ['A', 'C']


def test_delete_last_remaining_row(pipeline, sample_invoice):
    data = sample_invoice
    for _ in range(3):
        data = pipeline.apply(data, DeleteRow(0))
    assert data.row_count == 0


@pytest.mark.parametrize("action", [
    EditRow(3, LineItemField.QTY, 1),
    EditRow(-1, LineItemField.QTY, 1),
    DeleteRow(7),
    DeleteRow(-1),
])
def test_stale_position_is_a_no_op(pipeline, sample_invoice, action):
    data = pipeline.apply(sample_invoice, action)

    assert data is not sample_invoice
    assert data == sample_invoice


def test_input_is_never_mutated(pipeline, sample_invoice):
    before = sample_invoice.to_dict()

    pipeline.apply(sample_invoice, EditRow(0, LineItemField.CASE_COST, 99.0))
    pipeline.apply(sample_invoice, DeleteRow(0))
    pipeline.apply(sample_invoice, AddRow())

    assert sample_invoice.to_dict() == before


def test_unknown_action_is_rejected(pipeline, sample_invoice):
    with pytest.raises(TypeError):
        pipeline.apply(sample_invoice, "delete everything")


def test_pipeline_uses_given_calculator(make_row):
    data = InvoiceData.empty().with_line_items([
        make_row(qty=1, units=1, case_cost=1.0, unit_retail=2.0, calculated_margin_percent=50.0)
    ])
    pipeline = MutationPipeline(calculator=DerivedFieldCalculator(clear_stale_margin=True))
    data = pipeline.apply(data, EditRow(0, LineItemField.UNIT_RETAIL, 0))

    assert data.line_items[0].calculated_margin_percent is None


def test_apply_action(sample_invoice):
    data = apply_action(sample_invoice, DeleteRow(2))
    assert data.row_count == 2
