"""Tests for advisory row validation."""

import pytest

from invoice_ledger.postprocessor import RowValidator, confidence_level, is_low_margin


@pytest.fixture
def validator():
    return RowValidator()


def test_consistent_row_has_no_error(validator, make_row):
    row = make_row(qty=10, case_cost=20.0, case_discount=2.0, extended_case_cost=180.0,
                   calculated_margin_percent=35.0)
    result = validator.validate(row)

    assert not result.has_error
    assert result.errors == []
    assert result.expected_extended_cost == pytest.approx(180.0)


def test_missing_description_is_flagged(validator, make_row):
    row = make_row(item_code="X1", item_description="", qty=1, case_cost=5.0,
                   extended_case_cost=5.0)
    result = validator.validate(row)

    assert result.critical_field_missing
    assert result.missing_fields == ['item_description']
    assert result.has_error
    assert "Critical field missing: item_description" in result.errors


def test_blank_and_null_item_code_are_missing(validator, make_row):
    assert validator.check_critical_fields(make_row(item_code="   ")) == ['item_code']
    assert validator.check_critical_fields(make_row(item_code=None)) == ['item_code']


def test_math_error(validator, make_row):
    row = make_row(qty=10, case_cost=20.0, case_discount=2.0, extended_case_cost=200.0)
    result = validator.validate(row)

    assert result.math_error
    assert result.has_error
    assert result.errors[0].startswith("Math error")


def test_gap_equal_to_tolerance_is_not_an_error(validator, make_row):
    row = make_row(qty=1, case_cost=100.0, extended_case_cost=100.05)
    assert not validator.check_math(row)


def test_gap_above_tolerance_is_an_error(validator, make_row):
    row = make_row(qty=1, case_cost=100.0, extended_case_cost=100.06)
    assert validator.check_math(row)


def test_nulls_read_as_zero(validator, make_row):
    row = make_row(qty=None, case_cost=None, extended_case_cost=None)
    assert not validator.check_math(row)


def test_return_row_is_consistent(validator, make_row):
    row = make_row(qty=-2, case_cost=15.0, extended_case_cost=-30.0)
    assert not validator.check_math(row)


@pytest.mark.parametrize("confidence,level", [
    (0.95, 'high'),
    (0.81, 'high'),
    (0.8, 'medium'),
    (0.6, 'medium'),
    (0.5, 'low'),
    (0.0, 'low'),
    (None, 'low'),
])
def test_confidence_level(confidence, level):
    assert confidence_level(confidence) == level


def test_low_confidence_is_a_warning_not_an_error(validator, make_row):
    row = make_row(qty=1, case_cost=5.0, extended_case_cost=5.0, confidence=0.3,
                   calculated_margin_percent=30.0)
    result = validator.validate(row)

    assert not result.has_error
    assert result.confidence_level == 'low'
    assert result.warnings == ["Low confidence (0.30) - check this row"]


def test_low_margin(validator, make_row):
    assert is_low_margin(make_row(calculated_margin_percent=None))
    assert is_low_margin(make_row(calculated_margin_percent=19.9))
    assert not is_low_margin(make_row(calculated_margin_percent=20.0))

    result = validator.validate(make_row(calculated_margin_percent=10.0))
    assert result.low_margin
    assert "Margin 10.0% below 20%" in result.warnings


def test_validate_all_keeps_order(validator, sample_invoice):
    results = validator.validate_all(sample_invoice.line_items)

    assert [r.row_index for r in results] == [1, 2, 3]
    assert not any(r.has_error for r in results)


def test_result_to_dict(validator, make_row):
    payload = validator.validate(make_row(item_code=None)).to_dict()

    assert payload['has_error'] is True
    assert payload['missing_fields'] == ['item_code']


def test_gap_is_compared_to_six_decimals(validator, make_row):
    row = make_row(qty=1, case_cost=100.0, extended_case_cost=100.0500000004)
    assert not validator.check_math(row)
