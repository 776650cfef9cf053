"""
Derived-Field Calculator.

Recomputes cost after discount, extended cost, extended retail and
margin percent whenever a pricing field of a line item is edited.
"""

from .derived_fields import (
    LineItemField,
    PRICING_FIELDS,
    FIELD_RULES,
    DerivedFieldCalculator,
    recalculate,
    recalculate_row
)

__all__ = [
    'LineItemField',
    'PRICING_FIELDS',
    'FIELD_RULES',
    'DerivedFieldCalculator',
    'recalculate',
    'recalculate_row'
]
