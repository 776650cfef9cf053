"""
Totals Reconciler.

Aggregates row totals and compares them with the invoice's printed total.
"""

from .totals import TotalsReconciler, TotalsSummary, MatchStatus

__all__ = ['TotalsReconciler', 'TotalsSummary', 'MatchStatus']
