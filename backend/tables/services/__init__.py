"""
Tables services package.

- BillingConsolidator: merges a table's active orders into one bill
- TableClosingService: closes a table under a per-table lock
"""

from .billing_service import BillingConsolidator, BillLine, ConsolidatedBill, EmptyBill
from .closing_service import ClosingResult, TableClosingService

__all__ = [
    'BillingConsolidator',
    'BillLine',
    'ConsolidatedBill',
    'EmptyBill',
    'ClosingResult',
    'TableClosingService',
]
