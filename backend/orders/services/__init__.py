"""
Orders services package.

- OrderService: order creation, table ledger queries, history and the
  status-update entry point used by the API
"""

from .order_service import OrderService

__all__ = [
    'OrderService',
]
