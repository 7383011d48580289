from dataclasses import dataclass
from typing import Optional, Tuple
from django.conf import settings
from django.db import DatabaseError, transaction
import logging

from core_backend.infrastructure.locks import LockNotAcquired, cache_lock
from notifications.dispatcher import NotificationDispatcher
from orders.exceptions import ConflictError, InvalidTransition
from orders.models import Order
from orders.state_machine import OrderStateMachine
from tables.calculators import FinalAmounts, compute_final
from tables.exceptions import NothingToClose, PartialCloseFailure, TableLockBusy
from tables.signals import table_closed

from .billing_service import BillingConsolidator, ConsolidatedBill, EmptyBill

logger = logging.getLogger(__name__)


def table_close_lock_key(table):
    return f"table-close:{table.restaurant_id}:{table.pk}"


@dataclass(frozen=True)
class ClosingResult:
    bill: ConsolidatedBill
    amounts: Optional[FinalAmounts]
    closed_order_ids: Tuple
    failed_order_ids: Tuple

    @property
    def closed_count(self):
        return len(self.closed_order_ids)

    @property
    def is_complete(self):
        return not self.failed_order_ids

    def to_dict(self):
        return {
            "bill": self.bill.to_dict(),
            "amounts": self.amounts.to_dict() if self.amounts is not None else None,
            "closed_order_ids": [str(order_id) for order_id in self.closed_order_ids],
            "failed_order_ids": [str(order_id) for order_id in self.failed_order_ids],
            "closed_count": self.closed_count,
        }


class TableClosingService:
    """
    Closes a table: bills its active orders and marks them delivered.

    Only one close per table runs at a time. Orders that were delivered stay
    delivered even if others in the same close fail.
    """

    @staticmethod
    def close_table(
        table,
        split_bill=False,
        number_of_people=1,
        close_by_user=False,
        selected_user=None,
        tip_enabled=False,
        tip_percent=None,
    ) -> ClosingResult:
        """
        Close the table, or only selected_user's orders when close_by_user.

        Raises:
            TableLockBusy: another close of this table holds the lock
            NothingToClose: no active order matches
            PartialCloseFailure: some orders could not be delivered; the
                exception carries the full ClosingResult
        """
        customer_name = None
        if close_by_user:
            if not selected_user:
                raise NothingToClose("Select the customer whose orders should be closed")
            customer_name = selected_user

        try:
            with cache_lock(
                table_close_lock_key(table),
                ttl=settings.TABLE_CLOSE_LOCK_TTL,
                wait=settings.TABLE_CLOSE_LOCK_WAIT,
            ):
                result, closed_orders = TableClosingService._close_locked(
                    table,
                    customer_name=customer_name,
                    split_bill=split_bill,
                    number_of_people=number_of_people,
                    tip_enabled=tip_enabled,
                    tip_percent=tip_percent,
                )
        except LockNotAcquired:
            logger.warning(f"Close of table {table.number} ({table.restaurant_id}) rejected: lock busy")
            raise TableLockBusy(table)

        # The lock is released; nothing below may hold up another close.
        NotificationDispatcher.notify_many(closed_orders)
        table_closed.send_robust(sender=table.__class__, table=table, result=result)

        logger.info(
            f"Table {table.number} ({table.restaurant_id}) closed: "
            f"{result.closed_count} order(s), total R$ {result.amounts.total}"
            + (f", {len(result.failed_order_ids)} failed" if result.failed_order_ids else "")
        )

        if result.failed_order_ids:
            raise PartialCloseFailure(result)
        return result

    @staticmethod
    def _close_locked(table, customer_name, split_bill, number_of_people, tip_enabled, tip_percent):
        try:
            bill = BillingConsolidator.consolidate(table, customer_name=customer_name)
        except EmptyBill as e:
            raise NothingToClose(str(e))

        amounts = compute_final(
            bill.subtotal,
            tip_enabled=tip_enabled,
            tip_percent=tip_percent,
            split_enabled=split_bill,
            number_of_people=number_of_people,
        )

        orders = list(
            Order.objects.select_related("restaurant", "table")
            .filter(pk__in=bill.source_order_ids)
            .order_by("created_at", "order_number")
        )
        # Orders that vanished between the bill read and now cannot be closed
        missing = set(bill.source_order_ids) - {order.pk for order in orders}

        closed, failed = [], list(missing)
        for index, order in enumerate(orders):
            try:
                with transaction.atomic():
                    OrderStateMachine.apply(order, Order.OrderStatus.DELIVERED, notify=False)
            except (InvalidTransition, ConflictError) as e:
                logger.warning(f"Order #{order.order_number} not closed with table {table.number}: {e}")
                failed.append(order.pk)
                continue
            except DatabaseError as e:
                remaining = [o.pk for o in orders[index:]]
                logger.error(
                    f"Database error closing table {table.number}; "
                    f"{len(remaining)} order(s) left open: {e}",
                    exc_info=True,
                )
                failed.extend(remaining)
                break
            closed.append(order)

        result = ClosingResult(
            bill=bill,
            amounts=amounts,
            closed_order_ids=tuple(order.pk for order in closed),
            failed_order_ids=tuple(failed),
        )
        return result, closed
