"""
Tip and split arithmetic for closing a table.

Pure functions over Decimal. Amounts are rounded with the shared money
helper, so the per-person value shown to staff and the stored totals agree.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from django.conf import settings

from core_backend.money import ZERO, quantize, split_evenly, to_decimal


@dataclass(frozen=True)
class FinalAmounts:
    subtotal: Decimal
    tip_percent: Decimal
    tip_amount: Decimal
    total: Decimal
    number_of_people: int
    per_person: Decimal
    # Per-person amounts summing exactly to total. The first shares carry
    # any remainder cent.
    shares: Tuple[Decimal, ...]

    def to_dict(self):
        return {
            "subtotal": str(self.subtotal),
            "tip_percent": str(self.tip_percent),
            "tip_amount": str(self.tip_amount),
            "total": str(self.total),
            "number_of_people": self.number_of_people,
            "per_person": str(self.per_person),
            "shares": [str(share) for share in self.shares],
        }


def clamp_tip_percent(tip_percent, max_percent=None) -> Decimal:
    """Clamp into [0, max_percent]. Out-of-range values are clamped, not rejected."""
    if max_percent is None:
        max_percent = getattr(settings, "TIP_PERCENT_MAX", 30)
    value = to_decimal(tip_percent)
    return min(max(value, Decimal("0")), to_decimal(max_percent))


def compute_final(
    subtotal,
    tip_enabled: bool = False,
    tip_percent=None,
    split_enabled: bool = False,
    number_of_people: int = 1,
    max_tip_percent: Optional[int] = None,
) -> FinalAmounts:
    """
    Final payable amounts for a bill.

    Examples:
        >>> amounts = compute_final(Decimal("100"), True, 10, True, 4)
        >>> amounts.tip_amount, amounts.total, amounts.per_person
        (Decimal('10.00'), Decimal('110.00'), Decimal('27.50'))
    """
    subtotal = quantize(subtotal)

    if tip_enabled:
        if tip_percent is None:
            tip_percent = getattr(settings, "DEFAULT_TIP_PERCENT", 10)
        effective_percent = clamp_tip_percent(tip_percent, max_tip_percent)
        tip_amount = quantize(subtotal * effective_percent / Decimal("100"))
    else:
        effective_percent = Decimal("0")
        tip_amount = ZERO

    total = quantize(subtotal + tip_amount)

    people = max(int(number_of_people or 1), 1) if split_enabled else 1
    per_person = quantize(total / people)
    shares = tuple(split_evenly(total, people))

    return FinalAmounts(
        subtotal=subtotal,
        tip_percent=effective_percent,
        tip_amount=tip_amount,
        total=total,
        number_of_people=people,
        per_person=per_person,
        shares=shares,
    )
