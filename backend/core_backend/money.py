"""
Monetary precision helpers.

Every stored or displayed amount in the ordering engine goes through
`quantize`, so a per-person share shown to staff and the totals persisted on
orders always agree to the cent.

Key Principles:
1. NEVER use float for money
2. Quantize with ROUND_HALF_EVEN (banker's rounding) everywhere
3. When an amount is split, allocate remainder cents deterministically so
   the parts sum exactly to the whole
"""

from decimal import Decimal, ROUND_HALF_EVEN, getcontext
from typing import List, Union

# High precision for intermediate calculations
getcontext().prec = 28

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, str, int, float]


def to_decimal(amount: Number) -> Decimal:
    """Convert any numeric input to Decimal without float artifacts."""
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # Convert float to string first to avoid precision issues
        amount = str(amount)
    return Decimal(amount)


def quantize(amount: Number) -> Decimal:
    """
    Round to two decimal places using banker's rounding.

    Examples:
        >>> quantize("10.127")
        Decimal('10.13')
        >>> quantize("10.125")
        Decimal('10.12')
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_EVEN)


def to_minor(amount: Number) -> int:
    """Convert to centavos after quantization."""
    return int((quantize(amount) * 100).to_integral_value())


def from_minor(minor: int) -> Decimal:
    return quantize(Decimal(minor) / 100)


def allocate_minor(weights: List[int], total_minor: int) -> List[int]:
    """
    Allocate total_minor across parts proportionally by weights.

    Guarantees sum(result) == total_minor. Remainder cents go to the parts
    with the largest residual, ties broken by position.

    Examples:
        >>> allocate_minor([1, 1, 1], 100)
        [34, 33, 33]
    """
    total_weight = sum(weights)

    if total_weight == 0 or total_minor == 0:
        return [0] * len(weights)

    shares = [Decimal(weight * total_minor) / Decimal(total_weight) for weight in weights]
    floors = [int(share) for share in shares]
    remainder = total_minor - sum(floors)

    residuals = [(shares[i] - floors[i], i) for i in range(len(weights))]
    residuals.sort(key=lambda x: (-x[0], x[1]))

    result = floors[:]
    for i in range(remainder):
        _, idx = residuals[i]
        result[idx] += 1

    return result


def split_evenly(total: Number, parts: int) -> List[Decimal]:
    """
    Split an amount into `parts` shares that sum exactly to the total.

    Examples:
        >>> split_evenly("100.00", 3)
        [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")
    return [from_minor(m) for m in allocate_minor([1] * parts, to_minor(total))]
