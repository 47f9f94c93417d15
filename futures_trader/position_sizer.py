from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN

NO_FUNDS = "no funds"
BELOW_MINIMUM = "below minimum"


@dataclass(frozen=True)
class OrderQuantity:
    quantity: Decimal
    margin: Decimal
    notional: Decimal
    rawQuantity: Decimal


@dataclass(frozen=True)
class SizingRejection:
    reason: str


def toDecimal(value, name):
    # Floats carry binary rounding error; callers pass Decimal, int or str.
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"{name} must be Decimal, int or str, got {type(value).__name__}")
    return value if isinstance(value, Decimal) else Decimal(value)


def sizePosition(availableBalance, allocationFraction, leverage, price, minQuantity, precision):
    """
    Maps available margin balance to an order quantity.

    margin = balance * allocation, notional = margin * leverage,
    quantity = notional / price rounded half-even to `precision` places.
    Returns OrderQuantity, or SizingRejection with NO_FUNDS / BELOW_MINIMUM.
    Malformed arguments raise ValueError or TypeError.
    """
    availableBalance = toDecimal(availableBalance, "availableBalance")
    allocationFraction = toDecimal(allocationFraction, "allocationFraction")
    price = toDecimal(price, "price")
    minQuantity = toDecimal(minQuantity, "minQuantity")

    if isinstance(leverage, bool) or not isinstance(leverage, int):
        raise TypeError(f"leverage must be an integer, got {leverage!r}")
    if leverage < 1:
        raise ValueError(f"leverage must be >= 1, got {leverage}")
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
        raise ValueError(f"precision must be a non-negative integer, got {precision!r}")
    if not (Decimal(0) < allocationFraction <= Decimal(1)):
        raise ValueError(f"allocationFraction must be in (0, 1], got {allocationFraction}")
    if price <= 0:
        raise ValueError(f"price must be positive, got {price}")
    if minQuantity <= 0:
        raise ValueError(f"minQuantity must be positive, got {minQuantity}")

    if availableBalance <= 0:
        return SizingRejection(NO_FUNDS)

    margin = availableBalance * allocationFraction
    notional = margin * leverage
    rawQuantity = notional / price
    quantity = rawQuantity.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_EVEN)

    if quantity < minQuantity:
        return SizingRejection(BELOW_MINIMUM)

    return OrderQuantity(quantity, margin, notional, rawQuantity)
