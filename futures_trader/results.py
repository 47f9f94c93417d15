from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class Side(str, Enum):
    LONG = "long"
    SHORT = "short"

    @property
    def orderSide(self):
        return "buy" if self is Side.LONG else "sell"


@dataclass(frozen=True)
class ExchangeFailure:
    """
    Exchange-reported error: ccxt exception class name plus the exchange's message.
    """
    code: str
    message: str

    def __str__(self):
        return f"{self.code}: {self.message}"


@dataclass(frozen=True)
class CallResult:
    data: Any = None
    error: Optional[ExchangeFailure] = None

    @property
    def success(self):
        return self.error is None

    @classmethod
    def ok(cls, data):
        return cls(data=data)

    @classmethod
    def fail(cls, code, message):
        return cls(error=ExchangeFailure(code, message))


@dataclass(frozen=True)
class PriceQuote:
    symbol: str
    price: Decimal


@dataclass(frozen=True)
class OrderRequest:
    symbol: str
    side: Side
    quantity: Decimal
    type: str = "market"


@dataclass(frozen=True)
class OrderAccepted:
    orderId: str
    requestedQuantity: Decimal
    filledQuantity: Optional[Decimal] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class OrderRejected:
    reason: str
