import ccxt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from futures_trader.clock import checkClockOffset, nowMs
from futures_trader.position_sizer import SizingRejection, sizePosition
from futures_trader.results import OrderAccepted, OrderRequest


class Step(str, Enum):
    LEVERAGE = "leverage"
    BALANCE = "balance"
    PRICE = "price"
    SIZING = "sizing"
    ORDER = "order"


class FailureKind(str, Enum):
    EXCHANGE = "exchange"
    TRANSPORT = "transport"
    SIZING = "sizing"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class PipelineOutcome:
    order: Optional[OrderAccepted] = None
    step: Optional[Step] = None
    reason: Optional[str] = None
    kind: Optional[FailureKind] = None

    @property
    def succeeded(self):
        return self.order is not None

    @classmethod
    def success(cls, order):
        return cls(order=order)

    @classmethod
    def failure(cls, step, reason, kind):
        return cls(step=step, reason=reason, kind=kind)

    def describe(self):
        if self.succeeded:
            return f"Succeeded: order {self.order.orderId} qty {self.order.requestedQuantity}"
        return f"Failed({self.step.value}) [{self.kind.value}]: {self.reason}"


class OrderPipeline:
    """
    One tick of the entry sequence: leverage, balance, price, sizing, order.

    Each step runs only if its predecessor succeeded. Nothing is rolled back:
    a failed order leaves the leverage change in place, which carries no
    market exposure. run() never raises.
    """

    def __init__(self, config, client, logger=None):
        self.config = config
        self.client = client
        self.logger = logger or logging.getLogger(__name__)

    def checkClock(self):
        try:
            return checkClockOffset(
                self.client.getServerTime(), nowMs(), self.config.clockThresholdMs, log=self.logger
            )
        except Exception as e:
            self.logger.error(f"Clock check exception: {e}")
            return None

    def run(self):
        config = self.config
        self.logger.info(
            f"Firing: {config.symbol} {config.side.value} "
            f"({config.allocationFraction * 100}% alloc, {config.leverage}x lev)"
        )
        self.checkClock()

        step = Step.LEVERAGE
        try:
            result = self.client.setLeverage(config.symbol, config.leverage)
            if not result.success:
                return self._exchangeFailure(step, result)
            self.logger.info(f"Leverage set: {config.leverage}x")

            step = Step.BALANCE
            result = self.client.getBalances()
            if not result.success:
                return self._exchangeFailure(step, result)
            balance = result.data.get(config.settleAsset, 0)
            self.logger.info(f"{config.settleAsset} available: {balance}")

            step = Step.PRICE
            result = self.client.getPrice(config.symbol)
            if not result.success:
                return self._exchangeFailure(step, result)
            price = result.data.price

            step = Step.SIZING
            sizing = sizePosition(
                balance, config.allocationFraction, config.leverage,
                price, config.minQuantity, config.quantityPrecision,
            )
            if isinstance(sizing, SizingRejection):
                self.logger.warning(
                    f"Sizing rejected ({sizing.reason}): {config.settleAsset} {balance} @ {price}, "
                    f"min {config.minQuantity}"
                )
                return PipelineOutcome.failure(step, sizing.reason, FailureKind.SIZING)
            self.logger.info(
                f"Calc: {config.settleAsset} {balance} | Margin {sizing.margin} | "
                f"Qty {sizing.quantity} @ {price}"
            )

            step = Step.ORDER
            request = OrderRequest(config.symbol, config.side, sizing.quantity)
            result = self.client.placeMarketOrder(request)
            if not result.success:
                return self._exchangeFailure(step, result)
            if not isinstance(result.data, OrderAccepted):
                self.logger.error(f"Order rejected: {result.data.reason}")
                return PipelineOutcome.failure(step, result.data.reason, FailureKind.EXCHANGE)

            self.logger.info(
                f"{config.side.value.capitalize()} executed: ID {result.data.orderId} | Qty {sizing.quantity}"
            )
            return PipelineOutcome.success(result.data)

        except ccxt.NetworkError as e:
            self.logger.error(f"Transport error at {step.value}: {type(e).__name__}: {e}")
            return PipelineOutcome.failure(step, str(e), FailureKind.TRANSPORT)
        except Exception as e:
            self.logger.exception(f"Unexpected exception at {step.value}: {e}")
            return PipelineOutcome.failure(step, str(e), FailureKind.UNEXPECTED)

    def _exchangeFailure(self, step, result):
        self.logger.error(f"{step.value.capitalize()} fail: {result.error}")
        return PipelineOutcome.failure(step, str(result.error), FailureKind.EXCHANGE)
