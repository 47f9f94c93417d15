import ccxt
import logging
import requests
from decimal import Decimal
from urllib.parse import urlsplit

from futures_trader.results import CallResult, OrderAccepted, OrderRejected, PriceQuote

DEMO_CANDIDATES = [
    "https://demo-fapi.binance.com",      # Priority: Futures Demo Trading
    "https://testnet.binancefuture.com",  # Legacy Futures Testnet
]

LEGACY_TESTNET_HOST = "testnet.binancefuture.com"

REJECTED_STATUSES = ("rejected", "canceled", "expired")


class EnvironmentUnavailable(RuntimeError):
    pass


class ExchangeClient:
    """
    Binance USD-M futures adapter.

    Exchange-side rejections come back as failed CallResults.
    Transport faults (ccxt.NetworkError other than rate limiting) propagate.
    """

    def __init__(self, config):
        self.logger = logging.getLogger(__name__)

        options = {
            'apiKey': config.credentials.apiKey,
            'secret': config.credentials.secret,
            'enableRateLimit': True,
            'options': {
                # Currency metadata lives on the spot sapi host, which demo keys cannot sign for.
                'fetchCurrencies': False,
                'disableFuturesSandboxWarning': True,
            },
        }

        self.exchange = ccxt.binanceusdm(options)

        if config.isDemo:
            self.logger.info("Mode: Demo/Testnet")
            if config.baseUrl:
                self.useBaseUrl(config.baseUrl)
            else:
                self.detectEnvironment()
        else:
            self.logger.info("Mode: Mainnet")

    def detectEnvironment(self):
        """
        Probes endpoints to find a reachable futures demo/testnet URL.
        """
        self.logger.info("Auto-detecting environment...")

        for url in DEMO_CANDIDATES:
            try:
                if requests.get(f"{url}/fapi/v1/ping", timeout=3).status_code == 200:
                    self.useBaseUrl(url)
                    return url
            except requests.RequestException as e:
                self.logger.debug(f"Probe failed for {url}: {e}")

        self.logger.error("CRITICAL: No reachable demo environment found.")
        raise EnvironmentUnavailable("No reachable demo/testnet futures endpoint")

    def useBaseUrl(self, url):
        if LEGACY_TESTNET_HOST in url:
            self.exchange.set_sandbox_mode(True)
        else:
            self.exchange.enable_demo_trading(True)

        api = self.exchange.urls['api']
        for key, value in list(api.items()):
            if key.startswith('fapi') and isinstance(value, str):
                api[key] = url.rstrip('/') + urlsplit(value).path
        self.logger.info(f"Connected to: {url}")

    def _call(self, action, request):
        try:
            return CallResult.ok(request())
        except ccxt.RateLimitExceeded as e:
            self.logger.warning(f"{action} rate limited: {e}")
            return CallResult.fail(type(e).__name__, str(e))
        except ccxt.NetworkError:
            raise
        except ccxt.ExchangeError as e:
            self.logger.debug(f"{action} rejected by exchange: {e}")
            return CallResult.fail(type(e).__name__, str(e))

    def getServerTime(self):
        return self._call("Server time", self.exchange.fetch_time)

    def setLeverage(self, symbol, leverage):
        return self._call("Leverage", lambda: self.exchange.set_leverage(leverage, symbol))

    def getBalances(self):
        result = self._call("Balance", self.exchange.fetch_balance)
        if not result.success:
            return result

        free = result.data.get('free') or {}
        return CallResult.ok({
            asset: Decimal(str(amount or 0))
            for asset, amount in free.items()
        })

    def getPrice(self, symbol):
        result = self._call("Price", lambda: self.exchange.fetch_ticker(symbol))
        if not result.success:
            return result

        last = result.data.get('last')
        price = Decimal(str(last)) if last is not None else None
        if price is None or not price.is_finite() or price <= 0:
            return CallResult.fail("InvalidPrice", f"No usable price for {symbol}: {last!r}")
        return CallResult.ok(PriceQuote(symbol, price))

    def placeMarketOrder(self, request):
        result = self._call("Order", lambda: self.exchange.create_order(
            request.symbol, request.type, request.side.orderSide, str(request.quantity), params={}
        ))
        if not result.success:
            return result

        response = result.data or {}
        status = response.get('status')
        if status in REJECTED_STATUSES:
            return CallResult.ok(OrderRejected(f"Order {response.get('id')} {status}"))

        filled = response.get('filled')
        return CallResult.ok(OrderAccepted(
            orderId=str(response.get('id')),
            requestedQuantity=request.quantity,
            filledQuantity=Decimal(str(filled)) if filled is not None else None,
            status=status,
        ))
