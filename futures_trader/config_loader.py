import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

from dotenv import dotenv_values

from futures_trader.results import Side


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class Credentials:
    apiKey: str = field(repr=False)
    secret: str = field(repr=False)


@dataclass(frozen=True)
class TraderConfig:
    credentials: Credentials
    isDemo: bool = True
    baseUrl: Optional[str] = None
    symbol: str = "BTC/USDT:USDT"
    settleAsset: str = "USDT"
    side: Side = Side.LONG
    leverage: int = 10
    allocationFraction: Decimal = Decimal("0.10")
    minQuantity: Decimal = Decimal("0.001")
    quantityPrecision: int = 3
    clockThresholdMs: int = 50


class ConfigLoader:
    def __init__(self, envPath="config/.env"):
        self.envPath = envPath

    def readEnvironment(self):
        """
        Re-reads the .env file; process environment variables take precedence.
        """
        values = {k: v for k, v in dotenv_values(self.envPath).items() if v is not None}
        values.update(os.environ)
        return values

    def getConfig(self):
        """
        Retrieves Binance demo credentials and trading settings.
        """
        env = self.readEnvironment()
        apiKey = env.get("BINANCE_DEMO_API_KEY")
        secret = env.get("BINANCE_DEMO_SECRET")
        useDemo = env.get("BINANCE_USE_DEMO", "true").lower() == "true"

        if not apiKey or not apiKey.strip() or not secret or not secret.strip():
            raise ConfigurationError("BINANCE_DEMO_API_KEY and BINANCE_DEMO_SECRET must be set.")

        sideName = env.get("TRADER_SIDE", "long").strip().lower()
        try:
            side = Side(sideName)
        except ValueError:
            raise ConfigurationError(f"TRADER_SIDE must be 'long' or 'short', got {sideName!r}")

        config = TraderConfig(
            credentials=Credentials(apiKey.strip(), secret.strip()),
            isDemo=useDemo,
            baseUrl=env.get("BINANCE_BASE_URL") or None,
            symbol=env.get("TRADER_SYMBOL", "BTC/USDT:USDT"),
            settleAsset=env.get("TRADER_SETTLE_ASSET", "USDT"),
            side=side,
            leverage=self._int(env, "TRADER_LEVERAGE", 10),
            allocationFraction=self._decimal(env, "TRADER_ALLOCATION", "0.10"),
            minQuantity=self._decimal(env, "TRADER_MIN_QUANTITY", "0.001"),
            quantityPrecision=self._int(env, "TRADER_QUANTITY_PRECISION", 3),
            clockThresholdMs=self._int(env, "TRADER_CLOCK_THRESHOLD_MS", 50),
        )

        if config.leverage < 1:
            raise ConfigurationError(f"TRADER_LEVERAGE must be >= 1, got {config.leverage}")
        if not (Decimal(0) < config.allocationFraction <= Decimal(1)):
            raise ConfigurationError(f"TRADER_ALLOCATION must be in (0, 1], got {config.allocationFraction}")
        if config.minQuantity <= 0:
            raise ConfigurationError(f"TRADER_MIN_QUANTITY must be positive, got {config.minQuantity}")
        if config.quantityPrecision < 0:
            raise ConfigurationError(f"TRADER_QUANTITY_PRECISION must be >= 0, got {config.quantityPrecision}")

        return config

    def _int(self, env, name, default):
        raw = env.get(name)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}")

    def _decimal(self, env, name, default):
        raw = env.get(name)
        if raw is None or not raw.strip():
            return Decimal(default)
        try:
            value = Decimal(raw.strip())
        except InvalidOperation:
            raise ConfigurationError(f"{name} must be a decimal number, got {raw!r}")
        if not value.is_finite():
            raise ConfigurationError(f"{name} must be finite, got {raw!r}")
        return value
