import logging
from futures_trader.clock import checkClockOffset, nowMs
from futures_trader.config_loader import ConfigLoader
from futures_trader.exchange_client import ExchangeClient

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)

def checkAccount(loader=None, clientFactory=ExchangeClient):
    logger.info("--- Account Status ---")

    config = (loader or ConfigLoader()).getConfig()
    client = clientFactory(config)

    # Clock
    offset = checkClockOffset(client.getServerTime(), nowMs(), config.clockThresholdMs, log=logger)

    # Balance
    result = client.getBalances()
    if not result.success:
        logger.error(f"Balance fetch failed: {result.error}")
        return offset, None

    funded = {asset: amount for asset, amount in result.data.items() if amount > 0}
    if not funded:
        logger.info("No available balance.")
    for asset, amount in sorted(funded.items()):
        logger.info(f"{asset} available: {amount}")
    return offset, funded

if __name__ == "__main__":
    checkAccount()
