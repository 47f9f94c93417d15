import argparse
import logging
import time

from futures_trader.config_loader import ConfigLoader, ConfigurationError
from futures_trader.exchange_client import ExchangeClient
from futures_trader.pipeline import OrderPipeline

logger = logging.getLogger(__name__)


def executeTick(loader=None, clientFactory=ExchangeClient, log=None):
    log = log or logger
    log.info("--- Tick: Executing Trade ---")

    try:
        config = (loader or ConfigLoader()).getConfig()
    except ConfigurationError as e:
        log.error(f"Config Alert: {e}")
        raise

    if not config.isDemo:
        log.error("SAFETY: Demo/Testnet ONLY.")
        return None

    log.info("Keys loaded: Demo Mode Active")

    client = clientFactory(config)
    outcome = OrderPipeline(config, client, logger=log).run()

    log.info(f"--- Done: {outcome.describe()} ---")
    return outcome


def main(argv=None):
    parser = argparse.ArgumentParser(description="Leveraged market entry on the futures demo exchange.")
    parser.add_argument("--env-file", default="config/.env")
    parser.add_argument("--interval", type=float, default=0,
                        help="Seconds between ticks; 0 runs a single tick.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(message)s')
    loader = ConfigLoader(args.env_file)

    if args.interval <= 0:
        executeTick(loader)
        return

    # A failed tick is logged; the next tick is the retry.
    while True:
        try:
            executeTick(loader)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"Tick failed: {e}")
        time.sleep(args.interval)


if __name__ == "__main__":
    main()
