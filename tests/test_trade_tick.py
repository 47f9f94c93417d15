import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from futures_trader.check_status import checkAccount
from futures_trader.config_loader import ConfigurationError, Credentials, TraderConfig
from futures_trader.exchange_client import EnvironmentUnavailable
from futures_trader.pipeline import Step
from futures_trader.results import CallResult, OrderAccepted, PriceQuote
from futures_trader import trade_tick

def makeLoader(**overrides):
    loader = MagicMock()
    loader.getConfig.return_value = TraderConfig(credentials=Credentials('k', 's'), **overrides)
    return loader

def makeClient():
    client = MagicMock()
    client.getServerTime.return_value = CallResult.ok(1700000000000)
    client.setLeverage.return_value = CallResult.ok({})
    client.getBalances.return_value = CallResult.ok({'USDT': Decimal('1000'), 'BNB': Decimal('0')})
    client.getPrice.return_value = CallResult.ok(PriceQuote('BTC/USDT:USDT', Decimal('50000')))
    client.placeMarketOrder.return_value = CallResult.ok(OrderAccepted('1', Decimal('0.020')))
    return client

def test_execute_tick_runs_pipeline():
    client = makeClient()
    factory = MagicMock(return_value=client)
    loader = makeLoader()

    outcome = trade_tick.executeTick(loader, clientFactory=factory)

    assert outcome.succeeded
    factory.assert_called_once_with(loader.getConfig.return_value)

def test_execute_tick_missing_credentials_is_fatal():
    loader = MagicMock()
    loader.getConfig.side_effect = ConfigurationError("BINANCE_DEMO_API_KEY and BINANCE_DEMO_SECRET must be set.")
    factory = MagicMock()

    with pytest.raises(ConfigurationError):
        trade_tick.executeTick(loader, clientFactory=factory)

    factory.assert_not_called()

def test_execute_tick_refuses_mainnet():
    factory = MagicMock()

    assert trade_tick.executeTick(makeLoader(isDemo=False), clientFactory=factory) is None
    factory.assert_not_called()

def test_execute_tick_adapter_fault_propagates():
    factory = MagicMock(side_effect=RuntimeError("no environment"))

    with pytest.raises(RuntimeError):
        trade_tick.executeTick(makeLoader(), clientFactory=factory)

def test_execute_tick_step_failure_does_not_raise():
    client = makeClient()
    client.getBalances.return_value = CallResult.fail('AuthenticationError', 'Invalid API-key')

    outcome = trade_tick.executeTick(makeLoader(), clientFactory=MagicMock(return_value=client))

    assert outcome.step is Step.BALANCE

def test_main_single_tick(mocker):
    mocker.patch.object(trade_tick, 'ConfigLoader')
    execute = mocker.patch.object(trade_tick, 'executeTick')
    sleep = mocker.patch('time.sleep')

    trade_tick.main(['--env-file', 'custom.env'])

    trade_tick.ConfigLoader.assert_called_once_with('custom.env')
    execute.assert_called_once()
    sleep.assert_not_called()

def test_main_interval_repeats(mocker):
    mocker.patch.object(trade_tick, 'ConfigLoader')
    execute = mocker.patch.object(trade_tick, 'executeTick')
    mocker.patch('time.sleep', side_effect=[None, KeyboardInterrupt])

    with pytest.raises(KeyboardInterrupt):
        trade_tick.main(['--interval', '3600'])

    assert execute.call_count == 2

def test_main_interval_survives_failed_tick(mocker, caplog):
    mocker.patch.object(trade_tick, 'ConfigLoader')
    execute = mocker.patch.object(trade_tick, 'executeTick', side_effect=[
        None, EnvironmentUnavailable("No reachable demo/testnet futures endpoint"), None,
    ])
    mocker.patch('time.sleep', side_effect=[None, None, KeyboardInterrupt])

    with pytest.raises(KeyboardInterrupt):
        trade_tick.main(['--interval', '3600'])

    assert execute.call_count == 3
    assert "Tick failed" in caplog.text

def test_main_interval_stops_on_config_error(mocker):
    mocker.patch.object(trade_tick, 'ConfigLoader')
    mocker.patch.object(trade_tick, 'executeTick', side_effect=ConfigurationError("must be set"))
    sleep = mocker.patch('time.sleep')

    with pytest.raises(ConfigurationError):
        trade_tick.main(['--interval', '3600'])

    sleep.assert_not_called()

def test_main_single_tick_fault_propagates(mocker):
    mocker.patch.object(trade_tick, 'ConfigLoader')
    mocker.patch.object(trade_tick, 'executeTick', side_effect=EnvironmentUnavailable("down"))

    with pytest.raises(EnvironmentUnavailable):
        trade_tick.main([])

def test_check_account_reports_funded_assets():
    client = makeClient()

    offset, funded = checkAccount(makeLoader(), clientFactory=MagicMock(return_value=client))

    assert offset is not None
    assert funded == {'USDT': Decimal('1000')}
    client.placeMarketOrder.assert_not_called()
