import pytest
from pydantic import ValidationError

from api.errors import ApiError
from api.exchanges import CREDENTIAL_EXCHANGES, TRADING_EXCHANGES
from api.models import BotConfiguration
from api.validation import validate_bot_data, validate_exchange_credentials, validate_webhook_alert
from tests.conftest import make_bot_payload


def test_valid_bot_defaults_enabled_to_false():
    config = validate_bot_data(make_bot_payload())
    assert config.name == 'Test Bot'
    assert config.exchange == 'bitget'
    assert config.pair == 'BTC/USDT'
    assert config.enabled is False
    assert config.max_position_size is None


@pytest.mark.parametrize('exchange', sorted(TRADING_EXCHANGES))
def test_every_trading_exchange_is_accepted(exchange):
    assert validate_bot_data(make_bot_payload(exchange=exchange)).exchange == exchange


def test_unsupported_exchange_is_rejected_with_400():
    with pytest.raises(ApiError) as exc:
        validate_bot_data(make_bot_payload(name='Invalid Bot', exchange='kraken'))
    assert exc.value.status_code == 400
    assert 'kraken' in exc.value.message
    assert exc.value.help


def test_exchange_match_is_case_sensitive():
    with pytest.raises(ApiError):
        validate_bot_data(make_bot_payload(exchange='Bitget'))


@pytest.mark.parametrize('name', [None, '', '   '])
def test_missing_name(name):
    payload = make_bot_payload(name=name)
    with pytest.raises(ApiError) as exc:
        validate_bot_data(payload)
    assert exc.value.message == "Name is required"
    assert exc.value.status_code == 400


def test_absent_name_key():
    payload = make_bot_payload()
    del payload['name']
    with pytest.raises(ApiError, match="Name is required"):
        validate_bot_data(payload)


def test_missing_pair():
    with pytest.raises(ApiError, match="Trading pair is required"):
        validate_bot_data(make_bot_payload(pair=''))


@pytest.mark.parametrize('field, message', [
    ('api_key', "API key is required"),
    ('api_secret', "API secret is required"),
])
def test_missing_credentials(field, message):
    payload = make_bot_payload()
    del payload[field]
    with pytest.raises(ApiError) as exc:
        validate_bot_data(payload)
    assert exc.value.message == message


@pytest.mark.parametrize('size', [0, -1, '0', -0.5, 'abc', True])
def test_non_positive_position_size(size):
    with pytest.raises(ApiError) as exc:
        validate_bot_data(make_bot_payload(max_position_size=size))
    assert 'Position size' in exc.value.message


def test_numeric_fields_are_coerced():
    config = validate_bot_data(make_bot_payload(max_position_size='0.5', stoploss_percentage='2.5'))
    assert config.max_position_size == 0.5
    assert config.stoploss_percentage == 2.5


def test_stoploss_must_be_numeric():
    with pytest.raises(ApiError, match="Stoploss percentage must be a number"):
        validate_bot_data(make_bot_payload(stoploss_percentage='a lot'))


def test_enabled_must_be_boolean():
    with pytest.raises(ApiError, match="Enabled must be a boolean"):
        validate_bot_data(make_bot_payload(enabled='yes'))
    assert validate_bot_data(make_bot_payload(enabled=True)).enabled is True


def test_presence_is_checked_before_range_and_allow_list():
    payload = {'exchange': 'kraken', 'pair': 'BTC/USDT', 'max_position_size': -1}
    with pytest.raises(ApiError, match="Name is required"):
        validate_bot_data(payload)


def test_range_is_checked_before_allow_list():
    with pytest.raises(ApiError, match="Position size must be positive"):
        validate_bot_data(make_bot_payload(exchange='kraken', max_position_size=0))


def test_text_fields_are_trimmed_and_unknown_fields_ignored():
    config = validate_bot_data(make_bot_payload(name='  Grid Bot ', pair=' ETH/USDT', leverage=5))
    assert config.name == 'Grid Bot'
    assert config.pair == 'ETH/USDT'
    assert not hasattr(config, 'leverage')


def test_non_object_payload():
    for payload in (None, [], 'bot'):
        with pytest.raises(ApiError, match="Payload must be an object"):
            validate_bot_data(payload)


def test_validation_is_repeatable_and_does_not_mutate_payload():
    payload = make_bot_payload(name=' Test Bot ')
    snapshot = dict(payload)
    assert validate_bot_data(payload) == validate_bot_data(payload)
    assert payload == snapshot


def test_configuration_is_immutable():
    config = validate_bot_data(make_bot_payload())
    with pytest.raises(ValidationError):
        config.enabled = True


def test_custom_allow_list():
    with pytest.raises(ApiError):
        validate_bot_data(make_bot_payload(exchange='binance'), exchanges=CREDENTIAL_EXCHANGES)


def test_webhook_alert_strips_secret_and_normalizes_action():
    alert = validate_webhook_alert({
        'bot_id': 'ABC123',
        'symbol': 'BTC/USDT',
        'action': 'BUY',
        'secret': 'top-secret',
        'price': '42000.5',
        'stoplossPercent': '3',
        'order_size': '50',
    })
    assert alert.secret == 'top-secret'
    assert alert.model_dump(exclude_none=True) == {
        'bot_id': 'ABC123',
        'symbol': 'BTC/USDT',
        'action': 'buy',
        'price': 42000.5,
        'stoplossPercent': 3,
        'order_size': 50,
    }


def test_webhook_alert_requires_bot_id():
    with pytest.raises(ApiError) as exc:
        validate_webhook_alert({'symbol': 'BTC/USDT', 'action': 'BUY', 'secret': 'something'})
    assert exc.value.status_code == 400
    assert 'bot_id' in exc.value.message


@pytest.mark.parametrize('overrides, message', [
    ({'action': 'hold'}, "Invalid action"),
    ({'price': -1}, "Price must be a positive number"),
    ({'stoplossPercent': 100}, "Stoploss percentage must be between 0 and 100"),
    ({'order_size': '0'}, "Order size must be a positive number"),
    ({'amount': 'many'}, "Amount must be a positive number"),
])
def test_webhook_alert_rejections(overrides, message):
    payload = {'bot_id': 'b1', 'symbol': 'BTC/USDT', 'action': 'sell'}
    payload.update(overrides)
    with pytest.raises(ApiError, match=message):
        validate_webhook_alert(payload)


def test_exchange_credentials():
    credentials = validate_exchange_credentials({'exchange': 'hyperliquid', 'api_key': 'k', 'api_secret': 's'})
    assert credentials.exchange == 'hyperliquid'

    with pytest.raises(ApiError, match="API Secret is required"):
        validate_exchange_credentials({'exchange': 'bitget', 'api_key': 'k'})
    # binance bots can trade, but credentials are only linked for these exchanges
    with pytest.raises(ApiError, match="Invalid exchange"):
        validate_exchange_credentials({'exchange': 'binance', 'api_key': 'k', 'api_secret': 's'})


NOT_FINITE = ['nan', 'inf', '-inf', float('nan'), float('inf'), '1e400', 10 ** 400]


@pytest.mark.parametrize('value', NOT_FINITE)
@pytest.mark.parametrize('field, message', [
    ('max_position_size', "Position size must be positive"),
    ('stoploss_percentage', "Stoploss percentage must be a number"),
])
def test_bot_numbers_must_be_finite(field, message, value):
    with pytest.raises(ApiError) as exc:
        validate_bot_data(make_bot_payload(**{field: value}))
    assert exc.value.message == message
    assert exc.value.status_code == 400


@pytest.mark.parametrize('value', NOT_FINITE + [True])
@pytest.mark.parametrize('field', ['price', 'order_size', 'amount', 'stoplossPercent'])
def test_alert_numbers_must_be_finite(field, value):
    payload = {'bot_id': 'b1', 'symbol': 'BTC/USDT', 'action': 'buy', field: value}
    with pytest.raises(ApiError) as exc:
        validate_webhook_alert(payload)
    assert exc.value.status_code == 400


def test_large_finite_integer_is_accepted():
    assert validate_bot_data(make_bot_payload(max_position_size=10 ** 20)).max_position_size == 1e20


def test_exchange_is_not_trimmed():
    with pytest.raises(ApiError, match="Invalid exchange"):
        validate_bot_data(make_bot_payload(exchange=' bitget '))


def test_text_fields_must_be_text():
    with pytest.raises(ApiError, match="Name must be text"):
        validate_bot_data(make_bot_payload(name=123))


@pytest.mark.parametrize('overrides', [
    {'name': '  '},
    {'max_position_size': -1},
    {'exchange': 'kraken'},
    {'enabled': 'true'},
])
def test_configuration_model_enforces_its_rules(overrides):
    with pytest.raises(ValidationError):
        BotConfiguration(**make_bot_payload(**overrides))
