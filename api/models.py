# api/models.py
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, Optional, Tuple

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    StringConstraints,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

from api.exchanges import CREDENTIAL_EXCHANGES, TRADING_EXCHANGES, describe


def _finite_number(value: Any) -> Any:
    # bool is an int subclass and JSON integers are unbounded
    if isinstance(value, bool):
        raise PydanticCustomError('number_type', 'Input should be a number')
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            raise PydanticCustomError('finite_number', 'Input should be a finite number')
    return value


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Number = Annotated[float, BeforeValidator(_finite_number)]
PositiveNumber = Annotated[float, Field(gt=0), BeforeValidator(_finite_number)]
Percentage = Annotated[float, Field(gt=0, lt=100), BeforeValidator(_finite_number)]


class TradeAction(str, Enum):
    BUY = 'buy'
    SELL = 'sell'


class PayloadModel(BaseModel):
    """Base for models built from request bodies.

    `required_fields` are checked before any field is parsed, in order, so
    the first missing one is reported. `error_messages` gives the message
    shown to the caller when a field fails its type or range rule.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    required_fields: ClassVar[Tuple[Tuple[str, str, Optional[str]], ...]] = ()
    error_messages: ClassVar[Dict[str, str]] = {}

    @model_validator(mode='before')
    @classmethod
    def _require_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for field, message, help in cls.required_fields:
                if _blank(data.get(field)):
                    raise PydanticCustomError('missing_field', message, {'help': help} if help else None)
        return data


class ExchangeScopedModel(PayloadModel):
    # Overridden per call with validation context {'exchanges': ...}
    allowed_exchanges: ClassVar[FrozenSet[str]] = TRADING_EXCHANGES

    exchange: StrictStr

    @model_validator(mode='after')
    def _check_exchange(self, info: ValidationInfo):
        allowed = (info.context or {}).get('exchanges', self.allowed_exchanges)
        if self.exchange not in allowed:
            raise PydanticCustomError(
                'unsupported_exchange',
                'Invalid exchange: {exchange}. Must be one of: {allowed}',
                {
                    'exchange': self.exchange,
                    'allowed': describe(allowed),
                    'help': f"Supported values: {describe(allowed)}",
                },
            )
        return self


KEY_HELP = "Create an API key in your exchange account settings"


class BotConfiguration(ExchangeScopedModel):
    required_fields = (
        ('name', "Name is required", None),
        ('exchange', "Exchange is required", None),
        ('pair', "Trading pair is required", "Use a symbol such as BTC/USDT"),
        ('api_key', "API key is required", KEY_HELP),
        ('api_secret', "API secret is required", KEY_HELP),
    )
    error_messages = {
        'name': "Name must be text",
        'exchange': "Exchange must be text",
        'pair': "Trading pair must be text",
        'max_position_size': "Position size must be positive",
        'stoploss_percentage': "Stoploss percentage must be a number",
        'enabled': "Enabled must be a boolean",
        'api_key': "API key must be text",
        'api_secret': "API secret must be text",
    }

    name: Text
    pair: Text
    max_position_size: Optional[PositiveNumber] = None
    stoploss_percentage: Optional[Number] = None
    enabled: StrictBool = False
    api_key: Text
    api_secret: Text = Field(repr=False)

    @field_validator('enabled', mode='before')
    @classmethod
    def _default_enabled(cls, value):
        return False if value is None else value


class WebhookAlert(PayloadModel):
    model_config = ConfigDict(use_enum_values=True)

    required_fields = (
        ('bot_id', "Missing required field: bot_id", None),
        ('symbol', "Missing required field: symbol", None),
        ('action', "Missing required field: action", None),
    )
    error_messages = {
        'bot_id': "Bot id must be text",
        'symbol': "Symbol must be text",
        'action': "Invalid action (must be buy or sell)",
        'price': "Price must be a positive number",
        'order_size': "Order size must be a positive number",
        'amount': "Amount must be a positive number",
        'stoplossPercent': "Stoploss percentage must be between 0 and 100",
        'strategy': "Strategy must be text",
        'secret': "Secret must be text",
    }

    bot_id: Text
    symbol: Text
    action: TradeAction
    price: Optional[PositiveNumber] = None
    order_size: Optional[PositiveNumber] = None
    amount: Optional[PositiveNumber] = None
    stoplossPercent: Optional[Percentage] = None
    strategy: Optional[StrictStr] = None
    # Used to authenticate the caller, never echoed back
    secret: Optional[StrictStr] = Field(default=None, exclude=True, repr=False)

    @field_validator('action', mode='before')
    @classmethod
    def _lower_action(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class ExchangeCredentials(ExchangeScopedModel):
    allowed_exchanges = CREDENTIAL_EXCHANGES

    required_fields = (
        ('exchange', "Exchange is required", None),
        ('api_key', "API Key is required", None),
        ('api_secret', "API Secret is required", None),
    )
    error_messages = {
        'exchange': "Exchange must be text",
        'api_key': "API Key must be text",
        'api_secret': "API Secret must be text",
    }

    api_key: Text
    api_secret: Text = Field(repr=False)


class BotRecord(BaseModel):
    """A persisted bot: a validated configuration plus server-side fields."""

    id: str
    name: str
    exchange: str
    pair: str
    max_position_size: float = Field(gt=0)
    stoploss_percentage: Optional[float] = None
    enabled: bool = False
    api_key: str
    api_secret: str = Field(exclude=True, repr=False)
    webhook_secret: str
    created_at: datetime
    updated_at: datetime
