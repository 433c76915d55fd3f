"""Validation of untrusted payloads received by the API.

The rules live on the models in `api.models`. These functions run them and
turn the first failure into an `ApiError` with status 400: missing fields
are reported first, then type and range failures in field order, then the
exchange allow-list.
"""
from typing import Any, Dict, Type, TypeVar

from pydantic import ValidationError

from api.errors import ApiError
from api.exchanges import CREDENTIAL_EXCHANGES, TRADING_EXCHANGES
from api.models import BotConfiguration, ExchangeCredentials, PayloadModel, WebhookAlert

Model = TypeVar('Model', bound=PayloadModel)


def _require_object(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ApiError("Payload must be an object", 400)
    return payload


def to_api_error(model: Type[PayloadModel], error: ValidationError) -> ApiError:
    first = error.errors(include_url=False)[0]
    ctx = first.get('ctx') or {}
    field = first['loc'][0] if first['loc'] else None
    message = model.error_messages.get(field, first['msg'])
    return ApiError(message, 400, help=ctx.get('help'))


def _validate(model: Type[Model], payload: Any, **context) -> Model:
    data = _require_object(payload)
    try:
        return model.model_validate(data, context=context)
    except ValidationError as e:
        raise to_api_error(model, e) from None


def validate_bot_data(payload: Any, exchanges=TRADING_EXCHANGES) -> BotConfiguration:
    return _validate(BotConfiguration, payload, exchanges=exchanges)


def validate_webhook_alert(payload: Any) -> WebhookAlert:
    return _validate(WebhookAlert, payload)


def validate_exchange_credentials(payload: Any, exchanges=CREDENTIAL_EXCHANGES) -> ExchangeCredentials:
    return _validate(ExchangeCredentials, payload, exchanges=exchanges)
