import hmac
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from api.dependencies import BotStore, Settings, get_bot_store, get_settings
from api.errors import ApiError
from api.logger import logger
from api.responses import read_json, success_response
from api.simulation import simulate_order
from api.validation import validate_bot_data, validate_exchange_credentials, validate_webhook_alert

router = APIRouter()


@router.get('/webhook/status')
async def webhook_status(settings: Settings = Depends(get_settings)):
    return success_response({
        'status': 'operational',
        'simulation': settings.simulation_mode,
        'server_time': datetime.now(timezone.utc).isoformat(),
    })


@router.get('/bots')
async def list_bots(store: BotStore = Depends(get_bot_store)):
    return success_response(store.list_bots())


@router.post('/bots')
async def create_bot(request: Request, store: BotStore = Depends(get_bot_store)):
    config = validate_bot_data(await read_json(request))
    bot = store.create_bot(config)
    logger.info(f"Bot created: {bot.id} ({bot.exchange} {bot.pair})")
    return success_response(bot, 201)


@router.get('/bots/{bot_id}')
async def get_bot(bot_id: str, store: BotStore = Depends(get_bot_store)):
    return success_response(store.get_bot(bot_id))


@router.put('/bots/{bot_id}')
async def update_bot(bot_id: str, request: Request, store: BotStore = Depends(get_bot_store)):
    # Updates replace the whole configuration and are validated like a creation
    config = validate_bot_data(await read_json(request))
    bot = store.replace_bot(bot_id, config)
    logger.info(f"Bot updated: {bot.id}")
    return success_response(bot)


@router.delete('/bots/{bot_id}')
async def delete_bot(bot_id: str, store: BotStore = Depends(get_bot_store)):
    store.delete_bot(bot_id)
    logger.info(f"Bot deleted: {bot_id}")
    return success_response({'id': bot_id})


@router.post('/bots/{bot_id}/toggle')
async def toggle_bot(bot_id: str, store: BotStore = Depends(get_bot_store)):
    bot = store.get_bot(bot_id)
    bot = store.set_enabled(bot.id, not bot.enabled)
    logger.info(f"Bot {bot.id} {'enabled' if bot.enabled else 'disabled'}")
    return success_response(bot)


@router.post('/bots/{bot_id}/webhook-secret')
async def rotate_webhook_secret(bot_id: str, store: BotStore = Depends(get_bot_store)):
    bot = store.rotate_webhook_secret(bot_id)
    logger.info(f"Webhook secret rotated for bot {bot.id}")
    return success_response({'id': bot.id, 'webhook_secret': bot.webhook_secret})


@router.get('/bots/{bot_id}/signals')
async def list_signals(bot_id: str, store: BotStore = Depends(get_bot_store)):
    bot = store.get_bot(bot_id)
    return success_response(store.signals(bot.id))


@router.post('/exchange/validate')
async def validate_exchange(request: Request):
    credentials = validate_exchange_credentials(await read_json(request))
    return success_response({
        'exchange': credentials.exchange,
        'api_key': mask_key(credentials.api_key),
        'valid': True,
    })


@router.post('/webhook')
async def webhook(request: Request,
                  store: BotStore = Depends(get_bot_store),
                  settings: Settings = Depends(get_settings)):
    payload = await read_json(request)
    logger.debug(f"Webhook payload received: {str(payload)[:500]}")

    alert = validate_webhook_alert(payload)
    bot = store.get_bot(alert.bot_id)

    if alert.secret is None:
        raise ApiError("Missing webhook secret", 401)
    if not hmac.compare_digest(alert.secret.encode(), bot.webhook_secret.encode()):
        raise ApiError("Invalid webhook secret", 401)
    if not bot.enabled:
        raise ApiError("Bot is disabled", 400, help="Enable the bot from the dashboard to accept alerts")

    logger.info(f"Alert accepted for bot {bot.id}: {alert.action} {alert.symbol}")

    if settings.simulation_mode:
        order = simulate_order(alert, bot)
        signal = store.record_signal(alert, 'filled', order)
    else:
        signal = store.record_signal(alert, 'queued')
    return success_response(signal)


def mask_key(key: str) -> str:
    if len(key) <= 8:
        return '*' * len(key)
    return f"{key[:4]}{'*' * (len(key) - 8)}{key[-4:]}"
