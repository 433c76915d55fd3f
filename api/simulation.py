import time
import uuid
from decimal import Decimal, ROUND_DOWN, localcontext

from api.models import BotRecord, WebhookAlert

# Fill prices used while SIMULATION_MODE is on
SIMULATED_PRICES = {
    'BTC': Decimal('65000'),
    'ETH': Decimal('3500'),
    'SOL': Decimal('150'),
}
DEFAULT_PRICE = Decimal('100')
FEE_RATE = Decimal('0.001')
QUANTITY_STEP = Decimal('0.00000001')

# Enough digits for any finite float quantised to QUANTITY_STEP
PRECISION = 400


def get_simulated_price(symbol: str) -> Decimal:
    symbol = symbol.upper()
    for asset, price in SIMULATED_PRICES.items():
        if asset in symbol:
            return price
    return DEFAULT_PRICE


def simulate_order(alert: WebhookAlert, bot: BotRecord) -> dict:
    size = alert.order_size or alert.amount or bot.max_position_size
    quote = alert.symbol.split('/')[1] if '/' in alert.symbol else 'USDT'

    with localcontext() as ctx:
        ctx.prec = PRECISION
        price = Decimal(str(alert.price)) if alert.price else get_simulated_price(alert.symbol)
        quantity = Decimal(str(size)).quantize(QUANTITY_STEP, rounding=ROUND_DOWN)
        cost = quantity * price
        fee = cost * FEE_RATE

    return {
        'id': f"sim_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}",
        'symbol': alert.symbol,
        'side': alert.action,
        'quantity': str(quantity),
        'price': str(price),
        'cost': str(cost),
        'fee': {'cost': str(fee), 'currency': quote},
        'status': 'closed',
        'simulated': True,
    }
