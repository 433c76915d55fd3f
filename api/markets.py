import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

import ccxt

from api.errors import ApiError

logger = logging.getLogger(__name__)


def retry_on_network_error(max_retries=5, delay=1):
    """Retry ccxt network failures, doubling the wait each time.

    Exchange errors that are not transport problems (bad symbol, auth) are
    raised straight away; the last network error is re-raised once
    `max_retries` attempts are used up.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except ccxt.NetworkError as e:
                    if attempt == max_retries - 1:
                        logger.error(f"Max retries reached. Last error: {str(e)}")
                        raise
                    logger.warning(f"Request failed, retrying ({attempt + 1}/{max_retries}): {str(e)}")
                    time.sleep(delay * (2 ** attempt))  # exponential backoff
        return wrapper
    return decorator


def create_exchange(exchange_id: str) -> Any:
    exchange_class = getattr(ccxt, exchange_id, None)
    if exchange_id not in ccxt.exchanges or exchange_class is None:
        raise ApiError(f"Unknown exchange: {exchange_id}", 400)
    return exchange_class({'enableRateLimit': True})


@retry_on_network_error()
def load_markets(exchange) -> Dict[str, dict]:
    return exchange.load_markets()


def list_btc_markets(exchange_id: str = 'hyperliquid',
                     client_factory: Optional[Callable[[str], Any]] = None) -> List[dict]:
    exchange = (client_factory or create_exchange)(exchange_id)
    markets = load_markets(exchange)
    btc_markets = [
        {
            'symbol': symbol,
            'type': market.get('type'),
            'spot': bool(market.get('spot')),
            'perpetual': bool(market.get('swap')),
        }
        for symbol, market in markets.items()
        if 'BTC' in symbol
    ]
    logger.info(f"Found {len(btc_markets)} BTC markets on {exchange_id}")
    return btc_markets
