# Exchanges a bot may trade on
TRADING_EXCHANGES = frozenset({'binance', 'hyperliquid', 'bitget'})

# Exchanges whose API credentials can be linked from the dashboard
CREDENTIAL_EXCHANGES = frozenset({'hyperliquid', 'bitget'})


def describe(exchanges) -> str:
    return ', '.join(sorted(exchanges))
