import argparse
import sys

from api.errors import ApiError
from api.logger import configure_logging
from api.markets import list_btc_markets


def main(argv=None):
    parser = argparse.ArgumentParser(description="List Bitcoin markets available on an exchange")
    parser.add_argument('exchange', nargs='?', default='hyperliquid')
    args = parser.parse_args(argv)

    configure_logging()
    try:
        markets = list_btc_markets(args.exchange)
    except ApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    print(f"Bitcoin markets on {args.exchange}:")
    for market in markets:
        print(f"{market['symbol']}: type={market['type']}, "
              f"spot={'Yes' if market['spot'] else 'No'}, "
              f"perpetual={'Yes' if market['perpetual'] else 'No'}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
