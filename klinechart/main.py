"""Command line entry point: run the price proxy or render a chart snapshot."""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import ConfigError, load_config
from .marketdata.providers.base import KlineProvider, UpstreamError
from .marketdata.providers.binance import BinanceProvider
from .marketdata.providers.mock import MockProvider
from .utils.formatting import threshold_range_for
from .utils.logger import setup_logging
from .utils.params import ChartParams, build_query, load_from_query
from .visualization.components.chart import ChartDimensions, PriceChart
from .visualization.overlays import CurrentPriceLine, MiddleLine, PriceGuide, RangeMeasure
from .visualization.utils.renderer import save_snapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="klinechart", description="Cached kline price proxy and chart tools")
    parser.add_argument("--config", type=str, help="Path to YAML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the price proxy server")
    serve.add_argument("--host", type=str, help="Bind address (overrides config)")
    serve.add_argument("--port", type=int, help="Port (overrides config and PORT)")

    snapshot = subparsers.add_parser("snapshot", help="Render a chart of recent prices to PNG")
    snapshot.add_argument("output", type=str, help="Output PNG path")
    snapshot.add_argument("--symbol", type=str, help="Trading pair, e.g. BTCUSDT")
    snapshot.add_argument("--interval", type=str, help="Kline interval, e.g. 1h")
    snapshot.add_argument("--limit", type=int, help="Number of klines")
    snapshot.add_argument("--width", type=float, default=800.0, help="Image width in pixels")
    snapshot.add_argument("--height", type=float, default=450.0, help="Image height in pixels")
    snapshot.add_argument("--mock", action="store_true", help="Use generated prices instead of Binance")
    snapshot.add_argument("--query", type=str, default="", help="Chart URL query, e.g. 'symbol=ETHUSDT&interval=1h&limit=96'")
    return parser


def serve(config, host: Optional[str] = None, port: Optional[int] = None) -> None:
    import uvicorn

    from .server.app import create_app

    app = create_app(config)
    host = host or config.host
    port = port or config.port
    logger.info(f"Server running on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=config.log_level.lower())


def snapshot(config, args: argparse.Namespace) -> None:
    provider: KlineProvider
    if args.mock:
        provider = MockProvider()
    else:
        provider = BinanceProvider(base_url=config.upstream_url, timeout=config.request_timeout)

    defaults = ChartParams(
        symbol=config.default_symbol,
        interval=config.default_interval,
        limit=config.default_limit,
    )
    params, slider = load_from_query(args.query, defaults)
    # Explicit options win over the query
    params.symbol = args.symbol or params.symbol
    params.interval = args.interval or params.interval
    params.limit = args.limit or params.limit
    prices = provider.fetch_prices(params.symbol, params.interval, params.limit)

    chart = PriceChart(ChartDimensions.for_container(args.width, args.height))
    chart.overlays.add(CurrentPriceLine())
    chart.overlays.add(MiddleLine())
    chart.overlays.add(PriceGuide())
    chart.overlays.add(RangeMeasure())
    chart.set_data(prices)

    save_snapshot(chart, args.output)
    print(f"Wrote {len(prices)} {params.symbol} {params.interval} prices to {args.output}")
    if prices:
        threshold_range = replace(threshold_range_for(prices[-1]['price']), **slider)
        print(f"Query: ?{build_query(params, threshold_range)}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, config.log_file)

    if args.command == "serve":
        serve(config, args.host, args.port)
        return 0

    try:
        snapshot(config, args)
    except (UpstreamError, ValueError) as e:
        logger.error(f"Snapshot failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
