"""
CLI entry point for the swing screener.

Usage:
    python -m cli.main <command> [args...]

Or if installed as console script:
    swing-screener <command> [args...]
"""
from __future__ import annotations

import logging
from typing import Optional

import click
from colorama import init as colorama_init

from bot_config import (
    ScreenerConfig,
    emit_early_env_warnings,
    load_env_file,
    load_screener_config_from_env,
)
from cli.output import format_result_json, print_error, print_result, print_stats
from display.formatters import format_condition_stats
from market.universe import select_universe, ticker_symbol, turnover_score
from notifications.telegram import notify_error
from strategy.models import ConfigError


# Configure logging for CLI
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)


def get_config(ctx: click.Context) -> ScreenerConfig:
    """Get or load the screener configuration from the environment."""
    if "config" not in ctx.obj:
        load_env_file()
        try:
            ctx.obj["config"] = load_screener_config_from_env()
        except ConfigError as exc:
            print_error(str(exc))
        emit_early_env_warnings()
    return ctx.obj["config"]


def get_client(ctx: click.Context):
    """Get or build the market data client."""
    if "client" not in ctx.obj:
        from screener import build_client

        ctx.obj["client"] = build_client(get_config(ctx))
    return ctx.obj["client"]


# ═══════════════════════════════════════════════════════════════════
# CLI GROUP AND COMMANDS
# ═══════════════════════════════════════════════════════════════════

@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Coinone daily swing screener.

    Screens the quote market's most traded assets with a daily trend/volume
    strategy and reports the top buy candidates.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command()
@click.option('--dry-run', is_flag=True, help='Print the report instead of sending it')
@click.pass_context
def run(ctx: click.Context, dry_run: bool) -> None:
    """Run one screening pass and send the summary to Telegram."""
    from screener import run_screening_pass

    config = get_config(ctx)
    try:
        report = run_screening_pass(config, get_client(ctx), send=not dry_run)
    except Exception as exc:
        logging.debug("screening pass failed", exc_info=True)
        if not dry_run:
            notify_error(config.telegram_bot_token, config.telegram_chat_id, str(exc))
        print_error(str(exc))
        return

    print_stats(format_condition_stats(report.stats))
    if report.failed:
        print(f"Skipped (fetch failed): {', '.join(report.failed)}")
    if dry_run:
        print_result("\n" + report.message)
    else:
        print_result(f"Report sent ({len(report.buys)} buy signals).")


@cli.command()
@click.argument('symbol')
@click.pass_context
def analyze(ctx: click.Context, symbol: str) -> None:
    """Evaluate a single asset on its latest daily bar

    SYMBOL: asset symbol (e.g. BTC)
    """
    from screener import analyze_symbol

    config = get_config(ctx)
    symbol = symbol.upper()
    try:
        result = analyze_symbol(get_client(ctx), symbol, config)
    except Exception as exc:
        print_error(str(exc))
        return

    if result is None:
        print_result(
            f"{symbol}: insufficient history (need {config.min_history} daily candles)",
            success=False,
        )
        return
    print_result(format_result_json(result.to_dict()))


@cli.command()
@click.option('--size', type=int, default=None, help='Universe size (default: config)')
@click.pass_context
def universe(ctx: click.Context, size: Optional[int]) -> None:
    """List the turnover-ranked universe"""
    config = get_config(ctx)
    try:
        tickers = get_client(ctx).fetch_tickers()
    except Exception as exc:
        print_error(str(exc))
        return

    symbols = select_universe(
        tickers,
        quote_currency=config.quote_currency,
        size=size or config.universe_size,
        exclude=config.excluded_symbols,
    )
    scores = {ticker_symbol(t): turnover_score(t) for t in tickers}
    lines = [
        f"{rank:>3}. {symbol:<10} {scores.get(symbol, 0.0):,.0f}"
        for rank, symbol in enumerate(symbols, start=1)
    ]
    print_result("\n".join(lines) if lines else "(empty universe)")


# ═══════════════════════════════════════════════════════════════════
# MAIN ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

def main() -> None:
    """Main entry point for CLI."""
    colorama_init()
    cli(obj={})


if __name__ == "__main__":
    main()
