"""CLI entry point for the ledger analytics engine."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import click

from .core.enums import TagFilterMode


def _read_json(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"Cannot read {path}: {exc}") from exc


def _load_records(path: str) -> list[dict[str, Any]]:
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise click.ClickException(f"{path}: expected a list of trades")
    return data


def _build_report(
    trades_file: str,
    prices: str | None,
    balance: float | None,
    config: str | None,
    settings_dir: str | None,
    today: str | None,
    strict: bool,
    filters: dict[str, Any],
):
    from .core.clock import FixedClock, WallClock
    from .core.config import load_settings
    from .core.errors import AnalyticsError
    from .engine import AnalyticsEngine
    from .filters import TradeFilter
    from .ledger.position import parse_trades
    from .observability.logger import setup_logging
    from .storage.settings_store import (
        JsonFileSettingsStore,
        load_balance_history,
        load_goals,
        load_risk_settings,
    )

    overrides: dict[str, Any] = {"strict": True} if strict else {}
    try:
        settings = load_settings(config, overrides)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format)

    try:
        clock = FixedClock(date.fromisoformat(today)) if today else WallClock()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--today") from exc
    engine = AnalyticsEngine(settings=settings, clock=clock)

    kwargs: dict[str, Any] = {}
    if prices:
        kwargs["current_prices"] = _read_json(prices)
    if settings_dir:
        store = JsonFileSettingsStore(settings_dir)
        try:
            kwargs["risk_settings"] = load_risk_settings(store)
            kwargs["monthly_goals"] = load_goals(store)
            history = load_balance_history(store)
        except AnalyticsError as exc:
            raise click.ClickException(str(exc)) from exc
        if history and balance is None:
            kwargs["account_balance"] = history[0].balance
    if balance is not None:
        kwargs["account_balance"] = balance

    records = _load_records(trades_file)
    trade_filter = TradeFilter(**filters)
    try:
        if trade_filter.is_empty:
            return engine.run_records(records, **kwargs)
        trades, errors = parse_trades(records)
        if errors and settings.strict:
            raise errors[0]
        report = engine.run(trade_filter.apply(trades), **kwargs)
        report.ledger.rejected[:0] = errors
        return report
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc


def _report_options(func):
    options = [
        click.argument("trades_file", type=click.Path(exists=True, dir_okay=False)),
        click.option("--prices", default=None, type=click.Path(exists=True, dir_okay=False),
                     help="JSON object of symbol -> current price"),
        click.option("--balance", default=None, type=float, help="Account balance"),
        click.option("--config", default=None, help="TOML config file path"),
        click.option("--settings-dir", default=None,
                     help="Directory of saved risk settings, balances and goals"),
        click.option("--today", default=None, help="Pin the current date (YYYY-MM-DD)"),
        click.option("--strict", is_flag=True, help="Fail on the first malformed trade"),
        click.option("--symbol", "symbol_query", default="", help="Symbol substring filter"),
        click.option("--tag", "tag_query", default="", help="Tag keywords, comma separated"),
        click.option("--tag-mode", type=click.Choice([m.value for m in TagFilterMode]),
                     default=TagFilterMode.OR.value, help="Combine tag keywords with AND/OR"),
        click.option("--from", "date_from", default=None, help="First trade date (YYYY-MM-DD)"),
        click.option("--to", "date_to", default=None, help="Last trade date (YYYY-MM-DD)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _filters(
    symbol_query: str,
    tag_query: str,
    tag_mode: str,
    date_from: str | None,
    date_to: str | None,
) -> dict[str, Any]:
    try:
        return {
            "symbol_query": symbol_query,
            "tag_query": tag_query,
            "tag_mode": TagFilterMode(tag_mode),
            "date_from": date.fromisoformat(date_from) if date_from else None,
            "date_to": date.fromisoformat(date_to) if date_to else None,
        }
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
def main() -> None:
    """Trade-ledger analytics."""


@main.command()
@_report_options
@click.option("--indent", default=2, type=int, help="JSON indent (0 for compact)")
def analyze(
    trades_file: str,
    prices: str | None,
    balance: float | None,
    config: str | None,
    settings_dir: str | None,
    today: str | None,
    strict: bool,
    symbol_query: str,
    tag_query: str,
    tag_mode: str,
    date_from: str | None,
    date_to: str | None,
    indent: int,
) -> None:
    """Analyze a trades JSON file and print the report as JSON."""
    report = _build_report(
        trades_file, prices, balance, config, settings_dir, today, strict,
        _filters(symbol_query, tag_query, tag_mode, date_from, date_to),
    )
    click.echo(report.to_json(indent=indent or None))


@main.command()
@_report_options
def fingerprint(
    trades_file: str,
    prices: str | None,
    balance: float | None,
    config: str | None,
    settings_dir: str | None,
    today: str | None,
    strict: bool,
    symbol_query: str,
    tag_query: str,
    tag_mode: str,
    date_from: str | None,
    date_to: str | None,
) -> None:
    """Print the SHA-256 fingerprint of the report."""
    report = _build_report(
        trades_file, prices, balance, config, settings_dir, today, strict,
        _filters(symbol_query, tag_query, tag_mode, date_from, date_to),
    )
    click.echo(report.fingerprint())


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
def tags(trades_file: str) -> None:
    """List every tag used in a trades JSON file."""
    from .filters import available_tags
    from .ledger.position import parse_trades

    trades, _ = parse_trades(_load_records(trades_file))
    for tag in available_tags(trades):
        click.echo(tag)


@main.command("set-goal")
@click.argument("settings_dir")
@click.option("--month", "month_key", required=True, help="Month (YYYY-MM)")
@click.option("--pnl", "target_pnl", default="0", help="Target realized PnL")
@click.option("--trades", "target_trades", default=0, type=int, help="Target closing trades")
@click.option("--win-rate", "target_win_rate", default=0.0, type=float, help="Target win rate (%)")
def set_goal(
    settings_dir: str,
    month_key: str,
    target_pnl: str,
    target_trades: int,
    target_win_rate: float,
) -> None:
    """Create or replace the goal for one month."""
    from pydantic import ValidationError

    from .core.errors import AnalyticsError
    from .core.models import MonthlyGoal
    from .storage.settings_store import JsonFileSettingsStore, upsert_goal

    year, _, month = month_key.partition("-")
    try:
        goal = MonthlyGoal(
            year=int(year),
            month=int(month),
            target_pnl=target_pnl,
            target_trades=target_trades,
            target_win_rate=target_win_rate,
        )
    except (ValueError, ValidationError) as exc:
        raise click.BadParameter(str(exc)) from exc
    try:
        upsert_goal(JsonFileSettingsStore(Path(settings_dir)), goal)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Goal saved for {goal.month_key}")


if __name__ == "__main__":
    main()
