"""Typer CLI for ctxbudget — inspect, compact and usage commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from ctxbudget.config import Config
from ctxbudget.data.history_store import UsageHistoryStore
from ctxbudget.data.parser import ParsedMessage, parse_session_file
from ctxbudget.models.messages import TokenUsage
from ctxbudget.models.usage import SessionUsage
from ctxbudget.services.compaction import CompactionEngine
from ctxbudget.services.evaluator import ContextEvaluator
from ctxbudget.services.formatting import (
    budget_recommendation,
    context_summary,
    format_cost,
    format_tokens,
)
from ctxbudget.services.ledger import UsageLedger

app = typer.Typer(
    name="ctxbudget",
    help="Context window budgeting, compaction preview and usage history.",
    no_args_is_help=True,
)

SessionFile = Annotated[
    Path,
    typer.Argument(
        help="Transcript: Claude JSONL or a JSON array of messages",
        exists=True,
        dir_okay=False,
    ),
]
ModelOption = Annotated[
    str, typer.Option("--model", "-m", help="Model id for limits and pricing")
]


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Directory holding usage history"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Context window budgeting for LLM conversations."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Config(data_dir=data_dir) if data_dir else Config()


def _load(path: Path) -> list[ParsedMessage]:
    try:
        parsed = list(parse_session_file(path))
    except (OSError, UnicodeDecodeError) as exc:
        typer.secho(f"Cannot read {path}: {exc}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1) from exc
    if not parsed:
        typer.secho(f"No conversation messages found in {path}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    return parsed


def _resolve_model(requested: str, parsed: list[ParsedMessage], config: Config) -> str:
    if requested:
        return requested
    recorded = [p.model for p in parsed if p.model]
    return recorded[-1] if recorded else config.model


def _has_usage(usage: TokenUsage) -> bool:
    return any(
        (
            usage.input_tokens,
            usage.output_tokens,
            usage.cache_read_tokens,
            usage.cache_creation_tokens,
        )
    )


def _replay_usage(
    parsed: list[ParsedMessage], model_id: str, *, per_entry_model: bool
) -> SessionUsage:
    """Re-track recorded usage, once per API response."""
    ledger = UsageLedger(model=model_id)
    seen: set[str] = set()
    for entry in parsed:
        if entry.message.role != "assistant" or not _has_usage(entry.usage):
            continue
        if entry.message_id:
            if entry.message_id in seen:
                continue
            seen.add(entry.message_id)
        if per_entry_model:
            ledger.set_model(entry.model or model_id)
        ledger.track(entry.usage)
    return ledger.snapshot()


@app.command()
def inspect(
    ctx: typer.Context,
    session_file: SessionFile,
    model: ModelOption = "",
) -> None:
    """Show context usage and replayed cost for a transcript."""
    config: Config = ctx.obj
    parsed = _load(session_file)
    model_id = _resolve_model(model, parsed, config)
    messages = [p.message for p in parsed]

    context = ContextEvaluator(thresholds=config.thresholds).evaluate(messages, model_id)
    snapshot = _replay_usage(parsed, model_id, per_entry_model=not model)

    typer.echo(f"Model:    {model_id}")
    typer.echo(f"Messages: {len(messages)}")
    typer.echo(
        f"Tokens:   {format_tokens(context.used_tokens)} / {format_tokens(context.max_tokens)}"
    )
    typer.echo(context_summary(context))
    if advice := budget_recommendation(context):
        typer.secho(advice, fg=typer.colors.YELLOW)
    typer.echo(
        f"Recorded: {snapshot.api_calls} calls, "
        f"{format_tokens(snapshot.total_input_tokens)} in / "
        f"{format_tokens(snapshot.total_output_tokens)} out, "
        f"{format_cost(snapshot.estimated_cost)}"
    )


@app.command()
def compact(
    ctx: typer.Context,
    session_file: SessionFile,
    model: ModelOption = "",
    keep_recent: Annotated[
        int | None,
        typer.Option("--keep-recent", "-k", help="Messages kept verbatim"),
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Compact even below the compact threshold")
    ] = False,
) -> None:
    """Preview the summary that compaction would produce."""
    config: Config = ctx.obj
    parsed = _load(session_file)
    model_id = _resolve_model(model, parsed, config)
    messages = [p.message for p in parsed]

    engine = CompactionEngine(
        ContextEvaluator(thresholds=config.thresholds),
        keep_recent=config.keep_recent if keep_recent is None else keep_recent,
    )
    if force:
        result = engine.compact(messages)
    else:
        result = engine.auto_compact_if_needed(messages, model_id)

    if not result.was_compacted:
        typer.echo(f"No compaction needed ({len(messages)} messages).")
        return
    typer.echo(result.summary)
    typer.echo("")
    typer.echo(f"{len(messages)} messages -> {len(result.messages)} messages")


@app.command("usage")
def show_usage(
    ctx: typer.Context,
    days: Annotated[int, typer.Option("--days", help="Daily buckets to show")] = 7,
) -> None:
    """Print all-time totals and recent daily usage."""
    config: Config = ctx.obj
    history = UsageHistoryStore(config.usage_file).load()
    totals = history.all_time
    typer.echo(
        f"All time: {totals.total_api_calls} calls, "
        f"{format_tokens(totals.total_input_tokens)} in / "
        f"{format_tokens(totals.total_output_tokens)} out, "
        f"{format_cost(totals.total_cost)}"
    )
    for key in sorted(history.daily, reverse=True)[: max(days, 0)]:
        bucket = history.daily[key]
        tokens = bucket.total_input_tokens + bucket.total_output_tokens
        typer.echo(
            f"  {key}  {bucket.api_calls:>5} calls  "
            f"{format_tokens(tokens):>8} tokens  {format_cost(bucket.estimated_cost)}"
        )
