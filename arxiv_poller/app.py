"""Typer CLI entrypoint for arxiv-poller."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from .config import PollerConfig, load_config
from .engine import NoRecordAvailable, Poller, PollerError, build_query_url
from .logging_conf import configure_logging, session_logger

app = typer.Typer(
    help="arxiv-poller command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()
# Diagnostics go to stderr so stdout carries nothing but JSON records
err_console = Console(stderr=True)


@dataclass
class AppState:
    verbose: bool = False


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = AppState()
        ctx.obj = state
    return state


def _load_or_exit(path: Path) -> PollerConfig:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        err_console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        err_console.print(f"Invalid configuration {path}: {messages}", style="red")
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        err_console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc


def _render_config_table(path: Path, config: PollerConfig) -> Table:
    table = Table(title=f"Poller configuration · {path.name}", box=box.SIMPLE_HEAD)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", overflow="fold")
    for name, value in config.model_dump(mode="json").items():
        table.add_row(name, str(value))
    return table


def _read_position_file(path: Path | None) -> str:
    if path is None or not path.exists():
        return ""
    return path.read_text(encoding="utf-8").strip()


def _write_position_file(path: Path | None, position: str) -> None:
    if path is None or not position:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(position + "\n", encoding="utf-8")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
) -> None:
    ctx.obj = AppState(verbose=verbose)


@app.command("validate", help="Validate a configuration file and print its settings.")
def validate(
    config_path: Path = typer.Argument(..., help="YAML or JSON configuration file."),
) -> None:
    config = _load_or_exit(config_path)
    console.print(_render_config_table(config_path, config))


@app.command("url", help="Print the query URL for the page starting at OFFSET.")
def url(
    config_path: Path = typer.Argument(..., help="YAML or JSON configuration file."),
    offset: int = typer.Option(0, "--offset", min=0, help="Stream offset of the page."),
) -> None:
    config = _load_or_exit(config_path)
    try:
        query_url = build_query_url(
            config.api_url,
            config.search_query,
            config.sort_by.value,
            config.sort_order.value,
            offset,
            config.max_results,
        )
    except PollerError as exc:
        err_console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    typer.echo(query_url)


@app.command("poll", help="Poll the feed and print records as JSON lines.")
def poll(
    ctx: typer.Context,
    config_path: Path = typer.Argument(..., help="YAML or JSON configuration file."),
    position: Annotated[
        Optional[str],
        typer.Option("--position", help="Resume from this position token.", show_default=False),
    ] = None,
    position_file: Annotated[
        Optional[Path],
        typer.Option(
            "--position-file",
            help="Read the start position from this file and store the last emitted one on exit.",
            show_default=False,
        ),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", min=1, help="Stop after emitting this many records.", show_default=False),
    ] = None,
    max_empty: int = typer.Option(
        1, "--max-empty", min=1, help="Stop after this many consecutive empty polls."
    ),
    backoff: float = typer.Option(
        5.0, "--backoff", min=0.0, help="Seconds to sleep after an empty poll."
    ),
) -> None:
    state = _get_state(ctx)
    config = _load_or_exit(config_path)
    configure_logging(verbose=state.verbose)
    logger = session_logger(config_path.stem, verbose=state.verbose)

    start = position if position is not None else _read_position_file(position_file)
    poller = Poller(config, logger=logger)
    poller.open(start)
    emitted = 0
    empty_polls = 0
    try:
        while limit is None or emitted < limit:
            try:
                record = poller.next()
            except NoRecordAvailable:
                empty_polls += 1
                if empty_polls >= max_empty:
                    break
                time.sleep(backoff)
                continue
            except PollerError as exc:
                err_console.print(f"Polling failed: {exc}", style="red")
                raise typer.Exit(code=1) from exc
            empty_polls = 0
            typer.echo(json.dumps(record.to_dict(), ensure_ascii=False))
            poller.ack(record.position)
            emitted += 1
    finally:
        last_position = poller.last_position
        _write_position_file(position_file, last_position)
        poller.teardown()
    err_console.print(
        f"Emitted {emitted} record(s); last position {last_position or '-'}", style="dim"
    )


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
