# file: src/oil_production/cli.py
from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.oil_production.config import load_settings
from src.oil_production.errors import ConfigurationError, PipelineStageError
from src.oil_production.pipeline import run_pipeline
from src.oil_production.states import get_state_info, list_states, parse_state_list
from src.oil_production.summary import top_producers
from src.oil_production.validate import print_validation_report

app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


@app.command()
def run(
    states: Optional[str] = typer.Option(None, help="Comma-separated state codes (default: all)"),
    output: Optional[str] = typer.Option(None, help="CSV output path"),
    max_workers: Optional[int] = typer.Option(None, help="Parallel fetch workers"),
    timeout: Optional[float] = typer.Option(None, help="Per-request timeout in seconds"),
    key_file: Optional[str] = typer.Option(None, help="File holding the EIA API key"),
    no_write: bool = typer.Option(False, "--no-write", help="Skip writing the CSV"),
):
    """Fetch, clean and export monthly crude oil production by state."""
    try:
        settings = load_settings(
            key_file=key_file,
            states=parse_state_list(states) if states is not None else None,
            max_workers=max_workers,
            timeout=timeout,
            output_path=output,
        )
        result = run_pipeline(settings, write=not no_write)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1)
    except PipelineStageError as e:
        console.print(f"[red]Stage '{e.stage}' failed:[/red] {e.cause}")
        raise typer.Exit(code=1)

    print_validation_report(result.validation)

    table = Table(title="Pipeline Results")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in result.as_dict().items():
        table.add_row(str(k), str(v))
    console.print(table)

    if result.fetch_summary.failed:
        failed = Table(title="Failed States")
        failed.add_column("State", style="red")
        failed.add_column("Error")
        for code, msg in sorted(result.fetch_summary.failed.items()):
            failed.add_row(code, msg[:120])
        console.print(failed)

    top = top_producers(result.dataset, n=5)
    if not top.empty:
        ranking = Table(title=f"Top Producers {int(top['year'].iloc[0])} (thousand barrels)")
        ranking.add_column("#")
        ranking.add_column("State", style="cyan")
        ranking.add_column("Total", justify="right", style="green")
        for row in top.itertuples(index=False):
            ranking.add_row(str(row.rank), row.entity_name, f"{row.total:,.0f}")
        console.print(ranking)


@app.command("states")
def list_states_cmd():
    """List the known state codes."""
    table = Table(title="States")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("PADD")
    for code in list_states():
        info = get_state_info(code)
        table.add_row(code, info.name, info.region)
    console.print(table)


if __name__ == "__main__":
    app()
