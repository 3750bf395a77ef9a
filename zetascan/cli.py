"""Command line interface for Zetascan reputation lookups."""

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .client import ZetascanClient
from .config import ApiConfig, init_config
from .errors import ConfigurationError, ZetascanError
from .evaluator import is_blacklisted, is_match, is_whitelisted, score, web_score
from .verify import run_verification, summarize
from .writer import ResultsManager

app = typer.Typer(
    name="zetascan",
    help="Domain and IP reputation lookups against the Zetascan service",
    add_completion=False
)
console = Console()

METHOD_HELP = "Query method (http, text, json, jsonx, dns)"


def setup_logging(log_level: str) -> None:
    """Configure logging with Rich handler."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=Console(stderr=True))]
    )

    # Reduce noise from httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_config(
    method: str,
    key: Optional[str],
    ssl: bool,
    ip_check: bool,
    host: str
) -> ApiConfig:
    """Build the configuration from CLI options, exiting on invalid input."""
    try:
        return init_config(
            api_key=key,
            ip_check=ip_check,
            ssl=ssl,
            method=method.lower(),
            host=host,
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)


@app.command()
def check(
    item: str = typer.Argument(..., help="Domain or IP address to look up"),
    method: str = typer.Option("http", "--method", "-m", envvar="ZETASCAN_METHOD", help=METHOD_HELP),
    key: Optional[str] = typer.Option(None, "--key", envvar="ZETASCAN_API_KEY", help="API key"),
    ssl: bool = typer.Option(True, "--ssl/--no-ssl", help="Use https"),
    ip_check: bool = typer.Option(False, "--ip-check", help="Provider authorizes this host by IP"),
    host: str = typer.Option("api.zetascan.com", "--host", help="API host / DNS zone server"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
) -> None:
    """
    Look up the reputation of a single domain or IP.
    """
    setup_logging(log_level)
    config = build_config(method, key, ssl, ip_check, host)

    try:
        with ZetascanClient(config) as client:
            result = client.query(item)
    except ZetascanError as e:
        console.print(f"[red]Lookup failed: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=result.to_dict())
        return

    table = Table(title=f"{result.item} ({result.transport.value})")
    table.add_column("Signal")
    table.add_column("Value")

    table.add_row("Match", str(is_match(result)))
    table.add_row("Blacklisted", str(is_blacklisted(result)))
    table.add_row("Whitelisted", str(is_whitelisted(result)))

    # Only show what the transport actually reports
    if result.provides("score"):
        table.add_row("Score", f"{score(result):g}")
        table.add_row("Web score", f"{web_score(result):g}")
    if result.provides("sources"):
        table.add_row("Sources", ", ".join(result.sources) or "-")
    if result.provides("return_codes"):
        table.add_row("Return codes", ", ".join(result.return_codes) or "-")
        table.add_row("Categories", ", ".join(c.value for c in result.categories) or "-")

    console.print(table)


@app.command()
def verify(
    method: str = typer.Option("http", "--method", "-m", envvar="ZETASCAN_METHOD", help=METHOD_HELP),
    key: Optional[str] = typer.Option(None, "--key", envvar="ZETASCAN_API_KEY", help="API key"),
    ssl: bool = typer.Option(True, "--ssl/--no-ssl", help="Use https"),
    ip_check: bool = typer.Option(False, "--ip-check", help="Provider authorizes this host by IP"),
    host: str = typer.Option("api.zetascan.com", "--host", help="API host / DNS zone server"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every query and response"),
    out_csv: Optional[Path] = typer.Option(None, "--out-csv", help="Output CSV file path"),
    out_jsonl: Optional[Path] = typer.Option(None, "--out-jsonl", help="Output JSON Lines file path"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
) -> None:
    """
    Run the self-test battery of known good and known bad items.

    Exits with status 1 when any case does not return the expected verdict.
    """
    setup_logging("INFO" if verbose else log_level)
    config = build_config(method, key, ssl, ip_check, host)

    console.print(f"[green]Verifying {config.host} with method {config.method}[/green]")

    start_time = time.monotonic()

    with ResultsManager(out_csv, out_jsonl) as results_manager:
        with ZetascanClient(config) as client:
            results = run_verification(client, verbose=verbose)

        for result in results:
            results_manager.write_result(result)

    summary = summarize(results, time.monotonic() - start_time)

    table = Table()
    table.add_column("Item")
    table.add_column("Expected")
    table.add_column("Match")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Result")

    for result in results:
        if result.error:
            outcome = f"[red]error: {result.error}[/red]"
        elif result.passed:
            outcome = "[green]ok[/green]"
        else:
            outcome = "[red]failed[/red]"
        table.add_row(
            result.item,
            str(result.expected),
            str(result.match),
            str(result.time_elapsed_ms),
            outcome,
        )

    console.print(table)
    console.print(f"Cases passed: {summary['cases_passed']}/{summary['cases_total']}")
    console.print(f"Average response time: {summary['average_response_time_ms']}ms")
    console.print(f"Max response time: {summary['max_response_time_ms']}ms")

    if out_csv:
        console.print(f"Results saved to: {out_csv}")
    if out_jsonl:
        console.print(f"Results saved to: {out_jsonl}")

    if summary["cases_failed"]:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
