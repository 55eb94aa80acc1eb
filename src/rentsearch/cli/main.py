"""
rentsearch CLI

Command-line interface for searching a vehicle catalog.

Usage::

    rentsearch search tesla               # Ranked matches
    rentsearch suggest vf --select 2      # Suggestion list + what Enter would do
    rentsearch check "tesla model y"      # Is the named vehicle bookable?
    rentsearch stats                      # Catalog statistics
    rentsearch browse                     # Interactive search box
    rentsearch mcp                        # Start the MCP server
"""

import json
import logging
import time

import click

from rentsearch.client import RentSearch
from rentsearch.core.config import SearchConfig
from rentsearch.core.debounce import ImmediateScheduler
from rentsearch.core.search import ResultFormatter, describe_record
from rentsearch.exceptions import RentSearchError


# ---------------------------------------------------------------------------
# Logging helpers
# ---------------------------------------------------------------------------

def _configure_logging(verbose: bool, config: SearchConfig | None = None) -> None:
    """Set up logging for the CLI session."""
    cfg = config or SearchConfig.from_env()
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level, logging.INFO)
    logging.basicConfig(level=level, format=cfg.log_format)
    # Observer threads are chatty at debug level
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def _emphasis(text: str) -> str:
    return click.style(text, bold=True, fg="yellow")


def _client(ctx: click.Context) -> RentSearch:
    """Build the facade from the group options, exiting on config errors."""
    obj = ctx.obj
    config = SearchConfig.from_env()
    if obj.get("catalog"):
        config.catalog_path = obj["catalog"]
    try:
        config.validate()
        client = RentSearch(config=config)
        client.catalog  # load now so errors surface here
    except RentSearchError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    return client


# ---------------------------------------------------------------------------
# Top-level group
# ---------------------------------------------------------------------------

@click.group()
@click.version_option(package_name="rentsearch")
@click.option(
    "-c", "--catalog",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="RENTSEARCH_CATALOG",
    help="JSON vehicle catalog (default: $RENTSEARCH_CATALOG or the bundled sample).",
)
@click.pass_context
def cli(ctx: click.Context, catalog: str | None):
    """rentsearch: ranked, keyboard-navigable search over a vehicle catalog."""
    ctx.ensure_object(dict)
    ctx.obj["catalog"] = catalog


# ---------------------------------------------------------------------------
# rentsearch search
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("query")
@click.option("-f", "--format", "fmt",
              type=click.Choice(["console", "json", "compact"]),
              default="console", help="Output format.")
@click.option("-n", "--max-results", type=int, default=None,
              help="Maximum number of results (default: 5).")
@click.option("--explain", is_flag=True, help="Show which scoring tier matched.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def search(ctx: click.Context, query: str, fmt: str, max_results: int | None,
           explain: bool, verbose: bool):
    """Rank active vehicles for QUERY."""
    _configure_logging(verbose)
    client = _client(ctx)
    if max_results is not None:
        if max_results < 1:
            click.echo("Error: --max-results must be at least 1.", err=True)
            raise SystemExit(1)
        client.config.max_display_results = max_results

    t0 = time.perf_counter()
    results = client.rank(query)
    elapsed = time.perf_counter() - t0

    if fmt == "json":
        click.echo(ResultFormatter.format_json(results, explain=explain))
    elif fmt == "compact":
        click.echo(ResultFormatter.format_compact(results))
    else:
        click.echo(ResultFormatter.format_console(
            results, explain=explain, elapsed_time=elapsed, emphasis=_emphasis,
        ))


# ---------------------------------------------------------------------------
# rentsearch suggest
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("query")
@click.option("--select", "select", type=int, default=-1, show_default=True,
              help="Selected index before Enter (-1 = focus on the input).")
@click.option("-f", "--format", "fmt",
              type=click.Choice(["console", "json"]),
              default="console", help="Output format.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def suggest(ctx: click.Context, query: str, select: int, fmt: str, verbose: bool):
    """Show the suggestion list for QUERY and where Enter would navigate."""
    _configure_logging(verbose)
    client = _client(ctx)
    items = client.suggest(query)
    target = client.commit(query, select)

    if fmt == "json":
        click.echo(json.dumps({
            "items": [i.to_dict() for i in items],
            "selected_index": select if 0 <= select < len(items) else -1,
            "commit": target.to_dict() if target else None,
        }, indent=2, ensure_ascii=False))
        return

    click.echo(ResultFormatter.format_suggestions(items, select, query, emphasis=_emphasis))
    click.echo()
    if target is None:
        click.echo("  Enter -> plain search")
    else:
        click.echo(f"  Enter -> {target.kind}: {target.target}")


# ---------------------------------------------------------------------------
# rentsearch check
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("query")
@click.pass_context
def check(ctx: click.Context, query: str):
    """Tell whether the vehicle named by QUERY can be booked."""
    _configure_logging(False)
    client = _client(ctx)
    notice = client.check_availability(query)
    if notice is None:
        click.echo(f"No unavailable vehicle matches '{query}'.")
        return

    click.echo(notice.message)
    if notice.brand_suggestions:
        click.echo()
        click.echo("  Available alternatives:")
        for record in notice.brand_suggestions:
            click.echo(f"    - {describe_record(record)}")


# ---------------------------------------------------------------------------
# rentsearch stats
# ---------------------------------------------------------------------------

@cli.command()
@click.pass_context
def stats(ctx: click.Context):
    """Show catalog statistics."""
    _configure_logging(False)
    client = _client(ctx)
    s = client.stats()
    click.echo("─" * 50)
    click.echo("  RENTSEARCH — Catalog Statistics")
    click.echo("─" * 50)
    click.echo(f"  Catalog source : {s['source']}")
    click.echo()
    click.echo(f"  Vehicles        {s['total_vehicles']:>8,}")
    click.echo(f"  Bookable        {s['active_vehicles']:>8,}")
    click.echo()
    for status, count in s["by_status"].items():
        click.echo(f"  {status:<15} {count:>8,}")
    click.echo()
    for vtype, count in s["by_type"].items():
        click.echo(f"  {vtype:<15} {count:>8,}")
    click.echo("─" * 50)


# ---------------------------------------------------------------------------
# rentsearch browse
# ---------------------------------------------------------------------------

_BROWSE_HELP = (
    "  Type text to search.  Commands: :down :up :enter :esc :hover N "
    ":clear :quit"
)

_BROWSE_KEYS = {
    ":down": "ArrowDown",
    ":up": "ArrowUp",
    ":esc": "Escape",
    ":enter": "Enter",
}


@cli.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def browse(ctx: click.Context, verbose: bool):
    """Interactive search box driven one line at a time."""
    _configure_logging(verbose)
    client = _client(ctx)

    def on_commit(target):
        click.echo(f"  -> {target.kind}: {target.target}")

    session = client.open_session(
        ImmediateScheduler(),
        on_commit=on_commit,
        on_plain_search=lambda: click.echo("  -> plain search"),
        on_blur_input=lambda: click.echo("  (input blurred)"),
    )
    session.open()
    click.echo(_BROWSE_HELP)

    while True:
        try:
            line = click.prompt("search", default="", show_default=False, prompt_suffix="> ")
        except (KeyboardInterrupt, EOFError, click.Abort):
            click.echo("\n  Stopped.")
            break

        cmd = line.strip()
        if cmd in (":q", ":quit", ":exit"):
            click.echo("  Stopped.")
            break
        elif cmd in _BROWSE_KEYS:
            session.press(_BROWSE_KEYS[cmd])
        elif cmd.startswith(":hover"):
            parts = cmd.split()
            if len(parts) != 2 or not parts[1].lstrip("-").isdigit():
                click.echo("  Usage: :hover N")
                continue
            session.hover(int(parts[1]))
        elif cmd == ":clear":
            session.input("")
        elif cmd.startswith(":"):
            click.echo(_BROWSE_HELP)
            continue
        elif cmd:
            session.input(line)

        if session.is_open:
            click.echo(session.render(emphasis=_emphasis))
        click.echo(f"  [input: '{session.text}'  selected: {session.selected_index}]")

    session.dispose()


# ---------------------------------------------------------------------------
# rentsearch mcp
# ---------------------------------------------------------------------------

@cli.command()
@click.option("--transport", type=click.Choice(["stdio", "sse", "streamable-http"]),
              default="stdio", help="MCP transport (default: stdio).")
@click.option("-v", "--verbose", is_flag=True)
@click.pass_context
def mcp(ctx: click.Context, transport: str, verbose: bool):
    """Start the rentsearch MCP server for agent integration."""
    _configure_logging(verbose)
    try:
        from rentsearch.mcp.server import create_server  # noqa: E402
    except ImportError:
        click.echo(
            "Error: MCP dependencies not installed.\n"
            "Install with:  pip install 'rentsearch[mcp]'",
            err=True,
        )
        raise SystemExit(1)

    config = SearchConfig.from_env()
    if ctx.obj.get("catalog"):
        config.catalog_path = ctx.obj["catalog"]
    server = create_server(config)
    server.run(transport=transport)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
