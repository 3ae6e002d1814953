"""bins CLI - upload to and download from paste services."""
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from bins import __version__, setup_logging
from bins.core.config import load_config
from bins.core.dispatcher import Bins
from bins.core.exceptions import BinsError, UsageError
from bins.core.logging import get_logger
from bins.core.options import CommandLineOptions, UrlOutputMode
from bins.core.range import RangeSelector

app = typer.Typer(
    name="bins",
    help="Upload to and download from paste services.",
    add_completion=False
)
console = Console()
logger = get_logger('bins.cli')


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def report_error(error: BinsError, as_json: bool) -> None:
    """Print an error and its causes, innermost last."""
    if as_json:
        typer.echo(json.dumps(error.to_dict()))
        return
    logger.error(f"error: {error.message}")
    for cause in error.causes:
        logger.error(cause)


def exclusive(**flags: bool) -> None:
    """Raise if more than one of the given flags is set."""
    given = [name for name, value in flags.items() if value]
    if len(given) > 1:
        raise UsageError(f"{' and '.join(given)} cannot be used together")


def tri_state(yes: bool, no: bool) -> Optional[bool]:
    if yes:
        return True
    if no:
        return False
    return None


def build_options(
    inputs: List[str],
    bin_name: Optional[str],
    list_bins: bool,
    message: Optional[str],
    private: bool,
    public: bool,
    auth: bool,
    anon: bool,
    json_output: bool,
    force: bool,
    list_all: bool,
    range_expr: Optional[str],
    name: Optional[str],
    output: Optional[Path],
    raw_urls: bool,
    html_urls: bool,
) -> CommandLineOptions:
    """
    Validate flag combinations and build the options record.

    Raises:
        UsageError: On conflicting flags
        ParseError: If the range expression is malformed
    """
    exclusive(**{'--list-bins': list_bins, '--bin': bin_name is not None})
    exclusive(**{'--private': private, '--public': public})
    exclusive(**{'--auth': auth, '--anon': anon})
    exclusive(**{'--raw-urls': raw_urls, '--html-urls': html_urls})
    exclusive(**{'--message': message is not None, 'input files': bool(inputs)})
    exclusive(**{'--range': range_expr is not None, '--name': name is not None})

    url_output = None
    if raw_urls:
        url_output = UrlOutputMode.RAW
    elif html_urls:
        url_output = UrlOutputMode.HTML

    return CommandLineOptions(
        bin=bin_name,
        inputs=tuple(inputs),
        message=message,
        list_bins=list_bins,
        private=tri_state(private, public),
        authed=tri_state(auth, anon),
        json=json_output,
        force=force,
        list_all=list_all,
        range=RangeSelector.parse(range_expr) if range_expr is not None else None,
        name=name,
        output=str(output) if output is not None else None,
        url_output=url_output,
    )


@app.command()
def bins(
    inputs: Optional[List[str]] = typer.Argument(None, help="Files to upload, or a paste URL followed by file names to download"),
    bin_name: Optional[str] = typer.Option(None, "--bin", "-b", help="Bin to upload to"),
    list_bins: bool = typer.Option(False, "--list-bins", "-l", help="List available bins"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Upload this text instead of files"),
    private: bool = typer.Option(False, "--private", "-p", help="Create a private/unlisted paste"),
    public: bool = typer.Option(False, "--public", "-P", help="Create a public paste"),
    auth: bool = typer.Option(False, "--auth", "-a", help="Paste with the configured account"),
    anon: bool = typer.Option(False, "--anon", "-A", help="Paste anonymously"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Print JSON"),
    force: bool = typer.Option(False, "--force", "-f", help="Ignore safety checks"),
    list_all: bool = typer.Option(False, "--list-all", "-L", help="List the files in a paste"),
    range_expr: Optional[str] = typer.Option(None, "--range", "-n", help="Files to download, e.g. 0,2-4,-1"),
    name: Optional[str] = typer.Option(None, "--name", "-N", help="Name for the uploaded file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Directory to download files into"),
    raw_urls: bool = typer.Option(False, "--raw-urls", "-r", help="Print raw content URLs"),
    html_urls: bool = typer.Option(False, "--html-urls", "-H", help="Print page URLs"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Show debug output"),
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
):
    """Upload to and download from paste services."""
    if version:
        console.print(f"bins {__version__}")
        raise typer.Exit()

    setup_logging(logging.DEBUG if debug else logging.INFO)

    try:
        options = build_options(
            inputs or [], bin_name, list_bins, message, private, public, auth, anon,
            json_output, force, list_all, range_expr, name, output, raw_urls, html_urls,
        )
        config = load_config()
        result = run_async(Bins(config, options).main())
    except BinsError as e:
        report_error(e, json_output)
        raise typer.Exit(1)

    if result:
        # rich expands tabs; paste content goes out verbatim
        typer.echo(result)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
