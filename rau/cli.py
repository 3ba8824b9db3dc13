"""CLI interface for rau using Click."""

import logging
import sys
from typing import List, Optional, Tuple

import click
from click.shell_completion import CompletionItem

from . import __version__
from .classifier import classify
from .config import Settings
from .dispatcher import dispatch
from .errors import RauError
from .field_cache import FieldCache
from .http_client import AirtableClient

logger = logging.getLogger(__name__)


def _colorize(text: str, color: str, stream=None) -> str:
    """Colorize text using ANSI codes when ``stream`` is a TTY."""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "reset": "\033[0m",
        "bold": "\033[1m",
    }
    stream = stream or sys.stdout
    if not stream.isatty():
        return text
    return f"{colors.get(color, '')}{text}{colors['reset']}"


def _print_error(message: str):
    """Print a terminal error to stderr."""
    click.echo(_colorize(f"Error: {message}", "red", sys.stderr), err=True)


def _setup_logging(verbose: bool):
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("rau")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


# -- Shell completion -------------------------------------------------------


def _complete_config(ctx: click.Context, param, incomplete: str) -> List[CompletionItem]:
    """Complete configuration names from the config file."""
    try:
        settings = Settings.load(ctx.params.get("config_file"))
    except RauError:
        return []
    return [
        CompletionItem(name, help="Configuration name")
        for name in settings.names()
        if name.startswith(incomplete)
    ]


def _complete_field(ctx: click.Context, param, incomplete: str) -> List[CompletionItem]:
    """Complete field names from the cache; never hits the network."""
    name = ctx.params.get("config_name")
    if not name or not ctx.params.get("tokens"):
        return []
    fields = FieldCache(ctx.params.get("cache_file")).cached(name) or []
    return [
        CompletionItem(f.name, help=f.type)
        for f in fields
        if f.name.startswith(incomplete)
    ]


# -- Command ----------------------------------------------------------------


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("config_name", shell_complete=_complete_config)
@click.argument(
    "tokens", nargs=-1, metavar="[RECORD_ID] [FIELD[=VALUE]]...",
    shell_complete=_complete_field,
)
@click.option("-s", "--schema", is_flag=True, help="Output the table schema (field names and types)")
@click.option("-f", "--fields", is_flag=True, help="Refresh the field cache and output updatable field names")
@click.option("-r", "--recent", is_flag=True, help="Output the 100 most recent record IDs and their names")
@click.option("--json", "json_output", is_flag=True, help="Output records as JSON")
@click.option(
    "--config-file", type=click.Path(dir_okay=False), envvar="RAU_CONFIG",
    help="Config file (default: ~/.rau/config.toml)",
)
@click.option(
    "--cache-file", type=click.Path(dir_okay=False), envvar="RAU_CACHE",
    help="Field cache file (default: ~/.rau/fields_cache.json)",
)
@click.option("-v", "--verbose", is_flag=True, help="Log requests to stderr")
@click.version_option(version=__version__)
def main(
    config_name: str,
    tokens: Tuple[str, ...],
    schema: bool,
    fields: bool,
    recent: bool,
    json_output: bool,
    config_file: Optional[str],
    cache_file: Optional[str],
    verbose: bool,
):
    """Update or query Airtable records from the command line.

    \b
    Examples:
      rau people                          create an empty record, print its ID
      rau people Name=Ada Age=36          create a record with values
      rau people recXXXX                  print every field of a record
      rau people recXXXX Name Age         print selected fields
      rau people recXXXX Age=37 Tags='["a","b"]'
                                          update fields (values are JSON or text)
      rau people --schema | --fields | --recent
    """
    _setup_logging(verbose)
    try:
        settings = Settings.load(config_file)
        config = settings.resolve(config_name)
        request = classify(tokens, schema=schema, fields=fields, recent=recent)
        client = AirtableClient(config.api_key, base_url=config.api_url)
        exit_code = dispatch(request, config, client, FieldCache(cache_file), json_output=json_output)
    except RauError as e:
        _print_error(str(e))
        sys.exit(e.exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
