"""Command-line interface for SCRU64.

Writes newly generated SCRU64 IDs to stdout, one per line, using the node
configuration from the SCRU64_NODE_SPEC environment variable.

Example:
    >>> # From terminal:
    >>> # SCRU64_NODE_SPEC=42/8 scru64
    >>> # SCRU64_NODE_SPEC=42/8 scru64 -n 4
    >>> # scru64 --version
"""

import re
from typing import Annotated

import typer

from scru64 import __version__
from scru64.config import GeneratorSettings
from scru64.errors import Scru64Error
from scru64.observability import get_logger

app = typer.Typer(add_completion=False)

logger = get_logger(__name__)

_COUNT_RE = re.compile(r"[0-9]+")


def _version_callback(value: bool) -> None:
    """Print the version and exit when requested."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


VERSION_OPTION = typer.Option(
    False,
    "--version",
    help="Show SCRU64 version and exit.",
    callback=_version_callback,
    is_eager=True,
)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


@app.command()
def generate(
    count: Annotated[
        str,
        typer.Option("--count", "-n", metavar="COUNT", help="Number of IDs to generate."),
    ] = "1",
    version: bool = VERSION_OPTION,
) -> None:
    """Write COUNT SCRU64 ID strings to stdout, one per line.

    Usage: SCRU64_NODE_SPEC=<spec> scru64 [-n <count>]

    The node spec (e.g. 42/8) is read from the SCRU64_NODE_SPEC environment
    variable.
    """
    # a malformed count exits 1, like a configuration error
    if _COUNT_RE.fullmatch(count) is None:
        raise _fail("Invalid argument to option '-n, --count <value>'")

    try:
        generator = GeneratorSettings.from_env().create_generator()
    except Scru64Error as exc:
        logger.debug("scru64.cli.config_failed", code=exc.code, details=exc.details)
        raise _fail(exc.message) from exc

    for _ in range(int(count, 10)):
        typer.echo(str(generator.generate_or_sleep()))


def main() -> None:
    """Run the SCRU64 CLI."""
    app()


if __name__ == "__main__":
    main()
