"""Command line entry point."""

import logging
import os
from pathlib import Path
from typing import Annotated

import typer
import uvicorn

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

app = typer.Typer(help="Massive Wiki: a wiki of markdown files on disk.")

HomeOption = Annotated[
    Path,
    typer.Option("--home", help="Wiki home directory", envvar="MASSIVEWIKI_WIKI_HOME"),
]


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        level=logging.DEBUG if debug else logging.INFO,
    )


@app.command()
def init(home: HomeOption = Path("wiki-data")) -> None:
    """Create the wiki folders and default pages."""
    from massivewiki.core.special import initialize_wiki

    _configure_logging(debug=False)
    home = home.resolve()
    if initialize_wiki(home):
        typer.echo(f"Initialized wiki in {home}")
    else:
        typer.echo(f"Wiki already initialized in {home}")


@app.command()
def serve(
    home: HomeOption = Path("wiki-data"),
    host: Annotated[str, typer.Option(help="Interface to bind")] = "127.0.0.1",
    port: Annotated[int, typer.Option(envvar="PORT", help="Port to listen on")] = 3000,
    debug: Annotated[bool, typer.Option(envvar="MASSIVEWIKI_DEBUG")] = False,
) -> None:
    """Serve the wiki over HTTP."""
    _configure_logging(debug)
    # Settings are read when massivewiki.main is imported by uvicorn
    os.environ["MASSIVEWIKI_WIKI_HOME"] = str(home.resolve())
    os.environ["MASSIVEWIKI_DEBUG"] = "true" if debug else "false"
    uvicorn.run("massivewiki.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    app()
