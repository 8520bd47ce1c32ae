"""Module that contains the command line app."""

import io
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Literal

from cyclopts import App, Parameter
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from . import __version__
from ._cfg import Config, ConfigurationError, config
from ._logging import LOGGER_NAME
from .exceptions import OrphanedFinishError
from .reconstruct import reconstruct
from .trace import dump, dumps

# stdout is reserved for the trace itself
err_cns = Console(stderr=True)

logger = logging.getLogger(__name__)

STDIO = Path("-")

app = App(
    name="ctest-tracing",
    help="Convert CTest console output into a Chrome trace event JSON array.",
    version=__version__,
)


def _setup_logging(verbosity: str):
    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.handlers = [
        RichHandler(rich_tracebacks=True, console=err_cns, show_path=False)
    ]
    pkg_logger.setLevel(verbosity)


def _fail(message: str):
    err_cns.print(
        f"[red]Error:[/red] {escape(message)}", soft_wrap=True, highlight=False
    )
    raise SystemExit(1)


def _read_lines(input_file: Path, cfg: Config) -> Iterator[str]:
    if input_file == STDIO:
        if isinstance(sys.stdin, io.TextIOWrapper):
            sys.stdin.reconfigure(
                encoding=cfg["encoding"], errors=cfg["encoding_errors"]
            )
        yield from sys.stdin
        return

    with input_file.open(encoding=cfg["encoding"], errors=cfg["encoding_errors"]) as fl:
        yield from fl


def _write_stdout(text: str, cfg: Config):
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    sys.stdout.flush()
    buffer.write(text.encode(cfg["encoding"]))
    buffer.flush()


def _write_output(traces, output: Path, cfg: Config):
    parent = output.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        _fail(f"Error creating parent directory {parent}: {e}")

    with output.open("w", encoding=cfg["encoding"], newline="") as fl:
        dump(traces, fl)
    logger.info(f"Wrote {len(traces)} trace(s) to {output}")


@app.default
def convert(
    input_file: Annotated[Path, Parameter(name="input")] = STDIO,
    *,
    output: Annotated[Path | None, Parameter(alias="-o")] = None,
    strict: bool | None = None,
    config_file: Annotated[Path | None, Parameter(name="--config")] = None,
    verbosity: Annotated[
        Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        Parameter(alias="-v"),
    ] = "WARNING",
):
    """Convert a CTest log into a trace that chrome://tracing or Perfetto can show.

    Parameters
    ----------
    input_file
        The CTest console log to read; ``-`` reads standard input.
    output
        Where to write the trace. Missing parent directories are created.
        Defaults to standard output.
    strict
        Fail when a test finishes without having started, instead of skipping it.
        Defaults to the ``strict`` configuration setting.
    config_file
        A YAML configuration file to read settings from.
    verbosity
        How much information to log to standard error.
    """
    _setup_logging(verbosity)

    if config_file is not None and not config_file.exists():
        _fail(f"Configuration file {config_file} does not exist")

    try:
        cfg = Config.load(config_file) if config_file is not None else config
    except (ConfigurationError, OSError) as e:
        _fail(f"Could not read the configuration: {e}")

    if strict is None:
        strict = cfg["strict"]

    try:
        traces = reconstruct(
            _read_lines(input_file, cfg),
            strict=strict,
            source="<stdin>" if input_file == STDIO else str(input_file),
        )
    except OrphanedFinishError as e:
        _fail(str(e))
    except UnicodeDecodeError as e:
        _fail(f"Could not decode {input_file} as {cfg['encoding']}: {e}")
    except OSError as e:
        _fail(f"Could not read {input_file}: {e}")

    try:
        if output is None:
            _write_stdout(dumps(traces), cfg)
        else:
            _write_output(traces, output, cfg)
    except UnicodeEncodeError as e:
        _fail(f"Could not encode the trace as {cfg['encoding']}: {e}")


def main():
    """Run the command line app."""
    app()
