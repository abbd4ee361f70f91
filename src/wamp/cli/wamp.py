"""
wamp - Transpiler Command-Line Interface
========================================

Command-line interface for the wamp transpiler. Input files are merged in
the order given into one WebAssembly text-format module.

Usage Examples
--------------
Print the combined module:
    $ wamp main.wam

Merge several files into one output:
    $ wamp runtime.wam main.wam -o program.wat

Larger memory and a data layout listing:
    $ wamp -m 1024 -s program.sym main.wam -o program.wat

Verbose mode:
    $ wamp -v main.wam -o program.wat
"""

import logging
from pathlib import Path
from typing import Optional

import click

from wamp import __version__
from wamp.cli.errors import handle_cli_exception
from wamp.config import DEFAULT_MEMORY_SIZE, MEMORY_SIZE_ENV, TranspilerConfig
from wamp.transpiler import Transpiler


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def write_outputs(outputs: list[tuple[Path, str]]) -> None:
    """
    Write every (path, text) pair, or none of them.

    If a write fails, files already written by this call are removed
    before the error is re-raised.
    """
    written: list[Path] = []
    try:
        for path, text in outputs:
            path.write_text(text, encoding="utf-8")
            written.append(path)
    except OSError:
        for path in written:
            logger.debug(f"Removing {path}")
            path.unlink(missing_ok=True)
        raise


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: write to stdout)",
)
@click.option(
    "-m", "--memory-size",
    type=int,
    default=DEFAULT_MEMORY_SIZE,
    show_default=True,
    envvar=MEMORY_SIZE_ENV,
    help="Pages (64 KiB each) in the imported memory",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the static data layout (symbol, offset, size)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="wamp")
def main(
    input_files: tuple[Path, ...],
    output: Optional[Path],
    memory_size: int,
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Transpile wamp source into WebAssembly text format.

    INPUT_FILES are merged, in the order given, into one module whose
    name joins the names of all input modules with '__'.

    \b
    Examples:
        wamp main.wam                    # Print to stdout
        wamp lib.wam main.wam -o out.wat # Merge two modules
        wamp -m 1024 main.wam            # 64 MiB of memory
    """
    setup_logging(verbose)

    try:
        config = TranspilerConfig(memory_size=memory_size)
        transpiler = Transpiler(config, verbose=verbose)

        for path in input_files:
            logger.debug(f"Reading {path}")
            transpiler.add_file(path)

        # Both texts are built before anything is written
        text = transpiler.emit()
        listing = transpiler.format_symbols() if symbols is not None else None

        outputs = []
        if output is not None:
            outputs.append((output, text))
        if symbols is not None:
            outputs.append((symbols, listing))
        write_outputs(outputs)

        if output is None:
            click.echo(text)
        elif verbose:
            click.echo(f"Wrote {len(text)} characters to {output}", err=True)
        if symbols is not None and verbose:
            click.echo(f"Wrote data layout to {symbols}", err=True)

        if verbose:
            layout = transpiler.get_layout()
            click.echo(
                f"Transpile complete: {len(input_files)} files, "
                f"{len(layout.entries)} data slots, {layout.end} bytes of static data",
                err=True,
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Transpile")


if __name__ == "__main__":
    main()
