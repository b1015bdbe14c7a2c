"""CLI entry point: validates the base directory and runs the adapter session."""

import logging
import os
from typing import Optional

import click

from common.constants import PROGRAM_NAME, VERSION
from common.logging_config import setup_logging
from folderstore.config import load_config
from folderstore.session import serve

LOGGER_NAMES = ("cli", "common", "folderstore")

EXIT_MISSING_BASEDIR = 1
EXIT_INVALID_BASEDIR = 3

EPILOG = """\b
This tool should only be called by git-lfs as documented in Custom Transfers:
https://github.com/git-lfs/git-lfs/blob/main/docs/custom-transfers.md

\b
The arguments should be provided via gitconfig at lfs.customtransfer.<name>.args
"""


def _fail(ctx: click.Context, message: str, code: int) -> None:
    click.echo(message, err=True)
    click.echo(ctx.get_usage(), err=True)
    ctx.exit(code)


@click.command(name=PROGRAM_NAME, epilog=EPILOG)
@click.argument('basedir', required=False)
@click.option('-d', '--basedir', 'basedir_option', default=None, help='Base directory for all file operations')
@click.option('--hardlinks', is_flag=True, help='Hard-link uploads into the store when possible')
@click.option('--debug', is_flag=True, help='Enable debug logging on stderr')
@click.option('--version', 'print_version', is_flag=True, help='Report the version number and exit')
@click.pass_context
def main(
    ctx: click.Context,
    basedir: Optional[str],
    basedir_option: Optional[str],
    hardlinks: bool,
    debug: bool,
    print_version: bool
) -> None:
    """git-lfs custom transfer adapter that stores all data in a folder.

    BASEDIR, probably a shared folder, is treated as the remote store for all
    LFS object data. Uploads and downloads become plain file copies to
    destinations determined by the id of each object.
    """
    if print_version:
        click.echo(f"{PROGRAM_NAME} {VERSION}", err=True)
        ctx.exit(0)

    base_dir = (basedir or basedir_option or "").strip()
    if not base_dir:
        _fail(ctx, "Required: base directory", EXIT_MISSING_BASEDIR)

    if not os.path.isdir(base_dir):
        _fail(ctx, f"{base_dir!r} does not exist or is not a directory", EXIT_INVALID_BASEDIR)

    log_level = 'DEBUG' if debug else None
    for name in LOGGER_NAMES:
        setup_logging(name, log_level=log_level)
    logger = logging.getLogger(__name__)
    logger.debug("Debug logging enabled")

    config = load_config(base_dir, use_hardlinks=hardlinks or None)
    logger.info(f"Serving object store at {config.base_dir!r} (hardlinks={config.use_hardlinks})")
    serve(config, click.get_binary_stream('stdin'), click.get_text_stream('stdout'))


if __name__ == "__main__":
    main()
