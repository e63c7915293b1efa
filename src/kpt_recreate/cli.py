"""kpt-recreate CLI - Command line interface for kpt-recreate."""
import logging
import sys
from pathlib import Path

import click

from kpt_recreate.core.errors import (
    FetchError,
    KptRecreateError,
    ManifestParseError,
)
from kpt_recreate.recreate import recreate_packages

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("kpt_recreate")


@click.group()
def main():
    """kpt-recreate - Refetch kpt packages from their pinned upstreams."""
    pass


@main.command()
@click.option(
    "--dir",
    "-d",
    "source_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="The directory to recursively look for Kptfiles",
)
@click.option(
    "--out-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="The output directory to generate the output (default: a new temp dir)",
)
@click.option(
    "--kpt-binary",
    default="kpt",
    help="kpt executable used to fetch packages",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Only print the kpt commands that would run",
)
def recreate(source_dir: Path, out_dir: Path, kpt_binary: str, dry_run: bool):
    """Recreate the kpt packages in the given directory.

    Every Kptfile package is deleted and fetched again from the
    upstream repo, directory and commit it declares.

    Examples:
        kpt-recreate recreate --dir .
        kpt-recreate recreate --dir config --out-dir /tmp/config

    Exit codes:
        0: Success
        1: Generic runtime failure
        3: Invalid or incomplete Kptfile
        4: kpt fetch failed
    """
    try:
        result = recreate_packages(
            source=source_dir,
            out_dir=out_dir,
            kpt_binary=kpt_binary,
            dry_run=dry_run,
        )

        for request in result.requests:
            prefix = "[PLAN]" if dry_run else "[OK]"
            click.echo(f"{prefix} {request.destination}: {request.expression}")
        if dry_run:
            click.echo(f"[OK] {len(result.requests)} package(s) would be recreated")
        else:
            click.echo(f"[OK] Recreated {len(result.requests)} package(s)")
            click.echo(f"  Output: {result.root}")
        sys.exit(0)

    except ManifestParseError as e:
        logger.error(f"Invalid Kptfile: {str(e)}")
        sys.exit(3)

    except FetchError as e:
        logger.error(f"Fetch failed: {str(e)}")
        sys.exit(4)

    except KptRecreateError as e:
        logger.error(f"Recreate failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
