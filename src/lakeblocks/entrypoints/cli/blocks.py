"""Block commands for the LAKEBLOCKS CLI.

Each command opens the store named by ``--location`` (or the
``LAKEBLOCKS_LOCATION`` environment variable), runs one operation and stops
the store again.

Output conventions
- Block data (``get``) and listings go to **stdout**; status lines go to
  **stderr** so stdout can be piped.
- Listing lines are tab-separated: ``<id>  <size>  <stored-at>``.

Failure modes
- Missing/invalid location → ``ClickException`` with guidance.
- Unknown block on ``get``/``stat`` → error message and exit status 1.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from lakeblocks import config
from lakeblocks.adapters.blockstore import LakeBlockStore, from_location
from lakeblocks.domain.blocks import ALGORITHMS, DEFAULT_ALGORITHM, Block, BlockId, BlockStats
from lakeblocks.domain.errors import (
    BlockStoreError,
    ConfigurationError,
    InvalidBlockId,
    StoreAccessDenied,
)
from lakeblocks.interfaces.blockstore import ListQuery
from lakeblocks.interfaces.namespace import NamespaceError

from .helpers import error, success, warn

MISSING_LOCATION_MSG = (
    "No store location given.\n\n"
    "Pass --location or set LAKEBLOCKS_LOCATION, e.g.:\n"
    "  export LAKEBLOCKS_LOCATION='local://scratch/blocks'"
)

CHUNK_SIZE = 1024 * 1024


class BlockIdType(click.ParamType):
    """Click parameter type accepting ``<algorithm>:<hex>`` or bare hex ids."""

    name = "block-id"

    def convert(self, value, param, ctx):  # type: ignore[no-untyped-def]
        if isinstance(value, BlockId):
            return value
        try:
            return BlockId.parse(value)
        except InvalidBlockId as e:
            self.fail(str(e), param, ctx)


BLOCK_ID = BlockIdType()

location_option = click.option(
    "--location",
    "-l",
    "location",
    help="Store location as scheme://account/path [env: LAKEBLOCKS_LOCATION].",
)


@contextmanager
def _open_store(location: str | None) -> Iterator[LakeBlockStore]:
    if not location:
        try:
            location = config.get_location()
        except config.LocationNotSetError as e:
            raise click.ClickException(MISSING_LOCATION_MSG) from e
    try:
        store = from_location(location)
        store.start()
    except StoreAccessDenied as e:
        raise click.ClickException(str(e)) from e
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid store location: {e}") from e
    try:
        yield store
    finally:
        store.stop()


def _format_stats(stats: BlockStats) -> str:
    stored_at = stats.stored_at.isoformat() if stats.stored_at else "-"
    return f"{stats.id}\t{stats.size}\t{stored_at}"


@click.command()
@location_option
@click.option(
    "--algorithm",
    "-a",
    type=click.Choice(sorted(ALGORITHMS), case_sensitive=False),
    default=DEFAULT_ALGORITHM,
    show_default=True,
    help="Hash algorithm used to identify the blocks.",
)
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
)
def put(location: str | None, algorithm: str, files: tuple[Path, ...]) -> None:
    """Store FILES as blocks and print their ids ("-" reads stdin)."""
    with _open_store(location) as store:
        for path in files:
            if str(path) == "-":
                data = click.get_binary_stream("stdin").read()
            else:
                data = path.read_bytes()
            block = store.put(Block.from_bytes(data, algorithm.lower())).result()
            click.echo(f"{block.id}\t{block.size}")
        success(f"Stored {len(files)} block(s) in {store.uri}")


@click.command()
@location_option
@click.option("--start", type=click.IntRange(min=0), help="First byte to read.")
@click.option("--end", type=click.IntRange(min=1), help="Stop reading before this byte.")
@click.argument("block_id", type=BLOCK_ID)
def get(location: str | None, start: int | None, end: int | None, block_id: BlockId) -> None:
    """Write the content of block BLOCK_ID to stdout."""
    with _open_store(location) as store:
        block = store.get(block_id).result()
        if block is None:
            error(f"Block {block_id} not found")
            sys.exit(1)
        out = click.get_binary_stream("stdout")
        with block.open(start, end) as content:
            for chunk in iter(lambda: content.read(CHUNK_SIZE), b""):
                out.write(chunk)
        out.flush()


@click.command()
@location_option
@click.argument("block_id", type=BLOCK_ID)
def stat(location: str | None, block_id: BlockId) -> None:
    """Show size, storage time and path of block BLOCK_ID."""
    with _open_store(location) as store:
        stats = store.stat(block_id).result()
        if stats is None:
            error(f"Block {block_id} not found")
            sys.exit(1)
        click.echo(f"Id       : {stats.id}")
        click.echo(f"Size     : {stats.size}")
        click.echo(f"Stored at: {stats.stored_at.isoformat() if stats.stored_at else '-'}")
        click.echo(f"Path     : {stats.location}")


@click.command(name="list")
@location_option
@click.option("--limit", type=click.IntRange(min=1), help="Maximum entries to enumerate.")
@click.option("--after", help="Only list ids whose hex sorts after this.")
@click.option("--before", help="Only list ids whose hex sorts before this.")
def list_blocks(
    location: str | None, limit: int | None, after: str | None, before: str | None
) -> None:
    """List stored blocks in id order."""
    with _open_store(location) as store:
        with store.list(ListQuery(limit=limit, after=after, before=before)) as stream:
            try:
                for stats in stream:
                    click.echo(_format_stats(stats))
            except (BlockStoreError, NamespaceError) as e:
                raise click.ClickException(f"Listing failed: {e}") from e


@click.command()
@location_option
@click.argument("block_ids", nargs=-1, required=True, type=BLOCK_ID)
def rm(location: str | None, block_ids: tuple[BlockId, ...]) -> None:
    """Delete blocks. Deleting a missing block is not an error."""
    with _open_store(location) as store:
        futures = [(block_id, store.delete(block_id)) for block_id in block_ids]
        for block_id, future in futures:
            if future.result():
                click.echo(f"deleted\t{block_id}")
            else:
                click.echo(f"absent\t{block_id}")


@click.command()
@location_option
@click.option("--yes", is_flag=True, help="Erase without confirmation.")
def erase(location: str | None, yes: bool) -> None:
    """Delete every block in the store."""
    with _open_store(location) as store:
        if not yes:
            warn(f"This will delete everything under {store.uri}.")
            click.confirm("Are you sure you want to proceed?", abort=True)
        store.erase().result()
        success(f"Erased {store.uri}")


@click.command()
@location_option
def summary(location: str | None) -> None:
    """Show how much data the store holds."""
    with _open_store(location) as store:
        usage = store.namespace.content_summary(store.root)
        click.echo(f"Store : {store.uri}")
        click.echo(f"Blocks: {usage.file_count}")
        click.echo(f"Bytes : {usage.space_consumed}")
