"""LiftOver chain file import.

Chains are read from UCSC chain format and stored as-is; no coordinate
mapping happens here. Format reference:
https://genome.ucsc.edu/goldenPath/help/chain.html

    chain score tName tSize tStrand tStart tEnd qName qSize qStrand qStart qEnd id
    size dt dq
    ...
    size
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import IO

from .batch import BatchWriter
from .exceptions import ChainFileError
from .sources import open_text
from .utils.validators import validate_genome_build

logger = logging.getLogger(__name__)

CHAIN_BATCH_SIZE = 100

HEADER_FIELDS = 13


@dataclass
class Chain:
    """A single alignment chain between two assemblies."""

    score: int
    target_name: str
    target_size: int
    target_strand: str
    target_start: int
    target_end: int
    query_name: str
    query_size: int
    query_strand: str
    query_start: int
    query_end: int
    chain_id: int
    block_sizes: list[int] = field(default_factory=list)
    target_gaps: list[int] = field(default_factory=list)
    query_gaps: list[int] = field(default_factory=list)

    def to_db_row(self, from_reference: str) -> tuple:
        return (
            from_reference,
            self.chain_id,
            self.score,
            self.target_name,
            self.target_size,
            self.target_strand,
            self.target_start,
            self.target_end,
            self.query_name,
            self.query_size,
            self.query_strand,
            self.query_start,
            self.query_end,
            self.block_sizes,
            self.target_gaps,
            self.query_gaps,
        )


def _parse_header(parts: list[str], line_number: int) -> Chain:
    if len(parts) != HEADER_FIELDS:
        raise ChainFileError(
            f"Line {line_number}: expected {HEADER_FIELDS} chain header fields, got {len(parts)}"
        )
    try:
        return Chain(
            score=int(float(parts[1])),
            target_name=parts[2],
            target_size=int(parts[3]),
            target_strand=parts[4],
            target_start=int(parts[5]),
            target_end=int(parts[6]),
            query_name=parts[7],
            query_size=int(parts[8]),
            query_strand=parts[9],
            query_start=int(parts[10]),
            query_end=int(parts[11]),
            chain_id=int(parts[12]),
        )
    except ValueError as e:
        raise ChainFileError(f"Line {line_number}: invalid chain header: {e}") from e


def parse_chains(lines: IO[str]) -> Iterator[Chain]:
    """Yield chains from an iterable of chain-format lines.

    Raises:
        ChainFileError: On malformed headers, blocks, or a truncated chain
    """
    chain: Chain | None = None
    complete = True

    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split()
        if parts[0] == "chain":
            if not complete:
                raise ChainFileError(
                    f"Line {line_number}: chain {chain.chain_id} has no final block"
                )
            chain = _parse_header(parts, line_number)
            complete = False
            continue

        if chain is None or complete:
            raise ChainFileError(f"Line {line_number}: alignment block outside of a chain")

        try:
            values = [int(v) for v in parts]
        except ValueError as e:
            raise ChainFileError(f"Line {line_number}: invalid alignment block: {e}") from e

        if len(values) == 3:
            chain.block_sizes.append(values[0])
            chain.target_gaps.append(values[1])
            chain.query_gaps.append(values[2])
        elif len(values) == 1:
            chain.block_sizes.append(values[0])
            complete = True
            yield chain
        else:
            raise ChainFileError(
                f"Line {line_number}: expected 1 or 3 block fields, got {len(values)}"
            )

    if not complete:
        raise ChainFileError(f"Chain {chain.chain_id} has no final block")


def read_chain_file(path: Path | str) -> Iterator[Chain]:
    """Yield chains from a plain or gzipped chain file."""
    with open_text(path) as f:
        yield from parse_chains(f)


async def import_chain_file(
    store,
    from_reference: str,
    chain_path: Path | str,
    batch_size: int = CHAIN_BATCH_SIZE,
) -> dict:
    """Import a liftOver chain file into the store.

    Args:
        store: Storage collaborator with an async
            ``store_chains(from_reference, list[Chain])``
        from_reference: Assembly the chain maps from (GRCh37/hg19, GRCh38/hg38)
        chain_path: Path to the chain file (plain or gzipped)
        batch_size: Chains per store call

    Returns:
        Dictionary with import statistics

    Raises:
        ValidationError: If from_reference is missing or not a known build
        ChainFileError: If the chain file is malformed
    """
    from_reference = validate_genome_build(from_reference, required=True)

    writer = BatchWriter(
        partial(store.store_chains, from_reference), batch_size, name="liftOver chains"
    )
    with open_text(chain_path) as f:
        async with writer:
            for chain in parse_chains(f):
                await writer.add(chain)

    logger.info(
        "Imported %d %s liftOver chains from %s",
        writer.records_flushed,
        from_reference,
        Path(chain_path).name,
    )

    return {
        "from_reference": from_reference,
        "chains_stored": writer.records_flushed,
        "batches_flushed": writer.batches_flushed,
    }
