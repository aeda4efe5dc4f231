"""PostgreSQL-backed storage for imported reference data."""

import logging

import asyncpg

from .exceptions import StoreError
from .models import Allele, Variant

logger = logging.getLogger(__name__)

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

INSERT_VARIANTS = """
    INSERT INTO variants (id, chromosome, position, reference, class)
    VALUES ($1, $2, $3, $4, $5)
    ON CONFLICT (id) DO UPDATE SET
        chromosome = EXCLUDED.chromosome,
        position = EXCLUDED.position,
        reference = EXCLUDED.reference,
        class = EXCLUDED.class
"""

INSERT_ALLELES = """
    INSERT INTO alleles (id, reference, alternate, ancestry, frequency)
    VALUES ($1, $2, $3, $4, $5)
    ON CONFLICT (id, reference, alternate, ancestry) DO UPDATE SET
        frequency = EXCLUDED.frequency
"""

INSERT_CHAIN = """
    INSERT INTO liftover_chains (
        from_reference, chain_id, score,
        target_name, target_size, target_strand, target_start, target_end,
        query_name, query_size, query_strand, query_start, query_end,
        block_sizes, target_gaps, query_gaps
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16)
    ON CONFLICT (from_reference, chain_id) DO UPDATE SET
        score = EXCLUDED.score,
        target_name = EXCLUDED.target_name,
        target_size = EXCLUDED.target_size,
        target_strand = EXCLUDED.target_strand,
        target_start = EXCLUDED.target_start,
        target_end = EXCLUDED.target_end,
        query_name = EXCLUDED.query_name,
        query_size = EXCLUDED.query_size,
        query_strand = EXCLUDED.query_strand,
        query_start = EXCLUDED.query_start,
        query_end = EXCLUDED.query_end,
        block_sizes = EXCLUDED.block_sizes,
        target_gaps = EXCLUDED.target_gaps,
        query_gaps = EXCLUDED.query_gaps
"""


class GenobaseStore:
    """Bulk upserts into the genobase tables.

    Each call runs in its own transaction, so a failed or cancelled call
    leaves earlier calls committed and stores nothing of its own batch.
    """

    def __init__(self, db_url: str, pool_size: int = 2):
        self.db_url = db_url
        self.pool_size = pool_size
        self.pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Establish database connection pool."""
        self.pool = await asyncpg.create_pool(
            self.db_url,
            min_size=1,
            max_size=self.pool_size,
            command_timeout=300,
        )

    async def close(self) -> None:
        """Close database connection pool."""
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def __aenter__(self) -> "GenobaseStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def store_variants(self, variants: list[Variant]) -> None:
        await self._executemany(INSERT_VARIANTS, [v.to_db_row() for v in variants], "variants")

    async def store_alleles(self, alleles: list[Allele]) -> None:
        await self._executemany(INSERT_ALLELES, [a.to_db_row() for a in alleles], "alleles")

    async def store_chains(self, from_reference: str, chains: list) -> None:
        rows = [chain.to_db_row(from_reference) for chain in chains]
        await self._executemany(INSERT_CHAIN, rows, "liftOver chains")

    async def _executemany(self, query: str, rows: list[tuple], what: str) -> None:
        if not rows:
            return
        if self.pool is None:
            await self.connect()

        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    await conn.executemany(query, rows)
        except STORE_ERRORS as e:
            raise StoreError(f"Could not store {what}: {e}") from e

        logger.debug("Stored %d %s", len(rows), what)
