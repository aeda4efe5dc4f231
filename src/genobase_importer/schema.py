"""PostgreSQL schema management for the genobase tables."""

import asyncpg


class SchemaManager:
    """Manages PostgreSQL schema for variants, alleles and liftOver chains."""

    async def create_schema(self, conn: asyncpg.Connection) -> None:
        """Create all genobase tables and indexes."""
        await self.create_variants_table(conn)
        await self.create_alleles_table(conn)
        await self.create_liftover_chains_table(conn)

    async def create_variants_table(self, conn: asyncpg.Connection) -> None:
        """Create the variants table, keyed by numeric rsID.

        chromosome is one of 1-22, X, Y, MT, PAR, PAR2; PAR/PAR2 positions
        are X-relative.
        """
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS variants (
                id BIGINT PRIMARY KEY,
                chromosome VARCHAR(4) NOT NULL,
                position BIGINT NOT NULL,
                reference TEXT NOT NULL,
                class VARCHAR(8) NOT NULL
            )
        """)

        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_variants_locus
            ON variants (chromosome, position)
        """)

    async def create_alleles_table(self, conn: asyncpg.Connection) -> None:
        """Create the alleles table holding per-ancestry-group frequencies."""
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS alleles (
                id BIGINT NOT NULL,
                reference TEXT NOT NULL,
                alternate TEXT NOT NULL,
                ancestry VARCHAR(3) NOT NULL,
                frequency DOUBLE PRECISION NOT NULL,
                PRIMARY KEY (id, reference, alternate, ancestry)
            )
        """)

    async def create_liftover_chains_table(self, conn: asyncpg.Connection) -> None:
        """Create the liftover_chains table.

        Each row is one chain with its ungapped blocks stored as parallel
        arrays (size, gap in target, gap in query). The last block has no
        trailing gaps.
        """
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS liftover_chains (
                from_reference VARCHAR(10) NOT NULL,
                chain_id BIGINT NOT NULL,
                score BIGINT NOT NULL,
                target_name TEXT NOT NULL,
                target_size BIGINT NOT NULL,
                target_strand CHAR(1) NOT NULL,
                target_start BIGINT NOT NULL,
                target_end BIGINT NOT NULL,
                query_name TEXT NOT NULL,
                query_size BIGINT NOT NULL,
                query_strand CHAR(1) NOT NULL,
                query_start BIGINT NOT NULL,
                query_end BIGINT NOT NULL,
                block_sizes BIGINT[] NOT NULL,
                target_gaps BIGINT[] NOT NULL,
                query_gaps BIGINT[] NOT NULL,
                PRIMARY KEY (from_reference, chain_id)
            )
        """)

        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_liftover_chains_target
            ON liftover_chains (from_reference, target_name, target_start, target_end)
        """)

    async def drop_schema(self, conn: asyncpg.Connection) -> None:
        """Drop all genobase tables."""
        await conn.execute("DROP TABLE IF EXISTS liftover_chains CASCADE")
        await conn.execute("DROP TABLE IF EXISTS alleles CASCADE")
        await conn.execute("DROP TABLE IF EXISTS variants CASCADE")

    async def verify_schema_exists(self, conn: asyncpg.Connection) -> bool:
        """Verify all genobase tables exist."""
        count = await conn.fetchval("""
            SELECT COUNT(*) FROM information_schema.tables
            WHERE table_name IN ('variants', 'alleles', 'liftover_chains')
        """)
        return count == 3

    async def get_table_counts(self, conn: asyncpg.Connection) -> dict[str, int]:
        """Get row counts for each genobase table."""
        return {
            "variants": await conn.fetchval("SELECT COUNT(*) FROM variants"),
            "alleles": await conn.fetchval("SELECT COUNT(*) FROM alleles"),
            "liftover_chains": await conn.fetchval("SELECT COUNT(*) FROM liftover_chains"),
        }
