"""genobase-importer: prepare a genobase from public human genomics reference data."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated

import asyncpg
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from . import __version__
from .config import (
    ConfigValidationError,
    ImportConfig,
    load_config,
    resolve_database_url,
    validate_config,
)
from .database import GenobaseStore
from .dbsnp import import_dbsnp
from .exceptions import ImporterError
from .gnomad import import_gnomad
from .liftover import import_chain_file
from .schema import SchemaManager
from .sources import ProgressCallback
from .utils.validators import ValidationError, validate_genome_build

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    if value:
        print(__version__)
        raise typer.Exit()


app = typer.Typer(
    name="genobase-importer",
    help="Prepare a genobase from public human genomics reference data",
)
console = Console()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version and exit"
        ),
    ] = None,
) -> None:
    pass


def setup_logging(verbose: bool, quiet: bool, log_level: str | None = None) -> None:
    """Configure logging based on verbosity flags.

    An explicit log level takes precedence over --verbose/--quiet.
    """
    if log_level:
        level = logging.getLevelName(log_level.upper())
    elif quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("genobase_importer").setLevel(level)


def _add_log_file(log_file: Path) -> None:
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    logging.getLogger("genobase_importer").addHandler(file_handler)


def _build_config(config_file: Path | None, overrides: dict) -> ImportConfig:
    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        if config_file:
            return load_config(config_file, overrides)
        validate_config(overrides)
        return ImportConfig(**overrides)
    except (ConfigValidationError, FileNotFoundError) as e:
        console.print(f"[red]Configuration Error: {e}[/red]")
        raise typer.Exit(1) from None


def _require_database_url(db_url: str | None) -> str:
    resolved = resolve_database_url(db_url)
    if resolved is None:
        console.print(
            "[red]Error: No database specified. Use --db or set POSTGRES_URL / PGHOST[/red]"
        )
        raise typer.Exit(1)
    return resolved


def _run_import(
    description: str,
    db_url: str,
    run: Callable[[GenobaseStore, ProgressCallback | None], Awaitable[dict]],
    show_progress: bool,
) -> dict:
    """Open the store, run an import coroutine and turn failures into exit code 1."""

    async def execute(progress_callback: ProgressCallback | None) -> dict:
        async with GenobaseStore(db_url) as store:
            return await run(store, progress_callback)

    try:
        if show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            ) as progress_bar:
                task = progress_bar.add_task(description, total=None)

                def update_progress(records_read: int) -> None:
                    progress_bar.update(
                        task, description=f"{description} ({records_read:,} records read)"
                    )

                return asyncio.run(execute(update_progress))
        return asyncio.run(execute(None))

    except ImporterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    except (OSError, asyncpg.PostgresError) as e:
        console.print(f"[red]Error: Database connection failed: {e}[/red]")
        raise typer.Exit(1) from None


def _print_result(result: dict, stored_key: str, noun: str) -> None:
    console.print(f"[green]✓[/green] Stored {result[stored_key]:,} {noun}")
    if "records_read" in result:
        console.print(f"  Records read: {result['records_read']:,}")
        console.print(f"  Records skipped: {result['records_skipped']:,}")
    console.print(f"  Batches: {result['batches_flushed']:,}")


@app.command("init-db")
def init_db(
    db_url: Annotated[str | None, typer.Option("--db", "-d", help="PostgreSQL URL")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Initialize the genobase schema (variants, alleles, liftover_chains)."""
    setup_logging(verbose, quiet=False)
    resolved_db_url = _require_database_url(db_url)

    async def run_init() -> dict[str, int] | None:
        conn = await asyncpg.connect(resolved_db_url)
        try:
            schema_manager = SchemaManager()
            await schema_manager.create_schema(conn)
            if not await schema_manager.verify_schema_exists(conn):
                return None
            return await schema_manager.get_table_counts(conn)
        finally:
            await conn.close()

    try:
        counts = asyncio.run(run_init())
    except (OSError, asyncpg.PostgresError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None

    if counts is None:
        console.print("[red]Error: genobase tables missing after schema creation[/red]")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Schema initialized")
    for table, count in counts.items():
        console.print(f"  {table}: {count:,} rows")


@app.command()
def variants(
    dbsnp_path: Path = typer.Argument(..., help="Path to dbSNP VCF file (.vcf, .vcf.gz)"),
    db_url: Annotated[str | None, typer.Option("--db", "-d", help="PostgreSQL URL")] = None,
    common: Annotated[
        bool | None,
        typer.Option("--common/--all", help="Only import variants flagged COMMON by dbSNP"),
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", "-l", help="Set the log level")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log", help="Write log to file")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    progress: Annotated[
        bool | None, typer.Option("--progress/--no-progress", help="Show progress")
    ] = None,
) -> None:
    """Import dbSNP variants into a genobase."""
    config = _build_config(
        config_file,
        {"common_only": common, "show_progress": progress, "db_url": db_url, "log_level": log_level},
    )
    setup_logging(verbose, quiet, config.log_level)
    if log_file:
        _add_log_file(log_file)

    if not dbsnp_path.exists():
        console.print(f"[red]Error: dbSNP file not found: {dbsnp_path}[/red]")
        raise typer.Exit(1)

    resolved_db_url = _require_database_url(config.db_url)
    logger.info("Adding dbSNP variants from %s", dbsnp_path)

    result = _run_import(
        "Importing dbSNP variants",
        resolved_db_url,
        lambda store, cb: import_dbsnp(store, dbsnp_path, config, progress=cb),
        config.show_progress and not quiet,
    )

    if not quiet:
        _print_result(result, "variants_stored", "variants")


@app.command()
def alleles(
    gnomad_path: Path = typer.Argument(..., help="Path to gnomAD sites VCF file (.vcf, .vcf.bgz)"),
    db_url: Annotated[str | None, typer.Option("--db", "-d", help="PostgreSQL URL")] = None,
    minimum_frequency: Annotated[
        float | None,
        typer.Option(
            "--minimum-frequency", "-m", help="The minimum allele frequency to include"
        ),
    ] = None,
    config_file: Annotated[
        Path | None, typer.Option("--config", "-c", help="TOML configuration file")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", "-l", help="Set the log level")
    ] = None,
    log_file: Annotated[Path | None, typer.Option("--log", help="Write log to file")] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
    progress: Annotated[
        bool | None, typer.Option("--progress/--no-progress", help="Show progress")
    ] = None,
) -> None:
    """Import gnomAD allele frequencies into a genobase."""
    config = _build_config(
        config_file,
        {
            "minimum_frequency": minimum_frequency,
            "show_progress": progress,
            "db_url": db_url,
            "log_level": log_level,
        },
    )
    setup_logging(verbose, quiet, config.log_level)
    if log_file:
        _add_log_file(log_file)

    if not gnomad_path.exists():
        console.print(f"[red]Error: gnomAD file not found: {gnomad_path}[/red]")
        raise typer.Exit(1)

    resolved_db_url = _require_database_url(config.db_url)
    logger.info(
        "Adding gnomAD alleles from %s (minimum frequency %g)",
        gnomad_path,
        config.minimum_frequency,
    )

    result = _run_import(
        "Importing gnomAD alleles",
        resolved_db_url,
        lambda store, cb: import_gnomad(store, gnomad_path, config, progress=cb),
        config.show_progress and not quiet,
    )

    if not quiet:
        _print_result(result, "alleles_stored", "alleles")


@app.command("chain-file")
def chain_file(
    chain_path: Path = typer.Argument(..., help="Path to liftOver chain file (.chain, .chain.gz)"),
    from_reference: str = typer.Option(
        ..., "--from", "-f", help="The reference this chain is from (eg. GRCh37)"
    ),
    db_url: Annotated[str | None, typer.Option("--db", "-d", help="PostgreSQL URL")] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", "-l", help="Set the log level")
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
) -> None:
    """Import a liftOver chain file into a genobase."""
    config = _build_config(None, {"db_url": db_url, "log_level": log_level})
    setup_logging(verbose, quiet, config.log_level)

    try:
        reference = validate_genome_build(from_reference, required=True)
    except ValidationError as e:
        console.print(f"[red]Error: invalid from reference: {e}[/red]")
        raise typer.Exit(1) from None

    if not chain_path.exists():
        console.print(f"[red]Error: chain file not found: {chain_path}[/red]")
        raise typer.Exit(1)

    resolved_db_url = _require_database_url(config.db_url)
    logger.info("Adding liftOver chain from %s (%s)", chain_path, reference)

    result = _run_import(
        "Importing liftOver chains",
        resolved_db_url,
        lambda store, cb: import_chain_file(store, reference, chain_path),
        show_progress=False,
    )

    if not quiet:
        _print_result(result, "chains_stored", "liftOver chains")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
