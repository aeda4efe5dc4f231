"""Opening and iterating compressed reference data sources."""

import gzip
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from cyvcf2 import VCF

from .exceptions import SourceOpenError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

PROGRESS_INTERVAL = 10_000

GZIP_SUFFIXES = (".gz", ".bgz")


@contextmanager
def open_vcf(path: Path | str) -> Iterator[VCF]:
    """Open a (b)gzipped or plain VCF, closing it on every exit path.

    htslib handles the decompression; failures to open or to read the
    header surface as ``SourceOpenError``.
    """
    path = Path(path)
    if not path.exists():
        raise SourceOpenError(f"VCF file not found: {path}")

    try:
        vcf = VCF(str(path), lazy=True)
    except (OSError, ValueError) as e:
        raise SourceOpenError(f"Could not open VCF file {path}: {e}") from e

    try:
        yield vcf
    finally:
        vcf.close()


def iter_records(
    vcf: VCF, path: Path | str, progress: ProgressCallback | None = None
) -> Iterator:
    """Yield records in file order, reporting the running count to ``progress``.

    The callback only observes; it cannot alter ordering or content.

    Raises:
        SourceOpenError: If htslib fails to decompress or parse a record
    """
    count = 0
    records = iter(vcf)
    while True:
        try:
            record = next(records)
        except StopIteration:
            break
        except Exception as e:
            # cyvcf2 reports bcf_read failures (truncated bgzip, bad lines) as bare Exception.
            raise SourceOpenError(f"Could not read {path}: {e}") from e

        yield record
        count += 1
        if progress is not None and count % PROGRESS_INTERVAL == 0:
            progress(count)

    if progress is not None:
        progress(count)


def record_filters(record) -> list[str]:
    """Return the FILTER column as a list, e.g. ``["PASS"]``."""
    return list(record.FILTERS)


@contextmanager
def open_text(path: Path | str) -> Iterator[IO[str]]:
    """Open a plain or gzip-compressed text file for reading."""
    path = Path(path)
    if not path.exists():
        raise SourceOpenError(f"File not found: {path}")

    open_func = gzip.open if path.name.endswith(GZIP_SUFFIXES) else open
    try:
        f = open_func(path, "rt")
    except OSError as e:
        raise SourceOpenError(f"Could not open {path}: {e}") from e

    try:
        yield f
    except (gzip.BadGzipFile, EOFError) as e:
        raise SourceOpenError(f"Could not decompress {path}: {e}") from e
    finally:
        f.close()
