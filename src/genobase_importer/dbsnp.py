"""dbSNP variant import.

Only common, non-MNV variants on the primary GRCh38 assembly contigs are
kept. A malformed rsID aborts the import since it means the input is not a
dbSNP VCF (or is corrupt); everything else that does not qualify is skipped.
"""

import logging
from pathlib import Path

from .batch import BatchWriter
from .chromosomes import ChromosomeMapper
from .config import ImportConfig
from .info_fields import get_flag, get_string
from .models import Variant, VariantClass
from .sources import ProgressCallback, iter_records, open_vcf
from .utils.validators import parse_rsid

logger = logging.getLogger(__name__)

COMMON_KEY = "COMMON"
VARIANT_CLASS_KEY = "VC"


class VariantNormalizer:
    """Turn dbSNP VCF records into ``Variant`` rows."""

    def __init__(self, mapper: ChromosomeMapper | None = None, common_only: bool = True):
        self.mapper = mapper or ChromosomeMapper()
        self.common_only = common_only

    def normalize(self, record) -> Variant | None:
        """Return the Variant for a record, or None if it should be skipped.

        Raises:
            InvalidVariantIdError: If the record's ID is not an rsID
            FieldMissingError: If the record has no variant class
        """
        info = record.INFO

        if self.common_only and not get_flag(info, COMMON_KEY):
            return None

        variant_class = get_string(info, VARIANT_CLASS_KEY)
        if variant_class == VariantClass.MNV:
            return None

        variant_id = parse_rsid(record.ID)

        chromosome = self.mapper.resolve(record.CHROM)
        if chromosome is None:
            return None

        chromosome = self.mapper.apply_par_policy(chromosome, record.POS)
        if chromosome is None:
            return None

        return Variant(
            id=variant_id,
            chromosome=chromosome,
            position=int(record.POS),
            reference=record.REF,
            variant_class=variant_class,
        )


async def import_dbsnp(
    store,
    dbsnp_path: Path | str,
    config: ImportConfig | None = None,
    progress: ProgressCallback | None = None,
) -> dict:
    """Import dbSNP variants into the store.

    Args:
        store: Storage collaborator with an async ``store_variants(list[Variant])``
        dbsnp_path: Path to the dbSNP VCF (bgzipped or plain)
        config: Import configuration
        progress: Optional callback receiving the running record count

    Returns:
        Dictionary with import statistics
    """
    config = config or ImportConfig()
    normalizer = VariantNormalizer(common_only=config.common_only)

    records_read = 0
    records_skipped = 0

    with open_vcf(dbsnp_path) as vcf:
        writer = BatchWriter(store.store_variants, config.batch_size, name="variants")
        async with writer:
            for record in iter_records(vcf, dbsnp_path, progress):
                records_read += 1

                variant = normalizer.normalize(record)
                if variant is None:
                    records_skipped += 1
                    continue

                await writer.add(variant)

    logger.info(
        "Imported %d dbSNP variants from %s (%d records read, %d skipped)",
        writer.records_flushed,
        Path(dbsnp_path).name,
        records_read,
        records_skipped,
    )

    return {
        "records_read": records_read,
        "records_skipped": records_skipped,
        "variants_stored": writer.records_flushed,
        "batches_flushed": writer.batches_flushed,
    }
