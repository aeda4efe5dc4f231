"""gnomAD allele frequency import.

gnomAD v3 reports nuclear and mitochondrial frequencies in two unrelated
INFO encodings, so each is read by its own ``FrequencyStrategy``:

- Nuclear contigs: ``AF`` (Number=A) for the overall frequency and one
  ``AF_<group>`` key per ancestry group, with ``allele_type`` giving the
  variant type.
- chrM: ``AF_het`` + ``AF_hom`` for the overall frequency, the variant type
  buried in the ``vep`` annotation string, and per-group frequencies as two
  pipe-delimited arrays (``pop_AF_het``/``pop_AF_hom``) whose positions follow
  ``MT_ANCESTRY_GROUPS``.

Whichever strategy is used, a group is only stored when its frequency is
above ``minimum_frequency / 100``, and every rsID on the record gets its own
copy of the per-group rows.
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path

from .batch import BatchWriter
from .chromosomes import MITOCHONDRIAL, ChromosomeMapper
from .config import ImportConfig
from .exceptions import FieldMissingError, InvalidVariantIdError
from .info_fields import get_first_float, get_float, get_string
from .models import Allele, AncestryGroup
from .sources import ProgressCallback, iter_records, open_vcf, record_filters
from .utils.validators import RSID_PREFIX, parse_rsid

logger = logging.getLogger(__name__)

# Ancestry groups stored for every variant, in output order.
ANCESTRY_GROUPS = (
    AncestryGroup.ALL,
    AncestryGroup.AFRICAN,
    AncestryGroup.AMISH,
    AncestryGroup.AMERICAN,
    AncestryGroup.ASHKENAZI,
    AncestryGroup.EAST_ASIAN,
    AncestryGroup.FINNISH,
    AncestryGroup.MIDDLE_EASTERN,
    AncestryGroup.EUROPEAN,
    AncestryGroup.SOUTH_ASIAN,
)

# Column order of gnomAD's pop_AF_het/pop_AF_hom arrays. Must match the
# upstream VCF exactly: the arrays carry no labels.
MT_ANCESTRY_GROUPS = (
    AncestryGroup.AFRICAN,
    AncestryGroup.AMISH,
    AncestryGroup.AMERICAN,
    AncestryGroup.ASHKENAZI,
    AncestryGroup.EAST_ASIAN,
    AncestryGroup.FINNISH,
    AncestryGroup.EUROPEAN,
    AncestryGroup.OTHER,
    AncestryGroup.SOUTH_ASIAN,
    AncestryGroup.MIDDLE_EASTERN,
)

ALLELE_FREQUENCY_KEY = "AF"
ALLELE_TYPE_KEY = "allele_type"
GROUP_FREQUENCY_PREFIX = "AF_"

MT_HET_FREQUENCY_KEY = "AF_het"
MT_HOM_FREQUENCY_KEY = "AF_hom"
MT_VEP_KEY = "vep"
MT_GROUP_HET_KEY = "pop_AF_het"
MT_GROUP_HOM_KEY = "pop_AF_hom"

NUCLEAR_VARIANT_TYPES = frozenset({"SNV", "INS", "DEL"})
MT_VARIANT_TYPE_TOKENS = ("insertion", "deletion", "SNV")

PASS_FILTER = "PASS"

_ID_SEPARATORS = re.compile(r"[;,]")


def group_frequency_key(group: AncestryGroup) -> str:
    return f"{GROUP_FREQUENCY_PREFIX}{group.value.lower()}"


def extract_rsids(id_field: str | None) -> list[int]:
    """Parse every rsID out of a (possibly multi-valued) VCF ID column.

    Non-rs identifiers are ignored. An rs token without a numeric suffix is
    logged and skipped; the remaining identifiers are still returned.
    """
    if not id_field:
        return []

    ids = []
    for token in _ID_SEPARATORS.split(id_field):
        token = token.strip()
        if not token.startswith(RSID_PREFIX):
            continue
        try:
            ids.append(parse_rsid(token))
        except InvalidVariantIdError:
            logger.warning("Could not parse variant ID %r in %r", token, id_field)
    return ids


class FrequencyStrategy(ABC):
    """Reads per-ancestry-group frequencies for one INFO encoding."""

    @abstractmethod
    def extract(
        self, record, minimum_frequency: float
    ) -> dict[AncestryGroup, float] | None:
        """Return frequencies keyed by ancestry group (including ALL).

        Returns None when the record does not qualify (too rare, unsupported
        variant type, not biallelic). Groups absent from the record are
        absent from the result.

        Raises:
            FieldMissingError: If a field the encoding requires is absent
        """


class NuclearFrequencyStrategy(FrequencyStrategy):
    """Frequencies from ``AF`` and the per-group ``AF_<group>`` keys."""

    def extract(self, record, minimum_frequency):
        info = record.INFO

        overall = get_first_float(info, ALLELE_FREQUENCY_KEY)
        if overall < minimum_frequency:
            return None

        variant_type = get_string(info, ALLELE_TYPE_KEY)
        if variant_type.upper() not in NUCLEAR_VARIANT_TYPES:
            return None

        if len(record.ALT) != 1:
            return None

        frequencies = {AncestryGroup.ALL: overall}
        for group in ANCESTRY_GROUPS:
            if group is AncestryGroup.ALL:
                continue
            try:
                frequencies[group] = get_first_float(info, group_frequency_key(group))
            except FieldMissingError:
                continue

        return frequencies


class MitochondrialFrequencyStrategy(FrequencyStrategy):
    """Frequencies from gnomAD's heteroplasmic/homoplasmic chrM fields."""

    def extract(self, record, minimum_frequency):
        info = record.INFO

        overall = get_float(info, MT_HET_FREQUENCY_KEY) + get_float(info, MT_HOM_FREQUENCY_KEY)
        if overall < minimum_frequency:
            return None

        vep = get_string(info, MT_VEP_KEY)
        if not any(token in vep for token in MT_VARIANT_TYPE_TOKENS):
            return None

        if len(record.ALT) != 1:
            return None

        het = get_string(info, MT_GROUP_HET_KEY)
        hom = get_string(info, MT_GROUP_HOM_KEY)

        frequencies = {group: 0.0 for group in MT_ANCESTRY_GROUPS}
        for encoded in (het, hom):
            values = encoded.split("|")
            if len(values) != len(MT_ANCESTRY_GROUPS):
                logger.warning(
                    "Expected %d population frequencies, got %d: %r",
                    len(MT_ANCESTRY_GROUPS),
                    len(values),
                    encoded,
                )
            for group, value in zip(MT_ANCESTRY_GROUPS, values):
                try:
                    frequencies[group] += float(value)
                except ValueError:
                    logger.warning("Could not parse variant frequency %r for %s", value, group.value)

        frequencies[AncestryGroup.ALL] = overall
        return frequencies


class AlleleFrequencyExtractor:
    """Turn gnomAD VCF records into ``Allele`` rows."""

    def __init__(
        self,
        minimum_frequency: float,
        mapper: ChromosomeMapper | None = None,
    ):
        self.minimum_frequency = minimum_frequency
        self.mapper = mapper or ChromosomeMapper()
        self.nuclear = NuclearFrequencyStrategy()
        self.mitochondrial = MitochondrialFrequencyStrategy()

    @property
    def noise_floor(self) -> float:
        """Group frequencies at or below this are rounded down to zero (not stored)."""
        return self.minimum_frequency / 100.0

    def strategy_for(self, chromosome: str) -> FrequencyStrategy:
        if chromosome == MITOCHONDRIAL:
            return self.mitochondrial
        return self.nuclear

    def extract(self, record) -> list[Allele]:
        """Return the Allele rows for a record; empty if it does not qualify."""
        if record_filters(record) != [PASS_FILTER]:
            return []

        ids = extract_rsids(record.ID)
        if not ids:
            return []

        chromosome = self.mapper.canonical(record.CHROM)
        if chromosome is None:
            return []

        try:
            frequencies = self.strategy_for(chromosome).extract(record, self.minimum_frequency)
        except FieldMissingError as e:
            logger.warning(
                "Skipping %s:%s (%s): %s", record.CHROM, record.POS, record.ID, e
            )
            return []

        if frequencies is None:
            return []

        reference = record.REF
        alternate = record.ALT[0]

        alleles = []
        for group in ANCESTRY_GROUPS:
            frequency = frequencies.get(group)
            if frequency is None or not frequency > self.noise_floor:
                continue
            for variant_id in ids:
                alleles.append(
                    Allele(
                        id=variant_id,
                        reference=reference,
                        alternate=alternate,
                        ancestry=group,
                        frequency=frequency,
                    )
                )
        return alleles


async def import_gnomad(
    store,
    gnomad_path: Path | str,
    config: ImportConfig | None = None,
    progress: ProgressCallback | None = None,
) -> dict:
    """Import gnomAD allele frequencies into the store.

    Args:
        store: Storage collaborator with an async ``store_alleles(list[Allele])``
        gnomad_path: Path to a gnomAD sites VCF (bgzipped or plain)
        config: Import configuration; ``minimum_frequency`` is the overall
            frequency below which variants are skipped
        progress: Optional callback receiving the running record count

    Returns:
        Dictionary with import statistics
    """
    config = config or ImportConfig()
    extractor = AlleleFrequencyExtractor(config.minimum_frequency)

    records_read = 0
    records_skipped = 0

    with open_vcf(gnomad_path) as vcf:
        writer = BatchWriter(store.store_alleles, config.batch_size, name="alleles")
        async with writer:
            for record in iter_records(vcf, gnomad_path, progress):
                records_read += 1

                alleles = extractor.extract(record)
                if not alleles:
                    records_skipped += 1
                    continue

                await writer.extend(alleles)

    logger.info(
        "Imported %d gnomAD alleles from %s (%d records read, %d skipped)",
        writer.records_flushed,
        Path(gnomad_path).name,
        records_read,
        records_skipped,
    )

    return {
        "records_read": records_read,
        "records_skipped": records_skipped,
        "alleles_stored": writer.records_flushed,
        "batches_flushed": writer.batches_flushed,
    }
