"""Contig accession lookup and pseudo-autosomal region handling for GRCh38.

dbSNP names contigs by RefSeq accession (``NC_000001.11``) while gnomAD uses
UCSC-style names (``chr1``, ``chrM``). Both are reduced to the canonical
labels ``1``-``22``, ``X``, ``Y`` and ``MT``.

Pseudo-autosomal loci are stored once, anchored to X: X records inside a PAR
are relabelled ``PAR``/``PAR2`` (positions stay X-relative) and Y records
inside a PAR are discarded.
"""

from enum import Enum
from types import MappingProxyType

GRCH38_ACCESSIONS = MappingProxyType({
    "NC_000001.11": "1",
    "NC_000002.12": "2",
    "NC_000003.12": "3",
    "NC_000004.12": "4",
    "NC_000005.10": "5",
    "NC_000006.12": "6",
    "NC_000007.14": "7",
    "NC_000008.11": "8",
    "NC_000009.12": "9",
    "NC_000010.11": "10",
    "NC_000011.10": "11",
    "NC_000012.12": "12",
    "NC_000013.11": "13",
    "NC_000014.9": "14",
    "NC_000015.10": "15",
    "NC_000016.10": "16",
    "NC_000017.11": "17",
    "NC_000018.10": "18",
    "NC_000019.10": "19",
    "NC_000020.11": "20",
    "NC_000021.9": "21",
    "NC_000022.11": "22",
    "NC_000023.11": "X",
    "NC_000024.10": "Y",
    "NC_012920.1": "MT",
})

CANONICAL_CHROMOSOMES = frozenset(GRCH38_ACCESSIONS.values())

MITOCHONDRIAL = "MT"

# Inclusive, 1-based.
PAR1_XY = (10_001, 2_781_479)
PAR2_X = (155_701_383, 156_030_895)
PAR2_Y = (56_887_903, 57_217_415)


class ParRegion(str, Enum):
    """Pseudo-autosomal regions, valued by their stored chromosome label."""

    PAR = "PAR"
    PAR2 = "PAR2"


def _within(position: int, bounds: tuple[int, int]) -> bool:
    return bounds[0] <= position <= bounds[1]


class ChromosomeMapper:
    """Resolve contig names to canonical chromosome labels."""

    def __init__(self, accessions=GRCH38_ACCESSIONS):
        self._accessions = accessions

    def resolve(self, accession: str) -> str | None:
        """Return the canonical label for a contig accession, or None."""
        return self._accessions.get(accession)

    def canonical(self, contig: str) -> str | None:
        """Resolve an accession or a UCSC/Ensembl-style contig name.

        Returns None for anything that is not one of the canonical
        chromosomes (alt contigs, decoys, unplaced scaffolds).
        """
        label = self.resolve(contig)
        if label is not None:
            return label

        name = contig[3:] if contig.lower().startswith("chr") else contig
        name = name.upper()
        if name == "M":
            name = MITOCHONDRIAL
        return name if name in CANONICAL_CHROMOSOMES else None

    @staticmethod
    def par_region(chromosome: str, position: int) -> ParRegion | None:
        """Classify a resolved chromosome/position into a PAR, if any."""
        if chromosome in ("X", "Y") and _within(position, PAR1_XY):
            return ParRegion.PAR
        if chromosome == "X" and _within(position, PAR2_X):
            return ParRegion.PAR2
        if chromosome == "Y" and _within(position, PAR2_Y):
            return ParRegion.PAR2
        return None

    def apply_par_policy(self, chromosome: str, position: int) -> str | None:
        """Return the chromosome label to store, or None to drop the record."""
        region = self.par_region(chromosome, position)
        if region is None:
            return chromosome
        # Y copies of pseudo-autosomal loci are represented by their X twin.
        if chromosome == "Y":
            return None
        return region.value
