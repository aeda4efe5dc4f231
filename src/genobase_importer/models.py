"""Data models for normalized genobase records."""

from dataclasses import dataclass
from enum import Enum


class VariantClass:
    """dbSNP variant class tags (INFO/VC)."""

    SNV = "SNV"
    MNV = "MNV"
    INS = "INS"
    DEL = "DEL"
    INDEL = "INDEL"


class AncestryGroup(str, Enum):
    """Population strata that allele frequencies are reported for.

    Values are the gnomAD group codes; the lowercased value is the suffix of
    the per-group INFO key (e.g. ``AF_afr``).
    """

    ALL = "ALL"
    AFRICAN = "AFR"
    AMISH = "AMI"
    AMERICAN = "AMR"
    ASHKENAZI = "ASJ"
    EAST_ASIAN = "EAS"
    FINNISH = "FIN"
    MIDDLE_EASTERN = "MID"
    EUROPEAN = "NFE"
    SOUTH_ASIAN = "SAS"
    OTHER = "OTH"


@dataclass(frozen=True)
class Variant:
    """A dbSNP variant keyed by its numeric rsID."""

    id: int
    chromosome: str
    position: int
    reference: str
    variant_class: str

    def to_db_row(self) -> tuple:
        return (self.id, self.chromosome, self.position, self.reference, self.variant_class)


@dataclass(frozen=True)
class Allele:
    """Frequency of one alternate allele within one ancestry group."""

    id: int
    reference: str
    alternate: str
    ancestry: AncestryGroup
    frequency: float

    def to_db_row(self) -> tuple:
        return (self.id, self.reference, self.alternate, self.ancestry.value, self.frequency)
