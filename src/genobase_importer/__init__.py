"""genobase-importer: load public human genomics reference data into a genobase."""

__version__ = "0.1.0"

from .batch import BatchWriter
from .chromosomes import ChromosomeMapper
from .config import ImportConfig, load_config
from .dbsnp import VariantNormalizer, import_dbsnp
from .gnomad import AlleleFrequencyExtractor, import_gnomad
from .liftover import import_chain_file, read_chain_file
from .models import Allele, AncestryGroup, Variant

__all__ = [
    "Allele",
    "AlleleFrequencyExtractor",
    "AncestryGroup",
    "BatchWriter",
    "ChromosomeMapper",
    "ImportConfig",
    "Variant",
    "VariantNormalizer",
    "__version__",
    "import_chain_file",
    "import_dbsnp",
    "import_gnomad",
    "load_config",
    "read_chain_file",
]
