"""Target/decoy protein databases and database-driven protein FDR.

Provides:
- FASTA reading (first header token as protein identifier)
- ProteinFDREstimator: length-binned expected false positive proteins
"""

from .fasta import (
    iter_fasta,
    parse_protein_id,
    read_protein_lengths,
)
from .protein_fdr import (
    DatabaseSummary,
    ProteinFDREstimator,
    pi0_from_false_positives,
)

__all__ = [
    # FASTA reading
    "iter_fasta",
    "parse_protein_id",
    "read_protein_lengths",
    # Protein FDR
    "ProteinFDREstimator",
    "DatabaseSummary",
    "pi0_from_false_positives",
]
