"""Protein records, aggregation and ranked probability lists.

Provides:
- PSMRecord / Peptide / Protein: data records
- ProteinRegistry: single owner of all protein records, target/decoy sets
- RankedProteinList: (PEP, protein group) pairs ordered best first
- LabelledRanking: per-step target/decoy counts for the estimators
"""

from .registry import (
    AggregationSummary,
    Peptide,
    Protein,
    ProteinRegistry,
    PSMRecord,
)
from .ranking import (
    LabelledRanking,
    RankedProteinList,
)

__all__ = [
    # Records
    "PSMRecord",
    "Peptide",
    "Protein",
    # Registry
    "ProteinRegistry",
    "AggregationSummary",
    # Ranking
    "RankedProteinList",
    "LabelledRanking",
]
