"""Interface to the protein inference engine.

The engine turns peptide-level evidence into protein group probabilities for
given model parameters. It is supplied by the caller; alphaprotfdr only
relies on the small interface below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Protocol, Sequence

from .proteins.ranking import RankedProteinList
from .proteins.registry import PSMRecord


@dataclass(frozen=True)
class ModelParameters:
    """Priors of the protein inference model.

    Attributes
    ----------
    alpha : float
        Probability that a present protein emits an observed peptide
    beta : float
        Probability of a false peptide detection
    gamma : float
        Prior probability that a protein is present
    """

    alpha: float
    beta: float
    gamma: float


class ProteinInferenceEngine(Protocol):
    """Computes ranked protein group PEPs for given model parameters."""

    def compute_protein_probabilities(self, parameters: ModelParameters) -> RankedProteinList:
        """Return (PEP, protein group) entries ordered best first."""
        ...


# Builds an engine from the PSMs and the pass-through options
# (group_proteins, no_separate, no_prune)
InferenceEngineFactory = Callable[[Sequence[PSMRecord], Dict[str, bool]], ProteinInferenceEngine]
