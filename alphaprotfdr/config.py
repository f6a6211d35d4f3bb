"""Configuration for protein-level probability and FDR estimation.

A single dataclass collects every option the estimator understands. Options
that only matter to the protein inference engine (grouping, separation,
pruning) are carried through untouched, see `inference_options()`.

Examples
--------
>>> from alphaprotfdr.config import ProteinFDRConfig
>>>
>>> # Grid search everything (default)
>>> config = ProteinFDRConfig()
>>>
>>> # Pin gamma, search alpha and beta with the widest grid
>>> config = ProteinFDRConfig(gamma=0.5, deepness=0)
>>>
>>> # Fixed parameters, no grid search
>>> config = ProteinFDRConfig(grid_search=False, alpha=0.1, beta=0.01, gamma=0.5)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .constants import (
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    DEFAULT_DECOY_PATTERN,
    DEFAULT_DEEPNESS,
    DEFAULT_GAMMA,
    DEFAULT_LAMBDA,
    DEFAULT_LENGTH_BINS,
    DEFAULT_ROC_THRESHOLD,
    DEFAULT_THRESHOLD,
    GRID_CANDIDATES,
    PI0_NUM_BOOTSTRAP,
    PSM_THRESHOLD_MAYU,
    ROC_N_AUTO,
    SEARCH_PARAMETER,
)


@dataclass
class ProteinFDRConfig:
    """Options for `ProteinProbEstimator`.

    Attributes
    ----------
    alpha, beta, gamma : float
        Inference priors. -1 means "estimate by grid search".
    ties_as_one_protein : bool
        Rank a tie group as a single entry (True) or expand it protein by
        protein (False).
    use_pi0 : bool
        Estimate pi0 by bootstrap before computing empirical q-values.
    output_empirical_qvalues : bool
        Return the ranked empirical q-values on EstimationResult.
    group_proteins, no_separate, no_prune : bool
        Passed through to the inference engine.
    grid_search : bool
        Estimate alpha/beta/gamma by grid search.
    deepness : int
        Grid coarseness, 0 (widest) to 3 (narrowest).
    lambda_ : float
        Objective weight: lambda * ROC_N - (1 - lambda) * divergence.
    threshold : float
        Estimated-FDR ceiling for the divergence integral.
    roc_n : int
        False positives for ROC_N; 0 means auto-update.
    roc_threshold : float
        Estimated FDR at or below which an auto-updating ROC N may grow.
    mayu_fdr : bool
        Estimate pi0 from the target/decoy databases.
    target_db, decoy_db : str, optional
        FASTA paths for the database estimator.
    decoy_pattern : str
        Substring marking decoy protein names.
    psm_threshold_mayu : float
        PSM q-value threshold used by the database estimator.
    length_bins : int
        Protein length bins for the database estimator.
    conservative : bool
        Absolute-linear instead of squared divergence.
    num_bootstrap : int
        Bootstrap iterations for pi0.
    seed : int, optional
        Seed of the bootstrap random generator.
    """

    alpha: float = SEARCH_PARAMETER
    beta: float = SEARCH_PARAMETER
    gamma: float = SEARCH_PARAMETER

    ties_as_one_protein: bool = True
    use_pi0: bool = False
    output_empirical_qvalues: bool = False

    # Inference engine pass-through
    group_proteins: bool = True
    no_separate: bool = False
    no_prune: bool = False

    # Grid search
    grid_search: bool = True
    deepness: int = DEFAULT_DEEPNESS
    lambda_: float = DEFAULT_LAMBDA
    threshold: float = DEFAULT_THRESHOLD
    roc_n: int = ROC_N_AUTO
    roc_threshold: float = DEFAULT_ROC_THRESHOLD

    # Database (Mayu-style) decoy FDR
    mayu_fdr: bool = False
    target_db: Optional[str] = None
    decoy_db: Optional[str] = None
    decoy_pattern: str = DEFAULT_DECOY_PATTERN
    psm_threshold_mayu: float = PSM_THRESHOLD_MAYU
    length_bins: int = DEFAULT_LENGTH_BINS

    conservative: bool = False

    num_bootstrap: int = PI0_NUM_BOOTSTRAP
    seed: Optional[int] = None

    def __post_init__(self):
        for name in ("alpha", "beta", "gamma"):
            value = getattr(self, name)
            if value != SEARCH_PARAMETER and not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"{name} must be in [0, 1] or {SEARCH_PARAMETER} (search), got {value}"
                )
        if self.deepness not in GRID_CANDIDATES:
            raise ValueError(
                f"deepness must be one of {sorted(GRID_CANDIDATES)}, got {self.deepness}"
            )
        if not 0.0 <= self.lambda_ <= 1.0:
            raise ValueError(f"lambda_ must be in [0, 1], got {self.lambda_}")
        if not self.threshold > 0.0:
            raise ValueError(f"threshold must be positive, got {self.threshold}")
        if not self.roc_threshold > 0.0:
            raise ValueError(f"roc_threshold must be positive, got {self.roc_threshold}")
        if self.roc_n < 0:
            raise ValueError(f"roc_n must be >= 0 (0 = auto), got {self.roc_n}")
        if self.num_bootstrap < 1:
            raise ValueError(f"num_bootstrap must be >= 1, got {self.num_bootstrap}")
        if self.length_bins < 1:
            raise ValueError(f"length_bins must be >= 1, got {self.length_bins}")
        if not self.decoy_pattern:
            raise ValueError("decoy_pattern must not be empty")

    @property
    def update_roc_n(self) -> bool:
        """True when ROC N is widened on the fly."""
        return self.roc_n == ROC_N_AUTO

    def resolved_parameters(self) -> Dict[str, float]:
        """Model parameters with unset values replaced by defaults.

        Used when no grid search is performed.
        """
        defaults = {"alpha": DEFAULT_ALPHA, "beta": DEFAULT_BETA, "gamma": DEFAULT_GAMMA}
        return {
            name: (default if getattr(self, name) == SEARCH_PARAMETER else getattr(self, name))
            for name, default in defaults.items()
        }

    def inference_options(self) -> Dict[str, bool]:
        """Options forwarded to the protein inference engine."""
        return {
            "group_proteins": self.group_proteins,
            "no_separate": self.no_separate,
            "no_prune": self.no_prune,
        }
