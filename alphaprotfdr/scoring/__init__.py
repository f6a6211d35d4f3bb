"""Protein-level statistical estimators.

This module provides the statistics computed along a ranked protein list:
- Model-based q-values (running mean target PEP)
- Empirical q-values and p-values (decoy counting)
- Storey's pi0 with bootstrap lambda selection
- ROC curve and normalized partial area (ROC_N)
- Estimated vs. empirical FDR divergence

Key Features
------------
- Numba-accelerated walks over the ranking
- Two tie modes via `LabelledRanking` (ties as one protein, or expanded)
- NaN / inf / >1 statistics clamped to 1.0
- Explicit random generator for reproducible bootstrap

Examples
--------
>>> from alphaprotfdr.proteins import RankedProteinList
>>> from alphaprotfdr.scoring import estimate_qvalues, estimate_empirical_qvalues
>>>
>>> ranked = RankedProteinList.from_pairs(pairs)
>>> labelled = ranked.label(registry.is_decoy)
>>> qvalues = estimate_qvalues(labelled)
>>> qvalues_emp, pvalues = estimate_empirical_qvalues(labelled, n_targets, n_decoys)
"""

from .qvalues import (
    clamp_unit,
    estimate_qvalues,
    estimate_raw_qvalues,
    monotonize_running_max,
    monotonize_running_min,
)
from .empirical import (
    estimate_empirical_qvalues,
    estimate_target_pvalues,
)
from .pi0 import (
    bootstrap_sample,
    estimate_pi0,
    pi0_at_lambdas,
    pi0_lambdas,
)
from .roc import (
    InsufficientDecoysError,
    build_roc_curve,
    roc_n,
    segment_area,
    segment_area_squared,
)
from .divergence import (
    FDRCurves,
    estimated_and_empirical_fdr,
    fdr_divergence,
)

__all__ = [
    # Q-values
    "estimate_qvalues",
    "estimate_raw_qvalues",
    "monotonize_running_min",
    "monotonize_running_max",
    "clamp_unit",
    # Empirical q-values / p-values
    "estimate_empirical_qvalues",
    "estimate_target_pvalues",
    # Pi0
    "estimate_pi0",
    "pi0_lambdas",
    "pi0_at_lambdas",
    "bootstrap_sample",
    # ROC
    "build_roc_curve",
    "roc_n",
    "segment_area",
    "segment_area_squared",
    "InsufficientDecoysError",
    # FDR divergence
    "FDRCurves",
    "estimated_and_empirical_fdr",
    "fdr_divergence",
]
