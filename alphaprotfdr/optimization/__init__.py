"""Parameter optimization for the protein inference model.

Grid search over (alpha, beta, gamma) trading ROC_N against the divergence
between estimated and empirical FDR.
"""

from .grid_search import (
    CandidateScore,
    GridSearchOptimizer,
    GridSearchResult,
    build_parameter_grid,
    grid_objective,
)

__all__ = [
    "build_parameter_grid",
    "grid_objective",
    "GridSearchOptimizer",
    "GridSearchResult",
    "CandidateScore",
]
