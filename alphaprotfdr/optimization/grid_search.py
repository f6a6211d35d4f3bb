"""Grid search of the protein inference parameters (alpha, beta, gamma).

For every candidate triple the inference engine is run, and the resulting
ranking is scored by two criteria:

- ROC_N: how many targets are ranked ahead of the first N decoys
- FDR divergence: how well the estimated FDR matches the decoy-based one

    objective = lambda * ROC_N - (1 - lambda) * divergence

The candidate with the strictly largest objective wins; on ties the first
candidate in scan order (gamma outer, alpha, beta inner) is kept.

Examples
--------
>>> from alphaprotfdr.optimization import GridSearchOptimizer, build_parameter_grid
>>>
>>> candidates = build_parameter_grid(deepness=3, gamma=0.5)
>>> optimizer = GridSearchOptimizer(registry, lambda_=0.15, threshold=0.05)
>>> result = optimizer.search(engine, candidates)
>>> print(result.best)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..constants import (
    DEFAULT_LAMBDA,
    DEFAULT_ROC_THRESHOLD,
    DEFAULT_THRESHOLD,
    GRID_CANDIDATES,
    ROC_N_MIN,
    SEARCH_PARAMETER,
)
from ..inference import ModelParameters, ProteinInferenceEngine
from ..proteins.ranking import RankedProteinList
from ..proteins.registry import ProteinRegistry
from ..scoring.divergence import estimated_and_empirical_fdr, fdr_divergence
from ..scoring.roc import build_roc_curve, roc_n

logger = logging.getLogger(__name__)


def build_parameter_grid(
    deepness: int = 3,
    alpha: float = SEARCH_PARAMETER,
    beta: float = SEARCH_PARAMETER,
    gamma: float = SEARCH_PARAMETER,
) -> List[ModelParameters]:
    """Candidate parameter triples in scan order.

    Parameters
    ----------
    deepness : int, default=3
        Grid coarseness (0 = widest, 3 = narrowest)
    alpha, beta, gamma : float
        Pinned value, or -1 to search the deepness level's candidates

    Returns
    -------
    List[ModelParameters]
        gamma varies slowest, beta fastest

    Examples
    --------
    >>> build_parameter_grid(alpha=0.1, beta=0.01, gamma=0.5)
    [ModelParameters(alpha=0.1, beta=0.01, gamma=0.5)]
    """
    if deepness not in GRID_CANDIDATES:
        raise ValueError(f"deepness must be one of {sorted(GRID_CANDIDATES)}, got {deepness}")

    table = GRID_CANDIDATES[deepness]
    gammas = table["gamma"] if gamma == SEARCH_PARAMETER else (gamma,)
    alphas = table["alpha"] if alpha == SEARCH_PARAMETER else (alpha,)
    betas = table["beta"] if beta == SEARCH_PARAMETER else (beta,)

    return [
        ModelParameters(alpha=a, beta=b, gamma=g)
        for g in gammas
        for a in alphas
        for b in betas
    ]


def grid_objective(roc_score: float, divergence: float, lambda_: float) -> float:
    """lambda * ROC_N - (1 - lambda) * divergence.

    With lambda = 1 the divergence is ignored, even when infinite.
    """
    if lambda_ == 1.0:
        return lambda_ * roc_score
    return lambda_ * roc_score - (1.0 - lambda_) * divergence


def _comparable(objective: float) -> float:
    """NaN objectives rank below everything."""
    return -math.inf if math.isnan(objective) else objective


@dataclass
class CandidateScore:
    """Scores of one evaluated parameter triple."""

    parameters: ModelParameters
    roc_score: float
    divergence: float
    objective: float


@dataclass
class GridSearchResult:
    """Outcome of a grid search.

    Attributes
    ----------
    best : ModelParameters
        Winning parameter triple
    best_objective : float
        Objective of the winner
    roc_n : int
        ROC N after the search (may have grown when auto-updating)
    scores : List[CandidateScore]
        Every evaluation in scan order
    """

    best: ModelParameters
    best_objective: float
    roc_n: int
    scores: List[CandidateScore] = field(default_factory=list)

    @property
    def n_evaluations(self) -> int:
        return len(self.scores)


class GridSearchOptimizer:
    """Scores rankings and searches the parameter grid.

    Parameters
    ----------
    registry : ProteinRegistry
        Source of decoy labels and target/decoy set sizes
    lambda_ : float, default=0.15
        Objective trade-off weight
    threshold : float, default=0.05
        Estimated-FDR ceiling for the divergence
    pi0 : float, default=1.0
        Null proportion for the empirical FDR
    roc_n : int, default=50
        False positive bound for ROC_N
    update_roc_n : bool, default=False
        Widen roc_n while building the FDR curves
    roc_threshold : float, default=0.05
        Estimated FDR at or below which roc_n may grow
    ties_as_one_protein : bool, default=True
        Tie mode of the FDR curves (the ROC curve always uses whole groups)
    conservative : bool, default=False
        Absolute instead of squared divergence
    """

    def __init__(
        self,
        registry: ProteinRegistry,
        lambda_: float = DEFAULT_LAMBDA,
        threshold: float = DEFAULT_THRESHOLD,
        pi0: float = 1.0,
        roc_n: int = ROC_N_MIN,
        update_roc_n: bool = False,
        roc_threshold: float = DEFAULT_ROC_THRESHOLD,
        ties_as_one_protein: bool = True,
        conservative: bool = False,
    ):
        self.registry = registry
        self.lambda_ = lambda_
        self.threshold = threshold
        self.pi0 = pi0
        self.roc_n = int(roc_n)
        self.update_roc_n = update_roc_n
        self.roc_threshold = roc_threshold
        self.ties_as_one_protein = ties_as_one_protein
        self.conservative = conservative

    def score(self, ranked: RankedProteinList, parameters: ModelParameters) -> CandidateScore:
        """ROC_N, FDR divergence and objective of one ranking.

        Raises
        ------
        InsufficientDecoysError
            If fewer than roc_n decoys were observed
        """
        n_targets = self.registry.number_target_proteins
        n_decoys = self.registry.number_decoy_proteins

        by_group = ranked.label(self.registry.is_decoy, ties_as_one_protein=True)
        labelled = (
            by_group if self.ties_as_one_protein
            else ranked.label(self.registry.is_decoy, ties_as_one_protein=False)
        )

        curves = estimated_and_empirical_fdr(
            labelled,
            n_targets,
            n_decoys,
            threshold=self.threshold,
            pi0=self.pi0,
            roc_n=self.roc_n,
            update_roc_n=self.update_roc_n,
            roc_threshold=self.roc_threshold,
        )
        self.roc_n = curves.roc_n

        false_positives, true_positives = build_roc_curve(by_group, self.roc_n, n_targets, n_decoys)
        roc_score = roc_n(false_positives, true_positives, self.roc_n)
        divergence = fdr_divergence(
            curves.estimated, curves.empirical, self.threshold, self.conservative
        )

        return CandidateScore(
            parameters=parameters,
            roc_score=roc_score,
            divergence=divergence,
            objective=grid_objective(roc_score, divergence, self.lambda_),
        )

    def search(
        self,
        engine: ProteinInferenceEngine,
        candidates: Sequence[ModelParameters],
    ) -> GridSearchResult:
        """Evaluate every candidate and return the best one.

        Parameters
        ----------
        engine : ProteinInferenceEngine
            Produces a ranking per parameter triple
        candidates : Sequence[ModelParameters]
            Triples in scan order (see `build_parameter_grid`)

        Returns
        -------
        GridSearchResult
        """
        if not candidates:
            raise ValueError("Grid search needs at least one candidate")

        logger.info(f"Grid searching {len(candidates):,} parameter combinations...")

        scores: List[CandidateScore] = []
        best: Optional[CandidateScore] = None

        for parameters in candidates:
            ranked = engine.compute_protein_probabilities(parameters)
            candidate = self.score(ranked, parameters)
            scores.append(candidate)

            logger.debug(
                f"alpha={parameters.alpha} beta={parameters.beta} gamma={parameters.gamma}: "
                f"ROC{self.roc_n}={candidate.roc_score:.4f} "
                f"divergence={candidate.divergence:.4g} objective={candidate.objective:.4g}"
            )

            if best is None or _comparable(candidate.objective) > _comparable(best.objective):
                best = candidate

        if not math.isfinite(best.objective):
            logger.warning(
                "Grid search found no candidate with a finite objective; "
                "keeping the first best in scan order"
            )

        logger.info(
            f"✓ Grid search done: alpha={best.parameters.alpha}, beta={best.parameters.beta}, "
            f"gamma={best.parameters.gamma} (objective {best.objective:.4g})"
        )

        return GridSearchResult(
            best=best.parameters,
            best_objective=best.objective,
            roc_n=self.roc_n,
            scores=scores,
        )
