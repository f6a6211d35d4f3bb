"""Protein-level probability and FDR estimation pipeline.

Turns peptide-level identifications into protein-level statistics:

1. Aggregate PSMs into proteins (target/decoy sets fixed here)
2. Optionally estimate pi0 from the target/decoy databases
3. Optionally grid search the inference parameters (alpha, beta, gamma)
4. Run the inference engine with the chosen parameters
5. Compute q-values, pi0 (bootstrap), empirical q-values and p-values
6. Publish PEP, q, empirical q and p on every protein

Examples
--------
>>> from alphaprotfdr import ProteinFDRConfig, ProteinProbEstimator
>>>
>>> estimator = ProteinProbEstimator(ProteinFDRConfig(deepness=3, seed=1))
>>> estimator.initialize(psms, engine=my_engine)
>>> result = estimator.run()
>>> print(result.parameters, result.pi0)
>>> for protein in estimator.registry.sorted_proteins():
...     print(protein.name, protein.pep, protein.q)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from .config import ProteinFDRConfig
from .constants import PI0_ESTIMATION_FAILED, ROC_N_MIN, SUMMARY_QVALUE_LEVEL
from .database.protein_fdr import ProteinFDREstimator, pi0_from_false_positives
from .inference import InferenceEngineFactory, ModelParameters, ProteinInferenceEngine
from .optimization.grid_search import GridSearchOptimizer, GridSearchResult, build_parameter_grid
from .proteins.ranking import RankedProteinList
from .proteins.registry import AggregationSummary, ProteinRegistry, PSMRecord
from .scoring.empirical import estimate_empirical_qvalues, estimate_target_pvalues
from .scoring.pi0 import estimate_pi0
from .scoring.qvalues import estimate_qvalues

logger = logging.getLogger(__name__)


@dataclass
class EstimationResult:
    """Summary of a full estimation run."""

    parameters: ModelParameters
    pi0: float
    roc_n: int
    n_proteins: int
    n_targets_below_level: int
    grid_search: Optional[GridSearchResult] = None
    # Ranked empirical q-values, kept only when output_empirical_qvalues is set
    qvalues_empirical: Optional[np.ndarray] = None


class ProteinProbEstimator:
    """Estimates protein PEPs, q-values, empirical q-values and p-values.

    Parameters
    ----------
    config : ProteinFDRConfig, optional
        Options; defaults to `ProteinFDRConfig()`
    rng : np.random.Generator, optional
        Random source for the pi0 bootstrap; built from `config.seed` if
        omitted
    fdr_estimator : ProteinFDREstimator, optional
        Database decoy-FDR estimator used when `config.mayu_fdr` is set
    """

    def __init__(
        self,
        config: Optional[ProteinFDRConfig] = None,
        rng: Optional[np.random.Generator] = None,
        fdr_estimator: Optional[ProteinFDREstimator] = None,
    ):
        self.config = config if config is not None else ProteinFDRConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.fdr_estimator = fdr_estimator

        self.registry = ProteinRegistry(self.config.decoy_pattern)
        self.engine: Optional[ProteinInferenceEngine] = None

        self.parameters = ModelParameters(self.config.alpha, self.config.beta, self.config.gamma)
        self.pi0 = 1.0
        self.roc_n = self.config.roc_n if not self.config.update_roc_n else ROC_N_MIN

        self.ranked: Optional[RankedProteinList] = None
        self.qvalues = np.zeros(0, dtype=np.float64)
        self.qvalues_empirical = np.zeros(0, dtype=np.float64)
        self.pvalues = np.zeros(0, dtype=np.float64)

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def initialize(
        self,
        psms: Iterable[PSMRecord],
        engine: Optional[ProteinInferenceEngine] = None,
        engine_factory: Optional[InferenceEngineFactory] = None,
    ) -> AggregationSummary:
        """Aggregate PSMs and attach the inference engine.

        Either a ready engine or a factory receiving the PSMs and
        `config.inference_options()` must be given.
        """
        if (engine is None) == (engine_factory is None):
            raise ValueError("Pass exactly one of engine or engine_factory")

        psms = list(psms)
        summary = self.registry.add_psms(psms)
        self.engine = engine if engine is not None else engine_factory(
            psms, self.config.inference_options()
        )
        return summary

    @property
    def alpha(self) -> float:
        return self.parameters.alpha

    @property
    def beta(self) -> float:
        return self.parameters.beta

    @property
    def gamma(self) -> float:
        return self.parameters.gamma

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def run(self) -> EstimationResult:
        """Estimate parameters (if requested) and publish protein statistics."""
        if self.engine is None:
            raise ValueError("Estimator not initialized; call initialize() first")

        start = time.perf_counter()

        if self.config.mayu_fdr:
            self.pi0 = self.estimate_pi0_from_database()

        grid_result = None
        if self.config.grid_search:
            logger.info("The parameters for the model will be estimated by grid search")
            grid_start = time.perf_counter()
            grid_result = self.estimate_parameters()
            logger.info(f"Estimating the parameters took {time.perf_counter() - grid_start:.1f} s")
        else:
            self.parameters = ModelParameters(**self.config.resolved_parameters())

        logger.info(
            f"Parameters chosen: gamma={self.gamma}, alpha={self.alpha}, beta={self.beta}; "
            "computing protein level probabilities"
        )

        ranked = self.engine.compute_protein_probabilities(self.parameters)
        self.compute_statistics(ranked)

        n_below = self.count_qvalues_below_level(SUMMARY_QVALUE_LEVEL)
        logger.info(f"✓ Proteins identified below q={SUMMARY_QVALUE_LEVEL}: {n_below:,}")
        logger.info(f"Estimating protein probabilities took {time.perf_counter() - start:.1f} s")

        return EstimationResult(
            parameters=self.parameters,
            pi0=self.pi0,
            roc_n=self.roc_n,
            n_proteins=len(self.registry),
            n_targets_below_level=n_below,
            grid_search=grid_result,
            qvalues_empirical=(
                self.qvalues_empirical if self.config.output_empirical_qvalues else None
            ),
        )

    def estimate_pi0_from_database(self) -> float:
        """pi0 from the database decoy-FDR estimator (1.0 on failure).

        Raises
        ------
        ValueError, FileNotFoundError
            If the database cannot be loaded
        """
        logger.info("Estimating protein FDR from the target/decoy databases")
        if self.fdr_estimator is None:
            self.fdr_estimator = ProteinFDREstimator(
                decoy_pattern=self.config.decoy_pattern, n_bins=self.config.length_bins
            )
        self.fdr_estimator.parse_database(self.config.target_db, self.config.decoy_db)

        targets, decoys = self.registry.proteins_below_psm_threshold(self.config.psm_threshold_mayu)
        false_positives = self.fdr_estimator.estimate_fdr(targets, decoys)

        pi0 = pi0_from_false_positives(false_positives, len(targets))
        if pi0 is None:
            logger.warning(
                f"Could not derive pi0 from {false_positives:.2f} expected false positives "
                f"among {len(targets):,} targets; using pi0 = 1.0"
            )
            return 1.0

        logger.info(
            f"✓ Estimated protein FDR at PSM FDR {self.config.psm_threshold_mayu}: {pi0:.4f} "
            f"({false_positives:.2f} expected false positive proteins)"
        )
        return pi0

    def estimate_parameters(self) -> GridSearchResult:
        """Grid search alpha/beta/gamma and commit the best triple."""
        candidates = build_parameter_grid(
            self.config.deepness, self.config.alpha, self.config.beta, self.config.gamma
        )
        optimizer = GridSearchOptimizer(
            self.registry,
            lambda_=self.config.lambda_,
            threshold=self.config.threshold,
            pi0=self.pi0,
            roc_n=self.roc_n,
            update_roc_n=self.config.update_roc_n,
            roc_threshold=self.config.roc_threshold,
            ties_as_one_protein=self.config.ties_as_one_protein,
            conservative=self.config.conservative,
        )
        result = optimizer.search(self.engine, candidates)

        self.parameters = result.best
        self.roc_n = result.roc_n
        return result

    def compute_statistics(self, ranked: RankedProteinList) -> None:
        """q-values, pi0, empirical q-values and p-values for one ranking,
        published on the protein records."""
        ties = self.config.ties_as_one_protein
        labelled = ranked.label(self.registry.is_decoy, ties_as_one_protein=ties)

        qvalues = estimate_qvalues(labelled)

        if self.config.use_pi0 and not self.config.mayu_fdr:
            pvalues = estimate_target_pvalues(
                ranked.label(self.registry.is_decoy, ties_as_one_protein=False)
            )
            pi0 = estimate_pi0(pvalues, rng=self.rng, num_bootstrap=self.config.num_bootstrap)
            if pi0 <= 0.0 or pi0 > 1.0:
                fallback = float(qvalues[-1]) if len(qvalues) else 1.0
                if pi0 == PI0_ESTIMATION_FAILED:
                    logger.warning(f"Taking the highest estimated q-value as pi0: {fallback:.4f}")
                pi0 = fallback
            self.pi0 = pi0
            logger.info(f"✓ pi0 = {self.pi0:.4f}")

        qvalues_empirical, pvalues = estimate_empirical_qvalues(
            labelled,
            self.registry.number_target_proteins,
            self.registry.number_decoy_proteins,
            pi0=self.pi0,
        )

        self.registry.update_statistics(
            ranked.groups,
            ranked.probabilities,
            qvalues,
            qvalues_empirical,
            pvalues,
            ties_as_one_protein=ties,
        )

        self.ranked = ranked
        self.qvalues = qvalues
        self.qvalues_empirical = qvalues_empirical
        self.pvalues = pvalues

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def count_qvalues_below_level(self, level: float) -> int:
        """Number of target proteins with q-value <= level."""
        return self.registry.count_qvalues_below_level(level)

    def count_decoy_qvalues_below_level(self, level: float) -> int:
        """Number of decoy proteins with q-value <= level."""
        return self.registry.count_qvalues_below_level(level, decoys=True)
