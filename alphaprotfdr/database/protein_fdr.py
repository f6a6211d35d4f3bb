"""Database-driven estimate of false positive protein identifications.

Mayu-style estimate: decoy hits predict how many target hits are false,
with protein length taken into account because long proteins collect random
peptide matches more easily. Proteins are put into equal-depth length bins
over the database; within each bin

    expected FP = decoy hits * (target proteins in db / decoy proteins in db)

capped at the number of target hits in that bin.

The protein estimator only needs the summed expected false positive count,
which it turns into pi0 = FP / |implicated targets|.

Examples
--------
>>> estimator = ProteinFDREstimator(decoy_pattern="random")
>>> estimator.parse_database("target_decoy.fasta")
>>> fp = estimator.estimate_fdr(target_hits, decoy_hits)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import numpy as np

from ..constants import DEFAULT_DECOY_PATTERN, DEFAULT_LENGTH_BINS, FDR_ESTIMATION_FAILED
from .fasta import read_protein_lengths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseSummary:
    """Protein counts of a parsed target/decoy database."""

    n_target_proteins: int
    n_decoy_proteins: int


class ProteinFDREstimator:
    """Expected false positive protein count from target/decoy databases.

    Parameters
    ----------
    decoy_pattern : str, default="random"
        Substring marking decoy proteins in a concatenated database
    n_bins : int, default=10
        Equal-depth protein length bins
    """

    def __init__(self, decoy_pattern: str = DEFAULT_DECOY_PATTERN, n_bins: int = DEFAULT_LENGTH_BINS):
        if n_bins < 1:
            raise ValueError(f"n_bins must be >= 1, got {n_bins}")
        self.decoy_pattern = decoy_pattern
        self.n_bins = n_bins
        self.target_lengths: Dict[str, int] = {}
        self.decoy_lengths: Dict[str, int] = {}

    def parse_database(
        self,
        target_db: Union[str, Path, None],
        decoy_db: Union[str, Path, None] = None,
    ) -> DatabaseSummary:
        """Load protein lengths from the database(s).

        With only a target database, entries containing the decoy pattern are
        taken as decoys.

        Raises
        ------
        ValueError
            If no target database is given
        FileNotFoundError
            If a database file does not exist
        """
        if not target_db:
            raise ValueError("Database file could not be loaded: no target database given")

        target_lengths = read_protein_lengths(target_db)
        if decoy_db:
            decoy_lengths = read_protein_lengths(decoy_db)
        else:
            decoy_lengths = {
                name: length for name, length in target_lengths.items()
                if self.decoy_pattern in name
            }
            target_lengths = {
                name: length for name, length in target_lengths.items()
                if name not in decoy_lengths
            }

        self.target_lengths = target_lengths
        self.decoy_lengths = decoy_lengths

        logger.info(
            f"✓ Database: {len(target_lengths):,} target and "
            f"{len(decoy_lengths):,} decoy proteins"
        )
        return DatabaseSummary(len(target_lengths), len(decoy_lengths))

    def _bin_edges(self) -> np.ndarray:
        lengths = np.array(
            list(self.target_lengths.values()) + list(self.decoy_lengths.values()),
            dtype=np.float64,
        )
        edges = np.quantile(lengths, np.linspace(0.0, 1.0, self.n_bins + 1))
        return np.unique(edges)

    @staticmethod
    def _bin_counts(lengths: Iterable[int], inner_edges: np.ndarray, n_bins: int) -> np.ndarray:
        lengths = np.fromiter(lengths, dtype=np.float64)
        bins = np.searchsorted(inner_edges, lengths, side="right")
        return np.bincount(bins, minlength=n_bins).astype(np.float64)

    def estimate_fdr(
        self,
        target_proteins: Iterable[str],
        decoy_proteins: Iterable[str],
    ) -> float:
        """Expected number of false positive target proteins.

        Parameters
        ----------
        target_proteins : Iterable[str]
            Identified target protein names
        decoy_proteins : Iterable[str]
            Identified decoy protein names

        Returns
        -------
        float
            Expected false positives, or FDR_ESTIMATION_FAILED (-1.0) when the
            database holds no target or no decoy proteins
        """
        if not self.target_lengths or not self.decoy_lengths:
            logger.warning("Database has no target or no decoy proteins; cannot estimate protein FDR")
            return FDR_ESTIMATION_FAILED

        target_hits = [self.target_lengths[name] for name in target_proteins if name in self.target_lengths]
        decoy_hits = [self.decoy_lengths[name] for name in decoy_proteins if name in self.decoy_lengths]

        edges = self._bin_edges()
        inner_edges = edges[1:-1]
        n_bins = len(inner_edges) + 1

        db_targets = self._bin_counts(self.target_lengths.values(), inner_edges, n_bins)
        db_decoys = self._bin_counts(self.decoy_lengths.values(), inner_edges, n_bins)
        hit_targets = self._bin_counts(target_hits, inner_edges, n_bins)
        hit_decoys = self._bin_counts(decoy_hits, inner_edges, n_bins)

        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = np.where(db_decoys > 0, db_targets / db_decoys, 0.0)
        expected = np.minimum(hit_decoys * ratio, hit_targets)

        fp = float(expected.sum())
        logger.info(
            f"✓ Expected {fp:.2f} false positive proteins among {len(target_hits):,} "
            f"target hits ({len(decoy_hits):,} decoy hits, {n_bins} length bins)"
        )
        return fp


def pi0_from_false_positives(false_positives: float, n_target_proteins: int) -> Optional[float]:
    """pi0 = FP / targets, or None if outside (0, 1).

    None signals the caller to fall back to pi0 = 1.0.
    """
    if false_positives == FDR_ESTIMATION_FAILED or n_target_proteins <= 0:
        return None
    pi0 = false_positives / n_target_proteins
    if pi0 <= 0.0 or pi0 >= 1.0:
        return None
    return pi0
