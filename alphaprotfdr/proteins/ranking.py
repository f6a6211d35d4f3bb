"""Ranked protein probability lists and their target/decoy labelling.

The protein inference engine reports (PEP, protein group) pairs. Every
estimator walks this list from the most confident entry (lowest PEP) to the
least confident one. Ties (identical PEP) are allowed and are handled in one
of two modes:

- ties as one protein: every ranked entry is one step
- per-protein expansion: every protein of a group is its own step

Both modes reduce to the same representation, `LabelledRanking`: one array
entry per step with the step's PEP, target count and decoy count. In
expansion mode each step holds exactly one protein.

Examples
--------
>>> ranked = RankedProteinList.from_pairs([
...     (0.01, ["P1"]),
...     (0.0, ["P2", "random_P3"]),
... ])
>>> ranked.probabilities
array([0.  , 0.01])
>>> labelled = ranked.label(lambda name: name.startswith("random"))
>>> labelled.n_targets, labelled.n_decoys
(array([1, 1]), array([1, 0]))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple

import numpy as np


@dataclass
class LabelledRanking:
    """Per-step probabilities and target/decoy counts.

    Attributes
    ----------
    probabilities : np.ndarray (float64)
        PEP of each step, ascending
    n_targets : np.ndarray (int64)
        Target proteins in each step
    n_decoys : np.ndarray (int64)
        Decoy proteins in each step
    """

    probabilities: np.ndarray
    n_targets: np.ndarray
    n_decoys: np.ndarray

    def __len__(self) -> int:
        return len(self.probabilities)

    @property
    def is_decoy(self) -> np.ndarray:
        """True for steps containing at least one decoy."""
        return self.n_decoys > 0


@dataclass
class RankedProteinList:
    """Protein groups ordered by PEP ascending (most confident first).

    Attributes
    ----------
    probabilities : np.ndarray (float64)
        PEP per group, non-decreasing
    groups : List[Tuple[str, ...]]
        Protein names per group
    """

    probabilities: np.ndarray
    groups: List[Tuple[str, ...]]

    def __post_init__(self):
        self.probabilities = np.asarray(self.probabilities, dtype=np.float64)
        self.groups = [tuple(group) for group in self.groups]
        if self.probabilities.ndim != 1 or len(self.probabilities) != len(self.groups):
            raise ValueError(
                f"Got {self.probabilities.size} probabilities for {len(self.groups)} groups"
            )
        if len(self.probabilities) > 1 and np.any(np.diff(self.probabilities) < 0):
            raise ValueError("Probabilities must be sorted ascending (best first)")

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[float, Sequence[str]]]) -> "RankedProteinList":
        """Build from unordered (PEP, group) pairs.

        Sorting is stable, so tied entries keep their input order.
        """
        pairs = list(pairs)
        if not pairs:
            return cls(np.zeros(0, dtype=np.float64), [])

        probabilities = np.array([pair[0] for pair in pairs], dtype=np.float64)
        order = np.argsort(probabilities, kind="stable")
        return cls(probabilities[order], [tuple(pairs[i][1]) for i in order])

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[Tuple[float, Tuple[str, ...]]]:
        return zip(self.probabilities.tolist(), self.groups)

    @property
    def n_proteins(self) -> int:
        return sum(len(group) for group in self.groups)

    def label(
        self,
        is_decoy: Callable[[str], bool],
        ties_as_one_protein: bool = True,
    ) -> LabelledRanking:
        """Count targets and decoys per step.

        Parameters
        ----------
        is_decoy : Callable[[str], bool]
            Decoy classifier for protein names
        ties_as_one_protein : bool
            One step per group (True) or one step per protein (False)

        Returns
        -------
        LabelledRanking
            Step arrays ready for the numerical kernels
        """
        if ties_as_one_protein:
            n_decoys = np.array(
                [sum(1 for name in group if is_decoy(name)) for group in self.groups],
                dtype=np.int64,
            )
            n_targets = np.array([len(group) for group in self.groups], dtype=np.int64) - n_decoys
            return LabelledRanking(self.probabilities.copy(), n_targets, n_decoys)

        probabilities = []
        decoy_flags = []
        for probability, group in zip(self.probabilities, self.groups):
            for name in group:
                probabilities.append(probability)
                decoy_flags.append(is_decoy(name))

        n_decoys = np.array(decoy_flags, dtype=np.int64)
        return LabelledRanking(
            np.array(probabilities, dtype=np.float64),
            1 - n_decoys,
            n_decoys,
        )
