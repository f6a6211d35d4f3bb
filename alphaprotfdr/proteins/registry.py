"""Protein registry: aggregation of PSMs into protein records.

The registry is the single owner of all `Protein` records. It is filled once
from the peptide-spectrum match stream and afterwards only updated through
`update_statistics()` when a pipeline pass publishes protein-level results.

Design principles:
1. One record per protein name, decoy flag fixed on first sight
2. Target/decoy name sets derived from first-sight events only
3. Accessors instead of raw aliasing of the mapping
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Sequence, Set, Tuple

import numpy as np

from ..constants import DEFAULT_DECOY_PATTERN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PSMRecord:
    """Peptide-spectrum match as delivered by the peptide-level scorer."""

    peptide: str
    is_decoy: bool
    protein_ids: Tuple[str, ...]
    pep: float = 0.0
    q: float = 0.0
    p: float = 0.0


@dataclass
class Peptide:
    """Peptide evidence attached to one protein."""

    sequence: str
    is_decoy: bool
    pep: float = 0.0
    q: float = 0.0
    p: float = 0.0


@dataclass
class Protein:
    """Protein record with its peptides and published statistics."""

    name: str
    is_decoy: bool
    peptides: List[Peptide] = field(default_factory=list)
    pep: float = 0.0
    q: float = 0.0
    q_empirical: float = 0.0
    p: float = 0.0

    @property
    def peptide_sequences(self) -> List[str]:
        """Distinct non-empty peptide sequences in order of first sight."""
        seen = []
        for peptide in self.peptides:
            if peptide.sequence and peptide.sequence not in seen:
                seen.append(peptide.sequence)
        return seen


@dataclass(frozen=True)
class AggregationSummary:
    """Counts produced by one `ProteinRegistry.add_psms()` call."""

    n_psms: int
    n_new_proteins: int
    n_peptides: int
    n_target_proteins: int
    n_decoy_proteins: int


class ProteinRegistry:
    """Mapping from protein name to `Protein`, with target/decoy bookkeeping.

    Parameters
    ----------
    decoy_pattern : str
        Substring identifying decoys among names the registry never saw
        (e.g. proteins reported by the inference engine only).

    Examples
    --------
    >>> registry = ProteinRegistry()
    >>> psms = [PSMRecord("PEPTIDEK", False, ("P1", "P2"), pep=0.01, q=0.001)]
    >>> summary = registry.add_psms(psms)
    >>> summary.n_target_proteins
    2
    >>> registry["P1"].peptides[0].sequence
    'PEPTIDEK'
    """

    def __init__(self, decoy_pattern: str = DEFAULT_DECOY_PATTERN):
        self.decoy_pattern = decoy_pattern
        self._proteins: Dict[str, Protein] = {}
        self._target_names: Set[str] = set()
        self._decoy_names: Set[str] = set()

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def add_psms(self, psms: Iterable[PSMRecord]) -> AggregationSummary:
        """Aggregate PSMs into proteins.

        A protein is created on first sight of its name, with the decoy flag
        of that PSM. Later PSMs only append peptide records.

        Parameters
        ----------
        psms : Iterable[PSMRecord]
            Peptide-spectrum matches

        Returns
        -------
        AggregationSummary
            Counts for this call and the registry totals
        """
        n_psms = 0
        n_new = 0
        n_peptides = 0

        for psm in psms:
            n_psms += 1
            for protein_id in psm.protein_ids:
                peptide = Peptide(psm.peptide, psm.is_decoy, psm.pep, psm.q, psm.p)
                protein = self._proteins.get(protein_id)
                if protein is None:
                    self._proteins[protein_id] = Protein(
                        protein_id, psm.is_decoy, peptides=[peptide]
                    )
                    if psm.is_decoy:
                        self._decoy_names.add(protein_id)
                    else:
                        self._target_names.add(protein_id)
                    n_new += 1
                else:
                    protein.peptides.append(peptide)
                n_peptides += 1

        logger.info(
            f"✓ Aggregated {n_psms:,} PSMs into {len(self._proteins):,} proteins "
            f"({self.number_target_proteins:,} targets, {self.number_decoy_proteins:,} decoys)"
        )

        return AggregationSummary(
            n_psms=n_psms,
            n_new_proteins=n_new,
            n_peptides=n_peptides,
            n_target_proteins=self.number_target_proteins,
            n_decoy_proteins=self.number_decoy_proteins,
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._proteins)

    def __contains__(self, name: str) -> bool:
        return name in self._proteins

    def __getitem__(self, name: str) -> Protein:
        return self._proteins[name]

    def __iter__(self) -> Iterator[Protein]:
        return iter(self._proteins.values())

    @property
    def names(self) -> List[str]:
        return list(self._proteins)

    @property
    def target_names(self) -> FrozenSet[str]:
        return frozenset(self._target_names)

    @property
    def decoy_names(self) -> FrozenSet[str]:
        return frozenset(self._decoy_names)

    @property
    def number_target_proteins(self) -> int:
        return len(self._target_names)

    @property
    def number_decoy_proteins(self) -> int:
        return len(self._decoy_names)

    @property
    def target_decoy_ratio(self) -> float:
        """Target proteins per decoy protein.

        Raises
        ------
        ValueError
            If no target or no decoy protein was seen
        """
        if self.number_target_proteins == 0 or self.number_decoy_proteins == 0:
            raise ValueError(
                "Empirical FDR needs both target and decoy proteins; got "
                f"{self.number_target_proteins} targets and "
                f"{self.number_decoy_proteins} decoys"
            )
        return self.number_target_proteins / self.number_decoy_proteins

    def is_decoy(self, name: str) -> bool:
        """Decoy status of a protein name.

        Known proteins keep the flag they were created with; unknown names
        are classified by the decoy pattern.
        """
        protein = self._proteins.get(name)
        if protein is not None:
            return protein.is_decoy
        return self.decoy_pattern in name

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def update_statistics(
        self,
        groups: Sequence[Sequence[str]],
        probabilities: np.ndarray,
        qvalues: np.ndarray,
        qvalues_empirical: np.ndarray,
        pvalues: np.ndarray,
        ties_as_one_protein: bool = True,
    ) -> int:
        """Publish PEP, q-value, empirical q-value and p-value per protein.

        Parameters
        ----------
        groups : Sequence[Sequence[str]]
            Ranked protein groups (best first)
        probabilities : np.ndarray
            PEP of each group
        qvalues, qvalues_empirical, pvalues : np.ndarray
            One value per group (ties as one protein) or one value per
            protein in expansion order
        ties_as_one_protein : bool
            Indexing mode of the statistic arrays

        Returns
        -------
        int
            Number of protein records updated
        """
        n_expected = len(groups) if ties_as_one_protein else sum(len(g) for g in groups)
        for label, values in (
            ("qvalues", qvalues),
            ("qvalues_empirical", qvalues_empirical),
            ("pvalues", pvalues),
        ):
            if len(values) != n_expected:
                raise ValueError(
                    f"{label} has {len(values)} entries, expected {n_expected}"
                )

        n_updated = 0
        flat_index = 0
        for group_index, group in enumerate(groups):
            pep = float(probabilities[group_index])
            for name in group:
                index = group_index if ties_as_one_protein else flat_index
                flat_index += 1

                protein = self._proteins.get(name)
                if protein is None:
                    # Reported by the inference engine but never seen in a PSM
                    protein = Protein(name, self.decoy_pattern in name)
                    self._proteins[name] = protein

                protein.pep = pep
                protein.q = float(qvalues[index])
                protein.q_empirical = float(qvalues_empirical[index])
                protein.p = float(pvalues[index])
                n_updated += 1

        return n_updated

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def count_qvalues_below_level(self, level: float, decoys: bool = False) -> int:
        """Number of target (or decoy) proteins with q-value <= level."""
        return sum(
            1 for protein in self._proteins.values()
            if protein.q <= level and protein.is_decoy == decoys
        )

    def proteins_below_psm_threshold(self, threshold: float) -> Tuple[Set[str], Set[str]]:
        """Proteins implicated by at least one peptide with q <= threshold.

        Returns
        -------
        targets : Set[str]
            Implicated target protein names
        decoys : Set[str]
            Implicated decoy protein names
        """
        targets: Set[str] = set()
        decoys: Set[str] = set()
        for name, protein in self._proteins.items():
            if any(peptide.q <= threshold for peptide in protein.peptides):
                if protein.is_decoy:
                    decoys.add(name)
                else:
                    targets.add(name)
        return targets, decoys

    def sorted_proteins(self) -> List[Protein]:
        """Proteins ordered by PEP (most confident first), then name."""
        return sorted(self._proteins.values(), key=lambda protein: (protein.pep, protein.name))
