"""Pytest configuration for AlphaProtFDR tests.

This module provides common fixtures and configuration for all tests:
small hand-checkable rankings, a synthetic target/decoy protein set and a
fake inference engine that returns preset rankings.
"""

import numpy as np
import pytest

from alphaprotfdr.inference import ModelParameters
from alphaprotfdr.proteins import ProteinRegistry, PSMRecord, RankedProteinList


class FakeInferenceEngine:
    """Inference engine returning a preset ranking and recording calls.

    `ranking` is either a `RankedProteinList` returned for every parameter
    triple, or a callable mapping `ModelParameters` to a ranking.
    """

    def __init__(self, ranking):
        self.ranking = ranking
        self.calls = []

    def compute_protein_probabilities(self, parameters: ModelParameters) -> RankedProteinList:
        self.calls.append(parameters)
        if isinstance(self.ranking, RankedProteinList):
            return self.ranking
        return self.ranking(parameters)


@pytest.fixture
def fake_engine_class():
    """The fake engine class, for tests building their own engines."""
    return FakeInferenceEngine


@pytest.fixture
def small_psms():
    """Four targets and two decoys, one PSM shared by two proteins."""
    return [
        PSMRecord("PEPTIDEK", False, ("P1",), pep=0.001, q=0.001),
        PSMRecord("ELVISK", False, ("P2", "P3"), pep=0.01, q=0.005),
        PSMRecord("LIVESK", False, ("P4",), pep=0.3, q=0.2),
        PSMRecord("KEDITPEP", True, ("random_D1",), pep=0.4, q=0.3),
        PSMRecord("KSIVLE", True, ("random_D2",), pep=0.002, q=0.008),
        PSMRecord("PEPTIDEK", False, ("P1",), pep=0.002, q=0.001),
    ]


@pytest.fixture
def small_registry(small_psms):
    """Registry aggregated from `small_psms`."""
    registry = ProteinRegistry()
    registry.add_psms(small_psms)
    return registry


@pytest.fixture
def small_ranking():
    """Ranking over the `small_psms` proteins, with a P2/P3 tie group."""
    return RankedProteinList.from_pairs([
        (0.0, ["P1"]),
        (0.01, ["P2", "P3"]),
        (0.2, ["random_D2"]),
        (0.4, ["P4"]),
        (0.9, ["random_D1"]),
    ])


# =============================================================================
# Synthetic target/decoy set
# =============================================================================

N_TRUE_TARGETS = 150
N_FALSE_TARGETS = 50
N_DECOYS = 60


@pytest.fixture
def synthetic_peps():
    """Per-protein PEPs: confident true targets, unconfident false targets
    and decoys drawn from the same distribution as the false targets."""
    rng = np.random.default_rng(7)
    peps = {}
    for i in range(N_TRUE_TARGETS):
        peps[f"T{i}"] = float(rng.uniform(0.0, 0.05))
    for i in range(N_FALSE_TARGETS):
        peps[f"T{N_TRUE_TARGETS + i}"] = float(rng.uniform(0.3, 1.0))
    for i in range(N_DECOYS):
        peps[f"random_D{i}"] = float(rng.uniform(0.3, 1.0))
    return peps


@pytest.fixture
def synthetic_psms(synthetic_peps):
    """One PSM per protein; true targets and five decoys pass q <= 0.01."""
    psms = []
    for name, pep in synthetic_peps.items():
        is_decoy = name.startswith("random")
        confident = pep < 0.05 or name in {f"random_D{i}" for i in range(5)}
        psms.append(PSMRecord(
            f"PEP{name}K", is_decoy, (name,), pep=pep, q=0.001 if confident else 0.5
        ))
    return psms


@pytest.fixture
def synthetic_engine(synthetic_peps):
    """Engine whose PEPs shift with alpha, so grid candidates differ."""

    def ranking_for(parameters):
        pairs = [
            (min(1.0, pep * (1.0 + parameters.alpha)), [name])
            for name, pep in synthetic_peps.items()
        ]
        return RankedProteinList.from_pairs(pairs)

    return FakeInferenceEngine(ranking_for)


@pytest.fixture
def write_fasta(tmp_path):
    """Write {protein_id: sequence} to a FASTA file and return its path."""

    def _write(entries, name="db.fasta"):
        path = tmp_path / name
        with open(path, "w") as f:
            for protein_id, sequence in entries.items():
                f.write(f">{protein_id} description\n")
                for start in range(0, len(sequence), 60):
                    f.write(sequence[start:start + 60] + "\n")
        return path

    return _write
