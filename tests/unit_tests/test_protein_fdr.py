"""Tests for FASTA reading and the database-driven protein FDR estimator."""

import pytest

from alphaprotfdr.constants import FDR_ESTIMATION_FAILED
from alphaprotfdr.database import (
    ProteinFDREstimator,
    iter_fasta,
    parse_protein_id,
    pi0_from_false_positives,
    read_protein_lengths,
)


class TestFastaReading:
    """Test FASTA parsing."""

    def test_parse_protein_id(self):
        """Test that the first header token is the identifier."""
        assert parse_protein_id("sp|P12345|NAME_HUMAN Some protein") == "sp|P12345|NAME_HUMAN"
        assert parse_protein_id("  random_P1  ") == "random_P1"
        assert parse_protein_id("") == ""

    def test_multiline_sequences(self, write_fasta):
        """Test that wrapped sequences are joined."""
        path = write_fasta({"P1": "A" * 130, "P2": "MK"})

        entries = list(iter_fasta(path))

        assert entries == [("P1", "A" * 130), ("P2", "MK")]

    def test_duplicates_keep_first(self, tmp_path):
        """Test that a repeated identifier keeps its first length."""
        path = tmp_path / "dup.fasta"
        path.write_text(">P1\nAAAA\n>P1 again\nAA\n>P2\nMKR\n")

        assert read_protein_lengths(path) == {"P1": 4, "P2": 3}

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            list(iter_fasta(tmp_path / "missing.fasta"))


class TestParseDatabase:
    """Test loading target/decoy databases."""

    def test_concatenated_database(self, write_fasta):
        """Test splitting one database by the decoy pattern."""
        path = write_fasta({"P1": "MK", "P2": "MKR", "random_P1": "KM"})

        estimator = ProteinFDREstimator()
        summary = estimator.parse_database(path)

        assert summary.n_target_proteins == 2
        assert summary.n_decoy_proteins == 1
        assert estimator.decoy_lengths == {"random_P1": 2}

    def test_separate_decoy_database(self, write_fasta):
        """Test a dedicated decoy database."""
        targets = write_fasta({"P1": "MK", "P2": "MKR"}, name="targets.fasta")
        decoys = write_fasta({"REV_P1": "KM"}, name="decoys.fasta")

        summary = ProteinFDREstimator().parse_database(targets, decoys)

        assert summary.n_target_proteins == 2
        assert summary.n_decoy_proteins == 1

    def test_no_target_database(self):
        """Test that a target database is required."""
        with pytest.raises(ValueError, match="could not be loaded"):
            ProteinFDREstimator().parse_database(None)

    def test_invalid_bins(self):
        """Test that at least one length bin is required."""
        with pytest.raises(ValueError):
            ProteinFDREstimator(n_bins=0)


class TestEstimateFDR:
    """Test the length-binned expected false positive count."""

    def test_single_bin(self, write_fasta):
        """Test equal lengths: FP = decoy hits * targets / decoys."""
        entries = {f"P{i}": "A" * 50 for i in range(6)}
        entries.update({f"random_P{i}": "A" * 50 for i in range(3)})
        estimator = ProteinFDREstimator()
        estimator.parse_database(write_fasta(entries))

        fp = estimator.estimate_fdr({"P0", "P1", "P2", "P3"}, {"random_P0"})

        assert fp == pytest.approx(2.0)

    def test_length_bins(self, write_fasta):
        """Test that decoy hits only predict false targets of their length bin."""
        entries = {
            "S1": "A" * 10, "S2": "A" * 10, "L1": "A" * 100, "L2": "A" * 100,
            "random_S": "A" * 10, "random_L": "A" * 100,
        }
        estimator = ProteinFDREstimator(n_bins=2)
        estimator.parse_database(write_fasta(entries))

        # Short decoy hit, one short and one long target hit
        assert estimator.estimate_fdr({"S1", "L1"}, {"random_S"}) == pytest.approx(1.0)
        assert estimator.estimate_fdr({"S1", "L1"}, {"random_S", "random_L"}) == pytest.approx(2.0)

    def test_capped_at_target_hits(self, write_fasta):
        """Test that a bin never predicts more false targets than it has hits."""
        entries = {f"P{i}": "A" * 50 for i in range(10)}
        entries["random_P0"] = "A" * 50
        estimator = ProteinFDREstimator()
        estimator.parse_database(write_fasta(entries))

        assert estimator.estimate_fdr({"P0", "P1"}, {"random_P0"}) == pytest.approx(2.0)

    def test_unknown_names_ignored(self, write_fasta):
        """Test that identified proteins missing from the database are skipped."""
        entries = {"P1": "MK", "P2": "MK", "random_P1": "MK"}
        estimator = ProteinFDREstimator()
        estimator.parse_database(write_fasta(entries))

        assert estimator.estimate_fdr({"P1", "OTHER"}, {"random_OTHER"}) == 0.0

    def test_no_decoys_in_database(self, write_fasta):
        """Test the sentinel when the database holds no decoys."""
        estimator = ProteinFDREstimator()
        estimator.parse_database(write_fasta({"P1": "MK", "P2": "MKR"}))

        assert estimator.estimate_fdr({"P1"}, set()) == FDR_ESTIMATION_FAILED

    def test_not_parsed(self):
        """Test the sentinel before any database is loaded."""
        assert ProteinFDREstimator().estimate_fdr({"P1"}, {"random_P1"}) == FDR_ESTIMATION_FAILED


class TestPi0FromFalsePositives:
    """Test converting expected false positives to pi0."""

    def test_valid(self):
        """Test pi0 = FP / targets."""
        assert pi0_from_false_positives(12.5, 150) == pytest.approx(12.5 / 150)

    def test_failure_cases(self):
        """Test that unusable estimates return None."""
        assert pi0_from_false_positives(FDR_ESTIMATION_FAILED, 100) is None
        assert pi0_from_false_positives(5.0, 0) is None
        assert pi0_from_false_positives(0.0, 100) is None
        assert pi0_from_false_positives(100.0, 100) is None
