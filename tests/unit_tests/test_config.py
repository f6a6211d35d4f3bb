"""Tests for the estimator configuration."""

import pytest

from alphaprotfdr import ProteinFDRConfig
from alphaprotfdr.constants import SEARCH_PARAMETER


class TestDefaults:
    """Test default options."""

    def test_defaults(self):
        """Test that everything is searched and ROC N auto-updates by default."""
        config = ProteinFDRConfig()

        assert config.alpha == config.beta == config.gamma == SEARCH_PARAMETER
        assert config.grid_search
        assert config.ties_as_one_protein
        assert config.deepness == 3
        assert config.lambda_ == pytest.approx(0.15)
        assert config.threshold == pytest.approx(0.05)
        assert config.update_roc_n
        assert config.decoy_pattern == "random"

    def test_fixed_roc_n(self):
        """Test that a positive roc_n disables auto-updating."""
        assert not ProteinFDRConfig(roc_n=100).update_roc_n


class TestResolvedParameters:
    """Test filling in unset parameters."""

    def test_all_unset(self):
        """Test the default triple."""
        assert ProteinFDRConfig().resolved_parameters() == {
            "alpha": 0.1, "beta": 0.01, "gamma": 0.5,
        }

    def test_partially_set(self):
        """Test that set values are kept."""
        resolved = ProteinFDRConfig(alpha=0.3, gamma=0.2).resolved_parameters()
        assert resolved == {"alpha": 0.3, "beta": 0.01, "gamma": 0.2}


class TestInferenceOptions:
    """Test pass-through options."""

    def test_inference_options(self):
        """Test the options forwarded to the inference engine."""
        config = ProteinFDRConfig(group_proteins=False, no_prune=True)
        assert config.inference_options() == {
            "group_proteins": False,
            "no_separate": False,
            "no_prune": True,
        }


class TestValidation:
    """Test rejection of invalid options."""

    @pytest.mark.parametrize("kwargs", [
        {"alpha": 1.5},
        {"beta": -0.5},
        {"deepness": 7},
        {"lambda_": 2.0},
        {"threshold": 0.0},
        {"roc_threshold": 0.0},
        {"roc_threshold": -0.05},
        {"roc_threshold": float("nan")},
        {"roc_n": -1},
        {"num_bootstrap": 0},
        {"length_bins": 0},
        {"decoy_pattern": ""},
    ])
    def test_invalid(self, kwargs):
        """Test that invalid values raise ValueError."""
        with pytest.raises(ValueError):
            ProteinFDRConfig(**kwargs)
