"""AlphaProtFDR - Protein-level probability and FDR estimation.

Turns the protein group probabilities of a protein inference engine into
protein-level statistics: PEPs, model-based q-values, decoy-based empirical
q-values and p-values. The inference parameters (alpha, beta, gamma) can be
chosen by a grid search that balances ROC_N against the agreement between
estimated and empirical FDR.

Numba-compiled kernels do the per-ranking walks, so grid searches over large
protein lists stay fast.
"""

__version__ = "0.1.0"

from alphaprotfdr import database
from alphaprotfdr import optimization
from alphaprotfdr import proteins
from alphaprotfdr import scoring
from alphaprotfdr.config import ProteinFDRConfig
from alphaprotfdr.estimator import EstimationResult, ProteinProbEstimator
from alphaprotfdr.inference import InferenceEngineFactory, ModelParameters, ProteinInferenceEngine

__all__ = [
    "database",
    "optimization",
    "proteins",
    "scoring",
    "ProteinFDRConfig",
    "ProteinProbEstimator",
    "EstimationResult",
    "ModelParameters",
    "ProteinInferenceEngine",
    "InferenceEngineFactory",
]
