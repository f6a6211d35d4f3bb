"""Defaults and fixed tables for protein-level FDR estimation.

All numerical defaults used across alphaprotfdr live here so that the
configuration dataclass, the estimators and the tests agree on them.

Sentinels
---------
Recoverable estimation failures are reported with negative sentinels rather
than exceptions. Callers compare against these constants and fall back:

- PI0_ESTIMATION_FAILED: bootstrap pi0 could not be estimated
  (fallback: highest q-value)
- FDR_ESTIMATION_FAILED: database decoy-FDR estimator failed
  (fallback: pi0 = 1.0)
"""

# =============================================================================
# Model Parameters (protein inference priors)
# =============================================================================

# -1 means "estimate by grid search"
SEARCH_PARAMETER = -1.0

DEFAULT_ALPHA = 0.1   # P(present protein emits an observed peptide)
DEFAULT_BETA = 0.01   # P(false peptide detection)
DEFAULT_GAMMA = 0.5   # Prior P(protein present)

# =============================================================================
# Grid Search
# =============================================================================

DEFAULT_DEEPNESS = 3         # 0 = widest/slowest, 3 = narrowest/fastest
DEFAULT_LAMBDA = 0.15        # ROC_N vs. FDR-divergence trade-off
DEFAULT_THRESHOLD = 0.05     # Estimated-FDR ceiling for divergence scoring
DEFAULT_ROC_THRESHOLD = 0.05  # Estimated FDR at which ROC N may be widened

# ROC N bounds when auto-updating (roc_n = 0 in the configuration)
ROC_N_AUTO = 0
ROC_N_MIN = 50
ROC_N_MAX = 1000

# Candidate (gamma, alpha, beta) lists per deepness level.
# Scan order is gamma (outer), alpha, beta (inner) and doubles as tie-break.
GRID_CANDIDATES = {
    0: {
        "gamma": (0.1, 0.25, 0.5, 0.75, 0.9),
        "alpha": (0.01, 0.04, 0.09, 0.16, 0.25, 0.36, 0.5),
        "beta": (0.0, 0.01, 0.015, 0.025, 0.035, 0.05, 0.1),
    },
    1: {
        "gamma": (0.1, 0.25, 0.5, 0.75),
        "alpha": (0.01, 0.04, 0.09, 0.16, 0.25, 0.36),
        "beta": (0.0, 0.01, 0.015, 0.020, 0.025, 0.05),
    },
    2: {
        "gamma": (0.1, 0.5, 0.75),
        "alpha": (0.01, 0.04, 0.16, 0.25, 0.36),
        "beta": (0.0, 0.01, 0.015, 0.025, 0.05),
    },
    3: {
        "gamma": (0.5,),
        "alpha": (0.01, 0.04, 0.16, 0.25, 0.36),
        "beta": (0.0, 0.01, 0.015, 0.025, 0.05),
    },
}

# =============================================================================
# Pi0 Estimation
# =============================================================================

PI0_NUM_LAMBDA = 100
PI0_MAX_LAMBDA = 0.5
PI0_NUM_BOOTSTRAP = 100
PI0_MAX_BOOTSTRAP_SIZE = 1000

PI0_ESTIMATION_FAILED = -1.0

# =============================================================================
# Decoys and Database FDR
# =============================================================================

DEFAULT_DECOY_PATTERN = "random"

PSM_THRESHOLD_MAYU = 0.01    # PSM q-value cut for implicated proteins
DEFAULT_LENGTH_BINS = 10     # Equal-depth protein length bins

FDR_ESTIMATION_FAILED = -1.0

# q-value level used in summary logging
SUMMARY_QVALUE_LEVEL = 0.01
