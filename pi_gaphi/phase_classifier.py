"""
Phase Classification Module
Maps the four cluster flags of each sample to a gait phase label.
"""

from enum import Enum
from typing import Dict, Tuple

import numpy as np


class PhaseLabel(str, Enum):
    """Gait cycle phases (value = one-letter label)."""
    HEEL_STRIKE = "H"
    FLAT_FOOT = "F"
    PUSH_OFF = "P"
    TOE_OFF = "T"
    SWING = "S"

    @property
    def code(self) -> int:
        """Basographic level: H=1, F=2, P=3, T=4, S=5."""
        return BASOGRAPHIC_CODES[self]


BASOGRAPHIC_CODES: Dict[PhaseLabel, int] = {
    PhaseLabel.HEEL_STRIKE: 1,
    PhaseLabel.FLAT_FOOT: 2,
    PhaseLabel.PUSH_OFF: 3,
    PhaseLabel.TOE_OFF: 4,
    PhaseLabel.SWING: 5,
}

H = PhaseLabel.HEEL_STRIKE
F = PhaseLabel.FLAT_FOOT
P = PhaseLabel.PUSH_OFF
T = PhaseLabel.TOE_OFF
S = PhaseLabel.SWING

# (heel, meta5, meta1, toe) -> phase
# H: heel only
# F: heel and any forefoot region
# P: no heel, a metatarsal head loaded
# T: toe only
# S: nothing loaded
PHASE_DECISION_TABLE: Dict[Tuple[bool, bool, bool, bool], PhaseLabel] = {
    (False, False, False, False): S,
    (False, False, False, True): T,
    (False, False, True, False): P,
    (False, False, True, True): P,
    (False, True, False, False): P,
    (False, True, False, True): P,
    (False, True, True, False): P,
    (False, True, True, True): P,
    (True, False, False, False): H,
    (True, False, False, True): F,
    (True, False, True, False): F,
    (True, False, True, True): F,
    (True, True, False, False): F,
    (True, True, False, True): F,
    (True, True, True, False): F,
    (True, True, True, True): F,
}

# Decision table flattened on the bit pattern heel*8 + meta5*4 + meta1*2 + toe
_LOOKUP = np.array(
    [PHASE_DECISION_TABLE[key].value for key in sorted(PHASE_DECISION_TABLE)],
    dtype="<U1",
)
_WEIGHTS = np.array([8, 4, 2, 1])


def classify_sample(heel: bool, meta5: bool, meta1: bool, toe: bool) -> PhaseLabel:
    """Classify a single sample from its cluster flags."""
    return PHASE_DECISION_TABLE[(bool(heel), bool(meta5), bool(meta1), bool(toe))]


def classify_phases(cluster_flags: np.ndarray) -> np.ndarray:
    """
    Classify every sample.

    Args:
        cluster_flags: Boolean array of shape (n_samples, 4): heel, meta5, meta1, toe

    Returns:
        Array of one-letter phase labels, shape (n_samples,)
    """
    cluster_flags = np.asarray(cluster_flags, dtype=bool)
    if cluster_flags.ndim != 2 or cluster_flags.shape[1] != 4:
        raise ValueError(
            f"Expected cluster flags of shape (n_samples, 4), got {cluster_flags.shape}"
        )
    return _LOOKUP[cluster_flags.astype(int) @ _WEIGHTS]


def basographic_signal(labels: np.ndarray) -> np.ndarray:
    """Convert phase labels to basographic levels (H=1 ... S=5)."""
    labels = np.asarray(labels)
    codes = np.zeros(len(labels), dtype=int)
    for label, code in BASOGRAPHIC_CODES.items():
        codes[labels == label.value] = code
    return codes


def phase_transitions(labels: np.ndarray) -> np.ndarray:
    """Indices of the first sample of every phase change."""
    labels = np.asarray(labels)
    return np.flatnonzero(labels[1:] != labels[:-1]) + 1
