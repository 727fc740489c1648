"""
Activation Detection Module
Decides, per sample and channel, whether a pressure sensing element is loaded.

A channel is active when its normalized pressure exceeds the noise threshold
and at least ``min_active_neighbors`` of its anatomical neighbours exceed it
too. The neighbour vote removes single-channel spikes caused by acquisition
errors.
"""

from typing import Dict, Tuple

import numpy as np

N_CHANNELS = 16

# Anatomical neighbours of each insole channel (1-based, 1 = toe, 12-16 = heel)
NEIGHBORHOOD: Dict[int, Tuple[int, ...]] = {
    1: (2, 3, 4, 6, 7),
    2: (1, 3, 4, 6, 7),
    3: (1, 2, 4, 5, 6, 7, 8),
    4: (1, 2, 3, 5, 6, 7, 8, 9),
    5: (1, 2, 3, 4, 6, 7, 8, 9),
    6: (1, 2, 3, 4, 7, 8),
    7: (1, 2, 3, 4, 5, 6, 8, 9),
    8: (3, 4, 5, 6, 7, 9, 10),
    9: (4, 5, 7, 8, 10, 11),
    10: (5, 8, 9, 11, 12),
    11: (9, 10, 12, 13, 14, 15, 16),
    12: (10, 11, 13, 14, 15, 16),
    13: (11, 12, 14, 15, 16),
    14: (11, 12, 13, 15, 16),
    15: (11, 12, 13, 14, 16),
    16: (11, 12, 13, 14, 15),
}


def _check_pressure(pressure: np.ndarray) -> np.ndarray:
    pressure = np.asarray(pressure, dtype=np.float64)
    if pressure.ndim != 2 or pressure.shape[1] != N_CHANNELS:
        raise ValueError(
            f"Expected pressure of shape (n_samples, {N_CHANNELS}), got {pressure.shape}"
        )
    return pressure


def amplitude_activations(pressure: np.ndarray, threshold: float = 0.1) -> np.ndarray:
    """Channels above the noise threshold; missing (NaN) samples are inactive."""
    pressure = _check_pressure(pressure)
    active = np.zeros(pressure.shape, dtype=bool)
    acquired = ~np.isnan(pressure)
    active[acquired] = pressure[acquired] > threshold
    return active


def count_active_neighbors(active: np.ndarray) -> np.ndarray:
    """Number of active neighbours of every channel at every sample."""
    counts = np.zeros(active.shape, dtype=int)
    for channel, neighbors in NEIGHBORHOOD.items():
        counts[:, channel - 1] = active[:, np.asarray(neighbors) - 1].sum(axis=1)
    return counts


def detect_activations(
    pressure: np.ndarray,
    threshold: float = 0.1,
    min_active_neighbors: int = 3,
) -> np.ndarray:
    """
    Compute the activation matrix.

    The neighbour vote reads the amplitude activations only, never the
    already-voted result, so the outcome does not depend on channel order.

    Args:
        pressure: Normalized pressure, shape (n_samples, 16), NaN = missing
        threshold: Noise threshold on normalized pressure
        min_active_neighbors: Active neighbours required to keep a channel active

    Returns:
        Boolean array of shape (n_samples, 16)
    """
    initial = amplitude_activations(pressure, threshold)
    return initial & (count_active_neighbors(initial) >= min_active_neighbors)
