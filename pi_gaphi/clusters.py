"""
Cluster Aggregation Module
Groups insole channels into four anatomical regions of the foot.
"""

from typing import Dict, Tuple

import numpy as np

from .activation import N_CHANNELS

# Anatomical clusters (1-based channels), in the column order of the output
CLUSTERS: Dict[str, Tuple[int, ...]] = {
    "heel": (12, 13, 14, 15, 16),
    "meta5": (5, 9, 10, 11),     # 5th metatarsal head
    "meta1": (2, 3, 4, 6, 7, 8),  # 1st metatarsal head
    "toe": (1,),
}
CLUSTER_NAMES = tuple(CLUSTERS)


def aggregate_clusters(
    activations: np.ndarray,
    min_active_channels: int = 1,
) -> np.ndarray:
    """
    Flag each cluster as active when enough of its channels are active.

    Args:
        activations: Boolean activation matrix, shape (n_samples, 16)
        min_active_channels: Active channels needed to flag a cluster

    Returns:
        Boolean array of shape (n_samples, 4): heel, meta5, meta1, toe
    """
    activations = np.asarray(activations, dtype=bool)
    if activations.ndim != 2 or activations.shape[1] != N_CHANNELS:
        raise ValueError(
            f"Expected activations of shape (n_samples, {N_CHANNELS}), "
            f"got {activations.shape}"
        )

    flags = np.zeros((len(activations), len(CLUSTERS)), dtype=bool)
    for k, channels in enumerate(CLUSTERS.values()):
        active_count = activations[:, np.asarray(channels) - 1].sum(axis=1)
        flags[:, k] = active_count >= min_active_channels
    return flags
