#!/usr/bin/env python3
"""
Tests for channel activation detection and cluster aggregation.

Run with: pytest tests/test_activation.py -v
"""

import pytest
import numpy as np
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from pi_gaphi.activation import (
    NEIGHBORHOOD,
    amplitude_activations,
    count_active_neighbors,
    detect_activations,
)
from pi_gaphi.clusters import CLUSTER_NAMES, CLUSTERS, aggregate_clusters


def pressure_with(channels, n_samples=5, value=0.5):
    """Pressure matrix with the given 1-based channels loaded."""
    pressure = np.zeros((n_samples, 16))
    pressure[:, np.asarray(channels, dtype=int) - 1] = value
    return pressure


class TestNeighborhoodTable:
    """Test the neighbour adjacency table."""

    def test_all_channels_present(self):
        """Test the table covers channels 1..16."""
        assert sorted(NEIGHBORHOOD) == list(range(1, 17))

    def test_sizes(self):
        """Every channel has 5 to 8 neighbours."""
        sizes = [len(n) for n in NEIGHBORHOOD.values()]
        assert min(sizes) == 5
        assert max(sizes) == 8

    def test_no_self_reference(self):
        """Test no channel lists itself."""
        for channel, neighbors in NEIGHBORHOOD.items():
            assert channel not in neighbors
            assert all(1 <= n <= 16 for n in neighbors)


class TestAmplitudeActivation:
    """Test the noise threshold step."""

    def test_threshold(self):
        """Test that only values above 0.1 are active."""
        pressure = np.zeros((1, 16))
        pressure[0, :4] = [0.05, 0.1, 0.11, 0.9]
        active = amplitude_activations(pressure)
        np.testing.assert_array_equal(active[0, :4], [False, False, True, True])

    def test_missing_is_inactive(self):
        """Test that NaN samples are never active."""
        pressure = np.full((3, 16), np.nan)
        assert not amplitude_activations(pressure).any()

    def test_wrong_shape(self):
        """Test that a matrix without 16 channels is rejected."""
        with pytest.raises(ValueError):
            amplitude_activations(np.zeros((3, 15)))


class TestNeighborhoodVote:
    """Test spatial corroboration of activations."""

    def test_isolated_spike_removed(self):
        """A single loaded channel has no support and is discarded."""
        active = detect_activations(pressure_with([7]))
        assert not active.any()

    def test_widespread_activation_kept(self):
        """A fully loaded heel stays active."""
        active = detect_activations(pressure_with([12, 13, 14, 15, 16]))
        expected = np.zeros(16, dtype=bool)
        expected[11:16] = True
        np.testing.assert_array_equal(active[0], expected)

    def test_vote_uses_amplitude_activations(self):
        """Votes read the thresholded matrix, not the already-voted one.

        With 10-13 loaded, 11 and 12 each see three loaded neighbours while
        10 and 13 see only two. 11 stays active even though 10 is voted out.
        """
        active = detect_activations(pressure_with([10, 11, 12, 13]))
        np.testing.assert_array_equal(np.flatnonzero(active[0]) + 1, [11, 12])

    def test_count_active_neighbors(self):
        """Test neighbour counting against the table."""
        initial = amplitude_activations(pressure_with([10, 11, 12, 13]))
        counts = count_active_neighbors(initial)
        assert counts[0, 9] == 2    # channel 10: 11, 12
        assert counts[0, 10] == 3   # channel 11: 10, 12, 13
        assert counts[0, 0] == 0    # channel 1

    def test_missing_channels_do_not_vote(self):
        """Missing neighbours count as inactive."""
        pressure = pressure_with([1, 2, 3, 4])
        pressure[:, [2, 3]] = np.nan
        active = detect_activations(pressure)
        assert not active.any()

    def test_toe_supported_by_first_metatarsal(self):
        """Toe stays active when three 1st-metatarsal neighbours are loaded."""
        active = detect_activations(pressure_with([1, 2, 3, 4]))
        assert active[:, 0].all()

    def test_custom_vote_threshold(self):
        """Test min_active_neighbors parameter."""
        pressure = pressure_with([13, 14])
        assert not detect_activations(pressure).any()
        assert detect_activations(pressure, min_active_neighbors=1)[:, [12, 13]].all()

    def test_empty_recording(self):
        """Test an empty pressure matrix."""
        assert detect_activations(np.zeros((0, 16))).shape == (0, 16)


class TestClusters:
    """Test anatomical cluster aggregation."""

    def test_partition(self):
        """The four clusters partition channels 1..16."""
        channels = sorted(c for members in CLUSTERS.values() for c in members)
        assert channels == list(range(1, 17))
        assert CLUSTER_NAMES == ("heel", "meta5", "meta1", "toe")

    def test_any_channel_activates_cluster(self):
        """Test one active channel is enough."""
        activations = np.zeros((4, 16), dtype=bool)
        activations[0, 13] = True    # channel 14: heel
        activations[1, 8] = True     # channel 9: 5th metatarsal
        activations[2, 5] = True     # channel 6: 1st metatarsal
        activations[3, 0] = True     # channel 1: toe

        flags = aggregate_clusters(activations)
        np.testing.assert_array_equal(flags, np.eye(4, dtype=bool))

    def test_no_activation(self):
        """Test no active channel gives no active cluster."""
        flags = aggregate_clusters(np.zeros((3, 16), dtype=bool))
        assert flags.shape == (3, 4)
        assert not flags.any()

    def test_min_active_channels(self):
        """Test the per-cluster channel count parameter."""
        activations = np.zeros((1, 16), dtype=bool)
        activations[0, [11, 12]] = True
        assert aggregate_clusters(activations, min_active_channels=2)[0, 0]
        assert not aggregate_clusters(activations, min_active_channels=3)[0, 0]

    def test_monotone_in_channel_activation(self):
        """Switching a channel on never switches its cluster off."""
        rng = np.random.default_rng(0)
        activations = rng.random((50, 16)) > 0.7
        before = aggregate_clusters(activations)

        for channel in range(16):
            flipped = activations.copy()
            flipped[:, channel] = True
            after = aggregate_clusters(flipped)
            assert np.all(after >= before)

    def test_wrong_shape(self):
        """Test that a matrix without 16 channels is rejected."""
        with pytest.raises(ValueError):
            aggregate_clusters(np.zeros((2, 4), dtype=bool))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
