"""
Cycle Segmentation Module
Splits a per-sample phase sequence into phase segments and gait cycles.

Method:
1. Run-length encode the labels into phase segments
2. Rank each segment's phase (F < H < P < T < S)
3. A drop in rank between consecutive segments is a cycle-start candidate
4. Of two adjacent candidates only the first is kept, so the usual
   Swing -> Heel -> Flat pair yields one cycle start at Swing -> Heel
5. Cycles run from one start to the next; the recording start is an
   implicit first start
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .phase_classifier import PhaseLabel

logger = logging.getLogger(__name__)

PHASE_RANKS: Dict[PhaseLabel, int] = {
    PhaseLabel.FLAT_FOOT: 0,
    PhaseLabel.HEEL_STRIKE: 1,
    PhaseLabel.PUSH_OFF: 2,
    PhaseLabel.TOE_OFF: 3,
    PhaseLabel.SWING: 4,
}


@dataclass(frozen=True)
class PhaseSegment:
    """A maximal run of one phase label."""
    label: PhaseLabel
    end_sample_index: int      # exclusive end
    duration_samples: int

    @property
    def start_sample_index(self) -> int:
        return self.end_sample_index - self.duration_samples


@dataclass(frozen=True)
class GaitCycle:
    """Phase segments between two consecutive cycle starts."""
    segments: Tuple[PhaseSegment, ...]

    @property
    def labels(self) -> Tuple[PhaseLabel, ...]:
        return tuple(s.label for s in self.segments)

    @property
    def pattern(self) -> str:
        """Label sequence as a string, e.g. 'HFPS'."""
        return "".join(label.value for label in self.labels)

    @property
    def total_duration_samples(self) -> int:
        return sum(s.duration_samples for s in self.segments)

    @property
    def start_sample_index(self) -> int:
        return self.segments[0].start_sample_index

    @property
    def end_sample_index(self) -> int:
        return self.segments[-1].end_sample_index

    def duration_seconds(self, sampling_frequency: float) -> float:
        """Cycle duration in seconds."""
        return self.total_duration_samples / sampling_frequency


def run_length_encode(labels: Sequence[str]) -> List[PhaseSegment]:
    """
    Encode per-sample labels as phase segments.

    Args:
        labels: One phase label per sample

    Returns:
        Segments in time order; the last segment ends at len(labels)
    """
    labels = np.asarray(labels)
    n_samples = len(labels)
    if n_samples == 0:
        return []

    ends = np.append(np.flatnonzero(labels[1:] != labels[:-1]) + 1, n_samples)
    durations = np.diff(ends, prepend=0)

    return [
        PhaseSegment(
            label=PhaseLabel(str(labels[end - 1])),
            end_sample_index=int(end),
            duration_samples=int(duration),
        )
        for end, duration in zip(ends, durations)
    ]


def find_cycle_candidates(segments: Sequence[PhaseSegment]) -> List[int]:
    """Indices of segments whose phase rank is lower than the previous segment's."""
    ranks = [PHASE_RANKS[s.label] for s in segments]
    return [i for i in range(1, len(ranks)) if ranks[i] < ranks[i - 1]]


def find_cycle_starts(segments: Sequence[PhaseSegment]) -> List[int]:
    """
    Indices of the segments that start a gait cycle.

    A candidate directly following another candidate is discarded. Index 0
    (start of the recording) is always included for a non-empty input.
    """
    if not segments:
        return []

    candidates = find_cycle_candidates(segments)
    candidate_set = set(candidates)
    starts = [i for i in candidates if i - 1 not in candidate_set]
    return [0] + starts


def cycles_from_segments(
    segments: Sequence[PhaseSegment],
    drop_first_cycle: bool = False,
) -> List[GaitCycle]:
    """
    Group phase segments into gait cycles.

    Segments after the last cycle start have no closing boundary and do not
    form a cycle.

    Args:
        segments: Phase segments in time order
        drop_first_cycle: Also discard the cycle opened by the recording start

    Returns:
        Gait cycles in time order
    """
    starts = find_cycle_starts(segments)
    cycles = [
        GaitCycle(segments=tuple(segments[start:stop]))
        for start, stop in zip(starts[:-1], starts[1:])
    ]
    if drop_first_cycle:
        cycles = cycles[1:]
    return cycles


def segment_cycles(
    labels: Sequence[str],
    drop_first_cycle: bool = False,
) -> List[GaitCycle]:
    """
    Segment a per-sample phase sequence into gait cycles.

    Empty or cycle-free input gives an empty list.
    """
    cycles = cycles_from_segments(run_length_encode(labels), drop_first_cycle)

    if cycles:
        logger.info(f"Detected {len(cycles)} gait cycles")
    else:
        logger.info("No gait cycles detected")

    return cycles


def cycles_to_frame(
    cycles: Sequence[GaitCycle],
    sampling_frequency: Optional[float] = None,
) -> pd.DataFrame:
    """
    Tabulate cycles, one row per phase segment.

    Args:
        cycles: Gait cycles
        sampling_frequency: If given, adds durations and ends in seconds

    Returns:
        DataFrame with columns cycle, segment, label, start_sample,
        end_sample, duration_samples, cycle_duration_samples
        (+ duration_s, end_s)
    """
    rows = []
    for c, cycle in enumerate(cycles):
        for s, segment in enumerate(cycle.segments):
            rows.append({
                'cycle': c,
                'segment': s,
                'label': segment.label.value,
                'start_sample': segment.start_sample_index,
                'end_sample': segment.end_sample_index,
                'duration_samples': segment.duration_samples,
                'cycle_duration_samples': cycle.total_duration_samples,
            })

    columns = ['cycle', 'segment', 'label', 'start_sample', 'end_sample',
               'duration_samples', 'cycle_duration_samples']
    df = pd.DataFrame(rows, columns=columns)

    if sampling_frequency is not None:
        df['duration_s'] = df['duration_samples'] / sampling_frequency
        df['end_s'] = df['end_sample'] / sampling_frequency

    return df
