"""
Gait Phase Identification Pipeline

Runs the full chain on one INDIP recording:
    decode -> condition -> activations -> clusters -> phases -> cycles

Usage:
    from pi_gaphi.pipeline import analyze_recording

    result = analyze_recording("INDIP#000_01-01-1970_000000.txt", side="R")
    for cycle in result.cycles:
        print(cycle.pattern, cycle.total_duration_samples)

    # Engine only, on an already conditioned pressure block (n_samples, 16)
    from pi_gaphi.pipeline import detect_phases
    detection = detect_phases(pressure)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, TextIO, Union

import numpy as np

from .activation import detect_activations
from .clusters import aggregate_clusters
from .config import PipelineConfig
from .cycle_segmenter import GaitCycle, PhaseSegment, cycles_from_segments, run_length_encode
from .phase_classifier import basographic_signal, classify_phases, phase_transitions
from .record_decoder import RecordingMetadata, read_recording
from .signal_conditioner import PRESSURE, InsoleSide, condition_samples

logger = logging.getLogger(__name__)


@dataclass
class PhaseDetectionResult:
    """Output of the phase detection engine for one pressure block."""
    activations: np.ndarray     # (n_samples, 16) bool
    cluster_flags: np.ndarray   # (n_samples, 4) bool
    labels: np.ndarray          # (n_samples,) one-letter labels
    segments: List[PhaseSegment]
    cycles: List[GaitCycle]

    @property
    def basographic(self) -> np.ndarray:
        """Basographic signal (H=1 ... S=5)."""
        return basographic_signal(self.labels)

    @property
    def phase_starts(self) -> np.ndarray:
        """First sample of every phase change."""
        return phase_transitions(self.labels)


@dataclass
class PipelineResult:
    """Result from the full recording pipeline."""
    metadata: RecordingMetadata
    side: InsoleSide
    samples: np.ndarray         # conditioned (n_samples, 30)
    detection: PhaseDetectionResult
    config: PipelineConfig
    info: dict = field(default_factory=dict)

    @property
    def pressure(self) -> np.ndarray:
        """Normalized pressure in anatomical order, (n_samples, 16)."""
        return self.samples[:, PRESSURE]

    @property
    def labels(self) -> np.ndarray:
        return self.detection.labels

    @property
    def segments(self) -> List[PhaseSegment]:
        return self.detection.segments

    @property
    def cycles(self) -> List[GaitCycle]:
        return self.detection.cycles

    @property
    def sampling_frequency(self) -> float:
        """Header sampling rate, or the configured default when unparseable."""
        fs = self.metadata.sampling_frequency_hz
        if not fs:
            fs = self.config.segmentation.default_sampling_frequency
        return fs

    def time_vector(self) -> np.ndarray:
        """Time of every sample in seconds."""
        return np.arange(len(self.samples)) / self.sampling_frequency


def detect_phases(
    pressure: np.ndarray,
    config: Optional[PipelineConfig] = None,
) -> PhaseDetectionResult:
    """
    Detect gait phases and cycles from a conditioned pressure block.

    Args:
        pressure: Normalized pressure, shape (n_samples, 16), NaN = missing
        config: Pipeline configuration (uses defaults if None)

    Returns:
        PhaseDetectionResult
    """
    if config is None:
        config = PipelineConfig()

    detection = config.detection
    activations = detect_activations(
        pressure,
        threshold=detection.noise_threshold,
        min_active_neighbors=detection.min_active_neighbors,
    )
    cluster_flags = aggregate_clusters(activations, detection.min_active_channels)
    labels = classify_phases(cluster_flags)
    segments = run_length_encode(labels)
    cycles = cycles_from_segments(segments, config.segmentation.drop_first_cycle)

    return PhaseDetectionResult(
        activations=activations,
        cluster_flags=cluster_flags,
        labels=labels,
        segments=segments,
        cycles=cycles,
    )


def analyze_recording(
    source: Union[str, Path, TextIO],
    side: Union[InsoleSide, str, None],
    config: Optional[PipelineConfig] = None,
    start_line: Optional[int] = None,
) -> PipelineResult:
    """
    Identify gait cycle phases in an INDIP recording.

    Args:
        source: Path to the INDIP ``.txt`` log, or an open text handle
        side: Insole side ('L', 'R', or anything else for no insole)
        config: Pipeline configuration (uses defaults if None)
        start_line: Optional first row of the sample block to read

    Returns:
        PipelineResult
    """
    if config is None:
        config = PipelineConfig()

    side = InsoleSide.from_flag(side)
    raw = read_recording(source, start_line=start_line, config=config.decoder)
    samples = condition_samples(raw.samples, raw.metadata, side, config.conditioning)

    detection = detect_phases(samples[:, PRESSURE], config)

    info = {
        'file': raw.source,
        'n_samples': raw.n_samples,
        'n_segments': len(detection.segments),
        'n_cycles': len(detection.cycles),
        'sampling_frequency': raw.metadata.sampling_frequency,
        'capabilities': sorted(raw.metadata.capabilities),
        'missing_pressure_channels': int(np.isnan(samples[:, PRESSURE]).all(axis=0).sum()),
    }

    if detection.cycles:
        logger.info(f"Detected {len(detection.cycles)} gait cycles in {raw.source}")
    else:
        logger.info(f"No gait cycles detected in {raw.source}")

    return PipelineResult(
        metadata=raw.metadata,
        side=side,
        samples=samples,
        detection=detection,
        config=config,
        info=info,
    )
