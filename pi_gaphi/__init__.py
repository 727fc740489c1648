# PI-GaPhI: Gait Cycle Phases Identification from Pressure Insoles
"""
A package for identifying gait cycle phases from INDIP pressure insole recordings.
"""

from .config import PipelineConfig
from .errors import ConfigurationWarning, FormatError
from .record_decoder import RecordingMetadata, read_recording
from .signal_conditioner import InsoleSide, condition_samples
from .activation import detect_activations
from .clusters import aggregate_clusters
from .phase_classifier import PhaseLabel, classify_phases
from .cycle_segmenter import GaitCycle, PhaseSegment, segment_cycles
from .pipeline import PipelineResult, analyze_recording, detect_phases

__version__ = "1.0.0"
__all__ = [
    "PipelineConfig",
    "ConfigurationWarning",
    "FormatError",
    "RecordingMetadata",
    "read_recording",
    "InsoleSide",
    "condition_samples",
    "detect_activations",
    "aggregate_clusters",
    "PhaseLabel",
    "classify_phases",
    "GaitCycle",
    "PhaseSegment",
    "segment_cycles",
    "PipelineResult",
    "analyze_recording",
    "detect_phases",
]
