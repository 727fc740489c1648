"""
Centralized configuration for INDIP recording processing.

This module provides:
1. Parameter dataclasses for each processing stage
2. A bundled PipelineConfig that can be loaded from / saved to YAML
3. Eliminates magic numbers scattered across the stages

Usage:
    from pi_gaphi.config import PipelineConfig, DetectionConfig

    config = PipelineConfig()
    config.detection.noise_threshold = 0.15

    # Or from a YAML file with any subset of sections
    config = PipelineConfig.from_yaml("config/pi_gaphi.yaml")
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Tuple, Union

import yaml


@dataclass
class DecoderConfig:
    """Layout of the INDIP text log.

    Attributes:
        header_first_line: 1-based line where the metadata block starts. Default: 2
        header_line_count: Number of lines in the metadata block. Default: 16
        separator_rows: 1-based rows of the metadata block that carry no field.
                        Default: (1, 3, 7)
        data_start_line: 1-based line where the sample block starts. Default: 21
        n_columns: Number of tab-delimited fields per sample row. Default: 30
    """
    header_first_line: int = 2
    header_line_count: int = 16
    separator_rows: Tuple[int, ...] = (1, 3, 7)
    data_start_line: int = 21
    n_columns: int = 30

    @property
    def n_fields(self) -> int:
        """Number of metadata fields left after dropping separator rows."""
        return self.header_line_count - len(self.separator_rows)


@dataclass
class ConditioningConfig:
    """Unit conversion and device-quirk parameters.

    Attributes:
        gravity: Standard gravity used for milli-g conversion (m/s^2). Default: 9.81
        pressure_offset: Unloaded sensor voltage (V). Default: 2.8
        pressure_scale: Divisor applied after the offset. Default: 2.8
        sentinel: Raw value meaning "not acquired". Default: -1.0
        resample_frequency: Sampling rate (Hz) that triggers despiking and
                            magnetometer resampling. Default: 200.0
        median_kernel: Median filter length for pressure despiking. Default: 3
    """
    gravity: float = 9.81
    pressure_offset: float = 2.8
    pressure_scale: float = 2.8
    sentinel: float = -1.0
    resample_frequency: float = 200.0
    median_kernel: int = 3


@dataclass
class DetectionConfig:
    """Activation and clustering thresholds.

    Attributes:
        noise_threshold: Normalized pressure above which a channel is loaded. Default: 0.1
        min_active_neighbors: Active neighbours required to confirm a channel. Default: 3
        min_active_channels: Active channels required to flag a cluster. Default: 1
    """
    noise_threshold: float = 0.1
    min_active_neighbors: int = 3
    min_active_channels: int = 1


@dataclass
class SegmentationConfig:
    """Cycle segmentation options.

    Attributes:
        drop_first_cycle: Discard the lead-in cycle that starts at the
                          beginning of the recording. Default: False
        default_sampling_frequency: Rate (Hz) used for time axes when the
                                    header rate cannot be parsed. Default: 100.0
    """
    drop_first_cycle: bool = False
    default_sampling_frequency: float = 100.0


@dataclass
class PipelineConfig:
    """All stage configurations bundled together."""
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    conditioning: ConditioningConfig = field(default_factory=ConditioningConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)

    @classmethod
    def from_yaml(cls, filepath: Union[str, Path]) -> "PipelineConfig":
        """
        Load a pipeline configuration from a YAML file.

        Missing sections and keys keep their defaults.

        Args:
            filepath: Path to the YAML file

        Returns:
            PipelineConfig instance
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        with open(filepath, 'r') as f:
            raw = yaml.safe_load(f) or {}

        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: dict) -> "PipelineConfig":
        """Build a configuration from nested dictionaries."""
        sections = {f.name: f for f in fields(cls)}
        unknown = set(raw) - set(sections)
        if unknown:
            raise ValueError(
                f"Unknown config section(s) {sorted(unknown)}. "
                f"Available: {list(sections)}"
            )

        kwargs = {}
        for name, section_field in sections.items():
            section_cls = section_field.default_factory
            values = dict(raw.get(name) or {})
            valid = {f.name for f in fields(section_cls)}
            bad = set(values) - valid
            if bad:
                raise ValueError(
                    f"Unknown key(s) {sorted(bad)} in section '{name}'. "
                    f"Available: {sorted(valid)}"
                )
            if 'separator_rows' in values:
                values['separator_rows'] = tuple(values['separator_rows'])
            kwargs[name] = section_cls(**values)

        return cls(**kwargs)

    def to_yaml(self, filepath: Union[str, Path]) -> None:
        """Save the configuration to a YAML file."""
        config = asdict(self)
        config['decoder']['separator_rows'] = list(self.decoder.separator_rows)

        with open(filepath, 'w') as f:
            yaml.dump(config, f, default_flow_style=False)


def get_default_configs() -> dict:
    """Get all default configuration objects.

    Returns:
        Dictionary with keys 'decoder', 'conditioning', 'detection',
        'segmentation'
    """
    return {
        'decoder': DecoderConfig(),
        'conditioning': ConditioningConfig(),
        'detection': DetectionConfig(),
        'segmentation': SegmentationConfig(),
    }
