"""
Data Export Module
Exports phase labels and gait cycles to CSV files.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd

from .cycle_segmenter import GaitCycle, cycles_to_frame
from .pipeline import PipelineResult

logger = logging.getLogger(__name__)


def export_cycles_to_csv(
    cycles: Sequence[GaitCycle],
    output_path: Union[str, Path],
    sampling_frequency: Optional[float] = None,
) -> Path:
    """
    Export gait cycles to a CSV file, one row per phase segment.

    Args:
        cycles: Gait cycles
        output_path: Output file path
        sampling_frequency: If given, adds durations in seconds

    Returns:
        Path to the created file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = cycles_to_frame(cycles, sampling_frequency)
    df.to_csv(output_path, index=False)

    logger.info(f"Exported {len(cycles)} cycles ({len(df)} phases) to {output_path}")

    return output_path


def export_phases_to_csv(
    result: PipelineResult,
    output_path: Union[str, Path],
    include_pressure: bool = True,
) -> Path:
    """
    Export the per-sample phase labels of a recording.

    Columns: Time_s, Phase, Basographic and, optionally, P1..P16.

    Args:
        result: Pipeline result
        output_path: Output file path
        include_pressure: Whether to include the normalized pressure channels

    Returns:
        Path to the created file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df_data = {
        'Time_s': result.time_vector(),
        'Phase': result.labels,
        'Basographic': result.detection.basographic,
    }

    if include_pressure:
        pressure = result.pressure
        for i in range(pressure.shape[1]):
            df_data[f'P{i + 1}'] = pressure[:, i]

    df = pd.DataFrame(df_data)
    df.to_csv(output_path, index=False)

    logger.info(f"Exported {len(df)} samples to {output_path}")
    if include_pressure and np.isnan(result.pressure).all():
        logger.info("  Pressure channels are all missing")

    return output_path
