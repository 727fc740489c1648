"""
Signal Conditioner Module
Converts a raw INDIP sample matrix into unit-correct, channel-aligned signals.

Output columns (same order as the raw matrix):
    time (ms) | acc (m/s^2) | gyro (rad/s) | magn | distance (mm) |
    pressure P1..P16 (normalized, anatomical order) | baro (Pa) | temp (degC)
Values that were not acquired are NaN.
"""

import logging
import warnings
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy.interpolate import interp1d
from scipy.signal import medfilt

from .config import ConditioningConfig
from .errors import ConfigurationWarning
from .record_decoder import (
    BARO_TEMP,
    DISTANCE_SENSORS,
    PRESSURE_INSOLE,
    RecordingMetadata,
)

logger = logging.getLogger(__name__)

N_COLUMNS = 30
N_PRESSURE_CHANNELS = 16

TIMESTAMP = 0
ACC = slice(1, 4)
GYRO = slice(4, 7)
MAGN = slice(7, 10)
DISTANCE = slice(10, 12)
PRESSURE = slice(12, 28)
BARO = 28
TEMP = 29
BARO_TEMP_COLUMNS = slice(28, 30)

CONDITIONED_COLUMNS = (
    ["Timestamp", "AccX", "AccY", "AccZ", "GyroX", "GyroY", "GyroZ",
     "MagnX", "MagnY", "MagnZ", "Distance1", "Distance2"]
    + [f"P{i}" for i in range(1, N_PRESSURE_CHANNELS + 1)]
    + ["Baro", "Temp"]
)

# Physical insole channel (1-based, P0 = 1) feeding each anatomical channel 1..16
LEFT_CHANNEL_ORDER = (9, 10, 13, 16, 14, 11, 12, 15, 3, 2, 1, 5, 4, 7, 6, 8)
RIGHT_CHANNEL_ORDER = (9, 10, 16, 5, 7, 11, 12, 14, 4, 8, 6, 1, 13, 3, 15, 2)


class InsoleSide(Enum):
    """Foot carrying the pressure insole."""
    LEFT = "L"
    RIGHT = "R"
    NONE = "N"

    @classmethod
    def from_flag(cls, flag: Union["InsoleSide", str, None]) -> "InsoleSide":
        """
        Resolve a side selector.

        Accepts an InsoleSide, None, or a case-insensitive string
        ('l'/'left', 'r'/'right', 'n'/'none'/''). Anything else falls back
        to NONE with a ConfigurationWarning.
        """
        if isinstance(flag, cls):
            return flag
        if flag is None:
            return cls.NONE

        key = str(flag).strip().lower()
        aliases = {
            'l': cls.LEFT, 'left': cls.LEFT,
            'r': cls.RIGHT, 'right': cls.RIGHT,
            'n': cls.NONE, 'none': cls.NONE, '': cls.NONE,
        }
        if key in aliases:
            return aliases[key]

        message = f"Unrecognized insole side {flag!r}; pressure channels set missing"
        logger.warning(message)
        warnings.warn(message, ConfigurationWarning, stacklevel=2)
        return cls.NONE

    @property
    def channel_order(self) -> Optional[np.ndarray]:
        """0-based physical column for each anatomical channel, None without insole."""
        if self is InsoleSide.LEFT:
            return np.asarray(LEFT_CHANNEL_ORDER) - 1
        if self is InsoleSide.RIGHT:
            return np.asarray(RIGHT_CHANNEL_ORDER) - 1
        return None


def drop_unsampled_channels(pressure: np.ndarray, sentinel: float = -1.0) -> np.ndarray:
    """Set to NaN every channel whose raw value is the sentinel in all samples."""
    pressure = pressure.copy()
    if len(pressure) == 0:
        return pressure

    unsampled = np.all(pressure == sentinel, axis=0)
    if unsampled.any():
        names = [f"P{i}" for i in np.flatnonzero(unsampled)]
        logger.warning(f"Pressure channels not acquired: {', '.join(names)}")
    pressure[:, unsampled] = np.nan
    return pressure


def normalize_pressure(
    pressure: np.ndarray,
    offset: float = 2.8,
    scale: float = 2.8,
) -> np.ndarray:
    """Map insole voltages to load: unloaded (~offset V) -> 0, loaded -> positive."""
    return -(pressure - offset) / scale


def despike_pressure(pressure: np.ndarray, kernel_size: int = 3) -> np.ndarray:
    """Median-filter each acquired pressure channel (zero-padded edges)."""
    filtered = pressure.copy()
    if len(filtered) == 0:
        return filtered

    for c in range(filtered.shape[1]):
        column = filtered[:, c]
        if np.all(np.isfinite(column)):
            filtered[:, c] = medfilt(column, kernel_size)
    return filtered


def find_hold_interval(signal: np.ndarray) -> Optional[Tuple[int, int]]:
    """
    Find how many consecutive samples a held signal repeats each value.

    The recording may start part-way through a hold, so the interval is the
    length of the first complete run (between the first two value changes).
    With a single change, the leading run is taken as complete.

    Returns:
        (interval, first_anchor) where first_anchor is the index of the first
        sample of the first complete run, or None if the signal never changes
    """
    changes = np.flatnonzero(np.diff(signal) != 0)
    if len(changes) == 0:
        return None
    if len(changes) == 1:
        return int(changes[0]) + 1, 0
    return int(changes[1] - changes[0]), int(changes[0]) + 1


def resample_held_signal(
    values: np.ndarray,
    interval: int,
    first_anchor: int = 0,
) -> np.ndarray:
    """
    Replace held (repeated) samples by linear interpolation.

    Only samples at ``first_anchor + k * interval`` are kept; the rest are
    interpolated, with linear extrapolation at both ends.

    Args:
        values: Signal, shape (n_samples,) or (n_samples, n_axes)
        interval: Hold interval in samples
        first_anchor: Index of the first kept sample

    Returns:
        Resampled signal with the same shape
    """
    n_samples = len(values)
    anchors = np.arange(first_anchor, n_samples, interval)
    if interval <= 1 or len(anchors) < 2:
        return values.copy()

    interpolator = interp1d(
        anchors, values[anchors], kind='linear', axis=0,
        fill_value='extrapolate', assume_sorted=True,
    )
    return interpolator(np.arange(n_samples))


def reorder_pressure_channels(
    pressure: np.ndarray,
    side: InsoleSide,
) -> np.ndarray:
    """Permute physical insole channels into anatomical order for the given side."""
    order = side.channel_order
    if order is None:
        return np.full_like(pressure, np.nan)
    return pressure[:, order]


def condition_samples(
    raw: np.ndarray,
    metadata: RecordingMetadata,
    side: Union[InsoleSide, str, None],
    config: Optional[ConditioningConfig] = None,
) -> np.ndarray:
    """
    Condition a raw INDIP sample matrix.

    Steps:
    1. acc milli-g -> m/s^2, gyro deg/s -> rad/s
    2. distance sentinel -> NaN
    3. unsampled pressure channels -> NaN, voltage -> normalized load
    4. at the resample frequency: pressure despiking, magnetometer resampling
    5. pressure channels -> anatomical order (NaN without an insole)
    6. modalities absent from the Mode header -> NaN

    Args:
        raw: Raw matrix, shape (n_samples, 30); not modified
        metadata: Recording metadata
        side: Insole side selector
        config: Conditioning parameters

    Returns:
        Conditioned matrix, shape (n_samples, 30)
    """
    if config is None:
        config = ConditioningConfig()

    raw = np.asarray(raw, dtype=np.float64)
    if raw.ndim != 2 or raw.shape[1] != N_COLUMNS:
        raise ValueError(f"Expected raw samples of shape (n, {N_COLUMNS}), got {raw.shape}")

    side = InsoleSide.from_flag(side)
    data = raw.copy()

    data[:, ACC] = data[:, ACC] / 1000 * config.gravity
    data[:, GYRO] = np.deg2rad(data[:, GYRO])

    distance = data[:, DISTANCE]
    distance[distance == config.sentinel] = np.nan

    pressure = drop_unsampled_channels(data[:, PRESSURE], config.sentinel)
    pressure = normalize_pressure(pressure, config.pressure_offset, config.pressure_scale)

    if metadata.sampling_frequency_hz == config.resample_frequency:
        pressure = despike_pressure(pressure, config.median_kernel)

        hold = find_hold_interval(data[:, MAGN.start])
        logger.debug(f"Magnetometer hold (interval, first anchor): {hold}")
        if hold is not None:
            data[:, MAGN] = resample_held_signal(data[:, MAGN], *hold)

    data[:, PRESSURE] = reorder_pressure_channels(pressure, side)

    if not metadata.has_capability(DISTANCE_SENSORS):
        data[:, DISTANCE] = np.nan
    if not metadata.has_capability(PRESSURE_INSOLE):
        data[:, PRESSURE] = np.nan
    if not metadata.has_capability(BARO_TEMP):
        data[:, BARO_TEMP_COLUMNS] = np.nan

    return data


def samples_to_frame(samples: np.ndarray) -> pd.DataFrame:
    """Wrap a conditioned matrix in a DataFrame with named columns."""
    return pd.DataFrame(samples, columns=CONDITIONED_COLUMNS)
