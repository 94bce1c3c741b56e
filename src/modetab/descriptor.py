# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Mode Descriptors - The read-only input of the table compiler.

A descriptor is a fully computed codec mode. Building one (FFT planning, band
layout, window and pulse-cache computation) happens elsewhere; this module only
holds the result, derives table lengths from its scalar fields, and loads
descriptors that were stored as JSON:

- <modes_dir>/mode_<rate>_<frame_size>.json
"""

import sys
import json
from dataclasses import dataclass
from pathlib import Path

try:
    import numpy as np
except ImportError:
    print("Error: numpy library is required. Install it with: pip install numpy")
    sys.exit(1)

from .constants import MAXFACTORS


class ModeCreationError(Exception):
    """
    Raised when no descriptor can be produced for a (rate, frame_size) pair.
    """

    def __init__(self, sample_rate, frame_size, reason):
        super().__init__(f"Error creating mode with Fs={sample_rate}, frame_size={frame_size}: {reason}")
        self.sample_rate = sample_rate
        self.frame_size = frame_size
        self.reason = reason


class TableShapeError(ValueError):
    """
    Raised when a table's length disagrees with the length derived from the scalar fields.
    """
    pass


@dataclass
class FFTPlan:
    point_count: int
    scale: float
    shift: int
    factors: list
    bitrev: list


@dataclass
class Transform:
    length: int
    max_shift: int
    plans: list
    twiddles: np.ndarray  # shape (point_count of plans[0], 2)
    trig: np.ndarray


@dataclass
class PulseCache:
    size: int
    index: list
    bits: list
    caps: list


@dataclass
class ModeDescriptor:
    sample_rate: int
    overlap: int
    band_count: int
    effective_band_count: int
    preemphasis: np.ndarray
    band_edges: list
    max_log_shift: int
    short_transform_count: int
    short_transform_size: int
    allocation_vector_count: int
    allocation_vectors: list
    log_transform_sizes: list
    window: np.ndarray
    transform: Transform
    pulse_cache: PulseCache

    @property
    def frame_size(self):
        return self.short_transform_count * self.short_transform_size


# Derived lengths. Every length is recomputed from scalar fields, never read
# from the table itself.

def band_edge_count(mode):
    return mode.band_count + 2


def allocation_table_length(mode):
    return mode.allocation_vector_count * mode.band_count


def cache_index_length(mode):
    return mode.band_count * (mode.max_log_shift + 2)


def cache_caps_length(mode):
    return (mode.max_log_shift + 1) * 2 * mode.band_count


def plan_count(mode):
    return mode.transform.max_shift + 1


def fft_twiddle_length(mode):
    return mode.transform.plans[0].point_count


def mdct_twiddle_length(mode):
    return mode.transform.length // 4 + 1


def factor_count():
    return 2 * MAXFACTORS


PREEMPHASIS_LENGTH = 4


def expect_length(values, length, table_name):
    """
    Checks that a table holds exactly the derived number of entries.

    Args:
        values: The table values.
        length: The derived length.
        table_name: Name used in the error message.

    Returns:
        The values, unchanged.
    """
    if len(values) != length:
        raise TableShapeError(f"{table_name} has {len(values)} entries, expected {length}")
    return values


def shape_errors(mode):
    """
    Lists every table of a descriptor whose length disagrees with its derived length.

    Returns:
        A list of error messages (empty when the descriptor is consistent).
    """
    checks = [
        ("preemphasis", mode.preemphasis, PREEMPHASIS_LENGTH),
        ("band_edges", mode.band_edges, band_edge_count(mode)),
        ("allocation_vectors", mode.allocation_vectors, allocation_table_length(mode)),
        ("log_transform_sizes", mode.log_transform_sizes, mode.band_count),
        ("window", mode.window, mode.overlap),
        ("transform.plans", mode.transform.plans, plan_count(mode)),
        ("transform.trig", mode.transform.trig, mdct_twiddle_length(mode)),
        ("pulse_cache.index", mode.pulse_cache.index, cache_index_length(mode)),
        ("pulse_cache.bits", mode.pulse_cache.bits, mode.pulse_cache.size),
        ("pulse_cache.caps", mode.pulse_cache.caps, cache_caps_length(mode)),
    ]
    errors = [
        f"{name} has {len(values)} entries, expected {length}"
        for name, values, length in checks
        if len(values) != length
    ]

    if mode.transform.plans:
        if len(mode.transform.twiddles) != fft_twiddle_length(mode):
            errors.append(f"transform.twiddles has {len(mode.transform.twiddles)} entries, expected {fft_twiddle_length(mode)}")
        for k, plan in enumerate(mode.transform.plans):
            if len(plan.bitrev) != plan.point_count:
                errors.append(f"transform.plans[{k}].bitrev has {len(plan.bitrev)} entries, expected {plan.point_count}")
            if len(plan.factors) != factor_count():
                errors.append(f"transform.plans[{k}].factors has {len(plan.factors)} entries, expected {factor_count()}")

    return errors


def check_shape(mode):
    """
    Raises TableShapeError if any table length disagrees with its derived length.
    """
    errors = shape_errors(mode)
    if errors:
        raise TableShapeError("; ".join(errors))


def _real_array(values, dtype, field):
    """
    Converts a real-valued table to the numeric mode's dtype.
    Fixed-point builds can only hold integral values.
    """
    array = np.asarray(values, dtype=np.float64)
    if np.issubdtype(dtype, np.integer) and not np.all(array == np.round(array)):
        raise ValueError(f"{field} holds non-integer values; a fixed-point build needs integer tables")
    return array.astype(dtype)


def descriptor_from_dict(data, dtype=np.float32):
    """
    Builds a ModeDescriptor from its JSON form.

    Args:
        data: The decoded JSON object.
        dtype: numpy dtype for real-valued tables (float32 or an integer type).

    Returns:
        The ModeDescriptor.
    """
    transform = data["transform"]
    plans = [
        FFTPlan(
            point_count=int(plan["point_count"]),
            scale=float(plan.get("scale", 0.0)),
            shift=int(plan["shift"]),
            factors=[int(v) for v in plan["factors"]],
            bitrev=[int(v) for v in plan["bitrev"]],
        )
        for plan in transform["plans"]
    ]
    cache = data["pulse_cache"]

    return ModeDescriptor(
        sample_rate=int(data["sample_rate"]),
        overlap=int(data["overlap"]),
        band_count=int(data["band_count"]),
        effective_band_count=int(data["effective_band_count"]),
        preemphasis=_real_array(data["preemphasis"], dtype, "preemphasis"),
        band_edges=[int(v) for v in data["band_edges"]],
        max_log_shift=int(data["max_log_shift"]),
        short_transform_count=int(data["short_transform_count"]),
        short_transform_size=int(data["short_transform_size"]),
        allocation_vector_count=int(data["allocation_vector_count"]),
        allocation_vectors=[int(v) for v in data["allocation_vectors"]],
        log_transform_sizes=[int(v) for v in data["log_transform_sizes"]],
        window=_real_array(data["window"], dtype, "window"),
        transform=Transform(
            length=int(transform["length"]),
            max_shift=int(transform["max_shift"]),
            plans=plans,
            twiddles=_real_array(transform["twiddles"], dtype, "transform.twiddles").reshape(-1, 2),
            trig=_real_array(transform["trig"], dtype, "transform.trig"),
        ),
        pulse_cache=PulseCache(
            size=int(cache["size"]),
            index=[int(v) for v in cache["index"]],
            bits=[int(v) for v in cache["bits"]],
            caps=[int(v) for v in cache["caps"]],
        ),
    )


def descriptor_to_dict(mode):
    """
    Converts a ModeDescriptor to its JSON form.
    """
    return {
        "sample_rate": mode.sample_rate,
        "overlap": mode.overlap,
        "band_count": mode.band_count,
        "effective_band_count": mode.effective_band_count,
        "preemphasis": np.asarray(mode.preemphasis).tolist(),
        "band_edges": list(mode.band_edges),
        "max_log_shift": mode.max_log_shift,
        "short_transform_count": mode.short_transform_count,
        "short_transform_size": mode.short_transform_size,
        "allocation_vector_count": mode.allocation_vector_count,
        "allocation_vectors": list(mode.allocation_vectors),
        "log_transform_sizes": list(mode.log_transform_sizes),
        "window": np.asarray(mode.window).tolist(),
        "transform": {
            "length": mode.transform.length,
            "max_shift": mode.transform.max_shift,
            "plans": [
                {
                    "point_count": plan.point_count,
                    "scale": plan.scale,
                    "shift": plan.shift,
                    "factors": list(plan.factors),
                    "bitrev": list(plan.bitrev),
                }
                for plan in mode.transform.plans
            ],
            "twiddles": np.asarray(mode.transform.twiddles).tolist(),
            "trig": np.asarray(mode.transform.trig).tolist(),
        },
        "pulse_cache": {
            "size": mode.pulse_cache.size,
            "index": list(mode.pulse_cache.index),
            "bits": list(mode.pulse_cache.bits),
            "caps": list(mode.pulse_cache.caps),
        },
    }


class ModeLibrary:
    """
    Produces mode descriptors for (rate, frame_size) pairs from a directory of JSON files.
    """

    def __init__(self, modes_dir, dtype=np.float32):
        """
        Initializes the library.

        Args:
            modes_dir: Directory holding mode_<rate>_<frame_size>.json files.
            dtype: numpy dtype for real-valued tables.
        """
        self.modes_dir = Path(modes_dir)
        self.dtype = dtype

    def path_for(self, sample_rate, frame_size):
        return self.modes_dir / f"mode_{sample_rate}_{frame_size}.json"

    def create(self, sample_rate, frame_size):
        """
        Loads the descriptor for one (rate, frame_size) pair.

        Raises:
            ModeCreationError: If the descriptor is missing, unreadable or inconsistent.
        """
        path = self.path_for(sample_rate, frame_size)
        if not path.exists():
            raise ModeCreationError(sample_rate, frame_size, f"{path} not found")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            mode = descriptor_from_dict(data, self.dtype)
            check_shape(mode)
        except json.JSONDecodeError as e:
            raise ModeCreationError(sample_rate, frame_size, f"invalid JSON in {path.name}: {e}") from e
        except KeyError as e:
            raise ModeCreationError(sample_rate, frame_size, f"missing field {e} in {path.name}") from e
        except (TypeError, ValueError) as e:
            raise ModeCreationError(sample_rate, frame_size, f"{path.name}: {e}") from e

        if mode.sample_rate != sample_rate or mode.frame_size != frame_size:
            raise ModeCreationError(
                sample_rate, frame_size,
                f"{path.name} describes Fs={mode.sample_rate}, frame_size={mode.frame_size}"
            )

        return mode

    def save(self, mode):
        """
        Stores a descriptor so that `create` can load it.

        Returns:
            The path written.
        """
        self.modes_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(mode.sample_rate, mode.frame_size)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(descriptor_to_dict(mode), f, indent=2)
        return path
