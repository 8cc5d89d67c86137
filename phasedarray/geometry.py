from __future__ import annotations

import math
from typing import Protocol, runtime_checkable

import numpy as np

from .config import ArrayConfig
from .exceptions import ConfigurationError


@runtime_checkable
class ArrayGeometry(Protocol):
    """Anything that can count and place antenna elements.

    Locations are 3D points in the global frame, normalized to the wavelength.
    """

    @property
    def num_elements(self) -> int: ...

    def element_location(self, index: int) -> np.ndarray: ...

    def element_locations(self) -> np.ndarray: ...


def _validate_xyz(xyz: np.ndarray) -> np.ndarray:
    if not isinstance(xyz, np.ndarray):
        raise ConfigurationError("locations must be a numpy ndarray")
    if xyz.ndim != 2 or xyz.shape[1] != 3:
        raise ConfigurationError("locations must have shape (M,3)")
    if xyz.shape[0] < 1:
        raise ConfigurationError("at least one element is required")
    if not np.isfinite(xyz).all():
        raise ConfigurationError("locations contain NaN or inf")
    return np.asarray(xyz, dtype=np.float64)


def _ensure_unique(xyz: np.ndarray, tol: float = 1e-9) -> None:
    # Check minimum pairwise spacing >= tol using a hash on rounded coords.
    rounded = np.round(xyz / tol).astype(np.int64)
    uniq = np.unique(rounded, axis=0)
    if uniq.shape[0] != xyz.shape[0]:
        raise ConfigurationError("Element positions must be unique (>=1e-9 wavelengths apart)")


def _check_index(index: int, count: int) -> int:
    i = int(index)
    if i < 0 or i >= count:
        raise IndexError(f"element index {index} out of range [0, {count})")
    return i


def rotate_to_global(local_xyz: np.ndarray, bearing: float, downtilt: float) -> np.ndarray:
    """Rotate (..., 3) LCS coordinates into the GCS (TR 38.901 eq. 7.1-4, slant 0)."""
    ca, sa = math.cos(bearing), math.sin(bearing)
    cb, sb = math.cos(downtilt), math.sin(downtilt)
    rot = np.array(
        [
            [ca * cb, -sa, ca * sb],
            [sa * cb, ca, sa * sb],
            [-sb, 0.0, cb],
        ],
        dtype=np.float64,
    )
    return np.asarray(local_xyz, dtype=np.float64) @ rot.T


class UniformPlanarArray:
    """R x C planar array on the local y-z plane, rotated by bearing and downtilt.

    Element ``i`` sits at row ``i // C`` and column ``i % C``; element 0 is the
    local origin (bottom-left corner). In the LCS an element is at
    ``(0, dH * col, dV * row)``.
    """

    def __init__(self, config: ArrayConfig | None = None):
        self.config = config or ArrayConfig()

    @property
    def num_elements(self) -> int:
        return self.config.num_elements

    @property
    def bearing(self) -> float:
        return self.config.bearing

    @property
    def downtilt(self) -> float:
        return self.config.downtilt

    def local_location(self, index: int) -> np.ndarray:
        i = _check_index(index, self.num_elements)
        row, col = divmod(i, self.config.num_columns)
        return np.array(
            [0.0, self.config.horizontal_spacing * col, self.config.vertical_spacing * row],
            dtype=np.float64,
        )

    def element_location(self, index: int) -> np.ndarray:
        return rotate_to_global(self.local_location(index), self.bearing, self.downtilt)

    def element_locations(self) -> np.ndarray:
        """Return (M,3) global element positions in element-index order."""
        idx = np.arange(self.num_elements)
        row, col = np.divmod(idx, self.config.num_columns)
        local = np.column_stack(
            [
                np.zeros(idx.size, dtype=np.float64),
                self.config.horizontal_spacing * col,
                self.config.vertical_spacing * row,
            ]
        )
        return rotate_to_global(local, self.bearing, self.downtilt)

    def __repr__(self) -> str:
        c = self.config
        return (
            f"UniformPlanarArray({c.num_rows}x{c.num_columns}, dH={c.horizontal_spacing}, "
            f"dV={c.vertical_spacing}, bearing={math.degrees(c.bearing):.1f} deg, "
            f"downtilt={math.degrees(c.downtilt):.1f} deg)"
        )


class CustomArray:
    """Array with explicit (M,3) element positions in wavelengths, given in the GCS.

    Positions are used as-is (no re-centering) so that element 0 keeps its
    place as the phase reference.
    """

    def __init__(self, locations: np.ndarray):
        xyz = _validate_xyz(locations)
        _ensure_unique(xyz)
        self._xyz = xyz.copy()
        self._xyz.flags.writeable = False

    @property
    def num_elements(self) -> int:
        return int(self._xyz.shape[0])

    def element_location(self, index: int) -> np.ndarray:
        return self._xyz[_check_index(index, self.num_elements)].copy()

    def element_locations(self) -> np.ndarray:
        return self._xyz.copy()
