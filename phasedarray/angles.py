from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

ArrayLikeFloat = Union[float, np.ndarray]


def _out(x: np.ndarray) -> ArrayLikeFloat:
    # 0-d arrays come back as numpy scalars so scalar callers get floats
    return x[()] if x.ndim == 0 else x


def degrees_to_radians(deg: ArrayLikeFloat) -> ArrayLikeFloat:
    return _out(np.asarray(deg, dtype=np.float64) * (math.pi / 180.0))


def radians_to_degrees(rad: ArrayLikeFloat) -> ArrayLikeFloat:
    return _out(np.asarray(rad, dtype=np.float64) * (180.0 / math.pi))


def wrap_phi(phi: ArrayLikeFloat) -> ArrayLikeFloat:
    """Wrap azimuth into (-pi, pi]."""
    p = np.asarray(phi, dtype=np.float64)
    wrapped = math.pi - np.mod(math.pi - p, 2.0 * math.pi)
    wrapped = np.where(wrapped <= -math.pi, math.pi, wrapped)
    # in-range values pass through untouched so wrapping is exactly idempotent
    return _out(np.where((p > -math.pi) & (p <= math.pi), p, wrapped))


def normalize_angles(theta: ArrayLikeFloat, phi: ArrayLikeFloat) -> Tuple[ArrayLikeFloat, ArrayLikeFloat]:
    """Return (theta, phi) in canonical range: theta in [0, pi], phi in (-pi, pi].

    Phi is reduced modulo 2*pi. Theta outside [0, pi] is not a wrap-around
    case; it is clamped to the nearest bound. Applying the function twice
    gives the same result as applying it once.
    """
    t = np.clip(np.asarray(theta, dtype=np.float64), 0.0, math.pi)
    return _out(t), wrap_phi(phi)


def direction_to_unit_vector(theta: ArrayLikeFloat, phi: ArrayLikeFloat) -> np.ndarray:
    """Unit wave vector [sin(t)cos(p), sin(t)sin(p), cos(t)] with shape (..., 3)."""
    t = np.asarray(theta, dtype=np.float64)
    p = np.asarray(phi, dtype=np.float64)
    st = np.sin(t)
    return np.stack([st * np.cos(p), st * np.sin(p), np.cos(t) * np.ones_like(p)], axis=-1)


def to_local_frame(
    theta: ArrayLikeFloat,
    phi: ArrayLikeFloat,
    bearing: float,
    downtilt: float,
) -> Tuple[ArrayLikeFloat, ArrayLikeFloat]:
    """Rotate a GCS direction into the LCS of an array (TR 38.901 eq. 7.1-7, 7.1-8).

    Parameters
    - theta, phi: inclination and azimuth in the global frame (radians).
    - bearing: rotation about the z axis (alpha, radians).
    - downtilt: rotation about the rotated y axis (beta, radians).

    Returns
    - (theta', phi') in the local frame. Slant angle is assumed to be 0.
    """
    t = np.asarray(theta, dtype=np.float64)
    dp = np.asarray(phi, dtype=np.float64) - bearing
    cb, sb = math.cos(downtilt), math.sin(downtilt)

    # rounding can push the argument a hair past +-1
    cos_t_prime = np.clip(cb * np.cos(t) + sb * np.cos(dp) * np.sin(t), -1.0, 1.0)
    theta_prime = np.arccos(cos_t_prime)
    phi_prime = np.arctan2(
        np.sin(dp) * np.sin(t),
        cb * np.sin(t) * np.cos(dp) - sb * np.cos(t),
    )
    return _out(theta_prime), _out(phi_prime)


def polarization_rotation_angle(
    theta: ArrayLikeFloat,
    phi: ArrayLikeFloat,
    bearing: float,
    downtilt: float,
) -> ArrayLikeFloat:
    """Angle psi between the GCS and LCS polarization bases (TR 38.901 eq. 7.1-15).

    psi = arg(cos(b) sin(t) - sin(b) cos(t) cos(p - a) + j sin(b) sin(p - a)),
    with slant angle 0.
    """
    t = np.asarray(theta, dtype=np.float64)
    dp = np.asarray(phi, dtype=np.float64) - bearing
    cb, sb = math.cos(downtilt), math.sin(downtilt)
    psi = np.arctan2(
        sb * np.sin(dp),
        cb * np.sin(t) - sb * np.cos(t) * np.cos(dp),
    )
    return _out(psi)


@dataclass(frozen=True)
class Direction:
    """A direction of arrival/departure: inclination ``theta`` and azimuth ``phi`` (radians)."""

    theta: float
    phi: float

    @classmethod
    def from_degrees(cls, theta_deg: float, phi_deg: float) -> "Direction":
        return cls(float(degrees_to_radians(theta_deg)), float(degrees_to_radians(phi_deg)))

    def normalized(self) -> "Direction":
        t, p = normalize_angles(self.theta, self.phi)
        return Direction(float(t), float(p))

    def to_degrees(self) -> Tuple[float, float]:
        return float(radians_to_degrees(self.theta)), float(radians_to_degrees(self.phi))

    def __str__(self) -> str:
        t, p = self.to_degrees()
        return f"(theta={t:.2f} deg, phi={p:.2f} deg)"


DirectionLike = Union[Direction, Tuple[ArrayLikeFloat, ArrayLikeFloat]]


def as_theta_phi(direction: DirectionLike) -> Tuple[ArrayLikeFloat, ArrayLikeFloat]:
    """Unpack a Direction or a (theta, phi) pair."""
    if isinstance(direction, Direction):
        return direction.theta, direction.phi
    try:
        theta, phi = direction
    except (TypeError, ValueError) as e:
        raise ValueError("direction must be a Direction or a (theta, phi) pair") from e
    return theta, phi
