"""Antenna element radiation models.

Each model maps a direction (inclination ``theta``, azimuth ``phi``, radians,
in the element's own frame) to a power gain in dB. Models are immutable:
parameters are given in degrees/dB at construction, validated there, and
converted to radians once.

Models
- IsotropicAntennaModel: 0 dB in every direction.
- CosineAntennaModel: separable cosine-power pattern,
  G = 20 log10(cos(phi/2)^nH * cos((theta - pi/2)/2)^nV) + G_max,
  n = -3 / (20 log10(cos(bw/4))) so that gain is -3 dB at +-bw/2.
- ParabolicAntennaModel / ThreeGppAntennaModel: TR 38.901 table 7.3-1,
  A_v = -min(SLA_V, 12 ((theta - 90) / bw_v)^2)
  A_h = -min(A_max, 12 (phi / bw_h)^2)
  G   = G_max - min(A_max, -(A_v + A_h))
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Union

import numpy as np

from .angles import (
    ArrayLikeFloat,
    DirectionLike,
    _out,
    as_theta_phi,
    degrees_to_radians,
    normalize_angles,
    radians_to_degrees,
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _check_real(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a real number (got {value!r})")


def _check_beamwidth(
    name: str,
    value: float,
    upper: float = math.inf,
    include_upper: bool = False,
    allow_inf: bool = False,
) -> None:
    """Beamwidth in degrees must lie in (0, upper), or (0, upper] with include_upper.

    With allow_inf, +inf is accepted as "no directivity in this plane".
    """
    _check_real(name, value)
    v = float(value)
    if allow_inf and v == math.inf:
        return
    in_range = 0.0 < v <= upper if include_upper else 0.0 < v < upper
    if not in_range:
        closing = "]" if include_upper else ")"
        raise ConfigurationError(f"{name} must be in (0, {upper:g}{closing} degrees (got {value!r})")


def _check_finite(name: str, value: float) -> None:
    _check_real(name, value)
    if not math.isfinite(float(value)):
        raise ConfigurationError(f"{name} must be finite (got {value})")


def _check_non_negative(name: str, value: float) -> None:
    _check_finite(name, value)
    if float(value) < 0:
        raise ConfigurationError(f"{name} must be >= 0 (got {value})")


def _check_orientation(value: float) -> None:
    _check_finite("orientation", value)
    if not -360.0 <= float(value) <= 360.0:
        raise ConfigurationError(f"orientation must be in [-360, 360] degrees (got {value})")


def _local_angles(direction: DirectionLike, orientation_rad: float):
    # subtract orientation first, then normalize
    theta, phi = as_theta_phi(direction)
    phi = np.asarray(phi, dtype=np.float64) - orientation_rad
    return normalize_angles(theta, phi)


def cosine_exponent(beamwidth_rad: float) -> float:
    """Exponent of the cosine pattern giving -3 dB at half the beamwidth; 0 if infinite."""
    if math.isinf(beamwidth_rad):
        return 0.0
    return -3.0 / (20.0 * math.log10(math.cos(beamwidth_rad / 4.0)))


@dataclass(frozen=True)
class IsotropicAntennaModel:
    """Unit gain in every direction."""

    def gain_db(self, direction: DirectionLike) -> ArrayLikeFloat:
        theta, phi = as_theta_phi(direction)
        shape = np.broadcast(np.asarray(theta), np.asarray(phi)).shape
        return _out(np.zeros(shape, dtype=np.float64))


@dataclass(frozen=True)
class CosineAntennaModel:
    horizontal_beamwidth: float = 60.0
    vertical_beamwidth: float = math.inf
    orientation: float = 0.0
    max_gain: float = 0.0

    _h_exponent: float = field(init=False, repr=False, compare=False)
    _v_exponent: float = field(init=False, repr=False, compare=False)
    _orientation_rad: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_beamwidth("horizontal_beamwidth", self.horizontal_beamwidth, upper=360.0, allow_inf=True)
        _check_beamwidth("vertical_beamwidth", self.vertical_beamwidth, upper=360.0, allow_inf=True)
        _check_orientation(self.orientation)
        _check_finite("max_gain", self.max_gain)
        object.__setattr__(self, "_h_exponent", cosine_exponent(float(degrees_to_radians(self.horizontal_beamwidth))))
        object.__setattr__(self, "_v_exponent", cosine_exponent(float(degrees_to_radians(self.vertical_beamwidth))))
        object.__setattr__(self, "_orientation_rad", float(degrees_to_radians(self.orientation)))
        logger.debug(
            "cosine element: nH=%.4f nV=%.4f orientation=%.1f deg",
            self._h_exponent, self._v_exponent, self.orientation,
        )

    @property
    def horizontal_exponent(self) -> float:
        return self._h_exponent

    @property
    def vertical_exponent(self) -> float:
        return self._v_exponent

    def gain_db(self, direction: DirectionLike) -> ArrayLikeFloat:
        theta, phi = _local_angles(direction, self._orientation_rad)
        # amplitude gain of a single element; the array factor is not included
        ef = np.power(np.cos(np.asarray(phi) / 2.0), self._h_exponent) * np.power(
            np.cos((np.asarray(theta) - math.pi / 2.0) / 2.0), self._v_exponent
        )
        with np.errstate(divide="ignore"):
            g = 20.0 * np.log10(ef) + self.max_gain
        return _out(np.asarray(g, dtype=np.float64))


def _table_gain_db(
    theta: ArrayLikeFloat,
    phi: ArrayLikeFloat,
    h_beamwidth: float,
    v_beamwidth: float,
    max_attenuation: float,
    sla_v: float,
    max_gain: float,
) -> ArrayLikeFloat:
    theta_deg = np.asarray(radians_to_degrees(theta))
    phi_deg = np.asarray(radians_to_degrees(phi))
    a_v = -np.minimum(sla_v, 12.0 * ((theta_deg - 90.0) / v_beamwidth) ** 2)
    a_h = -np.minimum(max_attenuation, 12.0 * (phi_deg / h_beamwidth) ** 2)
    g = max_gain - np.minimum(max_attenuation, -(a_v + a_h))
    return _out(np.asarray(g, dtype=np.float64))


@dataclass(frozen=True)
class ParabolicAntennaModel:
    """TR 38.901 element pattern with a user-settable orientation on the x-y plane."""

    horizontal_beamwidth: float = 60.0
    vertical_beamwidth: float = 60.0
    max_attenuation: float = 30.0
    vertical_side_lobe_attenuation: float = 30.0
    max_directional_gain: float = 8.0
    orientation: float = 0.0

    _orientation_rad: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_beamwidth("horizontal_beamwidth", self.horizontal_beamwidth, upper=180.0, include_upper=True)
        _check_beamwidth("vertical_beamwidth", self.vertical_beamwidth, upper=180.0, include_upper=True)
        _check_non_negative("max_attenuation", self.max_attenuation)
        _check_non_negative("vertical_side_lobe_attenuation", self.vertical_side_lobe_attenuation)
        _check_finite("max_directional_gain", self.max_directional_gain)
        _check_orientation(self.orientation)
        object.__setattr__(self, "_orientation_rad", float(degrees_to_radians(self.orientation)))

    def gain_db(self, direction: DirectionLike) -> ArrayLikeFloat:
        theta, phi = _local_angles(direction, self._orientation_rad)
        return _table_gain_db(
            theta,
            phi,
            self.horizontal_beamwidth,
            self.vertical_beamwidth,
            self.max_attenuation,
            self.vertical_side_lobe_attenuation,
            self.max_directional_gain,
        )


@dataclass(frozen=True)
class ThreeGppAntennaModel:
    """TR 38.901 element pattern with the standard defaults, boresight along +x."""

    vertical_beamwidth: float = 65.0
    horizontal_beamwidth: float = 65.0
    max_attenuation: float = 30.0
    vertical_side_lobe_attenuation: float = 30.0
    max_directional_gain: float = 8.0

    def __post_init__(self) -> None:
        _check_beamwidth("horizontal_beamwidth", self.horizontal_beamwidth)
        _check_beamwidth("vertical_beamwidth", self.vertical_beamwidth)
        _check_non_negative("max_attenuation", self.max_attenuation)
        _check_non_negative("vertical_side_lobe_attenuation", self.vertical_side_lobe_attenuation)
        _check_finite("max_directional_gain", self.max_directional_gain)

    @property
    def orientation(self) -> float:
        return 0.0

    def gain_db(self, direction: DirectionLike) -> ArrayLikeFloat:
        theta, phi = _local_angles(direction, 0.0)
        return _table_gain_db(
            theta,
            phi,
            self.horizontal_beamwidth,
            self.vertical_beamwidth,
            self.max_attenuation,
            self.vertical_side_lobe_attenuation,
            self.max_directional_gain,
        )


AntennaElement = Union[IsotropicAntennaModel, CosineAntennaModel, ParabolicAntennaModel, ThreeGppAntennaModel]

_ELEMENT_KINDS = {
    "isotropic": IsotropicAntennaModel,
    "cosine": CosineAntennaModel,
    "parabolic": ParabolicAntennaModel,
    "3gpp": ThreeGppAntennaModel,
}


def make_element(kind: str, **params: Any) -> AntennaElement:
    """Build an element model from its kind name and keyword parameters.

    kind: one of {"isotropic", "cosine", "parabolic", "3gpp"} (case-insensitive).
    Unknown kinds or parameters raise ConfigurationError.
    """
    key = str(kind).lower()
    if key not in _ELEMENT_KINDS:
        raise ConfigurationError(f"unknown element kind {kind!r}; expected one of {sorted(_ELEMENT_KINDS)}")
    try:
        return _ELEMENT_KINDS[key](**params)
    except TypeError as e:
        raise ConfigurationError(f"invalid parameters for {key} element: {e}") from e


def element_to_dict(element: AntennaElement) -> Dict[str, Any]:
    """Inverse of make_element: {'type': kind, **params}."""
    for kind, cls in _ELEMENT_KINDS.items():
        if type(element) is cls:
            params = {
                k: getattr(element, k)
                for k in getattr(cls, "__dataclass_fields__", {})
                if not k.startswith("_")
            }
            return {"type": kind, **params}
    raise ValueError(f"unsupported element type {type(element).__name__}")
