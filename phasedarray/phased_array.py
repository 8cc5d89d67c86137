"""Phased array: element geometry combined with an element radiation model.

Equations
- Steering vector (far field, wavelength-normalized positions p_i):
  s_i(theta, phi) = exp(-j 2 pi (sin t cos p * x_i + sin t sin p * y_i + cos t * z_i))
- Beamforming vector towards a direction: b = conj(s) / ||s||, so ||b|| = 1.
- Element field pattern in the GCS (TR 38.901 eq. 7.1-11 with slant 0):
  F_theta = cos(psi) * F'_theta, F_phi = sin(psi) * F'_theta,
  with F'_theta = 10^(G_elem(theta', phi') / 20) evaluated in the LCS.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Optional, Tuple, Union

import numpy as np

from .angles import (
    Direction,
    DirectionLike,
    as_theta_phi,
    direction_to_unit_vector,
    polarization_rotation_angle,
    to_local_frame,
)
from .elements import AntennaElement, IsotropicAntennaModel
from .exceptions import ConfigurationError
from .geometry import ArrayGeometry

logger = logging.getLogger(__name__)


def compute_norm(vector: np.ndarray) -> float:
    """L2 norm sqrt(sum |v_i|^2)."""
    v = np.asarray(vector, dtype=np.complex128).ravel()
    return float(np.sqrt(np.sum(np.abs(v) ** 2)))


class PhasedArray:
    """An antenna array made of identical elements placed by an ArrayGeometry.

    The steering, beamforming and field-pattern operations are pure functions
    of the geometry, the element model and the requested direction. The array
    additionally holds a "current" beamforming vector, as set by whoever drives
    it; that vector and the omni flag are the only mutable state and are guarded
    by a lock (writers swap the whole vector, readers get a copy).
    """

    def __init__(self, geometry: ArrayGeometry, element: Optional[AntennaElement] = None):
        if geometry.num_elements < 1:
            raise ConfigurationError("array must have at least one element")
        self._geometry = geometry
        self._element: AntennaElement = element if element is not None else IsotropicAntennaModel()
        self._lock = threading.Lock()
        self._bf_vector: Optional[np.ndarray] = None
        self._omni_tx = False

    # ------------------------------------------------------------------ model
    @property
    def geometry(self) -> ArrayGeometry:
        return self._geometry

    @property
    def num_elements(self) -> int:
        return self._geometry.num_elements

    @property
    def element(self) -> AntennaElement:
        return self._element

    @element.setter
    def element(self, element: AntennaElement) -> None:
        self.set_antenna_element(element)

    def set_antenna_element(self, element: AntennaElement) -> None:
        if not hasattr(element, "gain_db"):
            raise ConfigurationError("antenna element must provide gain_db(direction)")
        self._element = element

    def element_location(self, index: int) -> np.ndarray:
        return self._geometry.element_location(index)

    @property
    def _rotation(self) -> Tuple[float, float]:
        # geometries that do not declare an orientation are unrotated
        return float(getattr(self._geometry, "bearing", 0.0)), float(getattr(self._geometry, "downtilt", 0.0))

    # ------------------------------------------------------------ vectors
    def steering_vector(self, direction: DirectionLike) -> np.ndarray:
        """Return (M,) complex128 unit-magnitude steering vector towards ``direction``."""
        theta, phi = as_theta_phi(direction)
        u = direction_to_unit_vector(float(theta), float(phi))
        phase = -2.0 * math.pi * (self._geometry.element_locations() @ u)
        return np.exp(1j * phase).astype(np.complex128)

    def steering_matrix(self, theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
        """Return (P,M) steering vectors for P directions given as 1D theta/phi arrays."""
        t = np.asarray(theta, dtype=np.float64).ravel()
        p = np.asarray(phi, dtype=np.float64).ravel()
        if t.shape != p.shape:
            raise ValueError("theta and phi must have the same number of entries")
        u = direction_to_unit_vector(t, p)  # (P,3)
        phase = -2.0 * math.pi * (u @ self._geometry.element_locations().T)
        return np.exp(1j * phase).astype(np.complex128)

    def beamforming_vector(self, direction: DirectionLike) -> np.ndarray:
        """Conjugated steering vector towards ``direction`` with unit L2 norm."""
        sv = self.steering_vector(direction)
        return np.conj(sv) / compute_norm(sv)

    def beamforming_vector_from_weights(self, weights: np.ndarray) -> np.ndarray:
        """Validate externally computed weights (codebook entry, SVD solution, ...).

        Weights are returned unchanged as a complex128 copy; a length different
        from the number of elements raises ConfigurationError.
        """
        w = np.array(weights, dtype=np.complex128).ravel()
        if w.shape[0] != self.num_elements:
            raise ConfigurationError(
                f"beamforming vector length {w.shape[0]} != number of elements {self.num_elements}"
            )
        return w

    # ------------------------------------------------------- field pattern
    def element_field_pattern(self, direction: DirectionLike) -> Tuple[float, float]:
        """Return (field_phi, field_theta) of one element towards a GCS direction.

        Only vertical polarization is modeled in the LCS; the bearing and
        downtilt of the array rotate it into both GCS components.
        """
        theta, phi = as_theta_phi(direction)
        field_phi, field_theta = self.element_field_pattern_grid(
            np.asarray([theta], dtype=np.float64), np.asarray([phi], dtype=np.float64)
        )
        return float(field_phi[0]), float(field_theta[0])

    def element_field_pattern_grid(self, theta: np.ndarray, phi: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Vectorized element_field_pattern over matching theta/phi arrays."""
        bearing, downtilt = self._rotation
        t = np.asarray(theta, dtype=np.float64)
        p = np.asarray(phi, dtype=np.float64)

        theta_prime, phi_prime = to_local_frame(t, p, bearing, downtilt)
        gain_db = np.asarray(self._element.gain_db((theta_prime, phi_prime)), dtype=np.float64)
        field_theta_prime = np.power(10.0, gain_db / 20.0)  # linear magnitude

        psi = np.asarray(polarization_rotation_angle(t, p, bearing, downtilt))
        if logger.isEnabledFor(logging.DEBUG) and t.size == 1:
            logger.debug(
                "%s -> %s, psi=%.4f rad, G=%.3f dB",
                Direction(float(t.ravel()[0]), float(p.ravel()[0])),
                Direction(float(np.ravel(theta_prime)[0]), float(np.ravel(phi_prime)[0])),
                float(psi.ravel()[0]),
                float(gain_db.ravel()[0]),
            )
        field_theta = np.cos(psi) * field_theta_prime
        field_phi = np.sin(psi) * field_theta_prime
        return field_phi, field_theta

    # ---------------------------------------------- current beamforming state
    def set_beamforming_vector(self, target: Union[Direction, np.ndarray]) -> None:
        """Set the current beamforming vector from a Direction or explicit weights.

        Only a Direction instance steers the array. Any other value, tuples
        and lists included, is a weight vector: it is length-checked and stored
        unchanged. Clears the omni-transmission flag.
        """
        if isinstance(target, Direction):
            bf = self.beamforming_vector(target)
        else:
            bf = self.beamforming_vector_from_weights(target)
        bf.flags.writeable = False
        with self._lock:
            self._bf_vector = bf
            self._omni_tx = False
        logger.debug("beamforming vector updated (%d elements)", bf.shape[0])

    def get_beamforming_vector(self) -> np.ndarray:
        """Return a copy of the current beamforming vector."""
        with self._lock:
            bf = self._bf_vector
        if bf is None:
            raise RuntimeError("no beamforming vector has been set")
        return bf.copy()

    @property
    def is_omni_tx(self) -> bool:
        with self._lock:
            return self._omni_tx

    def change_to_omni_tx(self) -> None:
        with self._lock:
            self._omni_tx = True

    def __repr__(self) -> str:
        return f"PhasedArray({self._geometry!r}, element={self._element!r})"
