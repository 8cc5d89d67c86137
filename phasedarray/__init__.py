"""Phased antenna array radiation utilities.

Element gain models (isotropic, cosine, TR 38.901 parabolic), uniform planar
array geometry with bearing/downtilt, and their combination into steering
vectors, beamforming vectors and polarized element field patterns. Angles are
radians unless a name says otherwise; positions are in wavelengths.
"""

from .angles import (
    Direction,
    normalize_angles,
    degrees_to_radians,
    radians_to_degrees,
    to_local_frame,
    polarization_rotation_angle,
)
from .exceptions import ConfigurationError
from .elements import (
    IsotropicAntennaModel,
    CosineAntennaModel,
    ParabolicAntennaModel,
    ThreeGppAntennaModel,
    make_element,
)
from .config import ArrayConfig, PRESETS, get_preset, load_array_configs
from .geometry import ArrayGeometry, UniformPlanarArray, CustomArray
from .phased_array import PhasedArray
from .metrics import (
    beamforming_gain_db,
    element_power_gain_db,
    composite_gain_db,
    codeword_gain_db,
)
from .patterns import make_theta_phi_grid, radiation_pattern, pattern_peak
from .codebook import (
    steering_codebook,
    codeword_weights,
    build_direction_tree,
    nearest_codeword,
    best_codeword,
)
from .pattern_io import (
    save_pattern_h5,
    load_pattern_h5,
    save_codebook_h5,
    load_codebook_h5,
    save_pattern_csv,
)

__all__ = [
    "Direction",
    "normalize_angles",
    "degrees_to_radians",
    "radians_to_degrees",
    "to_local_frame",
    "polarization_rotation_angle",
    "ConfigurationError",
    "IsotropicAntennaModel",
    "CosineAntennaModel",
    "ParabolicAntennaModel",
    "ThreeGppAntennaModel",
    "make_element",
    "ArrayConfig",
    "PRESETS",
    "get_preset",
    "load_array_configs",
    "ArrayGeometry",
    "UniformPlanarArray",
    "CustomArray",
    "PhasedArray",
    "beamforming_gain_db",
    "element_power_gain_db",
    "composite_gain_db",
    "codeword_gain_db",
    "make_theta_phi_grid",
    "radiation_pattern",
    "pattern_peak",
    "steering_codebook",
    "codeword_weights",
    "build_direction_tree",
    "nearest_codeword",
    "best_codeword",
    "save_pattern_h5",
    "load_pattern_h5",
    "save_codebook_h5",
    "load_codebook_h5",
    "save_pattern_csv",
]
