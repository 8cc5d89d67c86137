from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np

from phasedarray.angles import Direction
from phasedarray.config import ArrayConfig
from phasedarray.elements import CosineAntennaModel, IsotropicAntennaModel, ParabolicAntennaModel
from phasedarray.geometry import UniformPlanarArray
from phasedarray.pattern_io import save_pattern_csv
from phasedarray.patterns import pattern_peak, radiation_pattern
from phasedarray.phased_array import PhasedArray
from phasedarray.utils import setup_logging

logger = logging.getLogger(__name__)

# (label, rows, cols, vertical spacing, element)
SCENARIOS = [
    ("1x1_isotropic", 1, 1, 0.5, IsotropicAntennaModel()),
    ("1x1_cosine", 1, 1, 0.5, CosineAntennaModel()),
    ("1x1_parabolic", 1, 1, 0.5, ParabolicAntennaModel()),
    ("1x8_parabolic", 1, 8, 0.5, ParabolicAntennaModel()),
    ("8x1_parabolic", 8, 1, 0.5, ParabolicAntennaModel()),
    ("8x8_parabolic", 8, 8, 0.5, ParabolicAntennaModel()),
    ("8x8_parabolic_dv08", 8, 8, 0.8, ParabolicAntennaModel()),
]

STEERING = [
    Direction(math.pi / 2, 0.0),
    Direction(math.pi / 2, math.pi / 4),
    Direction(math.pi / 2, math.pi / 2),
    Direction(math.pi / 4, 0.0),
    Direction(0.0, 0.0),
]


def main() -> None:
    setup_logging()
    out_dir = Path("upa_patterns")
    out_dir.mkdir(parents=True, exist_ok=True)

    res = 100
    phi = np.arange(res) * (2 * math.pi / res) - math.pi
    theta = np.linspace(0.0, math.pi, res // 2 + 1)

    for label, rows, cols, dv, element in SCENARIOS:
        cfg = ArrayConfig(num_rows=rows, num_columns=cols, vertical_spacing=dv)
        array = PhasedArray(UniformPlanarArray(cfg), element)
        for k, d in enumerate(STEERING):
            bf = array.beamforming_vector(d)
            g = radiation_pattern(array, bf, theta, phi)
            peak, g_max = pattern_peak(theta, phi, g)
            logger.info("%s steer=%s peak %.2f dB at %s", label, d, g_max, peak)
            save_pattern_csv(str(out_dir / f"{label}_steer{k}.csv"), theta, phi, g)


if __name__ == "__main__":
    main()
