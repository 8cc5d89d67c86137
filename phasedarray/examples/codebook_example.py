from __future__ import annotations

import logging
import math
import time
from pathlib import Path

import numpy as np

from phasedarray.codebook import best_codeword, build_direction_tree, nearest_codeword, steering_codebook
from phasedarray.config import ArrayConfig
from phasedarray.elements import ThreeGppAntennaModel
from phasedarray.geometry import UniformPlanarArray
from phasedarray.pattern_io import save_codebook_h5
from phasedarray.phased_array import PhasedArray
from phasedarray.utils import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    cfg = ArrayConfig(num_rows=4, num_columns=8)
    array = PhasedArray(UniformPlanarArray(cfg), ThreeGppAntennaModel())

    # Grid: theta=60:5:120 deg, phi=-60:5:60 deg
    theta = np.radians(np.arange(60.0, 120.0 + 1e-9, 5.0))
    phi = np.radians(np.arange(-60.0, 60.0 + 1e-9, 5.0))

    start = time.time()
    cb, directions = steering_codebook(array, theta, phi)
    logger.info("Built %d codewords in %.3fs", cb.shape[0], time.time() - start)

    out_path = Path("codebook_4x8.h5")
    save_codebook_h5(str(out_path), directions, cb, config=cfg, attrs={"element": "3gpp"})

    tree = build_direction_tree(directions)
    rng = np.random.default_rng(0)
    for _ in range(5):
        t = float(rng.uniform(math.radians(60.0), math.radians(120.0)))
        p = float(rng.uniform(math.radians(-60.0), math.radians(60.0)))
        idx, ang = nearest_codeword(tree, (t, p))
        best, gain = best_codeword(cb, array.steering_vector((t, p)))
        logger.info(
            "target (%.1f, %.1f) deg: nearest=%d (%.2f deg off), best=%d (%.2f dB)",
            math.degrees(t), math.degrees(p), int(idx[0]), math.degrees(float(ang[0])), best, gain,
        )


if __name__ == "__main__":
    main()
