"""Sweep the radiation pattern of a steered uniform planar array."""

import argparse
import logging
import math
from pathlib import Path

import numpy as np

from phasedarray.angles import Direction
from phasedarray.config import PRESETS, get_preset, load_array_configs
from phasedarray.elements import make_element
from phasedarray.geometry import UniformPlanarArray
from phasedarray.metrics import composite_gain_db
from phasedarray.pattern_io import save_pattern_csv, save_pattern_h5
from phasedarray.patterns import pattern_peak, radiation_pattern
from phasedarray.phased_array import PhasedArray
from phasedarray.utils import setup_logging

logger = logging.getLogger(__name__)


def build_array(args: argparse.Namespace) -> PhasedArray:
    if args.config is not None:
        configs = load_array_configs(args.config)
        if args.name not in configs:
            raise SystemExit(f"config {args.name!r} not found in {args.config} (available: {', '.join(configs)})")
        cfg, element = configs[args.name]
    else:
        cfg = get_preset(args.preset)
        element = make_element(args.element)
    return PhasedArray(UniformPlanarArray(cfg), element)


def main() -> None:
    parser = argparse.ArgumentParser(description="Radiation pattern of a steered phased array")
    parser.add_argument("--preset", default="planar_4x4", choices=sorted(PRESETS), help="Array preset")
    parser.add_argument("--element", default="3gpp", help="Element model: isotropic, cosine, parabolic, 3gpp")
    parser.add_argument("--config", type=Path, default=None, help="JSON file with named array configs")
    parser.add_argument("--name", default="default", help="Config name inside --config")
    parser.add_argument("--steer-theta", type=float, default=90.0, help="Steering inclination (deg)")
    parser.add_argument("--steer-phi", type=float, default=0.0, help="Steering azimuth (deg)")
    parser.add_argument("--resolution", type=int, default=100, help="Azimuth samples over 360 deg")
    parser.add_argument("--out-csv", type=Path, default=Path("simulation_results.csv"))
    parser.add_argument("--out-h5", type=Path, default=None)
    parser.add_argument("--html", type=Path, default=None, help="Write an interactive heatmap (needs plotly)")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    array = build_array(args)
    steer = Direction.from_degrees(args.steer_theta, args.steer_phi)
    bf = array.beamforming_vector(steer)
    array.set_beamforming_vector(bf)
    logger.info("%r steered to %s: gain %.2f dB", array, steer, composite_gain_db(array, steer, bf))

    res = max(4, int(args.resolution))
    phi = np.arange(res) * (2.0 * math.pi / res) - math.pi
    theta = np.linspace(0.0, math.pi, res // 2 + 1)
    gain = radiation_pattern(array, array.get_beamforming_vector(), theta, phi)
    peak, g_max = pattern_peak(theta, phi, gain)
    logger.info("Pattern peak %.2f dB at %s", g_max, peak)

    save_pattern_csv(str(args.out_csv), theta, phi, gain)
    if args.out_h5 is not None:
        save_pattern_h5(
            str(args.out_h5),
            theta,
            phi,
            gain,
            attrs={"steer_theta_deg": args.steer_theta, "steer_phi_deg": args.steer_phi},
        )
    if args.html is not None:
        from phasedarray.plotting_interactive import heatmap_theta_phi

        fig = heatmap_theta_phi(theta, phi, gain, f"{array!r}", steer=steer, floor_db=g_max - 40.0)
        fig.write_html(str(args.html))
        logger.info("Saved heatmap to %s", args.html)


if __name__ == "__main__":
    main()
