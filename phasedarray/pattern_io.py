from __future__ import annotations

import json
import logging
from typing import Any, Optional

import h5py
import numpy as np

from .config import ArrayConfig

logger = logging.getLogger(__name__)


def _write_attrs(f: h5py.File, attrs: dict | None) -> None:
    if attrs is None:
        return
    for k, v in attrs.items():
        # h5py supports many types; convert unsupported to JSON string
        try:
            f.attrs[k] = v
        except TypeError:
            f.attrs[k] = json.dumps(v)


def save_pattern_h5(
    path: str,
    theta: np.ndarray,
    phi: np.ndarray,
    gain_db: np.ndarray,
    attrs: dict | None = None,
) -> None:
    """Save a radiation pattern sweep to HDF5.

    Datasets
    - theta_rad: (Nt,) float64
    - phi_rad: (Np,) float64
    - gain_db: (Np,Nt) float64
    Any additional attrs items are saved as attributes on the file root.
    """
    th = np.asarray(theta, dtype=np.float64).ravel()
    ph = np.asarray(phi, dtype=np.float64).ravel()
    g = np.asarray(gain_db, dtype=np.float64)
    if g.shape != (ph.size, th.size):
        raise ValueError("gain_db must be (len(phi), len(theta))")
    with h5py.File(path, "w") as f:
        f.create_dataset("theta_rad", data=th)
        f.create_dataset("phi_rad", data=ph)
        f.create_dataset("gain_db", data=g)
        _write_attrs(f, attrs)
    logger.info("Saved pattern (%dx%d) to %s", ph.size, th.size, path)


def load_pattern_h5(path: str) -> dict:
    """Load a pattern saved by save_pattern_h5: keys theta_rad, phi_rad, gain_db, attrs."""
    with h5py.File(path, "r") as f:
        th = np.array(f["theta_rad"], dtype=np.float64)
        ph = np.array(f["phi_rad"], dtype=np.float64)
        g = np.array(f["gain_db"], dtype=np.float64)
        attrs = {k: f.attrs[k] for k in f.attrs.keys()}
    return {"theta_rad": th, "phi_rad": ph, "gain_db": g, "attrs": attrs}


def save_codebook_h5(
    path: str,
    directions: np.ndarray,
    codebook: np.ndarray,
    config: Optional[ArrayConfig] = None,
    attrs: dict | None = None,
) -> None:
    """Save a steering codebook and the array it was built for.

    Datasets
    - directions: (K,2) float64 [theta, phi]
    - codebook: (K,M) complex128
    Attributes
    - array_config: JSON of the ArrayConfig fields (if given)
    """
    d = np.asarray(directions, dtype=np.float64)
    cb = np.asarray(codebook, dtype=np.complex128)
    if d.ndim != 2 or d.shape[1] != 2 or cb.ndim != 2 or cb.shape[0] != d.shape[0]:
        raise ValueError("directions must be (K,2) and codebook (K,M) with matching K")
    with h5py.File(path, "w") as f:
        f.create_dataset("directions", data=d)
        f.create_dataset("codebook", data=cb)
        if config is not None:
            f.attrs["array_config"] = json.dumps(config.to_dict())
        _write_attrs(f, attrs)
    logger.info("Saved codebook (%d entries x %d elements) to %s", cb.shape[0], cb.shape[1], path)


def load_codebook_h5(path: str) -> dict:
    """Load a codebook: keys directions, codebook, config (ArrayConfig or None), attrs."""
    with h5py.File(path, "r") as f:
        d = np.array(f["directions"], dtype=np.float64)
        cb = np.array(f["codebook"], dtype=np.complex128)
        raw_cfg: Any = f.attrs.get("array_config")
        attrs = {k: f.attrs[k] for k in f.attrs.keys() if k != "array_config"}
    config = None
    if raw_cfg is not None:
        if isinstance(raw_cfg, bytes):
            raw_cfg = raw_cfg.decode("utf-8")
        config = ArrayConfig(**json.loads(raw_cfg))
    return {"directions": d, "codebook": cb, "config": config, "attrs": attrs}


def save_pattern_csv(path: str, theta: np.ndarray, phi: np.ndarray, gain_db: np.ndarray) -> None:
    """Write one ``theta_rad,phi_rad,gain_db`` row per grid point."""
    th = np.asarray(theta, dtype=np.float64).ravel()
    ph = np.asarray(phi, dtype=np.float64).ravel()
    g = np.asarray(gain_db, dtype=np.float64)
    if g.shape != (ph.size, th.size):
        raise ValueError("gain_db must be (len(phi), len(theta))")
    TH, PH = np.meshgrid(th, ph, indexing="xy")
    rows = np.column_stack([TH.ravel(), PH.ravel(), g.ravel()])
    np.savetxt(path, rows, delimiter=",", header="theta_rad,phi_rad,gain_db", comments="", fmt="%.10g")
    logger.info("Saved %d pattern samples to %s", rows.shape[0], path)
