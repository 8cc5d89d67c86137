"""Plotly views of radiation patterns (optional ``plot`` extra, imported lazily).

Gain maps are laid out as returned by ``radiation_pattern``: shape
(len(phi), len(theta)), angles in radians. Figures show degrees and dBi.
"""

from typing import Optional

import numpy as np

from .angles import Direction

_GAIN_HOVER = "theta=%{x:.1f}°, phi=%{y:.1f}°<br>gain=%{z:.2f} dBi<extra></extra>"


def _go():  # pragma: no cover - import helper
    import plotly.graph_objects as go  # type: ignore
    return go


def _gain_map_deg(theta: np.ndarray, phi: np.ndarray, gain_db: np.ndarray, floor_db: Optional[float]):
    th_deg = np.degrees(np.asarray(theta, dtype=np.float64).ravel())
    ph_deg = np.degrees(np.asarray(phi, dtype=np.float64).ravel())
    g = np.asarray(gain_db, dtype=np.float64)
    grid_shape = (ph_deg.size, th_deg.size)
    if g.ndim == 1 and g.size == ph_deg.size * th_deg.size:
        g = g.reshape(grid_shape)
    if g.shape != grid_shape:
        raise ValueError(f"gain map must have shape (len(phi), len(theta)) = {grid_shape}, got {g.shape}")
    if floor_db is not None:
        g = np.maximum(g, floor_db)
    # no radiated power (-inf) is left blank
    return th_deg, ph_deg, np.where(np.isfinite(g), g, np.nan)


def _steer_marker(go, steer: Direction, gain: Optional[float] = None):
    t, p = steer.normalized().to_degrees()
    kw = dict(x=[t], y=[p], mode="markers", name="steering", marker=dict(symbol="x", size=11, color="red"))
    if gain is not None:
        kw["z"] = [gain]
        return go.Scatter3d(**kw)
    return go.Scatter(**kw)


def heatmap_theta_phi(
    theta: np.ndarray,
    phi: np.ndarray,
    gain_db: np.ndarray,
    title: str,
    steer: Optional[Direction] = None,
    floor_db: Optional[float] = None,
) -> "go.Figure":
    """Theta/phi gain map; ``steer`` adds a marker at the steering direction."""
    th_deg, ph_deg, z = _gain_map_deg(theta, phi, gain_db, floor_db)
    go = _go()
    fig = go.Figure(
        go.Heatmap(x=th_deg, y=ph_deg, z=z, colorscale="Viridis", colorbar=dict(title="Gain (dBi)"), hovertemplate=_GAIN_HOVER)
    )
    if steer is not None:
        fig.add_trace(_steer_marker(go, steer))
    fig.update_layout(
        title=title,
        xaxis=dict(title="inclination theta (deg)", range=[0.0, 180.0]),
        yaxis=dict(title="azimuth phi (deg)", range=[-180.0, 180.0]),
        template="plotly_white",
    )
    return fig


def surface_theta_phi(
    theta: np.ndarray,
    phi: np.ndarray,
    gain_db: np.ndarray,
    title: str,
    steer: Optional[Direction] = None,
    floor_db: Optional[float] = None,
) -> "go.Figure":
    th_deg, ph_deg, z = _gain_map_deg(theta, phi, gain_db, floor_db)
    go = _go()
    fig = go.Figure(go.Surface(x=th_deg, y=ph_deg, z=z, colorscale="Viridis", colorbar=dict(title="Gain (dBi)"), hovertemplate=_GAIN_HOVER))
    if steer is not None:
        fig.add_trace(_steer_marker(go, steer, gain=float(np.nanmax(z))))
    fig.update_layout(
        title=title,
        scene=dict(xaxis_title="theta (deg)", yaxis_title="phi (deg)", zaxis_title="gain (dBi)"),
        template="plotly_white",
    )
    return fig


def polar_cut(
    angles: np.ndarray,
    values_db: np.ndarray,
    title: str,
    floor_db: float = -30.0,
) -> "go.Figure":
    """Polar plot of one pattern cut; values below ``floor_db`` are clipped."""
    a = np.degrees(np.asarray(angles, dtype=np.float64).reshape(-1))
    v = np.asarray(values_db, dtype=np.float64).reshape(-1)
    if a.shape != v.shape:
        raise ValueError("angles and values_db must have the same length")
    v = np.maximum(np.where(np.isfinite(v), v, floor_db), floor_db)
    go = _go()
    fig = go.Figure(
        go.Scatterpolar(
            r=v,
            theta=a,
            mode="lines",
            name="gain",
            hovertemplate="angle=%{theta:.1f}°<br>gain=%{r:.2f} dBi<extra></extra>",
        )
    )
    fig.update_layout(
        title=title,
        polar=dict(radialaxis=dict(range=[floor_db, float(np.max(v))], ticksuffix=" dBi")),
        template="plotly_white",
    )
    return fig
