from __future__ import annotations

import dataclasses
import json
import logging
import math
import numbers
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .angles import degrees_to_radians
from .elements import AntennaElement, IsotropicAntennaModel, _check_real, make_element
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _check_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer (got {value!r})")
    return int(value)


def _check_spacing(name: str, value: Any) -> float:
    _check_real(name, value)
    v = float(value)
    if not math.isfinite(v) or v <= 0:
        raise ConfigurationError(f"{name} must be positive and finite (got {value!r})")
    return v


def _check_angle(name: str, value: Any, low: float, high: float, bounds: str) -> float:
    _check_real(name, value)
    v = float(value)
    if not math.isfinite(v) or not low <= v <= high:
        raise ConfigurationError(f"{name} must be in {bounds} radians (got {value!r})")
    return v


@dataclass(frozen=True)
class ArrayConfig:
    """Uniform planar array configuration.

    Parameters
    - num_rows: vertical size of the array (R >= 1).
    - num_columns: horizontal size of the array (C >= 1).
    - horizontal_spacing: column spacing, in multiples of the wavelength (> 0).
    - vertical_spacing: row spacing, in multiples of the wavelength (> 0).
    - bearing: rotation about the vertical axis, radians in [-pi, pi].
    - downtilt: tilt from the vertical, radians in [0, pi].

    The object is immutable; use ``replace`` to derive a changed config. Any
    vector computed from the old config has to be recomputed by the caller.
    """

    num_rows: int = 4
    num_columns: int = 4
    horizontal_spacing: float = 0.5
    vertical_spacing: float = 0.5
    bearing: float = 0.0
    downtilt: float = 0.0

    def __post_init__(self) -> None:
        # stored as plain int/float so the config serializes to JSON
        checked = {
            "num_rows": _check_count("num_rows", self.num_rows),
            "num_columns": _check_count("num_columns", self.num_columns),
            "horizontal_spacing": _check_spacing("horizontal_spacing", self.horizontal_spacing),
            "vertical_spacing": _check_spacing("vertical_spacing", self.vertical_spacing),
            "bearing": _check_angle("bearing", self.bearing, -math.pi, math.pi, "[-pi, pi]"),
            "downtilt": _check_angle("downtilt", self.downtilt, 0.0, math.pi, "[0, pi]"),
        }
        for name, value in checked.items():
            object.__setattr__(self, name, value)

    @classmethod
    def from_degrees(
        cls,
        num_rows: int = 4,
        num_columns: int = 4,
        horizontal_spacing: float = 0.5,
        vertical_spacing: float = 0.5,
        bearing_deg: float = 0.0,
        downtilt_deg: float = 0.0,
    ) -> "ArrayConfig":
        return cls(
            num_rows=num_rows,
            num_columns=num_columns,
            horizontal_spacing=horizontal_spacing,
            vertical_spacing=vertical_spacing,
            bearing=float(degrees_to_radians(bearing_deg)),
            downtilt=float(degrees_to_radians(downtilt_deg)),
        )

    @property
    def num_elements(self) -> int:
        return self.num_rows * self.num_columns

    def replace(self, **changes: Any) -> "ArrayConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


PRESETS: Dict[str, ArrayConfig] = {
    "single": ArrayConfig(num_rows=1, num_columns=1),
    "linear_10x1": ArrayConfig(num_rows=10, num_columns=1),
    "planar_4x4": ArrayConfig(),
    "planar_8x8": ArrayConfig(num_rows=8, num_columns=8),
    "planar_10x10": ArrayConfig(num_rows=10, num_columns=10),
}


def get_preset(name: str) -> ArrayConfig:
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown array preset: {name} (available: {', '.join(sorted(PRESETS))})")
    return PRESETS[name]


# -------- comment-tolerant JSON helpers --------
def _parse_json_with_comments(text: str) -> Any:
    # remove /* ... */
    text = re.sub(r"/\*.*?\*/", "", text, flags=re.S)
    # strip // comments per line
    text = "\n".join(line.split("//", 1)[0] for line in text.splitlines())
    # remove trailing commas before ] or }
    text = re.sub(r",(\s*[\]}])", r"\1", text)
    return json.loads(text)


_ANGLE_KEYS = {"bearing_deg": "bearing", "downtilt_deg": "downtilt"}
_CONFIG_KEYS = {f.name for f in dataclasses.fields(ArrayConfig)}


def config_from_mapping(entry: Dict[str, Any]) -> Tuple[ArrayConfig, AntennaElement]:
    """Build (ArrayConfig, element) from one JSON entry.

    Angles may be given in radians (``bearing``/``downtilt``) or degrees
    (``bearing_deg``/``downtilt_deg``). The optional ``element`` object holds a
    ``type`` plus the model's keyword parameters; it defaults to isotropic.
    """
    if not isinstance(entry, dict):
        raise ConfigurationError("each array config must be a JSON object")
    entry = dict(entry)
    entry.pop("description", None)
    element_spec = entry.pop("element", None)

    kwargs: Dict[str, Any] = {}
    for key, value in entry.items():
        if key in _ANGLE_KEYS:
            _check_real(key, value)
            kwargs[_ANGLE_KEYS[key]] = float(degrees_to_radians(value))
        elif key in _CONFIG_KEYS:
            kwargs[key] = value
        else:
            raise ConfigurationError(f"unknown array config key: {key}")
    config = ArrayConfig(**kwargs)

    if element_spec is None:
        element: AntennaElement = IsotropicAntennaModel()
    else:
        if not isinstance(element_spec, dict) or "type" not in element_spec:
            raise ConfigurationError("element must be an object with a 'type' key")
        params = {k: v for k, v in element_spec.items() if k != "type"}
        element = make_element(element_spec["type"], **params)
    return config, element


def load_array_configs(path: Union[str, Path]) -> Dict[str, Tuple[ArrayConfig, AntennaElement]]:
    """Load named array configurations from a JSON file.

    The file is a JSON object mapping names to entries (see
    ``config_from_mapping``). ``//`` and ``/* */`` comments and trailing commas
    are accepted. Any invalid entry aborts the whole load.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        raw = _parse_json_with_comments(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"failed to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path} must contain a JSON object of named configs")

    out: Dict[str, Tuple[ArrayConfig, AntennaElement]] = {}
    for name, entry in raw.items():
        try:
            out[name] = config_from_mapping(entry)
        except ConfigurationError as e:
            raise ConfigurationError(f"{path}: config {name!r}: {e}") from e
    logger.info("Loaded %d array config(s) from %s", len(out), path)
    return out
