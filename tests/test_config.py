import json
import math

import numpy as np
import pytest

from phasedarray.config import PRESETS, ArrayConfig, get_preset, load_array_configs
from phasedarray.elements import IsotropicAntennaModel, ThreeGppAntennaModel
from phasedarray.exceptions import ConfigurationError


def test_defaults_and_element_count():
    cfg = ArrayConfig()
    assert (cfg.num_rows, cfg.num_columns) == (4, 4)
    assert cfg.num_elements == 16
    assert cfg.horizontal_spacing == 0.5 and cfg.vertical_spacing == 0.5


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_rows": 0},
        {"num_columns": -2},
        {"num_rows": 2.0},
        {"num_columns": True},
        {"horizontal_spacing": 0.0},
        {"vertical_spacing": -0.5},
        {"vertical_spacing": math.inf},
        {"bearing": 3.5},
        {"downtilt": -0.1},
        {"downtilt": 3.2},
        {"horizontal_spacing": "0.5"},
        {"vertical_spacing": True},
        {"bearing": "x"},
        {"downtilt": None},
        {"num_rows": "4"},
    ],
)
def test_invalid_configs_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        ArrayConfig(**kwargs)


def test_from_degrees_and_replace():
    cfg = ArrayConfig.from_degrees(num_rows=2, num_columns=2, bearing_deg=90.0, downtilt_deg=45.0)
    assert np.isclose(cfg.bearing, math.pi / 2)
    assert np.isclose(cfg.downtilt, math.pi / 4)
    wider = cfg.replace(horizontal_spacing=0.8)
    assert wider.horizontal_spacing == 0.8 and cfg.horizontal_spacing == 0.5
    with pytest.raises(ConfigurationError):
        cfg.replace(horizontal_spacing=-1.0)
    with pytest.raises(ConfigurationError):
        ArrayConfig.from_degrees(downtilt_deg=-45.0)


def test_presets():
    assert get_preset("planar_10x10").num_elements == 100
    assert PRESETS["linear_10x1"].num_rows == 10
    with pytest.raises(ConfigurationError):
        get_preset("nope")


def test_load_configs_with_comments(tmp_path):
    text = """
    {
      /* base station panel */
      "bs": {
        "num_rows": 8, "num_columns": 8,
        "bearing_deg": 90,   // facing +y
        "downtilt_deg": 10,
        "element": {"type": "3gpp", "max_directional_gain": 8.0},
      },
      "ue": {"num_rows": 1, "num_columns": 2, "description": "handset"},
    }
    """
    path = tmp_path / "arrays.json"
    path.write_text(text, encoding="utf-8")
    configs = load_array_configs(path)
    cfg, el = configs["bs"]
    assert cfg.num_elements == 64
    assert np.isclose(cfg.bearing, math.pi / 2)
    assert isinstance(el, ThreeGppAntennaModel)
    cfg_ue, el_ue = configs["ue"]
    assert cfg_ue.num_elements == 2
    assert isinstance(el_ue, IsotropicAntennaModel)


def test_load_configs_rejects_bad_entries(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"a": {"num_rows": 0}}', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_array_configs(path)
    path.write_text('{"a": {"rows": 2}}', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_array_configs(path)
    path.write_text('{"a": {"element": {"type": "horn"}}}', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_array_configs(path)
    for entry in ('{"horizontal_spacing": "0.5"}', '{"vertical_spacing": true}', '{"bearing": "x"}', '{"bearing_deg": "90"}'):
        path.write_text('{"a": ' + entry + "}", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_array_configs(path)
    with pytest.raises(FileNotFoundError):
        load_array_configs(tmp_path / "missing.json")


def test_numpy_scalars_accepted_and_stored_as_builtins():
    cfg = ArrayConfig(num_rows=np.int64(4), num_columns=np.int32(2), horizontal_spacing=np.float64(0.5), bearing=np.float32(0.25))
    assert cfg.num_rows == 4 and type(cfg.num_rows) is int
    assert type(cfg.num_columns) is int
    assert type(cfg.horizontal_spacing) is float
    assert type(cfg.bearing) is float
    assert cfg.num_elements == 8
    json.dumps(cfg.to_dict())


def test_integer_spacing_stored_as_float():
    cfg = ArrayConfig(horizontal_spacing=1, vertical_spacing=2)
    assert type(cfg.horizontal_spacing) is float and cfg.vertical_spacing == 2.0
