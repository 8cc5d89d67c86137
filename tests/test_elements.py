import math

import numpy as np
import pytest

from phasedarray.angles import Direction
from phasedarray.elements import (
    CosineAntennaModel,
    IsotropicAntennaModel,
    ParabolicAntennaModel,
    ThreeGppAntennaModel,
    element_to_dict,
    make_element,
)
from phasedarray.exceptions import ConfigurationError

BORESIGHT = Direction(math.pi / 2, 0.0)


def test_isotropic_zero_everywhere():
    el = IsotropicAntennaModel()
    theta = np.linspace(0.0, math.pi, 7)
    phi = np.linspace(-math.pi, math.pi, 7)
    g = el.gain_db((theta, phi))
    assert g.shape == (7,)
    assert np.all(g == 0.0)
    assert el.gain_db(BORESIGHT) == 0.0


def test_cosine_half_beamwidth_is_minus_3db():
    el = CosineAntennaModel(horizontal_beamwidth=60.0, max_gain=5.0)
    assert np.isclose(el.gain_db(BORESIGHT), 5.0)
    assert np.isclose(el.gain_db((math.pi / 2, math.radians(30.0))), 2.0)
    assert np.isclose(el.gain_db((math.pi / 2, math.radians(-30.0))), 2.0)
    # infinite vertical beamwidth: no dependence on theta
    assert el.vertical_exponent == 0.0
    assert np.isclose(el.gain_db((0.3, 0.0)), 5.0)


def test_cosine_vertical_beamwidth():
    el = CosineAntennaModel(horizontal_beamwidth=math.inf, vertical_beamwidth=40.0)
    assert el.horizontal_exponent == 0.0
    assert np.isclose(el.gain_db((math.radians(110.0), 2.0)), -3.0)


def test_cosine_orientation():
    el = CosineAntennaModel(horizontal_beamwidth=60.0, orientation=90.0)
    assert np.isclose(el.gain_db((math.pi / 2, math.pi / 2)), 0.0)
    assert el.gain_db((math.pi / 2, -math.pi / 2)) < -20.0


@pytest.mark.parametrize("bw", [0.0, -10.0, float("nan"), 360.0, 400.0, 720.0, 1200.0, -math.inf, "60"])
def test_cosine_rejects_out_of_range_beamwidth(bw):
    with pytest.raises(ConfigurationError):
        CosineAntennaModel(horizontal_beamwidth=bw)
    with pytest.raises(ConfigurationError):
        CosineAntennaModel(vertical_beamwidth=bw)


def test_three_gpp_values():
    el = ThreeGppAntennaModel()
    assert np.isclose(el.gain_db(BORESIGHT), 8.0)
    # 3 dB down at half the horizontal beamwidth
    assert np.isclose(el.gain_db((math.pi / 2, math.radians(32.5))), 5.0)
    # vertical cut only
    expected = 8.0 - 12.0 * (90.0 / 65.0) ** 2
    assert np.isclose(el.gain_db((0.0, 0.0)), expected)
    # both cuts saturate: joint clamp at A_max
    assert np.isclose(el.gain_db((0.0, math.pi)), 8.0 - 30.0)


def test_three_gpp_side_lobe_limit():
    el = ThreeGppAntennaModel(vertical_side_lobe_attenuation=10.0)
    assert np.isclose(el.gain_db((0.0, 0.0)), -2.0)
    assert np.isclose(el.gain_db((math.pi, 0.0)), -2.0)


def test_parabolic_orientation_subtracted_before_normalizing():
    el = ParabolicAntennaModel(orientation=180.0)
    g = el.gain_db((math.pi / 2, math.radians(-170.0)))
    # -170 - 180 = -350 deg -> wraps to +10 deg
    assert np.isclose(g, 8.0 - 12.0 * (10.0 / 60.0) ** 2)


def test_parabolic_vectorized_matches_scalar():
    el = ParabolicAntennaModel(horizontal_beamwidth=70.0, vertical_beamwidth=10.0, orientation=-30.0)
    rng = np.random.default_rng(3)
    theta = rng.uniform(0.0, math.pi, size=20)
    phi = rng.uniform(-math.pi, math.pi, size=20)
    g = el.gain_db((theta, phi))
    for i in range(20):
        assert np.isclose(g[i], el.gain_db((float(theta[i]), float(phi[i]))))
    assert np.all(g <= 8.0 + 1e-12) and np.all(g >= 8.0 - 30.0 - 1e-12)


def test_table_models_reject_bad_parameters():
    with pytest.raises(ConfigurationError):
        ThreeGppAntennaModel(vertical_beamwidth=0.0)
    with pytest.raises(ConfigurationError):
        ParabolicAntennaModel(max_attenuation=-1.0)
    with pytest.raises(ConfigurationError):
        ParabolicAntennaModel(orientation=400.0)
    with pytest.raises(ConfigurationError):
        ParabolicAntennaModel(horizontal_beamwidth=181.0)
    with pytest.raises(ConfigurationError):
        ThreeGppAntennaModel(horizontal_beamwidth=math.inf)
    with pytest.raises(ConfigurationError):
        ThreeGppAntennaModel(max_directional_gain=True)


def test_make_element_factory():
    assert isinstance(make_element("3GPP"), ThreeGppAntennaModel)
    el = make_element("cosine", horizontal_beamwidth=90.0)
    assert el == CosineAntennaModel(horizontal_beamwidth=90.0)
    with pytest.raises(ConfigurationError):
        make_element("dipole")
    with pytest.raises(ConfigurationError):
        make_element("isotropic", max_gain=3.0)


def test_element_to_dict_inverts_factory():
    el = ParabolicAntennaModel(horizontal_beamwidth=45.0, orientation=10.0)
    entry = element_to_dict(el)
    assert entry["type"] == "parabolic"
    params = {k: v for k, v in entry.items() if k != "type"}
    assert make_element(entry["type"], **params) == el


def test_beamwidth_range_edges_accepted():
    assert CosineAntennaModel(horizontal_beamwidth=359.0).horizontal_exponent > 0.0
    assert ParabolicAntennaModel(horizontal_beamwidth=180.0).horizontal_beamwidth == 180.0
    assert ThreeGppAntennaModel(vertical_beamwidth=np.float64(90.0)).vertical_beamwidth == 90.0


def test_make_element_rejects_out_of_range_beamwidth():
    with pytest.raises(ConfigurationError):
        make_element("cosine", horizontal_beamwidth=400.0)
