import math

import numpy as np
import pytest

from phasedarray.config import ArrayConfig
from phasedarray.exceptions import ConfigurationError
from phasedarray.geometry import ArrayGeometry, CustomArray, UniformPlanarArray


def test_upa_count_and_unrotated_locations():
    cfg = ArrayConfig(num_rows=3, num_columns=4, horizontal_spacing=0.5, vertical_spacing=0.7)
    upa = UniformPlanarArray(cfg)
    assert upa.num_elements == 12
    for i in range(upa.num_elements):
        row, col = i // 4, i % 4
        assert np.allclose(upa.element_location(i), [0.0, 0.5 * col, 0.7 * row])
    assert np.allclose(upa.element_location(0), 0.0)


def test_upa_bearing_rotates_about_z():
    upa = UniformPlanarArray(ArrayConfig.from_degrees(num_rows=1, num_columns=2, bearing_deg=90.0))
    assert np.allclose(upa.element_location(1), [-0.5, 0.0, 0.0], atol=1e-12)


def test_upa_downtilt_tilts_columns():
    upa = UniformPlanarArray(ArrayConfig.from_degrees(num_rows=2, num_columns=1, downtilt_deg=90.0))
    assert np.allclose(upa.element_location(1), [0.5, 0.0, 0.0], atol=1e-12)


def test_upa_batch_matches_per_element_and_preserves_distances():
    cfg = ArrayConfig.from_degrees(
        num_rows=4, num_columns=5, horizontal_spacing=0.5, vertical_spacing=0.6,
        bearing_deg=-37.0, downtilt_deg=112.0,
    )
    upa = UniformPlanarArray(cfg)
    xyz = upa.element_locations()
    assert xyz.shape == (20, 3)
    for i in range(20):
        assert np.allclose(xyz[i], upa.element_location(i))
        assert np.isclose(np.linalg.norm(xyz[i]), np.linalg.norm(upa.local_location(i)))


def test_upa_index_out_of_range():
    upa = UniformPlanarArray(ArrayConfig(num_rows=2, num_columns=2))
    with pytest.raises(IndexError):
        upa.element_location(4)
    with pytest.raises(IndexError):
        upa.element_location(-1)


def test_custom_array_matches_upa():
    upa = UniformPlanarArray(ArrayConfig(num_rows=2, num_columns=3))
    custom = CustomArray(upa.element_locations())
    assert isinstance(custom, ArrayGeometry)
    assert isinstance(upa, ArrayGeometry)
    assert custom.num_elements == 6
    assert np.allclose(custom.element_locations(), upa.element_locations())
    # returned locations are copies
    loc = custom.element_location(2)
    loc[:] = 99.0
    assert not np.allclose(custom.element_location(2), 99.0)


def test_custom_array_validation():
    with pytest.raises(ConfigurationError):
        CustomArray(np.zeros((2, 3)))
    with pytest.raises(ConfigurationError):
        CustomArray(np.zeros((3, 2)))
    with pytest.raises(ConfigurationError):
        CustomArray(np.array([[0.0, 0.0, math.nan]]))
    with pytest.raises(ConfigurationError):
        CustomArray([[0.0, 0.0, 0.0]])
