"""
Unit Tests for Vignette Mapper

Run: pytest tests/effects/test_vignette.py -v
"""

import pytest

from motion_comfort.effects.vignette import (
    VignetteMapper,
    BASE_RADIUS,
    RADIUS_SHRINK,
    DEFAULT_FEATHER,
)
from motion_comfort.utils.config import MotionConfig


@pytest.fixture
def mapper():
    return VignetteMapper()


class TestVignetteMapper:

    def test_initial_uniforms(self, mapper):
        uniforms = mapper.initial_uniforms()

        assert uniforms.intensity == 0.0
        assert uniforms.radius == BASE_RADIUS
        assert uniforms.feather == DEFAULT_FEATHER

    def test_half_motion_example(self, mapper):
        """max intensity 0.7, motion 0.5 -> intensity 0.35, radius 0.65."""
        uniforms = mapper.update(0.5)

        assert uniforms.intensity == pytest.approx(0.35)
        assert uniforms.radius == pytest.approx(0.65)
        assert uniforms.feather == DEFAULT_FEATHER

    def test_no_motion_no_darkening(self, mapper):
        uniforms = mapper.update(0.0)

        assert uniforms.intensity == 0.0
        assert uniforms.radius == BASE_RADIUS

    def test_full_motion(self, mapper):
        uniforms = mapper.update(1.0)

        assert uniforms.intensity == pytest.approx(0.7)
        assert uniforms.radius == pytest.approx(BASE_RADIUS - RADIUS_SHRINK)

    @pytest.mark.parametrize("motion", [0.1, 0.2, 0.3, 0.45])
    def test_intensity_linear(self, mapper, motion):
        single = mapper.update(motion).intensity
        double = mapper.update(motion * 2).intensity

        assert double == pytest.approx(single * 2)

    def test_set_config_max_intensity(self, mapper):
        mapper.set_config(vignette_max_intensity=1.0)

        assert mapper.update(0.5).intensity == pytest.approx(0.5)

    def test_set_config_accepts_mapping(self, mapper):
        mapper.set_config({"vignette_max_intensity": 0.5})

        assert mapper.update(1.0).intensity == pytest.approx(0.5)

    def test_other_fields_do_not_change_output(self, mapper):
        before = mapper.update(0.5)
        mapper.set_config(min_fov=30.0, transition_speed=1.0)

        assert mapper.update(0.5) == before

    def test_custom_radius_constants(self):
        mapper = VignetteMapper(MotionConfig(), feather=0.2, base_radius=0.9, radius_shrink=0.5)
        uniforms = mapper.update(1.0)

        assert uniforms.radius == pytest.approx(0.4)
        assert uniforms.feather == 0.2
