"""
Tests for the lens registry.
"""

import pytest

from casereason.domain import PracticeArea
from casereason.errors import LensRegistrationError
from casereason.lenses.base import Pillar
from casereason.lenses.criminal import CriminalLens
from casereason.lenses.housing import HousingLens
from casereason.lenses.registry import LensRegistry, build_default_registry


class ShortCriminalLens(CriminalLens):
    pillars = CriminalLens.pillars[:4]


class RepeatedPillarLens(CriminalLens):
    pillars = CriminalLens.pillars[:4] + (Pillar("identification", "Again"),)


def all_lenses_except(area):
    return [lens for lens in build_default_registry() if lens.practice_area is not area]


class TestDefaultRegistry:
    """Test the default registry."""

    def test_every_area_has_a_lens(self):
        registry = build_default_registry()
        assert len(registry) == len(PracticeArea)
        assert set(registry.areas()) == set(PracticeArea)

    def test_five_pillars_each(self):
        for lens in build_default_registry():
            assert len(lens.pillars) == 5

    def test_lookup(self):
        registry = build_default_registry()
        assert isinstance(registry.lookup("housing_disrepair"), HousingLens)
        assert registry.lookup("tax") is None
        assert isinstance(registry.get(PracticeArea.CRIMINAL), CriminalLens)


class TestRegistryValidation:
    """Test that malformed registries fail at construction."""

    def test_missing_area(self):
        with pytest.raises(LensRegistrationError) as exc_info:
            LensRegistry(all_lenses_except(PracticeArea.FAMILY))
        assert "family" in exc_info.value.reason

    def test_duplicate_area(self):
        lenses = list(build_default_registry()) + [CriminalLens()]
        with pytest.raises(LensRegistrationError) as exc_info:
            LensRegistry(lenses)
        assert exc_info.value.practice_area == "criminal"

    def test_wrong_pillar_count(self):
        lenses = all_lenses_except(PracticeArea.CRIMINAL) + [ShortCriminalLens()]
        with pytest.raises(LensRegistrationError, match="expected 5 pillars, found 4"):
            LensRegistry(lenses)

    def test_duplicate_pillar_id(self):
        lenses = all_lenses_except(PracticeArea.CRIMINAL) + [RepeatedPillarLens()]
        with pytest.raises(LensRegistrationError, match="duplicate pillar id"):
            LensRegistry(lenses)
