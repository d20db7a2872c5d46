"""
Lens registry.

Built explicitly by the caller; there is no module-level registry.
Construction fails loudly when a practice area has no lens, has two, or
a lens does not carry exactly five pillars.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..domain import PracticeArea
from ..errors import LensRegistrationError
from .base import PracticeLens
from .clinical_negligence import ClinicalNegligenceLens
from .criminal import CriminalLens
from .family import FamilyLens
from .general_litigation import GeneralLitigationLens
from .housing import HousingLens
from .personal_injury import PersonalInjuryLens


logger = logging.getLogger(__name__)


PILLARS_PER_LENS = 5


class LensRegistry:
    """Immutable mapping of practice area to lens."""

    def __init__(self, lenses: Iterable[PracticeLens]):
        by_area: dict[PracticeArea, PracticeLens] = {}
        for lens in lenses:
            area = getattr(lens, "practice_area", None)
            if not isinstance(area, PracticeArea):
                raise LensRegistrationError(None, f"{type(lens).__name__} declares no practice area")
            if area in by_area:
                raise LensRegistrationError(area.value, "duplicate lens")
            if len(lens.pillars) != PILLARS_PER_LENS:
                raise LensRegistrationError(
                    area.value,
                    f"expected {PILLARS_PER_LENS} pillars, found {len(lens.pillars)}",
                )
            pillar_ids = [p.id for p in lens.pillars]
            if len(set(pillar_ids)) != len(pillar_ids):
                raise LensRegistrationError(area.value, "duplicate pillar id")
            by_area[area] = lens

        missing = [area.value for area in PracticeArea if area not in by_area]
        if missing:
            raise LensRegistrationError(None, f"no lens for: {', '.join(missing)}")

        self._lenses = by_area
        logger.debug("lens registry built with %d lenses", len(by_area))

    def get(self, practice_area: PracticeArea) -> PracticeLens:
        return self._lenses[practice_area]

    def lookup(self, value: str) -> Optional[PracticeLens]:
        """Lens for a practice area value such as "housing_disrepair", or None."""
        try:
            return self._lenses[PracticeArea(value)]
        except ValueError:
            return None

    def areas(self) -> list[PracticeArea]:
        return list(self._lenses)

    def __iter__(self):
        return iter(self._lenses.values())

    def __len__(self) -> int:
        return len(self._lenses)


def build_default_registry() -> LensRegistry:
    return LensRegistry([
        CriminalLens(),
        HousingLens(),
        PersonalInjuryLens(),
        ClinicalNegligenceLens(),
        FamilyLens(),
        GeneralLitigationLens(),
    ])
