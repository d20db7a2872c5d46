"""
Case analysis routes.

Every handler validates its body with CaseRequest, runs the synchronous
pipeline and returns the {ok, data, banner?, diagnostics?} envelope.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from ..cli.pipeline import (
    CaseAnalysis,
    analyse_case,
    build_envelope,
    case_input_from_request,
    pillars_data,
    strategies_data,
)
from ..config import EngineSettings
from ..lenses.registry import LensRegistry
from ..schemas import CaseRequest


router = APIRouter(tags=["cases"])


def _registry(request: Request) -> LensRegistry:
    return request.app.state.registry


def _settings(request: Request) -> EngineSettings:
    return request.app.state.settings


def _analyse(request: Request, body: CaseRequest) -> CaseAnalysis:
    case_input = case_input_from_request(body)
    return analyse_case(case_input, _registry(request), _settings(request))


@router.get("/lenses")
def list_lenses(request: Request) -> dict[str, Any]:
    """Registered lenses with their pillar ids and labels."""
    lenses = [
        {
            "practice_area": lens.practice_area.value,
            "pillars": [{"id": p.id, "label": p.label} for p in lens.pillars],
        }
        for lens in _registry(request)
    ]
    return {"ok": True, "data": {"lenses": lenses}}


@router.post("/cases/analyse")
def analyse(request: Request, body: CaseRequest) -> dict[str, Any]:
    analysis = _analyse(request, body)
    return build_envelope(analysis)


@router.post("/cases/pillars")
def pillars(request: Request, body: CaseRequest) -> dict[str, Any]:
    analysis = _analyse(request, body)
    return build_envelope(analysis, pillars_data(analysis))


@router.post("/cases/strategies")
def strategies(request: Request, body: CaseRequest) -> dict[str, Any]:
    analysis = _analyse(request, body)
    return build_envelope(analysis, strategies_data(analysis))
