"""
api/routes/history.py

GET /api/history           — recent analysis runs, newest first
GET /api/history/{run_id}  — one run including its findings
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ...storage.repository import PolicyRepository
from ..serializers import RunDetailResponse, RunSummaryResponse

router = APIRouter(prefix="/history", tags=["history"])


def _get_repo() -> PolicyRepository:
    from ..main import get_repository
    return get_repository()


@router.get("", response_model=list[RunSummaryResponse])
async def list_runs(
    limit: Annotated[int, Query(ge=1, le=500)] = 20,
    repo:  PolicyRepository = Depends(_get_repo),
) -> list[RunSummaryResponse]:
    return [RunSummaryResponse.model_validate(r) for r in repo.get_recent_runs(limit=limit)]


@router.get("/{run_id}", response_model=RunDetailResponse)
async def get_run(
    run_id: str,
    repo:   PolicyRepository = Depends(_get_repo),
) -> RunDetailResponse:
    row = repo.get_run(run_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Run {run_id!r} not found")
    return RunDetailResponse.model_validate(row)
