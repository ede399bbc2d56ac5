"""
api/routes/policy.py

GET    /api/policy               — full port catalog, in catalog order
PUT    /api/policy               — replace the catalog
POST   /api/policy/ports         — add a custom port (409 if already listed)
PATCH  /api/policy/ports/{port}  — enable / disable one port
DELETE /api/policy/ports/{port}  — remove one port

Every successful change is persisted and then re-runs the live analysis,
so findings always reflect the stored policy.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...models import InsecurePortSetting
from ...policy import CUSTOM_RATIONALE, PolicyError, PortPolicy
from ...storage.repository import PolicyRepository
from ..serializers import (
    PortCreateRequest,
    PortPatchRequest,
    PortSettingIn,
    PortSettingResponse,
)
from .analysis import get_live_analysis

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/policy", tags=["policy"])


def _get_repo() -> PolicyRepository:
    from ..main import get_repository
    return get_repository()


def _respond(entries) -> list[PortSettingResponse]:
    return [PortSettingResponse.model_validate(e.to_dict()) for e in entries]


def _commit(policy: PortPolicy, repo: PolicyRepository) -> list[PortSettingResponse]:
    repo.save_policy(policy.entries)
    get_live_analysis().rerun(repo)
    return _respond(policy.entries)


@router.get("", response_model=list[PortSettingResponse])
async def read_policy(
    repo: PolicyRepository = Depends(_get_repo),
) -> list[PortSettingResponse]:
    return _respond(repo.load_policy())


@router.put("", response_model=list[PortSettingResponse])
async def replace_policy(
    entries: list[PortSettingIn],
    repo: PolicyRepository = Depends(_get_repo),
) -> list[PortSettingResponse]:
    try:
        policy = PortPolicy(
            InsecurePortSetting.from_dict(e.model_dump()) for e in entries
        )
    except (PolicyError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.info("Port policy replaced (%d entries)", len(policy))
    return _commit(policy, repo)


@router.post(
    "/ports",
    response_model=list[PortSettingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_port(
    body: PortCreateRequest,
    repo: PolicyRepository = Depends(_get_repo),
) -> list[PortSettingResponse]:
    policy = PortPolicy(repo.load_policy())
    if body.port in policy:
        raise HTTPException(status_code=409, detail=f"Port {body.port} is already in the check list")
    try:
        policy.add_custom(
            body.port,
            body.label,
            body.criticality,
            body.rationale or CUSTOM_RATIONALE,
        )
    except PolicyError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _commit(policy, repo)


@router.patch("/ports/{port}", response_model=list[PortSettingResponse])
async def patch_port(
    port: int,
    body: PortPatchRequest,
    repo: PolicyRepository = Depends(_get_repo),
) -> list[PortSettingResponse]:
    policy = PortPolicy(repo.load_policy())
    try:
        policy.set_enabled(port, body.enabled)
    except PolicyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _commit(policy, repo)


@router.delete("/ports/{port}", response_model=list[PortSettingResponse])
async def delete_port(
    port: int,
    repo: PolicyRepository = Depends(_get_repo),
) -> list[PortSettingResponse]:
    policy = PortPolicy(repo.load_policy())
    try:
        policy.remove(port)
    except PolicyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _commit(policy, repo)
