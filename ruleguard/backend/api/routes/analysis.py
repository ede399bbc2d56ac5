"""
api/routes/analysis.py

POST /api/analysis            — ingest CSV or JSON rules and analyze them
GET  /api/analysis            — live (most recent) analysis result
GET  /api/analysis/summary    — live summary only
GET  /api/analysis/hygiene    — live hygiene findings
GET  /api/analysis/findings   — filtered risk findings, highest score first
GET  /api/analysis/rules      — filtered rules with their highest severity
POST /api/analysis/findings/query — findings matching AND/OR filter clauses
POST /api/analysis/rules/query    — rules matching AND/OR filter clauses
GET  /api/analysis/export     — findings as a firewall_findings.json download

The live result is a module-level singleton: it is replaced atomically on
every analysis and re-computed whenever the port policy changes.
"""

from __future__ import annotations

import logging
from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ...config import settings
from ...engine import PolicyAnalyzer
from ...engine.models import AnalysisResult, Category
from ...export import EXPORT_FILENAME, export_findings_json
from ...ingest import IngestError, load_rules_from_csv
from ...models import FirewallRule, Severity
from ...query.filters import (
    FilterClause,
    FilterField,
    FilterOperator,
    FilterState,
    filter_findings,
    filter_rules,
    rule_risks,
)
from ...storage.repository import PolicyRepository
from ..serializers import (
    AnalysisRequest,
    AnalysisResponse,
    FilterQueryRequest,
    FindingResponse,
    RuleRiskResponse,
    SummaryResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analysis", tags=["analysis"])


# ---------------------------------------------------------------------------
# Live analysis singleton
# ---------------------------------------------------------------------------

class LiveAnalysis:
    """Rules of the last upload plus the result computed from them."""

    def __init__(self) -> None:
        self.analyzer = PolicyAnalyzer()
        self.rules: tuple[FirewallRule, ...] = ()
        self.result: AnalysisResult | None = None
        self.run_id: str | None = None

    def run(self, rules: Sequence[FirewallRule], repo: PolicyRepository) -> AnalysisResult:
        result = self.analyzer.analyze(
            rules,
            repo.load_policy(),
            collect_warnings=settings.COLLECT_PARSE_WARNINGS,
        )
        run_id = repo.save_run(result)
        self.rules, self.result, self.run_id = result.rules, result, run_id
        return result

    def rerun(self, repo: PolicyRepository) -> AnalysisResult | None:
        """Re-analyze the current rules against the stored policy, if any were loaded."""
        if self.result is None:
            return None
        logger.info("Port policy changed — re-running live analysis")
        return self.run(self.rules, repo)

    def reset(self) -> None:
        self.rules, self.result, self.run_id = (), None, None


_live = LiveAnalysis()


def get_live_analysis() -> LiveAnalysis:
    return _live


def _get_repo() -> PolicyRepository:
    """FastAPI dependency — replaced in tests via app.dependency_overrides."""
    from ..main import get_repository
    return get_repository()


def _require_result() -> AnalysisResult:
    if _live.result is None:
        raise HTTPException(status_code=404, detail="No analysis has been run yet")
    return _live.result


def _to_response(result: AnalysisResult, run_id: str | None) -> AnalysisResponse:
    return AnalysisResponse.model_validate({"runId": run_id, **result.to_dict()})


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("", response_model=AnalysisResponse)
async def run_analysis(
    body: AnalysisRequest,
    repo: PolicyRepository = Depends(_get_repo),
) -> AnalysisResponse:
    """Analyze an uploaded rule set against the stored port policy."""
    try:
        if body.csv is not None:
            rules = load_rules_from_csv(body.csv, mapping=body.mapping)
        else:
            rules = [FirewallRule.from_dict(r) for r in body.rules or []]
            if not rules:
                raise IngestError("No rules supplied")
    except IngestError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    result = _live.run(rules, repo)
    return _to_response(result, _live.run_id)


@router.get("", response_model=AnalysisResponse)
async def read_analysis() -> AnalysisResponse:
    return _to_response(_require_result(), _live.run_id)


@router.get("/summary", response_model=SummaryResponse)
async def read_summary() -> SummaryResponse:
    return SummaryResponse.model_validate(_require_result().summary.to_dict())


@router.get("/hygiene", response_model=list[FindingResponse])
async def read_hygiene() -> list[FindingResponse]:
    return [FindingResponse.model_validate(f.to_dict()) for f in _require_result().hygiene]


def _matching_findings(state: FilterState, min_score: int = 0) -> list[FindingResponse]:
    result = _require_result()
    matched = filter_findings(result.findings, result.rules, state)
    return [
        FindingResponse.model_validate(f.to_dict())
        for f in matched
        if f.score >= min_score
    ]


def _matching_rules(state: FilterState) -> list[RuleRiskResponse]:
    result = _require_result()
    risks = rule_risks(result.findings)
    out = []
    for rule in filter_rules(result.rules, result.findings, state):
        risk, count = risks.get(rule.id, (Severity.INFORMATIONAL, 0))
        out.append(RuleRiskResponse.model_validate({
            **rule.to_dict(),
            "riskSeverity": risk.value,
            "findingCount": count,
        }))
    return out


@router.get("/findings", response_model=list[FindingResponse])
async def list_findings(
    severity:  Annotated[Severity | None, Query()]               = None,
    category:  Annotated[Category | None, Query()]               = None,
    q:         Annotated[str,             Query(max_length=200)] = "",
    min_score: Annotated[int,             Query(ge=0, le=100)]   = 0,
) -> list[FindingResponse]:
    """Risk findings matching the filters, highest score first."""
    clauses = []
    if severity is not None:
        clauses.append(FilterClause(FilterField.SEVERITY, FilterOperator.EQUALS, severity.value))
    if category is not None:
        clauses.append(FilterClause(FilterField.CATEGORY, FilterOperator.EQUALS, category.value))
    return _matching_findings(FilterState(clauses=tuple(clauses), quick_search=q), min_score)


@router.post("/findings/query", response_model=list[FindingResponse])
async def query_findings(body: FilterQueryRequest) -> list[FindingResponse]:
    """Risk findings matching an AND/OR clause list, highest score first."""
    return _matching_findings(body.to_state())


@router.get("/rules", response_model=list[RuleRiskResponse])
async def list_rules(
    q:        Annotated[str,             Query(max_length=200)] = "",
    severity: Annotated[Severity | None, Query()]               = None,
) -> list[RuleRiskResponse]:
    """Rules in policy order, each with the highest severity of its findings."""
    clauses = ()
    if severity is not None:
        clauses = (FilterClause(FilterField.SEVERITY, FilterOperator.EQUALS, severity.value),)
    return _matching_rules(FilterState(clauses=clauses, quick_search=q))


@router.post("/rules/query", response_model=list[RuleRiskResponse])
async def query_rules(body: FilterQueryRequest) -> list[RuleRiskResponse]:
    """Rules in policy order matching an AND/OR clause list."""
    return _matching_rules(body.to_state())


@router.get("/export")
async def export_findings() -> Response:
    """Download the live findings as JSON."""
    result = _require_result()
    return Response(
        content=export_findings_json(result.findings),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
