"""
api/serializers.py

Request / response models. Every model serializes with camelCase aliases
(ruleId, destinationPort, averageRiskScore) and also accepts snake_case
field names on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..query.filters import (
    FilterClause,
    FilterField,
    FilterOperator,
    FilterState,
    LogicalOperator,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class RuleResponse(_CamelModel):
    id: str
    name: str
    source: str
    destination: str
    source_port: str
    destination_port: str
    protocol: str
    action: str
    direction: str
    enabled: bool
    description: str


class FindingResponse(_CamelModel):
    rule_id: str
    rule_name: str
    category: str
    score: int
    severity: str
    explanation: str
    recommendation: str


class SummaryResponse(_CamelModel):
    total_rules: int
    enabled_rules: int
    critical_findings: int
    high_findings: int
    medium_findings: int
    low_findings: int
    average_risk_score: int


class ParseWarningResponse(_CamelModel):
    rule_id: str
    field: str
    value: str
    message: str


class AnalysisResponse(_CamelModel):
    run_id: str | None = None
    rules: list[RuleResponse]
    findings: list[FindingResponse]
    hygiene: list[FindingResponse]
    summary: SummaryResponse
    warnings: list[ParseWarningResponse] = []


class RuleRiskResponse(RuleResponse):
    risk_severity: str
    finding_count: int


class AnalysisRequest(_CamelModel):
    """Either raw CSV text (with optional column overrides) or JSON rules."""

    csv: str | None = None
    mapping: dict[str, str] | None = None
    rules: list[dict] | None = None

    @model_validator(mode="after")
    def one_source(self) -> "AnalysisRequest":
        if (self.csv is None) == (self.rules is None):
            raise ValueError("Provide exactly one of 'csv' or 'rules'")
        return self


class FilterClauseIn(_CamelModel):
    field: FilterField
    operator: FilterOperator = FilterOperator.CONTAINS
    value: str = ""
    logical_operator: LogicalOperator = LogicalOperator.AND


class FilterQueryRequest(_CamelModel):
    """Quick-search text plus clauses folded left to right."""

    quick_search: str = Field(default="", max_length=200)
    clauses: list[FilterClauseIn] = Field(default_factory=list, max_length=50)

    def to_state(self) -> FilterState:
        return FilterState(
            clauses=tuple(
                FilterClause.from_dict(c.model_dump(by_alias=True)) for c in self.clauses
            ),
            quick_search=self.quick_search,
        )


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

class PortSettingResponse(_CamelModel):
    port: int
    label: str
    criticality: str
    rationale: str
    enabled: bool


class PortSettingIn(_CamelModel):
    port: int = Field(ge=0, le=65535)
    label: str = Field(min_length=1)
    criticality: str = "MEDIUM"
    rationale: str = ""
    enabled: bool = True


class PortCreateRequest(_CamelModel):
    port: int
    label: str
    criticality: str = "MEDIUM"
    rationale: str | None = None


class PortPatchRequest(_CamelModel):
    enabled: bool


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

class RunSummaryResponse(_CamelModel):
    run_id: str
    timestamp: float
    total_rules: int
    enabled_rules: int
    critical_findings: int
    high_findings: int
    medium_findings: int
    low_findings: int
    average_risk_score: int
    hygiene_count: int


class RunDetailResponse(RunSummaryResponse):
    findings: list[FindingResponse]
    hygiene: list[FindingResponse]
