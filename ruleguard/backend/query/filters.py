"""
query/filters.py

Clause-based filtering over findings and rules.

A FilterState holds a quick-search string plus an ordered list of clauses.
Clauses fold left to right: the first clause seeds the result and every
later clause is combined with its own logical operator, so
``A AND B OR C`` evaluates as ``(A and B) or C``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Sequence

from ..engine.models import Finding
from ..models import FirewallRule, Severity


class FilterField(str, Enum):
    ID               = "id"
    NAME             = "name"
    SOURCE           = "source"
    DESTINATION      = "destination"
    DESTINATION_PORT = "destinationPort"
    PROTOCOL         = "protocol"
    ACTION           = "action"
    DIRECTION        = "direction"
    DESCRIPTION      = "description"
    SEVERITY         = "severity"
    CATEGORY         = "category"


class FilterOperator(str, Enum):
    CONTAINS     = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"
    EQUALS       = "EQUALS"
    NOT_EQUALS   = "NOT_EQUALS"
    STARTS_WITH  = "STARTS_WITH"
    ENDS_WITH    = "ENDS_WITH"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN    = "LESS_THAN"


class LogicalOperator(str, Enum):
    AND = "AND"
    OR  = "OR"


@dataclass(frozen=True, slots=True)
class FilterClause:
    field: FilterField
    operator: FilterOperator
    value: str
    logical_operator: LogicalOperator = LogicalOperator.AND

    @classmethod
    def from_dict(cls, d: Mapping) -> "FilterClause":
        return cls(
            field=FilterField(d["field"]),
            operator=FilterOperator(d.get("operator", FilterOperator.CONTAINS)),
            value=str(d.get("value", "")),
            logical_operator=LogicalOperator(
                d.get("logicalOperator", d.get("logical_operator", LogicalOperator.AND))
            ),
        )


@dataclass(frozen=True, slots=True)
class FilterState:
    clauses: tuple[FilterClause, ...] = ()
    quick_search: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.clauses and not self.quick_search


# Rule attribute behind each rule-backed field.
_RULE_ATTRS: Mapping[FilterField, str] = {
    FilterField.ID:               "id",
    FilterField.NAME:             "name",
    FilterField.SOURCE:           "source",
    FilterField.DESTINATION:      "destination",
    FilterField.DESTINATION_PORT: "destination_port",
    FilterField.PROTOCOL:         "protocol",
    FilterField.ACTION:           "action",
    FilterField.DIRECTION:        "direction",
    FilterField.DESCRIPTION:      "description",
}

_PORT_SEGMENT = re.compile(r"[,-]")
_NON_DIGIT = re.compile(r"\D")
_SIGNED_INT = re.compile(r"\s*([+-]?\d+)")


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def first_port(text: str) -> int | None:
    """First numeric port of a port field ('tcp/8080,9000' -> 8080)."""
    digits = _NON_DIGIT.sub("", _PORT_SEGMENT.split(text, 1)[0])
    return int(digits) if digits else None


def _clause_number(value: str) -> int | None:
    m = _SIGNED_INT.match(value)
    return int(m.group(1)) if m else None


def match_clause(target: str, clause: FilterClause) -> bool:
    """Apply one clause to the resolved text of its field."""
    if clause.field is FilterField.DESTINATION_PORT and clause.operator in (
        FilterOperator.GREATER_THAN,
        FilterOperator.LESS_THAN,
    ):
        port = first_port(target)
        bound = _clause_number(clause.value)
        if port is not None and bound is not None:
            if clause.operator is FilterOperator.GREATER_THAN:
                return port > bound
            return port < bound

    val = clause.value.lower()
    t_val = target.lower()
    op = clause.operator
    if op is FilterOperator.CONTAINS:
        return val in t_val
    if op is FilterOperator.NOT_CONTAINS:
        return val not in t_val
    if op is FilterOperator.EQUALS:
        return t_val == val
    if op is FilterOperator.NOT_EQUALS:
        return t_val != val
    if op is FilterOperator.STARTS_WITH:
        return t_val.startswith(val)
    if op is FilterOperator.ENDS_WITH:
        return t_val.endswith(val)
    # Ordering on non-numeric fields is a plain string comparison.
    if op is FilterOperator.GREATER_THAN:
        return target > clause.value
    if op is FilterOperator.LESS_THAN:
        return target < clause.value
    return True


def _fold(clauses: Sequence[FilterClause], evaluate) -> bool:
    if not clauses:
        return True
    result = evaluate(clauses[0])
    for clause in clauses[1:]:
        outcome = evaluate(clause)
        if clause.logical_operator is LogicalOperator.AND:
            result = result and outcome
        else:
            result = result or outcome
    return result


def _quick_match(needle: str, haystack: Iterable) -> bool:
    if not needle:
        return True
    needle = needle.lower()
    return any(needle in _text(v).lower() for v in haystack)


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------

def _finding_value(
    finding: Finding,
    rule: FirewallRule | None,
    field: FilterField,
) -> str | None:
    """Text a clause is tested against, or None when the field does not apply."""
    if field is FilterField.ID:
        return finding.rule_id
    if field is FilterField.NAME:
        return finding.rule_name
    if field is FilterField.SEVERITY:
        return finding.severity.value
    if field is FilterField.CATEGORY:
        return finding.category.value
    if field is FilterField.DESCRIPTION:
        return finding.explanation
    if field is FilterField.DIRECTION:
        return None
    return _text(getattr(rule, _RULE_ATTRS[field])) if rule is not None else ""


def filter_findings(
    findings: Iterable[Finding],
    rules: Iterable[FirewallRule],
    state: FilterState,
) -> list[Finding]:
    """Findings matching ``state``, highest score first (ties keep input order)."""
    by_id: dict[str, FirewallRule] = {}
    for rule in rules:
        by_id.setdefault(rule.id, rule)

    def keep(f: Finding) -> bool:
        if not _quick_match(
            state.quick_search,
            (f.explanation, f.rule_name, f.rule_id, f.category, f.severity),
        ):
            return False
        rule = by_id.get(f.rule_id)

        def evaluate(clause: FilterClause) -> bool:
            target = _finding_value(f, rule, clause.field)
            return True if target is None else match_clause(target, clause)

        return _fold(state.clauses, evaluate)

    return sorted((f for f in findings if keep(f)), key=lambda f: f.score, reverse=True)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def rule_risks(findings: Iterable[Finding]) -> dict[str, tuple[Severity, int]]:
    """rule id -> (highest finding severity, finding count)."""
    grouped: dict[str, list[Finding]] = {}
    for f in findings:
        grouped.setdefault(f.rule_id, []).append(f)
    return {
        rule_id: (Severity.highest(f.severity for f in items), len(items))
        for rule_id, items in grouped.items()
    }


def filter_rules(
    rules: Iterable[FirewallRule],
    findings: Iterable[Finding],
    state: FilterState,
) -> list[FirewallRule]:
    """Rules matching ``state``, in their original order."""
    findings = list(findings)
    risks = rule_risks(findings)
    categories: dict[str, list[str]] = {}
    for f in findings:
        categories.setdefault(f.rule_id, []).append(f.category.value)

    def keep(rule: FirewallRule) -> bool:
        if not _quick_match(
            state.quick_search,
            (rule.name, rule.id, rule.source, rule.destination,
             rule.destination_port, rule.description),
        ):
            return False

        def evaluate(clause: FilterClause) -> bool:
            if clause.field is FilterField.SEVERITY:
                severity = risks.get(rule.id, (Severity.INFORMATIONAL, 0))[0]
                target = severity.value
            elif clause.field is FilterField.CATEGORY:
                target = " ".join(categories.get(rule.id, ()))
            else:
                target = _text(getattr(rule, _RULE_ATTRS[clause.field]))
            return match_clause(target, clause)

        return _fold(state.clauses, evaluate)

    return [r for r in rules if keep(r)]
