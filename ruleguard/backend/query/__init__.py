"""query/__init__.py"""
from .filters import (
    FilterClause,
    FilterField,
    FilterOperator,
    FilterState,
    LogicalOperator,
    filter_findings,
    filter_rules,
    rule_risks,
)

__all__ = [
    "FilterClause",
    "FilterField",
    "FilterOperator",
    "FilterState",
    "LogicalOperator",
    "filter_findings",
    "filter_rules",
    "rule_risks",
]
