"""engine/__init__.py"""
from .engine import PolicyAnalyzer, analyze_rules
from .models import AnalysisResult, AnalysisSummary, Category, Finding, Severity

__all__ = [
    "PolicyAnalyzer",
    "analyze_rules",
    "AnalysisResult",
    "AnalysisSummary",
    "Category",
    "Finding",
    "Severity",
]
