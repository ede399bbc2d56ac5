"""
policy/__init__.py

Public API for the port-policy sub-package.
"""

from .catalog import (
    CUSTOM_RATIONALE,
    PolicyError,
    PortPolicy,
    dump_policy,
    load_policy_file,
    parse_policy,
)
from .defaults import DEFAULT_INSECURE_PORTS

__all__ = [
    "CUSTOM_RATIONALE",
    "DEFAULT_INSECURE_PORTS",
    "PolicyError",
    "PortPolicy",
    "dump_policy",
    "load_policy_file",
    "parse_policy",
]
