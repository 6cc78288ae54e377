"""
Integration layer: operation parsing/dispatch for scripted callers.
"""

from .operations import OP_NAMES, Operation, OpResult, apply_operation, apply_operations, parse_operation

__all__ = [
    "OP_NAMES",
    "Operation",
    "OpResult",
    "apply_operation",
    "apply_operations",
    "parse_operation",
]
