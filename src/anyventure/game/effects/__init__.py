"""Data-code parsing and the delta algebra."""

from .apply import aggregate_conditionals, apply_to_character
from .delta import Delta, empty, merge, merge_all
from .diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from .parser import DataCodeParser, ValidationResult, parse, validate_data_code

__all__ = [
    "DataCodeParser",
    "Delta",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "ValidationResult",
    "aggregate_conditionals",
    "apply_to_character",
    "empty",
    "merge",
    "merge_all",
    "parse",
    "validate_data_code",
]
