"""
validator.py - Module to perform validation operations for input data.
"""
from typing import Any, Iterable, Optional


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


def validate_string(data: Any, min_length: int = 0, max_length: Optional[int] = None) -> None:
    """Validate that the input is a string of at least ``min_length`` and, if given, at most ``max_length``."""
    if not isinstance(data, str) or len(data) < min_length:
        raise ValidationError(f"Input must be a string of at least {min_length} characters.")
    if max_length is not None and len(data) > max_length:
        raise ValidationError(f"Input must be a string of at most {max_length} characters.")


def validate_choice(data: Any, choices: Iterable[str], name: str = "value") -> None:
    """Validate that the input is one of the allowed choices."""
    choices = list(choices)
    if data not in choices:
        raise ValidationError(f"Invalid {name} '{data}'. Expected one of: {', '.join(choices)}.")
