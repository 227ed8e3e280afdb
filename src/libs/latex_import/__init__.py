"""
LaTeX Import Module

Best-effort conversion of LaTeX CV sources into structured CV content.
"""

from .parser import parse_latex_to_content, validate_latex_syntax

__all__ = ["parse_latex_to_content", "validate_latex_syntax"]
