# idlmend/__init__.py
"""idlmend: lossless Web IDL parsing with dialect extensions, validation and autofix."""

from .dialects import DIALECTS, Dialect, get_dialect, parse, write
from .directives import has_mask_collision, mask, unmask
from .lex import Token, Tokeniser, WebIDLParseError, WrongVariantError
from .rewrite import RewriteReport, rewrite, rewrite_file
from .validate import Diagnostic, apply_autofixes, validate

__all__ = [
    "DIALECTS", "Dialect", "get_dialect", "parse", "write",
    "has_mask_collision", "mask", "unmask",
    "Token", "Tokeniser", "WebIDLParseError", "WrongVariantError",
    "RewriteReport", "rewrite", "rewrite_file",
    "Diagnostic", "apply_autofixes", "validate",
]
