"""Narrator personas: style table and participation rule."""

from .registry import (
    NARRATOR_STYLES,
    PARTICIPATION_RULE,
    NarratorStyleConfig,
    all_narrators,
    banter,
    config_for,
    force_style,
    intro_line,
    outro_line,
)
from .validation import CommentaryValidationError, MissingNarratorError, validate_commentaries

__all__ = [
    "NARRATOR_STYLES",
    "PARTICIPATION_RULE",
    "NarratorStyleConfig",
    "all_narrators",
    "banter",
    "config_for",
    "force_style",
    "intro_line",
    "outro_line",
    "CommentaryValidationError",
    "MissingNarratorError",
    "validate_commentaries",
]
