"""Triple-participation check for submitted commentary sets."""

from typing import Iterable

from ..models import CommentaryLine, NarratorIdentity
from .registry import all_narrators


class CommentaryValidationError(ValueError):
    """Submitted commentary set cannot be rendered."""
    pass


class MissingNarratorError(CommentaryValidationError):
    """One or more of the three narrators has no commentary line."""

    def __init__(self, missing: Iterable[NarratorIdentity]):
        self.missing = frozenset(missing)
        # Stable message order regardless of set iteration
        names = [n.value for n in all_narrators() if n in self.missing]
        super().__init__(
            f"Triple participation rule violated, missing narrators: {', '.join(names)}"
        )


def validate_commentaries(lines: Iterable[CommentaryLine]) -> None:
    """
    Raise MissingNarratorError unless every narrator has at least one line.

    Duplicates, ordering and zero-length or inverted time ranges are
    accepted as-is.
    """
    present = {line.narrator for line in lines}
    missing = [n for n in all_narrators() if n not in present]
    if missing:
        raise MissingNarratorError(missing)
