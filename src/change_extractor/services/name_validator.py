"""
Qualified-name validation for structured dataset targets.

A path prefix is treated as a dataset name only when it is a syntactically
legal, upper-case qualified name that the catalog either knows or could
create. Everything else belongs to the hierarchical file store.
"""

import logging
import re
from typing import Optional

from ..errors import AmbiguousName
from .catalog import CatalogProbe, OfflineCatalog
from .models import CatalogStatus, NameStatus

logger = logging.getLogger(__name__)

MAX_SEGMENT_LENGTH = 8
NATIONAL_CHARACTERS = "$#@"

# Everything a segment may legally contain once alphanumerics are removed.
_SEGMENT_RESIDUE = re.compile(r"[A-Za-z0-9\-$#@]")

_ACCEPTED_CATALOG_ANSWERS = (CatalogStatus.EXISTS, CatalogStatus.NOT_FOUND)


def strip_enclosing_quotes(name: str) -> str:
    """Remove one layer of matching single or double quotes."""
    if len(name) >= 2 and name[0] == name[-1] and name[0] in ("'", '"'):
        return name[1:-1]
    return name


def is_valid_segment(segment: str) -> bool:
    """Check a single qualifier against the length and character rules."""
    if len(segment) > MAX_SEGMENT_LENGTH:
        return False
    if not segment:
        return False
    first = segment[0]
    if not (first.isalpha() or first in NATIONAL_CHARACTERS):
        return False
    return _SEGMENT_RESIDUE.sub("", segment) == ""


def is_plausible_name(path: str) -> bool:
    """Apply the syntactic rules only; the catalog is not consulted."""
    if path.startswith("."):
        return False
    if not path.strip():
        return False
    if " " in path:
        return False

    segments = strip_enclosing_quotes(path).split(".")
    return all(is_valid_segment(segment) for segment in segments)


class NameValidator:
    """Decides whether a path prefix addresses a structured dataset."""

    def __init__(self, catalog: Optional[CatalogProbe] = None):
        """Initialize the validator.

        Args:
            catalog: Existence probe for candidate names. Defaults to an
                offline catalog that knows no names, so every legal name
                validates as creatable.
        """
        self.catalog = catalog if catalog is not None else OfflineCatalog()

    def validate(self, path: str) -> NameStatus:
        if not is_plausible_name(path):
            return NameStatus.INVALID

        # Lower or mixed case marks a hierarchical file path.
        if path.upper() != path:
            return NameStatus.INVALID

        try:
            answer = self.catalog.probe(path)
        except AmbiguousName as e:
            logger.warning(f"Treating {path!r} as a file path: {e}")
            return NameStatus.INVALID

        if answer in _ACCEPTED_CATALOG_ANSWERS:
            return NameStatus.VALID

        logger.debug(f"Catalog rejected {path!r}: {answer.value}")
        return NameStatus.INVALID

    def is_valid(self, path: str) -> bool:
        return self.validate(path) is NameStatus.VALID
