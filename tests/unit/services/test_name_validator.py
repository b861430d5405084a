"""Tests for NameValidator qualified-name rules."""

import pytest

from change_extractor.errors import AmbiguousName
from change_extractor.services.catalog import OfflineCatalog
from change_extractor.services.models import CatalogStatus, NameStatus
from change_extractor.services.name_validator import (
    NameValidator,
    is_plausible_name,
    is_valid_segment,
    strip_enclosing_quotes,
)


class RecordingCatalog:
    """Catalog stub returning a fixed answer and recording probed names."""

    def __init__(self, answer=CatalogStatus.NOT_FOUND, error=None):
        self.answer = answer
        self.error = error
        self.probed = []

    def probe(self, name):
        self.probed.append(name)
        if self.error is not None:
            raise self.error
        return self.answer


class TestSegmentRules:
    """Test per-qualifier checks."""

    @pytest.mark.parametrize("segment", ["PROJ", "A", "ABCDEFGH", "$SYS", "#TEMP", "@X1", "A-B", "X$#@9"])
    def test_legal_segments(self, segment):
        assert is_valid_segment(segment)

    @pytest.mark.parametrize("segment", ["ABCDEFGHI", "1ABC", "-ABC", "", "AB_C", "AB+C", "A/B"])
    def test_illegal_segments(self, segment):
        assert not is_valid_segment(segment)

    def test_strip_enclosing_quotes(self):
        assert strip_enclosing_quotes("'PROJ.SRC'") == "PROJ.SRC"
        assert strip_enclosing_quotes('"PROJ.SRC"') == "PROJ.SRC"
        assert strip_enclosing_quotes("'PROJ.SRC\"") == "'PROJ.SRC\""
        assert strip_enclosing_quotes("''") == ""
        assert strip_enclosing_quotes("PROJ") == "PROJ"


class TestNameValidator:
    """Test full validation including the catalog probe."""

    def test_upper_case_qualified_name_is_valid(self):
        catalog = RecordingCatalog(CatalogStatus.NOT_FOUND)
        validator = NameValidator(catalog)

        assert validator.validate("PROJ.SRC.COBOL") is NameStatus.VALID
        assert catalog.probed == ["PROJ.SRC.COBOL"]

    def test_existing_name_is_valid(self):
        validator = NameValidator(OfflineCatalog(["PROJ.LOAD"]))
        assert validator.validate("PROJ.LOAD") is NameStatus.VALID

    def test_catalog_syntax_rejection_is_invalid(self):
        validator = NameValidator(RecordingCatalog(CatalogStatus.INVALID_SYNTAX))
        assert validator.validate("PROJ.SRC") is NameStatus.INVALID

    def test_probe_failure_is_invalid_not_raised(self):
        catalog = RecordingCatalog(error=AmbiguousName("PROJ.SRC", "catalog offline"))
        validator = NameValidator(catalog)

        assert validator.validate("PROJ.SRC") is NameStatus.INVALID

    @pytest.mark.parametrize("path", [".git", ".PROJ.SRC", ".gitattributes"])
    def test_leading_dot_is_always_invalid(self, path):
        catalog = RecordingCatalog(CatalogStatus.EXISTS)
        assert NameValidator(catalog).validate(path) is NameStatus.INVALID
        assert catalog.probed == []

    @pytest.mark.parametrize("path", ["PROJ SRC", "PROJ.SRC ", " PROJ"])
    def test_embedded_space_is_always_invalid(self, path):
        catalog = RecordingCatalog(CatalogStatus.EXISTS)
        assert NameValidator(catalog).validate(path) is NameStatus.INVALID
        assert catalog.probed == []

    @pytest.mark.parametrize("path", ["", "   ", "\t"])
    def test_blank_is_invalid(self, path):
        assert NameValidator().validate(path) is NameStatus.INVALID

    def test_long_segment_is_invalid_regardless_of_catalog(self):
        catalog = RecordingCatalog(CatalogStatus.EXISTS)
        validator = NameValidator(catalog)

        assert validator.validate("PROJ.TOOLONGXX.SRC") is NameStatus.INVALID
        assert catalog.probed == []

    def test_lower_case_is_treated_as_file_path(self):
        catalog = RecordingCatalog(CatalogStatus.EXISTS)
        validator = NameValidator(catalog)

        assert validator.validate("src") is NameStatus.INVALID
        assert validator.validate("Proj.Src") is NameStatus.INVALID
        assert catalog.probed == []

    def test_quoted_name_is_checked_without_quotes(self):
        assert is_plausible_name("'PROJ.SRC'")
        assert NameValidator().validate("'PROJ.SRC'") is NameStatus.VALID

    def test_empty_qualifier_is_invalid(self):
        validator = NameValidator()
        assert validator.validate("PROJ..SRC") is NameStatus.INVALID
        assert validator.validate("PROJ.") is NameStatus.INVALID

    def test_national_characters_allowed_first(self):
        assert NameValidator().validate("$SYS.#WORK.@LIB") is NameStatus.VALID

    def test_default_catalog_accepts_every_legal_name(self):
        assert NameValidator().is_valid("ANY.LEGAL.NAME")
