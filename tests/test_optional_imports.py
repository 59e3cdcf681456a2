"""Tests for optional dependency helpers."""

from regionsmith.utils.optional_imports import (
    missing_dependency,
    optional_import,
    optional_import_single,
)


class TestOptionalImport:
    """Tests for optional_import."""

    def test_available(self):
        """Test importing names from an installed module."""
        available, imports = optional_import("regionsmith.primitives.geometry", ["INSIDE"])
        assert available
        assert imports["INSIDE"] == 1

    def test_missing_module(self):
        """Test that a missing module reports unavailability."""
        available, imports = optional_import("regionsmith.no_such_module", ["thing"])
        assert not available
        assert imports == {"thing": None}

    def test_single(self):
        """Test the single-name form."""
        available, value = optional_import_single("regionsmith.objects", "UNMATCHED")
        assert available
        assert value == -1

    def test_missing_dependency_named(self):
        """Test that the missing top-level package is remembered."""
        optional_import("regionsmith_absent_pkg.readers", ["read"])
        assert missing_dependency("regionsmith_absent_pkg.readers") == "regionsmith_absent_pkg"

    def test_missing_dependency_after_success(self):
        """Test that importable modules report no missing dependency."""
        optional_import("regionsmith.primitives.geometry", ["INSIDE"])
        assert missing_dependency("regionsmith.primitives.geometry") is None
