"""Tests for undoviz package exports and metadata."""

from importlib.metadata import version

import pytest

import undoviz


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(undoviz.__version__, str)
        assert "0.1.0" in undoviz.__version__

    def test_version_matches_distribution(self) -> None:
        assert undoviz.__version__ == version("undoviz")

    def test_free_threading_declaration(self) -> None:
        assert undoviz._Py_mod_gil == 0

    def test_all_exports_resolvable(self) -> None:
        for name in undoviz.__all__:
            getattr(undoviz, name)

    def test_lazy_export_identity(self) -> None:
        from undoviz.history.builder import build_tree

        assert undoviz.build_tree is build_tree

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            undoviz.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
