"""Tests for autoroute package exports and metadata."""

import pytest

import autoroute


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(autoroute.__version__, str)
        assert "0.1.0" in autoroute.__version__

    def test_free_threading_declaration(self) -> None:
        assert autoroute._Py_mod_gil == 0

    def test_all_exports_resolvable(self) -> None:
        for name in autoroute.__all__:
            getattr(autoroute, name)

    def test_exports_are_the_real_objects(self) -> None:
        from autoroute.routes.chain import id_to_state
        from autoroute.views.dispatcher import view

        assert autoroute.view is view
        assert autoroute.id_to_state is id_to_state

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            autoroute.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
