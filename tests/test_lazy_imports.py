"""Tests for the lazy top-level API in wren/__init__.py."""

import pytest

import wren


class TestLazyImports:
    @pytest.mark.parametrize("name", wren.__all__)
    def test_every_public_name_resolves(self, name: str) -> None:
        assert getattr(wren, name) is not None

    def test_resolves_to_defining_module(self) -> None:
        from wren.binding import APIRouter
        from wren.errors import SpecError

        assert wren.APIRouter is APIRouter
        assert wren.SpecError is SpecError

    def test_unknown_name(self) -> None:
        with pytest.raises(AttributeError, match="no attribute 'Nope'"):
            wren.Nope  # noqa: B018

    def test_version(self) -> None:
        assert wren.__version__ == "0.1.0"
