"""Baseline tests ensuring the package skeleton loads correctly."""

import flashmap


def test_package_exports() -> None:
    for name in ("core", "image", "load", "regions", "session"):
        assert hasattr(flashmap, name), f"missing submodule: {name}"


def test_error_hierarchy() -> None:
    for name in ("FormatError", "OverlapError", "DuplicateKeyError"):
        assert issubclass(getattr(flashmap, name), flashmap.FlashmapError)
