"""Verify package imports work correctly."""


def test_import_scriptorium() -> None:
    """Test that scriptorium can be imported and version matches pyproject."""
    import tomllib
    from pathlib import Path

    import scriptorium

    with (Path(__file__).resolve().parent.parent / "pyproject.toml").open("rb") as f:
        expected = tomllib.load(f)["project"]["version"]
    assert scriptorium.__version__ == expected


def test_version_format() -> None:
    """Test version string format."""
    from scriptorium import __version__

    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_names_resolve() -> None:
    """Every name in __all__ is importable from the package root."""
    import scriptorium

    for name in scriptorium.__all__:
        assert hasattr(scriptorium, name), name


def test_subpackages_import() -> None:
    from scriptorium.compiler import Compiler
    from scriptorium.importer import Extractor, import_tei
    from scriptorium.serialization import to_json
    from scriptorium.validation import ValidationWorker

    assert callable(import_tei)
    assert callable(to_json)
    assert Compiler and Extractor and ValidationWorker
