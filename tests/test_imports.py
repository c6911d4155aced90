# tests/test_imports.py
"""
Smoke test: ensure every Python module under `spinglobe/` imports successfully.

pygame runs headless (see conftest), so the window host imports without a display.
"""

from __future__ import annotations

import importlib
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
PKG = ROOT / "spinglobe"


def _discover_modules() -> list[str]:
    """Fully-qualified names like 'spinglobe.core.projection', package first."""
    modules: set[str] = set()
    for py in PKG.rglob("*.py"):
        if "__pycache__" in py.parts:
            continue
        parts = list(py.relative_to(PKG).with_suffix("").parts)
        if parts and parts[-1] == "__init__":
            parts = parts[:-1]
        if parts:
            modules.add(".".join(["spinglobe", *parts]))
    return ["spinglobe", *sorted(modules)]


def test_import_all_modules_headless() -> None:
    failures: list[tuple[str, Exception]] = []
    for mod_name in _discover_modules():
        try:
            importlib.import_module(mod_name)
        except Exception as e:  # we want full visibility on any import failure
            failures.append((mod_name, e))

    if failures:
        msgs = "\n".join(f"{m}: {type(e).__name__}({e})" for m, e in failures)
        raise AssertionError(f"Import failures:\n{msgs}")


def test_entry_point_imports() -> None:
    main = importlib.import_module("main")
    assert callable(main.main)


def test_package_metadata_points_at_existing_files() -> None:
    text = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    for line in text.splitlines():
        if line.strip().startswith("readme"):
            name = line.split("=", 1)[1].strip().strip('"')
            assert (ROOT / name).is_file()
            assert name.upper().startswith("README")
