# tests/conftest.py
from __future__ import annotations
import os
import sys
from pathlib import Path
import pytest

# Ensure repo root is importable (so `import spinglobe...` and `import main` work)
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Headless pygame / matplotlib setup
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("MPLBACKEND", "Agg")

SAMPLE_ASSET = ROOT / "assets" / "world.topo.json"


@pytest.fixture(scope="session", autouse=True)
def _init_pygame():
    try:
        import pygame
        pygame.init()
        pygame.display.set_mode((1, 1))
        yield
    finally:
        try:
            import pygame
            pygame.quit()
        except Exception:
            pass


@pytest.fixture
def sample_asset() -> dict:
    import json
    with SAMPLE_ASSET.open("r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def sample_geometry(sample_asset):
    from spinglobe.core.topology import decode
    return decode(sample_asset, "ne_110m_admin_0_countries")


