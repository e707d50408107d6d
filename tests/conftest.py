from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

WritePage = Callable[..., Path]


def render_page(front_matter: str, body: str = "Body.\n") -> str:
    """Wrap raw front-matter text in fences."""
    return f"---\n{front_matter.strip()}\n---\n{body}"


@pytest.fixture
def course_dir(tmp_path: Path) -> Path:
    root = tmp_path / "course"
    root.mkdir()
    return root


@pytest.fixture
def write_page(course_dir: Path) -> WritePage:
    """Write one page into ``course_dir`` from raw front-matter text."""

    def _write(filename: str, front_matter: str, body: str = "Body.\n") -> Path:
        path = course_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_page(front_matter, body), encoding="utf-8")
        return path

    return _write
