"""Shared test fixtures for autoroute."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from textwrap import dedent

import pytest

from autoroute.config import AutorouteConfig
from autoroute.routes.loader import MODULE_PREFIX

type WriteTree = Callable[[dict[str, str]], Path]


@pytest.fixture(autouse=True)
def _forget_controllers() -> Iterator[None]:
    """Drop controller modules imported by a test."""
    yield
    for name in [n for n in sys.modules if n.partition(".")[0] == MODULE_PREFIX]:
        del sys.modules[name]


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty autoroute root directory."""
    d = tmp_path / "site"
    d.mkdir()
    return d


@pytest.fixture
def write_tree(root: Path) -> WriteTree:
    """Write ``{relative path: source}`` files under the root and return it.

    Sources are dedented so tests can use indented triple-quoted strings.
    """

    def write(files: dict[str, str]) -> Path:
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(text))
        return root

    return write


@pytest.fixture
def config(root: Path) -> AutorouteConfig:
    return AutorouteConfig(root=root)


@pytest.fixture
def blog_tree(write_tree: WriteTree) -> Path:
    """A small site: root index, posts CRUD, an admin area with a help page."""
    return write_tree({
        "index.py": """
            from autoroute import view

            def index(request):
                return view(request, title="Home")
        """,
        "index.html": "<h1>{{ title }}</h1>",
        "posts.py": """
            from autoroute import view

            def index(request):
                return view(request, title="Posts")

            def select(request, id: int):
                return view(request, "/posts/show", title=f"Post {id + 1000}")

            def update(request, id):
                return f"updated {id}"

            def edit(request):
                return view(request, title="Edit")

            def delete(id):
                return f"deleted {id}"
        """,
        "posts.html": "<h1>{{ title }}</h1>",
        "posts/show.html": "<h1>{{ title }}</h1><p>id={{ id }}</p>",
        "admin/index.py": """
            from autoroute import view

            def index(request):
                return view(request, title="Admin")
        """,
        "admin/help.html": "<h1>Help</h1>",
    })
