"""Tests for autoroute.routes.registrar — directory walk and registration."""

import os
from pathlib import Path

import pytest

from autoroute._errors import ControllerLoadError
from autoroute.config import AutorouteConfig
from autoroute.observability.events import (
    ControllerRegistered,
    ControllerSkipped,
    DirectorySkipped,
    RouteCollision,
)
from autoroute.observability.log import EventLog
from autoroute.routes.chain import id_to_state
from autoroute.routes.registrar import (
    EntryKind,
    Registrar,
    classify,
    controller_middleware,
    register,
)

INDEX_ONLY = "def index(request):\n    return 'ok'\n"


def _keys(table) -> list[tuple[str, str]]:
    return [entry.key for entry in table]


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    """classify — directory entry kinds."""

    def test_directory(self, tmp_path: Path) -> None:
        (tmp_path / "admin").mkdir()
        assert classify(tmp_path / "admin", ".html.py") is EntryKind.DIRECTORY

    def test_index_controller(self, tmp_path: Path) -> None:
        (tmp_path / "index.py").write_text("")
        assert classify(tmp_path / "index.py", ".html.py") is EntryKind.INDEX_CONTROLLER

    def test_named_controller(self, tmp_path: Path) -> None:
        (tmp_path / "posts.py").write_text("")
        assert classify(tmp_path / "posts.py", ".html.py") is EntryKind.NAMED_CONTROLLER

    @pytest.mark.parametrize(
        "name",
        ["posts.html", "README.md", "help.html.py", "_private.py", "__init__.py", ".hidden.py"],
    )
    def test_ignored_files(self, tmp_path: Path, name: str) -> None:
        (tmp_path / name).write_text("")
        assert classify(tmp_path / name, ".html.py") is EntryKind.IGNORED

    def test_ignored_directories(self, tmp_path: Path) -> None:
        (tmp_path / "__pycache__").mkdir()
        (tmp_path / ".git").mkdir()
        assert classify(tmp_path / "__pycache__", ".html.py") is EntryKind.IGNORED
        assert classify(tmp_path / ".git", ".html.py") is EntryKind.IGNORED

    def test_sort_rank(self) -> None:
        kinds = [EntryKind.INDEX_CONTROLLER, EntryKind.DIRECTORY, EntryKind.NAMED_CONTROLLER]
        assert sorted(kinds) == [
            EntryKind.DIRECTORY, EntryKind.NAMED_CONTROLLER, EntryKind.INDEX_CONTROLLER,
        ]


# ---------------------------------------------------------------------------
# controller_middleware
# ---------------------------------------------------------------------------


class TestControllerMiddleware:
    def _module(self, tmp_path: Path, source: str):
        from autoroute.routes.loader import ControllerLoader

        py = tmp_path / "ctrl.py"
        py.write_text(source)
        return ControllerLoader(tmp_path).load(py)

    def test_absent(self, tmp_path: Path) -> None:
        assert controller_middleware(self._module(tmp_path, "")) == ()

    def test_single_callable(self, tmp_path: Path) -> None:
        module = self._module(tmp_path, "async def middleware(request, next):\n    pass\n")
        assert controller_middleware(module) == (module.middleware,)

    def test_list(self, tmp_path: Path) -> None:
        module = self._module(
            tmp_path,
            "def a(r, n): pass\ndef b(r, n): pass\nmiddleware = [a, b]\n",
        )
        assert controller_middleware(module) == (module.a, module.b)

    def test_invalid(self, tmp_path: Path) -> None:
        module = self._module(tmp_path, "middleware = 42\n")
        with pytest.raises(ControllerLoadError, match="'middleware' must be"):
            controller_middleware(module)

    def test_list_with_non_callable(self, tmp_path: Path) -> None:
        module = self._module(tmp_path, "middleware = ['nope']\n")
        with pytest.raises(ControllerLoadError):
            controller_middleware(module)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    """Registrar.register — route table and view map from a tree."""

    def test_root_index_and_template(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({"index.py": INDEX_ONLY, "index.html": "home"})
        table, views = register(config)
        assert _keys(table) == [("GET", "/")]
        assert dict(views) == {"/": "/index"}
        assert views.missing == frozenset()

    def test_named_controller_all_actions(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "posts.py": """
                def index(request): pass
                def create(request): pass
                def select(request): pass
                def update(request): pass
                def edit(request): pass
                def save(request): pass
                def delete(request): pass
                def helper(request): pass
            """,
            "posts.html": "",
        })
        table, views = register(config)
        assert _keys(table) == [
            ("GET", "/posts"),
            ("POST", "/posts"),
            ("GET", "/posts/{id}"),
            ("POST", "/posts/{id}"),
            ("GET", "/posts/{id}/edit"),
            ("POST", "/posts/{id}/edit"),
            ("GET", "/posts/{id}/delete"),
        ]
        assert views["/posts"] == "/posts"

    def test_id_routes_get_id_to_state(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "posts.py": "def index(request): pass\ndef select(request): pass\n",
        })
        table, _ = register(config)
        assert table.get("GET", "/posts").middleware == ()
        assert table.get("GET", "/posts/{id}").middleware == (id_to_state,)

    def test_controller_middleware_follows_id_to_state(
        self, write_tree, config: AutorouteConfig,
    ) -> None:
        write_tree({
            "posts.py": """
                async def auth(request, next):
                    return await next(request)

                middleware = [auth]

                def index(request): pass
                def select(request): pass
            """,
        })
        table, _ = register(config)
        index_chain = table.get("GET", "/posts").middleware
        select_chain = table.get("GET", "/posts/{id}").middleware
        assert [mw.__name__ for mw in index_chain] == ["auth"]
        assert [mw.__name__ for mw in select_chain] == ["id_to_state", "auth"]

    def test_nested_index_view_falls_back(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "index.html": "",
            "admin/index.py": INDEX_ONLY,
            "admin/reports/daily.py": INDEX_ONLY,
            "admin/reports/index.html": "",
        })
        table, views = register(config)
        assert views["/admin"] == "/index"
        assert views["/admin/reports/daily"] == "/admin/reports/index"
        assert ("GET", "/admin/reports/daily") in table

    def test_depth_first_order(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "index.py": INDEX_ONLY,
            "about.py": INDEX_ONLY,
            "admin/index.py": INDEX_ONLY,
            "admin/users.py": INDEX_ONLY,
            "blog/index.py": INDEX_ONLY,
        })
        table, _ = register(config)
        assert [entry.path for entry in table] == [
            "/admin/users", "/admin", "/blog", "/about", "/",
        ]

    def test_ignored_entries(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "index.py": INDEX_ONLY,
            "_private.py": INDEX_ONLY,
            "__init__.py": "",
            "help.html": "",
            "help.html.py": INDEX_ONLY,
            "notes.txt": "",
            "_drafts/index.py": INDEX_ONLY,
        })
        table, _ = register(config)
        assert _keys(table) == [("GET", "/")]

    def test_companion_suffix_follows_ext(self, write_tree, root: Path) -> None:
        write_tree({"help.kida.py": INDEX_ONLY, "help.html.py": INDEX_ONLY})
        table, _ = register(AutorouteConfig(root=root, ext=".kida"))
        assert _keys(table) == [("GET", "/help.html")]

    def test_no_actions_gets_no_view(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({"util.py": "def helper(): pass\n", "util.html": ""})
        log = EventLog()
        table, views = register(config, event_log=log)
        assert len(table) == 0
        assert "/util" not in views
        skipped = log.query(event_type=ControllerSkipped)
        assert [e.reason for e in skipped] == ["no actions"]

    def test_missing_template_recorded(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({"posts.py": INDEX_ONLY})
        _, views = register(config)
        assert views["/posts"] == "/index"
        assert views.missing == frozenset({"/posts"})
        assert not views.has_template("/posts")

    def test_empty_root(self, config: AutorouteConfig) -> None:
        table, views = register(config)
        assert len(table) == 0
        assert len(views) == 0

    def test_missing_root(self, tmp_path: Path) -> None:
        log = EventLog()
        table, views = register(AutorouteConfig(root=tmp_path / "nope"), event_log=log)
        assert len(table) == 0
        assert len(views) == 0
        assert isinstance(log.recent(1)[0], DirectorySkipped)

    def test_deterministic(self, blog_tree: Path, config: AutorouteConfig) -> None:
        first_table, first_views = register(config)
        second_table, second_views = register(config)
        assert _keys(first_table) == _keys(second_table)
        assert dict(first_views) == dict(second_views)


class TestRegisterErrors:
    """Failures skip one controller or directory; the walk goes on."""

    def test_broken_controller_skipped(
        self, write_tree, config: AutorouteConfig, caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_tree({
            "broken.py": "raise RuntimeError('boom')\n",
            "posts.py": INDEX_ONLY,
        })
        log = EventLog()
        with caplog.at_level("WARNING", logger="autoroute.registrar"):
            table, views = register(config, event_log=log)

        assert _keys(table) == [("GET", "/posts")]
        assert "/broken" not in views
        assert "Skipping controller" in caplog.text
        skipped = log.query(event_type=ControllerSkipped)
        assert len(skipped) == 1
        assert "boom" in skipped[0].reason

    def test_invalid_middleware_skipped(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({"posts.py": "middleware = 'nope'\n" + INDEX_ONLY})
        table, _ = register(config)
        assert len(table) == 0

    def test_unreadable_directory_skipped(
        self, write_tree, config: AutorouteConfig, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        write_tree({
            "admin/index.py": INDEX_ONLY,
            "blog/index.py": INDEX_ONLY,
        })
        locked = config.root / "admin"
        iterdir = Path.iterdir

        def guarded_iterdir(self: Path):
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            return iterdir(self)

        monkeypatch.setattr(Path, "iterdir", guarded_iterdir)
        log = EventLog()
        table, views = register(config, event_log=log)

        assert _keys(table) == [("GET", "/blog")]
        assert "/admin" not in views
        skipped = log.query(event_type=DirectorySkipped)
        assert len(skipped) == 1
        assert skipped[0].path == str(locked)
        assert "Permission denied" in skipped[0].reason

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlink_cycle(self, write_tree, config: AutorouteConfig) -> None:
        root = write_tree({"admin/index.py": INDEX_ONLY})
        try:
            (root / "admin" / "loop").symlink_to(root / "admin", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")
        table, _ = register(config)
        assert _keys(table) == [("GET", "/admin")]


class TestCollisions:
    """Last registration wins; collisions are logged and recorded."""

    def test_named_then_index_controller(self, write_tree, config: AutorouteConfig) -> None:
        write_tree({
            "posts.py": "def index(request):\n    return 'named'\n",
            "posts/index.py": "def index(request):\n    return 'index'\n",
        })
        log = EventLog()
        table, _ = register(config, event_log=log)

        # posts/ (directory) is walked before posts.py
        assert table.get("GET", "/posts").source.name == "posts.py"
        collisions = log.query(event_type=RouteCollision)
        assert len(collisions) == 1
        assert collisions[0].path == "/posts"
        assert collisions[0].previous_source.endswith("index.py")


class TestRegistrarReload:
    def test_reload_picks_up_changes(self, write_tree, config: AutorouteConfig) -> None:
        root = write_tree({"posts.py": INDEX_ONLY})
        registrar = Registrar(config)
        first, _ = registrar.register()
        assert len(first) == 1

        (root / "posts.py").write_text(INDEX_ONLY + "def select(request): pass\n")
        second, _ = registrar.reload()
        assert len(second) == 2

    def test_registered_events(self, blog_tree: Path, config: AutorouteConfig) -> None:
        log = EventLog()
        Registrar(config, event_log=log).register()
        registered = {e.route: e for e in log.query(event_type=ControllerRegistered)}
        assert set(registered) == {"/", "/posts", "/admin"}
        assert registered["/posts"].actions == ("index", "select", "update", "edit", "delete")
        assert registered["/posts"].template_found is True
        assert registered["/admin"].view_key == "/index"
