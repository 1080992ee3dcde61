"""Tests for trellis.cli — argument parsing, target resolution, commands."""

import logging
import textwrap
from pathlib import Path

import pytest

from trellis.cli import main
from trellis.cli._resolve import resolve_target
from trellis.engine import Engine
from trellis.tree import Router

_MODULE = textwrap.dedent(
    """
    from trellis import Engine, EngineConfig
    from trellis.tree import Route, Router, RouteSpec

    def ok(ctx):
        ctx.text(200, "ok")

    root = Router.of(
        "/api",
        ok,
        routes=[Route.of("GET", "/health", ok)],
        routers=[Router.of("/users", routes=[Route.of("POST", "", ok)])],
    )

    broken = Router.of(
        "/api",
        routes=[Route(lambda: RouteSpec("GET", "/x", error="store must be set"))],
    )

    def make_root():
        return root

    engine = Engine()
    engine.get("/ping", ok)

    quiet = Engine(EngineConfig(log_level="error"))

    single = Router(lambda: ("/api", (), Route.of("GET", "/x", ok)))

    not_a_tree = 42
    """
)


@pytest.fixture
def app_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write a throwaway app module and make it importable."""
    name = f"cli_app_{tmp_path.name.replace('-', '_')}"
    (tmp_path / f"{name}.py").write_text(_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    @pytest.mark.parametrize("command", ["check", "routes", "run"])
    def test_command_help_exits_zero(self, command: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([command, "--help"])
        assert exc_info.value.code == 0

    @pytest.mark.parametrize("command", ["check", "routes", "run"])
    def test_missing_target(self, command: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([command])
        assert exc_info.value.code == 2

    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "trellis" in capsys.readouterr().out


class TestResolveTarget:
    def test_default_attribute_is_root(self, app_module: str) -> None:
        assert isinstance(resolve_target(app_module), Router)

    def test_explicit_attribute(self, app_module: str) -> None:
        assert isinstance(resolve_target(f"{app_module}:engine"), Engine)

    def test_factory_is_called(self, app_module: str) -> None:
        assert isinstance(resolve_target(f"{app_module}:make_root"), Router)

    def test_wrong_type(self, app_module: str) -> None:
        with pytest.raises(TypeError, match="resolved to int"):
            resolve_target(f"{app_module}:not_a_tree")

    def test_missing_attribute(self, app_module: str) -> None:
        with pytest.raises(AttributeError):
            resolve_target(f"{app_module}:nope")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_target("no_such_module_for_trellis")


class TestCheck:
    def test_prints_outline(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", f"{app_module}:root"])
        out = capsys.readouterr().out
        assert "Router<relativePath, handlerCount, routeCount, routerCount> = (/api, 1, 1, 1)" in out
        assert "    Route<method, relativePath, handlerCount> = (POST, , 1)" in out
        assert "OK: 2 routes in 2 routers" in out

    def test_failure_exits_one(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", f"{app_module}:broken"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "route error at index 0" in err
        assert "store must be set" in err

    def test_non_sequence_field_exits_one(
        self, app_module: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", f"{app_module}:single"])
        assert exc_info.value.code == 1
        assert "routes must be a sequence, got Route" in capsys.readouterr().err

    def test_engine_rejected(self, app_module: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", f"{app_module}:engine"])
        assert exc_info.value.code == 1

    def test_bad_import_exits_one(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "no_such_module_for_trellis:root"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestRoutes:
    def test_table(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{app_module}:root"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["METHOD", "PATH", "HANDLERS"]
        rows = [line.split(None, 2) for line in lines[2:]]
        assert rows == [
            ["GET", "/api/health", "ok -> ok"],
            ["POST", "/api/users", "ok -> ok"],
        ]

    def test_engine_used_directly(self, app_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{app_module}:engine"])
        assert "/ping" in capsys.readouterr().out

    def test_failure_exits_one(self, app_module: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", f"{app_module}:broken"])
        assert exc_info.value.code == 1


class TestRun:
    @pytest.fixture(autouse=True)
    def trellis_logger(self):
        """Restore the package logger level `trellis run` sets."""
        logger = logging.getLogger("trellis")
        level = logger.level
        yield logger
        logger.setLevel(level)

    def test_mounts_router_and_serves(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[tuple] = []

        def fake_serve(app, host, port, **kwargs) -> None:
            calls.append((app, host, port, kwargs))

        monkeypatch.setattr("trellis.cli._run.serve", fake_serve)
        main(["run", f"{app_module}:root", "--port", "9000"])

        ((app, host, port, kwargs),) = calls
        assert isinstance(app, Engine)
        assert [e.path for e in app.routes] == ["/api/health", "/api/users"]
        assert (host, port) == ("127.0.0.1", 9000)
        assert kwargs["app_path"] is None

    def test_engine_passes_import_string(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(
            "trellis.cli._run.serve", lambda app, host, port, **kwargs: calls.append(kwargs)
        )
        main(["run", f"{app_module}:engine", "--host", "0.0.0.0"])
        assert calls[0]["app_path"] == f"{app_module}:engine"

    def test_broken_tree_exits_one(self, app_module: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", f"{app_module}:broken"])
        assert exc_info.value.code == 1

    def test_log_level_from_engine_config(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch, trellis_logger: logging.Logger
    ) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(
            "trellis.cli._run.serve", lambda app, host, port, **kwargs: calls.append(kwargs)
        )
        main(["run", f"{app_module}:quiet"])
        assert calls[0]["log_level"] == "error"
        assert trellis_logger.level == logging.ERROR

    def test_log_level_flag_overrides_config(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch, trellis_logger: logging.Logger
    ) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(
            "trellis.cli._run.serve", lambda app, host, port, **kwargs: calls.append(kwargs)
        )
        main(["--log-level", "debug", "run", f"{app_module}:quiet"])
        assert calls[0]["log_level"] == "debug"
        assert trellis_logger.level == logging.DEBUG

    def test_default_engine_log_level(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch, trellis_logger: logging.Logger
    ) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(
            "trellis.cli._run.serve", lambda app, host, port, **kwargs: calls.append(kwargs)
        )
        main(["run", f"{app_module}:root"])
        assert calls[0]["log_level"] == "info"

    def test_engine_is_frozen_before_serving(
        self, app_module: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("trellis.cli._run.serve", lambda app, host, port, **kwargs: None)
        main(["run", f"{app_module}:engine"])

        engine = resolve_target(f"{app_module}:engine")
        with pytest.raises(RuntimeError, match="after it has started"):
            engine.get("/late", lambda ctx: None)
