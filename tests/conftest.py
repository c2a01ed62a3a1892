"""Shared pytest fixtures for gofumpt-build tests.

Provides a scripted command runner, a plugin project factory and a
WebAssembly module builder, so every stage can be exercised without
tinygo, docker, go-licenses or dprint installed.
"""

from __future__ import annotations

import json
import shutil
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner

from gofumpt_build.config import BuildConfig
from gofumpt_build.process import CommandResult
from gofumpt_build.wasm.leb128 import encode_unsigned

FIXTURES_DIR = Path(__file__).parent / "fixtures"

MODULE_PATH = "example.com/foo"
PROJECT_VERSION = "1.2.3"
SELF_LICENSE = "MIT License\n\nCopyright (c) 2024 Example Authors\n"

Handler = Callable[[list[str], Path, dict[str, str]], "CommandResult | bytes | None"]


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to print to stdout without caching loggers."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


class FakeRunner:
    """Scripted stand-in for :func:`gofumpt_build.process.run_command`.

    Handlers are looked up by executable name (``argv[0]``). A handler may
    return a CommandResult, raw stdout bytes, or None (empty success).

    Attributes:
        calls: Every ``(argv, cwd, env)`` received, in order.
    """

    def __init__(self, handlers: dict[str, Handler] | None = None) -> None:
        self.handlers: dict[str, Handler] = handlers or {}
        self.calls: list[tuple[list[str], Path, dict[str, str]]] = []

    def __call__(
        self, argv: Sequence[str], cwd: Path, env: Mapping[str, str]
    ) -> CommandResult:
        argv = list(argv)
        env = dict(env)
        self.calls.append((argv, cwd, env))
        handler = self.handlers.get(argv[0])
        outcome = handler(argv, cwd, env) if handler else None
        if isinstance(outcome, CommandResult):
            return outcome
        return CommandResult(argv=argv, returncode=0, stdout=outcome or b"")

    @staticmethod
    def failure(argv: list[str], stderr: str, returncode: int = 1) -> CommandResult:
        """Build a failed CommandResult for a handler to return."""
        return CommandResult(argv=argv, returncode=returncode, stderr=stderr.encode())

    @property
    def programs(self) -> list[str]:
        """Executables invoked, in order."""
        return [argv[0] for argv, _, _ in self.calls]


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Return the FakeRunner class; call it with a handler mapping."""
    return FakeRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def plugin_project(tmp_path: Path) -> Path:
    """Create a minimal plugin project: package.json, go.mod, LICENSE, testdata."""
    project = tmp_path / "plugin"
    project.mkdir()
    (project / "package.json").write_text(
        json.dumps({"name": "dprint-plugin-gofumpt", "version": PROJECT_VERSION}, indent=2)
    )
    (project / "go.mod").write_text(
        f"module {MODULE_PATH}\n\ngo 1.22\n\nrequire mvdan.cc/gofumpt v0.6.0\n"
    )
    (project / "LICENSE").write_text(SELF_LICENSE)
    shutil.copytree(FIXTURES_DIR, project / "testdata")
    return project


@pytest.fixture
def build_config(plugin_project: Path) -> BuildConfig:
    return BuildConfig(work_dir=plugin_project, env={"PATH": "/usr/bin", "HOME": "/root"})


# --- WebAssembly module builder -------------------------------------------

def _name(text: str) -> bytes:
    raw = text.encode("utf-8")
    return encode_unsigned(len(raw)) + raw


def _vec(items: Sequence[bytes]) -> bytes:
    return encode_unsigned(len(items)) + b"".join(items)


def _section(section_id: int, payload: bytes) -> bytes:
    return bytes([section_id]) + encode_unsigned(len(payload)) + payload


def build_wasm(
    *,
    types: Sequence[tuple[Sequence[bytes], Sequence[bytes]]] = (((), ()),),
    imports: Sequence[tuple[str, str, int]] = (),
    functions: Sequence[int] = (0, 0),
    exports: Sequence[tuple[str, int]] = (("_initialize", 0),),
    start: int | None = None,
    names: dict[int, str] | None = None,
) -> bytes:
    """Assemble a small module.

    ``types`` is a sequence of ``(params, results)``; ``imports`` are
    ``(module, field, type_index)`` function imports; ``functions`` lists the
    type index of each defined function; ``exports`` are function exports
    ``(name, function_index)``. Sections are emitted in the required order
    with a trivial body for every defined function.
    """
    out = b"\x00asm\x01\x00\x00\x00"
    out += _section(1, _vec([b"\x60" + _vec(list(p)) + _vec(list(r)) for p, r in types]))
    if imports:
        out += _section(
            2,
            _vec([_name(m) + _name(f) + b"\x00" + encode_unsigned(t) for m, f, t in imports]),
        )
    out += _section(3, _vec([encode_unsigned(t) for t in functions]))
    if exports:
        out += _section(7, _vec([_name(n) + b"\x00" + encode_unsigned(i) for n, i in exports]))
    if start is not None:
        out += _section(8, encode_unsigned(start))
    out += _section(10, _vec([b"\x02\x00\x0b" for _ in functions]))
    if names:
        body = _vec([encode_unsigned(i) + _name(n) for i, n in sorted(names.items())])
        subsection = bytes([1]) + encode_unsigned(len(body)) + body
        out += _section(0, _name("name") + subsection)
    return out


@pytest.fixture
def wasm_builder() -> Callable[..., bytes]:
    """Return :func:`build_wasm`."""
    return build_wasm


@pytest.fixture
def toolchain_handler(wasm_builder: Callable[..., bytes]) -> Handler:
    """A tinygo (or docker) handler producing an unpatched reactor module.

    Writes to the ``-o`` path, or returns the bytes when that is stdout.
    """

    def handler(argv: list[str], cwd: Path, env: dict[str, str]) -> bytes | None:
        output = argv[argv.index("-o") + 1]
        if output == "/dev/stdout":
            return wasm_builder()
        Path(output).write_bytes(wasm_builder())
        return None

    return handler


@pytest.fixture
def formats_to_expected() -> Handler:
    """A dprint handler that rewrites the scratch file to the fixture's expected.go."""

    def handler(argv: list[str], cwd: Path, env: dict[str, str]) -> Any:
        scratch = Path(argv[-1])
        scratch.write_bytes((scratch.parent / "expected.go").read_bytes())
        return None

    return handler
