# Test configuration utilities.
# Ensures the repository root is on sys.path so that 'pdfmono' can be imported
# when running pytest without installing the package, and provides stand-in
# engine processes for transform tests.
from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
import sys
import textwrap
from typing import Any

import pytest



ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@dataclass
class ScriptEngine:
    """Spawner that runs a Python snippet in place of Ghostscript.

    The snippet gets the same pipes the real engine would; the Ghostscript
    arguments are recorded in ``calls`` but not passed on, and every spawned
    process is kept in ``processes``.
    """

    script: str
    calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    processes: list[asyncio.subprocess.Process] = field(default_factory=list)

    async def __call__(self, program: str, *args: str, **kwargs: Any) -> asyncio.subprocess.Process:
        self.calls.append((program, args))
        process = await asyncio.create_subprocess_exec(sys.executable, "-c", self.script, **kwargs)
        self.processes.append(process)
        return process


@pytest.fixture
def script_engine() -> Callable[[str], ScriptEngine]:
    def _factory(script: str) -> ScriptEngine:
        return ScriptEngine(textwrap.dedent(script))

    return _factory


@pytest.fixture
def reversing_engine(script_engine: Callable[[str], ScriptEngine]) -> ScriptEngine:
    """Engine that reads all input and emits it reversed."""
    return script_engine(
        """
        import sys
        data = sys.stdin.buffer.read()
        sys.stdout.buffer.write(data[::-1])
        """
    )


@pytest.fixture
def clean_gs_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Guarantee GS_EXE is unset for the test and restored afterwards."""
    # setenv first so monkeypatch records the original state and undoes any
    # value a loaded .env file injects during the test.
    monkeypatch.setenv("GS_EXE", "placeholder")
    monkeypatch.delenv("GS_EXE")
    yield
