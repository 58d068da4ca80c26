from __future__ import annotations
import io
from typing import Dict, List, Tuple

import pytest

from adapters.executor import Executor
from contracts.base import Command, RunResult


@pytest.fixture(autouse=True)
def _env_isolation(tmp_path, monkeypatch):
    """
    • audit log goes to a temp dir
    • fixed signing key so fingerprints are deterministic
    • no CI / seed signals leak in from the host
    """
    monkeypatch.setenv("XCSHIP_AUDIT_DIR", str(tmp_path / ".xcship_audit"))
    monkeypatch.setenv("XCSHIP_AUDIT_KEY", "test_hmac_key")
    for var in ("IS_CI_BOX", "CC_BUILD_ARTIFACTS", "CEDAR_RANDOM_SEED", "XCSHIP_PROFILE_STORE"):
        monkeypatch.delenv(var, raising=False)
    yield


class FakeExecutor(Executor):
    """Executor that never spawns; `script` maps a substring of the rendered command to (rc, output)."""

    def __init__(self, script: Dict[str, Tuple[int, str]] | None = None):
        self.script = list((script or {}).items())
        self.commands: List[Command] = []

    def run(self, cmd: Command) -> RunResult:
        self.commands.append(cmd)
        line = cmd.render()
        for needle, (rc, out) in self.script:
            if needle in line:
                return RunResult(cmd, rc, out)
        return RunResult(cmd, 0, "")

    def rendered(self) -> List[str]:
        return [c.render() for c in self.commands]


@pytest.fixture
def make_executor():
    return FakeExecutor


@pytest.fixture
def out():
    return io.StringIO()
