# contracts/base.py
from __future__ import annotations
import shlex
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from contracts.errors import ResourceRequired


@dataclass(frozen=True)
class Command:
    """
    Explicit argv for one child process. Never passed through a shell.
    drop_lines: captured lines containing any of these substrings are discarded
    (replaces the `| grep -v ...` tail of the shell pipelines).
    """
    argv: Tuple[str, ...]
    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    drop_lines: Tuple[str, ...] = ()

    @classmethod
    def of(cls, *argv: str, cwd: Optional[str] = None, env: Optional[Dict[str, str]] = None,
           drop_lines: Sequence[str] = ()) -> "Command":
        return cls(tuple(str(a) for a in argv if a is not None), cwd, dict(env or {}), tuple(drop_lines))

    def render(self) -> str:
        line = shlex.join(self.argv)
        if self.cwd:
            line = f"cd {shlex.quote(self.cwd)} && {line}"
        return line

    def __str__(self) -> str:
        return self.render()


@dataclass
class RunResult:
    cmd: Command
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def ensure_tool(name: str, how_to: str) -> str:
    """Returns the path of a required system tool, else raises ResourceRequired."""
    path = shutil.which(name)
    if not path:
        raise ResourceRequired(name, how_to)
    return path


def filter_lines(text: str, drop: Sequence[str]) -> str:
    if not drop:
        return text
    kept: List[str] = [ln for ln in text.splitlines(keepends=True) if not any(d in ln for d in drop)]
    return "".join(kept)
