# adapters/executor.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import os
import subprocess
from typing import Optional

from contracts.base import Command, RunResult, filter_lines
from contracts.errors import CommandFailed
from engine.audit_log import record_event


class Executor:
    """
    Runs Commands as blocking child processes, stdout and stderr interleaved.
    No timeouts are enforced here.
    """

    def run(self, cmd: Command) -> RunResult:
        env = None
        if cmd.env:
            env = dict(os.environ)
            env.update(cmd.env)
        record_event("command.start", {"cmd": cmd.render()})
        try:
            p = subprocess.run(list(cmd.argv), cwd=cmd.cwd, env=env,
                               stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True,
                               encoding="utf-8", errors="replace")
        except OSError as e:
            record_event("command.missing", {"cmd": cmd.render(), "err": str(e)}, severity="error")
            return RunResult(cmd, 127, str(e))
        out = filter_lines(p.stdout or "", cmd.drop_lines)
        record_event("command.done", {"cmd": cmd.render(), "rc": p.returncode},
                     severity="info" if p.returncode == 0 else "error")
        return RunResult(cmd, p.returncode, out)

    def system_or_exit(self, cmd: Command, output_file: Optional[str] = None) -> str:
        """Runs cmd; raises CommandFailed on nonzero. Output goes to output_file when given."""
        res = self.run(cmd)
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(res.output)
        if not res.ok:
            raise CommandFailed(cmd.render(), res.returncode, res.output)
        return res.output

    def system(self, cmd: Command) -> bool:
        """Best effort: a failing or missing command is reported, never raised."""
        return self.run(cmd).ok

    def capture_output_from_system(self, cmd: Command) -> str:
        return self.system_or_exit(cmd)

    def check_command_for_failure(self, cmd: Command) -> bool:
        return self.run(cmd).ok
