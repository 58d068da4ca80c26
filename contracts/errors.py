# contracts/errors.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Optional, Sequence


class XcshipError(Exception):
    def __init__(self, msg: str, code: str = "xcship_error", detail: Optional[dict] = None):
        super().__init__(msg)
        self.code = code
        self.detail = detail or {}


class ConfigurationError(XcshipError):
    def __init__(self, msg: str, detail: Optional[dict] = None):
        super().__init__(msg, code="configuration_error", detail=detail)


class ResourceRequired(XcshipError):
    def __init__(self, what: str, how_to: str):
        super().__init__(f"resource_required: {what}", code="resource_required",
                         detail={"what": what, "how_to": how_to})
        self.what, self.how_to = what, how_to


class CommandFailed(XcshipError):
    """
    A build/package/sign/test step returned nonzero.
    `output` holds the interleaved stdout/stderr captured from the child.
    """
    def __init__(self, cmd: str, returncode: int, output: str = "", code: str = "command_failed"):
        super().__init__(f"command_failed ({returncode}): {cmd}", code=code,
                         detail={"cmd": cmd, "returncode": returncode})
        self.cmd = cmd
        self.returncode = returncode
        self.output = output


class ExecutableNameNotFound(XcshipError):
    def __init__(self, scheme: str, cmd: str):
        super().__init__(f"EXECUTABLE_NAME not found in build settings of scheme {scheme}",
                         code="executable_name_not_found", detail={"scheme": scheme, "cmd": cmd})
        self.scheme = scheme
        self.cmd = cmd


class ProvisioningProfileNotFound(XcshipError):
    def __init__(self, query: str, command: str):
        super().__init__(
            f"\nCouldn't find provisioning profiles matching {query}.\n\nThe command used was:\n\n{command}",
            code="provisioning_profile_not_found",
            detail={"query": query, "command": command},
        )
        self.query = query
        self.command = command


class ProvisioningProfileNotEmbedded(XcshipError):
    def __init__(self, embedded: str, expected: str):
        super().__init__(
            "Wrong mobile provision embedded by xcrun. Check your xcode provisioning profile settings.",
            code="provisioning_profile_not_embedded",
            detail={"embedded": embedded, "expected": expected},
        )
        self.embedded = embedded
        self.expected = expected


def describe(err: XcshipError, extra: Sequence[str] = ()) -> str:
    lines = [f"[ERR] {err.code}: {err}"]
    lines.extend(extra)
    return "\n".join(lines)
