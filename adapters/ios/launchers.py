# adapters/ios/launchers.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Dict, List, Optional, TextIO

from contracts.base import Command
from engine.audit_log import record_event

DEVICE_TYPE_PREFIX = "com.apple.CoreSimulator.SimDeviceType."
DEFAULT_LAUNCH_TIMEOUT = "30"


class IOSSpecLauncher:
    """Launches a built spec app on the simulator through ios-sim."""

    def __init__(self, executor, out: TextIO):
        self.executor = executor
        self.out = out

    def command(self, executable: str, build_configuration: str, build_sdk: str,
                os_version: Optional[str], device_name: Optional[str], timeout: Optional[str],
                build_dir: str, sim_path: str, env: Dict[str, str]) -> Command:
        app = f"{build_dir}/{build_configuration}-{build_sdk}/{executable}.app"
        device_type = f"{DEVICE_TYPE_PREFIX}{device_name}"
        if os_version:
            device_type = f"{device_type}, {os_version}"
        argv: List[str] = [sim_path, "launch", app,
                           "--devicetypeid", device_type,
                           "--timeout", timeout or DEFAULT_LAUNCH_TIMEOUT]
        for key in sorted(env):
            argv += ["--setenv", f"{key}={env[key]}"]
        return Command.of(*argv)

    def run(self, executable: str, build_configuration: str, build_sdk: str,
            os_version: Optional[str], device_name: Optional[str], timeout: Optional[str],
            build_dir: str, sim_path: str, env: Dict[str, str]) -> bool:
        self.out.write("Launching specs...\n")
        cmd = self.command(executable, build_configuration, build_sdk, os_version, device_name,
                           timeout, build_dir, sim_path, env)
        ok = self.executor.check_command_for_failure(cmd)
        record_event("specs.ios", {"executable": executable, "device": device_name, "ok": ok})
        return ok


class OSXSpecLauncher:
    """Runs a built OS X spec binary directly."""

    def __init__(self, executor, out: TextIO):
        self.executor = executor
        self.out = out

    def run(self, executable: str, build_configuration: str, build_dir: str,
            env: Dict[str, str]) -> bool:
        self.out.write("Launching specs...\n")
        cmd = Command.of(f"{build_dir}/{build_configuration}/{executable}", env=env)
        ok = self.executor.check_command_for_failure(cmd)
        record_event("specs.osx", {"executable": executable, "ok": ok})
        return ok
