# engine/spec_runner.py
# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Callable, Dict, Optional, TextIO

from contracts.models import AppConfig, Environment, TargetDescriptor, merge_environment
from engine.audit_log import record_event

"""
SpecRunner
- routes one spec target to: simulator launch (app, iOS sdk),
  desktop launch (app, macosx sdk) or `xcodebuild test` (bundle)
- returns whatever the chosen launcher returned
"""

ToolsFactory = Callable[..., Any]


class SpecRunner:
    def __init__(self, out: TextIO, tools_factory: ToolsFactory, ios_launcher, osx_launcher,
                 scheme_parser, environment: Optional[Environment] = None):
        self.out = out
        self.tools_factory = tools_factory
        self.ios_launcher = ios_launcher
        self.osx_launcher = osx_launcher
        self.scheme_parser = scheme_parser
        self.environment = environment or Environment()

    def run(self, app_config: AppConfig, target: TargetDescriptor,
            overrides: Optional[Dict[str, Optional[str]]] = None) -> Any:
        overrides = overrides or {}
        project = app_config.project_reference()
        build_dir = app_config.build_directory
        configuration = target.build_configuration
        tools = self.tools_factory(self.out, configuration, build_dir, project)

        os_version = overrides.get("os_version") or target.os_version
        device_name = overrides.get("device_name") or target.device_name
        policy = app_config.device_name_policy
        record_event("specs.dispatch", {"type": target.type, "scheme": target.scheme, "sdk": target.build_sdk})

        if target.type == "bundle":
            return tools.test(target.scheme, configuration, os_version,
                              policy.bundle.apply(device_name), target.timeout, build_dir)

        tools.build_scheme(target.scheme, target.build_sdk)
        env = merge_environment(self.scheme_parser.parse_environment_variables(target.scheme, project),
                                self.environment)

        if target.is_desktop:
            executable = tools.find_executable_name(target.scheme)
            return self.osx_launcher.run(executable, configuration, build_dir, env)

        tools.kill_simulator()
        executable = tools.find_executable_name(target.scheme)
        return self.ios_launcher.run(executable, configuration, target.build_sdk, os_version,
                                     policy.app.apply(device_name), target.timeout, build_dir,
                                     app_config.ios_sim_path, env)
