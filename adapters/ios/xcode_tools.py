# adapters/ios/xcode_tools.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import os
import re
import shutil
from typing import Optional, TextIO

from adapters.ios.provisioning import ProvisionResolver
from adapters.ios.sign import package_command, resign_commands
from contracts.base import Command
from contracts.errors import CommandFailed, ExecutableNameNotFound
from contracts.models import BuildUnit, Environment, ProjectReference, Scheme, Target
from engine.audit_log import record_event

NOISY_BUILD_LINE = "backing file"
DEFAULT_DESTINATION_TIMEOUT = "30"
SIMULATOR_PROCESSES = ("gdb", "otest", "iOS Simulator")
_EXECUTABLE_NAME = re.compile(r"EXECUTABLE_NAME = (.*)$", re.MULTILINE)


class XcodeTools:
    """
    Clean / build / package / re-sign / verify pipeline over xcodebuild.

    Every step blocks until its child exits. A failing step raises and the
    pipeline stops there; nothing is rolled back.
    """

    def __init__(self, executor, out: TextIO, build_configuration: str, build_directory: str,
                 project: ProjectReference, environment: Optional[Environment] = None,
                 resolver: Optional[ProvisionResolver] = None):
        self.executor = executor
        self.out = out
        self.build_configuration = build_configuration
        self.build_directory = build_directory
        self.project = project
        self.environment = environment or Environment()
        self.resolver = resolver or ProvisionResolver(executor, self.environment.profile_store)

    @property
    def build_configuration_directory(self) -> str:
        return f"{self.build_directory}/{self.build_configuration}-iphoneos"

    # ---- pipeline ----

    def cleanly_create_ipa(self, unit: BuildUnit, app_name: str, signing_identity: str,
                           provision_search_query: Optional[str] = None) -> str:
        self.kill_simulator()
        self.build(unit, "iphoneos", clean=True)
        ipa = self.create_ipa(app_name, signing_identity, provision_search_query)
        self.verify_provision(app_name, provision_search_query)
        record_event("ipa.created", {"ipa": ipa, "app": app_name, "configuration": self.build_configuration})
        return ipa

    def cleanly_create_ipa_with_scheme(self, scheme: str, app_name: str, signing_identity: str,
                                       provision_search_query: Optional[str] = None) -> str:
        return self.cleanly_create_ipa(Scheme(name=scheme), app_name, signing_identity, provision_search_query)

    def cleanly_create_ipa_with_target(self, target: str, app_name: str, signing_identity: str,
                                       provision_search_query: Optional[str] = None) -> str:
        return self.cleanly_create_ipa(Target(name=target), app_name, signing_identity, provision_search_query)

    def clean_build(self) -> None:
        self.out.write("Cleaning...\n")
        shutil.rmtree(self.build_directory, ignore_errors=True)
        record_event("build.clean", {"dir": self.build_directory})

    def build_scheme(self, scheme: str, build_sdk: Optional[str], clean: bool = False) -> None:
        self.build(Scheme(name=scheme), build_sdk, clean)

    def build_target(self, target: str, build_sdk: Optional[str], clean: bool = False) -> None:
        self.build(Target(name=target), build_sdk, clean)

    def build(self, unit: BuildUnit, build_sdk: Optional[str], clean: bool = False) -> None:
        self.out.write("Building...\n")
        argv = ["xcodebuild", *self.project.flag(), *unit.flag(),
                "-configuration", self.build_configuration]
        if build_sdk:
            argv += ["-sdk", build_sdk]
        if clean:
            argv += ["clean", "build"]
        argv.append(f"SYMROOT={self.build_directory}")
        cmd = Command.of(*argv, drop_lines=[NOISY_BUILD_LINE])

        output_file = self.output_file(f"{self.build_configuration}-build")
        try:
            self.executor.system_or_exit(cmd, output_file)
        except CommandFailed:
            if os.path.exists(output_file):
                with open(output_file, "r", encoding="utf-8") as f:
                    self.out.write(f.read())
            raise

    def test(self, scheme: str, build_configuration: str, os_version: Optional[str],
             device_name: Optional[str], timeout: Optional[str], build_dir: str) -> bool:
        destination = f"OS={os_version},name={device_name}"
        cmd = Command.of(
            "xcodebuild", "test",
            "-scheme", scheme,
            "-configuration", build_configuration,
            "-destination", destination,
            "-destination-timeout", timeout or DEFAULT_DESTINATION_TIMEOUT,
            f"SYMROOT={build_dir}",
        )
        return self.executor.check_command_for_failure(cmd)

    def kill_simulator(self) -> None:
        self.out.write("Killing simulator...\n")
        for name in SIMULATOR_PROCESSES:
            self.executor.system(Command.of("killall", "-m", "-KILL", name))

    def find_executable_name(self, scheme: str) -> str:
        cmd = Command.of("xcodebuild", "-scheme", scheme, "-showBuildSettings")
        settings = self.executor.capture_output_from_system(cmd)
        m = _EXECUTABLE_NAME.search(settings)
        name = m.group(1).strip() if m else ""
        if not name:
            raise ExecutableNameNotFound(scheme, cmd.render())
        return name

    # ---- packaging ----

    def create_ipa(self, app_name: str, signing_identity: str,
                   provision_search_query: Optional[str]) -> str:
        self.out.write("Packaging...\n")
        work_dir = self.build_configuration_directory
        app_path = f"{work_dir}/{app_name}.app"
        ipa_path = f"{work_dir}/{app_name}.ipa"
        provision = self.resolver.resolve(provision_search_query or "")
        self.executor.system_or_exit(package_command(app_path, ipa_path, provision))
        for cmd in resign_commands(work_dir, app_name, signing_identity):
            self.executor.system_or_exit(cmd)
        return ipa_path

    def verify_provision(self, app_name: str, provision_search_query: Optional[str]) -> None:
        self.out.write("Verifying provisioning profile...\n")
        embedded = f"{self.build_configuration_directory}/{app_name}.app/embedded.mobileprovision"
        self.resolver.verify(embedded, provision_search_query or "")

    def output_file(self, name: str) -> str:
        if self.environment.is_ci_box and self.environment.build_artifacts_dir:
            output_dir = self.environment.build_artifacts_dir
        else:
            output_dir = self.build_directory
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, f"{name}.output")
        self.out.write(f"Output: {path}\n")
        return path
