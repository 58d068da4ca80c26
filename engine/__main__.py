# engine/__main__.py
from __future__ import annotations
import argparse, os, sys
from typing import List, Optional, TextIO

from adapters.executor import Executor
from adapters.ios.launchers import IOSSpecLauncher, OSXSpecLauncher
from adapters.ios.scheme_parser import SchemeParser
from adapters.ios.xcode_tools import XcodeTools
from contracts.base import ensure_tool
from contracts.errors import XcshipError, describe
from contracts.models import AppConfig, Environment, Scheme, Target
from engine.config import DEFAULT_CONFIG, load_app_config
from engine.spec_runner import SpecRunner


def _tools_factory(executor: Executor, environment: Environment):
    def make(out: TextIO, build_configuration: str, build_directory: str, project) -> XcodeTools:
        return XcodeTools(executor, out, build_configuration, build_directory, project, environment)
    return make


def run_specs(cfg: AppConfig, target_name: str, os_version: Optional[str], device_name: Optional[str],
              environment: Environment, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    executor = Executor()
    runner = SpecRunner(out, _tools_factory(executor, environment),
                        IOSSpecLauncher(executor, out), OSXSpecLauncher(executor, out),
                        SchemeParser(), environment)
    ok = runner.run(cfg, cfg.target(target_name), {"os_version": os_version, "device_name": device_name})
    return 0 if ok else 1


def run_build_ipa(cfg: AppConfig, args: argparse.Namespace, environment: Environment,
                  out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    app_name = args.app_name or cfg.app_name
    identity = args.identity or cfg.ios_distribution_certificate
    if not app_name or not identity:
        print("[ERR] --app-name and --identity are required (or app_name / ios_distribution_certificate in config)",
              file=sys.stderr)
        return 2
    for tool in ("xcodebuild", "xcrun"):
        ensure_tool(tool, "Install Xcode and its command line tools (xcode-select --install)")
    unit = Target(name=args.target) if args.target else Scheme(name=args.scheme or app_name)
    tools = XcodeTools(Executor(), out, args.configuration, cfg.build_directory,
                       cfg.project_reference(), environment)
    ipa = tools.cleanly_create_ipa(unit, app_name, identity, args.provision or cfg.provision_search_query)
    print(ipa, file=out)
    return 0


def run_clean(cfg: AppConfig, environment: Environment, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    tools = XcodeTools(Executor(), out, "Debug", cfg.build_directory, cfg.project_reference(), environment)
    tools.clean_build()
    return 0


def run_targets(cfg: AppConfig, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    for name, t in sorted(cfg.spec_targets.items()):
        print(f"{name}\t{t.type}\t{t.scheme}\t{t.build_sdk}", file=out)
    return 0


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="xcship", description="Build, package and run specs for Xcode projects")
    p.add_argument("--config", default=DEFAULT_CONFIG, help="path to xcship.yml")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_specs = sub.add_parser("specs", help="Build and run a spec target")
    p_specs.add_argument("target")
    p_specs.add_argument("--os-version", default=None)
    p_specs.add_argument("--device-name", default=None)

    p_ipa = sub.add_parser("build-ipa", help="Clean build, package, re-sign and verify an .ipa")
    unit = p_ipa.add_mutually_exclusive_group()
    unit.add_argument("--scheme")
    unit.add_argument("--target")
    p_ipa.add_argument("--app-name")
    p_ipa.add_argument("--identity", help="code signing identity")
    p_ipa.add_argument("--provision", help="provisioning profile search query")
    p_ipa.add_argument("--configuration", default="Release")

    sub.add_parser("clean", help="Remove the build directory")
    sub.add_parser("targets", help="List configured spec targets")

    args = p.parse_args(argv)
    environment = Environment.from_mapping(os.environ)
    try:
        cfg = load_app_config(args.config)
        if args.cmd == "specs":
            return run_specs(cfg, args.target, args.os_version, args.device_name, environment)
        if args.cmd == "build-ipa":
            return run_build_ipa(cfg, args, environment)
        if args.cmd == "clean":
            return run_clean(cfg, environment)
        return run_targets(cfg)
    except XcshipError as e:
        print(describe(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
