# tests/test_config_and_cli.py
from __future__ import annotations
import textwrap

import pytest

from contracts.errors import ConfigurationError
from contracts.models import DeviceNameStyle
from engine import __main__ as cli
from engine.audit_log import read_events, record_event, verify_entry
from engine.config import load_app_config

CONFIG = textwrap.dedent("""\
    project_name: Shop
    build_directory: build
    ios_sim_path: /usr/local/bin/ios-sim
    app_name: Shop
    device_name_policy:
      bundle: as_is
    spec_targets:
      specs:
        type: app
        scheme: ShopSpecs
        build_configuration: Debug
        build_sdk: iphonesimulator
        device: iPhone-6
        os_version: 8.1
        timeout: 45
      mac:
        scheme: MacSpecs
        build_sdk: macosx10.9
      ui:
        type: bundle
        scheme: ShopUITests
""")


@pytest.fixture
def config_path(tmp_path):
    p = tmp_path / "xcship.yml"
    p.write_text(CONFIG, encoding="utf-8")
    return p


def test_load_app_config(config_path):
    cfg = load_app_config(str(config_path))
    assert cfg.project_reference().flag() == ["-project", "Shop.xcodeproj"]
    specs = cfg.target("specs")
    assert specs.device_name == "iPhone-6" and specs.os_version == "8.1" and specs.timeout == "45"
    assert cfg.target("mac").is_desktop
    assert cfg.target("ui").type == "bundle"
    assert cfg.device_name_policy.bundle is DeviceNameStyle.as_is
    assert cfg.device_name_policy.app is DeviceNameStyle.dashed


def test_missing_config(tmp_path):
    with pytest.raises(ConfigurationError):
        load_app_config(str(tmp_path / "absent.yml"))


def test_invalid_target_type(tmp_path):
    p = tmp_path / "xcship.yml"
    p.write_text("project_name: A\nspec_targets:\n  x:\n    type: gui\n    scheme: S\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_app_config(str(p))


def test_cli_lists_targets(config_path, capsys):
    assert cli.main(["--config", str(config_path), "targets"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["mac\tapp\tMacSpecs\tmacosx10.9",
                     "specs\tapp\tShopSpecs\tiphonesimulator",
                     "ui\tbundle\tShopUITests\tiphonesimulator"]


def test_cli_reports_config_errors(tmp_path, capsys):
    p = tmp_path / "xcship.yml"
    p.write_text("project_name: A\nworkspace_name: A\n", encoding="utf-8")
    assert cli.main(["--config", str(p), "clean"]) == 1
    assert "[ERR] configuration_error" in capsys.readouterr().err


def test_cli_unknown_target(config_path, capsys):
    assert cli.main(["--config", str(config_path), "specs", "nope"]) == 1
    assert "unknown spec target" in capsys.readouterr().err


def test_run_specs_wires_collaborators(config_path, monkeypatch, out):
    seen = {}

    class StubRunner:
        def __init__(self, o, factory, ios, osx, parser, environment):
            seen["environment"] = environment

        def run(self, cfg, target, overrides):
            seen["target"], seen["overrides"] = target, overrides
            return False

    monkeypatch.setattr(cli, "SpecRunner", StubRunner)
    cfg = load_app_config(str(config_path))
    env = cli.Environment(random_seed="7")
    assert cli.run_specs(cfg, "specs", "9.0", None, env, out) == 1
    assert seen["target"].scheme == "ShopSpecs"
    assert seen["overrides"] == {"os_version": "9.0", "device_name": None}
    assert seen["environment"].random_seed == "7"


def test_audit_entries_are_signed():
    entry = record_event("build.clean", {"dir": "build"})
    assert entry["signature"]["mode"] == "hmac-sha256"
    assert verify_entry(read_events("build.clean")[-1])


def test_build_ipa_requires_xcode(config_path, monkeypatch, capsys):
    monkeypatch.setattr("shutil.which", lambda name: None)
    rc = cli.main(["--config", str(config_path), "build-ipa", "--identity", "iPhone Distribution: Shop"])
    assert rc == 1
    assert "resource_required: xcodebuild" in capsys.readouterr().err


def test_build_ipa_needs_identity(config_path, capsys):
    assert cli.main(["--config", str(config_path), "build-ipa"]) == 2
    assert "--identity" in capsys.readouterr().err
