# adapters/ios/sign.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import os
from typing import List

from contracts.base import Command

CODESIGN = "/usr/bin/codesign"


def package_command(app_path: str, ipa_path: str, provision_path: str, sdk: str = "iphoneos") -> Command:
    return Command.of("xcrun", "-sdk", sdk, "-v", "PackageApplication", app_path,
                      "-o", ipa_path, "--embed", provision_path)


def resign_commands(work_dir: str, app_name: str, identity: str) -> List[Command]:
    """
    Unpack <app>.ipa into work_dir/Payload, re-sign the bundle keeping its
    identifier and entitlements, and zip it back over the same .ipa.
    """
    payload = os.path.join(work_dir, "Payload")
    return [
        Command.of("rm", "-rf", payload),
        Command.of("unzip", f"{app_name}.ipa", cwd=work_dir),
        Command.of(CODESIGN, "--verify", "--force", "--preserve-metadata=identifier,entitlements",
                   "--sign", identity, os.path.join(payload, f"{app_name}.app")),
        Command.of("zip", "-qr", f"{app_name}.ipa", "Payload", cwd=work_dir),
    ]
