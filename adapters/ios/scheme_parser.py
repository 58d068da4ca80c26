# adapters/ios/scheme_parser.py
from __future__ import annotations
import glob
import os
import xml.etree.ElementTree as ET
from typing import Dict, Optional

from contracts.errors import ConfigurationError
from contracts.models import ProjectReference


class SchemeParser:
    def __init__(self, root: str = "."):
        self.root = root

    def scheme_path(self, scheme: str, project: ProjectReference) -> Optional[str]:
        container = os.path.join(self.root, project.container)
        direct = os.path.join(container, "xcshareddata", "xcschemes", f"{scheme}.xcscheme")
        if os.path.isfile(direct):
            return direct
        # user schemes live under xcuserdata/<user>.xcuserdatad/xcschemes
        found = sorted(glob.glob(os.path.join(container, "**", f"{scheme}.xcscheme"), recursive=True))
        return found[0] if found else None

    def parse_environment_variables(self, scheme: str, project: ProjectReference) -> Dict[str, str]:
        path = self.scheme_path(scheme, project)
        if path is None:
            return {}
        try:
            tree = ET.parse(path)
        except ET.ParseError as e:
            raise ConfigurationError(f"unreadable scheme file {path}: {e}") from e
        out: Dict[str, str] = {}
        for var in tree.getroot().iterfind("./LaunchAction/EnvironmentVariables/EnvironmentVariable"):
            if var.get("isEnabled", "YES") != "YES":
                continue
            key = var.get("key")
            if key:
                out[key] = var.get("value", "")
        return out
