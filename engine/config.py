# engine/config.py
from __future__ import annotations
import os
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from contracts.errors import ConfigurationError
from contracts.models import AppConfig

DEFAULT_CONFIG = "xcship.yml"


def load_app_config(path: str = DEFAULT_CONFIG) -> AppConfig:
    if not os.path.exists(path):
        raise ConfigurationError(f"config file not found: {path}", detail={"path": path})
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid yaml in {path}: {e}", detail={"path": path}) from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping", detail={"path": path})
    return parse_app_config(raw)


def parse_app_config(raw: Dict[str, Any]) -> AppConfig:
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"invalid config: {e}", detail={"errors": e.errors(include_url=False)}) from e
