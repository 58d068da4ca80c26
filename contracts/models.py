# contracts/models.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from contracts.errors import ConfigurationError

RANDOM_SEED_VARIABLE = "CEDAR_RANDOM_SEED"
DEFAULT_PROFILE_STORE = "~/Library/MobileDevice/Provisioning Profiles"


# ---- project / workspace ----

class ProjectRef(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["project"] = "project"
    name: str = Field(..., min_length=1)

    def flag(self) -> List[str]:
        return ["-project", f"{self.name}.xcodeproj"]

    @property
    def container(self) -> str:
        return f"{self.name}.xcodeproj"


class WorkspaceRef(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["workspace"] = "workspace"
    name: str = Field(..., min_length=1)

    def flag(self) -> List[str]:
        return ["-workspace", f"{self.name}.xcworkspace"]

    @property
    def container(self) -> str:
        return f"{self.name}.xcworkspace"


ProjectReference = Union[ProjectRef, WorkspaceRef]


def project_reference(project_name: Optional[str] = None,
                      workspace_name: Optional[str] = None) -> ProjectReference:
    """Exactly one of project_name / workspace_name."""
    if bool(project_name) == bool(workspace_name):
        raise ConfigurationError("project_name OR workspace_name required",
                                 detail={"project_name": project_name, "workspace_name": workspace_name})
    if workspace_name:
        return WorkspaceRef(name=workspace_name)
    return ProjectRef(name=project_name)


# ---- scheme / target ----

class Scheme(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["scheme"] = "scheme"
    name: str = Field(..., min_length=1)

    def flag(self) -> List[str]:
        return ["-scheme", self.name]


class Target(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["target"] = "target"
    name: str = Field(..., min_length=1)

    def flag(self) -> List[str]:
        return ["-target", self.name]


BuildUnit = Union[Scheme, Target]


# ---- device names ----

class DeviceNameStyle(str, Enum):
    as_is = "as_is"
    dashed = "dashed"
    spaced = "spaced"

    def apply(self, name: Optional[str]) -> Optional[str]:
        if name is None or self is DeviceNameStyle.as_is:
            return name
        if self is DeviceNameStyle.dashed:
            return name.replace(" ", "-")
        return name.replace("-", " ")


class DeviceNamePolicy(BaseModel):
    """How a device name is rewritten before it reaches each launch path."""
    model_config = ConfigDict(frozen=True)
    app: DeviceNameStyle = DeviceNameStyle.dashed
    bundle: DeviceNameStyle = DeviceNameStyle.spaced


# ---- targets / app config ----

class TargetDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["app", "bundle"] = "app"
    scheme: str = Field(..., min_length=1)
    device_name: Optional[str] = None
    device: Optional[str] = None
    os_version: Optional[str] = None
    timeout: Optional[str] = None
    build_sdk: str = "iphonesimulator"
    build_configuration: str = "Debug"

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            if not data.get("device_name") and data.get("device"):
                data["device_name"] = data["device"]
            if data.get("timeout") is not None:
                data["timeout"] = str(data["timeout"])
            if data.get("os_version") is not None:
                data["os_version"] = str(data["os_version"])
        return data

    @property
    def is_desktop(self) -> bool:
        return "macosx" in self.build_sdk


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    project_name: Optional[str] = None
    workspace_name: Optional[str] = None
    build_directory: str = "build"
    ios_sim_path: str = "ios-sim"
    app_name: Optional[str] = None
    ios_distribution_certificate: Optional[str] = None
    provision_search_query: Optional[str] = None
    device_name_policy: DeviceNamePolicy = DeviceNamePolicy()
    spec_targets: Dict[str, TargetDescriptor] = Field(default_factory=dict)

    def project_reference(self) -> ProjectReference:
        return project_reference(self.project_name, self.workspace_name)

    def target(self, name: str) -> TargetDescriptor:
        try:
            return self.spec_targets[name]
        except KeyError:
            raise ConfigurationError(f"unknown spec target: {name}",
                                     detail={"known": sorted(self.spec_targets)}) from None


# ---- process environment ----

@dataclass(frozen=True)
class Environment:
    """Process environment signals, captured once and injected."""
    is_ci_box: bool = False
    build_artifacts_dir: Optional[str] = None
    random_seed: Optional[str] = None
    profile_store: str = os.path.expanduser(DEFAULT_PROFILE_STORE)

    @classmethod
    def from_mapping(cls, env: Mapping[str, str]) -> "Environment":
        home = env.get("HOME")
        store = env.get("XCSHIP_PROFILE_STORE")
        if not store:
            store = (os.path.join(home, DEFAULT_PROFILE_STORE[2:]) if home
                     else os.path.expanduser(DEFAULT_PROFILE_STORE))
        return cls(
            is_ci_box=bool(env.get("IS_CI_BOX")),
            build_artifacts_dir=env.get("CC_BUILD_ARTIFACTS") or None,
            random_seed=env.get(RANDOM_SEED_VARIABLE),
            profile_store=store,
        )


def merge_environment(scheme_vars: Mapping[str, str], environment: Environment) -> Dict[str, str]:
    """Scheme variables, then the random-seed override from the process env."""
    merged = dict(scheme_vars)
    if environment.random_seed is not None:
        merged[RANDOM_SEED_VARIABLE] = environment.random_seed
    return merged
