"""Per-target deployment configuration using Pydantic."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import ConfigLoadError

CONFIG_FILE_NAMES = ("lambda-config.yaml", "lambda-config.yml")
DEFAULT_REGION = "us-west-2"
DEFAULT_HANDLER = "handler.handler"
DEFAULT_RUNTIME = "python3.12"


class ExecutionMode(str, Enum):
    """Selects which entry of a per-mode function name is deployed."""

    DEVELOP = "develop"
    PRODUCTION = "production"


class _RawModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class FixedName(BaseModel):
    """A function name that is the same in every execution mode."""

    model_config = ConfigDict(frozen=True)

    value: str

    def resolve(self, mode: ExecutionMode) -> str:
        return self.value


class PerModeName(_RawModel):
    """A function name keyed by execution mode."""

    model_config = ConfigDict(frozen=True)

    production: Optional[str] = None
    develop: Optional[str] = None

    def resolve(self, mode: ExecutionMode) -> Optional[str]:
        # A missing entry is passed through as None; upload rejects it.
        if mode is ExecutionMode.PRODUCTION:
            return self.production
        return self.develop


FunctionIdentitySpec = Union[FixedName, PerModeName]


class LambdaConfigFile(_RawModel):
    """Contents of a target's lambda-config.yaml. Every key is optional."""

    function_name: Union[str, PerModeName, None] = None
    """Either a plain name or a mapping with 'production' and 'develop' keys."""

    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None

    handler: Optional[str] = None
    """Handler entry point, e.g. 'handler.handler'."""

    runtime: Optional[str] = None
    role: Optional[str] = None
    """IAM role ARN. Only needed when the function does not exist yet."""

    timeout: Optional[int] = None
    memory_size: Optional[int] = None
    description: Optional[str] = None
    publish: bool = False
    environment: Dict[str, str] = Field(default_factory=dict)
    """Lambda environment variables. Scalar values are stored as strings."""

    @field_validator("environment", mode="before")
    @classmethod
    def _stringify_environment(cls, value):
        if not isinstance(value, dict):
            return value
        variables = {}
        for key, item in value.items():
            if isinstance(item, bool):
                item = "true" if item else "false"
            elif isinstance(item, (int, float)):
                item = str(item)
            variables[key] = item
        return variables

    def identity_spec(self, default_name: str) -> FunctionIdentitySpec:
        if isinstance(self.function_name, PerModeName):
            return self.function_name
        if self.function_name:
            return FixedName(value=self.function_name)
        return FixedName(value=default_name)


@dataclass(frozen=True)
class ConfigLoad:
    """Outcome of reading a config file: a parsed config or the reason it failed."""

    config: Optional[LambdaConfigFile] = None
    error: Optional[ConfigLoadError] = None

    def or_empty(self) -> LambdaConfigFile:
        if self.config is None:
            return LambdaConfigFile()
        return self.config


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""


class TargetConfig(BaseModel):
    """Resolved configuration for one deployable target."""

    model_config = ConfigDict(frozen=True)

    function_name: Optional[str]
    """Remote function name. Only None when a per-mode name lacks the active mode."""

    region: str = DEFAULT_REGION
    credentials: Credentials = Field(default_factory=Credentials)
    handler: str = DEFAULT_HANDLER
    runtime: str = DEFAULT_RUNTIME
    role: Optional[str] = None
    timeout: Optional[int] = None
    memory_size: Optional[int] = None
    description: Optional[str] = None
    publish: bool = False
    environment: Dict[str, str] = Field(default_factory=dict)


def find_config_file(target_dir: Union[str, Path]) -> Optional[Path]:
    for name in CONFIG_FILE_NAMES:
        candidate = Path(target_dir) / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(target_dir: Union[str, Path]) -> ConfigLoad:
    """Reads the lambda-config file beside the entry module."""
    path = find_config_file(target_dir)
    if path is None:
        return ConfigLoad(
            error=ConfigLoadError(Path(target_dir) / CONFIG_FILE_NAMES[0], "not found")
        )

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return ConfigLoad(error=ConfigLoadError(path, str(e)))

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return ConfigLoad(
            error=ConfigLoadError(path, f"expected a mapping, got {type(data).__name__}")
        )

    try:
        return ConfigLoad(config=LambdaConfigFile.model_validate(data))
    except ValidationError as e:
        return ConfigLoad(error=ConfigLoadError(path, str(e)))


def resolve(
    target_dir: Union[str, Path], mode: ExecutionMode = ExecutionMode.DEVELOP
) -> TargetConfig:
    """
    Builds the TargetConfig for a target directory.

    A config file that is missing or cannot be parsed resolves exactly like an
    empty one: the function is named after the directory, the region is
    DEFAULT_REGION and the credentials are empty.
    """
    target_name = Path(target_dir).resolve().name
    raw = load_config_file(target_dir).or_empty()

    return TargetConfig(
        function_name=raw.identity_spec(target_name).resolve(mode),
        region=raw.region or DEFAULT_REGION,
        credentials=Credentials(
            access_key_id=raw.access_key_id or "",
            secret_access_key=raw.secret_access_key or "",
            session_token=raw.session_token or "",
        ),
        handler=raw.handler or DEFAULT_HANDLER,
        runtime=raw.runtime or DEFAULT_RUNTIME,
        role=raw.role,
        timeout=raw.timeout,
        memory_size=raw.memory_size,
        description=raw.description,
        publish=raw.publish,
        environment=raw.environment,
    )
