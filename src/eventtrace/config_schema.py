"""
Pydantic-based schema validation for eventtrace configuration.

Goals
- Catch unknown or misspelled keys early (top-level, services, path groups)
- Enforce proper types for the fields the analyzer reads
- Reject root selection regexes that do not compile
- Restrict the graph format to what the renderer accepts
"""
from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

# "none" skips rendering
GraphFormat = Literal["svg", "png", "pdf", "none"]


class PathGroupModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    paths: list[str] = Field(default_factory=list)
    class_regex: Optional[str] = Field(default=None, alias="classRegex")

    @field_validator("class_regex")
    @classmethod
    def _compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid regular expression {value!r}: {e}") from e
        return value


class ServiceModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    name: str
    write_models: PathGroupModel = Field(default_factory=PathGroupModel, alias="writeModels")
    utils: PathGroupModel = Field(default_factory=PathGroupModel)
    providers: PathGroupModel = Field(default_factory=PathGroupModel)
    handlers: PathGroupModel = Field(default_factory=PathGroupModel)


class ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)
    version: Optional[str] = None
    output: Optional[str] = None
    format: Optional[GraphFormat] = None
    include_executions: Optional[bool] = None
    services: list[ServiceModel] = Field(default_factory=list)


def validate_config_data(data: dict) -> ConfigModel:
    """Validate loaded config data.

    Raises:
        ConfigError: wrapping the pydantic ValidationError.
    """
    try:
        return ConfigModel.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration:\n{e}") from e
