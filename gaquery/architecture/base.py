"""Base models for gaquery configuration and query-tree classes with YAML support."""

from __future__ import annotations

from typing import Any, Self

import yaml
from pydantic import BaseModel, ConfigDict


class ConfigBaseModel(BaseModel):
    """Base model for all gaquery pydantic classes.

    Provides YAML serialization/deserialization and the standard
    configuration shared by configuration objects and query-tree nodes.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        use_enum_values=True,
        validate_assignment=True,
    )

    @classmethod
    def from_yaml(cls, path: str) -> Self:
        """Load a single instance from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    @classmethod
    def from_yaml_str(cls, text: str) -> Self:
        """Load a single instance from a YAML document."""
        return cls.model_validate(yaml.safe_load(text))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | list[Any]) -> Self:
        """Load from a dictionary (or list for list-form nodes)."""
        return cls.model_validate(data)

    def to_yaml_str(self, **kwargs: Any) -> str:
        """Convert instance to a YAML string."""
        return yaml.safe_dump(
            self.to_dict(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            **kwargs,
        )

    def to_dict(self, **kwargs: Any) -> dict[str, Any]:
        """Convert instance to a dictionary keyed by wire names."""
        return self.model_dump(by_alias=True, exclude_none=True, **kwargs)


class NodeBaseModel(ConfigBaseModel):
    """Immutable query-tree node.

    Tree rewriting passes build new trees with ``model_copy`` instead of
    mutating nodes in place.
    """

    model_config = ConfigDict(frozen=True, validate_assignment=False)
