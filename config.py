"""
Configuration management for the cross-stack reference example
"""

import json

import pulumi
from typing import Any, Dict, List

COUPLED = "coupled"
DUMMY_EXPORT = "dummy-export"
DECOUPLED = "decoupled"

DECOUPLING_PHASES = [COUPLED, DUMMY_EXPORT, DECOUPLED]


class Config:
    """Centralized configuration shared by every unit's stack

    Reads the stack's Pulumi config inside a Pulumi program. Scripts running
    outside the engine pass plain ``values`` keyed like the stack config.
    """

    def __init__(self, values: Dict[str, Any] = None):
        self.values = values
        self.config = pulumi.Config() if values is None else None

        # AWS Configuration
        self.aws_region = self._aws_region() or "us-east-1"

        # Stack addressing for StackReference
        self.organization = self._get("organization") or "organization"
        self.project = self._get("project") or "cross-stack-references"

        # Table names (both pairs default to the same literal name)
        self.users_table_name = self._get("users_table_name") or "Users"
        self.config_based_table_name = self._get("config_based_table_name") or "Users"

        # Decoupling of the direct-reference pair
        self.decoupling_phase = self._get("decoupling_phase") or COUPLED

        # Name-based resolution
        self.lookup_table = self._get("lookup_table", "bool") or False
        self.global_indexes = self._get("global_indexes", "object") or []

        # Order function
        self.function_runtime = self._get("function_runtime") or "python3.12"
        self.function_handler = self._get("function_handler") or "handler.handler"
        self.function_code_path = self._get("function_code_path") or "./lambdas/order"
        self.function_memory_size = self._get("function_memory_size", "int") or 128
        self.function_timeout = self._get("function_timeout", "int") or 10

        # Additional tags
        self.additional_tags = self._get("tags", "object") or {}

    def _get(self, key: str, kind: str = "str") -> Any:
        if self.values is not None:
            return self._parse(self.values.get(key), kind)
        getters = {
            "str": self.config.get,
            "bool": self.config.get_bool,
            "int": self.config.get_int,
            "object": self.config.get_object,
        }
        return getters[kind](key)

    @staticmethod
    def _parse(value: Any, kind: str) -> Any:
        # Values read back from a stack's config arrive as strings
        if not isinstance(value, str) or kind == "str":
            return value
        if kind == "bool":
            return value.lower() == "true"
        if kind == "int":
            return int(value)
        return json.loads(value)

    def _aws_region(self) -> str:
        if self.values is not None:
            return self.values.get("aws:region")
        return pulumi.Config("aws").get("region")

    @property
    def common_tags(self) -> Dict[str, str]:
        """Get common tags for all resources"""
        base_tags = {
            "Project": self.project,
            "ManagedBy": "pulumi",
            "Purpose": "cross-stack-reference-example",
        }
        base_tags.update(self.additional_tags)
        return base_tags

    @property
    def function_settings(self) -> Dict[str, object]:
        """Settings passed through to every order function"""
        return {
            "runtime": self.function_runtime,
            "handler": self.function_handler,
            "code_path": self.function_code_path,
            "memory_size": self.function_memory_size,
            "timeout": self.function_timeout,
        }

    @property
    def index_names(self) -> List[str]:
        return list(self.global_indexes)


def get_config(values: Dict[str, Any] = None) -> Config:
    """Get the global configuration instance"""
    return Config(values)
