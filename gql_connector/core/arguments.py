"""Query arguments: what can be configured, and what has been.

ArgumentTypeMapper turns declared-argument introspection data into
ArgumentDescriptor objects. ArgumentConfiguration is the persisted
``{arguments: [{name, fullType, value}]}`` payload that an editor
produces from those descriptors and the fetcher later threads into
queries as variables.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ir import ArgumentDescriptor
from .type_resolver import describe_argument

# Value an editor stores for a list slot that has not been filled in yet
EMPTY_VALUE_PLACEHOLDER = "<none>"


class ArgumentTypeMapper:
    """Maps declared arguments to editor-facing descriptors, dropping unrepresentable ones."""

    def map(self, arg_defs: list[dict[str, Any]]) -> list[ArgumentDescriptor]:
        result = []
        for arg_def in arg_defs:
            descriptor = describe_argument(arg_def)
            if descriptor is not None:
                result.append(descriptor)
        return result


def normalize_value(value: Any) -> Any:
    """Replace editor placeholders with None, also inside lists."""
    if isinstance(value, list):
        return [normalize_value(v) for v in value]
    if value == EMPTY_VALUE_PLACEHOLDER:
        return None
    return value


class ConfiguredArgument(BaseModel):
    """One configured argument value."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    full_type: str = Field(alias="fullType")
    value: Any = None


@dataclass
class MergedArgument:
    """A descriptor paired with its configured value, as an editor displays it."""
    descriptor: ArgumentDescriptor
    value: Any = None
    is_configured: bool = False

    def to_dict(self) -> dict[str, Any]:
        result = self.descriptor.to_dict()
        if self.descriptor.descriptor.is_enum:
            result["enumValues"] = self.descriptor.enum_options()
        result["value"] = self.value
        return result


class ArgumentConfiguration(BaseModel):
    """Configured argument values for one operation.

    Example:
        config = ArgumentConfiguration.from_json('{"arguments": []}')
        config.update_argument(ConfiguredArgument(name="status", full_type="[Status!]", value=["OPEN"]))
        config.to_json()
        # '{"arguments":[{"name":"status","fullType":"[Status!]","value":["OPEN"]}]}'
    """
    arguments: list[ConfiguredArgument] = Field(default_factory=list)

    @classmethod
    def from_json(cls, payload: str | bytes | None) -> "ArgumentConfiguration":
        if not payload:
            return cls()
        return cls.model_validate_json(payload)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def get(self, name: str) -> ConfiguredArgument | None:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None

    def update_argument(self, argument: ConfiguredArgument) -> None:
        """Replace the value of the same-named argument, or append it."""
        existing = self.get(argument.name)
        if existing is None:
            self.arguments.append(argument)
        else:
            existing.value = argument.value

    def delete_argument(self, name: str) -> bool:
        """Remove the named argument. Returns False if it was not configured."""
        for index, argument in enumerate(self.arguments):
            if argument.name == name:
                del self.arguments[index]
                return True
        return False

    def is_dirty(self, original: "ArgumentConfiguration") -> bool:
        """True when this configuration no longer matches the one it was loaded from."""
        return self.model_dump(by_alias=True) != original.model_dump(by_alias=True)

    def missing_required(self, definitions: list[ArgumentDescriptor]) -> list[str]:
        configured = {a.name for a in self.arguments}
        return [d.name for d in definitions if d.is_required and d.name not in configured]

    def is_valid(self, definitions: list[ArgumentDescriptor]) -> bool:
        """True when every required argument has a configured entry."""
        return not self.missing_required(definitions)

    def merge(self, definitions: list[ArgumentDescriptor]) -> list[MergedArgument]:
        """Pair each descriptor with its configured value.

        Unconfigured list arguments start out as an empty list.
        """
        merged = []
        for definition in definitions:
            configured = self.get(definition.name)
            if configured is not None:
                value = normalize_value(configured.value)
            else:
                value = [] if definition.is_list else None
            merged.append(MergedArgument(
                descriptor=definition, value=value, is_configured=configured is not None
            ))
        return merged

    def variables(self) -> list[tuple[str, str, Any]]:
        """(name, full type, value) for every configured argument, placeholders removed."""
        return [(a.name, a.full_type, normalize_value(a.value)) for a in self.arguments]
