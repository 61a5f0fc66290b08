"""Operation registry: the catalogue of tools the model may call.

Each operation declares its input shape as a mapping of parameter name to
``ParameterSpec``. The same declaration drives argument validation in the
dispatcher and the JSON schema advertised to the model, so the two can
never disagree.
"""

from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

import structlog

from ledger_agent.tools.errors import (
    DuplicateOperationError,
    OperationNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from ledger_agent.tools.dispatcher import Context

logger = structlog.get_logger(__name__)

ParameterType = Literal["string", "integer", "number", "boolean", "array", "object"]

# Handlers return the success text for the tool result, or raise one of the
# errors in ledger_agent.tools.errors.
Handler = Callable[[dict[str, Any], "Context"], Awaitable[str]]

_PYTHON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
}


@dataclass(frozen=True)
class ParameterSpec:
    """Declared shape of one operation parameter."""

    type: ParameterType
    description: str = ""
    required: bool = True
    enum: tuple[Any, ...] | None = None
    items: "ParameterSpec | None" = None
    non_empty: bool = False

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.items is not None:
            schema["items"] = self.items.to_json_schema()
        if self.non_empty and self.type == "string":
            schema["minLength"] = 1
        return schema

    def check(self, name: str, value: Any) -> list[str]:
        """Return the problems with ``value``, empty when it is acceptable."""
        expected = _PYTHON_TYPES[self.type]
        # bool is an int subclass but never a valid integer or number here
        if not isinstance(value, expected) or (
            isinstance(value, bool) and self.type != "boolean"
        ):
            return [f"'{name}' must be of type {self.type}, got {type(value).__name__}"]
        if self.enum is not None and value not in self.enum:
            allowed = ", ".join(str(v) for v in self.enum)
            return [f"'{name}' must be one of: {allowed}"]
        if self.non_empty and not (value.strip() if isinstance(value, str) else value):
            return [f"'{name}' must not be empty"]
        if self.items is not None:
            problems: list[str] = []
            for index, item in enumerate(value):
                problems.extend(self.items.check(f"{name}[{index}]", item))
            return problems
        return []


@dataclass(frozen=True)
class OperationDescriptor:
    """A named, schema-described callable action."""

    name: str
    description: str
    parameters: MappingProxyType[str, ParameterSpec]
    handler: Handler = field(compare=False)

    @property
    def required(self) -> list[str]:
        return [name for name, spec in self.parameters.items() if spec.required]

    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the operation's argument object."""
        return {
            "type": "object",
            "properties": {
                name: spec.to_json_schema() for name, spec in self.parameters.items()
            },
            "required": self.required,
        }

    def validate(self, arguments: Any) -> dict[str, Any]:
        """Check ``arguments`` against the declared parameters.

        Unknown keys are dropped; the returned bag only holds declared
        parameters.

        Raises:
            ValidationError: With every problem found, not just the first.
        """
        if not isinstance(arguments, dict):
            raise ValidationError(self.name, ["arguments must be an object"])

        problems: list[str] = []
        validated: dict[str, Any] = {}
        for name, spec in self.parameters.items():
            if arguments.get(name) is None:
                if spec.required:
                    problems.append(f"missing required argument '{name}'")
                continue
            value = arguments[name]
            issues = spec.check(name, value)
            if issues:
                problems.extend(issues)
            else:
                validated[name] = value

        if problems:
            raise ValidationError(self.name, problems)
        return validated


class OperationRegistry:
    """Name-unique catalogue of operations, populated once at startup."""

    def __init__(self) -> None:
        self._operations: dict[str, OperationDescriptor] = {}

    def register(
        self,
        name: str,
        description: str,
        parameters: dict[str, ParameterSpec],
        handler: Handler,
    ) -> OperationDescriptor:
        """Add an operation.

        Raises:
            DuplicateOperationError: If ``name`` is already registered.
        """
        if name in self._operations:
            raise DuplicateOperationError(name)
        descriptor = OperationDescriptor(
            name=name,
            description=description,
            parameters=MappingProxyType(dict(parameters)),
            handler=handler,
        )
        self._operations[name] = descriptor
        logger.debug("operation_registered", operation=name)
        return descriptor

    def lookup(self, name: str) -> OperationDescriptor:
        """Get an operation by name.

        Raises:
            OperationNotFoundError: If no operation has that name.
        """
        try:
            return self._operations[name]
        except KeyError:
            raise OperationNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(list(self._operations.values()))

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def names(self) -> list[str]:
        return list(self._operations)
