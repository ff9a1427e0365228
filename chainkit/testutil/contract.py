"""Generation of Solidity test contracts with events and callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from chainkit.types import keccak256

_HEADER = (
    "pragma solidity ^0.5.5;\n"
    "pragma experimental ABIEncoderV2;\n"
    "\n"
    "contract Sample {\n"
)


@dataclass
class _EventField:
    indexed: bool
    type_name: str


@dataclass
class Event:
    """A test event with typed, optionally indexed fields."""

    name: str
    fields: list[_EventField] = field(default_factory=list)

    def add(self, type_name: str, indexed: bool) -> "Event":
        """Append a field and return the event."""
        self.fields.append(_EventField(indexed, type_name))
        return self

    def declaration(self) -> str:
        """Return the event declaration."""
        args = []
        for index, item in enumerate(self.fields):
            arg = item.type_name
            if item.indexed:
                arg += " indexed"
            args.append(f"{arg} val_{index}")
        return f"event {self.name}({', '.join(args)});"

    def setter(self) -> str:
        """Return a function that emits the event with its arguments."""
        params = []
        body = []
        for index, item in enumerate(self.fields):
            type_name = item.type_name
            if type_name == "string" or "[" in type_name:
                type_name += " memory"
            params.append(f"{type_name} val_{index}")
            body.append(f"val_{index}")
        return (
            f"function setter{self.name}({', '.join(params)}) public payable {{\n"
            f"emit {self.name}({', '.join(body)});\n"
            "}"
        )

    def signature(self) -> str:
        """Return the 0x-prefixed Keccak-256 of the event signature."""
        text = f"{self.name}({','.join(item.type_name for item in self.fields)})"
        return "0x" + keccak256(text.encode("utf-8")).hex()


def new_event(name: str, *args) -> Event:
    """Create an event from alternating type names and indexed flags."""
    if len(args) % 2:
        raise ValueError("it should be even")
    event = Event(name)
    for type_name, indexed in zip(args[::2], args[1::2]):
        if not isinstance(type_name, str) or not isinstance(indexed, bool):
            raise TypeError("expected pairs of type name and indexed flag")
        event.add(type_name, indexed)
    return event


class Contract:
    """A test contract assembled from code fragments."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.callbacks: list[Callable[[], str]] = []

    def add_event(self, event: Event) -> None:
        """Declare an event and a setter function that emits it."""
        self.add_callback(event.declaration)
        self.add_callback(event.setter)
        self.events.append(event)

    def get_event(self, name: str) -> Optional[Event]:
        """Return the event called ``name``, if any."""
        return next((e for e in self.events if e.name == name), None)

    def add_callback(self, callback: Callable[[], str]) -> None:
        """Add a fragment of contract code produced by ``callback``."""
        self.callbacks.append(callback)

    def render(self) -> str:
        """Return the contract source."""
        return _HEADER + "".join(cb() + "\n" for cb in self.callbacks) + "}"

    def add_constructor(self, *args: str) -> None:
        """Add a constructor that stores each argument in a public variable."""

        def fragment() -> str:
            variables = "".join(f"{arg} public val_{i};\n" for i, arg in enumerate(args))
            inputs = ",".join(f"{arg} local_{i}" for i, arg in enumerate(args))
            body = "".join(f"val_{i} = local_{i};\n" for i in range(len(args)))
            return variables + f"constructor({inputs}) public {{\n" + body + "}"

        self.add_callback(fragment)

    def add_dual_caller(self, func_name: str, *args: str) -> None:
        """Add a view function that returns the values it takes."""

        def fragment() -> str:
            names = [f"val_{i}" for i in range(len(args))]
            params = ",".join(f"{arg} {name}" for arg, name in zip(args, names))
            return (
                f"function {func_name}({params}) public view returns ({','.join(args)}) {{\n"
                f"return ({','.join(names)});\n"
                "}"
            )

        self.add_callback(fragment)

    def add_output_caller(self, func_name: str) -> None:
        """Add a view function without inputs that returns 1."""
        self.add_callback(
            lambda: f"function {func_name} () public view returns (uint256) {{\n"
            "\t\t\treturn 1;\n"
            "\t\t}"
        )

    def emit_event(self, func_name: str, name: str, *args: str) -> None:
        """Add a function that emits event ``name`` with literal arguments."""
        if self.get_event(name) is None:
            raise ValueError(f"event {name} does not exists")
        self.add_callback(
            lambda: f"function {func_name}() public payable {{\n"
            f"emit {name}({', '.join(args)});\n"
            "}"
        )