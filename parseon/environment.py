from dataclasses import dataclass
from typing import Any, Dict, Iterator
from parseon.errors import ScriptRuntimeError


@dataclass
class Binding:
    value: Any
    is_const: bool = False


class Environment:
    """The single, flat name -> binding mapping of one running program.

    Blocks do not open scopes: variables declared inside a conditional or
    loop body, and loop variables, stay visible after the construct ends.
    """
    def __init__(self):
        self.bindings: Dict[str, Binding] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def __iter__(self) -> Iterator[str]:
        return iter(self.bindings)

    def get(self, name: str, line: int) -> Any:
        if name not in self.bindings:
            raise ScriptRuntimeError(line, f"undefined variable '{name}'")
        return self.bindings[name].value

    def is_const(self, name: str) -> bool:
        return name in self.bindings and self.bindings[name].is_const

    def declare(self, name: str, value: Any, is_const: bool, line: int):
        # set/keep always (re)declare, but never over a keep binding
        if self.is_const(name):
            raise ScriptRuntimeError(line, f"cannot redeclare immutable binding '{name}'")
        self.bindings[name] = Binding(value, is_const)

    def assign(self, name: str, value: Any, line: int):
        if name not in self.bindings:
            raise ScriptRuntimeError(line, f"undefined variable '{name}'")
        binding = self.bindings[name]
        if binding.is_const:
            raise ScriptRuntimeError(line, f"cannot assign to immutable binding '{name}'")
        binding.value = value

    def bind_mutable(self, name: str, value: Any, line: int):
        """Update or create a mutable binding (loop variables, ``ask``)."""
        if self.is_const(name):
            raise ScriptRuntimeError(line, f"cannot assign to immutable binding '{name}'")
        self.bindings[name] = Binding(value, False)
