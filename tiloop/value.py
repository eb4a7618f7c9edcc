from dataclasses import dataclass

from tiloop.variables import VariableName, VariableStore


@dataclass(frozen=True)
class Reference:
    """Handle to one of the fixed variables, read only when evaluated"""

    name: VariableName

    def __str__(self) -> str:
        return str(self.name)


Value = float | Reference


def resolve(value: Value, variables: VariableStore) -> float:
    if isinstance(value, Reference):
        return variables.get(value.name)
    return value
