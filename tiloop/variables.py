"""Fixed set of calculator variables: Ans, A through Z and theta"""
import logging
import math
import string
from dataclasses import dataclass
from typing import Optional, Protocol

from tiloop.utils import PrintableEnum

logger = logging.getLogger(__name__)

VARIABLE_SPELLINGS = ["Ans", *string.ascii_uppercase, "theta"]

VariableName = PrintableEnum("VariableName", [(spelling, spelling) for spelling in VARIABLE_SPELLINGS])  # type: ignore


class CalcRuntimeError(Exception):
    pass


@dataclass
class UnknownVariableError(CalcRuntimeError):
    name: str

    def __str__(self) -> str:
        return f"Unknown variable: {self.name!r}"


@dataclass
class NonFiniteValueError(CalcRuntimeError):
    name: str
    value: float

    def __str__(self) -> str:
        return f"Aborted: variable {self.name} became non-finite"


class VariableObserver(Protocol):
    def on_variable_changed(self, name: VariableName, value: float) -> None:
        ...


def to_variable_name(name: "VariableName | str") -> VariableName:
    if isinstance(name, VariableName):
        return name
    try:
        return VariableName[name]
    except KeyError:
        raise UnknownVariableError(name) from None


class VariableStore:
    def __init__(self, observer: Optional[VariableObserver] = None) -> None:
        self.observer = observer
        self._values: dict[VariableName, float] = {name: 0.0 for name in VariableName}

    def get(self, name: "VariableName | str") -> float:
        return self._values[to_variable_name(name)]

    def set(self, name: "VariableName | str", value: float) -> None:
        """Raises NonFiniteValueError on infinity or NaN, the observer is not notified in that case"""
        name = to_variable_name(name)
        self._values[name] = value
        if not math.isfinite(value):
            logger.info("Variable %s became non-finite (%r)", name, value)
            raise NonFiniteValueError(name=str(name), value=value)
        if self.observer is not None:
            self.observer.on_variable_changed(name, value)

    def reset(self) -> None:
        for name in VariableName:
            self._values[name] = 0.0
        if self.observer is not None:
            for name in VariableName:
                self.observer.on_variable_changed(name, 0.0)

    def as_dict(self) -> dict[str, float]:
        return {str(name): value for name, value in self._values.items()}

    def __repr__(self) -> str:
        nonzero = {k: v for k, v in self.as_dict().items() if v != 0.0}
        return f"VariableStore({nonzero!r})"
