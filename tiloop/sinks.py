from dataclasses import dataclass, field
from typing import Protocol


class MessageSink(Protocol):
    def on_message(self, text: str) -> None:
        ...

    def on_warning(self, text: str) -> None:
        ...

    def on_fatal_error(self, text: str) -> None:
        ...


class ConsoleSink:
    def on_message(self, text: str) -> None:
        print(text)

    def on_warning(self, text: str) -> None:
        print(text)

    def on_fatal_error(self, text: str) -> None:
        print(text)


@dataclass
class BufferSink:
    """Keeps everything it is sent, in order"""

    messages: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def on_message(self, text: str) -> None:
        self.messages.append(text)

    def on_warning(self, text: str) -> None:
        self.warnings.append(text)

    def on_fatal_error(self, text: str) -> None:
        self.errors.append(text)
