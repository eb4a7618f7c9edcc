import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

PARSE_TIMEOUT_SECONDS = 2.0

Clock = Callable[[], float]


@dataclass
class ParserError(Exception):
    errmsg: str
    lines: list[str]
    line_idx: int
    char_idx: int

    @property
    def position(self) -> str:
        return f"{self.line_idx + 1}:{self.char_idx + 1}"

    def __str__(self) -> str:
        header = f"SyntaxError while parsing at {self.position}: {self.errmsg}"
        if self.line_idx >= len(self.lines):
            return header
        line = self.lines[self.line_idx]
        print_start_idx = max(0, self.char_idx - 20)
        print_ellipsis_pre = print_start_idx > 0
        print_end_idx = min(len(line), self.char_idx + 20)
        print_ellipsis_post = print_end_idx < len(line)
        return "\n".join(
            [
                header,
                (
                    ("..." if print_ellipsis_pre else "")
                    + line[print_start_idx:print_end_idx]
                    + ("..." if print_ellipsis_post else "")
                ),
                " " * (self.char_idx - print_start_idx + (3 if print_ellipsis_pre else 0)) + "^",
            ]
        )


class UnexpectedToken(ParserError):
    pass


class ExpectedValue(ParserError):
    pass


class InvalidIterator(ParserError):
    pass


class UnbalancedEnd(ParserError):
    pass


class NestingTooDeep(ParserError):
    pass


class ParseTimeout(ParserError):
    pass


class Cursor:
    """Position over the source lines with a wall-clock watchdog on every read

    start_of_line is set after a newline or a ":" separator and cleared by consuming
    a token; skipping whitespace leaves it alone, so indented statements are fine.
    """

    def __init__(self, code: str, clock: Clock = time.monotonic, timeout: float = PARSE_TIMEOUT_SECONDS) -> None:
        self.lines = code.split("\n")
        self.line_idx = 0
        self.char_idx = 0
        self.start_of_line = True
        self.clock = clock
        self.deadline = clock() + timeout

    def error(self, error_cls: type[ParserError], errmsg: str) -> ParserError:
        return error_cls(errmsg, lines=self.lines, line_idx=self.line_idx, char_idx=self.char_idx)

    def _check_watchdog(self) -> None:
        if self.clock() > self.deadline:
            raise self.error(ParseTimeout, "Parsing took too long")

    @property
    def current_line(self) -> Optional[str]:
        self._check_watchdog()
        if self.line_idx >= len(self.lines):
            return None
        return self.lines[self.line_idx]

    @property
    def current_char(self) -> Optional[str]:
        line = self.current_line
        if line is None or self.char_idx >= len(line):
            return None
        return line[self.char_idx]

    def rest_of_line(self) -> str:
        line = self.current_line
        return "" if line is None else line[self.char_idx :]

    def advance(self) -> None:
        self.char_idx += 1
        self.start_of_line = False

    def advance_line(self) -> None:
        self.line_idx += 1
        self.char_idx = 0
        self.start_of_line = True

    def at_end_of_line(self) -> bool:
        line = self.current_line
        return line is None or self.char_idx >= len(line)

    def at_end_of_source(self) -> bool:
        return self.current_line is None

    def peek_starts_with(self, text: str) -> bool:
        line = self.current_line
        return line is not None and line.startswith(text, self.char_idx)

    def consume_exact(self, text: str) -> None:
        for expected_char in text:
            if self.current_char != expected_char:
                raise self.error(UnexpectedToken, f"Expected to see {text!r}")
            self.advance()
        self.skip_inline_whitespace()

    def consume_pattern(self, pattern: re.Pattern) -> Optional[str]:
        """Consumes the regex match at the cursor, if any, and returns the matched text"""
        match = pattern.match(self.rest_of_line())
        if match is None or not match.group(0):
            return None
        self.consume_exact(match.group(0))
        return match.group(0)

    def skip_inline_whitespace(self) -> bool:
        skipped = False
        while not self.at_end_of_line() and self.current_char.isspace():  # type: ignore
            self.char_idx += 1
            skipped = True
        return skipped

    def skip_whitespace_across_lines(self) -> bool:
        skipped = False
        while not self.at_end_of_source():
            skipped = self.skip_inline_whitespace() or skipped
            if not self.at_end_of_line():
                break
            self.advance_line()
            skipped = True
        return skipped

    def skip_comments(self) -> bool:
        """Skips whitespace and any run of "//" comment lines after it"""
        skipped = self.skip_whitespace_across_lines()
        while self.peek_starts_with("//"):
            skipped = True
            self.advance_line()
            self.skip_whitespace_across_lines()
        return skipped
