import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tiloop.cursor import (
    PARSE_TIMEOUT_SECONDS,
    Clock,
    Cursor,
    ExpectedValue,
    InvalidIterator,
    NestingTooDeep,
    UnbalancedEnd,
    UnexpectedToken,
)
from tiloop.value import Reference, Value
from tiloop.variables import VARIABLE_SPELLINGS, VariableName

logger = logging.getLogger(__name__)

# longest first, so that e.g. "Ans" is never read as "A" followed by junk
REFERENCE_SPELLINGS = sorted(VARIABLE_SPELLINGS, key=len, reverse=True)

# "~" is the calculator's negative sign, distinct from subtraction
NUMERIC_LITERAL_PATT = re.compile(r"~?(?:\d+(?:\.\d+)?|\.\d+)")

# parsing and execution recurse per For( level, this keeps both well inside the stack
MAX_NESTING_DEPTH = 100


@dataclass(frozen=True)
class Block:
    statements: tuple["Statement", ...] = ()


@dataclass(frozen=True)
class ForLoop:
    iterator: Reference
    start: Value
    end: Value
    body: Block
    step: Value = 1.0


@dataclass(frozen=True)
class Disp:
    arg: Value


Statement = Block | ForLoop | Disp


@dataclass(frozen=True)
class End:
    """Closes the enclosing block; only ever seen by the parser"""


WarningCallback = Callable[[str], None]


@dataclass
class _Parser:
    cursor: Cursor
    on_warning: Optional[WarningCallback] = None
    depth: int = 0
    did_end_warning: bool = False

    def warn(self, message: str) -> None:
        text = f"Warning during parsing at {self.cursor.line_idx + 1}:{self.cursor.char_idx + 1}: {message}"
        logger.warning(text)
        if self.on_warning is not None:
            self.on_warning(text)

    def consume_block(self, nested: bool) -> Block:
        if nested:
            self.depth += 1
            if self.depth > MAX_NESTING_DEPTH:
                raise self.cursor.error(NestingTooDeep, f"More than {MAX_NESTING_DEPTH} nested for-loops")
        statements: list[Statement] = []
        while True:
            statement = self._consume_statement()
            if statement is None:
                break
            if isinstance(statement, End):
                self.depth -= 1
                if self.depth < 0:
                    raise self.cursor.error(UnbalancedEnd, "Too many End statements!")
                return Block(tuple(statements))
            statements.append(statement)

        if nested:
            if not self.did_end_warning:
                self.warn(f"Not enough End statements: {self.depth} unclosed block(s).")
                self.did_end_warning = True
            self.depth -= 1
        return Block(tuple(statements))

    def _skip_junk(self) -> None:
        """Skips blank lines, whitespace, comments and ":" separators before a statement"""
        cursor = self.cursor
        consumed_junk = True
        while consumed_junk and not cursor.at_end_of_source():
            consumed_junk = False
            if cursor.at_end_of_line():
                cursor.advance_line()
                consumed_junk = True
            elif cursor.peek_starts_with(":"):
                cursor.consume_exact(":")
                cursor.start_of_line = True
                consumed_junk = True
            else:
                consumed_junk = cursor.skip_comments()

    def _consume_statement(self) -> Statement | End | None:
        self._skip_junk()
        if self.cursor.at_end_of_source():
            return None
        if self.cursor.peek_starts_with("For("):
            return self._consume_loop()
        if self.cursor.peek_starts_with("Disp "):
            return self._consume_disp()
        if self.cursor.peek_starts_with("End"):
            return self._consume_end()
        raise self.cursor.error(UnexpectedToken, f"Unexpected {self.cursor.rest_of_line()!r}")

    def _require_start_of_line(self, what: str) -> None:
        if not self.cursor.start_of_line:
            raise self.cursor.error(UnexpectedToken, f"Unexpected {what}, it must begin a line")

    def _consume_loop(self) -> ForLoop:
        cursor = self.cursor
        self._require_start_of_line("for-loop")
        cursor.consume_exact("For(")

        iterator = self._consume_reference()
        if iterator is None:
            raise cursor.error(ExpectedValue, "Expected to see a variable name.")
        if iterator.name is VariableName.Ans:
            raise cursor.error(InvalidIterator, "You cannot use Ans as the iterator in a for-loop")

        cursor.consume_exact(",")
        start = self._consume_value()
        cursor.consume_exact(",")
        end = self._consume_value()

        step: Value = 1.0
        if cursor.peek_starts_with(","):
            cursor.consume_exact(",")
            step = self._consume_value()

        # the closing bracket is optional on the calculator
        if cursor.peek_starts_with(")"):
            cursor.consume_exact(")")

        body = self.consume_block(nested=True)
        return ForLoop(iterator=iterator, start=start, end=end, step=step, body=body)

    def _consume_disp(self) -> Disp:
        self._require_start_of_line("Disp statement")
        self.cursor.consume_exact("Disp ")
        return Disp(self._consume_value())

    def _consume_end(self) -> End:
        self._require_start_of_line("End statement")
        self.cursor.consume_exact("End")
        return End()

    def _consume_reference(self) -> Optional[Reference]:
        for spelling in REFERENCE_SPELLINGS:
            if self.cursor.peek_starts_with(spelling):
                self.cursor.consume_exact(spelling)
                return Reference(VariableName[spelling])
        return None

    def _consume_literal(self) -> Optional[float]:
        literal = self.cursor.consume_pattern(NUMERIC_LITERAL_PATT)
        if literal is None:
            return None
        return float(literal.replace("~", "-"))

    def _consume_value(self) -> Value:
        value: Optional[Value] = self._consume_literal()
        if value is None:
            value = self._consume_reference()
        if value is None:
            raise self.cursor.error(ExpectedValue, "Expected to see a numeric literal or a variable name.")
        return value


def parse(
    code: str,
    on_warning: Optional[WarningCallback] = None,
    clock: Clock = time.monotonic,
    timeout: float = PARSE_TIMEOUT_SECONDS,
) -> Block:
    """Parses the whole program into a top-level Block

    Raises one of the ParserError subclasses on the first fatal problem. A missing End
    at the end of the source only produces a warning, passed to on_warning if given.
    """
    parser = _Parser(cursor=Cursor(code, clock=clock, timeout=timeout), on_warning=on_warning)
    block = parser.consume_block(nested=False)
    logger.debug("Parsed %d top-level statement(s)", len(block.statements))
    return block
