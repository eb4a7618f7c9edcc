import logging
import time
from dataclasses import dataclass

from tiloop.cursor import Clock
from tiloop.parser import Block, Disp, ForLoop, Statement
from tiloop.sinks import MessageSink
from tiloop.utils import format_number
from tiloop.value import resolve
from tiloop.variables import CalcRuntimeError, VariableStore

logger = logging.getLogger(__name__)

LOOP_TIMEOUT_SECONDS = 10.0


@dataclass
class ExecutionContext:
    variables: VariableStore
    sink: MessageSink
    clock: Clock = time.monotonic
    loop_timeout: float = LOOP_TIMEOUT_SECONDS


def execute(statement: Statement, context: ExecutionContext) -> None:
    if isinstance(statement, Block):
        for child in statement.statements:
            execute(child, context)
    elif isinstance(statement, ForLoop):
        execute_loop(statement, context)
    elif isinstance(statement, Disp):
        context.sink.on_message(format_number(resolve(statement.arg, context.variables)))
    else:
        raise CalcRuntimeError(f"Unexpected statement type: {statement}")


def _should_continue(loop: ForLoop, variables: VariableStore) -> bool:
    step = resolve(loop.step, variables)
    current = variables.get(loop.iterator.name)
    end = resolve(loop.end, variables)
    if step < 0:
        return current >= end
    else:
        return current <= end


def execute_loop(loop: ForLoop, context: ExecutionContext) -> None:
    """TI-BASIC For( semantics, see http://tibasicdev.wikidot.com/for

    Counts towards end inclusively in the direction of step's sign. end and step are
    re-read on every check, so the body may move them.
    """
    variables = context.variables
    iterator = loop.iterator.name
    variables.set(iterator, resolve(loop.start, variables))

    deadline = context.clock() + context.loop_timeout
    iterations = 0
    while _should_continue(loop, variables):
        if context.clock() > deadline:
            logger.debug("For(%s loop stopped by watchdog after %d iteration(s)", iterator, iterations)
            return
        execute(loop.body, context)
        variables.set(iterator, variables.get(iterator) + resolve(loop.step, variables))
        iterations += 1
