import logging
import time
from dataclasses import dataclass
from typing import Optional

from tiloop.cursor import PARSE_TIMEOUT_SECONDS, Clock, ParserError
from tiloop.parser import parse
from tiloop.runtime import LOOP_TIMEOUT_SECONDS, ExecutionContext, execute
from tiloop.sinks import MessageSink
from tiloop.variables import CalcRuntimeError, VariableName, VariableObserver, VariableStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    warnings: bool = False
    parse_timeout: float = PARSE_TIMEOUT_SECONDS
    loop_timeout: float = LOOP_TIMEOUT_SECONDS


class Interpreter:
    """One session: a variable store plus the host's sinks, reused across runs"""

    def __init__(
        self,
        sink: MessageSink,
        observer: Optional[VariableObserver] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.sink = sink
        self.clock = clock
        self.variables = VariableStore(observer)

    def run(self, code: str, initial_value: float, options: RunOptions = RunOptions()) -> bool:
        """Returns False if the run was aborted; the reason has been sent to sink.on_fatal_error"""
        try:
            self.variables.reset()
            self.variables.set(VariableName.Ans, initial_value)
            block = parse(
                code,
                on_warning=self.sink.on_warning if options.warnings else None,
                clock=self.clock,
                timeout=options.parse_timeout,
            )
            context = ExecutionContext(
                variables=self.variables,
                sink=self.sink,
                clock=self.clock,
                loop_timeout=options.loop_timeout,
            )
            execute(block, context)
        except (ParserError, CalcRuntimeError) as e:
            logger.info("Run aborted: %s", e)
            self.sink.on_fatal_error(str(e))
            return False
        return True
