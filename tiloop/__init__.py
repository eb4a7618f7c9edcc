import logging

from tiloop.interpreter import Interpreter, RunOptions
from tiloop.parser import parse
from tiloop.sinks import BufferSink, ConsoleSink

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["Interpreter", "RunOptions", "parse", "BufferSink", "ConsoleSink"]
