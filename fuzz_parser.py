import random
import traceback

from tiloop.interpreter import Interpreter, RunOptions
from tiloop.sinks import BufferSink

if __name__ == "__main__":
    alphabet = ["For(", "Disp ", "End", ":", "//", ",", ")", "~", ".", "1", "5", "A", "B", "Ans", "theta", " ", "\n"]
    options = RunOptions(warnings=True, parse_timeout=1.0, loop_timeout=0.1)

    def generate(length: int) -> str:
        return "".join(random.choices(alphabet, k=length))

    while True:
        code = generate(15)
        sink = BufferSink()
        try:
            Interpreter(sink).run(code, initial_value=random.uniform(-10, 10), options=options)
        except Exception:
            # anything escaping run() is a bug, fatal errors must go to the sink
            print(f"{code!r}\n{traceback.format_exc()}\n")
            continue
        if len(sink.warnings) > 1:
            print(f"{code!r}\nmore than one warning: {sink.warnings}\n\n")
