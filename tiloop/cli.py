import argparse
import logging
import sys

from tiloop.interpreter import Interpreter, RunOptions
from tiloop.sinks import ConsoleSink
from tiloop.utils import format_number


def main(argv=None):
    parser = argparse.ArgumentParser(description="TI-BASIC For( loop interpreter")
    parser.add_argument("filename", help="Path to the script to run")
    parser.add_argument("--ans", type=float, default=0.0, help="Initial value of Ans")
    parser.add_argument("--warnings", action="store_true", help="Show parser warnings")
    parser.add_argument("--show-variables", action="store_true", help="Print non-zero variables after the run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        with open(args.filename, "r") as file:
            code = file.read()
    except FileNotFoundError:
        print(f"Error: File '{args.filename}' not found")
        sys.exit(1)

    interpreter = Interpreter(ConsoleSink())
    ok = interpreter.run(code, args.ans, RunOptions(warnings=args.warnings))

    if args.show_variables:
        for name, value in interpreter.variables.as_dict().items():
            if value != 0.0:
                print(f"{name: >5} = {format_number(value)}")

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
