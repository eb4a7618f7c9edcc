from tiloop.cursor import ParserError
from tiloop.parser import parse
from tiloop.runtime import ExecutionContext, execute
from tiloop.sinks import ConsoleSink
from tiloop.variables import CalcRuntimeError, VariableStore

for code in [
    "Disp 5",
    "Disp ~1.5",
    "Disp Ans",
    "For(A,1,5\nDisp A\nEnd",
    "For(A,5,1,~1\nDisp A\nEnd",
    "For(A,1,3):Disp A:End",
    "// comment\nFor(theta,0,1,.5)\n  Disp theta\nEnd",
    "For(A,1,2\nFor(B,1,2\nDisp B\nEnd\nEnd",
    "For(A,1,3\nDisp A",
    "For(Ans,1,5\nEnd",
    "End",
    "Disp 1 Disp 2",
]:
    print("=" * 10)
    print(f"code: {code!r}")
    try:
        block = parse(code, on_warning=print)
    except ParserError as e:
        print(e)
        continue

    print(f"tree: {block}")

    variables = VariableStore()
    print("output:")
    try:
        execute(block, ExecutionContext(variables=variables, sink=ConsoleSink()))
    except CalcRuntimeError as e:
        print(e)
    print(f"variables: {variables}")
