import pytest

from tiloop.parser import parse
from tiloop.runtime import ExecutionContext, execute
from tiloop.sinks import BufferSink
from tiloop.variables import NonFiniteValueError, VariableStore

HUGE_LITERAL = "1" + "0" * 400  # parses to inf


def run_code(code: str, **presets: float) -> tuple[BufferSink, VariableStore, ExecutionContext]:
    variables = VariableStore()
    for name, value in presets.items():
        variables.set(name, value)
    sink = BufferSink()
    context = ExecutionContext(variables=variables, sink=sink)
    execute(parse(code), context)
    return sink, variables, context


@pytest.mark.parametrize(
    "code, expected_output, expected_variables",
    [
        pytest.param("", [], {}),
        pytest.param("Disp 5:Disp ~2.5", ["5", "-2.5"], {}),
        pytest.param("For(A,1,5\nDisp A\nEnd", ["1", "2", "3", "4", "5"], {"A": 6.0}),
        pytest.param("For(A,5,1,~1\nDisp A\nEnd", ["5", "4", "3", "2", "1"], {"A": 0.0}),
        pytest.param("For(A,1,3\nDisp A", ["1", "2", "3"], {"A": 4.0}),
        pytest.param("For(A,5,1\nDisp A\nEnd", [], {"A": 5.0}),
        pytest.param("For(A,1,5,~1\nDisp A\nEnd", [], {"A": 1.0}),
        pytest.param("For(A,3,3\nDisp A\nEnd", ["3"], {"A": 4.0}),
        pytest.param("For(A,0,1,.5\nDisp A\nEnd", ["0", "0.5", "1"], {"A": 1.5}),
        pytest.param(
            "For(A,1,2\nFor(B,1,2\nDisp B\nEnd\nDisp A\nEnd",
            ["1", "2", "1", "1", "2", "2"],
            {"A": 3.0, "B": 3.0},
        ),
        pytest.param("For(theta,1,2\nEnd\nDisp theta", ["3"], {"theta": 3.0}),
    ],
)
def test_execute(code: str, expected_output: list[str], expected_variables: dict[str, float]) -> None:
    sink, variables, _ = run_code(code)
    assert sink.messages == expected_output
    for name, value in variables.as_dict().items():
        assert value == expected_variables.get(name, 0.0)


def test_disp_reads_ans() -> None:
    sink, _, _ = run_code("Disp Ans", Ans=7.25)
    assert sink.messages == ["7.25"]


def test_loop_bounds_from_variables() -> None:
    sink, variables, _ = run_code("For(C,A,B,S\nDisp C\nEnd", A=10.0, B=4.0, S=-3.0)
    assert sink.messages == ["10", "7", "4"]
    assert variables.get("C") == 1.0


def test_end_bound_is_reevaluated() -> None:
    # The innermost loops bump B from 2 to 4 during the first iteration only
    code = "\n".join(
        [
            "For(A,1,B",
            "Disp A",
            "For(C,C,0",
            "For(D,B,B",
            "End",
            "For(B,D,D",
            "End",
            "End",
            "End",
        ]
    )
    sink, variables, _ = run_code(code, B=2.0)
    assert sink.messages == ["1", "2", "3", "4"]
    assert variables.get("B") == 4.0
    assert variables.get("A") == 5.0


def test_step_is_reevaluated() -> None:
    # For(S,2,2) leaves S at 3, so the first increment already uses 3
    sink, variables, _ = run_code("For(A,0,10,S\nDisp A\nFor(S,2,2\nEnd\nEnd", S=1.0)
    assert sink.messages == ["0", "3", "6", "9"]
    assert variables.get("A") == 12.0


def test_non_finite_aborts_execution() -> None:
    variables = VariableStore()
    sink = BufferSink()
    block = parse(f"Disp 1\nFor(A,0,1,{HUGE_LITERAL}\nDisp A\nEnd\nDisp 2")
    with pytest.raises(NonFiniteValueError) as exc_info:
        execute(block, ExecutionContext(variables=variables, sink=sink))
    assert str(exc_info.value) == "Aborted: variable A became non-finite"
    assert sink.messages == ["1", "0"]


class FakeClock:
    def __init__(self, tick: float) -> None:
        self.now = 0.0
        self.tick = tick

    def __call__(self) -> float:
        self.now += self.tick
        return self.now


def test_loop_watchdog_stops_silently() -> None:
    variables = VariableStore()
    sink = BufferSink()
    context = ExecutionContext(variables=variables, sink=sink, clock=FakeClock(tick=1.0), loop_timeout=5.0)
    execute(parse("For(A,0,1,0\nDisp A\nEnd\nDisp 9"), context)
    assert sink.messages[-1] == "9"
    assert set(sink.messages[:-1]) == {"0"}
    assert 0 < len(sink.messages) - 1 <= 5
    assert sink.warnings == []
    assert sink.errors == []


def test_loop_watchdog_is_armed_per_loop() -> None:
    variables = VariableStore()
    sink = BufferSink()
    context = ExecutionContext(variables=variables, sink=sink, clock=FakeClock(tick=1.0), loop_timeout=3.0)
    execute(parse("For(A,1,2\nDisp A\nEnd\nFor(B,1,2\nDisp B\nEnd"), context)
    assert sink.messages == ["1", "2", "1", "2"]


@pytest.mark.parametrize(
    "code, expected_output",
    [
        pytest.param("Disp 100000000000000000000", ["100000000000000000000"]),
        pytest.param("Disp ~100000000000000000000", ["-100000000000000000000"]),
        pytest.param("Disp 1000000000000000000000", ["1e+21"]),
        pytest.param("Disp ~0", ["0"]),
        pytest.param("Disp .125", ["0.125"]),
    ],
)
def test_disp_number_formatting(code: str, expected_output: list[str]) -> None:
    sink, _, _ = run_code(code)
    assert sink.messages == expected_output
