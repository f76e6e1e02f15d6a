import pytest

from bitvm import UnmatchedBracketError
from debugger import Debugger


def test_continue_stops_at_breakpoint():
    dbg = Debugger("+;+;+;")
    assert dbg.toggle_breakpoint(3)
    assert dbg.continue_run() == 3
    assert dbg.machine.output_bits == [1]
    assert dbg.continue_run() is None
    assert dbg.machine.output_bits == [1, 0, 1]


def test_toggle_breakpoint():
    dbg = Debugger("+")
    assert dbg.toggle_breakpoint(0)
    assert not dbg.toggle_breakpoint(0)
    assert dbg.breakpoints == set()


def test_step_with_input():
    dbg = Debugger(",;", b"\x01")
    assert dbg.run_step()
    assert dbg.run_step()
    assert not dbg.run_step()
    assert dbg.machine.output_bits == [1]


def test_dump_memory_logical_positions():
    dbg = Debugger("+>+<<")
    dbg.continue_run()
    assert dbg.dump_memory(-2, 4) == [(-2, 0), (-1, 0), (0, 1), (1, 1)]


def test_dump_memory_outside_tape_reads_zero():
    dbg = Debugger("")
    assert dbg.dump_memory(100000, 2) == [(100000, 0), (100001, 0)]


def test_malformed_program():
    with pytest.raises(UnmatchedBracketError):
        Debugger("]")


def test_interactive_session(monkeypatch, capsys):
    commands = iter(["b 3", "c", "s", "m 0 2", "c"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))
    dbg = Debugger("+;+;+;")
    assert dbg.run()
    out = capsys.readouterr().out
    assert "Breakpoint set at 3" in out
    assert "Breakpoint hit at 3" in out
    assert "[+0000]: 0" in out
    assert "Execution finished. Output: 101" in out


def test_interactive_reports_runaway(monkeypatch, capsys):
    import bitvm
    monkeypatch.setattr(bitvm, "MAX_EXECUTION_STEPS", 50)
    monkeypatch.setattr("builtins.input", lambda prompt="": "c")
    dbg = Debugger("+[]")
    assert not dbg.run()
    assert "possible infinite loop" in capsys.readouterr().out
