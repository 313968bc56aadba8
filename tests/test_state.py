import io

import pytest

from mosslang.errors import MossRuntimeError
from mosslang.state import ControlFlow, ControlOp, ExecContext, IoContext, OpKind


class _FailingWriter:
    def write(self, text):
        raise OSError("disk gone")

    def flush(self):
        pass


class _FailingFlushWriter:
    def __init__(self):
        self.parts = []

    def write(self, text):
        self.parts.append(text)

    def flush(self):
        raise OSError("cannot flush")


class _FailingReader:
    def readline(self):
        raise OSError("no input")


def test_write_line_appends_newline():
    out = io.StringIO()
    ctx = IoContext(reader=io.StringIO(), writer=out)
    ctx.write_line("hello")
    ctx.write_line("world")
    assert out.getvalue() == "hello\nworld\n"


def test_read_line_strips_line_endings():
    ctx = IoContext(reader=io.StringIO("first\nsecond\r\nthird"), writer=io.StringIO())
    assert ctx.read_line() == "first"
    assert ctx.read_line() == "second"
    assert ctx.read_line() == "third"


def test_read_line_at_end_of_input_is_empty():
    ctx = IoContext(reader=io.StringIO(""), writer=io.StringIO())
    assert ctx.read_line() == ""


def test_read_line_keeps_lone_carriage_return():
    ctx = IoContext(reader=io.StringIO("abc\r"), writer=io.StringIO())
    assert ctx.read_line() == "abc\r"


def test_write_failure_raises_runtime_error():
    ctx = IoContext(reader=io.StringIO(), writer=_FailingWriter())
    with pytest.raises(MossRuntimeError) as info:
        ctx.write_line("x")
    assert info.value.message.startswith("Failed to write in IoContext: ")


def test_flush_failure_raises_runtime_error():
    writer = _FailingFlushWriter()
    ctx = IoContext(reader=io.StringIO(), writer=writer)
    with pytest.raises(MossRuntimeError) as info:
        ctx.write_line("x")
    assert info.value.message.startswith("Failed to flush in IoContext: ")
    assert "".join(writer.parts) == "x\n"


def test_read_failure_raises_runtime_error():
    ctx = IoContext(reader=_FailingReader(), writer=io.StringIO())
    with pytest.raises(MossRuntimeError) as info:
        ctx.read_line()
    assert info.value.message.startswith("Failed to read_line in IoContext: ")


def test_exec_context_starts_empty():
    ctx = ExecContext()
    assert ctx.control_stack == []
    assert ctx.value_stack == []


def test_exec_context_scope_raises_runtime_errors():
    ctx = ExecContext()
    ctx.scope_stack.insert("x", False, 3)
    assert ctx.scope_stack.lookup("x").value == 3
    with pytest.raises(MossRuntimeError):
        ctx.scope_stack.lookup("missing")
    with pytest.raises(MossRuntimeError):
        ctx.scope_stack.insert("x", False, 4)


def test_exec_contexts_do_not_share_stacks():
    first = ExecContext()
    second = ExecContext()
    first.control_stack.append(ControlOp(OpKind.APPLY_STMT))
    first.value_stack.append(1)
    assert second.control_stack == []
    assert second.value_stack == []


def test_control_op_equality_uses_kind_and_payload():
    assert ControlOp(OpKind.APPLY_BINDING, "a") == ControlOp(OpKind.APPLY_BINDING, "a")
    assert ControlOp(OpKind.APPLY_BINDING, "a") != ControlOp(OpKind.APPLY_BINDING, "b")
    assert ControlOp(OpKind.PUSH_SCOPE, True) != ControlOp(OpKind.POP_SCOPE, True)
    assert ControlOp(OpKind.MARK_LOOP_START).payload is None


def test_control_flow_members_are_distinct():
    looked_up = [ControlFlow(member.value) for member in ControlFlow]
    assert looked_up == [ControlFlow.CONTINUE, ControlFlow.BREAK, ControlFlow.RETURN]
    assert len(set(looked_up)) == 3