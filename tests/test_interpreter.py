import io

import pytest

from mosslang.analyzer import analyze_program
from mosslang.errors import MossRuntimeError
from mosslang.interpreter import interpret_program
from mosslang.intrinsics import (
    builtin_func_bindings,
    builtin_funcs,
    builtin_type_bindings,
    make_int,
)
from mosslang.state import ExecContext, IoContext
from mosslang.syntax import (
    Assignment,
    BinaryExpr,
    BinaryOperator,
    Block,
    Break,
    Declaration,
    FuncCall,
    FuncDeclare,
    Identifier,
    If,
    IfElse,
    ListExpr,
    Literal,
    Loop,
    Negate,
    Span,
    Stmt,
    TypedBlock,
    TypedLiteral,
)
from mosslang.typesys import ProtoType, Type
from mosslang.values import Void

SPAN = Span(0, 0)
EQ = BinaryOperator.EQ
GT = BinaryOperator.GT
LT = BinaryOperator.LT
ADD = BinaryOperator.ADD
SUB = BinaryOperator.SUB
MULT = BinaryOperator.MULT
DIV = BinaryOperator.DIV
MODULO = BinaryOperator.MODULO


def lit(value):
    return Literal(value)


def ident(name):
    return Identifier(name)


def op(operator, left, right):
    return BinaryExpr(operator, left, right)


def block(*exprs):
    return Block(tuple(Stmt(e) for e in exprs), SPAN)


def let(name, expr, mutable=False):
    return Declaration(name, None, expr, mutable)


def func(params, ret, *body, closure=False):
    return FuncDeclare(
        tuple((name, ProtoType.atomic(ty)) for name, ty in params),
        ProtoType.atomic(ret),
        block(*body),
        closure,
    )


def call(callee, *args):
    return FuncCall(callee, tuple(args), SPAN)


def run(program, stdin=""):
    typed = analyze_program(program, builtin_func_bindings(), builtin_type_bindings())
    out = io.StringIO()
    value = interpret_program(
        typed,
        ExecContext(),
        IoContext(io.StringIO(stdin), out),
        builtin_func_bindings(),
        builtin_funcs(),
    )
    return value, out.getvalue()


def value_of(*exprs):
    return run(block(*exprs))[0]


# Operators


def test_operation_precedence():
    expr = op(SUB, op(ADD, lit(10), op(MULT, lit(5), lit(2))), op(DIV, lit(8), lit(4)))
    assert value_of(expr) == 18


def test_operation_precedence_with_negatives():
    expr = op(
        SUB,
        op(ADD, Negate(lit(10)), op(MULT, Negate(lit(5)), lit(2))),
        op(DIV, Negate(lit(8)), lit(4)),
    )
    assert value_of(expr) == -18


@pytest.mark.parametrize(
    "expr, expected",
    [
        (op(EQ, op(SUB, lit(15), lit(5)), op(ADD, lit(5), lit(5))), True),
        (op(EQ, op(ADD, lit(15), lit(5)), op(ADD, lit(5), lit(5))), False),
        (op(GT, op(ADD, lit(15), lit(5)), op(ADD, lit(5), lit(5))), True),
        (op(GT, op(SUB, lit(15), lit(5)), op(ADD, lit(5), lit(5))), False),
        (op(LT, op(SUB, lit(10), lit(5)), op(ADD, lit(5), lit(5))), True),
        (op(LT, op(ADD, lit(15), lit(5)), op(ADD, lit(5), lit(5))), False),
        (op(EQ, lit(True), lit(True)), True),
        (op(EQ, lit(True), lit(False)), False),
    ],
)
def test_comparisons(expr, expected):
    assert value_of(expr) is expected


def test_string_concatenation():
    assert value_of(op(ADD, lit("hello"), lit(" world"))) == "hello world"


def test_string_concatenation_assigned():
    result = value_of(let("foo", lit("hello")), op(ADD, ident("foo"), lit(" world")))
    assert result == "hello world"


def test_integer_division_truncates_towards_zero():
    assert value_of(let("a", Negate(lit(7))), op(DIV, ident("a"), lit(2))) == -3


def test_integer_remainder_takes_sign_of_dividend():
    assert value_of(let("a", Negate(lit(7))), op(MODULO, ident("a"), lit(2))) == -1


def test_runtime_division_by_zero():
    with pytest.raises(MossRuntimeError, match="Cannot divide by 0."):
        value_of(let("z", lit(0)), op(DIV, lit(1), ident("z")))


def test_integer_overflow_is_an_error():
    with pytest.raises(MossRuntimeError):
        value_of(let("big", lit(2147483647)), op(ADD, ident("big"), lit(1)))


# Assignment


def test_declaration_basic():
    assert value_of(let("foo", op(ADD, lit(2), lit(5))), ident("foo")) == 7


def test_declaration_operated_on():
    result = value_of(let("foo", op(ADD, lit(2), lit(5))), op(ADD, ident("foo"), lit(3)))
    assert result == 10


def test_declaration_function():
    assert value_of(let("foo", func([], "Int", lit(5), closure=True))) is Void()


def test_mutable_assignment():
    result = value_of(
        let("x", lit(1), mutable=True), Assignment("x", lit(5)), ident("x")
    )
    assert result == 5


# Conditions


def test_if_else_basic_true():
    assert value_of(IfElse(lit(True), block(lit(7)), block(lit(8)))) == 7


def test_if_else_basic_false():
    assert value_of(IfElse(lit(False), block(lit(7)), block(lit(8)))) == 8


def test_if_else_declare():
    result = value_of(
        let("foo", IfElse(lit(True), block(lit(7)), block(lit(8)))), ident("foo")
    )
    assert result == 7


def test_if_else_chain():
    chain = IfElse(
        lit(False), block(lit(1)), IfElse(lit(True), block(lit(2)), block(lit(3)))
    )
    assert value_of(chain) == 2


# Functions


def test_non_closure_no_params():
    assert value_of(let("foo", func([], "Int", lit(7))), call(ident("foo"))) == 7


def test_closure_no_params():
    result = value_of(let("foo", func([], "Int", lit(7), closure=True)), call(ident("foo")))
    assert result == 7


def test_non_closure_one_param():
    result = value_of(
        let("foo", func([("x", "Int")], "Int", lit(7))), call(ident("foo"), lit(0))
    )
    assert result == 7


def test_closure_one_param():
    result = value_of(
        let("foo", func([("x", "Int")], "Int", lit(7), closure=True)),
        call(ident("foo"), lit(0)),
    )
    assert result == 7


def test_non_closure_two_params():
    result = value_of(
        let("foo", func([("x", "Int"), ("y", "Int")], "Int", lit(7))),
        call(ident("foo"), lit(0), lit(0)),
    )
    assert result == 7


def test_closure_two_params():
    result = value_of(
        let("foo", func([("x", "Int"), ("y", "Int")], "Int", lit(7), closure=True)),
        call(ident("foo"), lit(0), lit(0)),
    )
    assert result == 7


def test_call_one_arg():
    result = value_of(
        let("foo", func([("x", "Int")], "Int", ident("x"))), call(ident("foo"), lit(7))
    )
    assert result == 7


def test_call_two_args():
    add = func([("x", "Int"), ("y", "Int")], "Int", op(ADD, ident("x"), ident("y")))
    assert value_of(let("add", add), call(ident("add"), lit(7), lit(8))) == 15


def test_call_with_composition():
    add = func([("a", "Int"), ("b", "Int")], "Int", op(ADD, ident("a"), ident("b")))
    sub = func([("a", "Int"), ("b", "Int")], "Int", op(SUB, ident("a"), ident("b")))
    result = value_of(
        let("add", add),
        let("sub", sub),
        call(ident("sub"), call(ident("add"), lit(3), lit(2)), lit(1)),
    )
    assert result == 4


# Scope


def test_search_parent_scope():
    result = value_of(
        let("foo", op(ADD, lit(2), lit(5))),
        let("bar", func([], "Int", ident("foo"), closure=True)),
        call(ident("bar")),
    )
    assert result == 7


# Loops, lists and builtins


def test_loop_runs_until_break():
    body = block(
        If(op(EQ, ident("i"), lit(3)), block(Break())),
        Assignment("i", op(ADD, ident("i"), lit(1))),
    )
    result = value_of(let("i", lit(0), mutable=True), Loop(body), ident("i"))
    assert result == 3


def test_list_items_come_off_the_stack_last_first():
    assert value_of(let("xs", ListExpr((lit(1), lit(2), lit(3)))), ident("xs")) == [
        3,
        2,
        1,
    ]


def test_print_line_writes_to_io():
    value, output = run(block(call(ident("print_line"), lit("hello"))))
    assert value is Void()
    assert output == "hello\n"


def test_read_line_reads_from_io():
    value, _ = run(block(let("line", call(ident("read_line"))), ident("line")), "moss\n")
    assert value == "moss"


# Direct use


def test_empty_program_yields_void():
    result = interpret_program(
        TypedBlock((), Type.VOID),
        ExecContext(),
        IoContext(io.StringIO(), io.StringIO()),
        [],
        builtin_funcs(),
    )
    assert result is Void()


def test_duplicate_builtin_binding_is_an_error():
    with pytest.raises(MossRuntimeError, match='"int"'):
        interpret_program(
            TypedBlock((), Type.VOID),
            ExecContext(),
            IoContext(io.StringIO(), io.StringIO()),
            [("int", make_int()), ("int", make_int())],
            builtin_funcs(),
        )


def test_program_must_be_a_block():
    with pytest.raises(ValueError):
        interpret_program(
            TypedLiteral(1, Type.INT),
            ExecContext(),
            IoContext(io.StringIO(), io.StringIO()),
            [],
            builtin_funcs(),
        )