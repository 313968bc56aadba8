# mosslang

`mosslang` is a small, statically typed expression language. A program is a
syntax tree that is first checked by a type analyzer and then run by an
interpreter that works on an explicit control stack and reads and writes
lines through text streams.

The package has no runtime dependencies.

## What the language has

- Integer, float, string and boolean literals, and lists
- Arithmetic (`+ - * / %`), comparison (`== > < >= <=`) and negation
- Immutable and mutable bindings, with optional type annotations
- Functions (which run in a fresh scope) and closures (which see the
  enclosing scope)
- `if`, `if`/`else` chains, `loop` and `break`
- Built-in functions: `int`, `str`, `push`, `print_line` and `read_line`
- Built-in type names: `Int`, `Float`, `Bool`, `Str`, `Void`, `List` (one
  argument) and `Func` (two arguments)

A block evaluates to the value of its first statement whose value is not
`Void`; the analyzer gives the block that statement's type.

## How it fits together

| Module | Role |
| --- | --- |
| `mosslang.syntax` | Untyped and typed syntax tree nodes |
| `mosslang.typesys` | `Type`, `TypeKind`, `ProtoType` and `TypeBinding` |
| `mosslang.binary_analysis` | `analyze_binary_op`, type checking of binary operators |
| `mosslang.analyzer` | `analyze_program` turns an untyped tree into a typed one |
| `mosslang.interpreter` | `interpret_program` runs a typed tree |
| `mosslang.intrinsics` | The built-in functions and type names |
| `mosslang.scopes` | `ScopeStack` and `ScopeEntry`, nested scopes of bindings |
| `mosslang.state` | `ExecContext`, `IoContext`, `ControlOp` and `ControlFlow` |
| `mosslang.values` | `Void`, `display_value` and `print_string` |
| `mosslang.errors` | `MossTypeError` and `MossRuntimeError` |
| `mosslang.harness` | `analyze_program` and `exec_program` with the standard builtins |

## Running a program

Build a program as a tree of nodes from `mosslang.syntax` — a top-level
`Block` of `Stmt` nodes — and hand it to the helpers in `mosslang.harness`:

```python
import io

from mosslang.harness import analyze_program, exec_program
from mosslang.syntax import (
    BinaryExpr, BinaryOperator, Block, FuncCall, Identifier, Literal, Span, Stmt,
)

nowhere = Span(0, 0)
program = Block(
    (
        Stmt(FuncCall(Identifier("print_line"), (Literal("hello"),), nowhere)),
        Stmt(
            BinaryExpr(
                BinaryOperator.ADD,
                Literal(10),
                BinaryExpr(BinaryOperator.MULT, Literal(5), Literal(2)),
            )
        ),
    ),
    nowhere,
)

typed = analyze_program(program)          # raises MossTypeError
out = io.StringIO()
result = exec_program(typed, io.StringIO(), out)
assert result == 20
assert out.getvalue() == "hello\n"
```

`exec_program` reads lines for `read_line` from the reader and writes
`print_line` output to the writer; both default to the standard streams.
It returns the program's value as a plain Python object: `int`, `float`,
`str`, `bool`, `list`, a `TypedFunc` for a function, or `Void()`.

For full control, call `mosslang.analyzer.analyze_program` and
`mosslang.interpreter.interpret_program` directly with your own builtin
bindings, `ExecContext` and `IoContext`.

`print_line` writes booleans as `true`/`false`, floats in their shortest
decimal form and lists as `[a,b,c]`.

## Errors

- `MossTypeError` is raised by the analyzer: mismatched operand types,
  calls with the wrong signature, assignment to an immutable binding,
  unknown names, a literal division by zero, and so on. Its `kind` is a
  `TypeErrorKind`; `str(error)` gives the message, and
  `error.display(file_name, source)` adds a frame showing the offending
  source text for errors that carry a `Span`.
- `MossRuntimeError` is raised while a program runs: integer overflow
  outside 32 bits, integer division by zero, a failed `int` conversion, or
  a failing input or output stream. Its text is in `message`.

## What it does not do

The package has no parser: programs are built as syntax trees, not read
from source text. It has no command-line tool for running program files.

## Running the tests

```
pip install -e ".[test]"
pytest
```