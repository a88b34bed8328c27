# rpnssa

An interactive reverse Polish notation calculator. It uses fixed-width
signed integers, single-static-assignment style variables and a small set of
control-flow words.

## Installation

```
pip install .
```

## Running the calculator

```
rpnssa
```

You can also start it with `python -m rpnssa.cli`.

The calculator prints a banner and then the prompt `RPN> `. It reads one
expression per line. Empty lines are skipped, and `quit` or the end of input
ends the session with `Goodbye!`. For each token the calculator prints what it
pushed. It then runs the expression and prints `Result: <value>`. If the
expression cannot be run, it prints `Error: Execution failed`, and the reason
goes to standard error. A token it cannot read is reported as
`Error: Unknown token '...'` or `Error: Unknown variable operation '...'`, and
the expression is not run.

### Tokens

| Token                                   | Meaning                                                     |
|-----------------------------------------|-------------------------------------------------------------|
| `10`, `-3`                              | integer constant, stored in 8, 16, 32 or 64 bits            |
| `$0` ... `$255`                         | variable reference; a higher number is a parse error        |
| `+ - * /`                               | arithmetic (division truncates toward zero)                 |
| `== != < <= > >=`                       | comparison giving 1 or 0                                    |
| `=`                                     | assign: `value $n =` stores the value in `$n`               |
| `ret/N`, `call/N/M`                     | operations with N arguments and M results (M defaults to 1) |
| `if else elif while loop merge end phi` | control-flow words                                          |

### How an expression runs

Execution moves from one operation to the next. The operands of an operation
are the first items that follow the previous operation. Execution stops at the
first `ret/N`. It returns the last of those N operands, which may be a
constant or a variable. If no `ret` is reached, the expression fails.

```
RPN> 7 ret/1              -> Result: 7
RPN> 10 $0 = $0 ret/1     -> Result: 10
RPN> 1 2 ret/2            -> Result: 2
```

## What it does not do

- The results of arithmetic and comparison operators are not pushed back for
  later operations to use. The operators still run, so division by zero is
  still reported as an error. Because of this, `10 20 + ret/1` fails, as
  `ret/1` finds no operand.
- `if` and `while` take as their condition the topmost constant anywhere in
  the expression and remove it. They do not take the result of the preceding
  comparison. Neither skips code when its condition is false. `while` does not
  loop.
- `else` and `end` only open and close blocks. `phi` assigns its target from
  whichever source variable has the highest version.
- `elif`, `loop` and `merge` are logged as not fully supported and are
  otherwise ignored. `call` fails with an error.

## Using it as a library

```python
from rpnssa.parser import parse_expression
from rpnssa.stack import Stack
from rpnssa.executor import execute, ExecutionError

stack = Stack(parse_expression("10 $0 = $0 ret/1"))
result = execute(stack)      # a Const
print(result.int_value())    # 10
```

The modules:

- `rpnssa.parser`: `tokenize`, `parse_token` and `parse_expression` turn text
  into items. They raise `ParseError` on an unknown token. The module also has
  the predicates `is_number`, `is_variable`, `is_operation`, `is_vop` and
  `is_cfop`, plus `parse_vop_syntax` and `determine_bitwidth`.
- `rpnssa.items`: the item types `Const`, `LocalRef`, `OpItem`, `VopItem` and
  `CfOpItem`; the enums `ItemKind`, `Op`, `Vop` and `CfOp`; and
  `make_int_const`.
- `rpnssa.inttype`: `IntType`, `int_type`, `wrap_signed`, `native_size`,
  `sizeof_bits`, `alignof`, and the 64-bit overflow checks
  `would_overflow_add`, `would_overflow_sub` and `would_overflow_mul`.
- `rpnssa.stack`: `Stack` holds the items, up to 256 `Variable` slots and up
  to 128 `Block`s, and raises `StackError`.
- `rpnssa.executor`: `execute(stack)` runs a stack and returns the `Const`
  passed to `ret`. It raises `ExecutionError` on failure. It changes the stack
  as it runs.
- `rpnssa.cli`: `evaluate_line`, `run_repl`, `describe`, and the command
  entry point `main`.

## Running the tests

```
pip install .[test]
pytest
```