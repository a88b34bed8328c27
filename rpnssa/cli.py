"""Interactive read-evaluate-print loop for RPN expressions."""

from __future__ import annotations

import sys
from typing import Optional, Sequence, TextIO

from .executor import ExecutionError, execute
from .items import CfOpItem, Const, LocalRef, OpItem, VopItem
from .parser import ParseError, parse_token, tokenize
from .stack import Item, Stack

_BANNER = """\
RPN Calculator with SSA Variables and Control Flow
===================================================
Supported operators: +, -, *, /, ==, !=, <, <=, >, >=
Variables: $0, $1, $2, ... (SSA with block-based versioning)
Assignment: = (assigns top stack value to variable)
Return: ret/argcount (returns values and stops execution)
Control Flow: if, else, while, loop, end
Phi Nodes: phi (for SSA variable merging)
Example: "10 $0 = 20 $0 + ret/1" assigns 10 to $0, then returns $0 + 20
Example: "5 3 > if 100 ret/1 else 200 ret/1 end" returns 100 if 5>3, else 200
Example: "0 $0 = while $0 10 < $0 1 + $0 = end $0 ret/1" loop from 0 to 10
Enter 'quit' to exit

"""


def describe(token: str, item: Item) -> str:
    """Line reporting that ``item``, parsed from ``token``, was pushed."""
    if isinstance(item, Const):
        return f"  Pushed number: {item.int_value()}"
    if isinstance(item, LocalRef):
        return f"  Pushed local reference: ${item.variable_id}"
    if isinstance(item, OpItem):
        return f"  Pushed operation: {token} ({item.operation.label()})"
    if isinstance(item, VopItem):
        name = token.split("/", 1)[0]
        return (
            f"  Pushed variable operation: {name}/{item.argcount}/{item.retcount} "
            f"({item.operation.label()})"
        )
    if isinstance(item, CfOpItem):
        return (
            f"  Pushed control flow operation: {token} ({item.operation.label()})"
        )
    raise TypeError(f"cannot describe {item!r}")


def evaluate_line(line: str, out: TextIO) -> Optional[int]:
    """Parse and run one expression, reporting to ``out``.

    Returns the result, or None if parsing or execution failed.
    """
    stack = Stack()
    for token in tokenize(line):
        try:
            item = parse_token(token)
        except ParseError as exc:
            out.write(f"Error: {exc}\n\n")
            return None
        stack.push(item)
        out.write(describe(token, item) + "\n")

    out.write("  Executing RPN expression...\n")
    try:
        result = execute(stack)
    except ExecutionError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        out.write("Error: Execution failed\n\n")
        return None
    value = result.int_value()
    out.write(f"Result: {value}\n\n")
    return value


def run_repl(input_stream: TextIO, output_stream: TextIO) -> None:
    """Read expressions line by line until end of input or ``quit``."""
    output_stream.write(_BANNER)
    while True:
        output_stream.write("RPN> ")
        output_stream.flush()
        line = input_stream.readline()
        if not line:
            break
        expression = line.split("\n", 1)[0]
        if expression == "quit":
            break
        if not expression:
            continue
        evaluate_line(expression, output_stream)
    output_stream.write("Goodbye!\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the interactive calculator on standard input and output."""
    run_repl(sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())