"""
Defines the abstract syntax tree (AST) node structure for the MASH language.

The parser produces three disjoint node families:

    Stmt:
        Statements (`FunctionDef`, `If`, `Assign`, `Try`, ...). A statement owns
        its nested statements and expressions.

    Expr:
        Expressions (`Literal`, `Binary`, `Call`, `Tuple`, ...).

    Target:
        Assignable forms used on the left of `=` and after `for`/`del`
        (`NameTarget`, `TupleTarget`, `AttributeTarget`). Kept apart from `Expr`
        so a literal or call can never appear as an assignment target.

All nodes are frozen dataclasses: they are built once by the parser and never
changed afterwards. Binary and unary operators are stored as the `TokenKind`
of the operator token.

Each node can be converted to plain Python data with `to_dict()`, suitable for
JSON output or structural assertions in tests.

Example:
    >>> Assign(NameTarget("x"), Variable("y")).to_dict()["value"]
    {'kind': 'Variable', 'name': 'y'}
    >>> Assign(NameTarget("x"), Variable("y")).to_dict()["kind"]
    'Assign'
"""

from dataclasses import dataclass, field, fields
from typing import Any

from mash.mash_constants import TokenKind
from mash.mash_lexer import LiteralValue

NodeDict = dict[str, Any]


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, TokenKind):
        return value.value
    if isinstance(value, LiteralValue):
        return {"type": type(value).__name__, "value": value.value}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


class Node:
    def to_dict(self) -> NodeDict:
        """Converts the node and all descendants into nested dictionaries."""
        out: NodeDict = {"kind": type(self).__name__}
        for f in fields(self):  # type: ignore[arg-type]
            out[f.name] = _serialize(getattr(self, f.name))
        return out


class Expr(Node):
    pass


class Stmt(Node):
    pass


class Target(Node):
    pass


# --- Expressions ----------------------------------------------------------


@dataclass(frozen=True)
class Literal(Expr):
    value: LiteralValue


@dataclass(frozen=True)
class Variable(Expr):
    name: str


@dataclass(frozen=True)
class Unary(Expr):
    op: TokenKind
    operand: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    op: TokenKind
    right: Expr


@dataclass(frozen=True)
class Grouping(Expr):
    inner: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    args: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class Tuple(Expr):
    items: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class List(Expr):
    items: list[Expr] = field(default_factory=list)


@dataclass(frozen=True)
class Dict(Expr):
    pairs: list[tuple[Expr, Expr]] = field(default_factory=list)


@dataclass(frozen=True)
class Get(Expr):
    object: Expr
    name: str


@dataclass(frozen=True)
class Set(Expr):
    """Attribute store `object.name = value` in expression form.

    The parser itself lowers attribute assignment to `Assign` with an
    `AttributeTarget`; this node exists for consumers that rewrite trees.
    """

    object: Expr
    name: str
    value: Expr


@dataclass(frozen=True)
class Lambda(Expr):
    params: list[str]
    body: Expr


@dataclass(frozen=True)
class Index(Expr):
    object: Expr
    index: Expr


# --- Targets --------------------------------------------------------------


@dataclass(frozen=True)
class NameTarget(Target):
    name: str


@dataclass(frozen=True)
class TupleTarget(Target):
    targets: list[Target] = field(default_factory=list)


@dataclass(frozen=True)
class AttributeTarget(Target):
    object: Expr
    name: str


# --- Statements -----------------------------------------------------------


@dataclass(frozen=True)
class FunctionDef(Stmt):
    name: str
    params: list[str]
    body: list[Stmt]


@dataclass(frozen=True)
class ClassDef(Stmt):
    name: str
    base: Expr | None
    body: list[Stmt]


@dataclass(frozen=True)
class Return(Stmt):
    value: Expr | None = None


@dataclass(frozen=True)
class Expression(Stmt):
    expr: Expr


@dataclass(frozen=True)
class If(Stmt):
    """Conditional. An `elif` is stored as a nested `If` that is the only
    statement of `else_branch`."""

    condition: Expr
    then_branch: list[Stmt]
    else_branch: list[Stmt] | None = None


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: list[Stmt]


@dataclass(frozen=True)
class Print(Stmt):
    expr: Expr


@dataclass(frozen=True)
class Assign(Stmt):
    target: Target
    value: Expr


@dataclass(frozen=True)
class For(Stmt):
    target: Target
    iterable: Expr
    body: list[Stmt]


@dataclass(frozen=True)
class Block(Stmt):
    body: list[Stmt]


@dataclass(frozen=True)
class Import(Stmt):
    names: list[str]


@dataclass(frozen=True)
class FromImport(Stmt):
    module: str
    names: list[str]


@dataclass(frozen=True)
class Global(Stmt):
    names: list[str]


@dataclass(frozen=True)
class ExceptClause(Node):
    exception_type: Expr | None
    body: list[Stmt]


@dataclass(frozen=True)
class Try(Stmt):
    body: list[Stmt]
    except_clauses: list[ExceptClause] = field(default_factory=list)


@dataclass(frozen=True)
class Raise(Stmt):
    exception: Expr | None = None


@dataclass(frozen=True)
class Del(Stmt):
    target: Target


@dataclass(frozen=True)
class Pass(Stmt):
    pass


@dataclass(frozen=True)
class Break(Stmt):
    pass


@dataclass(frozen=True)
class Continue(Stmt):
    pass


__all__ = [
    "AttributeTarget",
    "Assign",
    "Binary",
    "Block",
    "Break",
    "Call",
    "ClassDef",
    "Continue",
    "Del",
    "Dict",
    "ExceptClause",
    "Expr",
    "Expression",
    "For",
    "FromImport",
    "FunctionDef",
    "Get",
    "Global",
    "Grouping",
    "If",
    "Import",
    "Index",
    "Lambda",
    "List",
    "Literal",
    "NameTarget",
    "Node",
    "NodeDict",
    "Pass",
    "Print",
    "Raise",
    "Return",
    "Set",
    "Stmt",
    "Target",
    "Try",
    "Tuple",
    "TupleTarget",
    "Unary",
    "Variable",
    "While",
]
