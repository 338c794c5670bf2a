"""
MASH Language Parser

Parses the token list produced by `mash.mash_lexer` into a list of top-level
statements (see `mash.mash_ast`).

The parser is a hand-written recursive descent parser. Statements are chosen
by their leading keyword; expressions are parsed by precedence climbing, one
method per precedence level, each calling the next tighter level for its
operands.

Supported Constructs
--------------------
- Statements:
    * Definitions: `def`, `class`
    * Imports: `import a, b.c`, `from a import b, c`
    * Control flow: `if`/`elif`/`else`, `while`, `for ... in`, `try`/`except`
    * Simple: `return`, `print`, `pass`, `break`, `continue`, `global`, `del`, `raise`
    * Assignments (`x = 1`, `a, b = b, a`, `obj.attr = v`) and expression statements

- Expressions, loosest to tightest:
    * `or`, `and`, `|`, `^`, `&`
    * `==`, `!=`, then `<`, `<=`, `>`, `>=`, `is`
    * `+`, `-`, then `*`, `/`, `%`, then `**` (right-associative)
    * unary `-`, `not`, `~`
    * postfix calls `f(x)`, attributes `a.b`, indexing `a[i]`
    * literals, names, `(...)` groupings and tuples, `[...]` lists,
      `{k: v}` dicts, `lambda a, b: expr`

Parser Behavior
---------------
- Blocks are `':' NEWLINE INDENT statement* DEDENT`.
- `elif` is stored as an `If` nested as the only statement of the else branch.
- `(x)` is a `Grouping`; `()`, `(x,)` and `(x, y)` are tuples.
- A malformed statement raises `ParseError` inside the parser. The top-level
  loop records it as a diagnostic, skips one token and carries on, so later
  statements are still parsed.
- Nesting deeper than `MAX_NESTING_DEPTH` (parentheses, brackets, unary
  operators, `**` chains, blocks) fails the statement the same way.

Entry Points
------------
- `Parser.parse()`: Parse a full token list into statements.
- `Parser.parse_statement()`: Parse one statement at the cursor.
- `Parser.parse_expression()`: Parse one expression at the cursor.
- `parse(tokens)`, `parse_source(source)`: module-level shortcuts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from mash.mash_ast import (
    Assign,
    AttributeTarget,
    Binary,
    Break,
    Call,
    ClassDef,
    Continue,
    Del,
    Dict,
    ExceptClause,
    Expr,
    Expression,
    For,
    FromImport,
    FunctionDef,
    Get,
    Global,
    Grouping,
    If,
    Import,
    Index,
    Lambda,
    List,
    Literal,
    NameTarget,
    Pass,
    Print,
    Raise,
    Return,
    Stmt,
    Target,
    Try,
    Tuple,
    TupleTarget,
    Unary,
    Variable,
    While,
)
from mash.mash_constants import MAX_NESTING_DEPTH, TokenKind
from mash.mash_diagnostics import Diagnostics, ParseError
from mash.mash_lexer import Token, analyze

logger = logging.getLogger(__name__)

K = TokenKind

# Operator groups per precedence level, loosest first.
EQUALITY_OPS = (K.EQUAL_EQUAL, K.NOT_EQUAL)
COMPARISON_OPS = (K.LESS, K.LESS_EQUAL, K.GREATER, K.GREATER_EQUAL, K.IS)
TERM_OPS = (K.PLUS, K.MINUS)
FACTOR_OPS = (K.STAR, K.SLASH, K.PERCENT)
UNARY_OPS = (K.MINUS, K.NOT, K.TILDE)
LITERAL_TOKENS = (K.INT, K.FLOAT, K.STRING)


class Parser:
    """
    MASH Parser Class

    Holds the token list and a cursor into it. Every production reads tokens
    at the cursor and either returns a node or raises `ParseError`; nothing
    else is kept between calls.

    Attributes
    ----------
    tokens : list[Token]
        The input token list, expected to end with an EOF token.
    position : int
        Current index into the token list.
    diagnostics : Diagnostics
        Sink for statements that had to be dropped.
    """

    def __init__(
        self, tokens: list[Token], diagnostics: Diagnostics | None = None
    ) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.depth: int = 0

    # --- cursor helpers ---------------------------------------------------

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        last = self.tokens[-1] if self.tokens else None
        if last is None:
            return Token(K.EOF)
        return Token(K.EOF, None, last.end, last.end, last.line, last.col)

    def is_at_end(self) -> bool:
        return self.current().kind is K.EOF

    def advance(self) -> Token:
        """Consumes and returns the token at the cursor. Never moves past EOF."""
        tok = self.current()
        if not self.is_at_end():
            self.position += 1
        return tok

    def check(self, *kinds: TokenKind) -> bool:
        return self.current().kind in kinds

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.check(*kinds):
            return self.advance()
        return None

    def expect(self, kind: TokenKind, message: str) -> Token:
        tok = self.match(kind)
        if tok is None:
            raise self.error(message)
        return tok

    def error(self, message: str, tok: Token | None = None) -> ParseError:
        tok = tok if tok is not None else self.current()
        return ParseError(f"{message}, got {tok!r}", tok.start, tok.line, tok.col)

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Counts one level of expression or block nesting.

        Past `MAX_NESTING_DEPTH` levels the production fails with `ParseError`
        instead of exhausting the interpreter stack.
        """
        if self.depth >= MAX_NESTING_DEPTH:
            raise self.error("Expression nested too deeply")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def at_statement_end(self) -> bool:
        return self.check(K.NEWLINE, K.EOF)

    def end_statement(self, what: str) -> None:
        """Consumes the NEWLINE closing a simple statement. EOF also ends one."""
        if self.match(K.NEWLINE) or self.is_at_end():
            return
        raise self.error(f"Expected newline after {what}")

    # --- program ----------------------------------------------------------

    def parse(self) -> list[Stmt]:
        """Parse the whole token list and return the top-level statements."""
        statements: list[Stmt] = []
        while not self.is_at_end():
            if self.match(K.NEWLINE):
                continue
            try:
                statements.append(self.parse_statement())
            except ParseError as e:
                self.diagnostics.report_error(e, phase="parse")
                skipped = self.advance()
                logger.debug("recovering: skipped %r", skipped)
        return statements

    def parse_statement(self) -> Stmt:
        """Parse a single statement, dispatching on its leading keyword."""
        tok = self.current()
        kind = tok.kind

        if kind is K.DEF:
            return self.parse_function()
        if kind is K.CLASS:
            return self.parse_class()
        if kind is K.IMPORT:
            return self.parse_import()
        if kind is K.FROM:
            return self.parse_from_import()
        if kind is K.DEL:
            return self.parse_del()
        if kind is K.RAISE:
            return self.parse_raise()
        if kind is K.TRY:
            return self.parse_try()
        if kind is K.RETURN:
            return self.parse_return()
        if kind is K.PRINT:
            return self.parse_print()
        if kind in (K.PASS, K.BREAK, K.CONTINUE):
            return self.parse_simple_keyword()
        if kind is K.FOR:
            return self.parse_for()
        if kind is K.IF:
            return self.parse_if()
        if kind is K.WHILE:
            return self.parse_while()
        if kind is K.GLOBAL:
            return self.parse_global()
        if kind is K.INDENT:
            raise self.error("Unexpected indent")
        if kind is K.DEDENT:
            raise self.error("Unexpected dedent")

        return self.parse_assignment_or_expression()

    def parse_block(self, context: str) -> list[Stmt]:
        """Parse `':' NEWLINE INDENT statement* DEDENT` and return the statements.

        Running into EOF before the closing DEDENT is reported but the block is
        kept, since end of input closes every open block.
        """
        self.expect(K.COLON, f"Expected ':' after {context}")
        self.expect(K.NEWLINE, f"Expected newline after ':' in {context}")
        while self.match(K.NEWLINE):
            pass
        self.expect(K.INDENT, f"Expected indented block after {context}")

        body: list[Stmt] = []
        with self.nested():
            while not self.check(K.DEDENT) and not self.is_at_end():
                if self.match(K.NEWLINE):
                    continue
                body.append(self.parse_statement())

        if self.match(K.DEDENT) is None:
            tok = self.current()
            self.diagnostics.report(
                f"Expected dedent after {context} block",
                tok.start,
                tok.line,
                tok.col,
                phase="parse",
            )
        return body

    # --- definitions ------------------------------------------------------

    def parse_function(self) -> FunctionDef:
        """Parse `def name(params): block`."""
        self.expect(K.DEF, "Expected 'def'")
        name = self.expect(K.IDENTIFIER, "Expected function name after 'def'")
        self.expect(K.LPAREN, "Expected '(' after function name")
        params = self.parse_parameters(K.RPAREN, "Expected parameter name")
        self.expect(K.RPAREN, "Expected ')' after parameters")
        body = self.parse_block("function header")
        return FunctionDef(name.value, params, body)

    def parse_parameters(self, closing: TokenKind, message: str) -> list[str]:
        params: list[str] = []
        if self.check(closing):
            return params
        while True:
            tok = self.match(K.IDENTIFIER)
            if tok is None:
                raise self.error(message)
            params.append(tok.value)
            if not self.match(K.COMMA) or self.check(closing):
                break
        return params

    def parse_class(self) -> ClassDef:
        """Parse `class Name: block` or `class Name(Base): block`."""
        self.expect(K.CLASS, "Expected 'class'")
        name = self.expect(K.IDENTIFIER, "Expected class name after 'class'")
        base: Expr | None = None
        if self.match(K.LPAREN):
            if not self.check(K.RPAREN):
                base = self.parse_expression()
            self.expect(K.RPAREN, "Expected ')' after base class")
        body = self.parse_block("class header")
        return ClassDef(name.value, base, body)

    # --- imports ----------------------------------------------------------

    def parse_dotted_name(self, message: str) -> str:
        parts = [self.expect(K.IDENTIFIER, message).value]
        while self.match(K.DOT):
            parts.append(self.expect(K.IDENTIFIER, "Expected name after '.'").value)
        return ".".join(parts)

    def parse_import(self) -> Import:
        self.expect(K.IMPORT, "Expected 'import'")
        modules = [self.parse_dotted_name("Expected module name")]
        while self.match(K.COMMA):
            modules.append(self.parse_dotted_name("Expected module name"))
        self.end_statement("import")
        return Import(modules)

    def parse_from_import(self) -> FromImport:
        self.expect(K.FROM, "Expected 'from'")
        module = self.parse_dotted_name("Expected module name")
        self.expect(K.IMPORT, "Expected 'import' after module name")
        names = self.parse_name_list("Expected import name")
        self.end_statement("from import")
        return FromImport(module, names)

    def parse_name_list(self, message: str) -> list[str]:
        names = [self.expect(K.IDENTIFIER, message).value]
        while self.match(K.COMMA):
            names.append(self.expect(K.IDENTIFIER, message).value)
        return names

    # --- simple statements ------------------------------------------------

    def parse_global(self) -> Global:
        self.expect(K.GLOBAL, "Expected 'global'")
        names = self.parse_name_list("Expected variable name")
        self.end_statement("global")
        return Global(names)

    def parse_del(self) -> Del:
        self.expect(K.DEL, "Expected 'del'")
        target = self.parse_target_list()
        self.end_statement("del")
        return Del(target)

    def parse_raise(self) -> Raise:
        self.expect(K.RAISE, "Expected 'raise'")
        exception = None if self.at_statement_end() else self.parse_expression()
        self.end_statement("raise")
        return Raise(exception)

    def parse_return(self) -> Return:
        self.expect(K.RETURN, "Expected 'return'")
        value = None if self.at_statement_end() else self.parse_tuple_or_expression()
        self.end_statement("return")
        return Return(value)

    def parse_print(self) -> Print:
        self.expect(K.PRINT, "Expected 'print'")
        expr = self.parse_expression()
        self.end_statement("print")
        return Print(expr)

    def parse_simple_keyword(self) -> Stmt:
        tok = self.advance()
        self.end_statement(tok.kind.value)
        if tok.kind is K.PASS:
            return Pass()
        if tok.kind is K.BREAK:
            return Break()
        return Continue()

    # --- compound statements ----------------------------------------------

    def parse_if(self) -> If:
        """Parse `if`, recursing for each `elif`."""
        self.expect(K.IF, "Expected 'if'")
        return self._parse_if_rest()

    def _parse_if_rest(self) -> If:
        condition = self.parse_expression()
        then_branch = self.parse_block("if condition")

        else_branch: list[Stmt] | None = None
        if self.match(K.ELIF):
            else_branch = [self._parse_if_rest()]
        elif self.match(K.ELSE):
            else_branch = self.parse_block("else")

        return If(condition, then_branch, else_branch)

    def parse_while(self) -> While:
        self.expect(K.WHILE, "Expected 'while'")
        condition = self.parse_expression()
        body = self.parse_block("while condition")
        return While(condition, body)

    def parse_for(self) -> For:
        self.expect(K.FOR, "Expected 'for'")
        target = self.parse_target_list()
        self.expect(K.IN, "Expected 'in' after loop variable")
        iterable = self.parse_expression()
        body = self.parse_block("iterable")
        return For(target, iterable, body)

    def parse_try(self) -> Try:
        self.expect(K.TRY, "Expected 'try'")
        body = self.parse_block("try")

        clauses: list[ExceptClause] = []
        while self.match(K.EXCEPT):
            exception_type = None if self.check(K.COLON) else self.parse_expression()
            clauses.append(ExceptClause(exception_type, self.parse_block("except")))

        return Try(body, clauses)

    # --- assignment -------------------------------------------------------

    def parse_assignment_or_expression(self) -> Stmt:
        """Parse `a, b = value` or a bare expression statement.

        The left side is first read as a list of ordinary expressions; only
        when `=` follows is each one converted to an assignment target.
        """
        exprs = [self.parse_expression()]
        while self.match(K.COMMA):
            exprs.append(self.parse_expression())

        if self.check(K.EQUAL):
            targets = [self.expr_to_target(expr) for expr in exprs]
            self.advance()
            value = self.parse_tuple_or_expression()
            self.end_statement("assignment")
            target = targets[0] if len(targets) == 1 else TupleTarget(targets)
            return Assign(target, value)

        expr = exprs[0] if len(exprs) == 1 else Tuple(exprs)
        self.end_statement("expression")
        return Expression(expr)

    def expr_to_target(self, expr: Expr) -> Target:
        if isinstance(expr, Variable):
            return NameTarget(expr.name)
        if isinstance(expr, Get):
            return AttributeTarget(expr.object, expr.name)
        if isinstance(expr, Tuple):
            return TupleTarget([self.expr_to_target(item) for item in expr.items])
        raise self.error(f"Invalid assignment target {type(expr).__name__}")

    def parse_target_list(self) -> Target:
        """Parse comma-separated targets; a single target is returned unwrapped."""
        targets = [self.parse_single_target()]
        while self.match(K.COMMA):
            targets.append(self.parse_single_target())
        return targets[0] if len(targets) == 1 else TupleTarget(targets)

    def parse_single_target(self) -> Target:
        if self.match(K.LPAREN):
            elements: list[Target] = []
            if not self.check(K.RPAREN):
                with self.nested():
                    while True:
                        elements.append(self.parse_single_target())
                        if not self.match(K.COMMA) or self.check(K.RPAREN):
                            break
            self.expect(K.RPAREN, "Expected ')' after tuple target")
            return TupleTarget(elements)

        name = self.match(K.IDENTIFIER)
        if name is None:
            raise self.error("Expected name or tuple in target")
        if self.match(K.DOT):
            attr = self.expect(K.IDENTIFIER, "Expected attribute name")
            return AttributeTarget(Variable(name.value), attr.value)
        return NameTarget(name.value)

    # --- expressions ------------------------------------------------------

    def parse_expression(self) -> Expr:
        with self.nested():
            return self.parse_or()

    def parse_tuple_or_expression(self) -> Expr:
        """Parse `a` or `a, b, ...`; two or more items become a `Tuple`."""
        exprs = [self.parse_or()]
        while self.match(K.COMMA):
            exprs.append(self.parse_or())
        return exprs[0] if len(exprs) == 1 else Tuple(exprs)

    def _left_assoc(self, operand: Callable[[], Expr], *ops: TokenKind) -> Expr:
        expr = operand()
        while self.check(*ops):
            op = self.advance().kind
            expr = Binary(expr, op, operand())
        return expr

    def parse_or(self) -> Expr:
        return self._left_assoc(self.parse_and, K.OR)

    def parse_and(self) -> Expr:
        return self._left_assoc(self.parse_bitwise_or, K.AND)

    def parse_bitwise_or(self) -> Expr:
        return self._left_assoc(self.parse_bitwise_xor, K.PIPE)

    def parse_bitwise_xor(self) -> Expr:
        return self._left_assoc(self.parse_bitwise_and, K.CARET)

    def parse_bitwise_and(self) -> Expr:
        return self._left_assoc(self.parse_equality, K.AMPERSAND)

    def parse_equality(self) -> Expr:
        return self._left_assoc(self.parse_comparison, *EQUALITY_OPS)

    def parse_comparison(self) -> Expr:
        return self._left_assoc(self.parse_term, *COMPARISON_OPS)

    def parse_term(self) -> Expr:
        return self._left_assoc(self.parse_factor, *TERM_OPS)

    def parse_factor(self) -> Expr:
        return self._left_assoc(self.parse_power, *FACTOR_OPS)

    def parse_power(self) -> Expr:
        # right-associative: 2 ** 3 ** 2 == 2 ** (3 ** 2)
        expr = self.parse_unary()
        if self.match(K.STAR_STAR):
            with self.nested():
                return Binary(expr, K.STAR_STAR, self.parse_power())
        return expr

    def parse_unary(self) -> Expr:
        if self.check(*UNARY_OPS):
            op = self.advance().kind
            with self.nested():
                return Unary(op, self.parse_unary())
        return self.parse_call()

    def parse_call(self) -> Expr:
        """Parse a primary followed by any chain of `(...)`, `.name` and `[...]`."""
        expr = self.parse_primary()
        while True:
            if self.match(K.LPAREN):
                args: list[Expr] = []
                if not self.check(K.RPAREN):
                    while True:
                        args.append(self.parse_expression())
                        if not self.match(K.COMMA) or self.check(K.RPAREN):
                            break
                self.expect(K.RPAREN, "Expected ')' after arguments")
                expr = Call(expr, args)
            elif self.match(K.DOT):
                name = self.expect(K.IDENTIFIER, "Expected attribute name after '.'")
                expr = Get(expr, name.value)
            elif self.match(K.LBRACKET):
                index = self.parse_expression()
                self.expect(K.RBRACKET, "Expected ']' after index")
                expr = Index(expr, index)
            else:
                return expr

    def parse_primary(self) -> Expr:
        tok = self.current()

        if tok.kind in LITERAL_TOKENS:
            self.advance()
            assert tok.literal is not None  # for mypy
            return Literal(tok.literal)
        if tok.kind is K.IDENTIFIER:
            self.advance()
            return Variable(tok.value)
        if tok.kind is K.LPAREN:
            return self.parse_parenthesized()
        if tok.kind is K.LBRACKET:
            return self.parse_list()
        if tok.kind is K.LBRACE:
            return self.parse_dict()
        if tok.kind is K.LAMBDA:
            return self.parse_lambda()

        raise self.error("Expected expression")

    def parse_parenthesized(self) -> Expr:
        """`()` and any comma make a `Tuple`; a lone expression is a `Grouping`."""
        self.expect(K.LPAREN, "Expected '('")
        if self.match(K.RPAREN):
            return Tuple([])

        exprs = [self.parse_expression()]
        has_comma = False
        while self.match(K.COMMA):
            has_comma = True
            if self.check(K.RPAREN):
                break
            exprs.append(self.parse_expression())

        self.expect(K.RPAREN, "Expected ')' after expression")
        if has_comma:
            return Tuple(exprs)
        return Grouping(exprs[0])

    def parse_list(self) -> List:
        self.expect(K.LBRACKET, "Expected '['")
        items: list[Expr] = []
        while not self.check(K.RBRACKET):
            items.append(self.parse_expression())
            if not self.match(K.COMMA):
                break
        self.expect(K.RBRACKET, "Expected ']' after list literal")
        return List(items)

    def parse_dict(self) -> Dict:
        self.expect(K.LBRACE, "Expected '{'")
        pairs: list[tuple[Expr, Expr]] = []
        while not self.check(K.RBRACE):
            key = self.parse_expression()
            self.expect(K.COLON, "Expected ':' between key and value in dict")
            pairs.append((key, self.parse_expression()))
            if not self.match(K.COMMA):
                break
        self.expect(K.RBRACE, "Expected '}' after dict literal")
        return Dict(pairs)

    def parse_lambda(self) -> Lambda:
        self.expect(K.LAMBDA, "Expected 'lambda'")
        params = self.parse_parameters(
            K.COLON, "Expected identifier in lambda parameters"
        )
        self.expect(K.COLON, "Expected ':' after lambda parameters")
        return Lambda(params, self.parse_expression())


def parse(tokens: list[Token], diagnostics: Diagnostics | None = None) -> list[Stmt]:
    """Parse a token list into top-level statements."""
    return Parser(tokens, diagnostics).parse()


def parse_source(source: str, diagnostics: Diagnostics | None = None) -> list[Stmt]:
    """Tokenize and parse `source`, sharing one diagnostics collector.

    Raises:
        InconsistentIndentationError: If the source dedents to an unknown width.
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    return Parser(analyze(source, diagnostics), diagnostics).parse()


__all__ = ["Parser", "parse", "parse_source"]
