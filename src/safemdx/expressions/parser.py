"""Recursive-descent / Pratt parser for the restricted expression grammar.

Parses the JavaScript expression subset that MDX documents use in attribute
values and inline expressions, plus ``import`` statements. The parser accepts
more than the evaluator will run (calls, member access on identifiers, arrow
functions) so that unsupported constructs are reported by name instead of as
syntax errors. Nothing here evaluates code.

Example:
    >>> parse_expression("[1, 2 + 3, `a${1}`]")
    ArrayExpression(elements=(Literal(value=1, raw='1'), ...))

Thread Safety:
Parser instances are single-use; the module functions create a fresh one per
call.

"""

from __future__ import annotations

from collections.abc import Callable

from safemdx.errors import ExpressionSyntaxError
from safemdx.expressions.lexer import Lexer, Token, TokenKind
from safemdx.expressions.nodes import (
    ArrayExpression,
    ArrowFunctionExpression,
    BinaryExpression,
    CallExpression,
    ConditionalExpression,
    Expression,
    Identifier,
    ImportDeclaration,
    ImportDefaultSpecifier,
    ImportNamespaceSpecifier,
    ImportSpecifier,
    ImportSpecifierNode,
    JSXAttribute,
    JSXElement,
    JSXExpressionContainer,
    JSXSpreadAttribute,
    JSXText,
    Literal,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    Property,
    SpreadElement,
    TemplateElement,
    TemplateLiteral,
    UnaryExpression,
)

# Binary operator precedence (higher binds tighter)
BINARY_PRECEDENCE: dict[str, int] = {
    "??": 1,
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6,
    "!=": 6,
    "===": 6,
    "!==": 6,
    "<": 7,
    ">": 7,
    "<=": 7,
    ">=": 7,
    "in": 7,
    "instanceof": 7,
    "<<": 8,
    ">>": 8,
    ">>>": 8,
    "+": 9,
    "-": 9,
    "*": 10,
    "/": 10,
    "%": 10,
    "**": 11,
}

LOGICAL_OPERATORS = frozenset(("&&", "||", "??"))
UNARY_OPERATORS = frozenset(("!", "-", "+", "~"))
UNARY_KEYWORDS = frozenset(("typeof", "void", "delete"))
LITERAL_KEYWORDS: dict[str, bool | None] = {"true": True, "false": False, "null": None}

# Keywords that start constructs outside the grammar
_REJECTED_KEYWORDS = frozenset(
    ("function", "class", "new", "await", "yield", "async", "import", "super", "this")
)


class ExpressionParser:
    """Parser for a single expression source string."""

    __slots__ = ("_lexer",)

    def __init__(self, source: str) -> None:
        self._lexer = Lexer(source)

    # =========================================================================
    # Entry points
    # =========================================================================

    def parse_expression(self) -> Expression:
        expr = self._parse_assignment()
        self._expect_eof()
        return expr

    def parse_spread(self) -> Expression:
        """Parse ``...expr`` (the body of a spread attribute)."""
        token = self._lexer.next()
        if not token.is_punct("..."):
            raise self._error_at(token, "Expected spread '...'")
        expr = self._parse_assignment()
        self._expect_eof()
        return expr

    def parse_module(self) -> tuple[ImportDeclaration, ...]:
        """Parse a sequence of ``import`` statements."""
        declarations: list[ImportDeclaration] = []
        while True:
            token = self._lexer.peek()
            if token.kind is TokenKind.EOF:
                break
            if token.is_punct(";"):
                self._lexer.next()
                continue
            if not token.is_name("import"):
                raise self._error_at(token, "Only import declarations are supported")
            declarations.append(self._parse_import())
        return tuple(declarations)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _parse_assignment(self) -> Expression:
        arrow = self._try_parse_arrow()
        if arrow is not None:
            return arrow
        expr = self._parse_conditional()
        token = self._lexer.peek()
        if token.kind is TokenKind.PUNCT and token.value in ("=", "+=", "-=", "*=", "/=", "**=", "<<=", ">>=", ">>>="):
            raise self._error_at(token, "Assignment is not supported")
        return expr

    def _parse_conditional(self) -> Expression:
        test = self._parse_binary(0)
        if not self._lexer.peek().is_punct("?"):
            return test
        self._lexer.next()
        consequent = self._parse_assignment()
        self._expect_punct(":")
        alternate = self._parse_assignment()
        return ConditionalExpression(test=test, consequent=consequent, alternate=alternate)

    def _parse_binary(self, min_precedence: int) -> Expression:
        left = self._parse_unary()
        while True:
            token = self._lexer.peek()
            operator = self._binary_operator(token)
            if operator is None:
                return left
            precedence = BINARY_PRECEDENCE[operator]
            if precedence <= min_precedence:
                return left
            self._lexer.next()
            # ** is right-associative
            next_min = precedence - 1 if operator == "**" else precedence
            right = self._parse_binary(next_min)
            if operator in LOGICAL_OPERATORS:
                left = LogicalExpression(operator=operator, left=left, right=right)
            else:
                left = BinaryExpression(operator=operator, left=left, right=right)

    @staticmethod
    def _binary_operator(token: Token) -> str | None:
        if token.kind is TokenKind.PUNCT and token.value in BINARY_PRECEDENCE:
            return str(token.value)
        if token.is_name("in", "instanceof"):
            return str(token.value)
        return None

    def _parse_unary(self) -> Expression:
        token = self._lexer.peek()
        if token.kind is TokenKind.PUNCT and token.value in UNARY_OPERATORS:
            self._lexer.next()
            return UnaryExpression(operator=str(token.value), argument=self._parse_unary())
        if token.is_name(*UNARY_KEYWORDS):
            self._lexer.next()
            return UnaryExpression(operator=str(token.value), argument=self._parse_unary())
        if token.is_punct("++", "--"):
            raise self._error_at(token, "Update expressions are not supported")
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expr: Expression) -> Expression:
        while True:
            token = self._lexer.peek()
            if token.is_punct("."):
                self._lexer.next()
                name = self._lexer.next()
                if name.kind is not TokenKind.NAME:
                    raise self._error_at(name, "Expected property name")
                expr = MemberExpression(obj=expr, prop=Identifier(str(name.value)))
            elif token.is_punct("?."):
                self._lexer.next()
                following = self._lexer.peek()
                if following.is_punct("["):
                    self._lexer.next()
                    prop = self._parse_assignment()
                    self._expect_punct("]")
                    expr = MemberExpression(obj=expr, prop=prop, computed=True, optional=True)
                elif following.is_punct("("):
                    expr = CallExpression(callee=expr, arguments=self._parse_arguments(), optional=True)
                else:
                    name = self._lexer.next()
                    if name.kind is not TokenKind.NAME:
                        raise self._error_at(name, "Expected property name")
                    expr = MemberExpression(obj=expr, prop=Identifier(str(name.value)), optional=True)
            elif token.is_punct("["):
                self._lexer.next()
                prop = self._parse_assignment()
                self._expect_punct("]")
                expr = MemberExpression(obj=expr, prop=prop, computed=True)
            elif token.is_punct("("):
                expr = CallExpression(callee=expr, arguments=self._parse_arguments())
            elif token.kind is TokenKind.TEMPLATE_START:
                raise self._error_at(token, "Tagged templates are not supported")
            else:
                return expr

    def _parse_arguments(self) -> tuple[Expression, ...]:
        self._expect_punct("(")
        args: list[Expression] = []
        while not self._lexer.peek().is_punct(")"):
            if self._lexer.peek().is_punct("..."):
                self._lexer.next()
                args.append(SpreadElement(argument=self._parse_assignment()))
            else:
                args.append(self._parse_assignment())
            if not self._lexer.peek().is_punct(")"):
                self._expect_punct(",")
        self._lexer.next()
        return tuple(args)

    def _parse_primary(self) -> Expression:
        token = self._lexer.peek()
        match token.kind:
            case TokenKind.NUMBER:
                self._lexer.next()
                return Literal(value=token.value, raw=self._text(token))
            case TokenKind.STRING:
                self._lexer.next()
                return Literal(value=token.value, raw=self._text(token))
            case TokenKind.TEMPLATE_START:
                self._lexer.next()
                return self._parse_template()
            case TokenKind.NAME:
                name = str(token.value)
                if name in _REJECTED_KEYWORDS:
                    raise self._error_at(token, f"'{name}' is not supported")
                self._lexer.next()
                if name in LITERAL_KEYWORDS:
                    return Literal(value=LITERAL_KEYWORDS[name], raw=name)
                return Identifier(name)
            case TokenKind.PUNCT:
                if token.value == "(":
                    self._lexer.next()
                    expr = self._parse_assignment()
                    self._expect_punct(")")
                    return expr
                if token.value == "[":
                    self._lexer.next()
                    return self._parse_array()
                if token.value == "{":
                    self._lexer.next()
                    return self._parse_object()
                if token.value == "<":
                    self._lexer.reset(token.start)
                    return self._parse_jsx_element()
                raise self._error_at(token, f"Unexpected token {token.value!r}")
            case _:
                raise self._error_at(token, "Unexpected end of input")

    def _parse_array(self) -> ArrayExpression:
        elements: list[Expression | None] = []
        while True:
            token = self._lexer.peek()
            if token.is_punct("]"):
                self._lexer.next()
                return ArrayExpression(elements=tuple(elements))
            if token.is_punct(","):
                self._lexer.next()
                elements.append(None)
                continue
            if token.is_punct("..."):
                self._lexer.next()
                elements.append(SpreadElement(argument=self._parse_assignment()))
            else:
                elements.append(self._parse_assignment())
            if not self._lexer.peek().is_punct("]"):
                self._expect_punct(",")

    def _parse_object(self) -> ObjectExpression:
        properties: list[Property | SpreadElement] = []
        while not self._lexer.peek().is_punct("}"):
            properties.append(self._parse_property())
            if not self._lexer.peek().is_punct("}"):
                self._expect_punct(",")
        self._lexer.next()
        return ObjectExpression(properties=tuple(properties))

    def _parse_property(self) -> Property | SpreadElement:
        token = self._lexer.next()
        if token.is_punct("..."):
            return SpreadElement(argument=self._parse_assignment())

        computed = False
        key: Expression
        if token.is_punct("["):
            computed = True
            key = self._parse_assignment()
            self._expect_punct("]")
        elif token.kind is TokenKind.NAME:
            key = Identifier(str(token.value))
        elif token.kind in (TokenKind.STRING, TokenKind.NUMBER):
            key = Literal(value=token.value, raw=self._text(token))
        else:
            raise self._error_at(token, "Expected property key")

        following = self._lexer.peek()
        if following.is_punct(":"):
            self._lexer.next()
            return Property(key=key, value=self._parse_assignment(), computed=computed)
        if isinstance(key, Identifier) and not computed and following.is_punct(",", "}"):
            return Property(key=key, value=key, shorthand=True)
        if following.is_punct("("):
            raise self._error_at(following, "Methods are not supported")
        raise self._error_at(following, "Expected ':' in object literal")

    def _parse_template(self) -> TemplateLiteral:
        quasis: list[TemplateElement] = []
        expressions: list[Expression] = []
        while True:
            cooked, raw, tail = self._lexer.read_template_chunk()
            quasis.append(TemplateElement(cooked=cooked, raw=raw, tail=tail))
            if tail:
                return TemplateLiteral(quasis=tuple(quasis), expressions=tuple(expressions))
            expressions.append(self._parse_assignment())
            closing = self._lexer.peek()
            if not closing.is_punct("}"):
                raise self._error_at(closing, "Expected '}' in template literal")
            self._lexer.reset(closing.end)

    def _try_parse_arrow(self) -> ArrowFunctionExpression | None:
        """Parse an arrow function if one starts here, else rewind."""
        start = self._lexer.peek()
        params: list[str] = []
        if start.kind is TokenKind.NAME and start.value not in LITERAL_KEYWORDS:
            self._lexer.next()
            if not self._lexer.peek().is_punct("=>"):
                self._lexer.reset(start.start)
                return None
            params.append(str(start.value))
        elif start.is_punct("("):
            self._lexer.next()
            try:
                while not self._lexer.peek().is_punct(")"):
                    name = self._lexer.next()
                    if name.kind is not TokenKind.NAME:
                        raise self._error_at(name, "not an arrow")
                    params.append(str(name.value))
                    if not self._lexer.peek().is_punct(")"):
                        self._expect_punct(",")
                self._lexer.next()
            except ExpressionSyntaxError:
                self._lexer.reset(start.start)
                return None
            if not self._lexer.peek().is_punct("=>"):
                self._lexer.reset(start.start)
                return None
        else:
            return None

        self._lexer.next()  # =>
        body_start = self._lexer.peek()
        if body_start.is_punct("{"):
            end = self._skip_balanced(body_start.start)
            body = self._lexer.source[body_start.start + 1 : end - 1].strip()
            self._lexer.reset(end)
        else:
            expr_start = body_start.start
            self._parse_assignment()
            body = f"return {self._lexer.source[expr_start:self._lexer.pos].strip()}"
        return ArrowFunctionExpression(params=tuple(params), body=body)

    def _skip_balanced(self, start: int) -> int:
        """Return the offset just past the brace matching the one at ``start``."""
        depth = 0
        self._lexer.reset(start)
        while True:
            token = self._lexer.next()
            if token.kind is TokenKind.EOF:
                raise self._error_at(token, "Unterminated block")
            if token.kind is TokenKind.TEMPLATE_START:
                self._parse_template()
            elif token.is_punct("{"):
                depth += 1
            elif token.is_punct("}"):
                depth -= 1
                if depth == 0:
                    return token.end

    # =========================================================================
    # JSX
    # =========================================================================

    def _parse_jsx_element(self) -> JSXElement:
        lexer = self._lexer
        lexer.skip_whitespace()
        lexer.expect_char("<")
        lexer.skip_whitespace()
        if lexer.eat_char(">"):
            children = self._parse_jsx_children(None)
            return JSXElement(name=None, children=children)

        name = lexer.read_jsx_name()
        attributes: list[JSXAttribute | JSXSpreadAttribute] = []
        while True:
            lexer.skip_whitespace()
            if lexer.eat_char("/"):
                lexer.skip_whitespace()
                lexer.expect_char(">")
                return JSXElement(name=name, attributes=tuple(attributes), self_closing=True)
            if lexer.eat_char(">"):
                break
            if lexer.eat_char("{"):
                spread = lexer.next()
                if not spread.is_punct("..."):
                    raise self._error_at(spread, "Expected '...' in JSX spread attribute")
                argument = self._parse_assignment()
                self._expect_punct("}")
                attributes.append(JSXSpreadAttribute(argument=argument))
                continue
            attributes.append(self._parse_jsx_attribute())

        children = self._parse_jsx_children(name)
        return JSXElement(name=name, attributes=tuple(attributes), children=children)

    def _parse_jsx_attribute(self) -> JSXAttribute:
        lexer = self._lexer
        name = lexer.read_jsx_name()
        lexer.skip_whitespace()
        if not lexer.eat_char("="):
            return JSXAttribute(name=name)
        lexer.skip_whitespace()
        if lexer.eat_char("{"):
            expression = self._parse_assignment()
            self._expect_punct("}")
            return JSXAttribute(name=name, value=JSXExpressionContainer(expression=expression))
        if lexer.startswith("<"):
            return JSXAttribute(name=name, value=self._parse_jsx_element())
        quote = lexer.peek_char()
        if quote not in ("'", '"'):
            raise lexer.error("Expected JSX attribute value")
        # JSX strings have no escape sequences
        end = lexer.source.find(quote, lexer.pos + 1)
        if end == -1:
            raise lexer.error("Unterminated JSX attribute string")
        value = lexer.source[lexer.pos + 1 : end]
        lexer.reset(end + 1)
        return JSXAttribute(name=name, value=Literal(value=value, raw=f"{quote}{value}{quote}"))

    def _parse_jsx_children(
        self, name: str | None
    ) -> tuple[JSXText | JSXExpressionContainer | JSXElement, ...]:
        lexer = self._lexer
        children: list[JSXText | JSXExpressionContainer | JSXElement] = []
        while True:
            text = lexer.read_jsx_text()
            if text:
                children.append(JSXText(value=text))
            if not lexer.peek_char():
                raise lexer.error(f"Unterminated JSX element <{name or ''}>")
            if lexer.startswith("{"):
                lexer.eat_char("{")
                if lexer.peek().is_punct("}"):
                    lexer.next()
                    children.append(JSXExpressionContainer(expression=None))
                    continue
                expression = self._parse_assignment()
                self._expect_punct("}")
                children.append(JSXExpressionContainer(expression=expression))
                continue
            # "<": either a closing tag or a nested element
            mark = lexer.pos
            lexer.eat_char("<")
            lexer.skip_whitespace()
            if lexer.eat_char("/"):
                lexer.skip_whitespace()
                closing = None if lexer.peek_char() == ">" else lexer.read_jsx_name()
                lexer.skip_whitespace()
                lexer.expect_char(">")
                if closing != name:
                    raise lexer.error(
                        f"Expected closing tag </{name or ''}> but found </{closing or ''}>"
                    )
                return tuple(children)
            lexer.reset(mark)
            children.append(self._parse_jsx_element())

    # =========================================================================
    # Imports
    # =========================================================================

    def _parse_import(self) -> ImportDeclaration:
        self._lexer.next()  # import
        specifiers: list[ImportSpecifierNode] = []
        token = self._lexer.peek()

        if token.kind is TokenKind.STRING:
            self._lexer.next()
            self._eat_semicolon()
            return ImportDeclaration(source=str(token.value))

        if token.kind is TokenKind.NAME:
            self._lexer.next()
            specifiers.append(ImportDefaultSpecifier(local=str(token.value)))
            if self._lexer.peek().is_punct(","):
                self._lexer.next()
                token = self._lexer.peek()

        if token.is_punct("*"):
            self._lexer.next()
            self._expect_name("as")
            local = self._lexer.next()
            if local.kind is not TokenKind.NAME:
                raise self._error_at(local, "Expected namespace binding")
            specifiers.append(ImportNamespaceSpecifier(local=str(local.value)))
        elif token.is_punct("{"):
            self._lexer.next()
            specifiers.extend(self._parse_named_imports())

        self._expect_name("from")
        source = self._lexer.next()
        if source.kind is not TokenKind.STRING:
            raise self._error_at(source, "Expected module source string")
        self._eat_semicolon()
        return ImportDeclaration(source=str(source.value), specifiers=tuple(specifiers))

    def _parse_named_imports(self) -> list[ImportSpecifier]:
        specifiers: list[ImportSpecifier] = []
        while not self._lexer.peek().is_punct("}"):
            imported = self._lexer.next()
            if imported.kind not in (TokenKind.NAME, TokenKind.STRING):
                raise self._error_at(imported, "Expected import name")
            local = str(imported.value)
            if self._lexer.peek().is_name("as"):
                self._lexer.next()
                alias = self._lexer.next()
                if alias.kind is not TokenKind.NAME:
                    raise self._error_at(alias, "Expected local binding name")
                local = str(alias.value)
            elif imported.kind is TokenKind.STRING:
                raise self._error_at(imported, "String import names require an alias")
            specifiers.append(ImportSpecifier(local=local, imported=str(imported.value)))
            if not self._lexer.peek().is_punct("}"):
                self._expect_punct(",")
        self._lexer.next()
        return specifiers

    # =========================================================================
    # Helpers
    # =========================================================================

    def _text(self, token: Token) -> str:
        return self._lexer.source[token.start : token.end]

    def _expect_punct(self, value: str) -> Token:
        token = self._lexer.next()
        if not token.is_punct(value):
            raise self._error_at(token, f"Expected {value!r}")
        return token

    def _expect_name(self, value: str) -> Token:
        token = self._lexer.next()
        if not token.is_name(value):
            raise self._error_at(token, f"Expected '{value}'")
        return token

    def _expect_eof(self) -> None:
        token = self._lexer.peek()
        if token.kind is not TokenKind.EOF:
            raise self._error_at(token, f"Unexpected token {self._text(token)!r}")

    def _eat_semicolon(self) -> None:
        if self._lexer.peek().is_punct(";"):
            self._lexer.next()

    @staticmethod
    def _error_at(token: Token, message: str) -> ExpressionSyntaxError:
        if token.kind is TokenKind.EOF and "end of input" not in message:
            message = f"{message} (unexpected end of input)"
        return ExpressionSyntaxError(message, token.start)


def _guarded[T](parse: Callable[[ExpressionParser], T], source: str) -> T:
    try:
        return parse(ExpressionParser(source))
    except RecursionError:
        raise ExpressionSyntaxError("Expression is nested too deeply", 0) from None


def parse_expression(source: str) -> Expression:
    """Parse a single restricted expression.

    Raises:
        ExpressionSyntaxError: If the source is not a valid expression
    """
    return _guarded(ExpressionParser.parse_expression, source)


def parse_spread(source: str) -> Expression:
    """Parse the source of a spread attribute (``...expr``) to its argument."""
    return _guarded(ExpressionParser.parse_spread, source)


def parse_module(source: str) -> tuple[ImportDeclaration, ...]:
    """Parse ESM source consisting of ``import`` statements only."""
    return _guarded(ExpressionParser.parse_module, source)
