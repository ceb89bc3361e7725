# どこで: `src/pitschpatsch/core/analysis/syntax.py`。
# 何を: スケッチで使われる JavaScript サブセットの AST ノードと再帰下降パーサを提供する。
# なぜ: 数値リテラルの正確な文字位置と、それを囲む呼び出し（関数名/引数位置）を得るため。

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields

from pitschpatsch.core.errors import ParseError

from .lexer import Token, tokenize


@dataclass(slots=True)
class Node:
    """AST ノードの基底。start/end は文字オフセット（end は排他的）。"""

    start: int
    end: int


@dataclass(slots=True)
class Comment(Node):
    text: str


@dataclass(slots=True)
class Program(Node):
    body: list[Node]
    comments: list[Comment] = field(default_factory=list)


@dataclass(slots=True)
class Identifier(Node):
    name: str


@dataclass(slots=True)
class NumericLiteral(Node):
    value: float
    raw: str


@dataclass(slots=True)
class StringLiteral(Node):
    raw: str


@dataclass(slots=True)
class TemplateLiteral(Node):
    raw: str


@dataclass(slots=True)
class ArrayExpression(Node):
    elements: list[Node | None]


@dataclass(slots=True)
class Property(Node):
    key: Node
    value: Node
    computed: bool = False


@dataclass(slots=True)
class ObjectExpression(Node):
    properties: list[Node]


@dataclass(slots=True)
class SpreadElement(Node):
    argument: Node


@dataclass(slots=True)
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass(slots=True)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool


@dataclass(slots=True)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(slots=True)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass(slots=True)
class AssignmentExpression(Node):
    operator: str
    target: Node
    value: Node


@dataclass(slots=True)
class SequenceExpression(Node):
    expressions: list[Node]


@dataclass(slots=True)
class CallExpression(Node):
    callee: Node
    arguments: list[Node]


@dataclass(slots=True)
class NewExpression(Node):
    callee: Node
    arguments: list[Node]


@dataclass(slots=True)
class MemberExpression(Node):
    object: Node
    property: Node
    computed: bool = False


@dataclass(slots=True)
class ArrowFunction(Node):
    params: list[Node]
    body: Node


@dataclass(slots=True)
class FunctionExpression(Node):
    name: Identifier | None
    params: list[Node]
    body: Node


@dataclass(slots=True)
class ExpressionStatement(Node):
    expression: Node


@dataclass(slots=True)
class VariableDeclarator(Node):
    target: Node
    init: Node | None


@dataclass(slots=True)
class VariableDeclaration(Node):
    kind: str
    declarations: list[VariableDeclarator]


@dataclass(slots=True)
class FunctionDeclaration(Node):
    name: Identifier
    params: list[Node]
    body: Node


@dataclass(slots=True)
class ReturnStatement(Node):
    argument: Node | None


@dataclass(slots=True)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Node | None


@dataclass(slots=True)
class ForStatement(Node):
    init: Node | None
    test: Node | None
    update: Node | None
    body: Node


@dataclass(slots=True)
class ForEachStatement(Node):
    """`for (left of right)` と `for (left in right)`。"""

    left: Node
    operator: str
    right: Node
    body: Node


@dataclass(slots=True)
class WhileStatement(Node):
    test: Node
    body: Node


@dataclass(slots=True)
class JumpStatement(Node):
    keyword: str


@dataclass(slots=True)
class BlockStatement(Node):
    body: list[Node]


@dataclass(slots=True)
class EmptyStatement(Node):
    pass


# --- 走査 ---


def iter_children(node: Node) -> Iterator[Node]:
    """node の直下の子ノードをソース順に返す。"""

    for f in fields(node):
        if f.name in {"start", "end", "comments"}:
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node, parents: tuple[Node, ...] = ()) -> Iterator[tuple[Node, tuple[Node, ...]]]:
    """深さ優先で (node, 祖先タプル) を返す。"""

    yield node, parents
    child_parents = parents + (node,)
    for child in iter_children(node):
        yield from walk(child, child_parents)


# --- パーサ ---

_BINARY_PRECEDENCE: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}
_ASSIGN_OPS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", ">>=", ">>>=", "&=", "|=", "^="}
)
_UNARY_PUNCT = frozenset({"-", "+", "!", "~"})
_UNARY_WORDS = frozenset({"typeof", "void", "delete", "await"})
_DECL_WORDS = frozenset({"let", "const", "var"})


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text
        all_tokens = tokenize(text)
        self._comments = [
            Comment(t.start, t.end, t.text) for t in all_tokens if t.kind == "comment"
        ]
        self._tokens = [t for t in all_tokens if t.kind != "comment"]
        self._pos = 0

    # --- トークン操作 ---
    def _peek(self, k: int = 0) -> Token:
        i = min(self._pos + k, len(self._tokens) - 1)
        return self._tokens[i]

    def _next(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.kind != "eof":
            self._pos += 1
        return tok

    def _is(self, text: str, k: int = 0) -> bool:
        tok = self._peek(k)
        return tok.kind in {"punct", "ident"} and tok.text == text

    def _accept(self, text: str) -> Token | None:
        if self._is(text):
            return self._next()
        return None

    def _expect(self, text: str) -> Token:
        tok = self._peek()
        if not self._is(text):
            raise self._error(f"expected {text!r} but found {tok.text or 'end of input'!r}", tok)
        return self._next()

    def _error(self, message: str, tok: Token) -> ParseError:
        return ParseError(message, line=tok.line, column=tok.column, offset=tok.start)

    def _prev_end(self) -> int:
        return self._tokens[self._pos - 1].end if self._pos > 0 else 0

    # --- 文 ---
    def parse_program(self) -> Program:
        body: list[Node] = []
        while self._peek().kind != "eof":
            body.append(self._statement())
        return Program(0, len(self._text), body, self._comments)

    def _statement(self) -> Node:
        tok = self._peek()
        if tok.kind == "punct" and tok.text == ";":
            self._next()
            return EmptyStatement(tok.start, tok.end)
        if tok.kind == "punct" and tok.text == "{":
            return self._block()
        if tok.kind == "ident":
            if tok.text in _DECL_WORDS:
                return self._variable_declaration()
            if tok.text == "function":
                return self._function(declaration=True)
            if tok.text == "return":
                self._next()
                argument = None
                nxt = self._peek()
                if not (nxt.kind == "eof" or nxt.newline_before or self._is(";") or self._is("}")):
                    argument = self._expression()
                self._end_statement()
                return ReturnStatement(tok.start, self._prev_end(), argument)
            if tok.text == "for":
                return self._for()
            if tok.text == "while":
                self._next()
                self._expect("(")
                test = self._expression()
                self._expect(")")
                body = self._statement()
                return WhileStatement(tok.start, body.end, test, body)
            if tok.text in {"break", "continue"}:
                self._next()
                self._end_statement()
                return JumpStatement(tok.start, self._prev_end(), tok.text)
            if tok.text == "if":
                self._next()
                self._expect("(")
                test = self._expression()
                self._expect(")")
                consequent = self._statement()
                alternate = None
                if self._accept("else"):
                    alternate = self._statement()
                end = (alternate or consequent).end
                return IfStatement(tok.start, end, test, consequent, alternate)
        expr = self._expression()
        self._end_statement()
        return ExpressionStatement(expr.start, self._prev_end(), expr)

    def _end_statement(self) -> None:
        """文末（`;` / 改行 / `}` / EOF）を確認する。"""

        if self._accept(";"):
            return
        tok = self._peek()
        if tok.kind == "eof" or tok.newline_before or self._is("}"):
            return
        raise self._error(f"unexpected token {tok.text!r}", tok)

    def _block(self) -> BlockStatement:
        open_tok = self._expect("{")
        body: list[Node] = []
        while not self._is("}"):
            if self._peek().kind == "eof":
                raise self._error("unterminated block", open_tok)
            body.append(self._statement())
        close_tok = self._expect("}")
        return BlockStatement(open_tok.start, close_tok.end, body)

    def _variable_declaration(self, *, terminate: bool = True) -> VariableDeclaration:
        kind_tok = self._next()
        declarations: list[VariableDeclarator] = []
        while True:
            target = self._binding_target()
            init = None
            if self._accept("="):
                init = self._assignment()
            end = init.end if init is not None else target.end
            declarations.append(VariableDeclarator(target.start, end, target, init))
            # `for (const k of xs)` の宣言部は `of` / `in` で終わる。
            if not terminate and (self._is("of") or self._is("in")):
                break
            if not self._accept(","):
                break
        if terminate:
            self._end_statement()
        return VariableDeclaration(kind_tok.start, self._prev_end(), kind_tok.text, declarations)

    def _for(self) -> Node:
        for_tok = self._next()
        self._expect("(")
        init: Node | None = None
        if not self._is(";"):
            if self._peek().kind == "ident" and self._peek().text in _DECL_WORDS:
                init = self._variable_declaration(terminate=False)
            else:
                init = self._expression()
            each = self._for_each_head(init)
            if each is not None:
                left, operator, right = each
                self._expect(")")
                body = self._statement()
                return ForEachStatement(for_tok.start, body.end, left, operator, right, body)
        self._expect(";")
        test = None if self._is(";") else self._expression()
        self._expect(";")
        update = None if self._is(")") else self._expression()
        self._expect(")")
        body = self._statement()
        return ForStatement(for_tok.start, body.end, init, test, update, body)

    def _for_each_head(self, left: Node) -> tuple[Node, str, Node] | None:
        """`of` / `in` が続けば (左辺, 演算子, 右辺) を返す。"""

        for operator in ("of", "in"):
            if self._accept(operator):
                return left, operator, self._expression()
        # 宣言なしの `for (k in obj)` は二項演算として読まれている。
        if isinstance(left, BinaryExpression) and left.operator == "in" and self._is(")"):
            return left.left, "in", left.right
        return None

    def _binding_target(self) -> Node:
        tok = self._peek()
        if tok.kind == "ident":
            self._next()
            return Identifier(tok.start, tok.end, tok.text)
        if self._is("[") or self._is("{"):
            return self._primary()
        raise self._error(f"unexpected token {tok.text!r} in declaration", tok)

    def _function(self, *, declaration: bool) -> Node:
        fn_tok = self._expect("function")
        name: Identifier | None = None
        if self._peek().kind == "ident":
            t = self._next()
            name = Identifier(t.start, t.end, t.text)
        elif declaration:
            raise self._error("function declaration requires a name", self._peek())
        params = self._params()
        body = self._block()
        if declaration and name is not None:
            return FunctionDeclaration(fn_tok.start, body.end, name, params, body)
        return FunctionExpression(fn_tok.start, body.end, name, params, body)

    def _params(self) -> list[Node]:
        self._expect("(")
        params: list[Node] = []
        while not self._is(")"):
            params.append(self._param())
            if not self._accept(","):
                break
        self._expect(")")
        return params

    def _param(self) -> Node:
        spread = self._accept("...")
        target = self._binding_target()
        node: Node = target
        if self._accept("="):
            default = self._assignment()
            node = AssignmentExpression(target.start, default.end, "=", target, default)
        if spread is not None:
            node = SpreadElement(spread.start, node.end, node)
        return node

    # --- 式 ---
    def _expression(self) -> Node:
        first = self._assignment()
        if not self._is(","):
            return first
        items = [first]
        while self._accept(","):
            items.append(self._assignment())
        return SequenceExpression(first.start, items[-1].end, items)

    def _assignment(self) -> Node:
        arrow = self._try_arrow()
        if arrow is not None:
            return arrow
        left = self._conditional()
        tok = self._peek()
        if tok.kind == "punct" and tok.text in _ASSIGN_OPS:
            if not isinstance(left, (Identifier, MemberExpression, ArrayExpression, ObjectExpression)):
                raise self._error("invalid assignment target", tok)
            self._next()
            value = self._assignment()
            return AssignmentExpression(left.start, value.end, tok.text, left, value)
        return left

    def _try_arrow(self) -> Node | None:
        tok = self._peek()
        start = tok.start
        offset = 0
        if tok.kind == "ident" and tok.text == "async" and not self._peek(1).newline_before:
            nxt = self._peek(1)
            if (nxt.kind == "ident" and self._is("=>", 2)) or (nxt.kind == "punct" and nxt.text == "("):
                offset = 1
        head = self._peek(offset)
        if head.kind == "ident" and self._is("=>", offset + 1):
            self._pos += offset
            t = self._next()
            self._expect("=>")
            body = self._arrow_body()
            return ArrowFunction(start, body.end, [Identifier(t.start, t.end, t.text)], body)
        if head.kind == "punct" and head.text == "(":
            close = self._matching_paren(self._pos + offset)
            if close is not None and close + 1 < len(self._tokens):
                after = self._tokens[close + 1]
                if after.kind == "punct" and after.text == "=>":
                    self._pos += offset
                    params = self._params()
                    self._expect("=>")
                    body = self._arrow_body()
                    return ArrowFunction(start, body.end, params, body)
        return None

    def _matching_paren(self, index: int) -> int | None:
        depth = 0
        for i in range(index, len(self._tokens)):
            t = self._tokens[i]
            if t.kind != "punct":
                if t.kind == "eof":
                    return None
                continue
            if t.text in {"(", "[", "{"}:
                depth += 1
            elif t.text in {")", "]", "}"}:
                depth -= 1
                if depth == 0:
                    return i if t.text == ")" else None
        return None

    def _arrow_body(self) -> Node:
        if self._is("{"):
            return self._block()
        return self._assignment()

    def _conditional(self) -> Node:
        test = self._binary(0)
        if not self._accept("?"):
            return test
        consequent = self._assignment()
        self._expect(":")
        alternate = self._assignment()
        return ConditionalExpression(test.start, alternate.end, test, consequent, alternate)

    def _binary(self, min_prec: int) -> Node:
        left = self._unary()
        while True:
            tok = self._peek()
            if tok.kind not in {"punct", "ident"}:
                break
            prec = _BINARY_PRECEDENCE.get(tok.text)
            if prec is None or prec <= min_prec:
                break
            self._next()
            # `**` は右結合。
            right = self._binary(prec - 1 if tok.text == "**" else prec)
            left = BinaryExpression(left.start, right.end, tok.text, left, right)
        return left

    def _unary(self) -> Node:
        tok = self._peek()
        if (tok.kind == "punct" and tok.text in _UNARY_PUNCT) or (
            tok.kind == "ident" and tok.text in _UNARY_WORDS
        ):
            self._next()
            argument = self._unary()
            return UnaryExpression(tok.start, argument.end, tok.text, argument)
        if tok.kind == "punct" and tok.text in {"++", "--"}:
            self._next()
            argument = self._unary()
            return UpdateExpression(tok.start, argument.end, tok.text, argument, True)
        expr = self._call_member()
        nxt = self._peek()
        if nxt.kind == "punct" and nxt.text in {"++", "--"} and not nxt.newline_before:
            self._next()
            return UpdateExpression(expr.start, nxt.end, nxt.text, expr, False)
        return expr

    def _call_member(self) -> Node:
        tok = self._peek()
        if tok.kind == "ident" and tok.text == "new":
            self._next()
            callee = self._member_chain(self._primary(), allow_call=False)
            args: list[Node] = []
            if self._is("("):
                args = self._arguments()
            expr: Node = NewExpression(tok.start, self._prev_end(), callee, args)
        else:
            expr = self._primary()
        return self._member_chain(expr, allow_call=True)

    def _member_chain(self, expr: Node, *, allow_call: bool) -> Node:
        while True:
            if self._accept(".") or self._accept("?."):
                if allow_call and self._is("("):
                    # `fn?.(...)`
                    args = self._arguments()
                    expr = CallExpression(expr.start, self._prev_end(), expr, args)
                    continue
                if allow_call and self._is("["):
                    continue
                prop = self._peek()
                if prop.kind != "ident":
                    raise self._error(f"expected property name but found {prop.text!r}", prop)
                self._next()
                expr = MemberExpression(
                    expr.start, prop.end, expr, Identifier(prop.start, prop.end, prop.text)
                )
            elif self._is("["):
                self._next()
                prop_expr = self._expression()
                close = self._expect("]")
                expr = MemberExpression(expr.start, close.end, expr, prop_expr, True)
            elif allow_call and self._is("("):
                args = self._arguments()
                expr = CallExpression(expr.start, self._prev_end(), expr, args)
            elif allow_call and self._peek().kind == "template":
                t = self._next()
                expr = CallExpression(
                    expr.start, t.end, expr, [TemplateLiteral(t.start, t.end, t.text)]
                )
            else:
                return expr

    def _arguments(self) -> list[Node]:
        self._expect("(")
        args: list[Node] = []
        while not self._is(")"):
            spread = self._accept("...")
            arg = self._assignment()
            if spread is not None:
                arg = SpreadElement(spread.start, arg.end, arg)
            args.append(arg)
            if not self._accept(","):
                break
        self._expect(")")
        return args

    def _primary(self) -> Node:
        tok = self._peek()
        if tok.kind == "number":
            self._next()
            return NumericLiteral(tok.start, tok.end, _numeric_value(tok.text), tok.text)
        if tok.kind == "string":
            self._next()
            return StringLiteral(tok.start, tok.end, tok.text)
        if tok.kind == "template":
            self._next()
            return TemplateLiteral(tok.start, tok.end, tok.text)
        if tok.kind == "ident":
            if tok.text == "function":
                return self._function(declaration=False)
            self._next()
            return Identifier(tok.start, tok.end, tok.text)
        if self._is("("):
            self._next()
            inner = self._expression()
            self._expect(")")
            return inner
        if self._is("["):
            return self._array()
        if self._is("{"):
            return self._object()
        if tok.kind == "eof":
            raise self._error("unexpected end of input", tok)
        raise self._error(f"unexpected token {tok.text!r}", tok)

    def _array(self) -> ArrayExpression:
        open_tok = self._expect("[")
        elements: list[Node | None] = []
        while not self._is("]"):
            if self._is(","):
                self._next()
                elements.append(None)
                continue
            spread = self._accept("...")
            item = self._assignment()
            if spread is not None:
                item = SpreadElement(spread.start, item.end, item)
            elements.append(item)
            if not self._accept(","):
                break
        close = self._expect("]")
        return ArrayExpression(open_tok.start, close.end, elements)

    def _object(self) -> ObjectExpression:
        open_tok = self._expect("{")
        properties: list[Node] = []
        while not self._is("}"):
            spread = self._accept("...")
            if spread is not None:
                arg = self._assignment()
                properties.append(SpreadElement(spread.start, arg.end, arg))
            else:
                properties.append(self._property())
            if not self._accept(","):
                break
        close = self._expect("}")
        return ObjectExpression(open_tok.start, close.end, properties)

    def _property(self) -> Property:
        tok = self._peek()
        computed = False
        key: Node
        if self._is("["):
            self._next()
            key = self._assignment()
            self._expect("]")
            computed = True
        elif tok.kind in {"ident", "string", "number"}:
            self._next()
            if tok.kind == "number":
                key = NumericLiteral(tok.start, tok.end, _numeric_value(tok.text), tok.text)
            elif tok.kind == "string":
                key = StringLiteral(tok.start, tok.end, tok.text)
            else:
                key = Identifier(tok.start, tok.end, tok.text)
        else:
            raise self._error(f"unexpected token {tok.text!r} in object literal", tok)

        if self._is("("):
            params = self._params()
            body = self._block()
            fn = FunctionExpression(key.start, body.end, None, params, body)
            return Property(key.start, body.end, key, fn, computed)
        if self._accept(":"):
            value = self._assignment()
            return Property(key.start, value.end, key, value, computed)
        if isinstance(key, Identifier):
            return Property(key.start, key.end, key, key, computed)
        raise self._error("expected ':' in object literal", self._peek())


def _numeric_value(raw: str) -> float:
    lowered = raw.lower().replace("_", "")
    if lowered.startswith(("0x", "0b", "0o")):
        return float(int(lowered, 0))
    return float(lowered)


def parse(text: str) -> Program:
    """text を解析して Program を返す。

    Raises
    ------
    ParseError
        構文的に不正な入力、またはサブセット外の構文。

    Notes
    -----
    `class` 宣言、`do ... while`、`switch`、`try`、正規表現リテラルは扱わない。
    これらを含むブロックは ParseError になり、コントロールは作られない。
    """

    return _Parser(str(text)).parse_program()


__all__ = [
    "Node",
    "Comment",
    "Program",
    "Identifier",
    "NumericLiteral",
    "StringLiteral",
    "TemplateLiteral",
    "ArrayExpression",
    "Property",
    "ObjectExpression",
    "SpreadElement",
    "UnaryExpression",
    "UpdateExpression",
    "BinaryExpression",
    "ConditionalExpression",
    "AssignmentExpression",
    "SequenceExpression",
    "CallExpression",
    "NewExpression",
    "MemberExpression",
    "ArrowFunction",
    "FunctionExpression",
    "ExpressionStatement",
    "VariableDeclarator",
    "VariableDeclaration",
    "FunctionDeclaration",
    "ReturnStatement",
    "IfStatement",
    "ForStatement",
    "ForEachStatement",
    "WhileStatement",
    "JumpStatement",
    "BlockStatement",
    "EmptyStatement",
    "iter_children",
    "walk",
    "parse",
]
