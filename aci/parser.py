"""
ACI Parser
==========
Recursive-descent parser that builds an Abstract Syntax Tree (AST)
from the token stream produced by the Lexer.

Supports:
  - contract blocks (several per source unit)
  - type aliases, records and datatypes, with type parameters
  - function declarations with modifiers, annotated arguments and
    an optional return type; bodies are kept as raw token spans
  - the full type grammar: type variables, named and applied types,
    contract types, tuples

Unlike a compiler front end this parser stops at the first problem:
every failure is raised as a ParseFailure carrying its position.
"""
from dataclasses import dataclass, field

from .lexer import Lexer, ParseFailure, Position, Token, TokenType


# ─────────────────────────────────────────────────────────────
#  AST Nodes — Names
# ─────────────────────────────────────────────────────────────
#
# Source annotations never take part in equality or repr: two nodes
# with the same shape are the same node wherever they were written.

@dataclass(frozen=True)
class Id:
    """A lower-case identifier: a builtin or declared type, a function or argument name."""
    name: str
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Con:
    """A capitalized identifier: a contract name or a constructor tag."""
    name: str
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TVar:
    """A type variable: 'a."""
    name: str
    ann: Position | None = field(default=None, compare=False, repr=False)


# ─────────────────────────────────────────────────────────────
#  AST Nodes — Type Expressions
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TupleT:
    """A tuple type: (int, bool). The empty tuple is the unit type."""
    args: tuple = ()


@dataclass(frozen=True)
class FieldT:
    """A single record field: name : type."""
    id: Id
    type: object
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class RecordT:
    """A record type: { owner : address, balance : int }."""
    fields: tuple[FieldT, ...] = ()


@dataclass(frozen=True)
class AppT:
    """A named type applied to type arguments: map(address, int)."""
    id: Id
    fields: tuple = ()


@dataclass(frozen=True)
class ConstrT:
    """A variant constructor: Some('a), None."""
    con: Con
    args: tuple = ()
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VariantT:
    """A sum type: the alternatives of a datatype."""
    cons: tuple[ConstrT, ...] = ()


@dataclass(frozen=True)
class AliasT:
    """Wraps the body of a plain `type` declaration."""
    type: object


# ─────────────────────────────────────────────────────────────
#  AST Nodes — Declarations
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Arg:
    """A function argument. `type` is None when the argument is unannotated."""
    id: Id
    type: object = None
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LetFun:
    """A function declaration: function f(x : int) : int = body."""
    id: Id
    args: tuple[Arg, ...] = ()
    type: object = None
    body: tuple[Token, ...] = field(default=(), compare=False, repr=False)
    private: bool = False
    stateful: bool = False
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class TypeDef:
    """A type declaration: type, record or datatype."""
    id: Id
    vars: tuple[TVar, ...] = ()
    typedef: object = None
    ann: Position | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Contract:
    """A contract block and its declarations, in source order."""
    con: Con
    decls: tuple = ()
    ann: Position | None = field(default=None, compare=False, repr=False)


# ─────────────────────────────────────────────────────────────
#  Parser Failures
# ─────────────────────────────────────────────────────────────

class SyntaxFailure(ParseFailure):
    """The token stream does not match the grammar."""


class AmbiguousParse(ParseFailure):
    """More than one reading of the input is valid."""

    def __init__(self, pos: Position, alternatives: list):
        super().__init__(pos, f"ambiguous parse ({len(alternatives)} alternatives)")
        self.alternatives = list(alternatives)


# ─────────────────────────────────────────────────────────────
#  Parser
# ─────────────────────────────────────────────────────────────

DECL_START = (
    TokenType.KW_TYPE, TokenType.KW_RECORD, TokenType.KW_DATATYPE,
    TokenType.KW_FUNCTION, TokenType.KW_PRIVATE, TokenType.KW_PUBLIC,
    TokenType.KW_STATEFUL,
)

MODIFIERS = (TokenType.KW_PRIVATE, TokenType.KW_PUBLIC, TokenType.KW_STATEFUL)

OPENERS = {TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE}
CLOSERS = {TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE}

_DISPLAY = {
    TokenType.LPAREN: "'('", TokenType.RPAREN: "')'",
    TokenType.LBRACE: "'{'", TokenType.RBRACE: "'}'",
    TokenType.COMMA: "','", TokenType.COLON: "':'",
    TokenType.EQ: "'='", TokenType.BAR: "'|'",
    TokenType.KW_CONTRACT: "'contract'", TokenType.KW_FUNCTION: "'function'",
    TokenType.IDENTIFIER: "an identifier", TokenType.CON: "a capitalized name",
    TokenType.TVAR: "a type variable", TokenType.EOF: "end of input",
}


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return repr(token.value)


class Parser:
    """
    Recursive-descent parser for contract source.

    Usage:
        parser = Parser(tokens)
        contracts = parser.parse()
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self._contract_names: set[str] = set()

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def _fail(self, message: str, token: Token | None = None):
        token = token or self._current()
        raise SyntaxFailure(token.pos, message)

    def _expect(self, token_type: TokenType) -> Token:
        token = self._current()
        if token.type != token_type:
            self._fail(f"unexpected {_describe(token)}, expected {_DISPLAY.get(token_type, token_type.name)}")
        return self._advance()

    # ─────────────────────────────────────────────────────────
    #  Top-Level Parsing
    # ─────────────────────────────────────────────────────────

    def parse(self) -> tuple[Contract, ...]:
        """Parse the token stream into the contracts of the source unit."""
        contracts = []
        while self._current().type != TokenType.EOF:
            contracts.append(self._parse_contract())
        if not contracts:
            self._fail("unexpected end of input, expected 'contract'")
        return tuple(contracts)

    def _parse_contract(self) -> Contract:
        """Parse: contract Name = decl*"""
        token = self._expect(TokenType.KW_CONTRACT)
        name_token = self._expect(TokenType.CON)
        self._expect(TokenType.EQ)

        decls = []
        while self._current().type in DECL_START:
            decls.append(self._parse_decl())

        if self._current().type not in (TokenType.KW_CONTRACT, TokenType.EOF):
            self._fail(f"unexpected {_describe(self._current())}, expected a declaration")

        self._contract_names.add(name_token.value)
        return Contract(
            con=Con(name_token.value, ann=name_token.pos),
            decls=tuple(decls),
            ann=token.pos,
        )

    def _parse_decl(self):
        token = self._current()
        if token.type == TokenType.KW_TYPE:
            return self._parse_type_alias()
        if token.type == TokenType.KW_RECORD:
            return self._parse_record()
        if token.type == TokenType.KW_DATATYPE:
            return self._parse_datatype()
        return self._parse_function()

    # ─────────────────────────────────────────────────────────
    #  Type Declarations
    # ─────────────────────────────────────────────────────────

    def _parse_typedef_head(self) -> tuple[Token, Id, tuple[TVar, ...]]:
        """Parse the `keyword name(vars) =` prefix shared by type declarations."""
        token = self._advance()  # consume type / record / datatype
        name_token = self._expect(TokenType.IDENTIFIER)
        tvars = self._parse_tparams()
        self._expect(TokenType.EQ)
        return token, Id(name_token.value, ann=name_token.pos), tvars

    def _parse_tparams(self) -> tuple[TVar, ...]:
        if self._current().type != TokenType.LPAREN:
            return ()
        self._advance()
        tvars = []
        while True:
            tok = self._expect(TokenType.TVAR)
            tvars.append(TVar(tok.value, ann=tok.pos))
            if self._current().type != TokenType.COMMA:
                break
            self._advance()
        self._expect(TokenType.RPAREN)
        return tuple(tvars)

    def _parse_type_alias(self) -> TypeDef:
        """Parse: type name('a) = type"""
        token, name, tvars = self._parse_typedef_head()
        body_token = self._current()
        body = self._parse_type()

        if isinstance(body, Con) and body.name not in self._contract_names:
            # A bare constructor name reads both as a contract type and as a
            # one-constructor datatype; only an earlier contract settles it.
            raise AmbiguousParse(body_token.pos, [
                TypeDef(id=name, vars=tvars, typedef=AliasT(body), ann=token.pos),
                TypeDef(id=name, vars=tvars,
                        typedef=VariantT((ConstrT(body, (), ann=body.ann),)),
                        ann=token.pos),
            ])

        return TypeDef(id=name, vars=tvars, typedef=AliasT(body), ann=token.pos)

    def _parse_record(self) -> TypeDef:
        """Parse: record name('a) = { field : type, ... }"""
        token, name, tvars = self._parse_typedef_head()
        self._expect(TokenType.LBRACE)
        fields = []
        while True:
            field_token = self._expect(TokenType.IDENTIFIER)
            self._expect(TokenType.COLON)
            fields.append(FieldT(
                id=Id(field_token.value, ann=field_token.pos),
                type=self._parse_type(),
                ann=field_token.pos,
            ))
            if self._current().type != TokenType.COMMA:
                break
            self._advance()
        self._expect(TokenType.RBRACE)
        return TypeDef(id=name, vars=tvars, typedef=RecordT(tuple(fields)), ann=token.pos)

    def _parse_datatype(self) -> TypeDef:
        """Parse: datatype name('a) = Con | Con(type, ...) | ..."""
        token, name, tvars = self._parse_typedef_head()
        cons = [self._parse_constructor()]
        while self._current().type == TokenType.BAR:
            self._advance()
            cons.append(self._parse_constructor())
        return TypeDef(id=name, vars=tvars, typedef=VariantT(tuple(cons)), ann=token.pos)

    def _parse_constructor(self) -> ConstrT:
        con_token = self._expect(TokenType.CON)
        args = ()
        if self._current().type == TokenType.LPAREN:
            args = self._parse_type_args()
        return ConstrT(Con(con_token.value, ann=con_token.pos), args, ann=con_token.pos)

    # ─────────────────────────────────────────────────────────
    #  Function Declarations
    # ─────────────────────────────────────────────────────────

    def _parse_function(self) -> LetFun:
        """Parse: [private|public|stateful]* function name(args) [: type] = body"""
        start = self._current()
        modifiers = set()
        while self._current().type in MODIFIERS:
            modifiers.add(self._advance().type)

        self._expect(TokenType.KW_FUNCTION)
        name_token = self._expect(TokenType.IDENTIFIER)
        args = self._parse_args()

        ret_type = None
        if self._current().type == TokenType.COLON:
            self._advance()
            ret_type = self._parse_type()

        self._expect(TokenType.EQ)
        body = self._parse_body()

        return LetFun(
            id=Id(name_token.value, ann=name_token.pos),
            args=args,
            type=ret_type,
            body=body,
            private=TokenType.KW_PRIVATE in modifiers,
            stateful=TokenType.KW_STATEFUL in modifiers,
            ann=start.pos,
        )

    def _parse_args(self) -> tuple[Arg, ...]:
        self._expect(TokenType.LPAREN)
        args = []
        if self._current().type == TokenType.RPAREN:
            self._advance()
            return ()
        while True:
            arg_token = self._expect(TokenType.IDENTIFIER)
            arg_type = None
            if self._current().type == TokenType.COLON:
                self._advance()
                arg_type = self._parse_type()
            args.append(Arg(Id(arg_token.value, ann=arg_token.pos), arg_type, ann=arg_token.pos))
            if self._current().type != TokenType.COMMA:
                break
            self._advance()
        self._expect(TokenType.RPAREN)
        return tuple(args)

    def _parse_body(self) -> tuple[Token, ...]:
        """Collect body tokens up to the next declaration at bracket depth 0."""
        tokens = []
        depth = 0
        while True:
            token = self._current()
            if token.type == TokenType.EOF:
                break
            if depth == 0 and (token.type in DECL_START or token.type == TokenType.KW_CONTRACT):
                break
            if token.type in OPENERS:
                depth += 1
            elif token.type in CLOSERS:
                if depth == 0:
                    self._fail(f"unbalanced {_describe(token)} in function body")
                depth -= 1
            tokens.append(self._advance())

        if depth > 0:
            self._fail("unclosed bracket in function body")
        if not tokens:
            self._fail(f"unexpected {_describe(self._current())}, expected a function body")
        return tuple(tokens)

    # ─────────────────────────────────────────────────────────
    #  Type Expressions
    # ─────────────────────────────────────────────────────────

    def _parse_type(self):
        token = self._current()

        if token.type == TokenType.TVAR:
            self._advance()
            return TVar(token.value, ann=token.pos)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            name = Id(token.value, ann=token.pos)
            if self._current().type == TokenType.LPAREN:
                return AppT(name, self._parse_type_args())
            return name

        if token.type == TokenType.CON:
            self._advance()
            return Con(token.value, ann=token.pos)

        if token.type == TokenType.LPAREN:
            self._advance()
            if self._current().type == TokenType.RPAREN:
                self._advance()
                result = TupleT(())
            else:
                args = [self._parse_type()]
                while self._current().type == TokenType.COMMA:
                    self._advance()
                    args.append(self._parse_type())
                self._expect(TokenType.RPAREN)
                result = args[0] if len(args) == 1 else TupleT(tuple(args))
            if self._current().type == TokenType.ARROW:
                self._fail("function types are not supported in contract interfaces")
            return result

        self._fail(f"unexpected {_describe(token)}, expected a type")

    def _parse_type_args(self) -> tuple:
        self._expect(TokenType.LPAREN)
        args = [self._parse_type()]
        while self._current().type == TokenType.COMMA:
            self._advance()
            args.append(self._parse_type())
        self._expect(TokenType.RPAREN)
        return tuple(args)


def parse_string(text: str) -> tuple[Contract, ...]:
    """Scan and parse a source unit. Raises a ParseFailure subclass on bad input."""
    tokens = Lexer(text).tokenize()
    return Parser(tokens).parse()
