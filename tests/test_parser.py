"""
ACI Front-End Tests
===================
Tests for the lexer, parser and type checker.

Usage:
    python -m unittest tests.test_parser -v
    pytest tests/test_parser.py
"""
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from aci.lexer import Lexer, TokenType, Position, ScanError, ScanErrorNoState
from aci.parser import (
    parse_string, Contract, LetFun, TypeDef, Arg,
    Id, Con, TVar, TupleT, RecordT, FieldT, AppT, VariantT, ConstrT, AliasT,
    SyntaxFailure, AmbiguousParse,
)
from aci.typecheck import TypeChecker, infer
from aci.errors import TypeCheckError

EXAMPLES = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "examples")


def _example(name: str) -> str:
    with open(os.path.join(EXAMPLES, name), "r", encoding="utf-8") as f:
        return f.read()


# ─────────────────────────────────────────────
#  Lexer Tests
# ─────────────────────────────────────────────

class TestLexer(unittest.TestCase):

    def test_keywords(self):
        tokens = Lexer("contract type record datatype function private stateful").tokenize()
        self.assertEqual(
            [t.type for t in tokens[:-1]],
            [TokenType.KW_CONTRACT, TokenType.KW_TYPE, TokenType.KW_RECORD,
             TokenType.KW_DATATYPE, TokenType.KW_FUNCTION, TokenType.KW_PRIVATE,
             TokenType.KW_STATEFUL],
        )
        self.assertEqual(tokens[-1].type, TokenType.EOF)

    def test_names_by_case(self):
        tokens = Lexer("balance Token 'a").tokenize()
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[1].type, TokenType.CON)
        self.assertEqual(tokens[2].type, TokenType.TVAR)
        self.assertEqual(tokens[2].value, "'a")

    def test_arrow_versus_equals(self):
        tokens = Lexer("= => ==").tokenize()
        self.assertEqual(tokens[0].type, TokenType.EQ)
        self.assertEqual(tokens[1].type, TokenType.ARROW)
        self.assertEqual(tokens[2].type, TokenType.OPERATOR)

    def test_positions(self):
        tokens = Lexer("contract C =\n  function").tokenize()
        self.assertEqual(tokens[0].pos, Position(1, 1))
        self.assertEqual(tokens[1].pos, Position(1, 10))
        self.assertEqual(tokens[3].pos, Position(2, 3))

    def test_comments_skipped(self):
        tokens = Lexer("// line\n/* block /* nested */ */ x").tokenize()
        self.assertEqual(len(tokens), 2)
        self.assertEqual(tokens[0].value, "x")

    def test_string_literal(self):
        tokens = Lexer('"a\\"b"').tokenize()
        self.assertEqual(tokens[0].type, TokenType.STRING)
        self.assertEqual(tokens[0].value, 'a"b')

    def test_hex_number(self):
        tokens = Lexer("0xff 42").tokenize()
        self.assertEqual(tokens[0].value, "0xff")
        self.assertEqual(tokens[1].value, "42")

    def test_unterminated_string(self):
        with self.assertRaises(ScanError) as ctx:
            Lexer('x = "abc').tokenize()
        self.assertEqual(ctx.exception.pos, Position(1, 5))

    def test_unknown_character(self):
        with self.assertRaises(ScanError) as ctx:
            Lexer("a\n  #").tokenize()
        self.assertEqual(ctx.exception.pos, Position(2, 3))

    def test_unterminated_block_comment(self):
        with self.assertRaises(ScanErrorNoState) as ctx:
            Lexer("x\n/* never closed").tokenize()
        self.assertEqual(ctx.exception.pos, Position(2, 1))


# ─────────────────────────────────────────────
#  Parser Tests
# ─────────────────────────────────────────────

class TestParser(unittest.TestCase):

    def test_single_line_contract(self):
        (c,) = parse_string("contract C = function f(x:int, y:bool) : int = x")
        self.assertEqual(c.con, Con("C"))
        (f,) = c.decls
        self.assertIsInstance(f, LetFun)
        self.assertEqual(f.id, Id("f"))
        self.assertEqual(f.args, (Arg(Id("x"), Id("int")), Arg(Id("y"), Id("bool"))))
        self.assertEqual(f.type, Id("int"))
        self.assertEqual([t.value for t in f.body], ["x"])

    def test_declaration_positions(self):
        (c,) = parse_string("contract C =\n  type t = int\n  function f() : t = 1\n")
        self.assertEqual(c.decls[0].ann, Position(2, 3))
        self.assertEqual(c.decls[1].ann, Position(3, 3))

    def test_type_alias(self):
        (c,) = parse_string("contract C =\n  type pair('a) = ('a, int)\n")
        (t,) = c.decls
        self.assertIsInstance(t, TypeDef)
        self.assertEqual(t.vars, (TVar("'a"),))
        self.assertEqual(t.typedef, AliasT(TupleT((TVar("'a"), Id("int")))))

    def test_record(self):
        (c,) = parse_string("contract C =\n  record state = { owner : address, n : int }\n")
        self.assertEqual(
            c.decls[0].typedef,
            RecordT((FieldT(Id("owner"), Id("address")), FieldT(Id("n"), Id("int")))),
        )

    def test_datatype(self):
        (c,) = parse_string("contract C =\n  datatype opt('a) = No | Yes('a, int)\n")
        self.assertEqual(
            c.decls[0].typedef,
            VariantT((
                ConstrT(Con("No"), ()),
                ConstrT(Con("Yes"), (TVar("'a"), Id("int"))),
            )),
        )

    def test_applied_and_nested_types(self):
        (c,) = parse_string(
            "contract C = function f(m : map((address, int), list(string))) : unit = ()"
        )
        arg_type = c.decls[0].args[0].type
        self.assertEqual(
            arg_type,
            AppT(Id("map"), (
                TupleT((Id("address"), Id("int"))),
                AppT(Id("list"), (Id("string"),)),
            )),
        )

    def test_parenthesized_type_is_not_a_tuple(self):
        (c,) = parse_string("contract C = function f(x : (int)) : () = ()")
        f = c.decls[0]
        self.assertEqual(f.args[0].type, Id("int"))
        self.assertEqual(f.type, TupleT(()))

    def test_modifiers(self):
        (c,) = parse_string(
            "contract C =\n"
            "  private function a() : int = 1\n"
            "  stateful function b() : int = 2\n"
        )
        self.assertTrue(c.decls[0].private)
        self.assertFalse(c.decls[0].stateful)
        self.assertTrue(c.decls[1].stateful)

    def test_body_brackets_balance(self):
        (c,) = parse_string(
            "contract C =\n"
            "  function f(x : int) : int =\n"
            "    switch(x)\n"
            "      0 => { a = 1 }\n"
            "      _ => x\n"
            "  function g() : int = 2\n"
        )
        self.assertEqual([d.id.name for d in c.decls], ["f", "g"])

    def test_multiple_contracts(self):
        contracts = parse_string(_example("registry.aes"))
        self.assertEqual([c.con.name for c in contracts], ["Token", "Registry"])

    def test_alias_to_earlier_contract(self):
        contracts = parse_string(_example("registry.aes"))
        backing = contracts[1].decls[1]
        self.assertEqual(backing.typedef, AliasT(Con("Token")))

    def test_ambiguous_alias(self):
        with self.assertRaises(AmbiguousParse) as ctx:
            parse_string("contract C =\n  type t = Foo\n")
        self.assertEqual(ctx.exception.pos, Position(2, 12))
        self.assertEqual(len(ctx.exception.alternatives), 2)

    def test_empty_input(self):
        with self.assertRaises(SyntaxFailure) as ctx:
            parse_string("")
        self.assertEqual(ctx.exception.pos, Position(1, 1))

    def test_missing_body(self):
        with self.assertRaises(SyntaxFailure) as ctx:
            parse_string("contract C =\n  function f() : int =\n")
        self.assertIn("function body", ctx.exception.detail)

    def test_function_types_rejected(self):
        with self.assertRaises(SyntaxFailure) as ctx:
            parse_string("contract C = function f(g : (int) => int) : int = 1")
        self.assertIn("function types", ctx.exception.detail)

    def test_unbalanced_body(self):
        with self.assertRaises(SyntaxFailure):
            parse_string("contract C = function f() : int = 1)")

    def test_empty_contract(self):
        (c,) = parse_string("contract Empty =\n")
        self.assertEqual(c.decls, ())


# ─────────────────────────────────────────────
#  Type Checker Tests
# ─────────────────────────────────────────────

class TestTypeChecker(unittest.TestCase):

    def _issues(self, source: str) -> list[str]:
        with self.assertRaises(TypeCheckError) as ctx:
            infer(parse_string(source))
        return [i.message for i in ctx.exception.issues]

    def test_examples_check(self):
        for name in ("token.aes", "registry.aes"):
            contracts = parse_string(_example(name))
            self.assertEqual(infer(contracts), contracts)

    def test_unknown_type(self):
        issues = self._issues("contract C = function f(x : money) : int = 1")
        self.assertEqual(issues, ["unknown type money in function f"])

    def test_arity_mismatch(self):
        issues = self._issues("contract C = function f(x : map(int)) : list = 1")
        self.assertEqual(len(issues), 2)
        self.assertIn("type map expects 2 type argument(s), got 1", issues[0])
        self.assertIn("type list expects 1 type argument(s), got 0", issues[1])

    def test_declared_type_arity(self):
        issues = self._issues(
            "contract C =\n"
            "  type pair('a, 'b) = ('a, 'b)\n"
            "  function f(p : pair(int)) : int = 1\n"
        )
        self.assertIn("type pair expects 2 type argument(s), got 1", issues[0])

    def test_unbound_type_variable(self):
        issues = self._issues("contract C =\n  type t('a) = ('a, 'b)\n")
        self.assertEqual(issues, ["unbound type variable 'b in the definition of t"])

    def test_function_type_variables_are_free(self):
        contracts = parse_string("contract C = function id(x : 'a) : 'a = x")
        self.assertEqual(infer(contracts), contracts)

    def test_missing_annotations(self):
        issues = self._issues("contract C = function f(x) = x")
        self.assertEqual(issues, [
            "function f has no return type annotation",
            "argument x of function f has no type annotation",
        ])

    def test_duplicates(self):
        issues = self._issues(
            "contract C =\n"
            "  record r = { a : int, a : int }\n"
            "  function f(x : int, x : int) : int = 1\n"
            "  function f() : int = 2\n"
        )
        self.assertEqual(len(issues), 3)
        self.assertIn("field a is repeated", issues[0])
        self.assertIn("argument x is repeated", issues[1])
        self.assertIn("function f is already defined", issues[2])

    def test_unknown_contract_type(self):
        issues = self._issues("contract C = function f() : Oracle = 1")
        self.assertEqual(issues, ["unknown contract type Oracle in function f"])

    def test_issues_sorted_by_position(self):
        with self.assertRaises(TypeCheckError) as ctx:
            infer(parse_string(
                "contract C =\n"
                "  function g(y : bad) : int = 1\n"
                "  type t = worse\n"
            ))
        lines = [i.pos.line for i in ctx.exception.issues]
        self.assertEqual(lines, sorted(lines))
        self.assertIn("line 2, column 18", str(ctx.exception))

    def test_options_accepted(self):
        contracts = parse_string("contract C = function f() : int = 1")
        self.assertEqual(TypeChecker({"reserved": True}).infer(contracts), contracts)


if __name__ == "__main__":
    unittest.main()
