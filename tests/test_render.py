"""
Tests for the type renderer and declaration ordering.
"""
import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from aci.lexer import Position
from aci.parser import (
    Contract, LetFun, TypeDef,
    Id, Con, TVar, TupleT, RecordT, FieldT, AppT, VariantT, ConstrT, AliasT,
)
from aci.render import render_type, render_typedef
from aci.declarations import contract_funcs, contract_types, extract, sort_decls


class TestRenderLeaves(unittest.TestCase):

    def test_names(self):
        self.assertEqual(render_type(TVar("'a")), "'a")
        self.assertEqual(render_type(Id("int")), "int")
        self.assertEqual(render_type(Con("Token")), "Token")


class TestRenderComposites(unittest.TestCase):

    def test_tuple_has_no_space(self):
        self.assertEqual(render_type(TupleT((Id("int"), Id("bool")))), "(int,bool)")

    def test_unit(self):
        self.assertEqual(render_type(TupleT(())), "()")

    def test_record(self):
        record = RecordT((FieldT(Id("a"), Id("int")), FieldT(Id("b"), TVar("'t"))))
        self.assertEqual(render_type(record), "{a : int,b : 't}")

    def test_applied(self):
        t = AppT(Id("map"), (Id("address"), AppT(Id("list"), (Id("int"),))))
        self.assertEqual(render_type(t), "map(address,list(int))")

    def test_constructor_has_space(self):
        self.assertEqual(render_type(ConstrT(Con("C"), (Id("int"), Id("bool")))), "C(int, bool)")

    def test_nullary_constructor(self):
        self.assertEqual(render_type(ConstrT(Con("None"), ())), "None()")

    def test_separator_fidelity(self):
        pair = (Id("A"), Id("B"))
        self.assertNotEqual(render_type(TupleT(pair)), render_type(ConstrT(Con(""), pair)))

    def test_variant(self):
        t = VariantT((
            ConstrT(Con("Left"), (TVar("'a"),)),
            ConstrT(Con("Right"), (TupleT((Id("int"), Id("int"))),)),
        ))
        self.assertEqual(render_type(t), "Left('a) | Right((int,int))")

    def test_alias_is_transparent(self):
        inner = AppT(Id("option"), (Id("int"),))
        self.assertEqual(render_type(AliasT(inner)), render_type(inner))
        self.assertEqual(render_typedef(AliasT(inner)), "option(int)")

    def test_typedef_without_alias(self):
        self.assertEqual(render_typedef(RecordT((FieldT(Id("x"), Id("int")),))), "{x : int}")

    def test_not_a_type(self):
        with self.assertRaises(TypeError):
            render_type("int")


class TestDeclarationOrder(unittest.TestCase):

    def _fun(self, name, line, col):
        return LetFun(id=Id(name), type=Id("int"), ann=Position(line, col))

    def test_sorted_by_line_then_column(self):
        decls = [self._fun("c", 3, 1), self._fun("b", 1, 9), self._fun("a", 1, 2)]
        self.assertEqual([d.id.name for d in sort_decls(decls)], ["a", "b", "c"])

    def test_equal_positions_keep_input_order(self):
        decls = [self._fun("x", 2, 3), self._fun("y", 2, 3), self._fun("w", 1, 1), self._fun("z", 2, 3)]
        self.assertEqual([d.id.name for d in sort_decls(decls)], ["w", "x", "y", "z"])

    def test_extract_partitions(self):
        tdef = TypeDef(id=Id("t"), typedef=AliasT(Id("int")), ann=Position(5, 3))
        f1 = self._fun("f", 4, 3)
        f2 = self._fun("g", 2, 3)
        contract = Contract(con=Con("C"), decls=(f1, tdef, f2))
        self.assertEqual(contract_types(contract), [tdef])
        self.assertEqual(contract_funcs(contract), [f1, f2])
        types, funcs = extract(contract)
        self.assertEqual(types, [tdef])
        self.assertEqual([f.id.name for f in funcs], ["g", "f"])

    def test_unpositioned_sort_first(self):
        decls = [self._fun("b", 2, 1), LetFun(id=Id("x"), type=Id("int")), self._fun("a", 1, 1)]
        self.assertEqual([d.id.name for d in sort_decls(decls)], ["x", "a", "b"])

    def test_empty_contract(self):
        self.assertEqual(extract(Contract(con=Con("E"))), ([], []))


if __name__ == "__main__":
    unittest.main()
