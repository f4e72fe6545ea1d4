"""
ACI Type Checker
================
Static pass that runs after parsing and before interface extraction.
It validates the parsed contracts and returns them as the typed AST.

Checks:
  1. Names in type positions resolve to a builtin, a type declared in
     the same contract, or (for capitalized names) a contract of the unit
  2. Applied types are used with their declared arity
  3. Type-definition variables are unique and the body only uses bound ones
  4. No duplicate type, function, field, constructor or argument names
  5. Every function argument and every return type is annotated

All issues are collected and reported together, sorted by position.
"""
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import TypeCheckError
from .lexer import Position
from .parser import (
    AliasT, AppT, Con, ConstrT, Contract, FieldT, Id, LetFun,
    RecordT, TupleT, TVar, TypeDef, VariantT,
)

logger = logging.getLogger(__name__)


BUILTIN_TYPES: dict[str, int] = {
    "int": 0,
    "bool": 0,
    "string": 0,
    "address": 0,
    "hash": 0,
    "bits": 0,
    "bytes": 0,
    "signature": 0,
    "unit": 0,
    "char": 0,
    "ttl": 0,
    "list": 1,
    "option": 1,
    "map": 2,
    "oracle": 2,
    "oracle_query": 2,
}

_UNKNOWN = Position(0, 0)


@dataclass(frozen=True)
class TypeIssue:
    """A single type-checking problem."""
    pos: Position
    message: str

    def __str__(self) -> str:
        return f"line {self.pos.line}, column {self.pos.col}: {self.message}"


class TypeChecker:
    """
    Structural checker for parsed contracts.

    Usage:
        checker = TypeChecker()
        typed = checker.infer(contracts)
    """

    def __init__(self, options: Mapping[str, Any] | None = None):
        # Reserved: no option changes checking yet.
        self.options = dict(options or {})
        self.issues: list[TypeIssue] = []
        self._contract_names: set[str] = set()
        self._local_types: dict[str, int] = {}

    def infer(self, contracts) -> tuple[Contract, ...]:
        """Check every contract. Returns the typed AST or raises TypeCheckError."""
        contracts = tuple(contracts)
        self.issues = []
        self._contract_names = {c.con.name for c in contracts}

        for contract in contracts:
            self._check_contract(contract)

        if self.issues:
            issues = sorted(self.issues, key=lambda i: i.pos)
            logger.debug("type check failed with %d issue(s)", len(issues))
            raise TypeCheckError(issues)

        return contracts

    def _add(self, ann: Position | None, message: str):
        self.issues.append(TypeIssue(ann or _UNKNOWN, message))

    # ─────────────────────────────────────────────────────────
    #  Contracts and Declarations
    # ─────────────────────────────────────────────────────────

    def _check_contract(self, contract: Contract):
        typedefs = [d for d in contract.decls if isinstance(d, TypeDef)]
        funcs = [d for d in contract.decls if isinstance(d, LetFun)]

        self._local_types = {}
        for tdef in typedefs:
            name = tdef.id.name
            if name in self._local_types:
                self._add(tdef.id.ann, f"type {name} is already defined in contract {contract.con.name}")
                continue
            if name in BUILTIN_TYPES:
                self._add(tdef.id.ann, f"type {name} shadows a builtin type")
            self._local_types[name] = len(tdef.vars)

        for tdef in typedefs:
            self._check_typedef(tdef)

        seen_funcs: set[str] = set()
        for fdef in funcs:
            if fdef.id.name in seen_funcs:
                self._add(fdef.id.ann, f"function {fdef.id.name} is already defined in contract {contract.con.name}")
            seen_funcs.add(fdef.id.name)
            self._check_function(fdef)

    def _check_typedef(self, tdef: TypeDef):
        bound: set[str] = set()
        for tvar in tdef.vars:
            if tvar.name in bound:
                self._add(tvar.ann, f"type variable {tvar.name} is repeated in the definition of {tdef.id.name}")
            bound.add(tvar.name)

        where = f"the definition of {tdef.id.name}"
        body = tdef.typedef
        if isinstance(body, RecordT):
            self._check_unique(
                [f.id for f in body.fields], "field", where,
            )
        elif isinstance(body, VariantT):
            self._check_unique(
                [c.con for c in body.cons], "constructor", where,
            )
        self._check_type(body, bound, where)

    def _check_function(self, fdef: LetFun):
        where = f"function {fdef.id.name}"
        self._check_unique([a.id for a in fdef.args], "argument", where)

        for arg in fdef.args:
            if arg.type is None:
                self._add(arg.ann, f"argument {arg.id.name} of {where} has no type annotation")
            else:
                self._check_type(arg.type, None, where)

        if fdef.type is None:
            self._add(fdef.id.ann, f"{where} has no return type annotation")
        else:
            self._check_type(fdef.type, None, where)

    def _check_unique(self, names, kind: str, where: str):
        seen: set[str] = set()
        for name in names:
            if name.name in seen:
                self._add(name.ann, f"{kind} {name.name} is repeated in {where}")
            seen.add(name.name)

    # ─────────────────────────────────────────────────────────
    #  Type Expressions
    # ─────────────────────────────────────────────────────────

    def _check_type(self, t, bound: set[str] | None, where: str):
        """Walk a type expression. `bound` is None where any type variable is allowed."""
        if isinstance(t, TVar):
            if bound is not None and t.name not in bound:
                self._add(t.ann, f"unbound type variable {t.name} in {where}")
        elif isinstance(t, Id):
            self._check_arity(t, 0, where)
        elif isinstance(t, Con):
            if t.name not in self._contract_names:
                self._add(t.ann, f"unknown contract type {t.name} in {where}")
        elif isinstance(t, AppT):
            self._check_arity(t.id, len(t.fields), where)
            for arg in t.fields:
                self._check_type(arg, bound, where)
        elif isinstance(t, TupleT):
            for arg in t.args:
                self._check_type(arg, bound, where)
        elif isinstance(t, RecordT):
            for f in t.fields:
                self._check_type(f, bound, where)
        elif isinstance(t, FieldT):
            self._check_type(t.type, bound, where)
        elif isinstance(t, VariantT):
            for con in t.cons:
                self._check_type(con, bound, where)
        elif isinstance(t, ConstrT):
            for arg in t.args:
                self._check_type(arg, bound, where)
        elif isinstance(t, AliasT):
            self._check_type(t.type, bound, where)
        else:
            raise TypeError(f"not a type expression: {t!r}")

    def _check_arity(self, name: Id, arity: int, where: str):
        expected = self._local_types.get(name.name, BUILTIN_TYPES.get(name.name))
        if expected is None:
            self._add(name.ann, f"unknown type {name.name} in {where}")
        elif expected != arity:
            self._add(
                name.ann,
                f"type {name.name} expects {expected} type argument(s), got {arity} in {where}",
            )


def infer(contracts, options: Mapping[str, Any] | None = None) -> tuple[Contract, ...]:
    """Type-check parsed contracts with a fresh checker."""
    return TypeChecker(options).infer(contracts)
