"""
Declaration extraction: pulls the type and function definitions out of a
contract and orders them by source position.
"""
from .parser import Contract, LetFun, TypeDef


def contract_name(contract: Contract) -> str:
    return contract.con.name


def contract_types(contract: Contract) -> list[TypeDef]:
    return [d for d in contract.decls if isinstance(d, TypeDef)]


def contract_funcs(contract: Contract) -> list[LetFun]:
    return [d for d in contract.decls if isinstance(d, LetFun)]


def sort_decls(decls) -> list:
    """Stable sort on source position; equal positions keep their input order.

    Declarations without a position (built by hand) sort first.
    """
    return sorted(decls, key=_position)


def _position(decl) -> tuple[int, int]:
    if decl.ann is None:
        return (0, 0)
    return (decl.ann.line, decl.ann.col)


def extract(contract: Contract) -> tuple[list[TypeDef], list[LetFun]]:
    """Return (types, functions), each in source order."""
    return sort_decls(contract_types(contract)), sort_decls(contract_funcs(contract))
