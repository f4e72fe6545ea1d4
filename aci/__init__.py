"""
aci: Contract Interface descriptions.
Encodes a contract's public surface (name, type definitions, function
signatures) as JSON, and decodes such a description back into a
declaration stub that other contracts can call through.
"""
from .lexer import Lexer, Token, TokenType, Position
from .parser import (
    Parser, parse_string, Contract, LetFun, TypeDef, Arg,
    Id, Con, TVar, TupleT, RecordT, FieldT, AppT, VariantT, ConstrT, AliasT,
)
from .typecheck import TypeChecker, TypeIssue, infer
from .errors import AciError, ParseError, TypeCheckError, MalformedInterface
from .render import render_type
from .encoder import encode, encode_interface
from .decoder import decode, decode_interface

__version__ = "0.1.0"
__all__ = [
    "Lexer", "Token", "TokenType", "Position",
    "Parser", "parse_string", "Contract", "LetFun", "TypeDef", "Arg",
    "Id", "Con", "TVar", "TupleT", "RecordT", "FieldT", "AppT",
    "VariantT", "ConstrT", "AliasT",
    "TypeChecker", "TypeIssue", "infer",
    "AciError", "ParseError", "TypeCheckError", "MalformedInterface",
    "render_type",
    "encode", "encode_interface",
    "decode", "decode_interface",
]
