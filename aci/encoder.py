"""
ACI Interface Encoder
=====================
Builds the interface description of a contract: its name, type
definitions and function signatures.

    source → parse → type check → sort declarations → Ordered → JSON

Only the first contract of a source unit is described. Any failure
aborts the whole call; there is never partial output.
"""
import logging
from typing import Any, Callable, Mapping

from . import codec
from .codec import Ordered
from .config import load_config
from .declarations import contract_name, extract
from .errors import AciError, ParseError, translate_parse_failure
from .lexer import ParseFailure
from .parser import Arg, LetFun, TVar, TypeDef, parse_string
from .render import render_type, render_typedef
from .typecheck import infer

logger = logging.getLogger(__name__)


def encode(
    source: str | bytes,
    *,
    parser: Callable[[str], Any] = parse_string,
    checker: Callable[..., Any] = infer,
    options: Mapping[str, Any] | None = None,
    public_only: bool = False,
) -> Ordered:
    """Encode contract source into its ordered interface structure.

    Every function of the contract is described. Pass public_only=True to
    leave out the ones declared private.

    Raises:
        ParseError: the source is not UTF-8, or could not be scanned or parsed.
        AciError: the checker returned no contracts.
        TypeCheckError: raised by the checker, passed through untouched.
    """
    if isinstance(source, bytes):
        source = _decode_source(source)

    try:
        ast = parser(source)
    except ParseFailure as failure:
        raise translate_parse_failure(failure) from failure

    typed = checker(ast, options or {})
    if not typed:
        raise AciError("no contract to describe")
    contract = typed[0]
    if len(typed) > 1:
        logger.debug("describing %s only; %d more contract(s) ignored",
                     contract_name(contract), len(typed) - 1)

    type_defs, funcs = extract(contract)
    if public_only:
        funcs = [f for f in funcs if not f.private]
    logger.debug("encoding %s: %d type(s), %d function(s)",
                 contract_name(contract), len(type_defs), len(funcs))

    return Ordered.of(
        ("contract", Ordered.of(
            ("name", contract_name(contract)),
            ("type_defs", [encode_typedef(t) for t in type_defs]),
            ("functions", [encode_func(f) for f in funcs]),
        )),
    )


def encode_interface(source: str | bytes, *, indent: int | None = None, **kwargs) -> str:
    """Encode contract source straight to interface JSON text."""
    if indent is None:
        indent = load_config().json_indent
    return codec.dumps(encode(source, **kwargs), indent=indent)


def encode_func(fdef: LetFun) -> Ordered:
    return Ordered.of(
        ("name", fdef.id.name),
        ("arguments", [encode_arg(a) for a in fdef.args]),
        ("type", render_type(fdef.type)),
    )


def encode_arg(arg: Arg) -> Ordered:
    return Ordered.of(
        ("name", render_type(arg.id)),
        ("type", render_type(arg.type)),
    )


def encode_typedef(tdef: TypeDef) -> Ordered:
    return Ordered.of(
        ("name", tdef.id.name),
        ("vars", [encode_tvar(v) for v in tdef.vars]),
        ("typedef", render_typedef(tdef.typedef)),
    )


def encode_tvar(tvar: TVar) -> Ordered:
    return Ordered.of(("name", tvar.name))


def _decode_source(source: bytes) -> str:
    try:
        return source.decode("utf-8")
    except UnicodeDecodeError as e:
        head = source[:e.start]
        line = head.count(b"\n") + 1
        col = e.start - (head.rfind(b"\n") + 1) + 1
        raise ParseError(
            f"line {line}, column {col}: invalid UTF-8 byte 0x{source[e.start]:02x}", line, col,
        ) from e
