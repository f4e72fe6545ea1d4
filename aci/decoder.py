"""
ACI Structural Decoder
======================
Turns an interface description back into contract text that can be
pasted into source code calling the contract:

    contract Token =
      function balance : (address) => int

Only function signatures are written, and only argument types. The
type definitions are read but left out unless explicitly requested.
The parser and type checker are never involved.
"""
import logging
from typing import Any, Mapping

from . import codec
from .config import load_config
from .errors import MalformedInterface

logger = logging.getLogger(__name__)


def _require(entry: Any, key: str, path: str, kind: type | tuple = object) -> Any:
    if not isinstance(entry, Mapping):
        raise MalformedInterface("", path, "expected an object")
    if key not in entry:
        raise MalformedInterface(key, path)
    value = entry[key]
    if not isinstance(value, kind):
        expected = "a list" if kind is list else "a string"
        raise MalformedInterface(key, path, f"expected {expected}")
    return value


def decode(interface: Mapping, *, include_type_defs: bool | None = None) -> str:
    """Reconstruct declaration text from a decoded interface mapping."""
    if include_type_defs is None:
        include_type_defs = load_config().decode_type_defs

    contract = _require(interface, "contract", "$")
    return decode_contract(contract, include_type_defs=include_type_defs)


def decode_interface(text: str | bytes, *, include_type_defs: bool | None = None) -> str:
    """Reconstruct declaration text from interface JSON text."""
    return decode(codec.loads(text), include_type_defs=include_type_defs)


def decode_contract(contract: Mapping, *, include_type_defs: bool = False) -> str:
    name = _require(contract, "name", "contract", str)
    tdefs = _require(contract, "type_defs", "contract", list)
    funcs = _require(contract, "functions", "contract", list)
    logger.debug("decoding %s: %d function(s)", name, len(funcs))

    lines = [f"contract {name} =\n"]
    if include_type_defs:
        lines.extend(decode_tdef(t, f"contract.type_defs[{i}]") for i, t in enumerate(tdefs))
    lines.extend(decode_func(f, f"contract.functions[{i}]") for i, f in enumerate(funcs))
    return "".join(lines)


def decode_func(func: Mapping, path: str) -> str:
    name = _require(func, "name", path, str)
    args = _require(func, "arguments", path, list)
    ret = _require(func, "type", path, str)
    return f"  function {name} : {decode_args(args, path)} => {ret}\n"


def decode_args(args: list, path: str) -> str:
    types = [
        _require(arg, "type", f"{path}.arguments[{i}]", str)
        for i, arg in enumerate(args)
    ]
    return "(" + ", ".join(types) + ")"


def decode_tdef(tdef: Mapping, path: str) -> str:
    name = _require(tdef, "name", path, str)
    tvars = _require(tdef, "vars", path, list)
    body = _require(tdef, "typedef", path, str)
    return f"  type {name}{decode_tvars(tvars, path)} = {body}\n"


def decode_tvars(tvars: list, path: str) -> str:
    if not tvars:
        return ""
    names = [
        _require(v, "name", f"{path}.vars[{i}]", str)
        for i, v in enumerate(tvars)
    ]
    return "(" + ", ".join(names) + ")"
