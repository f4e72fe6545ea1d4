"""
ACI Errors
==========
The error values surfaced by encode_interface / decode_interface,
and the translation of every parser failure shape into ParseError.
"""
from .lexer import ParseFailure, ScanError, ScanErrorNoState
from .parser import AmbiguousParse, SyntaxFailure


class AciError(Exception):
    """Base class for all errors raised by the aci package."""
    pass


class ParseError(AciError):
    """The contract source could not be scanned or parsed."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class TypeCheckError(AciError):
    """The parsed contract is not well typed. Carries every issue found."""

    def __init__(self, issues):
        self.issues = list(issues)
        super().__init__("\n".join(str(i) for i in self.issues))


class MalformedInterface(AciError):
    """An interface description lacks a key, or a key has the wrong shape."""

    def __init__(self, key: str, path: str, problem: str = "missing"):
        if problem == "missing":
            message = f"missing key {key!r} in {path}"
        else:
            message = f"{problem} at {path}.{key}" if key else f"{problem} at {path}"
        super().__init__(message)
        self.key = key
        self.path = path
        self.message = message


def translate_parse_failure(failure: ParseFailure) -> ParseError:
    """Map a scanner/parser failure onto a position-annotated ParseError."""
    if isinstance(failure, (ScanError, ScanErrorNoState)):
        detail = "scan error"
    elif isinstance(failure, AmbiguousParse):
        detail = f"Ambiguous {failure.alternatives!r}"
    elif isinstance(failure, SyntaxFailure):
        detail = failure.detail
    else:
        raise TypeError(f"unknown parser failure: {failure!r}")

    line, col = failure.pos.line, failure.pos.col
    return ParseError(f"line {line}, column {col}: {detail}", line, col)
