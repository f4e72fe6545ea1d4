"""
ACI CLI — Command-Line Interface
================================

Usage:
    # Print the interface description of a contract
    aci encode examples/token.aes
    aci encode examples/token.aes --indent 2 -o token.json

    # Rebuild a calling stub from an interface description
    aci decode token.json
    aci decode token.json --type-defs

    # Parse and type-check only
    aci check examples/token.aes

    # Serve encode/decode over HTTP
    aci serve --port 8080

FILE may be '-' to read from stdin.
"""

from __future__ import annotations

import argparse
import logging
import sys

from aci import __version__
from aci.config import configure_logging, load_config
from aci.decoder import decode_interface
from aci.encoder import encode_interface
from aci.errors import AciError, TypeCheckError, translate_parse_failure
from aci.lexer import ParseFailure
from aci.parser import parse_string
from aci.typecheck import infer

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  Helpers
# ─────────────────────────────────────────────────────────────

def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write(text: str, output: str | None):
    if not text.endswith("\n"):
        text += "\n"
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"✔ Wrote {output}", file=sys.stderr)
    else:
        sys.stdout.write(text)


def _report(error: AciError):
    if isinstance(error, TypeCheckError):
        print(f"✘ {len(error.issues)} type error(s):", file=sys.stderr)
        for issue in error.issues:
            print(f"  {issue}", file=sys.stderr)
    else:
        print(f"✘ {error}", file=sys.stderr)


# ─────────────────────────────────────────────────────────────
#  Commands
# ─────────────────────────────────────────────────────────────

def cmd_encode(args) -> int:
    """Print the interface description of a contract source file."""
    text = encode_interface(_read(args.file), indent=args.indent, public_only=args.public_only)
    _write(text, args.output)
    return 0


def cmd_decode(args) -> int:
    """Print the declaration stub for an interface description."""
    include = True if args.type_defs else None
    _write(decode_interface(_read(args.file), include_type_defs=include), args.output)
    return 0


def cmd_check(args) -> int:
    """Parse and type-check a contract source file."""
    try:
        contracts = infer(parse_string(_read(args.file)))
    except ParseFailure as failure:
        raise translate_parse_failure(failure) from failure
    names = ", ".join(c.con.name for c in contracts)
    print(f"✔ {args.file}: {names} OK")
    return 0


def cmd_serve(args) -> int:
    """Launch the HTTP service."""
    from aci.server import run_server

    cfg = load_config()
    run_server(host=args.host or cfg.host, port=args.port or cfg.port)
    return 0


# ─────────────────────────────────────────────────────────────
#  Main
# ─────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aci",
        description="Contract interface descriptions: encode, decode, check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  aci encode examples/token.aes --indent 2\n"
            "  aci decode token.json\n"
            "  aci check examples/token.aes\n"
            "  aci serve --port 8080\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"aci {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # encode
    p_enc = subparsers.add_parser("encode", help="Contract source → interface JSON")
    p_enc.add_argument("file", help="Contract source file ('-' for stdin)")
    p_enc.add_argument("--indent", type=int, default=None, help="Pretty-print with this indent")
    p_enc.add_argument("--public-only", action="store_true", help="Leave out private functions")
    p_enc.add_argument("--output", "-o", default=None, help="Write to a file instead of stdout")

    # decode
    p_dec = subparsers.add_parser("decode", help="Interface JSON → declaration stub")
    p_dec.add_argument("file", help="Interface JSON file ('-' for stdin)")
    p_dec.add_argument("--type-defs", action="store_true", help="Also emit type definitions")
    p_dec.add_argument("--output", "-o", default=None, help="Write to a file instead of stdout")

    # check
    p_chk = subparsers.add_parser("check", help="Parse and type-check a contract")
    p_chk.add_argument("file", help="Contract source file ('-' for stdin)")

    # serve
    p_srv = subparsers.add_parser("serve", help="Serve encode/decode over HTTP")
    p_srv.add_argument("--host", default=None, help="Bind address (default: ACI_HOST)")
    p_srv.add_argument("--port", default=None, type=int, help="Port number (default: ACI_PORT)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    commands = {
        "encode": cmd_encode,
        "decode": cmd_decode,
        "check": cmd_check,
        "serve": cmd_serve,
    }

    if args.command not in commands:
        parser.print_help()
        return 1

    logger.debug("running %s on %s", args.command, getattr(args, "file", "-"))
    try:
        return commands[args.command](args)
    except AciError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        _report(e)
        return 1
    except OSError as e:
        print(f"✘ {e}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"✘ {args.file}: not valid UTF-8 (byte {e.start})", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
