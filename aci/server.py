"""
ACI Server — HTTP Interface for encode/decode
=============================================
FastAPI application exposing the interface encoder and decoder.

Launch:
    python -m aci.server            # Direct
    aci serve --port 8080           # Via CLI

Endpoints:
    GET  /api/health                → Liveness + version
    POST /api/encode                → Contract source → interface description
    POST /api/decode                → Interface description → declaration stub
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aci import __version__
from aci import codec
from aci.config import load_config
from aci.decoder import decode, decode_interface
from aci.encoder import encode
from aci.errors import MalformedInterface, ParseError, TypeCheckError

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  Request Models
# ─────────────────────────────────────────────────────────────

class EncodeRequest(BaseModel):
    source: str
    indent: Optional[int] = None


class DecodeRequest(BaseModel):
    interface: Union[str, dict[str, Any]]
    include_type_defs: Optional[bool] = None


# ─────────────────────────────────────────────────────────────
#  App
# ─────────────────────────────────────────────────────────────

def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title="ACI", version=__version__)

    @app.exception_handler(ParseError)
    async def on_parse_error(request: Request, exc: ParseError):
        logger.warning("encode rejected: %s", exc.message)
        return JSONResponse(status_code=400, content={
            "error": "parse",
            "message": exc.message,
            "line": exc.line,
            "column": exc.column,
        })

    @app.exception_handler(TypeCheckError)
    async def on_type_error(request: Request, exc: TypeCheckError):
        logger.warning("encode rejected: %d type error(s)", len(exc.issues))
        return JSONResponse(status_code=422, content={
            "error": "type",
            "issues": [
                {"line": i.pos.line, "column": i.pos.col, "message": i.message}
                for i in exc.issues
            ],
        })

    @app.exception_handler(MalformedInterface)
    async def on_malformed(request: Request, exc: MalformedInterface):
        logger.warning("decode rejected: %s", exc.message)
        return JSONResponse(status_code=400, content={
            "error": "malformed",
            "key": exc.key,
            "path": exc.path,
            "message": exc.message,
        })

    @app.get("/api/health")
    async def api_health():
        return {"status": "ok", "version": __version__}

    @app.post("/api/encode")
    async def api_encode(req: EncodeRequest):
        """Encode contract source. Returns the description as an object and as text."""
        structure = encode(req.source)
        indent = req.indent if req.indent is not None else load_config().json_indent
        text = codec.dumps(structure, indent=indent)
        return {"interface": json.loads(text), "text": text}

    @app.post("/api/decode")
    async def api_decode(req: DecodeRequest):
        """Decode an interface description given as JSON text or as an object."""
        if isinstance(req.interface, str):
            stub = decode_interface(req.interface, include_type_defs=req.include_type_defs)
        else:
            stub = decode(req.interface, include_type_defs=req.include_type_defs)
        return {"stub": stub}

    return app


app = create_app()


def run_server(host: str | None = None, port: int | None = None):
    """Launch the ACI server with uvicorn."""
    import uvicorn

    cfg = load_config()
    host = host or cfg.host
    port = port or cfg.port
    logger.info("ACI server listening on http://%s:%d", host, port)
    print(f"\n─── ACI Server ───")
    print(f"  http://{host}:{port}")
    print(f"  Press Ctrl+C to stop\n")

    uvicorn.run(app, host=host, port=port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    from aci.config import configure_logging

    configure_logging()
    run_server()
