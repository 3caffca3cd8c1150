"""FastAPI application entrypoint for skelgen service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import ParseError
from ..skeleton import DEFAULT_INDENT
from ..transform import DocumentTransformer, TransformOptions, TransformResult


class TransformRequest(BaseModel):
    source: str
    markers: List[str] = Field(default_factory=list)
    symbols: List[str] = Field(default_factory=list)
    indent: int = Field(default=DEFAULT_INDENT, ge=0)


class TransformResponse(BaseModel):
    text: str
    triggers: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str


TransformerFactory = Callable[[TransformOptions], DocumentTransformer]


def _default_transformer(options: TransformOptions) -> DocumentTransformer:
    return DocumentTransformer(options)


def create_app(
    transformer_factory: TransformerFactory = _default_transformer,
) -> FastAPI:
    """Create the FastAPI application exposing the document transform."""

    app = FastAPI(title="Skelgen Service", version="1.0.0")

    async def get_factory() -> TransformerFactory:
        return transformer_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/transform", response_model=TransformResponse)
    async def transform_document(
        payload: TransformRequest,
        factory: TransformerFactory = Depends(get_factory),
    ) -> TransformResponse:
        options = TransformOptions.create(
            markers=payload.markers, symbols=payload.symbols, indent=payload.indent
        )
        transformer = factory(options)

        def _run() -> TransformResult:
            return transformer.transform(payload.source)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover - fallback path when not in async context
            result = _run()
        else:
            result = await loop.run_in_executor(None, _run)

        return TransformResponse(
            text=result.text,
            triggers=[trigger.to_dict() for trigger in result.triggers],
        )

    @app.exception_handler(ParseError)
    async def parse_error_handler(_: Any, exc: ParseError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": exc.message,
                "line": exc.line,
                "column": exc.column,
                "error": type(exc).__name__,
            },
        )

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["HealthResponse", "TransformRequest", "TransformResponse", "create_app", "run_service"]
