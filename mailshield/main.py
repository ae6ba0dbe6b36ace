# mailshield/main.py

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .analyzer import ContentAnalyzer
from .config import Settings
from .schemas import AnalysisOptions, AnalysisPayload, AnalysisResult, AnalyzeRequest, ErrorResponse

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
}


def _error(status_code: int, error) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error).model_dump())


class BodySizeLimitMiddleware:
    """Отклоняет тела больше max_bytes, в том числе chunked без Content-Length."""

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = dict(scope["headers"]).get(b"content-length", b"")
        if length.isdigit() and int(length) > self.max_bytes:
            await _error(413, "Payload too large")(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Поднимается при чтении тела внутри роутера и уходит в http_error_handler
                    raise HTTPException(status_code=413, detail="Payload too large")
            return message

        await self.app(scope, limited_receive, send)


def create_app(settings: Optional[Settings] = None, analyzer: Optional[ContentAnalyzer] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    analyzer = analyzer or ContentAnalyzer(settings)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not settings.safe_browsing_enabled:
        logger.info("GOOGLE_SAFE_BROWSING_API_KEY не задан, проверка Safe Browsing пропускается.")

    app = FastAPI(
        title="MailShield API",
        description="API для проверки писем: ссылки, грамматика, фишинговые фразы.",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Кривое тело запроса считается ошибкой клиента, как и отсутствие payload
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, message)

    @app.post("/api/analyze", response_model=AnalysisResult, responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
    async def analyze(request: AnalyzeRequest):
        """Основной эндпоинт: проверка текста и ссылок письма."""
        if request.payload is None:
            raise HTTPException(status_code=400, detail="Missing payload")

        try:
            payload = AnalysisPayload.from_request(request.payload)
            options = request.options or AnalysisOptions()
            return await analyzer.analyze(payload, options)
        except Exception as e:
            logger.exception("analysis failed")
            return _error(500, str(e) or e.__class__.__name__)

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return "MailShield server running"

    app.state.settings = settings
    app.state.analyzer = analyzer
    return app
