# =============================================================================
# app/pipeline.py - Ordered Request Pipeline
# =============================================================================
# The request pipeline as an explicit, ordered list of stage descriptors.
#
#   error_handler ─┐ (wraps everything below)
#     1. body_parser          7. xss_sanitizer
#     2. cookie_parser        8. rate_limiter
#     3. request_logger*      9. param_pollution
#     4. file_upload         10. cors
#     5. operator_sanitizer  11. static_files
#     6. security_headers    12. dispatch → routers
#
#   * development only
#
# Stages run strictly in this order. A stage that raises skips every later
# stage; the error handler turns the exception into the error envelope.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI

from app.config import Settings
from app.middleware import (
    BodyParserMiddleware,
    CookieParserMiddleware,
    CrossOriginMiddleware,
    DispatchMiddleware,
    ErrorHandlerMiddleware,
    FileUploadMiddleware,
    OperatorSanitizerMiddleware,
    ParamPollutionMiddleware,
    RateLimitMiddleware,
    RequestLoggerMiddleware,
    SecurityHeadersMiddleware,
    StaticFilesMiddleware,
    XssSanitizerMiddleware,
)
from lib.rate_limit_store import RateLimitStore


@dataclass(frozen=True)
class StageSpec:
    """One pipeline stage: a name, its middleware class and its options."""
    name: str
    middleware: type
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Pipeline:
    """Ordered stages plus the terminal error stage that wraps them."""
    stages: list[StageSpec]
    error_stage: StageSpec

    @property
    def names(self) -> list[str]:
        return [stage.name for stage in self.stages]


def build_pipeline(settings: Settings, store: RateLimitStore) -> Pipeline:
    """
    Build the ordered stage list from settings.

    Settings are resolved here, once; no stage looks at the environment
    while handling a request.
    """
    stages = [
        StageSpec("body_parser", BodyParserMiddleware, {"limit": settings.JSON_BODY_LIMIT_BYTES}),
        StageSpec("cookie_parser", CookieParserMiddleware),
    ]

    if settings.is_development:
        stages.append(StageSpec("request_logger", RequestLoggerMiddleware))

    stages += [
        StageSpec("file_upload", FileUploadMiddleware),
        StageSpec(
            "operator_sanitizer",
            OperatorSanitizerMiddleware,
            {"replace_with": settings.SANITIZE_REPLACE_WITH},
        ),
        StageSpec("security_headers", SecurityHeadersMiddleware),
        StageSpec("xss_sanitizer", XssSanitizerMiddleware),
        StageSpec(
            "rate_limiter",
            RateLimitMiddleware,
            {
                "store": store,
                "max_requests": settings.RATE_LIMIT_MAX,
                "trust_proxy": settings.TRUST_PROXY,
            },
        ),
        StageSpec(
            "param_pollution",
            ParamPollutionMiddleware,
            {"whitelist": settings.hpp_whitelist_list},
        ),
        StageSpec("cors", CrossOriginMiddleware, {"allow_origins": settings.cors_origins_list}),
        StageSpec("static_files", StaticFilesMiddleware, {"directory": settings.STATIC_DIR}),
        StageSpec("dispatch", DispatchMiddleware),
    ]

    error_stage = StageSpec(
        "error_handler",
        ErrorHandlerMiddleware,
        {"production": settings.is_production},
    )
    return Pipeline(stages=stages, error_stage=error_stage)


def install_pipeline(app: FastAPI, pipeline: Pipeline) -> None:
    """
    Register the pipeline on a FastAPI app.

    Starlette wraps earlier registrations with later ones (the last added
    middleware runs first), so stages are added innermost first and the
    error stage last.
    """
    for stage in reversed(pipeline.stages):
        app.add_middleware(stage.middleware, **stage.options)
    app.add_middleware(pipeline.error_stage.middleware, **pipeline.error_stage.options)
