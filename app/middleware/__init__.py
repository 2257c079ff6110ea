"""Request pipeline stages.

Each module provides one ASGI middleware; `app.pipeline` puts them in order.
"""

from app.middleware.base import PipelineStage
from app.middleware.body_parser import BodyParserMiddleware
from app.middleware.cookie_parser import CookieParserMiddleware
from app.middleware.cors import CrossOriginMiddleware
from app.middleware.dispatch import DispatchMiddleware
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.middleware.file_upload import FileUploadMiddleware
from app.middleware.operator_sanitizer import OperatorSanitizerMiddleware
from app.middleware.param_pollution import ParamPollutionMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_logger import RequestLoggerMiddleware
from app.middleware.security_headers import DEFAULT_SECURITY_HEADERS, SecurityHeadersMiddleware
from app.middleware.static_files import StaticFilesMiddleware
from app.middleware.xss_sanitizer import XssSanitizerMiddleware

__all__ = [
    "DEFAULT_SECURITY_HEADERS",
    "BodyParserMiddleware",
    "CookieParserMiddleware",
    "CrossOriginMiddleware",
    "DispatchMiddleware",
    "ErrorHandlerMiddleware",
    "FileUploadMiddleware",
    "OperatorSanitizerMiddleware",
    "ParamPollutionMiddleware",
    "PipelineStage",
    "RateLimitMiddleware",
    "RequestLoggerMiddleware",
    "SecurityHeadersMiddleware",
    "StaticFilesMiddleware",
    "XssSanitizerMiddleware",
]
