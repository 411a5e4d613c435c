from contextvars import ContextVar
from typing import Optional

from starlette.requests import Request

# Request currently being served; read by the response envelope builder
request_context: ContextVar[Optional[Request]] = ContextVar(
    "request_context", default=None
)
