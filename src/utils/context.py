from contextvars import ContextVar

# Session id tagged onto every log line; set per request by the server middleware
session_id: ContextVar[str | None] = ContextVar[str | None]("session_id", default=None)
