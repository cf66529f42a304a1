from starlette.requests import Request

from api.middleware.logging import LoggingMiddleware


def _request(path: str, headers=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "POST", "path": path, "headers": raw_headers, "query_string": b""})


async def _noop_app(scope, receive, send):
    return None


def test_webhook_bodies_are_never_logged():
    middleware = LoggingMiddleware(_noop_app)
    assert middleware._should_log_body(_request("/api/v1/webhooks/stripe", {"X-Log-Body": "true"})) is False
    assert middleware._should_log_body(_request("/api/v1/other", {"X-Log-Body": "true"})) is True


def test_sensitive_fields_are_masked():
    middleware = LoggingMiddleware(_noop_app)
    data = {"email": "a@b.c", "nested": [{"secret": "x", "title": "Sunrise"}]}
    assert middleware._sanitize_data(data) == {"email": "***", "nested": [{"secret": "***", "title": "Sunrise"}]}
