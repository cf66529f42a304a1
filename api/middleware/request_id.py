"""
Request ID 中间件
生成或透传追踪ID，绑定到 structlog 上下文，结算日志因此可按请求串联
"""
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

import structlog


WEBHOOK_PATH_PREFIX = "/api/v1/webhooks/"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Request ID 追踪中间件

    1. 优先使用 X-Request-ID 请求头，否则生成新的ID
    2. 写入 request.state 与 structlog 上下文
    3. Webhook 请求额外绑定 webhook_provider，便于按支付方筛选日志
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        client_ip = self._get_client_ip(request)

        request.state.request_id = request_id
        request.state.client_ip = client_ip

        structlog.contextvars.clear_contextvars()
        context = {
            "request_id": request_id,
            "client_ip": client_ip,
            "method": request.method,
            "path": request.url.path,
        }
        if request.url.path.startswith(WEBHOOK_PATH_PREFIX):
            context["webhook_provider"] = request.url.path[len(WEBHOOK_PATH_PREFIX):].strip("/")
        structlog.contextvars.bind_contextvars(**context)

        response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response

    def _get_client_ip(self, request: Request) -> str:
        # 代理场景：取 X-Forwarded-For 第一个地址
        x_forwarded_for = request.headers.get("X-Forwarded-For")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip
        return request.client.host if request.client else "unknown"

