"""
仓储公共工具：将 SQLAlchemy 异常统一转换为领域层 PersistenceError
"""
from functools import wraps
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from core.logging_config import get_logger
from domain.common.exceptions import PersistenceError


logger = get_logger(__name__)

T = TypeVar("T")


def translate_db_errors(operation: str):
    """装饰仓储方法：数据库异常 -> PersistenceError（领域异常原样抛出）"""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as exc:
                logger.error("repository_error", operation=operation, error=str(exc))
                raise PersistenceError(
                    f"Database operation failed: {operation}",
                    operation=operation,
                    details={"error": exc.__class__.__name__},
                ) from exc

        return wrapper

    return decorator
