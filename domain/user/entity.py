"""
用户领域实体 - 结算流程只读取买家/艺术家联系方式
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import re


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ARTIST = "artist"
    ADMIN = "admin"


@dataclass
class User:
    """用户实体"""

    id: Optional[int]
    username: str
    email: str
    role: UserRole = UserRole.CUSTOMER
    is_active: bool = True

    def __post_init__(self):
        """初始化后的业务规则验证"""
        if isinstance(self.role, str):
            self.role = UserRole(self.role)
        self.validate_email()

    def validate_email(self) -> None:
        """业务规则：邮箱格式验证"""
        if not re.match(EMAIL_PATTERN, self.email):
            raise ValueError(f"无效的邮箱格式: {self.email}")

    @property
    def is_artist(self) -> bool:
        return self.role == UserRole.ARTIST

    @property
    def contact_email(self) -> Optional[str]:
        """可接收通知的邮箱；停用账户不再发送"""
        return self.email if self.is_active else None
