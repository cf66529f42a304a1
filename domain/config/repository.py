"""
配置仓储接口
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import ConfigEntry


class ConfigRepository(ABC):

    @abstractmethod
    async def get(self, key: str) -> Optional[ConfigEntry]:
        """读取配置项"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> ConfigEntry:
        """写入（新增或覆盖）配置项，并刷新更新时间"""
        pass
