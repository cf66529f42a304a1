"""
键值配置实体
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


COMMISSION_RATE_KEY = "commission_rate"


@dataclass
class ConfigEntry:
    key: str
    value: str
    updated_at: Optional[datetime] = None
