from datetime import datetime
from typing import Optional

from birdguide.schemas.common_schema import CamelModel


class BadgeRead(CamelModel):
    id: int
    name: str
    title: str
    description: str
    icon: Optional[str] = None
    color: Optional[str] = None


class BadgeWithStatus(CamelModel):
    id: int
    name: str
    title: str
    description: str
    earned: bool
    earned_at: Optional[datetime] = None
