from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    username: str = Field(..., min_length=1)
    avatar_ref: Optional[UUID] = None
    date: str
    content: str = Field(..., min_length=1)
    image_ref: Optional[UUID] = None
