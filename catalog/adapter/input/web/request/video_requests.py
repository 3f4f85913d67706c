from typing import Optional

from pydantic import BaseModel, Field


class VideoLabelUpdateRequest(BaseModel):
    topic: Optional[str] = Field(default=None, max_length=100, description="Manual topic; empty clears it")
    brand: Optional[str] = Field(default=None, max_length=100, description="Manual brand; empty clears it")
