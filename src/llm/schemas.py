from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field, field_validator

# Shape of one item the model is asked to emit. `dueDate` is requested in the
# prompt but not persisted.
class ExtractedTask(BaseModel):
    text: str = Field(..., min_length=1)
    priority: int = 2
    category: str = "general"
    dueDate: Optional[str] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def null_category_is_general(cls, v):
        return "general" if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def null_priority_is_medium(cls, v):
        return 2 if v is None else v

