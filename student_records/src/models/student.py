"""Student record models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentRecord(BaseModel):
    """A single student entry as exchanged with API clients."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "studentID": 1,
                "name": "Alice",
                "filePath": "http://localhost:8000/home/get/3f2c9a1e.jpeg",
            }
        },
    )

    student_id: int = Field(..., alias="studentID", description="Client-supplied unique id")
    name: str = Field(..., min_length=1, max_length=200, description="Student name")
    image_path: Optional[str] = Field(
        None, alias="filePath", description="Absolute URL of the stored image"
    )

    @field_validator("image_path", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str) and not value.strip():
            return None
        return value


__all__ = ["StudentRecord"]
