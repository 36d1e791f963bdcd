"""
Upload schema.
"""

from pydantic import BaseModel, Field


class UploadFile(BaseModel):
    """A file to upload as multipart form data."""

    name: str
    content: bytes = Field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)
