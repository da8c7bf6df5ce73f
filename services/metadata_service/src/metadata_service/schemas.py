import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field


class FileMetadata(BaseModel):
    name: str
    type: str
    size: int = Field(ge=0)


class ErrorResponse(BaseModel):
    error: str


class UploadLimits(BaseModel):
    max_file_size: str
    max_files: int
    field_name: str


class HealthResponse(BaseModel):
    status: Literal["OK"] = "OK"
    timestamp: dt.datetime
    service: str
    upload_limits: UploadLimits


class NotFoundResponse(BaseModel):
    error: str
    available: list[str]
