"""
Deliver data models.

VideoConfig and FileNameConfig are the two user-editable inputs.
Artifact is the binary output of one successful transcode.

All models use Pydantic for validation and are frozen once built.
"""

from enum import Enum
from typing import Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


MAX_WIDTH = 7680
MAX_HEIGHT = 4320
MAX_TEXT_LENGTH = 100
MAX_FILE_NAME_LENGTH = 255

DEFAULT_FILE_NAME = "generated_video"


class VideoFormat(str, Enum):
    """Supported output containers."""

    MP4 = "mp4"
    WEBM = "webm"


MIME_TYPES: Dict[VideoFormat, str] = {
    VideoFormat.MP4: "video/mp4",
    VideoFormat.WEBM: "video/webm",
}


class VideoConfig(BaseModel):
    """
    Validated generation parameters.

    All fields are valid simultaneously; an instance can always be
    submitted. Raw form input may use `backgroundColor`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    width: int = Field(default=1920, ge=1, le=MAX_WIDTH)
    height: int = Field(default=1080, ge=1, le=MAX_HEIGHT)
    text: str = Field(default="Hello, World!", max_length=MAX_TEXT_LENGTH)
    background_color: str = Field(
        default="#0000FF",
        pattern=r"^#[0-9A-Fa-f]{6}$",
        validation_alias=AliasChoices("background_color", "backgroundColor"),
    )
    format: VideoFormat = VideoFormat.MP4

    @field_validator("width", "height", mode="before")
    @classmethod
    def reject_bool(cls, v):
        """Booleans are not dimensions, even though bool is an int."""
        if isinstance(v, bool):
            raise ValueError("Input should be a valid integer")
        return v

    @property
    def resolution(self) -> str:
        """Frame size token, e.g. `1280x720`."""
        return f"{self.width}x{self.height}"


class FileNameConfig(BaseModel):
    """Download filename, without extension."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    file_name: str = Field(
        default=DEFAULT_FILE_NAME,
        min_length=1,
        max_length=MAX_FILE_NAME_LENGTH,
        pattern=r"^[A-Za-z0-9_-]+$",
        validation_alias=AliasChoices("file_name", "fileName"),
    )


class Artifact(BaseModel):
    """
    Binary result of one successful transcode.

    Owned by ArtifactLifecycleManager after hand-off.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: bytes
    format: VideoFormat

    @property
    def mime_type(self) -> str:
        return MIME_TYPES[self.format]

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class RenderedSettings(BaseModel):
    """Dimensions and format of the last successful generation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int
    height: int
    format: VideoFormat

    @classmethod
    def from_config(cls, config: VideoConfig) -> "RenderedSettings":
        return cls(width=config.width, height=config.height, format=config.format)


class Download(BaseModel):
    """A named, typed payload ready to be sent as an attachment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    filename: str
    mime_type: str
    data: bytes
