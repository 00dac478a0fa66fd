"""
Pydantic models describing a coub record as stored in a user's catalog listing.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

REPOST_TYPE = "Coub::Recoub"
VERSION_PLACEHOLDER = "%{version}"


class _Lenient(BaseModel):
    """Base for nested listing objects; unknown keys are kept for the metadata dump."""

    class Config:
        """Pydantic model configuration."""

        extra = "allow"

    @model_validator(mode="before")
    @classmethod
    def null_means_default(cls, data: Any) -> Any:
        """
        Treats an explicit JSON null in an optional field as if the key were
        absent, so a missing rendition falls back to an empty default instead of
        failing the whole listing.
        """
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in fields or fields[key].is_required()
        }


class Tag(_Lenient):
    title: str = ""


class MediaUrl(_Lenient):
    url: str = ""
    size: int | None = None


class Html5Video(_Lenient):
    higher: MediaUrl = Field(default_factory=MediaUrl)
    high: MediaUrl = Field(default_factory=MediaUrl)
    med: MediaUrl = Field(default_factory=MediaUrl)


class Html5Audio(_Lenient):
    high: MediaUrl = Field(default_factory=MediaUrl)
    med: MediaUrl = Field(default_factory=MediaUrl)


class Html5Versions(_Lenient):
    video: Html5Video = Field(default_factory=Html5Video)
    audio: Html5Audio = Field(default_factory=Html5Audio)


class ShareVersions(_Lenient):
    default: str | None = None


class FileVersions(_Lenient):
    """
    The fixed set of video/audio renditions. A `mobile` section may also be
    present in the listing; it is kept as an extra field and never downloaded.
    """

    html5: Html5Versions = Field(default_factory=Html5Versions)
    share: ShareVersions = Field(default_factory=ShareVersions)


class TemplatedVersions(_Lenient):
    """An image rendition set: a URL template plus its ordered version names."""

    template: str = ""
    versions: list[str] = Field(default_factory=list)

    def urls(self) -> list[str]:
        """Expands the template once per version, preserving version order."""
        if not self.template:
            return []
        return [
            self.template.replace(VERSION_PLACEHOLDER, version)
            for version in self.versions
        ]


class ClipRecord(_Lenient):
    """A single coub from the catalog listing."""

    id: int | str
    permalink: str = ""
    title: str = ""
    created_at: datetime
    type: str = "Coub::Simple"
    duration: float = Field(0.0, allow_inf_nan=False)
    views_count: int = 0
    recoubs_count: int = 0
    external_download: bool | dict[str, Any] | None = False
    tags: list[Tag] = Field(default_factory=list)
    file_versions: FileVersions = Field(default_factory=FileVersions)
    image_versions: TemplatedVersions = Field(default_factory=TemplatedVersions)
    first_frame_versions: TemplatedVersions = Field(
        default_factory=TemplatedVersions
    )

    @property
    def is_repost(self) -> bool:
        return self.type == REPOST_TYPE

    @property
    def tag_titles(self) -> list[str]:
        return [tag.title for tag in self.tags]
