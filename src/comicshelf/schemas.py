from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import ReadStatus


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _validate_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    s = v.strip()
    if not (1 <= len(s) <= 255):
        raise ValueError("title length must be between 1 and 255 characters")
    return s


def _check_rating(status: Optional[ReadStatus], rating: Optional[int]) -> None:
    if status is ReadStatus.TO_READ and rating not in (None, 0):
        raise ValueError("rating must be 0 when status is 'to-read'")
    if status is ReadStatus.READ and rating is not None and not (1 <= rating <= 5):
        raise ValueError("rating must be between 1 and 5 when status is 'read'")


def _stored_status(value: Any) -> Optional[ReadStatus]:
    try:
        return ReadStatus(value)
    except ValueError:
        return None


# PUBLIC_INTERFACE
class ComicCreate(BaseModel):
    """
    Schema for cataloguing a new comic.

    The status/rating rule is enforced here, before anything reaches the store.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Watchmen",
                "status": "read",
                "rating": 5,
                "coverImage": "comics/watchmen_cover",
                "description": "A deconstruction of the superhero myth.",
            }
        }
    )

    title: str = Field(..., description="Comic title", min_length=1, max_length=255)
    status: ReadStatus = Field(..., description="Reading status")
    rating: int = Field(default=0, ge=0, le=5, description="Star rating; 0 when not read yet")
    coverImage: Optional[str] = Field(default=None, description="Opaque cover image reference")
    description: str = Field(default="", description="Generated or user-written description")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Strip whitespace and enforce 1..255 length."""
        return _validate_title(v)  # type: ignore[return-value]

    @model_validator(mode="after")
    def validate_rating(self) -> "ComicCreate":
        _check_rating(self.status, self.rating)
        return self

    def to_payload(self) -> Dict[str, Any]:
        """Store payload with both timestamps set to now."""
        now = _now_iso()
        payload = self.model_dump(mode="json")
        payload["createdAt"] = now
        payload["updatedAt"] = now
        return payload


# PUBLIC_INTERFACE
class ComicUpdate(BaseModel):
    """
    Schema for updating a comic. Only provided fields are sent to the store.

    Switching to 'to-read' without a rating resets the rating to 0.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    status: Optional[ReadStatus] = None
    rating: Optional[int] = Field(default=None, ge=0, le=5)
    coverImage: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _validate_title(v)

    @model_validator(mode="after")
    def validate_rating(self) -> "ComicUpdate":
        _check_rating(self.status, self.rating)
        return self

    @property
    def changes_rating(self) -> bool:
        return bool(self.model_fields_set & {"status", "rating"})

    def check_against(self, current: Mapping[str, Any]) -> None:
        """
        Apply the status/rating rule to this update merged over the stored record.

        Raises ValueError when the merged record would break the rule.
        """
        fields = self.model_fields_set
        status = self.status if "status" in fields else _stored_status(current.get("status"))
        if "rating" in fields:
            rating = self.rating
        elif "status" in fields and self.status is ReadStatus.TO_READ:
            rating = 0
        else:
            rating = current.get("rating")
        _check_rating(status, rating or 0)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", exclude_unset=True)
        if self.status is ReadStatus.TO_READ and self.rating is None:
            payload["rating"] = 0
        payload["updatedAt"] = _now_iso()
        return payload


# PUBLIC_INTERFACE
class ComicOut(BaseModel):
    """Comic as returned to the presentation layer; store system fields are dropped."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Store-assigned identifier")
    title: str
    status: str
    rating: int = 0
    coverImage: Optional[str] = None
    description: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class DescriptionRequest(BaseModel):
    title: str = Field(..., description="Comic title")
    status: str = Field(..., description="Reading status")
    rating: int = Field(default=0, description="Star rating")


class DescriptionOut(BaseModel):
    description: str


class CoverUrlOut(BaseModel):
    url: str
