"""
Request and catalog models for the Clotheme backend.
Incoming JSON is loosely shaped, so the validators coerce rather than reject where they can.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _coerce_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class Product(BaseModel):
    """A clothing product as stored in the catalog and returned to the frontend."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, description="Display title, also the text that gets matched")
    color: str = Field("", description="Canonical color, see normalization.normalize_color")
    image: Optional[str] = Field(None, description="Image URL, doubles as the de-duplication key")
    link: Optional[str] = Field(None, description="Outbound product URL")

    @field_validator("title", "image", "link", mode="before")
    @classmethod
    def _text_fields(cls, value):
        return _coerce_text(value)

    @field_validator("color", mode="before")
    @classmethod
    def _color_field(cls, value):
        value = _coerce_text(value)
        return value if value is not None else ""

    def public_dict(self) -> Dict[str, Optional[str]]:
        return self.model_dump(include={"title", "color", "image", "link"})


class CatalogUpload(BaseModel):
    """The `products` object of an upload request. Items stay raw until ingestion."""
    visible: List[Any] = Field(default_factory=list)
    full: List[Any] = Field(default_factory=list)

    @field_validator("visible", "full", mode="before")
    @classmethod
    def _lists_only(cls, value):
        return _coerce_list(value)

    @classmethod
    def from_payload(cls, payload: Any) -> "CatalogUpload":
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)


class MatchContext(BaseModel):
    colors: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    @field_validator("colors", "categories", "keywords", mode="before")
    @classmethod
    def _string_lists(cls, value):
        return [item for item in _coerce_list(value) if isinstance(item, str) and item.strip()]

    @property
    def first_color(self) -> Optional[str]:
        return self.colors[0] if self.colors else None

    @property
    def first_category(self) -> Optional[str]:
        return self.categories[0] if self.categories else None


class MatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_message: str = Field(..., alias="userMessage")
    context: MatchContext = Field(default_factory=MatchContext)

    @field_validator("user_message", mode="before")
    @classmethod
    def _message_text(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("context", mode="before")
    @classmethod
    def _context_object(cls, value):
        return value if isinstance(value, dict) else {}


class StylistResult(BaseModel):
    """Tagged outcome of parsing model output: either data or an error."""
    ok: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
