"""Data models for TinyWiki."""

from typing import Annotated, Any

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from tinywiki.core.errors import ValidationFailure

# Identifier carried by pages that have no stored row yet
NEW_PAGE_ID = -1

EMPTY_PAGE_MARKDOWN = "# A new page\n\nFeel-free to write in Markdown!\n"

# Ids travel as 64-bit signed integers in every supported database
PageId = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class Page(BaseModel):
    """Represents a wiki page, stored or not."""

    id: int
    name: str
    content: str

    @property
    def is_new(self) -> bool:
        """True for the placeholder shown before the first save."""
        return self.id == NEW_PAGE_ID

    @classmethod
    def placeholder(cls, name: str) -> "Page":
        """Build the virtual page shown for a name with no stored row."""
        return cls(id=NEW_PAGE_ID, name=name, content=EMPTY_PAGE_MARKDOWN)


class PageView(BaseModel):
    """Everything the page template needs to render one page."""

    title: str
    id: int
    is_new_page: bool
    raw_content: str
    rendered_content: str
    toc: str = ""
    timestamp: str


class FormModel(BaseModel):
    """Base for models parsed from form-encoded request bodies."""

    @classmethod
    def from_fields(cls, **fields: Any):
        """Validate raw form values, dropping the ones not submitted.

        Raises:
            ValidationFailure: if a field is missing or malformed.
        """
        submitted = {k: v for k, v in fields.items() if v is not None}
        try:
            return cls(**submitted)
        except ValidationError as e:
            raise ValidationFailure(str(e)) from e


def no_slash(value: str) -> str:
    """Page names are a single URL path segment."""
    if "/" in value:
        raise ValueError("page names must not contain '/'")
    return value


class CreateForm(FormModel):
    """Body of POST /create."""

    name: str = ""

    @field_validator("name")
    @classmethod
    def name_has_no_slash(cls, value: str) -> str:
        return no_slash(value)


class SaveForm(FormModel):
    """Body of POST /save."""

    id: PageId | None = None
    title: str
    markdown: str = ""
    new_page: bool = False

    @field_validator("new_page", mode="before")
    @classmethod
    def parse_new_page(cls, value: Any) -> bool:
        """Only the literal "yes" marks a first save."""
        if isinstance(value, bool):
            return value
        return value == "yes"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return no_slash(value)

    @model_validator(mode="after")
    def id_required_for_update(self) -> "SaveForm":
        if not self.new_page and self.id is None:
            raise ValueError("id is required when updating a page")
        return self


class DeleteForm(FormModel):
    """Body of POST /delete."""

    id: PageId
