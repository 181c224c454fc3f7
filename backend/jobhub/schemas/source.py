"""
Scraping Source Schemas

Describes one external career site and the CSS selectors used to
locate its job listings. Both snake_case and the camelCase keys used
by the admin "scraping sources" records are accepted.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator


class SelectorMap(BaseModel):
    """CSS selectors for a career page. Sub-field selectors are relative to a listing container."""

    model_config = ConfigDict(frozen=True)

    list_container: str = Field(
        ..., min_length=1,
        validation_alias=AliasChoices("list_container", "listContainer", "jobList"),
        description="Selector matching each listing",
    )
    title: str = Field(..., min_length=1, validation_alias=AliasChoices("title", "jobTitle"))
    link: str = Field(..., min_length=1, validation_alias=AliasChoices("link", "jobLink"))
    company: Optional[str] = Field(None, validation_alias=AliasChoices("company", "companyName"))
    location: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    salary: Optional[str] = None
    posted_date: Optional[str] = Field(None, validation_alias=AliasChoices("posted_date", "postedDate"))


class Source(BaseModel):
    """One external site to scrape, identified by name."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique source name, also the default company")
    website: str = Field(..., description="Canonical site root used to resolve relative links")
    career_page: str = Field(
        ...,
        validation_alias=AliasChoices("career_page", "careerPage"),
        description="URL of the listings page",
    )
    selectors: SelectorMap
    is_active: bool = Field(True, validation_alias=AliasChoices("is_active", "isActive"))

    @field_validator("website", "career_page")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"expected an absolute http(s) URL, got {value!r}")
        return value
