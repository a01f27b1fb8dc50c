from datetime import datetime
from typing import List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import Config

ProjectType = Literal["startup", "company", "personal", "community"]
SortMode = Literal["popular", "recent"]


def is_valid_url(value: str) -> bool:
    """Absolute http(s) URL with a usable host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    return bool(host) and ("." in host or host == "localhost")


class UserCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def _email_has_at(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Please provide a valid email address.")
        return value.lower()


class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=2000)
    url: str = Field(min_length=1, max_length=255)
    tags: List[str] = Field(default_factory=list)
    project_type: ProjectType
    location: Optional[str] = Field(default=None, max_length=100)
    is_made_in_my: bool

    @field_validator("url")
    @classmethod
    def _url_is_valid(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError("Please provide a valid URL.")
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_default(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [part for part in value.split(",")]
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: List[str]) -> List[str]:
        tags = []
        for raw in value:
            tag = raw.strip().lower()
            if not tag:
                continue
            if len(tag) > 50:
                raise ValueError("Each tag may not be greater than 50 characters.")
            if tag not in tags:
                tags.append(tag)
        return tags

    @field_validator("location")
    @classmethod
    def _blank_location(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class CommentCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(min_length=1, max_length=Config.COMMENT_MAX_LENGTH)
    product_id: int


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class CommentOut(BaseModel):
    id: int
    content: str
    product_id: int
    author_id: int
    author_name: str
    created_at: datetime


class ProductSummary(BaseModel):
    id: int
    title: str
    description: str
    url: str
    tags: List[str]
    project_type: ProjectType
    location: Optional[str] = None
    is_made_in_my: bool
    author_id: int
    author_name: str
    created_at: datetime
    votes_count: int = 0
    comments_count: int = 0


class ProductDetail(ProductSummary):
    comments: List[CommentOut] = []
    user_has_voted: bool = False


class ProductFilters(BaseModel):
    type: Optional[str] = None
    location: Optional[str] = None
    tag: Optional[str] = None
    sort: SortMode = "popular"


class FilterOptions(BaseModel):
    project_types: List[str]
    locations: List[str]
    tags: List[str]


class PagedProducts(BaseModel):
    items: List[ProductSummary]
    page: int
    per_page: int
    total: int
    last_page: int


class ProductIndex(BaseModel):
    products: PagedProducts
    filters: ProductFilters
    filter_options: FilterOptions


class ProductFormOptions(BaseModel):
    project_types: List[str]
    locations: List[str]


class VoteOut(BaseModel):
    state: Literal["voted", "removed"]
    votes_count: int


class LocationCount(BaseModel):
    location: str
    count: int


class SiteStats(BaseModel):
    total_products: int
    total_votes: int


class HomePage(BaseModel):
    trending_products: List[ProductSummary]
    recent_products: List[ProductSummary]
    stats: SiteStats
    top_locations: List[LocationCount]
