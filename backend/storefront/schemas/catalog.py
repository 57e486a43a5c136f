from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, computed_field, field_validator

from storefront.config import Config

SORT_KEYS = ("newest", "price-asc", "price-desc", "rating", "name")
DEFAULT_SORT = "newest"


def normalize_sort(sort: str | None) -> str:
    """Known sort key, or the default for anything else."""
    return sort if sort in SORT_KEYS else DEFAULT_SORT


# Decimal in Python, plain number in JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BrandRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    logo_url: str | None = None
    description: str | None = None


class CategoryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    image_url: str | None = None
    parent_id: int | None = None


class ProductRecord(BaseModel):
    """Denormalized product: brand and category rows embedded inline."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    slug: str
    scale: str | None = "1:18"
    price: Money
    original_price: Money | None = None
    description: str | None = None
    features: list[str] | None = None
    specifications: dict[str, Any] | None = None
    stock_quantity: int = 0
    is_featured: bool = False
    is_new: bool = False
    rating: Money = Decimal("0")
    review_count: int = 0
    image_url: str | None = None
    gallery_urls: list[str] | None = None
    created_at: datetime | None = None
    brand: BrandRecord | None = None
    category: CategoryRecord | None = None

    @field_validator("rating", "review_count", "stock_quantity", mode="before")
    @classmethod
    def _missing_as_zero(cls, v):
        return 0 if v is None else v

    @computed_field
    @property
    def is_discounted(self) -> bool:
        """True only when the original price is strictly above the current one."""
        return self.original_price is not None and self.original_price > self.price

    @computed_field
    @property
    def discount_percent(self) -> int | None:
        if not self.is_discounted:
            return None
        saved = (self.original_price - self.price) / self.original_price * 100
        return int(saved.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CatalogCriteria(BaseModel):
    """Search, filter, sort and pagination state for one catalog view."""

    search: str | None = None
    brands: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    sort: str = DEFAULT_SORT
    page: int = 1
    page_size: int = Field(default_factory=lambda: Config.PAGE_SIZE)

    @field_validator("brands", "categories", mode="before")
    @classmethod
    def _drop_blank_slugs(cls, v):
        if v is None:
            return []
        return [s.strip() for s in v if isinstance(s, str) and s.strip()]


class CatalogView(BaseModel):
    page: list[ProductRecord]
    total_matching: int
    query_string: str


class ListingResponse(BaseModel):
    products: list[ProductRecord]
    total_matching: int
    page: int
    page_size: int
    total_pages: int
    query_string: str
    url: str
    brands: list[BrandRecord]
    categories: list[CategoryRecord]
    degraded: bool = False


class ProductDetailResponse(BaseModel):
    product: ProductRecord
    related: list[ProductRecord]


class HomeResponse(BaseModel):
    featured: list[ProductRecord]
    categories: list[CategoryRecord]
    degraded: bool = False


class SetupResponse(BaseModel):
    success: bool
    message: str
    tables: list[str]


class FeaturedResponse(BaseModel):
    products: list[ProductRecord]
    degraded: bool = False
