import logging
from decimal import Decimal

from fastapi import APIRouter, Query

from storefront.config import Config
from storefront.schemas.catalog import (
    BrandRecord,
    CatalogCriteria,
    CategoryRecord,
    FeaturedResponse,
    HomeResponse,
    ListingResponse,
    ProductDetailResponse,
)
from storefront.services.catalog_repository import catalog_repository
from storefront.services.listing_service import listing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.get("/products", response_model=ListingResponse)
async def list_products(
    search: str | None = None,
    brand: list[str] = Query(default=[]),
    category: list[str] = Query(default=[]),
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    sort: str = "newest",
    page: int = 1,
    page_size: int = Config.PAGE_SIZE,
):
    criteria = CatalogCriteria(
        search=search,
        brands=brand,
        categories=category,
        price_min=min_price,
        price_max=max_price,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    logger.info(f"Listing products: {criteria.model_dump(exclude_defaults=True)}")
    return await listing_service.load_listing(criteria)


# Declared before /products/{slug} so "featured" is not read as a slug
@router.get("/products/featured", response_model=FeaturedResponse)
async def featured_products(limit: int = Config.FEATURED_LIMIT):
    return await listing_service.load_featured(limit)


@router.get("/products/{slug}", response_model=ProductDetailResponse)
async def product_detail(slug: str):
    return await listing_service.load_product(slug)


@router.get("/brands", response_model=list[BrandRecord])
async def list_brands():
    return await catalog_repository.list_brands()


@router.get("/categories", response_model=list[CategoryRecord])
async def list_categories():
    return await catalog_repository.list_categories()


@router.get("/home", response_model=HomeResponse)
async def home():
    return await listing_service.load_home()
