"""
Assembles catalog pages from the repository and the engine.

Exactly one component paginates a listing: the store when the criteria can be
expressed as a store query, the engine otherwise.
"""
import asyncio
import logging
from typing import Any, Awaitable

from storefront.errors import ErrorType
from storefront.exceptions import AppException
from storefront.schemas.catalog import (
    CatalogCriteria,
    FeaturedResponse,
    HomeResponse,
    ListingResponse,
    ProductDetailResponse,
    DEFAULT_SORT,
    normalize_sort,
)
from storefront.services.catalog_engine import apply_criteria, total_pages, validate_pagination
from storefront.services.catalog_repository import CatalogRepository, catalog_repository
from storefront.services.query_codec import build_listing_url, encode_query_string

logger = logging.getLogger(__name__)

# Largest offset/limit a store driver can bind (signed 64-bit)
STORE_MAX_INT = 2 ** 63 - 1


async def _no_rows() -> list:
    return []


async def _or_empty(call: Awaitable[Any], empty: Any) -> tuple[Any, bool]:
    """Await a store call; on STORE_UNAVAILABLE return (empty, True)."""
    try:
        return await call, False
    except AppException as e:
        if e.error_type != ErrorType.STORE_UNAVAILABLE:
            raise
        logger.warning(f"Serving degraded result: {e.message}")
        return empty, True


def is_store_paginated(criteria: CatalogCriteria) -> bool:
    """True when the store alone can answer the criteria (slug filters, newest first)."""
    return (
        not (criteria.search or "").strip()
        and criteria.price_min is None
        and criteria.price_max is None
        and len(criteria.brands) <= 1
        and len(criteria.categories) <= 1
        and normalize_sort(criteria.sort) == DEFAULT_SORT
    )


class ListingService:
    def __init__(self, repository: CatalogRepository | None = None):
        self.repository = repository or catalog_repository

    async def load_listing(self, criteria: CatalogCriteria) -> ListingResponse:
        validate_pagination(criteria.page, criteria.page_size)
        repo = self.repository

        if is_store_paginated(criteria):
            category = criteria.categories[0] if criteria.categories else None
            brand = criteria.brands[0] if criteria.brands else None
            offset = (criteria.page - 1) * criteria.page_size
            # An offset past any real row count is an empty page; skip the query
            page_call = _no_rows() if offset > STORE_MAX_INT else repo.list_products(
                category_slug=category,
                brand_slug=brand,
                limit=min(criteria.page_size, STORE_MAX_INT),
                offset=offset,
            )
            (products, products_degraded), (total, count_degraded), brands, categories = await asyncio.gather(
                _or_empty(page_call, []),
                _or_empty(repo.count_products(category_slug=category, brand_slug=brand), 0),
                _or_empty(repo.list_brands(), []),
                _or_empty(repo.list_categories(), []),
            )
            query_string = encode_query_string(criteria)
            degraded = products_degraded or count_degraded
        else:
            (working_set, degraded), brands, categories = await asyncio.gather(
                _or_empty(repo.list_working_set(criteria.categories, criteria.brands), []),
                _or_empty(repo.list_brands(), []),
                _or_empty(repo.list_categories(), []),
            )
            view = apply_criteria(working_set, criteria)
            products, total, query_string = view.page, view.total_matching, view.query_string

        return ListingResponse(
            products=products,
            total_matching=total,
            page=criteria.page,
            page_size=criteria.page_size,
            total_pages=total_pages(total, criteria.page_size),
            query_string=query_string,
            url=build_listing_url(criteria),
            brands=brands[0],
            categories=categories[0],
            degraded=degraded or brands[1] or categories[1],
        )

    async def load_featured(self, limit: int | None = None) -> FeaturedResponse:
        products, degraded = await _or_empty(self.repository.list_featured(limit), [])
        return FeaturedResponse(products=products, degraded=degraded)

    async def load_home(self) -> HomeResponse:
        (featured, featured_degraded), (categories, categories_degraded) = await asyncio.gather(
            _or_empty(self.repository.list_featured(), []),
            _or_empty(self.repository.list_categories(), []),
        )
        return HomeResponse(
            featured=featured,
            categories=categories,
            degraded=featured_degraded or categories_degraded,
        )

    async def load_product(self, slug: str) -> ProductDetailResponse:
        """Product detail; NOT_FOUND and STORE_UNAVAILABLE propagate, related items degrade."""
        product = await self.repository.get_product_by_slug(slug)
        related, _ = await _or_empty(self.repository.list_related(product), [])
        return ProductDetailResponse(product=product, related=related)


listing_service = ListingService()
