"""
Catalog data access.
Translates catalog query intents into store queries and returns denormalized
records, with brand and category joined in once at the store boundary.
"""
import logging
from typing import Iterable

from sqlalchemy import Select, func, select
from sqlalchemy.orm import joinedload

from storefront.config import Config
from storefront.db.database import Database, db
from storefront.errors import ErrorType
from storefront.exceptions import AppException
from storefront.models import Brand, Category, Product
from storefront.schemas.catalog import BrandRecord, CategoryRecord, ProductRecord
from storefront.services.retry import store_call

logger = logging.getLogger(__name__)


def _product_select() -> Select:
    return select(Product).options(
        joinedload(Product.brand),
        joinedload(Product.category),
    )


def _newest_first(stmt: Select) -> Select:
    return stmt.order_by(Product.created_at.desc().nulls_last(), Product.id.asc())


def _restrict(stmt: Select, category_slugs: Iterable[str] = (), brand_slugs: Iterable[str] = ()) -> Select:
    category_slugs = [s for s in category_slugs if s]
    brand_slugs = [s for s in brand_slugs if s]
    if category_slugs:
        stmt = stmt.where(Product.category.has(Category.slug.in_(category_slugs)))
    if brand_slugs:
        stmt = stmt.where(Product.brand.has(Brand.slug.in_(brand_slugs)))
    return stmt


def _slugs(slug: str | None) -> list[str]:
    return [slug] if slug else []


class CatalogRepository:
    """Read-only queries against the catalog store."""

    def __init__(self, database: Database | None = None):
        self.db = database or db

    async def _fetch_products(self, stmt: Select) -> list[ProductRecord]:
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return [ProductRecord.model_validate(p) for p in result.scalars().all()]

    @store_call("list featured products")
    async def list_featured(self, limit: int | None = None) -> list[ProductRecord]:
        limit = Config.FEATURED_LIMIT if limit is None else limit
        if limit <= 0:
            raise AppException(ErrorType.INVALID_CRITERIA, "limit must be greater than 0")

        stmt = _newest_first(_product_select().where(Product.is_featured.is_(True))).limit(limit)
        return await self._fetch_products(stmt)

    @store_call("list products")
    async def list_products(
        self,
        category_slug: str | None = None,
        brand_slug: str | None = None,
        limit: int | None = None,
        offset: int = 0
    ) -> list[ProductRecord]:
        """Return one page of products, newest first, optionally restricted by slug."""
        limit = Config.PAGE_SIZE if limit is None else limit
        if limit <= 0:
            raise AppException(ErrorType.INVALID_CRITERIA, "limit must be greater than 0")
        if offset < 0:
            raise AppException(ErrorType.INVALID_CRITERIA, "offset must not be negative")

        stmt = _restrict(_product_select(), _slugs(category_slug), _slugs(brand_slug))
        stmt = _newest_first(stmt).offset(offset).limit(limit)
        return await self._fetch_products(stmt)

    @store_call("count products")
    async def count_products(self, category_slug: str | None = None, brand_slug: str | None = None) -> int:
        stmt = _restrict(select(func.count(Product.id)), _slugs(category_slug), _slugs(brand_slug))
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return result.scalar_one() or 0

    @store_call("load working set")
    async def list_working_set(
        self,
        category_slugs: Iterable[str] = (),
        brand_slugs: Iterable[str] = (),
        limit: int | None = None
    ) -> list[ProductRecord]:
        """All products under the given slugs (any-of), capped at Config.MAX_WORKING_SET."""
        limit = Config.MAX_WORKING_SET if limit is None else limit
        stmt = _newest_first(_restrict(_product_select(), category_slugs, brand_slugs)).limit(limit)
        products = await self._fetch_products(stmt)
        if len(products) == limit:
            logger.warning(f"Working set truncated at {limit} products")
        return products

    @store_call("look up product")
    async def get_product_by_slug(self, slug: str) -> ProductRecord:
        """Return the product with this slug.

        Raises:
            AppException: NOT_FOUND when no product has the slug
        """
        async with self.db.session() as session:
            result = await session.execute(_product_select().where(Product.slug == slug))
            product = result.scalar_one_or_none()
            if product is None:
                raise AppException(ErrorType.NOT_FOUND, f"Product '{slug}' not found")
            return ProductRecord.model_validate(product)

    @store_call("list related products")
    async def list_related(self, product: ProductRecord, limit: int | None = None) -> list[ProductRecord]:
        """Other products from the same category."""
        limit = Config.RELATED_LIMIT if limit is None else limit
        if product.category is None or limit <= 0:
            return []

        stmt = _product_select().where(
            Product.category_id == product.category.id,
            Product.id != product.id,
        )
        return await self._fetch_products(_newest_first(stmt).limit(limit))

    @store_call("list brands")
    async def list_brands(self) -> list[BrandRecord]:
        async with self.db.session() as session:
            result = await session.execute(select(Brand).order_by(Brand.name.asc()))
            return [BrandRecord.model_validate(b) for b in result.scalars().all()]

    @store_call("list categories")
    async def list_categories(self) -> list[CategoryRecord]:
        async with self.db.session() as session:
            result = await session.execute(select(Category).order_by(Category.name.asc()))
            return [CategoryRecord.model_validate(c) for c in result.scalars().all()]


catalog_repository = CatalogRepository()
