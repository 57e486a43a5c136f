"""
Catalog filter, sort and pagination over an in-memory working set.

Pure functions: the input list is never mutated and nothing is fetched.
"""
import math
import unicodedata
from typing import Callable, Iterable

from storefront.errors import ErrorType
from storefront.exceptions import AppException
from storefront.schemas.catalog import CatalogCriteria, CatalogView, ProductRecord, normalize_sort
from storefront.services.query_codec import encode_query_string

Predicate = Callable[[ProductRecord], bool]


def _search_filter(term: str) -> Predicate:
    needle = term.casefold()

    def matches(product: ProductRecord) -> bool:
        fields = (
            product.name,
            product.description,
            product.brand.name if product.brand else None,
        )
        return any(needle in f.casefold() for f in fields if f)

    return matches


def _brand_filter(slugs: set[str]) -> Predicate:
    return lambda p: p.brand is not None and p.brand.slug in slugs


def _category_filter(slugs: set[str]) -> Predicate:
    return lambda p: p.category is not None and p.category.slug in slugs


def _price_filter(criteria: CatalogCriteria) -> Predicate:
    low, high = criteria.price_min, criteria.price_max
    return lambda p: (low is None or p.price >= low) and (high is None or p.price <= high)


def build_filters(criteria: CatalogCriteria) -> list[Predicate]:
    """Predicates for the active criteria; a product must pass all of them."""
    filters = []
    term = (criteria.search or "").strip()
    if term:
        filters.append(_search_filter(term))
    if criteria.brands:
        filters.append(_brand_filter(set(criteria.brands)))
    if criteria.categories:
        filters.append(_category_filter(set(criteria.categories)))
    if criteria.price_min is not None or criteria.price_max is not None:
        filters.append(_price_filter(criteria))
    return filters


def filter_products(products: Iterable[ProductRecord], criteria: CatalogCriteria) -> list[ProductRecord]:
    filters = build_filters(criteria)
    return [p for p in products if all(f(p) for f in filters)]


def name_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive collation key, raw name as tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), name


# sort key -> (field key, descending)
SORTS: dict[str, tuple[Callable[[ProductRecord], object], bool]] = {
    # Missing timestamps sort last; aware and naive values compare as epoch seconds
    "newest": (lambda p: (p.created_at is not None, p.created_at.timestamp() if p.created_at else 0.0), True),
    "price-asc": (lambda p: p.price, False),
    "price-desc": (lambda p: p.price, True),
    "rating": (lambda p: p.rating, True),
    "name": (lambda p: name_key(p.name), False),
}


def sort_products(products: Iterable[ProductRecord], sort: str | None) -> list[ProductRecord]:
    """Sort by the given key, ties broken by id ascending. Unknown keys sort newest first."""
    key, descending = SORTS[normalize_sort(sort)]
    # Stable sorts: id order survives among equal keys, also when reversed
    by_id = sorted(products, key=lambda p: p.id)
    return sorted(by_id, key=key, reverse=descending)


def validate_pagination(page: int, page_size: int) -> None:
    if page_size <= 0:
        raise AppException(ErrorType.INVALID_CRITERIA, f"page_size must be greater than 0, got {page_size}")
    if page <= 0:
        raise AppException(ErrorType.INVALID_CRITERIA, f"page must be greater than 0, got {page}")


def paginate(products: list[ProductRecord], page: int, page_size: int) -> list[ProductRecord]:
    """Slice one 1-indexed page; past the last page the slice is empty."""
    validate_pagination(page, page_size)
    start = (page - 1) * page_size
    return products[start:start + page_size]


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


def apply_criteria(products: Iterable[ProductRecord], criteria: CatalogCriteria) -> CatalogView:
    """Filter, sort and paginate a working set.

    Raises:
        AppException: INVALID_CRITERIA when page or page_size is not positive
    """
    validate_pagination(criteria.page, criteria.page_size)

    matching = sort_products(filter_products(products, criteria), criteria.sort)
    return CatalogView(
        page=paginate(matching, criteria.page, criteria.page_size),
        total_matching=len(matching),
        query_string=encode_query_string(criteria),
    )
