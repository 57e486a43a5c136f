"""
Catalog criteria <-> flat query string (search, brand, category, sort, page).
Only non-default values are written; decoding never fails.
"""
from urllib.parse import parse_qsl, urlencode

from storefront.schemas.catalog import CatalogCriteria, DEFAULT_SORT, normalize_sort

LISTING_PATH = "/products"
QUERY_KEYS = ("search", "brand", "category", "sort", "page")


def encode_query_string(criteria: CatalogCriteria) -> str:
    """Encode the active non-default criteria.

    Only the first selected brand and category are kept; the URL carries a
    single value for each.
    """
    params = []
    search = (criteria.search or "").strip()
    if search:
        params.append(("search", search))
    if criteria.brands:
        params.append(("brand", criteria.brands[0]))
    if criteria.categories:
        params.append(("category", criteria.categories[0]))

    sort = normalize_sort(criteria.sort)
    if sort != DEFAULT_SORT:
        params.append(("sort", sort))
    if criteria.page != 1:
        params.append(("page", str(criteria.page)))

    return urlencode(params)


def _parse_page(value: str) -> int:
    try:
        page = int(value)
    except ValueError:
        return 1
    return page if page > 0 else 1


def decode_query_string(raw: str | None) -> CatalogCriteria:
    """Decode a query string into criteria. Unknown keys are ignored."""
    raw = (raw or "").lstrip("?")

    # First occurrence wins
    values: dict[str, str] = {}
    for key, value in parse_qsl(raw):
        if key in QUERY_KEYS:
            values.setdefault(key, value)

    return CatalogCriteria(
        search=values.get("search", "").strip() or None,
        brands=[values["brand"]] if values.get("brand") else [],
        categories=[values["category"]] if values.get("category") else [],
        sort=normalize_sort(values.get("sort")),
        page=_parse_page(values["page"]) if "page" in values else 1,
    )


def build_listing_url(criteria: CatalogCriteria) -> str:
    query = encode_query_string(criteria)
    return f"{LISTING_PATH}?{query}" if query else LISTING_PATH
