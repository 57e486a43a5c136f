import pytest
from decimal import Decimal
from unittest.mock import patch, AsyncMock
from storefront.exceptions import AppException
from storefront.errors import ErrorType
from storefront.schemas.catalog import FeaturedResponse, ListingResponse, ProductDetailResponse


def listing(products=(), **fields) -> ListingResponse:
    defaults = dict(
        products=list(products), total_matching=len(products), page=1, page_size=12,
        total_pages=1, query_string="", url="/products", brands=[], categories=[],
    )
    defaults.update(fields)
    return ListingResponse(**defaults)


class TestHealthEndpoint:
    """Tests for /api/v1/health."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        """Test health returns ok."""
        response = await client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestProductsEndpoint:
    """Tests for /api/v1/products."""

    @pytest.mark.asyncio
    async def test_query_params_become_criteria(self, client, make_product):
        """Test query parameters are passed to the listing service."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_listing = AsyncMock(return_value=listing([make_product(1)]))

            response = await client.get(
                "/api/v1/products",
                params=[
                    ("search", "f40"), ("brand", "autoart"), ("brand", "cmc"),
                    ("category", "supercars"), ("min_price", "50"), ("max_price", "99.99"),
                    ("sort", "price-asc"), ("page", "2"), ("page_size", "6"),
                ]
            )

            assert response.status_code == 200
            criteria = mock_service.load_listing.await_args.args[0]
            assert criteria.search == "f40"
            assert criteria.brands == ["autoart", "cmc"]
            assert criteria.categories == ["supercars"]
            assert criteria.price_min == Decimal("50")
            assert criteria.price_max == Decimal("99.99")
            assert criteria.sort == "price-asc"
            assert (criteria.page, criteria.page_size) == (2, 6)

    @pytest.mark.asyncio
    async def test_prices_serialized_as_numbers(self, client, make_product):
        """Test money fields are JSON numbers and discount flags are present."""
        product = make_product(1, price="79.99", original_price=Decimal("65.00"))
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_listing = AsyncMock(return_value=listing([product]))

            response = await client.get("/api/v1/products")

            item = response.json()["products"][0]
            assert item["price"] == 79.99
            assert item["original_price"] == 65.0
            assert item["is_discounted"] is False
            assert item["brand"]["slug"] == "generic"

    @pytest.mark.asyncio
    async def test_invalid_criteria_returns_400(self, client):
        """Test INVALID_CRITERIA maps to 400."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_listing = AsyncMock(
                side_effect=AppException(ErrorType.INVALID_CRITERIA, "page must be greater than 0, got 0")
            )

            response = await client.get("/api/v1/products", params={"page": 0})

            assert response.status_code == 400
            assert "page" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_non_numeric_price_is_validation_error(self, client):
        """Test a malformed price bound is rejected by request validation."""
        response = await client.get("/api/v1/products", params={"min_price": "cheap"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_degraded_flag_passed_through(self, client):
        """Test degraded listings still return 200."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_listing = AsyncMock(return_value=listing(degraded=True, total_pages=0))

            response = await client.get("/api/v1/products")

            assert response.status_code == 200
            assert response.json()["degraded"] is True


class TestProductDetailEndpoint:
    """Tests for /api/v1/products/{slug} and /featured."""

    @pytest.mark.asyncio
    async def test_detail(self, client, make_product):
        """Test product detail with related products."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_product = AsyncMock(return_value=ProductDetailResponse(
                product=make_product(1, slug="ferrari-f40"), related=[make_product(2)]
            ))

            response = await client.get("/api/v1/products/ferrari-f40")

            assert response.status_code == 200
            mock_service.load_product.assert_awaited_once_with("ferrari-f40")
            assert response.json()["product"]["slug"] == "ferrari-f40"
            assert len(response.json()["related"]) == 1

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        """Test NOT_FOUND maps to 404."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_product = AsyncMock(
                side_effect=AppException(ErrorType.NOT_FOUND, "Product 'nope' not found")
            )

            response = await client.get("/api/v1/products/nope")

            assert response.status_code == 404
            assert response.json() == {"detail": "Product 'nope' not found"}

    @pytest.mark.asyncio
    async def test_store_unavailable(self, client):
        """Test STORE_UNAVAILABLE maps to 503."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_product = AsyncMock(
                side_effect=AppException(ErrorType.STORE_UNAVAILABLE, "Catalog store unavailable")
            )

            response = await client.get("/api/v1/products/ferrari-f40")

            assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_featured_not_treated_as_slug(self, client, make_product):
        """Test /products/featured routes to the featured list."""
        with patch("storefront.routers.catalog.listing_service") as mock_service:
            mock_service.load_featured = AsyncMock(return_value=FeaturedResponse(products=[make_product(3)]))

            response = await client.get("/api/v1/products/featured", params={"limit": 2})

            assert response.status_code == 200
            mock_service.load_featured.assert_awaited_once_with(2)
            mock_service.load_product.assert_not_called()
