from storefront.models.brand import Brand
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem

__all__ = ["Brand", "Category", "Product", "CartItem", "Order", "OrderItem"]
