"""Catalog domain exports."""
from .entity import Product, ProductStatus
from .repository import ProductRepository

__all__ = ["Product", "ProductStatus", "ProductRepository"]
