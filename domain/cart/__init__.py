from .entity import Cart, CartLine, CartStats
from .repository import CartRepository
from .service import CartDomainService

__all__ = ["Cart", "CartLine", "CartStats", "CartRepository", "CartDomainService"]
