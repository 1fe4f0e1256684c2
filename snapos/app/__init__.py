"""Application layer: component wiring and the page-facing data contract."""

from .shop_application import ShopApplication
from .shop_database import ShopDatabase

__all__ = ['ShopApplication', 'ShopDatabase']
