"""Models package for the shop data core."""

from .change_record import ChangeRecord
from .collection import Collection
from .entities import AuditLog, Product, RepairJob, Sale, SaleItem, Supplier, User
from .settings import ShopSettings, SyncSettings
from .sync_status import SyncStatus

__all__ = [
    'AuditLog',
    'ChangeRecord',
    'Collection',
    'Product',
    'RepairJob',
    'Sale',
    'SaleItem',
    'ShopSettings',
    'Supplier',
    'SyncSettings',
    'SyncStatus',
    'User',
]
