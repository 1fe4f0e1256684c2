"""
Stable storage key names.

Keys must survive process restarts and upgrades, so these strings are part
of the on-disk format.
"""

from enum import Enum


class StorageKey(str, Enum):
    PRODUCTS = "sna_products"
    SALES = "sna_sales"
    REPAIRS = "sna_repairs"
    SUPPLIERS = "sna_suppliers"
    AUDIT = "sna_audit"
    USERS = "sna_users"
    CURRENT_USER = "sna_session_user"
    SETTINGS = "sna_settings"
    SYNC_QUEUE = "sna_sync_queue"
