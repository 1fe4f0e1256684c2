from enum import Enum

from snapos.errors import UnknownCollectionError
from snapos.store.keys import StorageKey


class Collection(Enum):
    """Entity collections that are persisted as a whole and synced."""
    PRODUCTS = StorageKey.PRODUCTS
    SALES = StorageKey.SALES
    REPAIRS = StorageKey.REPAIRS
    SUPPLIERS = StorageKey.SUPPLIERS
    USERS = StorageKey.USERS
    AUDIT = StorageKey.AUDIT

    @property
    def storage_key(self) -> StorageKey:
        return self.value

    @classmethod
    def parse(cls, name) -> 'Collection':
        """Resolve a Collection member from a member or a case-insensitive name."""
        if isinstance(name, cls):
            return name
        try:
            return cls[str(name).upper()]
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection: {name!r}") from None
