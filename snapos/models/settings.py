from dataclasses import dataclass, replace

from .entities import Record


@dataclass
class SyncSettings:
    """The part of the shop settings that drives cloud sync."""
    sync_enabled: bool = False
    endpoint_url: str = ""
    endpoint_key: str = ""

    @property
    def is_configured(self) -> bool:
        return self.sync_enabled and bool(self.endpoint_url)


@dataclass
class ShopSettings(Record):
    """Shop configuration record, one per deployment."""
    business_name: str = "SNA! MOBILE"
    tagline: str = "Phones • Repairs • Accessories"
    address: str = "Kampala Road, Plot 12, Shop G04"
    phone: str = "+256 700 000 000"
    tin: str = "1000-1234-56"
    receipt_footer: str = "Thank you for shopping with us!"
    currency: str = "UGX"
    tax_enabled: bool = False
    tax_rate: float = 0
    # Remote database integration
    postgres_url: str = ""
    postgres_key: str = ""
    sync_enabled: bool = False

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings(
            sync_enabled=bool(self.sync_enabled),
            endpoint_url=self.postgres_url or "",
            endpoint_key=self.postgres_key or "",
        )

    def with_sync(self, sync: SyncSettings) -> 'ShopSettings':
        """Return a copy carrying the given sync settings."""
        return replace(
            self,
            sync_enabled=sync.sync_enabled,
            postgres_url=sync.endpoint_url,
            postgres_key=sync.endpoint_key,
        )
