"""
Shop domain records.

Records are persisted as JSON objects with camelCase field names, the format
the shop pages and the remote database share. The sync core never looks
inside them; these classes exist for callers that want typed access.
"""
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional


def _to_camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def _to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


class Record:
    """Mixin converting dataclass records to and from their stored form."""

    def to_record(self) -> Dict[str, Any]:
        return {_to_camel(key): value for key, value in asdict(self).items()}

    @classmethod
    def from_record(cls, raw: Dict[str, Any]):
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in raw.items():
            name = _to_snake(key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)


@dataclass
class User(Record):
    id: str
    username: str
    name: str
    role: str  # Admin, Manager, Cashier or Technician
    status: Optional[str] = "Active"


@dataclass
class Product(Record):
    id: str
    sku: str
    name: str
    type: str  # Phone, Accessory or Spare Part
    supplier_id: str
    cost_price: float
    selling_price: float
    quantity: int
    reorder_level: int
    updated_at: str


@dataclass
class RepairJob(Record):
    id: str
    customer_name: str
    customer_phone: str
    device_model: str
    issue: str
    accessories: str
    technician_id: str
    estimated_cost: float
    status: str
    created_at: str
    paid_amount: float = 0.0


@dataclass
class SaleItem(Record):
    product_id: str
    name: str
    quantity: int
    price: float


@dataclass
class Sale(Record):
    id: str
    invoice_number: str
    cashier_id: str
    total: float
    discount: float
    payment_method: str  # Cash, Mobile Money, Bank or Credit
    date: str
    items: List[SaleItem] = field(default_factory=list)
    customer_name: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        record = super().to_record()
        record['items'] = [item.to_record() for item in self.items]
        return record

    @classmethod
    def from_record(cls, raw: Dict[str, Any]) -> 'Sale':
        sale = super().from_record(raw)
        sale.items = [
            item if isinstance(item, SaleItem) else SaleItem.from_record(item)
            for item in sale.items
        ]
        return sale


@dataclass
class Supplier(Record):
    id: str
    name: str
    contact: str
    location: str


@dataclass
class AuditLog(Record):
    id: str
    timestamp: str
    user_id: str
    username: str
    action: str
