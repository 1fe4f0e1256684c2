import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ChangeRecord:
    """One outbox entry: the full snapshot of a collection at save time."""
    entity: str
    data: Any
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'entity': self.entity,
            'data': self.data,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ChangeRecord':
        return cls(
            entity=raw['entity'],
            data=raw.get('data'),
            id=raw['id'],
            timestamp=raw['timestamp'],
        )
