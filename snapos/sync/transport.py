"""
Transports that deliver outbox batches to the remote database.

A transport makes exactly one delivery attempt per call and reports success
or failure as a bool. Retrying is the scheduler's job: a failed batch stays
in the outbox and is sent again on the next cycle.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from snapos import __version__
from snapos.models.change_record import ChangeRecord
from snapos.models.settings import SyncSettings
from snapos.store.local_store import json_serialize_fallback

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Delivers a batch of change records to the remote store."""

    @abstractmethod
    def deliver(self, batch: Sequence[ChangeRecord], settings: SyncSettings) -> bool:
        """
        Attempt one delivery of the whole batch.

        Args:
            batch: Change records, oldest first
            settings: Sync settings read for this cycle (endpoint and key)

        Returns:
            True only if the remote accepted every record in the batch
        """

    def check_health(self, settings: SyncSettings) -> bool:
        """Test if the remote is reachable. Transports without a health check report False."""
        return False


class HttpTransport(Transport):
    """
    HTTPS transport posting the batch as one JSON document.

    Request body: {"records": [{"id", "entity", "data", "timestamp"}, ...]}
    """

    DEFAULT_TIMEOUT = 30.0  # seconds

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the transport.

        Args:
            timeout: Seconds allowed for a whole delivery. Running out is a
                     failed delivery.
        """
        self.timeout = timeout

    @staticmethod
    def _build_headers(settings: SyncSettings) -> Dict[str, str]:
        """Build HTTP headers for the request."""
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"SnaPOS/{__version__}"
        }
        if settings.endpoint_key:
            headers["Authorization"] = f"Bearer {settings.endpoint_key}"
        return headers

    @staticmethod
    def build_payload(batch: Sequence[ChangeRecord]) -> Dict[str, List[Dict[str, Any]]]:
        return {"records": [record.to_dict() for record in batch]}

    def deliver(self, batch: Sequence[ChangeRecord], settings: SyncSettings) -> bool:
        """
        Post the batch, giving up once `timeout` seconds have passed in total.

        The socket timeout only bounds each read, so a remote trickling bytes
        could otherwise hold the cycle open indefinitely. The request runs on
        a daemon thread; past the deadline it is abandoned and the delivery
        counts as failed. If the remote applies it anyway, the batch is simply
        sent again next cycle.
        """
        outcome: List[bool] = []
        worker = threading.Thread(
            target=lambda: outcome.append(self._post(batch, settings)),
            name="HttpTransportDeliver",
            daemon=True
        )
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            logger.error(f"Delivery exceeded {self.timeout}s deadline, abandoning request")
            return False
        return bool(outcome and outcome[0])

    def _post(self, batch: Sequence[ChangeRecord], settings: SyncSettings) -> bool:
        try:
            data = json.dumps(
                self.build_payload(batch),
                default=json_serialize_fallback
            ).encode('utf-8')
            request = Request(
                settings.endpoint_url,
                data=data,
                headers=self._build_headers(settings),
                method='POST'
            )
            with urlopen(request, timeout=self.timeout) as response:
                if 200 <= response.status < 300:
                    return True
                logger.warning(f"Unexpected response status: {response.status}")
                return False
        except HTTPError as e:
            logger.error(f"HTTP error delivering batch: {e.code} {e.reason}")
            return False
        except URLError as e:
            logger.error(f"URL error delivering batch: {e.reason}")
            return False
        except TimeoutError:
            logger.error(f"Timed out delivering batch after {self.timeout}s")
            return False
        except Exception as e:
            logger.error(f"Error delivering batch: {e}")
            return False

    def check_health(self, settings: SyncSettings) -> bool:
        """Test if the remote endpoint is reachable."""
        if not settings.endpoint_url:
            return False
        try:
            request = Request(
                settings.endpoint_url.rstrip('/') + '/health',
                headers=self._build_headers(settings),
                method='GET'
            )
            with urlopen(request, timeout=5) as response:
                return response.status == 200
        except Exception as e:
            logger.debug(f"Health check failed: {e}")
            return False
