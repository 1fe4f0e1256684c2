"""
Mock remote database for local development and testing.

Receives outbox batches from the shop and applies every change record to its
collection, last write wins. Use this for local development without a real
cloud backend.

Usage:
    python -m snapos.mock_api.server [--port 8080] [--api-key KEY]

Endpoints:
    GET  /health, /api/sync/health  - Health check
    GET  /api/sync                  - Current remote collections
    POST /api/sync                  - Submit a batch {"records": [...]}
"""

import argparse
import json
import logging
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SYNC_PATH = '/api/sync'


class RemoteState:
    """Collections held by the mock remote."""

    def __init__(self):
        self._lock = threading.Lock()
        self.collections: Dict[str, Any] = {}
        self.deliveries: List[Dict[str, Any]] = []
        self.fail_next = 0

    def apply(self, records: List[Dict[str, Any]]) -> int:
        """Apply each record's snapshot to its entity, in order."""
        with self._lock:
            for record in records:
                self.collections[record['entity']] = record['data']
            self.deliveries.append({
                'received_at': datetime.now(timezone.utc).isoformat(),
                'ids': [record['id'] for record in records],
            })
            return len(records)

    def take_failure(self) -> bool:
        """Consume one injected failure, if any are pending."""
        with self._lock:
            if self.fail_next > 0:
                self.fail_next -= 1
                return True
            return False

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'collections': dict(self.collections),
                'deliveries': len(self.deliveries),
            }


class MockSyncServer(ThreadingHTTPServer):
    """HTTP server carrying the remote state and an optional API key."""

    def __init__(self, server_address, api_key: Optional[str] = None):
        super().__init__(server_address, MockSyncHandler)
        self.state = RemoteState()
        self.api_key = api_key
        # Status sent for an accepted batch; 204 replies carry no body
        self.accept_status = 201


class MockSyncHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the mock remote database."""

    server: MockSyncServer

    def _send_json_response(self, status_code: int, data: dict):
        """Send a JSON response."""
        body = json.dumps(data).encode('utf-8')
        self.send_response(status_code)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _authorized(self) -> bool:
        if not self.server.api_key:
            return True
        return self.headers.get('Authorization') == f"Bearer {self.server.api_key}"

    def do_GET(self):
        """Handle GET requests."""
        if self.path in ('/health', f'{SYNC_PATH}/health'):
            self._send_json_response(200, {'status': 'healthy'})
        elif self.path == SYNC_PATH:
            self._send_json_response(200, self.server.state.snapshot())
        else:
            self._send_json_response(404, {'error': 'Not found'})

    def do_POST(self):
        """Handle POST requests."""
        if self.path != SYNC_PATH:
            self._send_json_response(404, {'error': 'Not found'})
            return

        if not self._authorized():
            self._send_json_response(401, {'error': 'Unauthorized'})
            return

        if self.server.state.take_failure():
            self._send_json_response(503, {'error': 'Unavailable'})
            return

        content_length = int(self.headers.get('Content-Length', 0))
        body = self.rfile.read(content_length)

        try:
            records = json.loads(body.decode('utf-8'))['records']
            applied = self.server.state.apply(records)
            logger.info(f"Applied {applied} change records")
            if self.server.accept_status == 204:
                self.send_response(204)
                self.end_headers()
            else:
                self._send_json_response(self.server.accept_status, {'status': 'accepted', 'applied': applied})
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Invalid batch: {e}")
            self._send_json_response(400, {'error': 'Invalid batch'})

    def log_message(self, format, *args):
        """Override to use Python logging instead of stderr."""
        logger.debug(f"{self.address_string()} - {format % args}")


def run_server(host: str = '0.0.0.0', port: int = 8080, api_key: Optional[str] = None):
    """Run the mock remote until interrupted."""
    httpd = MockSyncServer((host, port), api_key=api_key)
    logger.info(f"Mock sync server running on http://{host}:{port}{SYNC_PATH}")
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    finally:
        httpd.server_close()


if __name__ == '__main__':
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    parser = argparse.ArgumentParser(description="Mock SNA POS sync endpoint")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8080)
    parser.add_argument('--api-key', default=None)
    args = parser.parse_args()
    run_server(args.host, args.port, args.api_key)
