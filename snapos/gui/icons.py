"""
Status glyphs for the sync tray.

One glyph per SyncStatus, drawn with Pillow at runtime:
synced and failed are filled discs, syncing is a three-quarter arc and
offline is a hollow grey ring.
"""

from typing import Dict

from PIL import Image, ImageColor, ImageDraw

from snapos.models.sync_status import SyncStatus

STATUS_COLORS: Dict[SyncStatus, str] = {
    SyncStatus.SYNCED: "#10b981",
    SyncStatus.SYNCING: "#3b82f6",
    SyncStatus.FAILED: "#ef4444",
    SyncStatus.OFFLINE: "#94a3b8",
}

STATUS_LABELS: Dict[SyncStatus, str] = {
    SyncStatus.SYNCED: "Cloud Synced",
    SyncStatus.SYNCING: "Syncing...",
    SyncStatus.FAILED: "Sync Error",
    SyncStatus.OFFLINE: "Offline",
}


def create_status_icon(status: SyncStatus, size: int = 64) -> Image.Image:
    """
    Draw the tray glyph for a sync status.

    Args:
        status: Status to draw
        size: Edge length in pixels

    Returns:
        Square RGBA image on a transparent background
    """
    image = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    fill = ImageColor.getrgb(STATUS_COLORS[status]) + (255,)
    box = [1, 1, size - 2, size - 2]
    ring = max(2, size // 8)

    if status == SyncStatus.SYNCING:
        draw.arc(box, start=-90, end=180, fill=fill, width=ring)
    elif status == SyncStatus.OFFLINE:
        draw.ellipse(box, outline=fill, width=ring)
    else:
        draw.ellipse(box, fill=fill)

    return image


class Icons:
    """Glyphs are drawn once per status and reused."""

    _cache: Dict[SyncStatus, Image.Image] = {}

    @classmethod
    def for_status(cls, status: SyncStatus) -> Image.Image:
        if status not in cls._cache:
            cls._cache[status] = create_status_icon(status)
        return cls._cache[status]
