"""Status tray user interface (pystray + Pillow)."""
