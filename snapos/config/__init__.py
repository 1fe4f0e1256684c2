"""Configuration package."""

from .app_config import AppConfig, StoreConfig, SyncConfig

__all__ = ['AppConfig', 'StoreConfig', 'SyncConfig']
