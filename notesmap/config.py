"""
notesmap - Settings Module
==========================

Environment selection:
- NOTESMAP_ENV selects the environment (default: development)
- Looks for config/.env.{NOTESMAP_ENV} first, then the project .env
- Falls back to plain OS environment variables

Usage:
    from notesmap.config import settings

    storage = create_storage(settings)
    if settings.is_test:
        ...
"""

import os
from pathlib import Path
from dotenv import load_dotenv

STORAGE_BACKENDS = ('memory', 'file', 'sqlite')


def _load_env_file(env_name: str) -> None:
    project_root = Path(__file__).resolve().parent.parent
    env_specific = project_root / 'config' / f'.env.{env_name}'
    env_root = project_root / '.env'
    if env_specific.exists():
        load_dotenv(env_specific)
    elif env_root.exists():
        load_dotenv(env_root)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


class Settings:
    def __init__(self):
        self.ENV = os.getenv('NOTESMAP_ENV', 'development')
        _load_env_file(self.ENV)

        # Storage
        self.STORAGE_BACKEND = os.getenv('NOTESMAP_STORAGE', 'file').lower()
        if self.STORAGE_BACKEND not in STORAGE_BACKENDS:
            raise ValueError(
                f"NOTESMAP_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got {self.STORAGE_BACKEND!r}"
            )
        self.STORAGE_PATH = os.getenv('NOTESMAP_STORAGE_PATH', 'data/notesmap.json')
        self.STORAGE_KEY = os.getenv('NOTESMAP_STORAGE_KEY', 'financelab_mindmap_v1')

        # Lifecycle
        self.TTL_HOURS = _int_env('NOTESMAP_TTL_HOURS', 24)
        self.SAVE_DEBOUNCE_MS = _int_env('NOTESMAP_SAVE_DEBOUNCE_MS', 120)
        self.SWEEP_INTERVAL_S = _int_env('NOTESMAP_SWEEP_INTERVAL_S', 15)
        if self.TTL_HOURS <= 0 or self.SWEEP_INTERVAL_S <= 0 or self.SAVE_DEBOUNCE_MS < 0:
            raise ValueError("TTL, sweep interval and debounce must be positive")

        # Canvas
        self.SNAP_GRID = _int_env('NOTESMAP_SNAP_GRID', 10)

    @property
    def ttl_ms(self) -> int:
        return self.TTL_HOURS * 60 * 60 * 1000

    @property
    def is_production(self): return self.ENV == 'production'

    @property
    def is_development(self): return self.ENV == 'development'

    @property
    def is_test(self): return self.ENV == 'test'


settings = Settings()
