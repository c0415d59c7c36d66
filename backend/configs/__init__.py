"""
Configuration management module.

Pydantic Settings for NocoDB, Supabase and Claude extraction, aggregated
by Settings and cached by get_settings().
"""

from backend.configs.extraction import ExtractionSettings
from backend.configs.nocodb import NocoDBSettings
from backend.configs.settings import Settings, get_settings
from backend.configs.supabase import SupabaseSettings

__all__ = ["ExtractionSettings", "NocoDBSettings", "Settings", "SupabaseSettings", "get_settings"]
