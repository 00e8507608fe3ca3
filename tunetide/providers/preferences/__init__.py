"""Preference store implementations."""

from tunetide.providers.preferences.sqlite_preference_store import SQLitePreferenceStore

__all__ = ["SQLitePreferenceStore"]
