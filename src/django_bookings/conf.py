"""Django Bookings configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    BOOKINGS_DATABASE_ALIAS = 'bookings'
    BOOKINGS_UTILIZATION_WINDOW_DAYS = 14
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with BOOKINGS_ prefix."""
    return getattr(settings, f"BOOKINGS_{name}", default)


def get_database_alias() -> str:
    """Database alias used by the default storage context."""
    return get_setting("DATABASE_ALIAS", "default")


def get_daily_summary_days() -> int:
    """Default look-back, in days, for the daily booking summary."""
    return int(get_setting("DAILY_SUMMARY_DAYS", 7))


def get_utilization_window_days() -> int:
    """Look-back, in days, for court utilization figures."""
    return int(get_setting("UTILIZATION_WINDOW_DAYS", 30))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# BOOKINGS_DATABASE_ALIAS = 'default'
# BOOKINGS_DAILY_SUMMARY_DAYS = 7
# BOOKINGS_UTILIZATION_WINDOW_DAYS = 30
