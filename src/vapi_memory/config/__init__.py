"""Process-wide vapi-memory configuration.

``VapiMemory`` and ``configure_logging`` fall back to ``get_settings()``
when they are not handed a ``Settings`` instance, so an application can
either pass settings explicitly or install them once with
``set_settings``.
"""

from vapi_memory.config.settings import Settings

_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the shared settings, reading ``VAPI_MEMORY_*`` variables on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Install ``settings`` as the shared instance for services built afterwards.

    Services that already exist keep the settings they were created with.
    """
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the shared instance; the environment is read again on next access."""
    global _settings
    _settings = None


__all__ = ["Settings", "get_settings", "set_settings", "reset_settings"]
