"""SphereGrid core: XP progression engine and focus-session activity guard."""

__version__ = "1.0.0"
