from community_access.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
