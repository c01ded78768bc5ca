from raml_core.settings.config import RouterConfig, Settings, settings

__all__ = ["RouterConfig", "Settings", "settings"]
