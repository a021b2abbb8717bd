from . import evaluation_routers, settings_routers

__all__ = [
    "evaluation_routers",
    "settings_routers",
]
