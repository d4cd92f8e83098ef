from .settings import (
    CrawlerSettings,
    LLMSettings,
    ReviewSettings,
    Settings,
    WizardSettings,
    get_settings,
)

__all__ = [
    "CrawlerSettings",
    "LLMSettings",
    "ReviewSettings",
    "Settings",
    "WizardSettings",
    "get_settings",
]
