from scrapy.settings import Settings


def get_settings(overrides: dict | None = None) -> Settings:
    """Load the project settings module, optionally overriding some values.

    The engine shares its configuration with the scrapers so that API keys,
    timeouts and thresholds live in a single place.
    """
    settings = Settings()
    settings.setmodule("scrapers.settings", priority="project")

    if overrides:
        settings.setdict(overrides, priority="cmdline")

    return settings
