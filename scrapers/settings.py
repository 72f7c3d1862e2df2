import os
import pathlib
import sys

# Scrapy settings for the provider scrapers and the reconciliation engine
#
# The spiders read these through scrapy as usual, the engine reads them through
# reconcile.config.get_settings(). You can find more settings consulting the
# documentation:
#
#     https://docs.scrapy.org/en/latest/topics/settings.html

BOT_NAME = "scrapers"

SPIDER_MODULES = ["scrapers.spiders"]
NEWSPIDER_MODULE = "scrapers.spiders"

# Obey robots.txt rules
ROBOTSTXT_OBEY = False

# Configure a delay for requests for the same website (default: 0)
# See https://docs.scrapy.org/en/latest/topics/settings.html#download-delay
DOWNLOAD_DELAY = 1

CONCURRENT_REQUESTS = 8
CONCURRENT_REQUESTS_PER_DOMAIN = 4

TWISTED_REACTOR = "twisted.internet.asyncioreactor.AsyncioSelectorReactor"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

FEED_ROOT = os.getenv("SCRAPED_DATA_DIR", (pathlib.Path(__file__) / ".." / ".." / "scraped_data").resolve().as_posix())

if "-a" not in sys.argv:
    feeds_path = FEED_ROOT + "/%(name)s.json"
else:
    feeds_path = FEED_ROOT + "/%(name)s/%(time)s.json"

FEEDS = {
    feeds_path: {
        "format": "json",
        "encoding": "utf-8",
        "indent": 2,
        "overwrite": True,
    }
}

# Registry (Open Charge Map)
OCM_API_KEY = os.getenv("OCM_API_KEY")
OCM_API_BASE_URL = os.getenv("OCM_API_BASE_URL", "https://api.openchargemap.io/v3")

# Directory (Google Places API v1)
GOOGLE_PLACES_API_KEY = os.getenv("GOOGLE_PLACES_API_KEY")
GOOGLE_PLACES_API_BASE_URL = os.getenv("GOOGLE_PLACES_API_BASE_URL", "https://places.googleapis.com/v1")
DIRECTORY_PAGE_SIZE = 20

# Seconds allowed for each outbound provider call
PROVIDER_TIMEOUT = float(os.getenv("PROVIDER_TIMEOUT", "10"))

# Matching thresholds, planar distance in degrees
LIST_MATCH_THRESHOLD = 0.0015
DETAIL_MATCH_THRESHOLD = 0.00135
BUSINESS_PHOTO_THRESHOLD = 0.00045

# Search radii in meters
DEFAULT_SEARCH_RADIUS = 5000
DEFAULT_SEARCH_LIMIT = 50
DETAIL_SEARCH_RADIUS = 150
BUSINESS_SEARCH_RADIUS = 50

# Turn Open Charge Map user comment ratings into a registry rating
REGISTRY_RATINGS_FROM_COMMENTS = False

MAX_PHOTOS = 5
CONNECTOR_POWER_TOLERANCE_KW = 2.0

try:
    from scrapers.local_settings import *
except ImportError:
    pass
