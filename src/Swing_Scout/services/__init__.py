"""Polygon data access, headline sentiment, and rate limiting services.

Re-exports all public service classes so consumers can import directly:
    from Swing_Scout.services import PolygonDataProvider, NewsService
"""

from Swing_Scout.services.market_data import DataProvider, PolygonDataProvider
from Swing_Scout.services.news import NewsProvider, NewsService, VaderHeadlineScorer
from Swing_Scout.services.polygon_client import PolygonClient
from Swing_Scout.services.rate_limiter import RateLimiter

__all__ = [
    # Infrastructure
    "PolygonClient",
    "RateLimiter",
    # Data services
    "DataProvider",
    "PolygonDataProvider",
    # News
    "NewsProvider",
    "NewsService",
    "VaderHeadlineScorer",
]
