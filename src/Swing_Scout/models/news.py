"""News models: stored headlines and the per-symbol sentiment summary."""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from Swing_Scout.models.enums import NewsLabel, NewsTrend


class NewsArticle(BaseModel):
    """A single scored headline, stored once per URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    symbol: str
    published_at: AwareDatetime
    title: str
    source: str | None = None
    sentiment_score: float = Field(ge=-1.0, le=1.0)
    sentiment_label: NewsLabel


class NewsSummary(BaseModel):
    """Recent sentiment for a symbol. Informational only; never scored."""

    model_config = ConfigDict(frozen=True)

    label: NewsLabel
    trend: NewsTrend
    score_3d: float
    score_7d: float
