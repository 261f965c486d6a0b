"""
EPG document model

This module defines the typed entity tree for a decoded XMLTV guide.
Every optional child element is modeled as a nullable field: ``None`` means
the element was absent, an empty string means it was present but empty.
Field aliases carry the XML element and attribute names so that
``model_dump(by_alias=True)`` mirrors the source document.
"""
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field


class EPGModel(BaseModel):
    """Base class for all EPG entities (immutable once decoded)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TextValue(EPGModel):
    """Leaf element holding a single character-data value"""
    text: str = Field("", description="Character data of the element")


class Catchup(TextValue):
    pass


class Category(TextValue):
    pass


class ContentRating(TextValue):
    pass


class Description(TextValue):
    pass


class Format(TextValue):
    pass


class Replay(TextValue):
    pass


class EpisodeNumber(TextValue):
    pass


class SeasonNumber(TextValue):
    pass


class SeriesId(TextValue):
    pass


class SeriesName(TextValue):
    pass


class Title(TextValue):
    pass


class Credits(EPGModel):
    """Present-but-empty marker, credits content is not modeled"""


class Icon(EPGModel):
    """Programme icon"""
    src: str | None = Field(None, description="URI of the icon image")


class SeriesInfo(EPGModel):
    """Episode, season and series identifiers of a broadcast"""
    episode_num: EpisodeNumber | None = Field(None, alias="episode-num")
    season_num: SeasonNumber | None = Field(None, alias="season-num")
    series_id: SeriesId | None = Field(None, alias="series-id")
    series_name: SeriesName | None = Field(None, alias="series-name")


class Broadcast(EPGModel):
    """Single scheduled programme (``<programme>`` element)"""
    channel: str | None = Field(None, description="Channel identifier")
    id: str | None = Field(None, description="Programme identifier")
    start: datetime | None = Field(None, description="Start of the broadcast (UTC)")
    stop: datetime | None = Field(None, description="End of the broadcast (UTC)")

    catchup: Catchup | None = None
    category: Category | None = None
    rating: ContentRating | None = Field(None, alias="cna-rating")
    credits: Credits | None = None
    description: Description | None = Field(None, alias="desc")
    format: Format | None = None
    icon: Icon | None = None
    replay: Replay | None = None
    series: SeriesInfo | None = None
    title: Title | None = None

    @property
    def duration(self) -> timedelta | None:
        """Length of the broadcast, None when either bound is missing"""
        if self.start is None or self.stop is None:
            return None
        return self.stop - self.start


class Guide(EPGModel):
    """Decoded ``<tv>`` document: broadcasts in document order"""
    broadcasts: tuple[Broadcast, ...] = Field((), alias="programme")

    @property
    def channels(self) -> list[str]:
        """Distinct channel identifiers in first-seen order"""
        seen: dict[str, None] = {}
        for broadcast in self.broadcasts:
            if broadcast.channel is not None:
                seen.setdefault(broadcast.channel, None)
        return list(seen)
