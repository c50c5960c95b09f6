"""Pydantic models for client configuration and per-operation options.

Every model is frozen and rejects unknown keys, so a misspelt option fails
validation instead of being dropped. Numeric bounds and the closed sets of
string literals follow the limits documented by the MediaWiki Action API.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
)

from .errors import OptionsValidationError
from .meta import API_URL, USER_AGENT

__all__ = (
    "ImageSortType",
    "SortDirection",
    "BotFilter",
    "LinkDirection",
    "AllLinksProperty",
    "RedirectFilter",
    "LangLinksFilter",
    "ProtectionType",
    "ProtectionLevel",
    "CascadeFilter",
    "ProtectionExpiry",
    "ExtractFormatType",
    "ImageProperty",
    "RevisionProperty",
    "Granularity",
    "Access",
    "Agent",
    "ClientConfig",
    "SearchOptions",
    "BacklinksOptions",
    "ImageSearchOptions",
    "AllLinksOptions",
    "AllPagesOptions",
    "ExtractOptions",
    "RevisionOptions",
    "PageViewsOptions",
    "validate_options",
)

ImageSortType = Literal["name", "timestamp"]
SortDirection = Literal["ascending", "descending", "newer", "older"]
BotFilter = Literal["all", "bots", "nobots"]
LinkDirection = Literal["ascending", "descending"]
AllLinksProperty = Literal["ids", "title"]
RedirectFilter = Literal["all", "nonredirects", "redirects"]
LangLinksFilter = Literal["all", "withlanglinks", "withoutlanglinks"]
ProtectionType = Literal["edit", "move", "upload"]
ProtectionLevel = Literal["autoconfirmed", "sysop"]
CascadeFilter = Literal["all", "cascading", "noncascading"]
ProtectionExpiry = Literal["all", "definite", "indefinite"]
ExtractFormatType = Literal["plain", "wiki"]
ImageProperty = Literal[
    "timestamp",
    "user",
    "userid",
    "comment",
    "parsedcomment",
    "canonicaltitle",
    "url",
    "size",
    "dimensions",
    "sha1",
    "mime",
    "mediatype",
    "metadata",
    "commonmetadata",
    "extmetadata",
    "bitdepth",
    "badfile",
]
RevisionProperty = Literal[
    "ids",
    "timestamp",
    "flags",
    "comment",
    "parsedcomment",
    "size",
    "sha1",
    "roles",
    "tags",
    "user",
    "userid",
    "content",
]
Granularity = Literal["daily", "monthly"]
Access = Literal["all-access", "desktop", "mobile-app", "mobile-web"]
Agent = Literal["all-agents", "user", "spider", "bot"]

_Limit = Annotated[StrictInt, Field(ge=1, le=500)]
_Namespace = Annotated[StrictInt, Field(ge=-2, le=5501)]
_NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
_Positive = Annotated[StrictInt, Field(gt=0)]
# `YYYYMMDD`, optionally followed by an hour
_PageViewsDate = Annotated[str, Field(pattern=r"^\d{8}(\d{2})?$")]
_Options = TypeVar("_Options", bound=BaseModel)


class _OptionsModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class ClientConfig(_OptionsModel):
    """Construction parameters of :class:`pywikimedia.client.WikimediaClient`."""

    base_url: _NonEmptyStr = API_URL
    user_agent: _NonEmptyStr = USER_AGENT


class SearchOptions(_OptionsModel):
    limit: _Limit = 10
    offset: Annotated[StrictInt, Field(ge=0)] | None = None
    namespace: _Namespace | None = None


class BacklinksOptions(_OptionsModel):
    limit: _Limit = 10
    namespace: _Namespace | None = None
    filter_redirects: RedirectFilter | None = None


class ImageSearchOptions(_OptionsModel):
    """Options of ``list=allimages``.

    ``from_``/``to`` only apply when sorting by name (the default) and
    ``start``/``end``/``user``/``filter_bots`` only when sorting by
    timestamp. Fields of the other mode are ignored.
    """

    sort: ImageSortType | None = None
    direction: SortDirection | None = None
    from_: str | None = Field(None, alias="from")
    to: str | None = None
    start: str | None = None
    end: str | None = None
    min_size: _Positive | None = None
    max_size: _Positive | None = None
    user: str | None = None
    filter_bots: BotFilter | None = None
    sha1: str | None = None
    properties: tuple[ImageProperty, ...] | None = None
    limit: _Limit | None = None


class AllLinksOptions(_OptionsModel):
    from_: str | None = Field(None, alias="from")
    to: str | None = None
    prefix: str | None = None
    unique: StrictBool | None = None
    properties: tuple[AllLinksProperty, ...] | None = None
    namespace: _Namespace | None = None
    limit: _Limit | None = None
    direction: LinkDirection | None = None


class AllPagesOptions(_OptionsModel):
    from_: str | None = Field(None, alias="from")
    to: str | None = None
    prefix: str | None = None
    namespace: Annotated[StrictInt, Field(ge=0, le=5501)] | None = None
    filter_redirects: RedirectFilter | None = None
    filter_lang_links: LangLinksFilter | None = None
    min_size: _Positive | None = None
    max_size: _Positive | None = None
    protection_type: tuple[ProtectionType, ...] | None = None
    protection_level: tuple[ProtectionLevel, ...] | None = None
    protection_cascade: CascadeFilter | None = None
    protection_expiry: ProtectionExpiry | None = None
    limit: _Limit | None = None
    direction: LinkDirection | None = None


class ExtractOptions(_OptionsModel):
    """Options of ``prop=extracts``.

    ``single_section`` forces the raw section format, overriding
    ``section_format``.
    """

    plain_text: StrictBool | None = None
    section_format: ExtractFormatType | None = None
    sentences: Annotated[StrictInt, Field(ge=1, le=10)] | None = None
    chars: _Positive | None = None
    limit: Annotated[StrictInt, Field(ge=1, le=20)] | None = None
    intro_only: StrictBool | None = None
    single_section: StrictBool | None = None


class RevisionOptions(_OptionsModel):
    limit: _Limit | None = None
    start: str | None = None
    end: str | None = None
    direction: Literal["newer", "older"] | None = None
    user: str | None = None
    exclude_user: str | None = None
    tag: str | None = None
    properties: tuple[RevisionProperty, ...] | None = None


class PageViewsOptions(_OptionsModel):
    """Options of the per-article pageview statistics.

    ``start`` and ``end`` default to the 30 days ending today when unset.
    """

    start: _PageViewsDate | None = None
    end: _PageViewsDate | None = None
    granularity: Granularity = "daily"
    access: Access = "all-access"
    agent: Agent = "all-agents"


def validate_options(
    model: type[_Options], options: _Options | Mapping[str, Any] | None
) -> _Options:
    """Coerce ``options`` into ``model``, raising before any request is made.

    ``None`` yields the model's defaults. Instances of ``model`` pass through
    unchanged since they were validated on construction.
    """

    if isinstance(options, model):
        return options
    try:
        return model.model_validate({} if options is None else options)
    except ValidationError as exc:
        raise OptionsValidationError.from_validation_error(model.__name__, exc) from exc
