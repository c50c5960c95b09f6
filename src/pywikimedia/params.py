"""Query-string builders, one per operation.

Each builder is a pure function returning the flat mapping sent to the Action
API. They start from the fixed ``action``/``format`` base plus the operation's
``list`` or ``prop`` discriminator and only insert an optional key when its
option is set. Values are ``str`` or ``int`` so the mapping can be handed to
:meth:`yarl.URL.with_query` unchanged.

The API's conventions are followed throughout:

- multiple values are joined with ``|`` in the order given, and an explicitly
  empty sequence is sent as the empty string;
- boolean flags are sent as the empty string when set and omitted otherwise.
"""

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from urllib.parse import quote

from .errors import OptionsValidationError
from .meta import PAGEVIEWS_URL
from .options import (
    AllLinksOptions,
    AllPagesOptions,
    BacklinksOptions,
    ExtractOptions,
    ImageSearchOptions,
    PageViewsOptions,
    RevisionOptions,
    SearchOptions,
)

__all__ = (
    "Params",
    "IMAGE_PROPERTIES",
    "REVISION_PROPERTIES",
    "PAGEVIEWS_DAYS",
    "join_titles",
    "page_params",
    "search_params",
    "page_info_params",
    "categories_params",
    "links_params",
    "backlinks_params",
    "page_images_params",
    "image_info_params",
    "search_images_params",
    "file_usage_params",
    "global_usage_params",
    "all_links_params",
    "all_pages_params",
    "extracts_params",
    "revisions_params",
    "pageviews_url",
)

Params = dict[str, str | int]

IMAGE_PROPERTIES = ("timestamp", "user", "size", "url", "mime", "mediatype", "bitdepth")
REVISION_PROPERTIES = ("ids", "timestamp", "flags", "comment", "user", "size")
PAGEVIEWS_DAYS = 30
_PAGEVIEWS_DATE_FORMAT = "%Y%m%d"


def _base(**fixed: str | int) -> Params:
    return {"action": "query", "format": "json", **fixed}


def _put(params: Params, key: str, value: str | int | None):
    if value is not None:
        params[key] = value


def _pipe(values: Sequence[str] | None):
    return None if values is None else "|".join(values)


def _flag(value: bool | None):
    return "" if value else None


def join_titles(titles: str | Sequence[str]) -> str:
    """Serialize one or more page titles for the ``titles`` parameter.

    Raises :class:`OptionsValidationError` when no title is given.
    """

    joined = titles if isinstance(titles, str) else "|".join(titles)
    if not joined:
        raise OptionsValidationError("At least one title is required", ("titles",))
    return joined


def page_params(title: str) -> Params:
    return _base(
        prop="revisions", titles=join_titles(title), rvslots="*", rvprop="content"
    )


def search_params(query: str, options: SearchOptions) -> Params:
    params = _base(list="search", srsearch=query, srlimit=options.limit)
    _put(params, "sroffset", options.offset)
    _put(params, "srnamespace", options.namespace)
    return params


def page_info_params(title: str) -> Params:
    return _base(prop="info", titles=join_titles(title))


def categories_params(title: str) -> Params:
    return _base(prop="categories", titles=join_titles(title))


def links_params(title: str) -> Params:
    return _base(prop="links", titles=join_titles(title))


def backlinks_params(title: str, options: BacklinksOptions) -> Params:
    params = _base(list="backlinks", bltitle=join_titles(title), bllimit=options.limit)
    _put(params, "blnamespace", options.namespace)
    _put(params, "blfilterredir", options.filter_redirects)
    return params


def page_images_params(title: str) -> Params:
    return _base(prop="images", titles=join_titles(title))


def image_info_params(titles: str | Sequence[str]) -> Params:
    return _base(
        prop="imageinfo", titles=join_titles(titles), iiprop="|".join(IMAGE_PROPERTIES)
    )


def search_images_params(query: str, options: ImageSearchOptions) -> Params:
    """Build ``list=allimages`` parameters.

    Only the range options of the active sort mode are sent: ``aifrom`` and
    ``aito`` when sorting by name (also the API's default), ``aistart``,
    ``aiend``, ``aiuser`` and ``aifilterbots`` when sorting by timestamp.
    """

    params = _base(
        list="allimages",
        aiprop=_pipe(options.properties)
        if options.properties is not None
        else "|".join(IMAGE_PROPERTIES),
    )
    if query:
        params["aisearch"] = query
    _put(params, "aisort", options.sort)
    _put(params, "aidir", options.direction)
    if options.sort == "timestamp":
        _put(params, "aistart", options.start)
        _put(params, "aiend", options.end)
        _put(params, "aiuser", options.user)
        _put(params, "aifilterbots", options.filter_bots)
    else:
        _put(params, "aifrom", options.from_)
        _put(params, "aito", options.to)
    _put(params, "aiminsize", options.min_size)
    _put(params, "aimaxsize", options.max_size)
    _put(params, "aisha1", options.sha1)
    _put(params, "ailimit", options.limit)
    return params


def file_usage_params(filename: str) -> Params:
    return _base(prop="fileusage", titles=join_titles(filename))


def global_usage_params(filename: str) -> Params:
    return _base(prop="globalusage", titles=join_titles(filename))


def all_links_params(options: AllLinksOptions) -> Params:
    params = _base(
        list="alllinks",
        alprop=_pipe(options.properties) if options.properties is not None else "title",
    )
    _put(params, "alfrom", options.from_)
    _put(params, "alto", options.to)
    _put(params, "alprefix", options.prefix)
    _put(params, "alunique", _flag(options.unique))
    _put(params, "alnamespace", options.namespace)
    _put(params, "allimit", options.limit)
    _put(params, "aldir", options.direction)
    return params


def all_pages_params(options: AllPagesOptions) -> Params:
    params = _base(list="allpages")
    _put(params, "apfrom", options.from_)
    _put(params, "apto", options.to)
    _put(params, "apprefix", options.prefix)
    _put(params, "apnamespace", options.namespace)
    _put(params, "apfilterredir", options.filter_redirects)
    _put(params, "apfilterlanglinks", options.filter_lang_links)
    _put(params, "apminsize", options.min_size)
    _put(params, "apmaxsize", options.max_size)
    _put(params, "apprtype", _pipe(options.protection_type))
    _put(params, "apprlevel", _pipe(options.protection_level))
    _put(params, "apprfiltercascade", options.protection_cascade)
    _put(params, "apprexpiry", options.protection_expiry)
    _put(params, "aplimit", options.limit)
    _put(params, "apdir", options.direction)
    return params


def extracts_params(titles: str | Sequence[str], options: ExtractOptions) -> Params:
    """Build ``prop=extracts`` parameters.

    ``single_section`` always sends ``exsectionformat=raw``, whatever
    ``section_format`` says.
    """

    params = _base(prop="extracts", titles=join_titles(titles))
    _put(params, "explaintext", _flag(options.plain_text))
    _put(params, "exsentences", options.sentences)
    _put(params, "exchars", options.chars)
    _put(params, "exlimit", options.limit)
    _put(params, "exintro", _flag(options.intro_only))
    _put(
        params,
        "exsectionformat",
        "raw" if options.single_section else options.section_format,
    )
    return params


def revisions_params(title: str, options: RevisionOptions) -> Params:
    properties = (
        REVISION_PROPERTIES if options.properties is None else options.properties
    )
    params = _base(prop="revisions", titles=join_titles(title), rvprop=_pipe(properties))
    if "content" in properties:
        params["rvslots"] = "*"
    _put(params, "rvlimit", options.limit)
    _put(params, "rvstart", options.start)
    _put(params, "rvend", options.end)
    _put(params, "rvdir", options.direction)
    _put(params, "rvuser", options.user)
    _put(params, "rvexcludeuser", options.exclude_user)
    _put(params, "rvtag", options.tag)
    return params


def pageviews_url(
    title: str,
    options: PageViewsOptions,
    *,
    base: str = PAGEVIEWS_URL,
    today: date | None = None,
) -> str:
    """Return the already percent-encoded per-article pageviews URL.

    The title is escaped like a URI component with ``! ' ( ) *`` escaped as
    well, as the REST endpoint requires.
    """

    today = today or datetime.now(timezone.utc).date()
    start = options.start or (today - timedelta(days=PAGEVIEWS_DAYS)).strftime(
        _PAGEVIEWS_DATE_FORMAT
    )
    end = options.end or today.strftime(_PAGEVIEWS_DATE_FORMAT)
    return "/".join(
        (
            base.rstrip("/"),
            options.access,
            options.agent,
            quote(join_titles(title), safe=""),
            options.granularity,
            start,
            end,
        )
    )
