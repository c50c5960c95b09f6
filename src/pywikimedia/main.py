"""CLI utilities for pywikimedia.

This module provides the top-level CLI `ArgumentParser` factory with one
subcommand per client operation, and the `main` coroutine that runs a single
request and prints the decoded response as JSON.
"""

from argparse import ONE_OR_MORE, OPTIONAL, ZERO_OR_MORE, ArgumentParser, Namespace
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import IntFlag, auto, unique
from functools import partial, wraps
from json import dumps
from sys import exit
from typing import Any, ClassVar, final, get_args

from aiohttp import ClientError
from anyio import Path
from html2text import HTML2Text
from pydantic import BaseModel

from .client import WikimediaClient
from .errors import APIError, OptionsValidationError, ResponseDecodeError
from .meta import LOGGER, OPEN_TEXT_OPTIONS, VERSION
from .options import (
    Access,
    Agent,
    AllLinksProperty,
    BotFilter,
    CascadeFilter,
    ExtractFormatType,
    Granularity,
    ImageProperty,
    ImageSortType,
    LangLinksFilter,
    LinkDirection,
    ProtectionExpiry,
    ProtectionLevel,
    ProtectionType,
    RedirectFilter,
    RevisionProperty,
    SortDirection,
)

__all__ = (
    "ExitCode",
    "Args",
    "main",
    "parser",
)

# response fields holding HTML fragments, rendered as text by `--text`
_HTML_FIELDS = frozenset({"snippet", "extract", "parsedcomment", "displaytitle"})

_Request = Callable[[WikimediaClient], Awaitable[BaseModel]]


@final
@unique
class ExitCode(IntFlag):
    """Exit codes representing the error conditions of a run.

    Each member corresponds to a class of failure. The bits can be combined,
    for example a decode error also sets the generic error bit.
    """

    __slots__: ClassVar = ()

    GENERIC_ERROR = auto()
    OPTIONS_ERROR = auto()
    REQUEST_ERROR = auto()
    DECODE_ERROR = auto()


@final
@dataclass(
    init=True,
    repr=True,
    eq=True,
    order=False,
    unsafe_hash=False,
    frozen=True,
    match_args=True,
    kw_only=True,
    slots=True,
)
class Args:
    """Immutable container for the parsed global CLI arguments.

    Attributes:
        base_url: Action API endpoint override
        user_agent: User-Agent override
        output: optional file to write the JSON to instead of stdout
        text: if True, render HTML fragments as plain text
    """

    base_url: str | None
    user_agent: str | None
    output: Path | None
    text: bool


def _html_to_text(html: str):
    htm_esc = HTML2Text()
    htm_esc.body_width = 0
    htm_esc.emphasis_mark = "_"
    htm_esc.ignore_links = True
    htm_esc.single_line_break = True
    htm_esc.strong_mark = "__"
    htm_esc.ul_item_mark = "-"
    return htm_esc.handle(html).strip()


def _to_text(value: Any, key: str | None = None) -> Any:
    """Recursively replace HTML fragments in a dumped response by text."""

    if isinstance(value, dict):
        return {k: _to_text(v, k) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_text(v, key) for v in value]
    if isinstance(value, str) and key in _HTML_FIELDS:
        return _html_to_text(value)
    return value


def render(response: BaseModel, *, text: bool = False):
    """Serialize a decoded response as indented JSON.

    Fields absent from the response are left out. With ``text`` the HTML
    fragments of search snippets, extracts and comments are converted to
    plain text.
    """

    data = response.model_dump(mode="json", by_alias=True, exclude_none=True)
    if text:
        data = _to_text(data)
    return dumps(data, ensure_ascii=False, indent=2)


async def main(args: Args, request: _Request):
    """Run a single request and print or write its response.

    On error, the function logs and sets the appropriate `ExitCode` flags
    before calling `sys.exit` with the resulting exit code.
    """

    ec = ExitCode(0)

    try:
        async with WikimediaClient(
            base_url=args.base_url, user_agent=args.user_agent
        ) as client:
            try:
                response = await request(client)
            except OptionsValidationError:
                LOGGER.exception("Invalid options")
                ec |= ExitCode.OPTIONS_ERROR
                raise
            except (APIError, ResponseDecodeError):
                LOGGER.exception("Error decoding")
                ec |= ExitCode.DECODE_ERROR
                raise
            except ClientError:
                LOGGER.exception("Error requesting")
                ec |= ExitCode.REQUEST_ERROR
                raise
        output = render(response, text=args.text)
        if args.output is None:
            print(output)
        else:
            LOGGER.info(f"Writing '{args.output}'")
            await args.output.parent.mkdir(parents=True, exist_ok=True)
            await args.output.write_text(output + "\n", **OPEN_TEXT_OPTIONS)
    except Exception:
        LOGGER.exception("Error")
        ec |= ExitCode.GENERIC_ERROR

    exit(ec)


def _options(args: Namespace, names: Iterable[str]):
    """Collect the options given on the command line, skipping unset ones."""

    return {
        name: value
        for name in names
        if (value := getattr(args, name, None)) is not None
    }


def _command(
    parent: Callable[..., ArgumentParser],
    name: str,
    description: str,
    request: Callable[[Namespace, WikimediaClient], Awaitable[BaseModel]],
):
    parser = parent(
        name,
        description=description,
        help=description,
        add_help=True,
        allow_abbrev=False,
        exit_on_error=False,
    )

    @wraps(main)
    async def invoke(args: Namespace):
        await main(
            Args(
                base_url=args.base_url,
                user_agent=args.user_agent,
                output=args.output,
                text=args.text,
            ),
            partial(request, args),
        )

    parser.set_defaults(invoke=invoke)
    return parser


def _add_title(parser: ArgumentParser, help: str = "page title"):
    parser.add_argument("title", action="store", type=str, help=help)


def _add_titles(parser: ArgumentParser):
    parser.add_argument(
        "titles",
        action="store",
        nargs=ONE_OR_MORE,
        type=str,
        help="page title(s)",
    )


def _add_choice(parser: ArgumentParser, flag: str, choices: Any, help: str):
    parser.add_argument(flag, action="store", choices=get_args(choices), help=help)


def _add_choices(parser: ArgumentParser, flag: str, choices: Any, help: str):
    parser.add_argument(
        flag,
        action="store",
        nargs=ZERO_OR_MORE,
        choices=get_args(choices),
        help=help,
    )


def _add_int(parser: ArgumentParser, flag: str, help: str):
    parser.add_argument(flag, action="store", type=int, help=help)


def _add_str(parser: ArgumentParser, flag: str, help: str, **kwargs: Any):
    parser.add_argument(flag, action="store", type=str, help=help, **kwargs)


def _add_flag(parser: ArgumentParser, flag: str, help: str):
    parser.add_argument(flag, action="store_true", default=None, help=help)


def _title_request(method: Callable[[WikimediaClient, str], Awaitable[BaseModel]]):
    return lambda args, client: method(client, args.title)


def _add_commands(parent: Callable[..., ArgumentParser]):
    page = _command(
        parent,
        "page",
        "get the wikitext of a page",
        lambda args, client: client.get_page(args.title),
    )
    _add_title(page)

    search_options = ("limit", "offset", "namespace")
    search = _command(
        parent,
        "search",
        "full-text search",
        lambda args, client: client.search(
            args.query, options=_options(args, search_options)
        ),
    )
    search.add_argument("query", action="store", type=str, help="search query")
    _add_int(search, "--limit", "maximum number of results")
    _add_int(search, "--offset", "number of results to skip")
    _add_int(search, "--namespace", "namespace to search in")

    for name, description, method in (
        ("info", "get page information", WikimediaClient.get_page_info),
        ("categories", "list the categories of a page", WikimediaClient.get_categories),
        ("links", "list the links of a page", WikimediaClient.get_links),
        ("images", "list the files used on a page", WikimediaClient.get_page_images),
    ):
        _add_title(
            _command(
                parent,
                name,
                description,
                _title_request(method),
            )
        )

    backlinks_options = ("limit", "namespace", "filter_redirects")
    backlinks = _command(
        parent,
        "backlinks",
        "list the pages linking to a page",
        lambda args, client: client.get_backlinks(
            args.title, options=_options(args, backlinks_options)
        ),
    )
    _add_title(backlinks)
    _add_int(backlinks, "--limit", "maximum number of results")
    _add_int(backlinks, "--namespace", "namespace of the linking pages")
    _add_choice(
        backlinks, "--filter-redirects", RedirectFilter, "which redirects to list"
    )

    image_info = _command(
        parent,
        "image-info",
        "get information about files",
        lambda args, client: client.get_image_info(args.titles),
    )
    _add_titles(image_info)

    image_options = (
        "sort",
        "direction",
        "from_",
        "to",
        "start",
        "end",
        "min_size",
        "max_size",
        "user",
        "filter_bots",
        "sha1",
        "properties",
        "limit",
    )
    search_images = _command(
        parent,
        "search-images",
        "enumerate files",
        lambda args, client: client.search_images(
            args.query, _options(args, image_options)
        ),
    )
    search_images.add_argument(
        "query",
        action="store",
        nargs=OPTIONAL,
        default="",
        type=str,
        help="file name search string",
    )
    _add_choice(search_images, "--sort", ImageSortType, "sort mode")
    _add_choice(search_images, "--direction", SortDirection, "sort direction")
    _add_str(
        search_images, "--from", "file name to start at (name sort)", dest="from_"
    )
    _add_str(search_images, "--to", "file name to stop at (name sort)")
    _add_str(search_images, "--start", "timestamp to start at (timestamp sort)")
    _add_str(search_images, "--end", "timestamp to stop at (timestamp sort)")
    _add_int(search_images, "--min-size", "minimum file size in bytes")
    _add_int(search_images, "--max-size", "maximum file size in bytes")
    _add_str(search_images, "--user", "uploader (timestamp sort)")
    _add_choice(search_images, "--filter-bots", BotFilter, "bot upload filter")
    _add_str(search_images, "--sha1", "SHA-1 hash of the file")
    _add_choices(search_images, "--properties", ImageProperty, "file properties")
    _add_int(search_images, "--limit", "maximum number of results")

    for name, description, method in (
        ("file-usage", "list pages using a file", WikimediaClient.get_file_usage),
        (
            "global-usage",
            "list pages on all wikis using a file",
            WikimediaClient.get_global_usage,
        ),
    ):
        _add_title(
            _command(
                parent,
                name,
                description,
                _title_request(method),
            ),
            "file title",
        )

    all_links_options = (
        "from_",
        "to",
        "prefix",
        "unique",
        "properties",
        "namespace",
        "limit",
        "direction",
    )
    all_links = _command(
        parent,
        "all-links",
        "enumerate links",
        lambda args, client: client.get_all_links(_options(args, all_links_options)),
    )
    _add_str(all_links, "--from", "title to start at", dest="from_")
    _add_str(all_links, "--to", "title to stop at")
    _add_str(all_links, "--prefix", "title prefix")
    _add_flag(all_links, "--unique", "only list distinct titles")
    _add_choices(all_links, "--properties", AllLinksProperty, "link properties")
    _add_int(all_links, "--namespace", "namespace to enumerate")
    _add_int(all_links, "--limit", "maximum number of results")
    _add_choice(all_links, "--direction", LinkDirection, "listing direction")

    all_pages_options = (
        "from_",
        "to",
        "prefix",
        "namespace",
        "filter_redirects",
        "filter_lang_links",
        "min_size",
        "max_size",
        "protection_type",
        "protection_level",
        "protection_cascade",
        "protection_expiry",
        "limit",
        "direction",
    )
    all_pages = _command(
        parent,
        "all-pages",
        "enumerate pages",
        lambda args, client: client.get_all_pages(_options(args, all_pages_options)),
    )
    _add_str(all_pages, "--from", "title to start at", dest="from_")
    _add_str(all_pages, "--to", "title to stop at")
    _add_str(all_pages, "--prefix", "title prefix")
    _add_int(all_pages, "--namespace", "namespace to enumerate")
    _add_choice(all_pages, "--filter-redirects", RedirectFilter, "redirect filter")
    _add_choice(
        all_pages, "--filter-lang-links", LangLinksFilter, "language link filter"
    )
    _add_int(all_pages, "--min-size", "minimum page size in bytes")
    _add_int(all_pages, "--max-size", "maximum page size in bytes")
    _add_choices(all_pages, "--protection-type", ProtectionType, "protection types")
    _add_choices(
        all_pages, "--protection-level", ProtectionLevel, "protection levels"
    )
    _add_choice(
        all_pages, "--protection-cascade", CascadeFilter, "cascading protection filter"
    )
    _add_choice(
        all_pages, "--protection-expiry", ProtectionExpiry, "protection expiry filter"
    )
    _add_int(all_pages, "--limit", "maximum number of results")
    _add_choice(all_pages, "--direction", LinkDirection, "listing direction")

    extract_options = (
        "plain_text",
        "section_format",
        "sentences",
        "chars",
        "limit",
        "intro_only",
        "single_section",
    )
    extracts = _command(
        parent,
        "extracts",
        "get text extracts of pages",
        lambda args, client: client.get_extracts(
            args.titles, _options(args, extract_options)
        ),
    )
    _add_titles(extracts)
    _add_flag(extracts, "--plain-text", "return plain text instead of HTML")
    _add_choice(
        extracts, "--section-format", ExtractFormatType, "section heading format"
    )
    _add_int(extracts, "--sentences", "number of sentences")
    _add_int(extracts, "--chars", "number of characters")
    _add_int(extracts, "--limit", "maximum number of extracts")
    _add_flag(extracts, "--intro-only", "only the lead section")
    _add_flag(extracts, "--single-section", "raw section headings")

    revision_options = (
        "limit",
        "start",
        "end",
        "direction",
        "user",
        "exclude_user",
        "tag",
        "properties",
    )
    revisions = _command(
        parent,
        "revisions",
        "list the revisions of a page",
        lambda args, client: client.get_revisions(
            args.title, _options(args, revision_options)
        ),
    )
    _add_title(revisions)
    _add_int(revisions, "--limit", "maximum number of revisions")
    _add_str(revisions, "--start", "timestamp to start at")
    _add_str(revisions, "--end", "timestamp to stop at")
    revisions.add_argument(
        "--direction",
        action="store",
        choices=("newer", "older"),
        help="listing direction",
    )
    _add_str(revisions, "--user", "only revisions by this user")
    _add_str(revisions, "--exclude-user", "exclude revisions by this user")
    _add_str(revisions, "--tag", "only revisions with this tag")
    _add_choices(revisions, "--properties", RevisionProperty, "revision properties")

    pageview_options = ("start", "end", "granularity", "access", "agent")
    pageviews = _command(
        parent,
        "pageviews",
        "get pageview statistics of a page",
        lambda args, client: client.get_page_views(
            args.title, _options(args, pageview_options)
        ),
    )
    _add_title(pageviews)
    _add_str(pageviews, "--start", "first day, YYYYMMDD (default: 30 days ago)")
    _add_str(pageviews, "--end", "last day, YYYYMMDD (default: today)")
    _add_choice(pageviews, "--granularity", Granularity, "time granularity")
    _add_choice(pageviews, "--access", Access, "access method")
    _add_choice(pageviews, "--agent", Agent, "agent type")


def parser(parent: Callable[..., ArgumentParser] | None = None):
    """Return an ArgumentParser configured for the package CLI.

    If a `parent` callable is provided it will be used to construct the
    parser (useful when the command is embedded within another parser).
    """

    prog = __package__ or __name__

    parser = (ArgumentParser if parent is None else parent)(
        prog=f"python -m {prog}",
        description="query the Wikipedia API",
        add_help=True,
        allow_abbrev=False,
        exit_on_error=False,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{prog} v{VERSION}",
        help="print version and exit",
    )
    parser.add_argument(
        "--base-url",
        action="store",
        type=str,
        help="Action API endpoint",
    )
    parser.add_argument(
        "--user-agent",
        action="store",
        type=str,
        help="User-Agent header",
    )
    parser.add_argument(
        "-o",
        "--output",
        action="store",
        type=Path,
        help="output file (default: stdout)",
    )
    parser.add_argument(
        "--text",
        action="store_true",
        default=False,
        help="render HTML fragments as plain text",
    )
    subparsers = parser.add_subparsers(
        required=True,
    )
    _add_commands(subparsers.add_parser)
    return parser
