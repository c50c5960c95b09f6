"""Asynchronous client for the Wikipedia Action API and pageview API.

:class:`WikimediaClient` exposes one coroutine per supported operation. Each
call validates its options, builds the query string, issues a single ``GET``
and decodes the body into the operation's response model. Nothing is
retried, cached or batched, and continuation tokens are returned rather than
followed.

Errors fall into three kinds:

- :class:`~pywikimedia.errors.OptionsValidationError` for invalid options,
  raised before any request;
- ``aiohttp`` exceptions for connection failures and non-success statuses,
  propagated unchanged;
- :class:`~pywikimedia.errors.ResponseDecodeError` (or
  :class:`~pywikimedia.errors.APIError` for the API's error envelope) for
  bodies that do not decode.
"""

from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any, TypeVar

from aiohttp import ClientSession
from pydantic import BaseModel, ValidationError
from yarl import URL

from .errors import OptionsValidationError, ResponseDecodeError
from .meta import LOGGER
from .models import (
    AllLinksResponse,
    AllPagesResponse,
    BacklinksResponse,
    CategoriesResponse,
    ExtractsResponse,
    FileUsageResponse,
    GlobalUsageResponse,
    ImageInfoResponse,
    LinksResponse,
    PageImagesResponse,
    PageInfoResponse,
    PageResponse,
    PageViewsResponse,
    RevisionsResponse,
    SearchImagesResponse,
    SearchResponse,
    decode,
)
from .options import (
    AllLinksOptions,
    AllPagesOptions,
    BacklinksOptions,
    ClientConfig,
    ExtractOptions,
    ImageSearchOptions,
    PageViewsOptions,
    RevisionOptions,
    SearchOptions,
    validate_options,
)
from .params import (
    Params,
    all_links_params,
    all_pages_params,
    backlinks_params,
    categories_params,
    extracts_params,
    file_usage_params,
    global_usage_params,
    image_info_params,
    links_params,
    page_images_params,
    page_info_params,
    page_params,
    pageviews_url,
    revisions_params,
    search_images_params,
    search_params,
)

__all__ = ("WikimediaClient",)

_R = TypeVar("_R", bound=BaseModel)
_Options = Mapping[str, Any]


class WikimediaClient:
    """Typed client for a MediaWiki Action API endpoint.

    Use it as an async context manager so the underlying
    :class:`aiohttp.ClientSession` is closed::

        async with WikimediaClient(user_agent="MyBot/1.0") as client:
            results = await client.search("TypeScript", 5)

    A session passed in by the caller is used as is and left open.
    """

    __slots__ = ("config", "_session", "_owns_session")

    def __init__(
        self,
        config: ClientConfig | _Options | None = None,
        *,
        base_url: str | None = None,
        user_agent: str | None = None,
        session: ClientSession | None = None,
    ):
        overrides = {
            key: value
            for key, value in (("base_url", base_url), ("user_agent", user_agent))
            if value is not None
        }
        if isinstance(config, ClientConfig):
            config = config.model_dump()
        try:
            self.config = ClientConfig.model_validate({**(config or {}), **overrides})
        except ValidationError as exc:
            raise OptionsValidationError.from_validation_error(
                ClientConfig.__name__, exc
            ) from exc
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._get_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ):
        await self.close()

    async def close(self):
        """Close the session if this client created it."""

        session, self._session = self._session, None
        if session is not None and self._owns_session:
            await session.close()

    def _get_session(self):
        if self._session is None:
            self._session = ClientSession(
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip",
                    "User-Agent": self.config.user_agent,
                },
            )
            self._owns_session = True
        return self._session

    async def _get(self, operation: str, url: URL, model: type[_R]) -> _R:
        LOGGER.debug(f"{operation}: GET {url}")
        async with self._get_session().get(url) as resp:
            resp.raise_for_status()
            try:
                data = await resp.json(content_type=None)
            except ValueError as exc:
                raise ResponseDecodeError(
                    operation, f"body is not JSON: {exc}"
                ) from exc
        return decode(operation, model, data)

    async def _query(self, operation: str, params: Params, model: type[_R]) -> _R:
        return await self._get(
            operation, URL(self.config.base_url).with_query(params), model
        )

    async def get_page(self, title: str):
        """Get the current wikitext of a page."""

        return await self._query("get_page", page_params(title), PageResponse)

    async def search(
        self,
        query: str,
        limit: int = 10,
        options: SearchOptions | _Options | None = None,
    ):
        """Full-text search. ``options`` may override ``limit``."""

        opts = validate_options(SearchOptions, _with_limit(limit, options))
        return await self._query(
            "search", search_params(query, opts), SearchResponse
        )

    async def get_page_info(self, title: str):
        return await self._query(
            "get_page_info", page_info_params(title), PageInfoResponse
        )

    async def get_categories(self, title: str):
        return await self._query(
            "get_categories", categories_params(title), CategoriesResponse
        )

    async def get_links(self, title: str):
        return await self._query("get_links", links_params(title), LinksResponse)

    async def get_backlinks(
        self,
        title: str,
        limit: int = 10,
        options: BacklinksOptions | _Options | None = None,
    ):
        """List pages linking to ``title``. ``options`` may override ``limit``."""

        opts = validate_options(BacklinksOptions, _with_limit(limit, options))
        return await self._query(
            "get_backlinks", backlinks_params(title, opts), BacklinksResponse
        )

    async def get_page_images(self, title: str):
        return await self._query(
            "get_page_images", page_images_params(title), PageImagesResponse
        )

    async def get_image_info(self, titles: str | Sequence[str]):
        """Get file information for one or more ``File:`` titles."""

        return await self._query(
            "get_image_info", image_info_params(titles), ImageInfoResponse
        )

    async def search_images(
        self, query: str, options: ImageSearchOptions | _Options | None = None
    ):
        """Enumerate files, optionally filtered by ``query``.

        See :class:`~pywikimedia.options.ImageSearchOptions` for how the sort
        mode selects which range options are sent.
        """

        opts = validate_options(ImageSearchOptions, options)
        return await self._query(
            "search_images", search_images_params(query, opts), SearchImagesResponse
        )

    async def get_file_usage(self, filename: str):
        """List local pages using a file. ``filename`` is the full title."""

        return await self._query(
            "get_file_usage", file_usage_params(filename), FileUsageResponse
        )

    async def get_global_usage(self, filename: str):
        """List pages on every wiki using a shared file."""

        return await self._query(
            "get_global_usage", global_usage_params(filename), GlobalUsageResponse
        )

    async def get_all_links(self, options: AllLinksOptions | _Options | None = None):
        opts = validate_options(AllLinksOptions, options)
        return await self._query(
            "get_all_links", all_links_params(opts), AllLinksResponse
        )

    async def get_all_pages(self, options: AllPagesOptions | _Options | None = None):
        opts = validate_options(AllPagesOptions, options)
        return await self._query(
            "get_all_pages", all_pages_params(opts), AllPagesResponse
        )

    async def get_extracts(
        self,
        titles: str | Sequence[str],
        options: ExtractOptions | _Options | None = None,
    ):
        """Get text extracts of one or more pages."""

        opts = validate_options(ExtractOptions, options)
        return await self._query(
            "get_extracts", extracts_params(titles, opts), ExtractsResponse
        )

    async def get_revisions(
        self, title: str, options: RevisionOptions | _Options | None = None
    ):
        opts = validate_options(RevisionOptions, options)
        return await self._query(
            "get_revisions", revisions_params(title, opts), RevisionsResponse
        )

    async def get_page_views(
        self, title: str, options: PageViewsOptions | _Options | None = None
    ):
        """Get per-article pageview statistics from the metrics REST API.

        Without ``start``/``end`` the 30 days ending today are requested.
        """

        opts = validate_options(PageViewsOptions, options)
        return await self._get(
            "get_page_views",
            URL(pageviews_url(title, opts), encoded=True),
            PageViewsResponse,
        )


def _with_limit(
    limit: int, options: BaseModel | _Options | None
) -> BaseModel | _Options:
    if isinstance(options, BaseModel):
        return options
    return {"limit": limit, **(options or {})}
