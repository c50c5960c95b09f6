"""pywikimedia: a typed asynchronous client for the Wikipedia API.

The client validates per-operation options, builds the Action API query
string and decodes each JSON response into frozen pydantic models.

Exports:
- WikimediaClient: the client facade, one coroutine per operation
- ClientConfig and the per-operation option models
- OptionsValidationError, ResponseDecodeError, APIError: the library's errors

Package metadata lives in `pywikimedia.meta`.
"""

from .client import WikimediaClient
from .errors import (
    APIError,
    OptionsValidationError,
    ResponseDecodeError,
    WikimediaError,
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
)

__all__ = (
    "WikimediaClient",
    "ClientConfig",
    "SearchOptions",
    "BacklinksOptions",
    "ImageSearchOptions",
    "AllLinksOptions",
    "AllPagesOptions",
    "ExtractOptions",
    "RevisionOptions",
    "PageViewsOptions",
    "WikimediaError",
    "OptionsValidationError",
    "ResponseDecodeError",
    "APIError",
)
