"""Pydantic models for the Action API and pageview API responses.

Every operation decodes its body into one of the response models below. The
models check structure and primitive types only: nothing is resolved, merged
or followed. Required fields are those the API always sends; everything else
defaults to ``None`` when absent. In particular the per-page collections
(``categories``, ``links``, ``images``, ``imageinfo``, ``fileusage``,
``globalusage`` and ``revisions``) are omitted by the API for pages without
items, and decode as ``None``.

``pages`` mappings are keyed by the API's page id string. Titles that match no
page still get an entry, with a negative key and ``missing`` set.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError

from .errors import APIError, ResponseDecodeError

__all__ = (
    "WikiResponse",
    "Normalized",
    "PageInfo",
    "Category",
    "Link",
    "SearchResult",
    "SearchInfo",
    "ImageInfo",
    "PageImage",
    "FileUsage",
    "GlobalUsage",
    "Revision",
    "PageView",
    "AllLinksEntry",
    "AllPagesEntry",
    "AllImagesEntry",
    "RevisionsPage",
    "CategoriesPage",
    "LinksPage",
    "ImagesPage",
    "ImageInfoPage",
    "FileUsagePage",
    "GlobalUsagePage",
    "ExtractPage",
    "PageQuery",
    "SearchQuery",
    "PageInfoQuery",
    "CategoriesQuery",
    "LinksQuery",
    "BacklinksQuery",
    "PageImagesQuery",
    "ImageInfoQuery",
    "SearchImagesQuery",
    "FileUsageQuery",
    "GlobalUsageQuery",
    "AllLinksQuery",
    "AllPagesQuery",
    "ExtractsQuery",
    "RevisionsQuery",
    "PageResponse",
    "SearchResponse",
    "PageInfoResponse",
    "CategoriesResponse",
    "LinksResponse",
    "BacklinksResponse",
    "PageImagesResponse",
    "ImageInfoResponse",
    "SearchImagesResponse",
    "FileUsageResponse",
    "GlobalUsageResponse",
    "AllLinksResponse",
    "AllPagesResponse",
    "ExtractsResponse",
    "RevisionsResponse",
    "PageViewsResponse",
    "decode",
)

_Q = TypeVar("_Q", bound=BaseModel)


class _Model(BaseModel):
    model_config = {"frozen": True}


class WikiResponse(_Model, Generic[_Q]):
    """Top-level Action API envelope around an operation-specific ``query``.

    ``continue`` (exposed as ``continue_``), ``limits`` and ``warnings`` are
    passed through uninterpreted.
    """

    batchcomplete: StrictStr | None = None
    continue_: Mapping[str, Any] | None = Field(None, alias="continue")
    limits: Mapping[str, Any] | None = None
    warnings: Mapping[str, Any] | None = None
    query: _Q


class Normalized(_Model):
    """A title rewritten by the API before lookup."""

    from_: StrictStr = Field(alias="from")
    to: StrictStr


class _PageRef(_Model):
    """Identity fields shared by page entries; all optional."""

    ns: StrictInt | None = None
    title: StrictStr | None = None
    pageid: StrictInt | None = None
    missing: StrictStr | None = None


# records


class PageInfo(_Model):
    """``prop=info`` entry. ``pageid`` and the revision fields are absent for
    missing pages."""

    pageid: StrictInt | None = None
    ns: StrictInt
    title: StrictStr
    contentmodel: StrictStr
    pagelanguage: StrictStr
    pagelanguagehtmlcode: StrictStr | None = None
    pagelanguagedir: StrictStr | None = None
    touched: StrictStr | None = None
    lastrevid: StrictInt | None = None
    length: StrictInt | None = None
    fullurl: StrictStr | None = None
    editurl: StrictStr | None = None
    canonicalurl: StrictStr | None = None
    displaytitle: StrictStr | None = None
    missing: StrictStr | None = None


class Category(_Model):
    ns: StrictInt
    title: StrictStr
    sortkey: StrictStr | None = None
    sortkeyprefix: StrictStr | None = None
    timestamp: StrictStr | None = None
    hidden: StrictStr | None = None


class Link(_Model):
    ns: StrictInt
    title: StrictStr
    exists: StrictStr | None = None
    pageid: StrictInt | None = None


class SearchResult(_Model):
    ns: StrictInt
    title: StrictStr
    pageid: StrictInt
    size: StrictInt
    wordcount: StrictInt
    snippet: StrictStr
    timestamp: StrictStr


class SearchInfo(_Model):
    totalhits: StrictInt
    suggestion: StrictStr | None = None
    rewrittenquery: StrictStr | None = None


class ImageInfo(_Model):
    """One revision of a file as returned by ``prop=imageinfo``."""

    timestamp: StrictStr
    user: StrictStr
    userid: StrictInt | None = None
    size: StrictInt
    width: StrictInt
    height: StrictInt
    url: StrictStr
    descriptionurl: StrictStr
    descriptionshorturl: StrictStr | None = None
    mime: StrictStr
    mediatype: StrictStr
    bitdepth: StrictInt
    metadata: Sequence[Any] | None = None
    commonmetadata: Sequence[Any] | None = None
    extmetadata: Mapping[str, Any] | None = None
    sha1: StrictStr | None = None
    canonicaltitle: StrictStr | None = None
    comment: StrictStr | None = None
    parsedcomment: StrictStr | None = None
    html: StrictStr | None = None


class PageImage(_Model):
    ns: StrictInt
    title: StrictStr
    imagerepository: StrictStr | None = None
    imageinfo: Sequence[ImageInfo] | None = None


class FileUsage(_Model):
    ns: StrictInt
    title: StrictStr
    pageid: StrictInt


class GlobalUsage(_Model):
    title: StrictStr
    wiki: StrictStr
    url: StrictStr


class Revision(_Model):
    """A page revision.

    Which fields are present depends on the requested properties, so all of
    them are optional. With slots requested the content lives in
    ``slots["main"]["*"]``; see :attr:`text`.
    """

    revid: StrictInt | None = None
    parentid: StrictInt | None = None
    minor: StrictStr | None = None
    user: StrictStr | None = None
    userid: StrictInt | None = None
    anon: StrictStr | None = None
    timestamp: StrictStr | None = None
    size: StrictInt | None = None
    sha1: StrictStr | None = None
    roles: Sequence[StrictStr] | None = None
    comment: StrictStr | None = None
    parsedcomment: StrictStr | None = None
    tags: Sequence[StrictStr] | None = None
    contentformat: StrictStr | None = None
    contentmodel: StrictStr | None = None
    content: StrictStr | None = Field(None, alias="*")
    slots: Mapping[str, Mapping[str, Any]] | None = None

    @property
    def text(self) -> str | None:
        """The revision's wikitext, from the main slot when slots are used."""
        if self.slots is not None:
            main = self.slots.get("main")
            if main is not None:
                return main.get("*", main.get("content"))
        return self.content


class PageView(_Model):
    project: StrictStr
    article: StrictStr
    granularity: StrictStr
    timestamp: StrictStr
    access: StrictStr
    agent: StrictStr
    views: StrictInt


class AllLinksEntry(_Model):
    ns: StrictInt | None = None
    title: StrictStr
    fromid: StrictInt | None = None
    pageid: StrictInt | None = None


class AllPagesEntry(_Model):
    pageid: StrictInt
    ns: StrictInt
    title: StrictStr


class AllImagesEntry(_Model):
    """One file of ``list=allimages``.

    Beyond the name and title, the fields present are those requested
    through ``aiprop``.
    """

    ns: StrictInt
    title: StrictStr
    name: StrictStr
    timestamp: StrictStr | None = None
    user: StrictStr | None = None
    userid: StrictInt | None = None
    size: StrictInt | None = None
    width: StrictInt | None = None
    height: StrictInt | None = None
    url: StrictStr | None = None
    descriptionurl: StrictStr | None = None
    descriptionshorturl: StrictStr | None = None
    mime: StrictStr | None = None
    mediatype: StrictStr | None = None
    bitdepth: StrictInt | None = None
    metadata: Sequence[Any] | None = None
    commonmetadata: Sequence[Any] | None = None
    extmetadata: Mapping[str, Any] | None = None
    sha1: StrictStr | None = None
    canonicaltitle: StrictStr | None = None
    comment: StrictStr | None = None
    parsedcomment: StrictStr | None = None
    badfile: StrictStr | None = None


# page entries


class RevisionsPage(_PageRef):
    revisions: Sequence[Revision] | None = None


class CategoriesPage(_PageRef):
    categories: Sequence[Category] | None = None


class LinksPage(_PageRef):
    links: Sequence[Link] | None = None


class ImagesPage(_PageRef):
    images: Sequence[PageImage] | None = None


class ImageInfoPage(_PageRef):
    imagerepository: StrictStr | None = None
    imageinfo: Sequence[ImageInfo] | None = None


class FileUsagePage(_PageRef):
    known: StrictStr | None = None
    fileusage: Sequence[FileUsage] | None = None


class GlobalUsagePage(_PageRef):
    known: StrictStr | None = None
    globalusage: Sequence[GlobalUsage] | None = None


class ExtractPage(_PageRef):
    """``prop=extracts`` entry.

    ``extract`` is absent for missing pages and for pages beyond ``exlimit``.
    """

    extract: StrictStr | None = None


# query payloads


class PageQuery(_Model):
    pages: Mapping[str, RevisionsPage]
    normalized: Sequence[Normalized] | None = None


class SearchQuery(_Model):
    search: Sequence[SearchResult]
    searchinfo: SearchInfo | None = None


class PageInfoQuery(_Model):
    pages: Mapping[str, PageInfo]
    normalized: Sequence[Normalized] | None = None


class CategoriesQuery(_Model):
    pages: Mapping[str, CategoriesPage]
    normalized: Sequence[Normalized] | None = None


class LinksQuery(_Model):
    pages: Mapping[str, LinksPage]
    normalized: Sequence[Normalized] | None = None


class BacklinksQuery(_Model):
    backlinks: Sequence[Link]


class PageImagesQuery(_Model):
    pages: Mapping[str, ImagesPage]
    normalized: Sequence[Normalized] | None = None


class ImageInfoQuery(_Model):
    pages: Mapping[str, ImageInfoPage]
    normalized: Sequence[Normalized] | None = None


class SearchImagesQuery(_Model):
    allimages: Sequence[AllImagesEntry]


class FileUsageQuery(_Model):
    pages: Mapping[str, FileUsagePage]
    normalized: Sequence[Normalized] | None = None


class GlobalUsageQuery(_Model):
    pages: Mapping[str, GlobalUsagePage]
    normalized: Sequence[Normalized] | None = None


class AllLinksQuery(_Model):
    alllinks: Sequence[AllLinksEntry]


class AllPagesQuery(_Model):
    allpages: Sequence[AllPagesEntry]


class ExtractsQuery(_Model):
    pages: Mapping[str, ExtractPage]
    normalized: Sequence[Normalized] | None = None


class RevisionsQuery(_Model):
    pages: Mapping[str, RevisionsPage]
    normalized: Sequence[Normalized] | None = None


# responses

PageResponse = WikiResponse[PageQuery]
SearchResponse = WikiResponse[SearchQuery]
PageInfoResponse = WikiResponse[PageInfoQuery]
CategoriesResponse = WikiResponse[CategoriesQuery]
LinksResponse = WikiResponse[LinksQuery]
BacklinksResponse = WikiResponse[BacklinksQuery]
PageImagesResponse = WikiResponse[PageImagesQuery]
ImageInfoResponse = WikiResponse[ImageInfoQuery]
SearchImagesResponse = WikiResponse[SearchImagesQuery]
FileUsageResponse = WikiResponse[FileUsageQuery]
GlobalUsageResponse = WikiResponse[GlobalUsageQuery]
AllLinksResponse = WikiResponse[AllLinksQuery]
AllPagesResponse = WikiResponse[AllPagesQuery]
ExtractsResponse = WikiResponse[ExtractsQuery]
RevisionsResponse = WikiResponse[RevisionsQuery]


class PageViewsResponse(_Model):
    """Pageview REST response; it has no Action API envelope."""

    items: Sequence[PageView]


_R = TypeVar("_R", bound=BaseModel)


def decode(operation: str, model: type[_R], data: object) -> _R:
    """Validate a decoded JSON body against the response model of ``operation``.

    Raises :class:`APIError` when the body is the API's error envelope and
    :class:`ResponseDecodeError` when it does not match ``model``.
    """

    if isinstance(data, Mapping) and isinstance(error := data.get("error"), Mapping):
        raise APIError(str(error.get("code", "")), str(error.get("info", "")))
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ResponseDecodeError.from_validation_error(operation, exc) from exc
