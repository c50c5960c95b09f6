"""Tests for the query-string builders and option validation.

Covers the exact parameter mappings of every operation, the sort-mode and
section-format rules, list and flag serialization, option bounds and the
pageview URL.
"""

import string
from datetime import date
from urllib.parse import unquote

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pywikimedia.errors import OptionsValidationError
from pywikimedia.options import (
    AllLinksOptions,
    AllPagesOptions,
    BacklinksOptions,
    ExtractOptions,
    ImageSearchOptions,
    PageViewsOptions,
    RevisionOptions,
    SearchOptions,
    validate_options,
)
from pywikimedia.params import (
    all_links_params,
    all_pages_params,
    backlinks_params,
    categories_params,
    extracts_params,
    file_usage_params,
    global_usage_params,
    image_info_params,
    join_titles,
    links_params,
    page_images_params,
    page_info_params,
    page_params,
    pageviews_url,
    revisions_params,
    search_images_params,
    search_params,
)

__all__ = ()

_BASE = {"action": "query", "format": "json"}
_DEFAULT_IMAGE_PROPS = "timestamp|user|size|url|mime|mediatype|bitdepth"
_PAGEVIEWS = (
    "https://wikimedia.org/api/rest_v1/metrics/pageviews/per-article/en.wikipedia"
)


def test_search_params_exact() -> None:
    """`search("TypeScript", 5)` sends exactly the documented parameters."""
    assert search_params("TypeScript", SearchOptions(limit=5)) == {
        **_BASE,
        "list": "search",
        "srsearch": "TypeScript",
        "srlimit": 5,
    }


def test_search_params_default_limit_and_extras() -> None:
    """The limit defaults to 10; offset and namespace are only sent when set."""
    assert search_params("x", SearchOptions())["srlimit"] == 10
    params = search_params("x", SearchOptions(offset=20, namespace=0))
    assert params["sroffset"] == 20
    assert params["srnamespace"] == 0


@pytest.mark.parametrize(
    "builder,prop",
    [
        (page_info_params, "info"),
        (categories_params, "categories"),
        (links_params, "links"),
        (page_images_params, "images"),
        (file_usage_params, "fileusage"),
        (global_usage_params, "globalusage"),
    ],
)
def test_single_title_prop_params(builder, prop: str) -> None:
    """Title-based `prop=` operations only send the title and discriminator."""
    assert builder("File:Artificial_neural_network.svg") == {
        **_BASE,
        "prop": prop,
        "titles": "File:Artificial_neural_network.svg",
    }


def test_page_params() -> None:
    """Page content is requested through the main revision slot."""
    assert page_params("JavaScript") == {
        **_BASE,
        "prop": "revisions",
        "titles": "JavaScript",
        "rvslots": "*",
        "rvprop": "content",
    }


def test_backlinks_params() -> None:
    """Backlinks use the `bl` prefix and the given limit."""
    assert backlinks_params("TypeScript", BacklinksOptions(limit=10)) == {
        **_BASE,
        "list": "backlinks",
        "bltitle": "TypeScript",
        "bllimit": 10,
    }
    params = backlinks_params(
        "TypeScript", BacklinksOptions(namespace=0, filter_redirects="nonredirects")
    )
    assert params["blnamespace"] == 0
    assert params["blfilterredir"] == "nonredirects"


def test_image_info_params_joins_titles_in_order() -> None:
    """Multiple titles are pipe-joined in input order."""
    assert image_info_params(["File:A.jpg", "File:B.jpg"]) == {
        **_BASE,
        "prop": "imageinfo",
        "titles": "File:A.jpg|File:B.jpg",
        "iiprop": _DEFAULT_IMAGE_PROPS,
    }


def test_search_images_defaults() -> None:
    """Without options only the query and default properties are sent."""
    assert search_images_params("neural network", ImageSearchOptions()) == {
        **_BASE,
        "list": "allimages",
        "aisearch": "neural network",
        "aiprop": _DEFAULT_IMAGE_PROPS,
    }


def test_search_images_empty_query_is_omitted() -> None:
    """An empty query does not send `aisearch`."""
    assert "aisearch" not in search_images_params("", ImageSearchOptions())


def test_search_images_timestamp_mode_drops_name_range() -> None:
    """Timestamp sort keeps the timestamp group and drops `aifrom`/`aito`."""
    options = ImageSearchOptions.model_validate(
        {
            "sort": "timestamp",
            "from": "A",
            "to": "B",
            "start": "2024-01-01",
            "end": "2024-01-31",
            "user": "TestUser",
            "filter_bots": "nobots",
        }
    )
    params = search_images_params("test", options)
    assert params["aisort"] == "timestamp"
    assert params["aistart"] == "2024-01-01"
    assert params["aiend"] == "2024-01-31"
    assert params["aiuser"] == "TestUser"
    assert params["aifilterbots"] == "nobots"
    assert "aifrom" not in params
    assert "aito" not in params


@pytest.mark.parametrize("sort", ["name", None])
def test_search_images_name_mode_drops_timestamp_range(sort: str | None) -> None:
    """Name sort, explicit or default, keeps only `aifrom`/`aito`."""
    options = ImageSearchOptions(
        sort=sort,
        from_="A",
        to="B",
        start="2024-01-01",
        end="2024-01-31",
        user="TestUser",
        filter_bots="nobots",
    )
    params = search_images_params("test", options)
    assert params["aifrom"] == "A"
    assert params["aito"] == "B"
    for key in ("aistart", "aiend", "aiuser", "aifilterbots"):
        assert key not in params
    assert ("aisort" in params) is (sort is not None)


def test_search_images_custom_options() -> None:
    """Direction, sizes, hash, limit and properties map to their keys."""
    options = ImageSearchOptions(
        sort="timestamp",
        direction="descending",
        min_size=1000,
        max_size=5000,
        sha1="abc123",
        limit=10,
        properties=["timestamp", "user"],
    )
    params = search_images_params("test", options)
    assert params["aidir"] == "descending"
    assert params["aiminsize"] == 1000
    assert params["aimaxsize"] == 5000
    assert params["aisha1"] == "abc123"
    assert params["ailimit"] == 10
    assert params["aiprop"] == "timestamp|user"


def test_all_links_defaults() -> None:
    """`alprop` defaults to `title`."""
    assert all_links_params(AllLinksOptions()) == {
        **_BASE,
        "list": "alllinks",
        "alprop": "title",
    }


def test_all_links_custom_options() -> None:
    """Every option maps to its `al` key; `unique` is an empty-string flag."""
    options = AllLinksOptions.model_validate(
        {
            "from": "A",
            "to": "B",
            "prefix": "Test",
            "unique": True,
            "properties": ["ids", "title"],
            "namespace": 0,
            "limit": 100,
            "direction": "descending",
        }
    )
    assert all_links_params(options) == {
        **_BASE,
        "list": "alllinks",
        "alfrom": "A",
        "alto": "B",
        "alprefix": "Test",
        "alunique": "",
        "alprop": "ids|title",
        "alnamespace": 0,
        "allimit": 100,
        "aldir": "descending",
    }


def test_all_links_empty_properties_and_false_flag() -> None:
    """An empty list is sent as an empty string; a false flag is omitted."""
    params = all_links_params(AllLinksOptions(properties=[], unique=False))
    assert params["alprop"] == ""
    assert "alunique" not in params


def test_all_pages_custom_options() -> None:
    """Every option maps to its `ap` key with lists pipe-joined."""
    options = AllPagesOptions(
        from_="A",
        to="B",
        prefix="Test",
        namespace=0,
        filter_redirects="redirects",
        filter_lang_links="withlanglinks",
        min_size=1000,
        max_size=5000,
        protection_type=["edit", "move"],
        protection_level=["sysop"],
        protection_cascade="cascading",
        protection_expiry="indefinite",
        limit=100,
        direction="descending",
    )
    assert all_pages_params(options) == {
        **_BASE,
        "list": "allpages",
        "apfrom": "A",
        "apto": "B",
        "apprefix": "Test",
        "apnamespace": 0,
        "apfilterredir": "redirects",
        "apfilterlanglinks": "withlanglinks",
        "apminsize": 1000,
        "apmaxsize": 5000,
        "apprtype": "edit|move",
        "apprlevel": "sysop",
        "apprfiltercascade": "cascading",
        "apprexpiry": "indefinite",
        "aplimit": 100,
        "apdir": "descending",
    }


def test_all_pages_empty_and_unset_protection_lists() -> None:
    """Empty protection lists are sent as empty strings, unset ones omitted."""
    assert all_pages_params(AllPagesOptions()) == {**_BASE, "list": "allpages"}
    params = all_pages_params(AllPagesOptions(protection_type=[], protection_level=[]))
    assert params["apprtype"] == ""
    assert params["apprlevel"] == ""


def test_extracts_defaults() -> None:
    """Without options only the titles are sent."""
    assert extracts_params("JavaScript", ExtractOptions()) == {
        **_BASE,
        "prop": "extracts",
        "titles": "JavaScript",
    }


def test_extracts_custom_options_single_section_wins() -> None:
    """`single_section` forces `exsectionformat=raw` over `section_format`."""
    options = ExtractOptions(
        plain_text=True,
        section_format="wiki",
        sentences=5,
        chars=1000,
        limit=10,
        intro_only=True,
        single_section=True,
    )
    assert extracts_params(["JavaScript", "TypeScript"], options) == {
        **_BASE,
        "prop": "extracts",
        "titles": "JavaScript|TypeScript",
        "explaintext": "",
        "exsentences": 5,
        "exchars": 1000,
        "exlimit": 10,
        "exintro": "",
        "exsectionformat": "raw",
    }


@pytest.mark.parametrize("section_format", ["plain", "wiki", None])
def test_extracts_single_section_always_raw(section_format: str | None) -> None:
    """The raw section format holds whatever section format is supplied."""
    options = ExtractOptions(single_section=True, section_format=section_format)
    assert extracts_params("Test", options)["exsectionformat"] == "raw"


def test_extracts_section_format_without_single_section() -> None:
    """Without `single_section` the given section format is sent."""
    options = ExtractOptions(section_format="wiki", plain_text=False)
    params = extracts_params("Test", options)
    assert params["exsectionformat"] == "wiki"
    assert "explaintext" not in params


def test_revisions_params() -> None:
    """Revisions default their properties and add slots for content."""
    assert revisions_params("Python", RevisionOptions()) == {
        **_BASE,
        "prop": "revisions",
        "titles": "Python",
        "rvprop": "ids|timestamp|flags|comment|user|size",
    }
    options = RevisionOptions(
        limit=5,
        direction="newer",
        exclude_user="Bot",
        tag="mw-undo",
        properties=["ids", "content"],
    )
    params = revisions_params("Python", options)
    assert params["rvprop"] == "ids|content"
    assert params["rvslots"] == "*"
    assert params["rvlimit"] == 5
    assert params["rvdir"] == "newer"
    assert params["rvexcludeuser"] == "Bot"
    assert params["rvtag"] == "mw-undo"


@pytest.mark.parametrize("titles", ["", []])
def test_join_titles_rejects_empty(titles: str | list[str]) -> None:
    """At least one title is required."""
    with pytest.raises(OptionsValidationError) as info:
        join_titles(titles)
    assert info.value.fields == ("titles",)


def test_extracts_rejects_empty_titles() -> None:
    """An empty title list fails before any parameters are built."""
    with pytest.raises(OptionsValidationError):
        extracts_params([], ExtractOptions())


@given(
    st.lists(
        st.text(alphabet=string.ascii_letters + string.digits + " :_()", min_size=1),
        min_size=1,
        max_size=10,
    )
)
def test_join_titles_preserves_order_property(titles: list[str]) -> None:
    """Property test: joined titles split back into the input order."""
    assert join_titles(titles).split("|") == titles


@pytest.mark.parametrize(
    "model,options,field",
    [
        (ImageSearchOptions, {"limit": 501}, "limit"),
        (ImageSearchOptions, {"limit": 0}, "limit"),
        (ImageSearchOptions, {"sort": "invalid"}, "sort"),
        (ImageSearchOptions, {"min_size": 0}, "min_size"),
        (AllLinksOptions, {"namespace": -3}, "namespace"),
        (AllLinksOptions, {"properties": ["ids", "bogus"]}, "properties.1"),
        (AllPagesOptions, {"namespace": -1}, "namespace"),
        (AllPagesOptions, {"protection_level": ["admin"]}, "protection_level.0"),
        (ExtractOptions, {"sentences": 11}, "sentences"),
        (ExtractOptions, {"sentences": 0}, "sentences"),
        (ExtractOptions, {"chars": -1}, "chars"),
        (ExtractOptions, {"limit": 21}, "limit"),
        (ExtractOptions, {"section_format": "invalid"}, "section_format"),
        (ExtractOptions, {"limit": "5"}, "limit"),
        (ExtractOptions, {"limit": 5.0}, "limit"),
        (ExtractOptions, {"plain_text": "yes"}, "plain_text"),
        (AllLinksOptions, {"unique": 1}, "unique"),
        (RevisionOptions, {"unknown": 1}, "unknown"),
        (SearchOptions, {"limit": 501}, "limit"),
        (PageViewsOptions, {"start": "2024-01-01"}, "start"),
        (PageViewsOptions, {"agent": "robot"}, "agent"),
    ],
)
def test_validate_options_names_offending_field(
    model: type, options: dict[str, object], field: str
) -> None:
    """Invalid options raise a validation error naming the field."""
    with pytest.raises(OptionsValidationError) as info:
        validate_options(model, options)
    assert field in info.value.fields


def test_validate_options_defaults_and_passthrough() -> None:
    """`None` yields defaults and model instances pass through unchanged."""
    assert validate_options(PageViewsOptions, None) == PageViewsOptions()
    options = ExtractOptions(limit=20)
    assert validate_options(ExtractOptions, options) is options


def test_pageviews_url_defaults_to_last_30_days() -> None:
    """Without dates the 30 days ending today are requested."""
    url = pageviews_url("Python", PageViewsOptions(), today=date(2024, 3, 31))
    assert url == (
        f"{_PAGEVIEWS}/all-access/all-agents/Python/daily/20240301/20240331"
    )


def test_pageviews_url_explicit_options_and_escaping() -> None:
    """Explicit options fill the path and `! ' ( ) *` are percent-encoded."""
    options = PageViewsOptions(
        start="20240101",
        end="20240131",
        granularity="monthly",
        access="desktop",
        agent="user",
    )
    url = pageviews_url("Rock 'n' Roll (film)!*", options)
    assert url == (
        f"{_PAGEVIEWS}/desktop/user/Rock%20%27n%27%20Roll%20%28film%29%21%2A"
        "/monthly/20240101/20240131"
    )


@given(st.text(min_size=1, max_size=40))
def test_pageviews_title_segment_property(title: str) -> None:
    """Property test: the title segment is fully escaped and reversible."""
    url = pageviews_url(
        title, PageViewsOptions(start="20240101", end="20240131"), base="https://x"
    )
    segment = url.split("/")[5]
    assert not set("!'()* /") & set(segment)
    assert unquote(segment) == title
