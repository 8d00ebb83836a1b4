import pytest

from tests.helpers.mirror_imports import (
    LinkKind,
    LinkParseError,
    url_to_local_link,
    url_to_output_path,
    url_to_resource_path,
)

ORIGIN = "x.com"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://x.com/", "index.html"),
        ("https://x.com", "index.html"),
        ("https://x.com/docs", "docs/index.html"),
        ("https://x.com/docs/", "docs/index.html"),
        ("https://x.com/a.png", "a.png"),
        ("https://x.com/guide/intro.html", "guide/intro.html"),
        ("https://x.com/docs?tab=2#top", "docs/index.html"),
        ("https://x.com/my%20page", "my page/index.html"),
        ("https://x.com/../../etc/passwd", "etc/passwd/index.html"),
    ],
)
def test_url_to_output_path(url, expected):
    assert url_to_output_path(url) == expected


def test_url_to_resource_path():
    assert url_to_resource_path("https://x.com/img/a.png?v=3") == "img/a.png"
    assert url_to_resource_path("https://x.com/css/") == "css/index.html"
    assert url_to_resource_path("https://x.com/") is None


def test_anchor_links_point_at_page_files():
    assert url_to_local_link("https://x.com/docs", ORIGIN, LinkKind.ANCHOR) == "./docs/index.html"
    assert url_to_local_link("https://x.com/", ORIGIN, LinkKind.ANCHOR) == "./index.html"


def test_resource_links_keep_their_path():
    assert url_to_local_link("https://x.com/img/a.png", ORIGIN, LinkKind.RESOURCE) == "./img/a.png"
    assert url_to_local_link("https://x.com/", ORIGIN, LinkKind.RESOURCE) == "./"


def test_query_and_fragment_are_preserved():
    link = url_to_local_link("https://x.com/docs?tab=api#auth", ORIGIN, LinkKind.ANCHOR)
    assert link == "./docs/index.html?tab=api#auth"

    asset = url_to_local_link("https://x.com/app.css?v=12", ORIGIN, LinkKind.RESOURCE)
    assert asset == "./app.css?v=12"


def test_relative_values_resolve_against_base():
    link = url_to_local_link(
        "../pricing",
        ORIGIN,
        LinkKind.ANCHOR,
        base_url="https://x.com/docs/intro",
    )
    assert link == "./pricing/index.html"


def test_links_are_relative_to_the_current_page():
    link = url_to_local_link(
        "https://x.com/img/a.png",
        ORIGIN,
        LinkKind.RESOURCE,
        from_path="about/index.html",
    )
    assert link == "../img/a.png"

    home = url_to_local_link("https://x.com/", ORIGIN, LinkKind.ANCHOR, from_path="about/index.html")
    assert home == "../index.html"


def test_protocol_relative_urls_follow_the_page_scheme():
    same = url_to_local_link("//x.com/logo.svg", ORIGIN, LinkKind.RESOURCE, base_url="https://x.com/")
    other = url_to_local_link("//cdn.other.com/lib.js", ORIGIN, LinkKind.RESOURCE, base_url="https://x.com/")

    assert same == "./logo.svg"
    assert other is None


@pytest.mark.parametrize(
    "value",
    [
        "https://other.com/docs",
        "javascript:void(0)",
        "mailto:team@x.com",
        "tel:+15551234",
        "data:image/png;base64,iVBORw0KGgo=",
        "#section",
        "",
        None,
    ],
)
def test_untouched_values(value):
    assert url_to_local_link(value, ORIGIN, LinkKind.ANCHOR, base_url="https://x.com/") is None


def test_malformed_url_raises_link_parse_error():
    with pytest.raises(LinkParseError):
        url_to_local_link("http://[::1/broken", ORIGIN, LinkKind.ANCHOR)


def test_special_characters_are_encoded():
    link = url_to_local_link("https://x.com/files/a%20b.pdf", ORIGIN, LinkKind.RESOURCE)
    assert link == "./files/a%20b.pdf"
