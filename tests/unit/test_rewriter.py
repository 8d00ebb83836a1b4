import logging

from site_mirror.mirror.rewriter import LinkRewriter, css_references, rewrite_css_text  # type: ignore[import]

from tests.helpers.mirror_imports import SoupDocument

PAGE_URL = "https://example.test/"


def _rewrite(html: str, *, page_url: str = PAGE_URL, collect: bool = False, page_path=None):
    document = SoupDocument(html)
    rewriter = LinkRewriter(origin_host="example.test", collect_resources=collect)
    resources = rewriter.rewrite(document, page_url, page_path=page_path)
    return document, resources


def test_same_origin_attributes_are_rewritten():
    document, _ = _rewrite(
        """
        <html><head>
          <link rel="stylesheet" href="/css/site.css?v=2">
          <script src="https://example.test/js/app.js"></script>
        </head><body>
          <a id="docs" href="/docs">Docs</a>
          <img id="logo" src="img/logo.png">
        </body></html>
        """
    )

    assert document.select("#docs")[0]["href"] == "./docs/index.html"
    assert document.select("#logo")[0]["src"] == "./img/logo.png"
    assert document.select("link")[0]["href"] == "./css/site.css?v=2"
    assert document.select("script")[0]["src"] == "./js/app.js"


def test_foreign_and_special_values_are_left_alone():
    html = """
    <body>
      <a class="keep" href="https://other.test/">Other</a>
      <a class="keep" href="javascript:void(0)">JS</a>
      <a class="keep" href="mailto:team@example.test">Mail</a>
      <a class="keep" href="tel:+15551234">Call</a>
      <a class="keep" href="#top">Top</a>
      <img class="keep" src="data:image/gif;base64,R0lGODlhAQABAAAAACw=">
      <script class="keep" src="https://cdn.other.test/lib.js"></script>
    </body>
    """
    original = SoupDocument(html)
    document, _ = _rewrite(html)

    before = [tag.get("href") or tag.get("src") for tag in original.select(".keep")]
    after = [tag.get("href") or tag.get("src") for tag in document.select(".keep")]
    assert after == before


def test_inline_styles_and_imports_are_rewritten():
    document, _ = _rewrite(
        """
        <html><head><style>
        @import "/css/base.css";
        body { background: url(/img/a.png); }
        .hero { background-image: url("https://other.test/bg.jpg"); }
        </style></head>
        <body><div id="banner" style="background: url('/img/banner.jpg') no-repeat"></div></body></html>
        """
    )

    css = document.get_text(document.select("style")[0])
    assert "@import './css/base.css'" in css
    assert "url('./img/a.png')" in css
    assert 'url("https://other.test/bg.jpg")' in css
    assert document.select("#banner")[0]["style"] == "background: url('./img/banner.jpg') no-repeat"


def test_base_element_is_removed_and_used_for_resolution():
    document, _ = _rewrite(
        """
        <html><head><base href="/docs/"></head>
        <body><a id="intro" href="intro">Intro</a></body></html>
        """
    )

    assert document.select("base") == []
    assert document.select("#intro")[0]["href"] == "./docs/intro/index.html"


def test_references_are_relative_to_nested_pages():
    document, _ = _rewrite(
        '<body><a id="home" href="/">Home</a><img id="img" src="/img/a.png"></body>',
        page_url="https://example.test/about",
        page_path="about/index.html",
    )

    assert document.select("#home")[0]["href"] == "../index.html"
    assert document.select("#img")[0]["src"] == "../img/a.png"


def test_resources_are_collected_only_when_enabled():
    html = """
    <html><head>
      <link rel="stylesheet" href="/css/site.css">
      <link rel="icon" href="/favicon.ico">
      <script src="https://cdn.other.test/lib.js"></script>
      <style>body { background: url(/img/a.png); }</style>
    </head><body>
      <img src="/img/a.png"><img src="data:image/gif;base64,R0lGOD=">
      <div style="background: url(/img/b.png)"></div>
    </body></html>
    """

    _, disabled = _rewrite(html)
    _, enabled = _rewrite(html, collect=True)

    assert disabled == []
    assert enabled == [
        "https://example.test/css/site.css",
        "https://cdn.other.test/lib.js",
        "https://example.test/img/a.png",
        "https://example.test/img/b.png",
    ]


def test_malformed_attribute_is_skipped_with_warning(caplog):
    with caplog.at_level(logging.WARNING):
        document, _ = _rewrite('<body><a id="bad" href="http://[::1/broken">x</a><a id="ok" href="/ok">ok</a></body>')

    assert document.select("#bad")[0]["href"] == "http://[::1/broken"
    assert document.select("#ok")[0]["href"] == "./ok/index.html"
    assert any("Skipping link" in record.getMessage() for record in caplog.records)


def test_css_helpers_handle_simple_forms_only():
    css = "a { background: url( '/x.png' ) } @import '/y.css'; b { background: url(\n/z.png) }"

    assert list(css_references(css)) == ["/x.png", "/y.css"]
    rewritten = rewrite_css_text(css, lambda value: "./mapped")
    assert "url('./mapped')" in rewritten
    assert "@import './mapped'" in rewritten
    assert "url(\n/z.png)" in rewritten
