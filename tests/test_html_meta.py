from __future__ import annotations

from core.html_meta import PageMetadata, absolute_url
from core.models import FetchResponse

PAGE = """
<html>
  <head>
    <title> Kyoto Guide </title>
    <meta property="og:image" content="https://cdn.example.com/og.jpg">
    <meta name="twitter:image" content="https://cdn.example.com/tw.jpg">
    <meta property="og:title" content="Fushimi Inari">
  </head>
  <body>
    <img src="/static/a.png">
    <img src="">
    <img alt="no source">
    <img src="//cdn.example.com/b.png">
  </body>
</html>
"""


def test_reads_og_and_twitter_images() -> None:
    metadata = PageMetadata(PAGE)
    assert metadata.og_image == "https://cdn.example.com/og.jpg"
    assert metadata.twitter_image == "https://cdn.example.com/tw.jpg"


def test_meta_matches_property_or_name() -> None:
    metadata = PageMetadata('<meta name="og:image" content="a.jpg"><meta property="twitter:image" content="b.jpg">')
    assert metadata.og_image == "a.jpg"
    assert metadata.twitter_image == "b.jpg"


def test_empty_content_counts_as_absent() -> None:
    metadata = PageMetadata('<meta property="og:image" content="  "><meta property="og:image" content="real.jpg">')
    assert metadata.og_image == "real.jpg"
    assert PageMetadata('<meta property="og:image" content="">').og_image is None


def test_preview_label_fallback_order() -> None:
    assert PageMetadata('<meta property="og:site_name" content="Site"><title>T</title>').preview_label("h") == "Site"
    assert PageMetadata(PAGE).preview_label("example.com") == "Fushimi Inari"
    assert PageMetadata("<title> Only Title </title>").preview_label("example.com") == "Only Title"
    assert PageMetadata("<p>nothing</p>").preview_label("example.com") == "example.com"
    assert PageMetadata("").preview_label(None) == ""


def test_image_sources_skip_empty() -> None:
    assert PageMetadata(PAGE).image_sources() == ["/static/a.png", "//cdn.example.com/b.png"]


def test_absolute_url_resolution() -> None:
    base = "https://example.com/dir/page.html"
    assert absolute_url("https://other.example.com/x.png", base) == "https://other.example.com/x.png"
    assert absolute_url("//cdn.example.com/a.png", base) == "https://cdn.example.com/a.png"
    assert absolute_url("/c.png", base) == "https://example.com/c.png"
    assert absolute_url("img/b.png", base) == "https://example.com/dir/img/b.png"


def test_bytes_are_decoded_with_declared_meta_charset() -> None:
    html = '<html><head><meta charset="shift_jis"><title>伏見稲荷大社</title></head></html>'
    assert PageMetadata(html.encode("shift_jis")).title == "伏見稲荷大社"


def test_bytes_are_decoded_with_http_charset() -> None:
    body = "<title>嵐山</title>".encode("euc_jp")
    response = FetchResponse(status=200, headers={"content-type": 'text/html; charset="EUC-JP"'}, body=body, final_url="")

    assert response.charset == "euc-jp"
    assert response.text() == "<title>嵐山</title>"
    assert PageMetadata(response.body, response.charset).title == "嵐山"


def test_missing_charset() -> None:
    response = FetchResponse(status=200, headers={"Content-Type": "text/html"}, body=b"<p>x</p>", final_url="")
    assert response.charset is None
    assert response.text() == "<p>x</p>"
