"""Tests for URL helpers."""

from dom_snapshot.utils.urls import (
    ANONYMOUS,
    USE_CREDENTIALS,
    extract_url,
    get_cross_origin_mode,
    is_svg_url,
    resolve_url,
    safe_encode_uri,
    svg_to_data_url,
)


def test_cross_origin_mode():
    base = "https://app.test/page.html"
    assert get_cross_origin_mode("https://app.test/a.png", base) == USE_CREDENTIALS
    assert get_cross_origin_mode("/a.png", base) == USE_CREDENTIALS
    assert get_cross_origin_mode("https://cdn.test/a.png", base) == ANONYMOUS
    assert get_cross_origin_mode("http://app.test/a.png", base) == ANONYMOUS
    assert get_cross_origin_mode("https://app.test/a.png", None) == ANONYMOUS


def test_resolve_url():
    assert resolve_url("img/a.png", "https://app.test/x/page") == "https://app.test/x/img/a.png"
    assert resolve_url("//cdn.test/a.png", "http://app.test/") == "http://cdn.test/a.png"
    assert resolve_url("data:image/png;base64,AA", "https://app.test/") == "data:image/png;base64,AA"


def test_extract_url_variants():
    assert extract_url('url("a.png")') == "a.png"
    assert extract_url("url('a b.png')") == "a b.png"
    assert extract_url("url( a.png )") == "a.png"
    assert extract_url("linear-gradient(red, blue)") is None
    assert extract_url("none") is None


def test_safe_encode_uri_keeps_existing_escapes():
    assert safe_encode_uri("https://cdn.test/my bg.png") == "https://cdn.test/my%20bg.png"
    assert safe_encode_uri("https://cdn.test/my%20bg.png") == "https://cdn.test/my%20bg.png"
    assert safe_encode_uri("https://cdn.test/a.png?x=1&y=2") == "https://cdn.test/a.png?x=1&y=2"


def test_is_svg_url_tolerates_query_strings():
    assert is_svg_url("https://cdn.test/icon.svg")
    assert is_svg_url("https://cdn.test/icon.SVG?v=2")
    assert not is_svg_url("https://cdn.test/icon.svg.png")


def test_svg_to_data_url_percent_encodes():
    assert svg_to_data_url('<svg a="1"/>') == (
        "data:image/svg+xml;charset=utf-8,%3Csvg%20a%3D%221%22%2F%3E"
    )
