"""Tests for the command line interface using local HTML files."""

import pytest

from dom_snapshot.main import main, parse_arguments, validate_url


def test_parse_arguments_defaults():
    args = parse_arguments(["--file", "page.html"])
    
    assert args.selector == "body"
    assert args.output == "snapshot.svg"
    assert args.exclude == []
    assert args.timeout == 5000


def test_source_is_required():
    with pytest.raises(SystemExit):
        parse_arguments([])


def test_validate_url():
    assert validate_url("example.com/page") == "https://example.com/page"
    assert validate_url("http://example.com") == "http://example.com"


@pytest.mark.asyncio
async def test_capture_from_file(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(
        '<html><body><div class="card" style="width:120px;height:80px;color:red">'
        '<p>Hello</p><span class="ad">ad</span></div></body></html>',
        encoding="utf-8",
    )
    output = tmp_path / "out" / "card.svg"
    
    code = await main([
        "--file", str(page),
        "--selector", ".card",
        "--exclude", ".ad",
        "--output", str(output),
        "--quiet",
    ])
    
    assert code == 0
    svg = output.read_text(encoding="utf-8")
    assert 'width="120" height="80"' in svg
    assert "Hello" in svg
    assert ">ad<" not in svg


@pytest.mark.asyncio
async def test_unknown_selector_fails(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<html><body><p>x</p></body></html>", encoding="utf-8")
    
    code = await main(["--file", str(page), "--selector", "#nope", "--quiet"])
    
    assert code == 1
