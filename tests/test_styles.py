"""Tests for style access, base CSS and clone preparation."""

import pytest
from bs4 import BeautifulSoup

from dom_snapshot.core.cache import ResourceCache
from dom_snapshot.core.context import CaptureOptions
from dom_snapshot.dom.clone import prepare_clone, release_clone
from dom_snapshot.dom.css import COMMON_TAGS, generate_deduped_base_css, precache_common_tags
from dom_snapshot.dom.styles import (
    collect_used_tag_names,
    get_style,
    measure,
    parse_style,
    set_style_property,
    split_background_image,
)
from dom_snapshot.utils.constants import SANDBOX_ID


def soup(html):
    return BeautifulSoup(html, "html.parser")


class TestStyles:
    """Test inline style parsing and access"""
    
    def test_parse_style_keeps_semicolons_in_urls(self):
        style = 'color: Red; background-image: url("data:image/png;base64,AA"); ;bad'
        
        assert parse_style(style) == {
            "color": "Red",
            "background-image": 'url("data:image/png;base64,AA")',
        }
    
    def test_set_style_property_keeps_other_declarations(self):
        tag = soup('<div style="color:red;width:1px"></div>').div
        
        set_style_property(tag, "Width", "2px")
        
        assert tag["style"] == "color:red;width:2px"
    
    def test_stamped_background_overrides_inline(self):
        tag = soup(
            '<div style="background-image:url(a.png)" '
            'data-snapshot-bg="url(&quot;https://x.test/a.png&quot;)"></div>'
        ).div
        
        assert get_style(tag)["background-image"] == 'url("https://x.test/a.png")'
    
    def test_split_background_image(self):
        value = 'url("a,b.png"), linear-gradient(rgba(0, 0, 0, 0.5), red),url(c.png)'
        
        assert split_background_image(value) == [
            'url("a,b.png")',
            "linear-gradient(rgba(0, 0, 0, 0.5), red)",
            "url(c.png)",
        ]
        assert split_background_image("") == []
    
    def test_collect_used_tag_names_includes_root(self):
        root = soup("<section><p><span>a</span></p><p></p></section>").section
        assert collect_used_tag_names(root) == ["p", "section", "span"]
    
    @pytest.mark.parametrize("html,expected", [
        ('<div data-snapshot-width="120.5" data-snapshot-height="40" style="width:10px"></div>', (120.5, 40.0)),
        ('<div style="width: 200px; height:100px" width="5"></div>', (200.0, 100.0)),
        ('<img width="30" height="20">', (30.0, 20.0)),
        ('<div style="width:50%"></div>', (0.0, 0.0)),
    ])
    def test_measure(self, html, expected):
        tag = soup(html).find(True)
        assert measure(tag) == expected


class TestBaseCss:
    """Test base CSS generation"""
    
    def test_identical_defaults_share_a_rule(self):
        css = generate_deduped_base_css(["section", "div", "span", "unknown"])
        
        assert css == "div,section{display:block}span{display:inline}"
    
    def test_precache_common_tags(self):
        cache = ResourceCache()
        
        precache_common_tags(cache)
        
        assert len(cache.base_style) == len(COMMON_TAGS)
        assert cache.base_style.get("div") == "div{display:block}"


class TestPrepareClone:
    """Test clone preparation"""
    
    def test_styles_move_to_generated_classes(self, card_document):
        card = card_document.find(id="card")
        
        prepared = prepare_clone(card, CaptureOptions())
        
        clone = prepared.clone
        assert clone is not card
        assert "style" not in clone.attrs
        assert clone["class"] == ["ds0"]
        assert prepared.class_css == ".ds0{width:200px;height:100px;color:red}"
        # Background images are inlined later, never via classes
        assert "background-image" not in prepared.class_css
        assert len(prepared.pairs) == 3
        # The original tree is untouched
        assert card["style"] == "width:200px;height:100px;color:red"
    
    def test_clone_is_staged_in_sandbox(self, card_document):
        card = card_document.find(id="card")
        
        prepared = prepare_clone(card, CaptureOptions())
        
        sandbox = card_document.find(id=SANDBOX_ID)
        assert sandbox is not None
        assert prepared.sandbox is sandbox
        assert prepared.clone.parent is sandbox
        
        assert release_clone(prepared) is True
        assert card_document.find(id=SANDBOX_ID) is None
        assert release_clone(prepared) is False
        assert release_clone(None) is False
    
    def test_shared_container_outlives_other_clones(self, card_document):
        card = card_document.find(id="card")
        first = prepare_clone(card, CaptureOptions())
        second = prepare_clone(card.find(class_="bg"), CaptureOptions())
        assert first.sandbox is second.sandbox
        
        assert release_clone(first) is False
        
        # The other clone is still staged and usable
        assert second.clone.parent is second.sandbox
        assert second.clone.name == "div"
        assert card_document.find(id=SANDBOX_ID) is not None
        
        assert release_clone(second) is True
        assert card_document.find(id=SANDBOX_ID) is None
    
    def test_exclude_and_filter_prune_subtrees(self, card_document):
        card = card_document.find(id="card")
        options = CaptureOptions(
            exclude=[".bg"],
            filter=lambda tag: tag.name != "img",
        )
        
        prepared = prepare_clone(card, options)
        
        assert prepared.clone.find("img") is None
        assert prepared.clone.find(class_="bg") is None
        assert [original.name for original, _ in prepared.pairs] == ["div"]
    
    def test_root_is_never_excluded(self, card_document):
        card = card_document.find(id="card")
        
        prepared = prepare_clone(card, CaptureOptions(exclude=["#card"]))
        
        assert prepared.clone.name == "div"
    
    def test_compress_shares_identical_classes(self):
        document = soup(
            '<body><ul><li style="color:red">a</li><li style="color:red" class="x">b</li>'
            '<li style="color:blue">c</li></ul></body>'
        )
        
        shared = prepare_clone(document.ul, CaptureOptions())
        items = shared.clone.find_all("li")
        assert [item["class"] for item in items] == [["ds0"], ["x", "ds0"], ["ds1"]]
        assert shared.class_css == ".ds0{color:red}.ds1{color:blue}"
        
        separate = prepare_clone(document.ul, CaptureOptions(compress=False))
        items = separate.clone.find_all("li")
        assert [item["class"][-1] for item in items] == ["ds0", "ds1", "ds2"]
    
    def test_stamped_attributes_are_stripped(self):
        document = soup('<body><div data-snapshot-width="10" data-snapshot-height="5" data-x="1"></div></body>')
        
        prepared = prepare_clone(document.div, CaptureOptions())
        
        assert prepared.clone.attrs == {"data-x": "1"}
