"""Tests for the resource cache."""

import pytest

from dom_snapshot.core.cache import ResourceCache


def test_namespaces_are_independent():
    cache = ResourceCache()
    cache.set("image", "a.png", "data:image/png;base64,AAA")
    
    assert cache.has("image", "a.png")
    assert not cache.has("background", "a.png")
    assert cache.get("background", "a.png") is None
    assert cache.image.get("a.png") == "data:image/png;base64,AAA"


def test_set_overwrites_value():
    cache = ResourceCache()
    cache.base_style.set("div,span", "div{}")
    cache.base_style.set("div,span", "span{}")
    
    assert cache.get("base_style", "div,span") == "span{}"
    assert len(cache.base_style) == 1


def test_reset_all_clears_every_namespace():
    cache = ResourceCache()
    cache.image.set("a", "1")
    cache.background.set("b", "2")
    cache.base_style.set("c", "3")
    cache.font.set("d", "4")
    
    cache.reset_all()
    
    assert cache.stats() == {"image": 0, "background": 0, "base_style": 0, "font": 0}


def test_unknown_namespace_is_rejected():
    cache = ResourceCache()
    with pytest.raises(KeyError):
        cache.set("scripts", "a", "b")
