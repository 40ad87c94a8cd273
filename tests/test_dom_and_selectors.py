"""Document adapters and selector configuration"""
import json
import logging

from music_bar import selectors
from music_bar.dom import HtmlDocument, Location, parse_inline_style
from music_bar.selectors import BUNDLED_SELECTORS_FILE, SelectorConfig, load_selector_config


def test_location_from_url():
    loc = Location.from_url("https://music.youtube.com/watch?v=abc")
    assert loc.host == "music.youtube.com"
    assert loc.href == "https://music.youtube.com/watch?v=abc"
    assert Location.from_url(None).host == ""


def test_parse_inline_style_keeps_data_urls_intact():
    style = "color: red; background-image: url(data:image/png;base64,AAAA); WIDTH: 10px"
    parsed = parse_inline_style(style)
    assert parsed["background-image"] == "url(data:image/png;base64,AAAA)"
    assert parsed["color"] == "red"
    assert parsed["width"] == "10px"
    assert parse_inline_style(None) == {}


def test_html_element_properties():
    doc = HtmlDocument('<img class="cover big" src="a/b.png" srcset="x 1x">', "https://site.example/p/")
    el = doc.query_selector("img")
    assert el.tag_name == "IMG"
    assert el.current_src is None
    assert el.src == "https://site.example/p/a/b.png"
    assert el.get_attribute("class") == "cover big"
    assert el.get_attribute("missing") is None
    assert doc.query_selector("video") is None


def test_computed_style_reflects_inline_declarations():
    doc = HtmlDocument('<div style="background-image: url(x.png)"></div>', "https://a.example/")
    el = doc.query_selector("div")
    assert el.computed_style("background-image") == "url(x.png)"
    assert el.inline_style("Background-Image") == "url(x.png)"


def test_bundled_selector_config():
    selector_config = load_selector_config(str(BUNDLED_SELECTORS_FILE))
    assert selector_config.version >= 1
    assert selector_config.meta[0] == 'meta[property="og:image"]'

    site, found = selector_config.for_host("music.youtube.com")
    assert site.name == "youtube_music" and found

    site, found = selector_config.for_host("www.youtube.com")
    assert site.name == "youtube" and found == []

    site, found = selector_config.for_host("open.spotify.com")
    assert site.name == "spotify"

    site, found = selector_config.for_host("unknown.example")
    assert site is None and found == selector_config.generic


def test_custom_selector_file(tmp_path):
    path = tmp_path / "selectors.json"
    path.write_text(json.dumps({
        "version": 7,
        "sites": [{"name": "radio", "host": "radio.example", "selectors": [".now img"]}],
        "generic": [],
        "meta": ["meta[property=\"og:image\"]"],
    }))
    selector_config = load_selector_config(str(path))
    assert selector_config.version == 7
    assert selector_config.for_host("radio.example")[1] == [".now img"]
    # Memoized per path
    assert load_selector_config(str(path)) is selector_config


def test_broken_override_falls_back_to_bundled(tmp_path, caplog):
    path = tmp_path / "broken.json"
    path.write_text("{ not json")
    with caplog.at_level(logging.WARNING):
        selector_config = load_selector_config(str(path))
    assert selector_config is load_selector_config(str(BUNDLED_SELECTORS_FILE))
    assert "using bundled selectors" in caplog.text
    assert str(path) not in selectors._cache


def test_from_dict_defaults():
    selector_config = SelectorConfig.from_dict({"sites": [{"host": "a.example"}]})
    assert selector_config.version == 1
    assert selector_config.sites[0].name == "a.example"
    assert selector_config.sites[0].meta_only is False
    assert selector_config.for_host("") == (None, [])
