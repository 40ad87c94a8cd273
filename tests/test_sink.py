"""Publication sinks"""
import logging

from music_bar.colors import Color
from music_bar.sink import LoggingSink, StyleRoot, StyleSink
from conftest import RecordingSink


def test_cover_variables():
    sink = StyleSink()
    sink.publish_cover('https://x/a "quoted".png')
    assert sink.root.get_property("--music-bar-cover-url") == 'url("https://x/a \\"quoted\\".png")'
    assert sink.root.get_property("--music-bar-cover-opacity") == "1"
    assert sink.root.get_attribute("music-bar-cover-active") == "true"


def test_cover_none_hides_cover():
    sink = StyleSink()
    sink.publish_cover("https://x/a.png")
    sink.publish_cover(None)
    assert sink.root.get_property("--music-bar-cover-url") is None
    assert sink.root.get_property("--music-bar-cover-opacity") == "0"
    assert sink.root.get_attribute("music-bar-cover-active") is None


def test_accent_variables():
    root = StyleRoot()
    sink = StyleSink(root)
    sink.publish_accent(Color(10.2, 20.7, 30))
    assert root.get_property("--music-bar-accent") == "rgb(10, 21, 30)"
    assert root.get_property("--music-bar-accent-dim") == "rgba(10, 21, 30, 0.35)"
    assert root.get_property("--music-bar-accent-glow") == "rgba(10, 21, 30, 0.6)"
    assert root.get_attribute("music-bar-accent-active") == "true"

    sink.publish_accent(None)
    assert root.style == {}
    assert root.attributes == {}


def test_clear_removes_everything():
    sink = StyleSink()
    sink.mark_running("0.5.0")
    assert sink.root.get_attribute("music-bar-script-running") == "0.5.0"
    sink.publish_cover("https://x/a.png")
    sink.publish_accent(Color(1, 2, 3))
    sink.clear()
    assert sink.root.style == {}
    assert sink.root.attributes == {}


def test_custom_variable_names():
    sink = StyleSink(names={"var_accent": "--accent"})
    sink.publish_accent(Color(0, 0, 0))
    assert sink.root.get_property("--accent") == "rgb(0, 0, 0)"


def test_logging_sink_forwards(caplog):
    inner = RecordingSink()
    sink = LoggingSink(inner)
    with caplog.at_level(logging.INFO):
        sink.publish_cover("https://x/a.png")
        sink.publish_accent(Color(255, 0, 0))
        sink.publish_accent(None)
    assert inner.events == [("cover", "https://x/a.png"), ("accent", Color(255, 0, 0)), ("accent", None)]
    assert "#ff0000" in caplog.text


def test_base_clear_publishes_nothing_visible():
    sink = RecordingSink()
    sink.clear()
    assert sink.events == [("cover", None), ("accent", None)]
