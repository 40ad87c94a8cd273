"""Command line entry point"""
import asyncio
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

import music_bar_accent
from music_bar import registry
from music_bar.colors import normalize_accent, Color
from music_bar.engine import get_engine
from music_bar.page_host import PageSurface
from conftest import png_data_uri


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(music_bar_accent, "setup_logging", lambda **kwargs: None)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        music_bar_accent.build_parser().parse_args([])


def test_parser_watch_options():
    args = music_bar_accent.build_parser().parse_args(["watch", "https://x.example/", "--metadata", "m.json"])
    assert args.func is music_bar_accent.cmd_watch
    assert args.metadata == "m.json"


def test_version(capsys):
    with pytest.raises(SystemExit):
        music_bar_accent.main(["--version"])
    assert "0.5.0" in capsys.readouterr().out


def test_accent_command(capsys):
    assert music_bar_accent.main(["accent", png_data_uri((200, 40, 10, 255))]) == 0
    out = capsys.readouterr().out
    assert "sampled: #c8280a" in out
    assert f"accent:  {normalize_accent(Color(200, 40, 10)).to_hex()}" in out


def test_accent_command_without_color(capsys):
    assert music_bar_accent.main(["accent", png_data_uri((0, 0, 0, 0))]) == 1
    assert "(default)" in capsys.readouterr().out


def test_resolve_command(monkeypatch, capsys):
    response = MagicMock()
    response.text = '<html><body><img alt="Album cover" src="/art.jpg"></body></html>'
    response.url = "https://radio.example/now"
    get = MagicMock(return_value=response)
    monkeypatch.setattr(music_bar_accent.requests, "get", get)

    assert music_bar_accent.main(["resolve", "https://radio.example/now"]) == 0
    assert capsys.readouterr().out.strip() == "https://radio.example/art.jpg"


def test_resolve_command_fetch_error(monkeypatch):
    monkeypatch.setattr(
        music_bar_accent.requests, "get", MagicMock(side_effect=requests.ConnectionError("offline"))
    )
    assert music_bar_accent.cmd_resolve(SimpleNamespace(url="https://radio.example/")) == 1


def test_resolve_command_no_artwork(monkeypatch, capsys):
    response = MagicMock(text="<html></html>", url="https://radio.example/")
    monkeypatch.setattr(music_bar_accent.requests, "get", MagicMock(return_value=response))
    assert music_bar_accent.cmd_resolve(SimpleNamespace(url="https://radio.example/")) == 1
    assert "(no artwork)" in capsys.readouterr().out


async def test_watch_loop_tracks_page_and_cleans_up(monkeypatch, tmp_path):
    session = MagicMock()
    session.get.return_value.text = "<html><body><p>live</p></body></html>"
    session.get.return_value.url = "https://radio.example/live"
    surfaces = []

    def make_surface(url):
        surface = PageSurface(url, session=session, cache_ttl=0)
        surfaces.append(surface)
        return surface

    monkeypatch.setattr(music_bar_accent, "PageSurface", make_surface)
    metadata = tmp_path / "now_playing.json"
    metadata.write_text("{}")

    async def wait_for(predicate, timeout=3.0):
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            assert loop.time() < deadline, "condition not reached"
            await asyncio.sleep(0.02)

    task = asyncio.create_task(music_bar_accent._watch("https://radio.example/live", str(metadata)))
    await wait_for(lambda: get_engine() is not None and get_engine().binding.is_bound)

    engine = get_engine()
    controller = engine.binding.controller
    assert engine.binding.surface is surfaces[0]
    assert surfaces[0].content_document.location.host == "radio.example"
    assert registry.get_host() is not None

    # A metadata file change is picked up on the next loop iteration
    fired = []
    controller.add_event_listener("metadatachange", fired.append)
    stat = metadata.stat()
    os.utime(metadata, (stat.st_atime, stat.st_mtime + 5))
    await wait_for(lambda: fired)
    assert session.get.call_count >= 2

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert get_engine() is None
    assert registry.get_host() is None
    assert controller.listener_count("metadatachange") == 1
    session.close.assert_called_once()
