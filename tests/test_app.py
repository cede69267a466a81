"""Bot handlers driven with mocked Telegram updates."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import cv2
import numpy as np
import pytest

from app import BotApp, parse_count
from config import Settings
from domain.enums import ImageSource


def make_update(chat_id=1):
    update = MagicMock()
    update.effective_chat.id = chat_id
    update.message.reply_text = AsyncMock()
    update.message.reply_html = AsyncMock()
    update.message.reply_photo = AsyncMock()
    return update


def make_context(*args):
    context = MagicMock()
    context.args = list(args)
    return context


def last_text(update):
    return update.message.reply_text.call_args.args[0]


@pytest.fixture
def bot(tmp_path):
    settings = Settings(bot_token="123:abc", db_url=f"sqlite:///{tmp_path / 'bot.db'}")
    app = BotApp(settings)
    yield app
    app.pool.shutdown(wait=True)


@pytest.mark.parametrize("args,expected", [
    ([], 6), (["4"], 4), (["x"], 6), (["0"], 6), (["-2"], 6), (["20"], 20), (["25"], 20), (["100000000"], 20),
])
def test_parse_count(args, expected):
    assert parse_count(args, 6, 20) == expected


def test_extract_without_image(bot):
    update = make_update()
    asyncio.run(bot.extract(update, make_context()))
    assert "No image source" in last_text(update)


def test_sample_then_extract(bot):
    update = make_update()
    asyncio.run(bot.sample(update, make_context()))
    assert bot.sessions.get(1).preview_source == ImageSource.sample

    asyncio.run(bot.extract(update, make_context("4")))
    sess = bot.sessions.get(1)
    assert len(sess.swatches) == 4
    assert sess.swatches[0] == "#F0F0F0"
    assert not sess.busy
    update.message.reply_photo.assert_awaited_once()
    assert last_text(update).startswith("Found 4 colors")


def test_extract_refuses_while_busy(bot):
    update = make_update()
    asyncio.run(bot.sample(update, make_context()))
    assert bot.sessions.begin(1)
    asyncio.run(bot.extract(update, make_context()))
    assert "already running" in last_text(update)
    update.message.reply_photo.assert_not_awaited()


def test_curate_save_list_delete(bot):
    update = make_update()
    bot.sessions.get(1).swatches = ["#F0F0F0", "#7838E8"]

    asyncio.run(bot.add(update, make_context("2", "#fff", "9", "zz")))
    text = last_text(update)
    assert "Added #7838E8" in text and "No swatch 9" in text and "Not a color: zz" in text
    assert bot.sessions.get(1).active.hexes == ["#7838E8", "#FFFFFF"]

    asyncio.run(bot.copy(update, make_context()))
    assert '"#7838E8"' in last_text(update)

    asyncio.run(bot.save(update, make_context("My", "palette")))
    assert last_text(update) == "Palette saved: My palette"

    asyncio.run(bot.palettes(update, make_context()))
    assert last_text(update) == "1. My palette: #7838E8 #FFFFFF"

    asyncio.run(bot.delete(update, make_context("1")))
    assert last_text(update) == "No saved palettes"


def test_saved_palettes_are_per_chat(bot):
    first, second = make_update(1), make_update(2)
    bot.sessions.get(1).active.add("#000")
    asyncio.run(bot.save(first, make_context()))
    asyncio.run(bot.palettes(second, make_context()))
    assert last_text(second) == "No saved palettes"


def test_active_palette_limit(bot):
    update = make_update()
    hexes = [f"#{i}{i}{i}" for i in range(9)]
    asyncio.run(bot.add(update, make_context(*hexes)))
    assert "Max 8 colors" in last_text(update)
    assert len(bot.sessions.get(1).active) == 8


def test_save_empty(bot):
    update = make_update()
    asyncio.run(bot.save(update, make_context()))
    assert last_text(update) == "No colors to save"


def test_contrast(bot):
    update = make_update()
    asyncio.run(bot.contrast(update, make_context("#000000", "#FFFFFF")))
    assert last_text(update) == "#000000 vs #FFFFFF: 21.00:1 (AAA)"
    asyncio.run(bot.contrast(update, make_context("#XYZ123", "#FFFFFF")))
    assert "not a valid hex color" in last_text(update)
    asyncio.run(bot.contrast(update, make_context("#000")))
    assert last_text(update).startswith("Usage")


def test_extract_caps_count_so_swatches_stay_sendable(bot):
    update = make_update()
    asyncio.run(bot.sample(update, make_context()))
    asyncio.run(bot.extract(update, make_context("100000000")))
    assert len(bot.sessions.get(1).swatches) == bot.settings.max_count
    assert last_text(update).startswith(f"Found {bot.settings.max_count} colors")
    png = update.message.reply_photo.call_args.kwargs["photo"]
    h, w = cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_COLOR).shape[:2]
    assert w / h <= 20


def test_download_failure_is_reported(bot):
    from telegram.error import NetworkError

    update = make_update()
    update.message.photo = [MagicMock(file_id="abc")]
    context = make_context()
    context.bot.get_file = AsyncMock(side_effect=NetworkError("connection reset"))
    asyncio.run(bot.on_image(update, context))
    assert last_text(update) == "Failed to load image"
    assert bot.sessions.get(1).preview is None
