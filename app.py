# app.py

import asyncio
import io
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.request import HTTPXRequest

from config import Settings
from domain import messages
from domain.active_palette import PaletteFullError
from domain.enums import ImageSource
from services.color_quantizer import ColorQuantizer
from services.contrast import contrast_ratio
from services.image_sampler import ImageSampler
from services.image_utils import (
    AcquisitionError,
    bytes_to_cv2,
    load_image_from_url,
    render_swatches,
    sample_image,
)
from services.palette_repository import PaletteRepository
from services.sessions import ChatSession, SessionStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("app")


def parse_count(args: List[str], default: int, maximum: int) -> int:
    """First argument as a color count, capped at maximum; falls back to default like an empty form field."""
    if not args:
        return default
    try:
        n = int(args[0])
    except ValueError:
        return default
    return min(n, maximum) if n > 0 else default


class BotApp:
    """Composition root. Wires services and Telegram handlers."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.repo = PaletteRepository(settings.db_url, settings.palette_namespace, settings.max_saved)
        self.quantizer = ColorQuantizer(sampler=ImageSampler(max_dim=settings.max_dim))
        self.sessions = SessionStore(max_active=settings.max_active)
        self.pool = ThreadPoolExecutor(max_workers=min(4, os.cpu_count() or 2))

    def repo_for(self, chat_id: int) -> PaletteRepository:
        return self.repo.with_namespace(f"{self.settings.palette_namespace}:{chat_id}")

    def session(self, update: Update) -> ChatSession:
        return self.sessions.get(update.effective_chat.id)

    def help_text(self) -> str:
        return messages.HELP.format(count=self.settings.default_count, max_count=self.settings.max_count,
                                   limit=self.settings.max_active)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_html(
            "<b>Hi!</b> Send me a picture and I will pull its main colors out.\n\n" + self.help_text()
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(self.help_text())

    # --- image acquisition -------------------------------------------------

    async def on_image(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if not message:
            return
        if message.photo:
            file_id = message.photo[-1].file_id
        elif message.document:
            file_id = message.document.file_id
        else:
            return
        try:
            file = await context.bot.get_file(file_id)
            bio = io.BytesIO()
            await file.download_to_memory(out=bio)
            img = await asyncio.get_running_loop().run_in_executor(self.pool, bytes_to_cv2, bio.getvalue())
        except (AcquisitionError, TelegramError):
            log.exception("Image load failed")
            await message.reply_text(messages.load_failed(ImageSource.file))
            return
        self._set_preview(update, img, ImageSource.file)
        await message.reply_text(messages.loaded(ImageSource.file))

    async def url(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not context.args:
            await update.message.reply_text("Enter an image URL: /url <link>")
            return
        try:
            img = await load_image_from_url(context.args[0], timeout=self.settings.fetch_timeout)
        except AcquisitionError:
            log.exception("URL load failed")
            await update.message.reply_text(messages.load_failed(ImageSource.url))
            return
        self._set_preview(update, img, ImageSource.url)
        await update.message.reply_text(messages.loaded(ImageSource.url))

    async def sample(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        self._set_preview(update, sample_image(), ImageSource.sample)
        await update.message.reply_text(messages.loaded(ImageSource.sample))

    def _set_preview(self, update: Update, img, source: ImageSource) -> None:
        sess = self.session(update)
        sess.preview = img
        sess.preview_source = source

    # --- extraction --------------------------------------------------------

    async def extract(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        chat_id = update.effective_chat.id
        sess = self.sessions.get(chat_id)
        if sess.preview is None:
            await message.reply_text("No image source available. Send a photo, /url or /sample first.")
            return
        if not self.sessions.begin(chat_id):
            await message.reply_text("Extraction already running, please wait.")
            return
        try:
            count = parse_count(context.args or [], self.settings.default_count, self.settings.max_count)
            await message.reply_text("Extracting colors...")
            loop = asyncio.get_running_loop()
            colors = await loop.run_in_executor(
                self.pool, self.quantizer.extract_colors, sess.preview, count, self.settings.sample_step
            )
            sess.swatches = colors
            if colors:
                png = await loop.run_in_executor(self.pool, render_swatches, colors)
                await message.reply_photo(photo=png)
            await message.reply_text(messages.extraction_summary(colors))
        finally:
            self.sessions.end(chat_id)

    async def clear_swatches(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        self.session(update).swatches = []
        await update.message.reply_text("Swatches cleared")

    # --- active palette ----------------------------------------------------

    def _resolve(self, sess: ChatSession, arg: str) -> Optional[str]:
        # 1-2 digits point at a swatch, anything else is taken as a hex color
        if arg.isdigit() and len(arg) <= 2:
            idx = int(arg) - 1
            return sess.swatches[idx] if 0 <= idx < len(sess.swatches) else None
        return arg

    async def add(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        sess = self.session(update)
        if not context.args:
            await update.message.reply_text("Usage: /add <hex or swatch number> ...")
            return
        replies = []
        for arg in context.args:
            hx = self._resolve(sess, arg)
            if hx is None:
                replies.append(f"No swatch {arg}")
                continue
            try:
                added = sess.active.add(hx)
            except PaletteFullError as e:
                replies.append(str(e))
                break
            except ValueError:
                replies.append(f"Not a color: {arg}")
                continue
            if added:
                replies.append(f"Added {sess.active.hexes[-1]}")
        replies.append(self._active_line(sess))
        await update.message.reply_text("\n".join(replies))

    async def remove(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        sess = self.session(update)
        for arg in context.args or []:
            try:
                sess.active.remove(arg)
            except ValueError:
                await update.message.reply_text(f"Not a color: {arg}")
                return
        await update.message.reply_text(self._active_line(sess))

    async def active(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(self._active_line(self.session(update)))

    @staticmethod
    def _active_line(sess: ChatSession) -> str:
        if not len(sess.active):
            return "Active palette is empty"
        return "Active palette: " + " ".join(sess.active.hexes)

    async def copy(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        sess = self.session(update)
        if not len(sess.active):
            await update.message.reply_text("Active palette is empty")
            return
        await update.message.reply_text(sess.active.to_json())

    # --- saved palettes ----------------------------------------------------

    async def save(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        sess = self.session(update)
        if not len(sess.active):
            await update.message.reply_text("No colors to save")
            return
        palette = sess.active.to_palette(" ".join(context.args or []))
        if self.repo_for(update.effective_chat.id).add(palette):
            await update.message.reply_text(f"Palette saved: {palette.name}")
        else:
            await update.message.reply_text("Could not save palette, storage unavailable")

    async def palettes(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        saved = self.repo_for(update.effective_chat.id).load()
        await update.message.reply_text(messages.saved_list(saved))

    async def delete(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        args = context.args or []
        if not args or not args[0].isdigit():
            await update.message.reply_text("Usage: /delete <number from /palettes>")
            return
        repo = self.repo_for(update.effective_chat.id)
        if not repo.delete_at(int(args[0]) - 1):
            await update.message.reply_text(f"No palette {args[0]}")
            return
        await update.message.reply_text(messages.saved_list(repo.load()))

    async def clear_all(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if self.repo_for(update.effective_chat.id).clear():
            await update.message.reply_text("Saved palettes cleared")
        else:
            await update.message.reply_text("Could not clear palettes, storage unavailable")

    # --- contrast ----------------------------------------------------------

    async def contrast(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        args = context.args or []
        if len(args) != 2:
            await update.message.reply_text("Usage: /contrast <hex> <hex>")
            return
        a, b = args
        await update.message.reply_text(messages.contrast_summary(a, b, contrast_ratio(a, b)))

    def build_application(self) -> Application:
        request = HTTPXRequest(
            connect_timeout=20.0,
            read_timeout=40.0,
            write_timeout=20.0,
            pool_timeout=10.0,
            connection_pool_size=8,
        )

        app = (
            Application.builder()
            .token(self.settings.bot_token)
            .request(request)
            .concurrent_updates(True)
            .build()
        )
        app.add_handler(CommandHandler("start", self.start))
        app.add_handler(CommandHandler("help", self.help))
        app.add_handler(CommandHandler("url", self.url))
        app.add_handler(CommandHandler("sample", self.sample))
        app.add_handler(CommandHandler("extract", self.extract))
        app.add_handler(CommandHandler("clearswatches", self.clear_swatches))
        app.add_handler(CommandHandler("add", self.add))
        app.add_handler(CommandHandler("remove", self.remove))
        app.add_handler(CommandHandler("active", self.active))
        app.add_handler(CommandHandler("copy", self.copy))
        app.add_handler(CommandHandler("save", self.save))
        app.add_handler(CommandHandler("palettes", self.palettes))
        app.add_handler(CommandHandler("delete", self.delete))
        app.add_handler(CommandHandler("clearall", self.clear_all))
        app.add_handler(CommandHandler("contrast", self.contrast))
        app.add_handler(MessageHandler(filters.PHOTO | filters.Document.IMAGE, self.on_image))
        return app


def main() -> None:
    settings = Settings()
    bot = BotApp(settings)
    app = bot.build_application()
    log.info("Bot started")
    app.run_polling(close_loop=False)


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
