"""Editor glue: building records from an editor and image intake."""

from __future__ import annotations

import base64
import html as html_lib
import mimetypes
from pathlib import Path
from typing import Protocol

from blogsync.content.helpers import derive_excerpt, generate_id, now_ms, strip_markup
from blogsync.content.models import ContentRecord


class EditorWidget(Protocol):
    """The rich-text editor as seen by the persistence layer."""

    def get_html(self) -> str: ...

    def get_plain_text(self) -> str: ...

    def insert_image(self, data_url: str, at_cursor: bool = True) -> None: ...


class HtmlDocument:
    """EditorWidget over a static HTML string, for non-interactive use."""

    def __init__(self, html: str = "") -> None:
        self.html = html

    def get_html(self) -> str:
        return self.html

    def get_plain_text(self) -> str:
        return html_lib.unescape(strip_markup(self.html))

    def insert_image(self, data_url: str, at_cursor: bool = True) -> None:
        tag = f'<p><img src="{data_url}"></p>'
        self.html = self.html + tag if at_cursor else tag + self.html


def gather_record(
    editor: EditorWidget,
    title: str,
    cover: str = "",
    current_id: str | None = None,
    now: int | None = None,
) -> ContentRecord:
    """Build a ContentRecord from the editor's current state.

    Reuses ``current_id`` when editing an existing draft. Both timestamps
    are set to ``now``; SyncOrchestrator.save restores the stored
    ``createdAt`` when the id was saved before.
    """
    stamp = now_ms() if now is None else now
    return ContentRecord(
        id=current_id or generate_id(stamp),
        title=(title or "").strip(),
        content=editor.get_html(),
        cover=cover,
        excerpt=derive_excerpt(editor.get_plain_text()),
        created_at=stamp,
        updated_at=stamp,
    )


def bytes_to_data_url(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def file_to_data_url(path: Path) -> str:
    """Read an image file into a base64 data URL."""
    path = Path(path)
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return bytes_to_data_url(path.read_bytes(), mime)


def insert_image_file(editor: EditorWidget, path: Path) -> str:
    """Embed an image file at the editor cursor and return its data URL."""
    data_url = file_to_data_url(path)
    editor.insert_image(data_url, at_cursor=True)
    return data_url
