import logging
import os
import re
from enum import Enum
from pathlib import Path

import markdown

logger = logging.getLogger(__name__)

NAME_REQUIRED = "A name is required."
EXTENSION_REQUIRED = "File extension required."
UNSUPPORTED_EXTENSION = "Only .txt and .md are supported."
NAME_TAKEN = "Name must be unique."

_COPY_SUFFIX = re.compile(r"\((\d+)\)$")


class DocumentNotFound(Exception):

    def __init__(self, name: str):
        super().__init__(f"{name} does not exist.")
        self.name = name


def render_plain_text(text: str) -> tuple[str, str]:
    return text, "text/plain"


def render_markdown(text: str) -> tuple[str, str]:
    html = markdown.markdown(text, extensions=["fenced_code", "tables", "sane_lists"])
    return html, "text/html"


class DocumentKind(Enum):
    PLAIN_TEXT = ".txt"
    MARKDOWN = ".md"

    @classmethod
    def for_name(cls, name: str) -> "DocumentKind | None":
        ext = os.path.splitext(name)[1]
        for kind in cls:
            if kind.value == ext:
                return kind
        return None

    def render(self, text: str) -> tuple[str, str]:
        return _RENDERERS[self](text)


_RENDERERS = {
    DocumentKind.PLAIN_TEXT: render_plain_text,
    DocumentKind.MARKDOWN: render_markdown,
}

SUPPORTED_EXTENSIONS = tuple(kind.value for kind in DocumentKind)


def split_copy_suffix(stem: str) -> tuple[str, int]:
    """Split ``name(k)`` into ``("name", k + 1)``; plain stems start at 1."""
    m = _COPY_SUFFIX.search(stem)
    if m is None:
        return stem, 1
    return stem[:m.start()], int(m.group(1)) + 1


class DocumentStore:
    """Flat directory of text and markdown documents."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, name: str) -> Path | None:

        if not name or name in (".", "..") or "/" in name or "\\" in name:
            return None
        candidate = self.root / name
        try:
            candidate.resolve().relative_to(self.root.resolve())
        except (ValueError, OSError):
            return None
        return candidate

    def _existing_path(self, name: str) -> Path:
        fpath = self._path(name)
        if fpath is None or not fpath.is_file():
            raise DocumentNotFound(name)
        return fpath

    def list(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in os.scandir(self.root) if entry.is_file())

    def exists(self, name: str) -> bool:
        fpath = self._path(name)
        return fpath is not None and fpath.is_file()

    def taken(self, name: str) -> bool:
        fpath = self._path(name)
        return fpath is not None and fpath.exists()

    def read(self, name: str) -> str:
        return self._existing_path(name).read_text(encoding="utf-8", errors="replace")

    def write(self, name: str, content: str) -> None:
        fpath = self._path(name)
        if fpath is None:
            raise DocumentNotFound(name)
        self.root.mkdir(parents=True, exist_ok=True)
        fpath.write_text(content, encoding="utf-8")

    def delete(self, name: str) -> None:
        self._existing_path(name).unlink()
        logger.info(f"Deleted {name}")

    def render(self, name: str) -> tuple[str, str]:
        text = self.read(name)
        kind = DocumentKind.for_name(name) or DocumentKind.PLAIN_TEXT
        return kind.render(text)

    def validate_new_name(self, name: str) -> str | None:
        if not name:
            return NAME_REQUIRED
        ext = os.path.splitext(name)[1]
        if not ext:
            return EXTENSION_REQUIRED
        if ext not in SUPPORTED_EXTENSIONS:
            return UNSUPPORTED_EXTENSION
        if self._path(name) is None:
            return NAME_REQUIRED
        if self.taken(name):
            return NAME_TAKEN
        return None

    def create_new(self, name: str) -> str | None:
        """Create an empty document, or return the reason it was refused."""
        error = self.validate_new_name(name)
        if error is not None:
            return error
        self.write(name, "")
        logger.info(f"Created {name}")
        return None

    def next_copy_name(self, name: str) -> str:
        """First free ``root(n)ext`` name, counting up from the source's own suffix.

        Probing starts after the number already carried by ``name``, so
        copying ``history.txt`` tries ``history(1).txt`` first even when
        higher-numbered copies exist, and copying ``history(4).txt`` starts
        at ``history(5).txt``.
        """
        stem, ext = os.path.splitext(name)
        root, number = split_copy_suffix(stem)
        candidate = f"{root}({number}){ext}"
        while self.taken(candidate):
            number += 1
            candidate = f"{root}({number}){ext}"
        return candidate

    def duplicate(self, name: str) -> str:
        content = self.read(name)
        new_name = self.next_copy_name(name)
        self.write(new_name, content)
        logger.info(f"Duplicated {name} as {new_name}")
        return new_name
