"""
Markdown rendering and Article construction.

The renderer is Python-Markdown with the extensions that give tables,
footnotes, description lists, strikethrough and bare-URL autolinks. Raw HTML
in the source passes through untouched.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, Tuple

from directives import extract
from errors import DocumentEncodingError, PathError
from page_tree import Article


# -- markdown conversion --
try:
    import markdown  # type: ignore
except ImportError as exc:  # minimal helpful error
    raise SystemExit(
        "Missing dependency: markdown. Install with 'pip install markdown pymdown-extensions'"
    ) from exc


MARKDOWN_EXTENSIONS: Tuple[str, ...] = (
    "extra",  # tables, footnotes, def_list, fenced_code
    "pymdownx.tilde",
    "pymdownx.magiclink",
)
MARKDOWN_EXTENSION_CONFIGS: Dict[str, Dict[str, object]] = {
    "pymdownx.tilde": {"subscript": False},
}

FRONT_MATTER_DELIMITER = "---"
DEFAULT_REDIRECT_PREFIX = "https://href.li/?"
MARKDOWN_SUFFIX = ".md"
FRONT_MATTER_PATTERN = re.compile(
    r"\A" + re.escape(FRONT_MATTER_DELIMITER) + r"[ \t]*\r?\n.*?^" + re.escape(FRONT_MATTER_DELIMITER) + r"[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def strip_front_matter(md_text: str) -> str:
    """Drop a leading block fenced by ``---`` lines; the rest is returned as-is."""
    return FRONT_MATTER_PATTERN.sub("", md_text, count=1)


class MarkdownRenderer:
    """Deterministic markdown -> HTML conversion with a fixed extension set."""

    def __init__(self):
        self._md = markdown.Markdown(
            extensions=list(MARKDOWN_EXTENSIONS),
            extension_configs=MARKDOWN_EXTENSION_CONFIGS,
        )

    def render(self, md_text: str) -> str:
        # reset clears footnotes and other per-document state
        self._md.reset()
        return self._md.convert(strip_front_matter(md_text))


def route_outbound_links(html_text: str, redirect_prefix: str = DEFAULT_REDIRECT_PREFIX) -> str:
    """Send absolute http(s) links through the redirector; in-page and relative links stay."""
    return html_text.replace('href="http', f'href="{redirect_prefix}http')


# -- article construction --
def article_url(source_root: Path, source_file: Path, base_directory: str) -> str:
    """Site-relative url of ``source_file``: its path under the source root, without ``.md``.

    Raises PathError when the file does not live directly under ``base_directory``.
    """
    try:
        relative = source_file.relative_to(source_root).relative_to(base_directory)
    except ValueError as exc:
        raise PathError(f"{source_file} is not under {source_root / base_directory}") from exc

    url = (Path(base_directory) / relative).as_posix()
    if not url.endswith(MARKDOWN_SUFFIX):
        raise PathError(f"{source_file} is not a markdown document")
    return url[: -len(MARKDOWN_SUFFIX)]


def filesystem_timestamps(stat_result: os.stat_result) -> Tuple[int, int]:
    """(created_at, modified_at) in whole epoch seconds.

    Creation time is st_birthtime where the platform records it, else st_ctime.
    """
    created = getattr(stat_result, "st_birthtime", stat_result.st_ctime)
    return int(created), int(stat_result.st_mtime)


def read_document(source_file: Path) -> str:
    data = source_file.read_bytes()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentEncodingError(f"{source_file} is not valid UTF-8: {exc}") from exc


def build_article(
    source_root: Path,
    source_file: Path,
    base_directory: str,
    stat_result: os.stat_result,
    renderer: MarkdownRenderer,
    redirect_prefix: str = DEFAULT_REDIRECT_PREFIX,
) -> Article:
    """Render one markdown file into an Article. Nothing is written to disk."""
    url = article_url(source_root, source_file, base_directory)
    md_text = read_document(source_file)

    fs_created_at, fs_modified_at = filesystem_timestamps(stat_result)
    meta = extract(md_text, source_file.name[: -len(MARKDOWN_SUFFIX)], fs_created_at, fs_modified_at)

    body = route_outbound_links(renderer.render(md_text), redirect_prefix)
    return Article(
        url=url,
        title=meta.title,
        body=body,
        created_at=meta.created_at,
        modified_at=meta.modified_at,
        tags=meta.tags,
    )
