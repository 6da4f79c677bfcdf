"""
Directory walk and per-directory aggregation.

SiteGraphBuilder mirrors the source tree into the destination:

- every ``.md`` file becomes ``<dest>/<url>.json`` (the article plus its
  chronological neighbours)
- every directory becomes ``<dest>/<dir>/index.json`` (article summaries and
  references to child indexes, newest / last first)

Directories are finished bottom-up, so a child's index.json always exists
before its parent's index.json refers to it.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from articles import DEFAULT_REDIRECT_PREFIX, MARKDOWN_SUFFIX, MarkdownRenderer, build_article
from errors import DepthLimitError, DocumentEncodingError
from page_tree import ArticlePage, IndexPage, PageNode, display_order, partition, sort_nodes


INDEX_FILE_NAME = "index.json"
DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class BuildConfig:
    source_root: Path
    dest_root: Path
    redirect_prefix: str = DEFAULT_REDIRECT_PREFIX
    max_depth: int = DEFAULT_MAX_DEPTH
    verbose: bool = False


@dataclass(frozen=True)
class BuildSummary:
    root: IndexPage
    articles_written: int
    indexes_written: int


# -- helpers: paths --
def join_relative(base: str, name: str) -> str:
    """Join POSIX-style relative paths; the root is the empty string."""
    return f"{base}/{name}" if base else name


def index_reference(path: str) -> str:
    """Location of a directory's index.json relative to the destination root."""
    return join_relative(path, INDEX_FILE_NAME)


def is_markdown_entry(entry: os.DirEntry) -> bool:
    return entry.name.endswith(MARKDOWN_SUFFIX) and entry.is_file(follow_symlinks=False)


def require_utf8_name(entry: os.DirEntry) -> str:
    """Return the entry name, or raise if the filesystem name is not valid UTF-8."""
    try:
        entry.name.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise DocumentEncodingError(f"{entry.path!r} has a name that is not valid UTF-8") from exc
    return entry.name


# -- artifacts --
class ArtifactWriter:
    """Persists article and index documents as JSON under the destination root."""

    def __init__(self, dest_root: Path):
        self.dest_root = dest_root
        self.articles_written = 0
        self.indexes_written = 0

    def ensure_directory(self, relative_dir: str) -> Path:
        target = self.dest_root / relative_dir
        target.mkdir(parents=True, exist_ok=True)
        return target

    def article_path(self, url: str) -> Path:
        return self.dest_root / f"{url}.json"

    def write_article(self, page: ArticlePage, prev_path: str, next_path: str) -> Path:
        out_path = self.article_path(page.article.url)
        self._write_json(out_path, {
            "article": page.article.to_json(),
            "prev_path": prev_path,
            "next_path": next_path,
        })
        self.articles_written += 1
        return out_path

    def write_index(self, relative_dir: str, articles: List[dict], indexes: List[str]) -> Path:
        out_path = self.dest_root / index_reference(relative_dir)
        self._write_json(out_path, {"articles": articles, "indexes": indexes})
        self.indexes_written += 1
        return out_path

    @staticmethod
    def _write_json(out_path: Path, document: dict) -> None:
        out_path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")


# -- aggregation --
def aggregate(index: IndexPage, writer: ArtifactWriter) -> IndexPage:
    """Write the artifacts for one directory whose children are already sorted.

    Articles are listed newest first. ``next_path`` points at the
    chronologically newer sibling and ``prev_path`` at the older one; a
    missing neighbour is the empty string. The node is returned unchanged.
    """
    articles, indexes = partition(display_order(index))

    for position, page in enumerate(articles):
        next_path = articles[position - 1].path if position > 0 else ""
        prev_path = articles[position + 1].path if position + 1 < len(articles) else ""
        writer.write_article(page, prev_path=prev_path, next_path=next_path)

    writer.write_index(
        index.path,
        articles=[page.article.summary() for page in articles],
        indexes=[index_reference(sub.path) for sub in indexes],
    )
    return index


# -- directory walk --
class SiteGraphBuilder:
    """Walks the source tree once, writing every artifact along the way."""

    def __init__(self, config: BuildConfig, renderer: Optional[MarkdownRenderer] = None):
        self.config = config
        self.renderer = renderer or MarkdownRenderer()
        self.writer = ArtifactWriter(config.dest_root)

    def build(self) -> BuildSummary:
        root = self.walk("")
        return BuildSummary(
            root=root,
            articles_written=self.writer.articles_written,
            indexes_written=self.writer.indexes_written,
        )

    def walk(self, current: str, depth: int = 0) -> IndexPage:
        """Build, sort and aggregate the IndexPage for ``current`` (relative to the source root)."""
        if depth > self.config.max_depth:
            raise DepthLimitError(f"{current!r} is nested deeper than {self.config.max_depth} directories")

        self.writer.ensure_directory(current)

        children: List[PageNode] = []
        with os.scandir(self.config.source_root / current) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                if is_markdown_entry(entry):
                    require_utf8_name(entry)
                    children.append(self.process_markdown_file(Path(entry.path), current, entry.stat()))
                elif entry.is_dir(follow_symlinks=False):
                    children.append(self.walk(join_relative(current, require_utf8_name(entry)), depth + 1))

        node = IndexPage(path=current, children=tuple(sort_nodes(children)))
        return aggregate(node, self.writer)

    def process_markdown_file(self, source_file: Path, base_directory: str, stat_result: os.stat_result) -> ArticlePage:
        article = build_article(
            self.config.source_root,
            source_file,
            base_directory,
            stat_result,
            self.renderer,
            redirect_prefix=self.config.redirect_prefix,
        )
        if self.config.verbose:
            print(f"Processing {source_file} -> {self.writer.article_path(article.url)}")
        return ArticlePage(path=article.url, article=article)
