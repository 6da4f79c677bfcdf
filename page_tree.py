"""
Page tree: the article record, the two node variants and their canonical order.

A PageNode is either an IndexPage (one source directory) or an ArticlePage
(one rendered document). Consumers match on the variant with isinstance and
treat anything else as a programming error.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Tuple, Union


# -- data structures --
@dataclass(frozen=True)
class Article:
    """One rendered markdown document."""

    url: str
    title: str
    body: str
    created_at: int
    modified_at: int
    tags: Tuple[str, ...] = ()

    def to_json(self) -> dict:
        return {
            "url": self.url,
            "title": self.title,
            "body": self.body,
            "created_at": self.created_at,
            "modified_at": self.modified_at,
            "tags": list(self.tags),
        }

    def summary(self) -> dict:
        """Index listing entry: everything but the body and tags."""
        return {
            "created_at": self.created_at,
            "modified_at": self.modified_at,
            "title": self.title,
            "path": self.url,
        }


@dataclass(frozen=True)
class IndexPage:
    """A source directory and its canonically sorted children."""

    path: str
    children: Tuple["PageNode", ...] = ()


@dataclass(frozen=True)
class ArticlePage:
    """A leaf node wrapping one Article; path equals the article url."""

    path: str
    article: Article


PageNode = Union[IndexPage, ArticlePage]


# -- ordering --
def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _unknown(node: object) -> TypeError:
    return TypeError(f"not a page node: {node!r}")


def compare_nodes(left: PageNode, right: PageNode) -> int:
    """Three-way comparison of two sibling nodes.

    - index vs index: by path
    - article vs index (different paths): article first
    - article vs article: by created_at, then by path
    - article and index sharing a path compare equal
    """
    if isinstance(left, IndexPage):
        if isinstance(right, IndexPage):
            return _cmp(left.path, right.path)
        if isinstance(right, ArticlePage):
            return 0 if left.path == right.path else 1
        raise _unknown(right)

    if isinstance(left, ArticlePage):
        if isinstance(right, IndexPage):
            return 0 if left.path == right.path else -1
        if isinstance(right, ArticlePage):
            by_time = _cmp(left.article.created_at, right.article.created_at)
            return by_time or _cmp(left.path, right.path)
        raise _unknown(right)

    raise _unknown(left)


def sort_nodes(nodes: Iterable[PageNode]) -> List[PageNode]:
    """Return nodes in canonical (ascending) order."""
    return sorted(nodes, key=cmp_to_key(compare_nodes))


def display_order(index: IndexPage) -> List[PageNode]:
    """Children newest / lexicographically last first."""
    return list(reversed(index.children))


def partition(nodes: Iterable[PageNode]) -> Tuple[List[ArticlePage], List[IndexPage]]:
    """Split nodes into (articles, indexes), keeping their relative order."""
    articles: List[ArticlePage] = []
    indexes: List[IndexPage] = []
    for node in nodes:
        if isinstance(node, ArticlePage):
            articles.append(node)
        elif isinstance(node, IndexPage):
            indexes.append(node)
        else:
            raise _unknown(node)
    return articles, indexes
