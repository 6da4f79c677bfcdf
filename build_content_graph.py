#!/usr/bin/env python3
"""
Build a JSON content graph from a folder of annotated markdown documents.

Features:
- Every .md file becomes <dest>/<path>.json with rendered HTML, metadata and
  prev/next links to its chronological neighbours
- Every directory becomes <dest>/<path>/index.json listing its articles
  (newest first) and the index.json of each subdirectory
- Title, tags and timestamps can be set inside a document with ssg- directives
- Optional single-page HTML shell embedding the root index

Usage:
  python build_content_graph.py ./content ./site
  python build_content_graph.py ./content ./site --clean --index-template assets/template_index.html

Notes:
- Requires the "markdown" and "pymdown-extensions" packages
"""

from __future__ import annotations

import argparse
import json
import shutil
from pathlib import Path
from typing import List, Optional

from articles import DEFAULT_REDIRECT_PREFIX
from errors import SsgError
from site_graph import DEFAULT_MAX_DEPTH, INDEX_FILE_NAME, BuildConfig, BuildSummary, SiteGraphBuilder


DATA_PLACEHOLDER = "{{ data }}"


# -- index shell --
def write_index_html(dest_root: Path, template_file: Path) -> Path:
    """Fill the template's data placeholder with the root index document."""
    template = template_file.read_text(encoding="utf-8")
    index_data = json.loads((dest_root / INDEX_FILE_NAME).read_text(encoding="utf-8"))
    out_path = dest_root / "index.html"
    out_path.write_text(template.replace(DATA_PLACEHOLDER, json.dumps(index_data, ensure_ascii=False)), encoding="utf-8")
    return out_path


def is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


# -- CLI --
def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a JSON content graph from a markdown folder.")
    parser.add_argument("source", type=Path, help="Folder of markdown documents")
    parser.add_argument("dest", type=Path, help="Output folder for the JSON artifacts")
    parser.add_argument(
        "--redirect-prefix",
        type=str,
        default=DEFAULT_REDIRECT_PREFIX,
        help=f"Prefix for outbound http(s) links (default: {DEFAULT_REDIRECT_PREFIX})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum directory nesting below the source folder (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Remove the output folder before building",
    )
    parser.add_argument(
        "--index-template",
        type=Path,
        default=None,
        help="Optional HTML file whose {{ data }} placeholder receives the root index, written to <dest>/index.html",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print each processed document")
    return parser.parse_args(argv)


def run(config: BuildConfig, clean: bool = False, index_template: Optional[Path] = None) -> BuildSummary:
    """Build the whole graph; raises SsgError or OSError on the first failure."""
    # prepare output directory
    if clean and config.dest_root.exists():
        shutil.rmtree(config.dest_root)
    config.dest_root.mkdir(parents=True, exist_ok=True)

    summary = SiteGraphBuilder(config).build()

    if index_template is not None:
        write_index_html(config.dest_root, index_template)
    return summary


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    source_root: Path = args.source.expanduser().resolve()
    dest_root: Path = args.dest.expanduser().resolve()

    if not source_root.is_dir():
        raise SystemExit(f"Input directory not found: {source_root}")
    if is_within(dest_root, source_root):
        raise SystemExit(f"Output directory must not be inside the input directory: {dest_root}")
    if is_within(source_root, dest_root):
        raise SystemExit(f"Input directory must not be inside the output directory: {source_root}")

    config = BuildConfig(
        source_root=source_root,
        dest_root=dest_root,
        redirect_prefix=args.redirect_prefix,
        max_depth=args.max_depth,
        verbose=args.verbose,
    )
    try:
        summary = run(config, clean=args.clean, index_template=args.index_template)
    except (SsgError, OSError) as exc:
        raise SystemExit(f"Build failed: {exc}") from exc

    print(
        f"Content graph generated at: {dest_root} "
        f"({summary.articles_written} articles, {summary.indexes_written} indexes)"
    )


if __name__ == "__main__":
    main()
