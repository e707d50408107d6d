"""Load lesson pages and their front-matter from a course directory."""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from importlib import resources
from pathlib import Path
from typing import Any

from .config import LintConfig, load_config
from .frontmatter import FrontMatterError, split_front_matter
from .graph import find_cycles
from .models import ERROR, Finding, Page, PageSource

logger = logging.getLogger("coursecheck")

BUNDLED_PACKAGE = "coursecheck"
BUNDLED_COURSE = ("content", "course")


def discover_pages(root: Path, config: LintConfig) -> list[Path]:
    """Return page files under a course root, sorted by path."""
    if not root.is_dir():
        raise FileNotFoundError(f"Course directory not found: {root}")
    found: list[Path] = []
    for path in sorted(root.glob(config.include)):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if any(fnmatch(relative.as_posix(), pattern) for pattern in config.exclude):
            logger.debug("Skipping excluded page %s", relative)
            continue
        found.append(path)
    logger.debug("Discovered %d page(s) under %s", len(found), root)
    return found


def read_source(path: Path, display_path: str) -> PageSource:
    """Parse one page file. Raises FrontMatterError for unusable files."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FrontMatterError(f"file is not valid UTF-8: {exc.reason}") from exc
    except OSError as exc:
        raise FrontMatterError(f"cannot read file: {exc.strerror or exc}") from exc
    meta, body = split_front_matter(text)
    return PageSource(path=display_path, meta=meta, body=body)


def load_sources_from_dir(root: Path | str, config: LintConfig) -> tuple[list[PageSource], list[Finding]]:
    """Parse every page under root, turning parse failures into findings."""
    root = Path(root)
    sources: list[PageSource] = []
    findings: list[Finding] = []
    for path in discover_pages(root, config):
        display = path.relative_to(root).as_posix()
        try:
            sources.append(read_source(path, display))
        except FrontMatterError as exc:
            findings.append(Finding(code="FM001", severity=ERROR, message=str(exc), path=display))
    return sources, findings


def page_from_source(source: PageSource, config: LintConfig) -> Page:
    """Build a page from parsed front-matter."""
    page_id = scalar_text(source.meta.get(config.id_field))
    if not page_id:
        raise ValueError(f"Page '{source.path}' has no '{config.id_field}'.")
    name = scalar_text(source.meta.get(config.name_field))
    if not name:
        raise ValueError(f"Page '{page_id}' has no '{config.name_field}'.")

    dependencies = as_string_list(source.meta.get(config.dependencies_field))
    if dependencies is None:
        raise ValueError(f"Page '{page_id}' has an invalid '{config.dependencies_field}' list.")
    tags = as_string_list(source.meta.get(config.tags_field))
    if tags is None:
        raise ValueError(f"Page '{page_id}' has an invalid '{config.tags_field}' list.")

    return Page(
        id=page_id,
        name=name,
        dependencies=list(dict.fromkeys(dependencies)),
        tags=list(dict.fromkeys(tags)),
        path=source.path,
        body=source.body,
    )


def load_course_from_dir(root: Path | str, config: LintConfig | None = None) -> dict[str, Page]:
    """Load a course strictly, raising ValueError on the first integrity problem."""
    config = config or LintConfig()
    root = Path(root)
    pages: dict[str, Page] = {}
    for path in discover_pages(root, config):
        display = path.relative_to(root).as_posix()
        try:
            source = read_source(path, display)
        except FrontMatterError as exc:
            raise ValueError(f"Page '{display}': {exc}") from exc
        page = page_from_source(source, config)
        if page.id in pages:
            raise ValueError(f"Duplicate page id: {page.id} (in {pages[page.id].path} and {page.path})")
        pages[page.id] = page
    _validate_page_dependencies(pages)
    logger.debug("Loaded %d page(s) from %s", len(pages), root)
    return pages


def bundled_course_root() -> Path:
    """Filesystem path of the sample course shipped with the package."""
    return Path(str(resources.files(BUNDLED_PACKAGE).joinpath(*BUNDLED_COURSE)))


def load_bundled_course() -> dict[str, Page]:
    """Load the bundled sample course with its own config."""
    root = bundled_course_root()
    return load_course_from_dir(root, load_config(root=root))


def scalar_text(value: Any) -> str:
    """Coerce a scalar front-matter value to stripped text, or '' if unusable."""
    if value is None or isinstance(value, (bool, list, dict)):
        return ""
    return str(value).strip()


def as_string_list(value: Any) -> list[str] | None:
    """Normalize a list-of-strings field, or None when the shape is invalid."""
    if value is None:
        return []
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        value = [value]
    if not isinstance(value, list):
        return None
    items: list[str] = []
    for item in value:
        text = scalar_text(item)
        if not text:
            return None
        items.append(text)
    return items


def _validate_page_dependencies(pages: dict[str, Page]) -> None:
    """Validate dependencies exist and the dependency graph has no cycles."""
    for page in pages.values():
        for dependency in page.dependencies:
            if dependency not in pages:
                raise ValueError(f"Page '{page.id}' has unknown dependency '{dependency}'.")
            if dependency == page.id:
                raise ValueError(f"Page '{page.id}' depends on itself.")

    cycles = find_cycles({page.id: page.dependencies for page in pages.values()})
    if cycles:
        raise ValueError(f"Circular page dependency detected: {' -> '.join(cycles[0])}")
