"""Application service for linting and querying one course directory."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from . import __version__
from .checks import lint_sources
from .config import LintConfig, load_config
from .content_loader import load_course_from_dir, load_sources_from_dir
from .graph import dependents, topological_order, transitive_dependencies
from .models import LintReport, Page

logger = logging.getLogger("coursecheck")

REPORT_FORMAT_VERSION = 1


class CourseService:
    """Coordinates loading, linting and dependency queries for a course."""

    def __init__(self, root: Path | str, config: LintConfig | None = None) -> None:
        """Initialize service for a course root, reading its config file when none is given."""
        self.root = Path(root)
        self.config = config if config is not None else load_config(root=self.root)
        self._pages: dict[str, Page] | None = None

    def lint(self) -> LintReport:
        """Lint every page; content problems become findings."""
        sources, parse_findings = load_sources_from_dir(self.root, self.config)
        return lint_sources(sources, self.config, root=str(self.root), parse_findings=parse_findings)

    @property
    def pages(self) -> dict[str, Page]:
        """Pages by id, loaded strictly on first access."""
        if self._pages is None:
            self._pages = load_course_from_dir(self.root, self.config)
        return self._pages

    def get_page(self, page_id: str) -> Page | None:
        """Get page by id."""
        return self.pages.get(page_id)

    def learning_order(self) -> list[Page]:
        """Return pages with every page after its dependencies."""
        return [self.pages[page_id] for page_id in topological_order(self._graph())]

    def prerequisites_of(self, page_id: str, transitive: bool = True) -> list[Page]:
        """Return the pages a page depends on, sorted by id."""
        page = self._require(page_id)
        if transitive:
            ids = transitive_dependencies(self._graph(), page_id)
        else:
            ids = sorted(page.dependencies)
        return [self.pages[item] for item in ids]

    def dependents_of(self, page_id: str, transitive: bool = True) -> list[Page]:
        """Return the pages that depend on a page, sorted by id."""
        self._require(page_id)
        if transitive:
            ids = dependents(self._graph(), page_id)
        else:
            ids = sorted(page.id for page in self.pages.values() if page_id in page.dependencies)
        return [self.pages[item] for item in ids]

    def pages_by_tag(self) -> dict[str, list[str]]:
        """Return tag -> sorted page ids, with tags sorted."""
        index: dict[str, list[str]] = {}
        for page in self.pages.values():
            for tag in page.tags:
                index.setdefault(tag, []).append(page.id)
        return {tag: sorted(index[tag]) for tag in sorted(index)}

    def export_report(self, report: LintReport, export_path: Path | str) -> Path:
        """Write a lint report to a JSON file."""
        payload = {
            "format_version": REPORT_FORMAT_VERSION,
            "generated_at": datetime.now(UTC).isoformat(),
            "source": {"tool": "coursecheck", "version": __version__},
            **report.to_dict(),
        }
        path = Path(export_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Wrote lint report to %s", path)
        return path

    def _graph(self) -> dict[str, list[str]]:
        return {page.id: page.dependencies for page in self.pages.values()}

    def _require(self, page_id: str) -> Page:
        page = self.pages.get(page_id)
        if page is None:
            raise KeyError(page_id)
        return page
