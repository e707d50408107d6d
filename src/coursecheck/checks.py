"""Front-matter integrity rules for a course corpus."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace

from .config import LintConfig
from .content_loader import as_string_list, scalar_text
from .graph import find_cycles
from .models import ERROR, WARNING, Finding, LintReport, PageSource

logger = logging.getLogger("coursecheck")

RULES: dict[str, str] = {
    "FM001": "unreadable front-matter",
    "FM002": "required field missing or empty",
    "FM003": "duplicate page id",
    "FM004": "unknown dependency",
    "FM005": "circular dependency",
    "FM006": "page depends on itself",
    "FM007": "dependency listed more than once",
    "FM008": "field is not a list of non-empty strings",
    "FM009": "tag listed more than once",
    "FM010": "tag not in allowed vocabulary",
}


def lint_sources(
    sources: Sequence[PageSource],
    config: LintConfig,
    *,
    root: str = ".",
    parse_findings: Iterable[Finding] = (),
) -> LintReport:
    """Run every rule over parsed pages and collect a report."""
    findings: list[Finding] = list(parse_findings)
    page_count = len(sources) + len({item.path for item in findings})
    for source in sources:
        findings.extend(check_required_fields(source, config))
        findings.extend(check_list_fields(source, config))
    findings.extend(check_unique_ids(sources, config))
    findings.extend(check_dependencies(sources, config))

    if config.ignore:
        findings = [item for item in findings if item.code not in config.ignore]
    if config.warnings_as_errors:
        findings = [replace(item, severity=ERROR) for item in findings]
    findings.sort(key=lambda item: (item.path, item.code, item.message))

    report = LintReport(root=root, page_count=page_count, findings=tuple(findings))
    logger.debug(
        "Linted %d page(s): %d error(s), %d warning(s)", page_count, len(report.errors), len(report.warnings)
    )
    return report


def check_required_fields(source: PageSource, config: LintConfig) -> list[Finding]:
    """Every required field must be present and non-empty."""
    findings: list[Finding] = []
    page_id = _page_id(source, config)
    for field_name in config.effective_required_fields:
        if field_name not in source.meta:
            message = f"missing required field '{field_name}'"
        elif _is_blank(source.meta[field_name]):
            message = f"required field '{field_name}' is empty"
        else:
            continue
        findings.append(Finding("FM002", ERROR, message, source.path, page_id))
    return findings


def check_list_fields(source: PageSource, config: LintConfig) -> list[Finding]:
    """Dependencies and tags must be string lists without repeats."""
    findings: list[Finding] = []
    page_id = _page_id(source, config)

    for field_name in (config.dependencies_field, config.tags_field):
        if as_string_list(source.meta.get(field_name)) is None:
            findings.append(
                Finding("FM008", ERROR, f"'{field_name}' must be a list of non-empty strings", source.path, page_id)
            )

    dependencies = as_string_list(source.meta.get(config.dependencies_field)) or []
    for item in _repeated(dependencies):
        findings.append(Finding("FM007", WARNING, f"dependency '{item}' is listed more than once", source.path, page_id))

    tags = as_string_list(source.meta.get(config.tags_field)) or []
    for item in _repeated(tags):
        findings.append(Finding("FM009", WARNING, f"tag '{item}' is listed more than once", source.path, page_id))
    if config.allowed_tags is not None:
        for item in sorted(set(tags) - config.allowed_tags):
            findings.append(Finding("FM010", WARNING, f"tag '{item}' is not in allowed_tags", source.path, page_id))
    return findings


def check_unique_ids(sources: Sequence[PageSource], config: LintConfig) -> list[Finding]:
    """No two pages may share an identifier."""
    findings: list[Finding] = []
    first_seen: dict[str, str] = {}
    for source in sources:
        page_id = _page_id(source, config)
        if page_id is None:
            continue
        previous = first_seen.get(page_id)
        if previous is None:
            first_seen[page_id] = source.path
            continue
        findings.append(Finding("FM003", ERROR, f"id '{page_id}' is already used by {previous}", source.path, page_id))
    return findings


def check_dependencies(sources: Sequence[PageSource], config: LintConfig) -> list[Finding]:
    """Dependencies must reference existing pages and must not form cycles."""
    findings: list[Finding] = []
    graph: dict[str, list[str]] = {}
    path_by_id: dict[str, str] = {}
    for source in sources:
        page_id = _page_id(source, config)
        if page_id is None or page_id in graph:
            continue
        graph[page_id] = as_string_list(source.meta.get(config.dependencies_field)) or []
        path_by_id[page_id] = source.path

    for page_id, dependencies in graph.items():
        path = path_by_id[page_id]
        for dependency in dict.fromkeys(dependencies):
            if dependency == page_id:
                findings.append(Finding("FM006", ERROR, "page lists itself as a dependency", path, page_id))
            elif dependency not in graph:
                findings.append(Finding("FM004", ERROR, f"unknown dependency '{dependency}'", path, page_id))

    for cycle in find_cycles(graph):
        start = cycle[0]
        message = f"circular dependency: {' -> '.join(cycle)}"
        findings.append(Finding("FM005", ERROR, message, path_by_id[start], start))
    return findings


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def _page_id(source: PageSource, config: LintConfig) -> str | None:
    return scalar_text(source.meta.get(config.id_field)) or None


def _repeated(items: list[str]) -> list[str]:
    seen: set[str] = set()
    repeated: list[str] = []
    for item in items:
        if item in seen and item not in repeated:
            repeated.append(item)
        seen.add(item)
    return repeated
