from pathlib import Path

import pytest

from coursecheck.config import LintConfig
from coursecheck.content_loader import (
    as_string_list,
    bundled_course_root,
    discover_pages,
    load_bundled_course,
    load_course_from_dir,
    load_sources_from_dir,
    page_from_source,
)
from coursecheck.models import PageSource


def test_load_bundled_course() -> None:
    pages = load_bundled_course()
    assert "testing-introduction" in pages
    assert pages["testing-fixtures"].dependencies == ["testing-introduction"]
    assert pages["testing-parallel"].dependencies == ["testing-fixtures", "testing-long-running"]
    assert pages["testing-gpu"].tags == ["gpu", "performance"]
    assert pages["testing-mocking"].name == "Mocking"
    assert pages["testing-mocking"].path == "mocking.md"


def test_load_course_from_dir(course_dir: Path, write_page) -> None:
    write_page("intro.md", "name: Intro\nid: 101\n", body="# Intro\n")
    write_page("nested/next.md", "name: Next\nid: next\ndependencies: 101\ntags: basics\n")

    pages = load_course_from_dir(course_dir)
    assert sorted(pages) == ["101", "next"]
    assert pages["101"].body == "# Intro\n"
    assert pages["next"].dependencies == ["101"]
    assert pages["next"].tags == ["basics"]
    assert pages["next"].path == "nested/next.md"


def test_load_course_from_dir_rejects_circular_dependencies(course_dir: Path, write_page) -> None:
    write_page("a.md", "name: A\nid: a\ndependencies: [b]\n")
    write_page("b.md", "name: B\nid: b\ndependencies: [a]\n")

    with pytest.raises(ValueError, match="Circular page dependency detected: a -> b -> a"):
        load_course_from_dir(course_dir)


def test_load_course_from_dir_rejects_unknown_dependency(course_dir: Path, write_page) -> None:
    write_page("m.md", "name: M\nid: m\ndependencies: [does-not-exist]\n")

    with pytest.raises(ValueError, match="unknown dependency 'does-not-exist'"):
        load_course_from_dir(course_dir)


def test_load_course_from_dir_rejects_self_dependency(course_dir: Path, write_page) -> None:
    write_page("m.md", "name: M\nid: m\ndependencies: [m]\n")

    with pytest.raises(ValueError, match="depends on itself"):
        load_course_from_dir(course_dir)


def test_duplicate_page_id_raises(course_dir: Path, write_page) -> None:
    write_page("a.md", "name: A\nid: same\n")
    write_page("b.md", "name: B\nid: same\n")

    with pytest.raises(ValueError, match=r"Duplicate page id: same \(in a.md and b.md\)"):
        load_course_from_dir(course_dir)


def test_strict_load_reports_malformed_page(course_dir: Path) -> None:
    (course_dir / "broken.md").write_text("# no front-matter\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Page 'broken.md': missing front-matter block"):
        load_course_from_dir(course_dir)


def test_load_sources_turns_parse_errors_into_findings(course_dir: Path, write_page) -> None:
    write_page("ok.md", "name: Ok\nid: ok\n")
    (course_dir / "broken.md").write_text("---\nid: x\n", encoding="utf-8")
    (course_dir / "binary.md").write_bytes(b"---\n\xff\xfe\n---\n")

    sources, findings = load_sources_from_dir(course_dir, LintConfig())
    assert [source.path for source in sources] == ["ok.md"]
    assert [(item.code, item.path) for item in findings] == [("FM001", "binary.md"), ("FM001", "broken.md")]
    assert "not valid UTF-8" in findings[0].message


def test_discover_pages_honours_include_and_exclude(course_dir: Path, write_page) -> None:
    write_page("a.md", "id: a")
    write_page("drafts/b.md", "id: b")
    (course_dir / "notes.txt").write_text("ignored", encoding="utf-8")

    found = discover_pages(course_dir, LintConfig(exclude=("drafts/*",)))
    assert [path.name for path in found] == ["a.md"]

    everything = discover_pages(course_dir, LintConfig(include="**/*"))
    assert [path.relative_to(course_dir).as_posix() for path in everything] == ["a.md", "drafts/b.md", "notes.txt"]


def test_discover_pages_missing_root(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Course directory not found"):
        discover_pages(tmp_path / "missing", LintConfig())


def test_page_from_source_uses_configured_field_names() -> None:
    source = PageSource(path="p.md", meta={"title": "T", "slug": "s", "requires": ["x", "x"]}, body="")
    config = LintConfig(id_field="slug", name_field="title", dependencies_field="requires")
    page = page_from_source(source, config)
    assert page.id == "s"
    assert page.name == "T"
    assert page.dependencies == ["x"]
    assert page.tags == []


@pytest.mark.parametrize(
    ("meta", "message"),
    [
        ({"name": "N"}, "has no 'id'"),
        ({"id": "i", "name": "  "}, "has no 'name'"),
        ({"id": "i", "name": "N", "dependencies": {"a": 1}}, "invalid 'dependencies'"),
        ({"id": "i", "name": "N", "tags": ["ok", ""]}, "invalid 'tags'"),
    ],
)
def test_page_from_source_rejects_bad_metadata(meta: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        page_from_source(PageSource(path="p.md", meta=meta, body=""), LintConfig())


def test_as_string_list_shapes() -> None:
    assert as_string_list(None) == []
    assert as_string_list("a") == ["a"]
    assert as_string_list(7) == ["7"]
    assert as_string_list([" a ", 2]) == ["a", "2"]
    assert as_string_list(True) is None
    assert as_string_list([None]) is None
    assert as_string_list({"a": 1}) is None


def test_bundled_course_root_contains_pages() -> None:
    assert (bundled_course_root() / "fixtures.md").is_file()


def test_unreadable_file_becomes_finding(course_dir: Path, write_page, monkeypatch) -> None:
    write_page("a.md", "name: A\nid: a\n")
    write_page("b.md", "name: B\nid: b\n")
    original = Path.read_text

    def fake_read_text(self: Path, *args, **kwargs) -> str:
        if self.name == "a.md":
            raise PermissionError(13, "Permission denied", str(self))
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", fake_read_text)
    sources, findings = load_sources_from_dir(course_dir, LintConfig())
    assert [source.path for source in sources] == ["b.md"]
    assert [(item.code, item.path, item.message) for item in findings] == [
        ("FM001", "a.md", "cannot read file: Permission denied")
    ]
