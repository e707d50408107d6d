import pytest

from coursecheck.frontmatter import FrontMatterError, split_front_matter


def test_split_front_matter_returns_meta_and_body() -> None:
    meta, body = split_front_matter("---\nname: Fixtures\nid: fx\ntags: [a, b]\n---\n# Fixtures\n")
    assert meta == {"name": "Fixtures", "id": "fx", "tags": ["a", "b"]}
    assert body == "# Fixtures\n"


def test_split_front_matter_accepts_bom_and_dot_terminator() -> None:
    meta, body = split_front_matter("\ufeff---  \nid: x\n...\ntext")
    assert meta == {"id": "x"}
    assert body == "text"


def test_empty_block_is_empty_mapping() -> None:
    meta, body = split_front_matter("---\n---\nhello\n")
    assert meta == {}
    assert body == "hello\n"


def test_numeric_keys_become_strings() -> None:
    meta, _ = split_front_matter("---\n1: one\n---\n")
    assert meta == {"1": "one"}


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", "missing front-matter block"),
        ("# Title\n---\nid: x\n---\n", "missing front-matter block"),
        ("---\nid: x\n", "not terminated"),
        ("---\n- a\n- b\n---\n", "must be a mapping, got list"),
        ("---\njust text\n---\n", "must be a mapping, got str"),
    ],
)
def test_invalid_front_matter(text: str, message: str) -> None:
    with pytest.raises(FrontMatterError, match=message):
        split_front_matter(text)


def test_yaml_syntax_error_reports_file_line() -> None:
    with pytest.raises(FrontMatterError) as excinfo:
        split_front_matter("---\nid: x\ntags: [a, b\n---\n")
    assert "invalid YAML" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)
