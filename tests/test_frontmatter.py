from pathlib import Path

import pytest

from bloggy.errors import FrontMatterError
from bloggy.frontmatter import decode_metadata, parse_file, parse_lines, split_lines


def test_parse_recovers_fields_and_body():
    lines = [
        "preamble is ignored",
        "---",
        "title: Hello World",
        "subtitle: A Subtitle",
        "date: 2021-Jan-01",
        "slug: My-Slug_2",
        "---",
        "# Body",
        "",
        "text",
    ]
    data = parse_lines(lines, "ignored.md")
    assert data.title == "Hello World"
    assert data.subtitle == "A Subtitle"
    assert data.date == "2021-Jan-01"
    assert data.slug == "my-slug"
    assert data.body == "# Body\n\ntext\n"


def test_slug_derived_from_filename_with_character_filter():
    data = parse_lines(["---", "title: Post", "---", "body"], "My_Post 1.md")
    assert data.slug == "mypost"


def test_empty_slug_falls_back_to_filename():
    data = parse_lines(["---", "slug: ''", "---"], Path("posts/Hello-World.md"))
    assert data.slug == "hello-world"


def test_missing_closing_delimiter_yields_empty_body():
    data = parse_lines(["---", "title: Open", "# Not a body"], "open.md")
    assert data.title == "Open"
    assert data.body == ""


def test_file_without_delimiters_has_empty_fields():
    data = parse_lines(["just text", "more text"], "plain.md")
    assert data.title == ""
    assert data.date == ""
    assert data.body == ""
    assert data.slug == "plain"


def test_delimiter_must_match_exactly():
    header, body = split_lines(["--- ", "---", "title: x", "---", "body"])
    assert header == "title: x\n"
    assert body == "body\n"


def test_crlf_line_endings():
    header, body = split_lines(["---\r\n", "title: x\r\n", "---\r\n", "body\r\n"])
    assert header == "title: x\n"
    assert body == "body\n"


def test_unknown_keys_ignored_and_scalars_coerced():
    fields = decode_metadata("title: 2020\ntags: [a, b]\nextra: yes\nsubtitle:\n")
    assert fields == {"title": "2020", "subtitle": "", "date": "", "slug": ""}


def test_invalid_yaml_raises():
    with pytest.raises(FrontMatterError) as excinfo:
        parse_lines(["---", "title: [unclosed", "---"], "bad.md")
    assert excinfo.value.source_path == Path("bad.md")


def test_non_mapping_front_matter_raises():
    with pytest.raises(FrontMatterError):
        decode_metadata("- a\n- b\n")


def test_nested_known_field_raises():
    with pytest.raises(FrontMatterError):
        decode_metadata("title:\n  nested: value\n")


def test_parse_file_reads_utf8(tmp_path):
    path = tmp_path / "Café.md"
    path.write_text("---\ntitle: Café\n---\nBonjour\n", encoding="utf-8")
    data = parse_file(path)
    assert data.title == "Café"
    assert data.slug == "caf"
    assert data.body == "Bonjour\n"


def test_scalars_kept_exactly_as_written():
    data = parse_lines(
        ["---", "title: Yes", "subtitle: 1.10", "date: 2021-Jan-01", "slug: 0x1F", "---"],
        "x.md",
    )
    assert data.title == "Yes"
    assert data.subtitle == "1.10"
    assert data.slug == "xf"
    fields = decode_metadata("title: null\nsubtitle: 0o17\nslug: ~\n")
    assert fields["title"] == "null"
    assert fields["subtitle"] == "0o17"


def test_parse_file_splits_on_newlines_only(tmp_path):
    path = tmp_path / "post.md"
    path.write_text("---\ntitle: T\n---\nform\x0cfeed sep\n", encoding="utf-8")
    data = parse_file(path)
    assert data.body == "form\x0cfeed sep\n"
