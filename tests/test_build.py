import pytest

from bloggy.build import BuildError, export_site
from bloggy.site import Site
from conftest import write_post


def test_export_writes_every_view(blog, tmp_path):
    out = tmp_path / "out"
    result = export_site(Site.open(blog), out)

    assert result.output_dir == out
    assert result.urls == ["/", "/post/new-post", "/post/old-post", "/about"]
    assert "<title>Test Blog</title>" in (out / "index.html").read_text(encoding="utf-8")
    assert "<h1>New Post</h1>" in (out / "post" / "new-post" / "index.html").read_text(encoding="utf-8")
    assert "<h1>About</h1>" in (out / "about" / "index.html").read_text(encoding="utf-8")
    assert (out / "static" / "css" / "main.css").read_text(encoding="utf-8") == "body { color: black; }"


def test_export_wipes_previous_output(blog, tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "stale.html").write_text("old", encoding="utf-8")
    export_site(Site.open(blog), out)
    assert not (out / "stale.html").exists()


def test_export_without_static_folder(blog, tmp_path):
    (blog / "static" / "css" / "main.css").unlink()
    (blog / "static" / "css").rmdir()
    (blog / "static").rmdir()
    out = tmp_path / "out"
    export_site(Site.open(blog), out)
    assert not (out / "static").exists()


def test_export_fails_on_broken_view(blog, tmp_path):
    (blog / "templates" / "displays" / "page.html").unlink()
    with pytest.raises(BuildError) as excinfo:
        export_site(Site.open(blog), tmp_path / "out")
    assert excinfo.value.url == "/about"
    assert excinfo.value.status == 500


def test_page_named_static_keeps_static_files(blog, tmp_path):
    write_post(blog / "pages", "static.md", "Static", None, "STATICPAGE")
    out = tmp_path / "out"
    result = export_site(Site.open(blog), out)
    assert "/static" in result.urls
    assert "STATICPAGE" in (out / "static" / "index.html").read_text(encoding="utf-8")
    assert (out / "static" / "css" / "main.css").exists()


def test_static_index_wins_over_page_named_static(blog, tmp_path):
    (blog / "static" / "index.html").write_text("asset", encoding="utf-8")
    write_post(blog / "pages", "static.md", "Static", None, "STATICPAGE")
    out = tmp_path / "out"
    result = export_site(Site.open(blog), out)
    assert result.skipped == ["/static"]
    assert (out / "static" / "index.html").read_text(encoding="utf-8") == "asset"


def test_empty_slug_page_does_not_replace_index(blog, tmp_path):
    write_post(blog / "pages", "2024.md", "Numbers", None, "PAGEBODY")
    out = tmp_path / "out"
    result = export_site(Site.open(blog), out)
    html = (out / "index.html").read_text(encoding="utf-8")
    assert 'href="/post/new-post"' in html
    assert "PAGEBODY" not in html
    assert result.skipped == ["/"]
    assert result.urls == ["/", "/post/new-post", "/post/old-post", "/about"]
