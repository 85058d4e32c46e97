from datetime import datetime

from conftest import write_post

from bloggy.content import (
    FileContentLoader,
    Index,
    IndexBuilder,
    NavigationLink,
    Page,
    Post,
    build_index,
)
from bloggy.protocols import Entry
from bloggy.urls import URLResolver


def make_post(slug: str, date: datetime, title: str = "") -> Post:
    return Post(
        title=title or slug,
        subtitle="",
        date=date,
        slug=slug,
        content="",
        url=f"/post/{slug}",
    )


def test_build_index_orders_posts_newest_first(blog):
    index = build_index(blog)
    assert [p.slug for p in index.posts] == ["new-post", "old-post"]
    assert index.posts[0].date == datetime(2021, 1, 1)
    assert index.posts[0].url == "/post/new-post"
    assert index.post("old-post").title == "Old Post"
    assert index.posts[0].content.startswith("# New")


def test_pages_do_not_need_dates(blog):
    index = build_index(blog)
    assert [p.slug for p in index.pages] == ["about"]
    about = index.page("about")
    assert about.title == "About"
    assert about.url == "/about"


def test_undated_and_broken_files_are_skipped(blog):
    posts = blog / "posts"
    write_post(posts, "undated.md", "No Date", None)
    write_post(posts, "bad-date.md", "Bad Date", "2021-01-01")
    (posts / "broken.md").write_text("---\ntitle: [oops\n---\nbody\n", encoding="utf-8")
    (posts / "notes.txt").write_text("---\ntitle: x\ndate: 2022-Jan-01\n---\n", encoding="utf-8")
    (posts / "nested").mkdir()
    write_post(posts / "nested", "deep.md", "Deep", "2022-Jan-01")

    index = build_index(blog)
    assert [p.slug for p in index.posts] == ["new-post", "old-post"]
    assert index.post("undated") is None
    assert index.post("broken") is None


def test_missing_folders_yield_empty_index(tmp_path):
    index = build_index(tmp_path / "nothing-here")
    assert len(index.posts) == 0
    assert len(index.pages) == 0
    assert index.latest_posts(10) == []


def test_duplicate_slugs_later_entry_wins_lookup(blog):
    write_post(blog / "pages", "a.md", "First", None, slug="same")
    write_post(blog / "pages", "b.md", "Second", None, slug="same")
    index = build_index(blog)
    assert [p.title for p in index.pages if p.slug == "same"] == ["First", "Second"]
    assert index.page("same").title == "Second"


def test_lookup_entries_exist_in_ordered_collections(blog):
    write_post(blog / "posts", "dup-one.md", "One", "2019-Mar-03", slug="dup")
    write_post(blog / "posts", "dup-two.md", "Two", "2018-Mar-03", slug="dup")
    index = build_index(blog)
    for slug in ("dup", "new-post", "old-post"):
        assert index.post(slug) in list(index.posts)


def test_equal_dates_keep_filename_order(tmp_path):
    (tmp_path / "posts").mkdir()
    write_post(tmp_path / "posts", "b.md", "B", "2021-Feb-02")
    write_post(tmp_path / "posts", "a.md", "A", "2021-Feb-02")
    write_post(tmp_path / "posts", "c.md", "C", "2020-Feb-02")
    index = build_index(tmp_path)
    assert [p.title for p in index.posts] == ["A", "B", "C"]


def test_latest_posts_clamps_to_available():
    posts = [make_post(f"p{chr(97 + i)}", datetime(2020, 1, i + 1)) for i in range(3)]
    index = Index(posts, [])
    assert [p.slug for p in index.latest_posts(2)] == ["pc", "pb"]
    assert [p.slug for p in index.latest_posts(10)] == ["pc", "pb", "pa"]
    assert index.latest_posts(0) == []


def test_custom_resolver_is_used_for_urls(blog):
    index = IndexBuilder(blog, URLResolver(post_base="/blog/", page_base="/p/")).build()
    assert index.post("new-post").url == "/blog/new-post"
    assert index.page("about").url == "/p/about"


def test_file_loader_lists_sorted_markdown(tmp_path):
    (tmp_path / "z.md").write_text("", encoding="utf-8")
    (tmp_path / "a.md").write_text("", encoding="utf-8")
    (tmp_path / "skip.html").write_text("", encoding="utf-8")
    files = FileContentLoader(tmp_path).iter_files()
    assert [p.name for p in files] == ["a.md", "z.md"]


def test_entries_satisfy_protocol():
    post = make_post("x", datetime(2020, 1, 1))
    page = Page(title="P", slug="p", content="body", url="/p")
    link = NavigationLink("GitHub", "https://github.com")
    assert isinstance(post, Entry)
    assert isinstance(page, Entry)
    assert isinstance(link, Entry)
    assert link.content == ""
    assert page.path is None
