from datetime import datetime, timezone
from pathlib import Path

import pytest
from markupsafe import Markup

from plainpost.collections import Posts
from plainpost.content import Post, Tag, User
from plainpost.errors import RenderError, TemplateLoadError
from plainpost.templates import (
    TemplateEngine,
    has_title,
    join_tags,
    print_byte,
    print_html,
)


def create_templates(tmp_path: Path, **templates: str) -> Path:
    template_dir = tmp_path / "templates"
    template_dir.mkdir()
    for name, body in templates.items():
        (template_dir / f"{name}.html").write_text(body, encoding="utf-8")
    return template_dir


def sample_post() -> Post:
    return Post(
        title="Fish & <Chips>",
        date=datetime(2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc),
        body="<p>Rendered <em>body</em></p>\n",
        author=User("Jane", "Doe", "jane@example.com"),
        tags=[Tag("go"), Tag("<web>")],
        url="/posts/fish.html",
    )


def test_helper_functions():
    assert print_byte(b"caf\xc3\xa9") == "café"
    assert print_byte("text") == "text"
    assert print_html(b"<b>x</b>") == Markup("<b>x</b>")
    assert join_tags([Tag("a"), Tag("b<c>")]) == "a, b&lt;c&gt;"
    assert join_tags(["x", "y"]) == "x, y"
    assert join_tags([]) == ""
    assert has_title("About") is True
    assert has_title("") is False
    assert has_title(None) is False


def test_render_post_page(tmp_path):
    template_dir = create_templates(
        tmp_path,
        default=(
            "<h1>{{ content.title }}</h1>"
            "<time>{{ content.date | format_date }}</time>"
            "<span>{{ content.date | short_date }}</span>"
            "{{ content.body | print_html }}"
            "<p>{{ content.tags | join_tags }}</p>"
        ),
    )
    engine = TemplateEngine(template_dir)
    dst = tmp_path / "out" / "posts" / "fish.html"
    assert engine.render(dst, "default.html", {"content": sample_post()}) == dst

    html = dst.read_text(encoding="utf-8")
    assert "<h1>Fish &amp; &lt;Chips&gt;</h1>" in html
    assert "<time>Mon, 02 Jan 2006 15:04:05 +0000</time>" in html
    assert "<span>January  2, 2006</span>" in html
    assert "<p>Rendered <em>body</em></p>" in html
    assert "<p>go, &lt;web&gt;</p>" in html


def test_render_truncates_existing_file(tmp_path):
    template_dir = create_templates(tmp_path, about="{{ title }}")
    engine = TemplateEngine(template_dir)
    dst = tmp_path / "about.html"
    dst.write_text("x" * 100, encoding="utf-8")
    engine.render(dst, "about.html", {"title": "About"})
    assert dst.read_text(encoding="utf-8") == "About"


def test_lop_and_has_title_in_templates(tmp_path):
    template_dir = create_templates(
        tmp_path,
        index=(
            "{% if title is has_title %}[{{ title }}]{% endif %}"
            "{% for p in lop(posts, 0, 2) %}{{ p.title }};{% endfor %}"
            "|{% for p in posts | lop(0, 10) %}{{ p.title }};{% endfor %}"
        ),
    )
    engine = TemplateEngine(template_dir)
    posts = Posts([Post(title=t) for t in "ABC"])
    assert engine.render_string("index.html", {"title": "", "posts": posts}) == "A;B;|A;B;C;"
    assert engine.render_string("index.html", {"title": "Home", "posts": posts}).startswith(
        "[Home]"
    )


def test_site_global(tmp_path):
    template_dir = create_templates(tmp_path, about="{{ site.site_title }}")
    engine = TemplateEngine(template_dir, site={"site_title": "Blog"})
    assert engine.render_string("about.html", {}) == "Blog"


def test_templates_compiled_at_load(tmp_path):
    template_dir = create_templates(tmp_path, index="ok", about="ok")
    (template_dir / "notes.txt").write_text("{% broken", encoding="utf-8")
    engine = TemplateEngine(template_dir)
    assert engine.names == ["about.html", "index.html"]


def test_missing_template_dir(tmp_path):
    with pytest.raises(TemplateLoadError) as excinfo:
        TemplateEngine(tmp_path / "missing")
    assert excinfo.value.source_path == tmp_path / "missing"


def test_syntax_error_is_reported_at_load(tmp_path):
    template_dir = create_templates(tmp_path, index="{% for p in posts %}")
    with pytest.raises(TemplateLoadError) as excinfo:
        TemplateEngine(template_dir)
    assert excinfo.value.source_path == template_dir / "index.html"
    assert "syntax error" in excinfo.value.message


def test_missing_template_raises_render_error(tmp_path):
    engine = TemplateEngine(create_templates(tmp_path, index="x"))
    dst = tmp_path / "out" / "contact.html"
    with pytest.raises(RenderError) as excinfo:
        engine.render(dst, "contact.html", {})
    assert excinfo.value.source_path == dst
    assert "contact.html" in excinfo.value.message
    assert not dst.exists()


def test_runtime_error_raises_render_error(tmp_path):
    engine = TemplateEngine(create_templates(tmp_path, about="{{ author.name.first }}"))
    with pytest.raises(RenderError) as excinfo:
        engine.render(tmp_path / "about.html", "about.html", {})
    assert "Undefined variable" in excinfo.value.message


def test_write_failure_raises_render_error(tmp_path):
    engine = TemplateEngine(create_templates(tmp_path, about="x"))
    dst = tmp_path / "taken"
    dst.mkdir()
    with pytest.raises(RenderError) as excinfo:
        engine.render(dst, "about.html", {})
    assert "Cannot write output" in excinfo.value.message


def test_runtime_error_names_exception_type(tmp_path):
    engine = TemplateEngine(create_templates(tmp_path, index="{{ 1 + 'a' }}"))
    with pytest.raises(RenderError) as excinfo:
        engine.render(tmp_path / "index.html", "index.html", {})
    assert excinfo.value.message.startswith("index.html: TypeError: ")
    assert isinstance(excinfo.value.original_error, TypeError)
