from __future__ import annotations

from md2html.convert_html import renderer


def test_render_markdown_supports_core_syntax():
    text = (
        "# Heading\n\n"
        "Some *emphasis* and **strong** with `code`.\n\n"
        "- one\n- two\n\n"
        "[link](https://example.com)\n\n"
        "```\nblock\n```\n"
    )

    html = renderer.render_markdown(text)

    assert "<h1>Heading</h1>" in html
    assert "<em>emphasis</em>" in html
    assert "<strong>strong</strong>" in html
    assert "<code>code</code>" in html
    assert "<ul>\n<li>one</li>\n<li>two</li>\n</ul>" in html
    assert '<a href="https://example.com">link</a>' in html
    assert "<pre><code>block\n</code></pre>" in html


def test_strikethrough_is_always_enabled():
    md = renderer.build_markdown_it()

    assert md.render("~~gone~~") == "<p><s>gone</s></p>\n"


def test_single_tilde_is_not_strikethrough():
    md = renderer.build_markdown_it()

    assert md.render("~kept~") == "<p>~kept~</p>\n"


def test_malformed_markup_degrades_to_text():
    html = renderer.render_markdown("**unclosed _mixed [link](\n")

    assert html.startswith("<p>")
    assert "unclosed" in html


def test_extra_rules_can_be_enabled():
    md = renderer.build_markdown_it(["table"])

    html = md.render("| a | b |\n| - | - |\n| 1 | 2 |\n")

    assert "<table>" in html


def test_tables_off_by_default():
    html = renderer.render_markdown("| a | b |\n| - | - |\n| 1 | 2 |\n")

    assert "<table>" not in html


def test_unknown_rules_are_ignored():
    md = renderer.build_markdown_it(["no-such-rule", " Strikethrough "])

    assert "<s>x</s>" in md.render("~~x~~")


def test_raw_html_passes_through():
    html = renderer.render_markdown("<div class=\"note\">hi</div>\n")

    assert '<div class="note">hi</div>' in html
