from __future__ import annotations

import pytest

from bluetracker._render import absolute_avatar_url, excerpt, html_to_text


class TestHtmlToText:
    def test_paragraphs_and_line_breaks(self) -> None:
        assert html_to_text("<p>First line<br>second line</p><p>Next paragraph</p>") == (
            "First line\nsecond line\n\nNext paragraph"
        )

    def test_inline_markup(self) -> None:
        assert html_to_text("<p><strong>Bold</strong> and <em>italic</em></p>") == "**Bold** and *italic*"

    def test_links(self) -> None:
        html = '<p><a href="https://example.com/notes">patch notes</a> and <a href="/t/1">relative</a></p>'
        assert html_to_text(html) == "[patch notes](https://example.com/notes) and relative"

    def test_link_whose_text_is_the_url(self) -> None:
        html = '<p><a href="https://example.com">https://example.com</a></p>'
        assert html_to_text(html) == "https://example.com"

    def test_lists_and_quotes(self) -> None:
        html = "<ul><li>one</li><li>two</li></ul><blockquote><p>quoted</p></blockquote><p>reply</p>"
        assert html_to_text(html) == "- one\n- two\n\n> quoted\n\nreply"

    def test_images_become_alt_text(self) -> None:
        assert html_to_text('<p>Look <img src="x.png" alt=":smile:"></p>') == "Look :smile:"

    def test_empty_input(self) -> None:
        assert html_to_text("") == ""


class TestExcerpt:
    def test_short_text_is_unchanged(self) -> None:
        assert excerpt("short", limit=10) == "short"

    def test_cuts_at_word_boundary(self) -> None:
        assert excerpt("alpha beta gamma", limit=12) == "alpha beta..."

    def test_hard_cut_without_spaces(self) -> None:
        assert excerpt("x" * 20, limit=5) == "xxxxx..."

    def test_default_limit(self) -> None:
        text = "word " * 400
        result = excerpt(text)
        assert result.endswith("...")
        assert len(result) <= 1003


@pytest.mark.parametrize(
    ("template", "expected"),
    [
        ("/user_avatar/forum/u/{size}/1.png", "https://forum.example/user_avatar/forum/u/120/1.png"),
        ("//cdn.example/u/{size}/1.png", "https://cdn.example/u/120/1.png"),
        ("https://cdn.example/u/{size}/1.png", "https://cdn.example/u/120/1.png"),
        ("cdn.example/u/1.png", "https://cdn.example/u/1.png"),
    ],
)
def test_absolute_avatar_url(template: str, expected: str) -> None:
    assert absolute_avatar_url(template, "https://forum.example/en") == expected
