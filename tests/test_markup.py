"""
Unit tests for the code-fence sanitizer.
"""

import pytest

from card_designer.markup import strip_code_fences


class TestHtmlFence:
    """Responses wrapped in an ```html fence."""

    def test_extracts_between_html_fence_and_next_fence(self):
        raw = "```html\n<div class=\"card\">Hi</div>\n```"
        assert strip_code_fences(raw) == '<div class="card">Hi</div>'

    def test_surrounding_prose_is_dropped(self):
        raw = "Here is your card:\n```html\n<section>A</section>\n```\nEnjoy!"
        assert strip_code_fences(raw) == "<section>A</section>"

    def test_html_fence_preferred_over_earlier_generic_fence(self):
        raw = "```\nnotes\n```\n```html\n<p>card</p>\n```"
        assert strip_code_fences(raw) == "<p>card</p>"

    def test_unterminated_html_fence_keeps_remainder(self):
        raw = "```html\n<html><body>cut off"
        assert strip_code_fences(raw) == "<html><body>cut off"

    def test_only_first_block_is_used(self):
        raw = "```html\n<p>one</p>\n```\ntext\n```html\n<p>two</p>\n```"
        assert strip_code_fences(raw) == "<p>one</p>"


class TestGenericFence:
    """Responses wrapped in a plain or differently tagged fence."""

    def test_plain_fence(self):
        raw = "```\n<div>plain</div>\n```"
        assert strip_code_fences(raw) == "<div>plain</div>"

    def test_info_string_is_dropped(self):
        raw = "```HTML\n<div>upper</div>\n```"
        assert strip_code_fences(raw) == "<div>upper</div>"

    def test_first_pair_only(self):
        raw = "```\n<div>first</div>\n```\n```\n<div>second</div>\n```"
        assert strip_code_fences(raw) == "<div>first</div>"

    def test_unterminated_generic_fence(self):
        raw = "```\n<div>unterminated"
        assert strip_code_fences(raw) == "<div>unterminated"

    def test_markup_on_fence_line_is_kept(self):
        raw = "```<div>inline</div>```"
        assert strip_code_fences(raw) == "<div>inline</div>"


class TestNoFence:
    """Responses without fences."""

    def test_returned_trimmed(self):
        raw = "\n\n  <!DOCTYPE html><html></html>  \n"
        assert strip_code_fences(raw) == "<!DOCTYPE html><html></html>"

    def test_empty(self):
        assert strip_code_fences("") == ""
        assert strip_code_fences("   \n") == ""


@pytest.mark.parametrize(
    "raw",
    [
        "```html\n<div>a</div>\n```",
        "```\n<div>b</div>\n```",
        "```css\nbody {}\n",
        "plain <b>markup</b>",
        "before ```html\n<i>x</i>``` after ``` more",
    ],
)
def test_sanitizing_twice_is_idempotent(raw):
    once = strip_code_fences(raw)
    assert "```" not in once
    assert strip_code_fences(once) == once
