"""
Markup cleanup for layout responses.

Models sometimes wrap the requested HTML in a markdown code fence even when
told not to. strip_code_fences() pulls the markup out of the first fenced
region:

- an ```html fence wins over any other fence
- otherwise the first ``` fence is used, dropping a bare info string such
  as ``HTML`` or ``xml`` on the fence line
- an unterminated fence yields everything after the opening marker
- only the first complete pair is used when there are several blocks
- text without fences is returned trimmed

The result never contains a fence marker, so applying the function twice
gives the same string.
"""

import re

FENCE = "```"
HTML_FENCE = "```html"

_INFO_STRING = re.compile(r"[A-Za-z0-9_+\-.]+[ \t]*(?:\r?\n|$)")


def _interior(text: str, start: int) -> str:
    end = text.find(FENCE, start)
    if end == -1:
        return text[start:]
    return text[start:end]


def strip_code_fences(text: str) -> str:
    """
    Extract markup from a possibly fenced model response.

    Args:
        text: Raw completion text

    Returns:
        Markup with surrounding fence and whitespace removed
    """
    if not text:
        return ""

    html_start = text.find(HTML_FENCE)
    if html_start != -1:
        return _interior(text, html_start + len(HTML_FENCE)).strip()

    fence_start = text.find(FENCE)
    if fence_start == -1:
        return text.strip()

    start = fence_start + len(FENCE)
    info = _INFO_STRING.match(text, start)
    if info:
        start = info.end()
    return _interior(text, start).strip()
