"""Turn Discourse "cooked" post HTML into short Markdown-ish text."""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from bluetracker._constants import EXCERPT_LIMIT

_BLOCK_TAGS = ("p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "ul", "ol", "aside")
_MANY_NEWLINES = re.compile(r"\n{3,}")

AVATAR_SIZE = 120


def html_to_text(html: str) -> str:
    """Render post HTML as plain text with light Markdown markup."""
    soup = BeautifulSoup(html or "", "html.parser")

    for tag in soup.find_all("br"):
        tag.replace_with("\n")
    for tag in soup.find_all("img"):
        tag.replace_with(tag.get("alt") or "")
    for tag in soup.find_all("a"):
        text = tag.get_text()
        href = tag.get("href") or ""
        if href.startswith(("http://", "https://")) and href != text:
            tag.replace_with(f"[{text}]({href})")
        else:
            tag.replace_with(text)
    for name, marker in (("strong", "**"), ("b", "**"), ("em", "*"), ("i", "*")):
        for tag in soup.find_all(name):
            text = tag.get_text()
            tag.replace_with(f"{marker}{text}{marker}" if text.strip() else text)
    for tag in soup.find_all("li"):
        tag.replace_with(f"- {tag.get_text().strip()}\n")
    for tag in soup.find_all("blockquote"):
        lines = tag.get_text().strip().splitlines()
        tag.replace_with("\n".join(f"> {line}" for line in lines) + "\n\n")
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.append("\n\n")

    text = soup.get_text()
    text = "\n".join(line.rstrip() for line in text.splitlines())
    return _MANY_NEWLINES.sub("\n\n", text).strip()


def excerpt(text: str, limit: int = EXCERPT_LIMIT) -> str:
    """Cut *text* to at most *limit* characters at a word boundary, adding ``...``."""
    if len(text) <= limit:
        return text
    cut = text[:limit]
    space = cut.rfind(" ")
    if space > 0:
        cut = cut[:space]
    return cut + "..."


def absolute_avatar_url(template: str, base_url: str, size: int = AVATAR_SIZE) -> str:
    """Expand a Discourse ``avatar_template`` into an absolute https URL."""
    url = template.replace("{size}", str(size))
    if url.startswith(("https:", "http:")):
        return url
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return urljoin(base_url + "/", url)
    return "https://" + url
