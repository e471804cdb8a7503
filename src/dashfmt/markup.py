from __future__ import annotations

import html
import logging
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import urlsplit

import markdown
from bleach.linkifier import EMAIL_RE, PROTO_RE, URL_RE
from markdown import util
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

LOGGER = logging.getLogger(__name__)

SAFE_SCHEMES = frozenset({"http", "https", "mailto"})

LINK_TARGET = "_blank"
LINK_REL = "noopener noreferrer"

# Unclosed "[" runs make Python-Markdown's link pattern rescan the rest of
# the input for every bracket; deeper than this renders as plain text.
MAX_BRACKET_DEPTH = 32

LinkValidator = Callable[[str], bool]


def is_safe_link(candidate: Any) -> bool:
    """
    Link destination policy, checked in this order:

      - blank after trimming -> unsafe
      - "#anchor" and "/site/path" -> safe
      - otherwise it must be an absolute URL whose scheme is
        http, https or mailto; http(s) URLs need a host

    Examples:
      - "https://example.com", "mailto:a@b.com", "#top", "/docs" are safe
      - "javascript:alert(1)", "data:text/html,...", "example.com",
        "https://" are not
    """
    if not isinstance(candidate, str):
        return False

    trimmed = candidate.strip()
    if not trimmed:
        return False
    if trimmed.startswith("#") or trimmed.startswith("/"):
        return True

    try:
        parts = urlsplit(trimmed)
        scheme = parts.scheme.lower()
        if scheme in ("http", "https"):
            # .port raises ValueError for a malformed port
            _ = parts.port
            if not parts.hostname or any(ch.isspace() for ch in trimmed):
                return False
    except ValueError:
        return False
    return scheme in SAFE_SCHEMES


def _decoded(value: str) -> str:
    # Attribute values may still carry Markdown's ampersand placeholder
    # (automail obfuscation) or character references.
    return html.unescape(value.replace(util.AMP_SUBSTITUTE, "&"))


def _bracket_depth(text: str) -> int:
    depth = deepest = 0
    for ch in text:
        if ch == "[":
            depth += 1
            deepest = max(deepest, depth)
        elif ch == "]" and depth:
            depth -= 1
    return deepest


def _unwrap(parent: etree.Element, child: etree.Element, text: str, kids: List[etree.Element]) -> None:
    """Replace `child` inside `parent` with `text` followed by `kids`, keeping the tail."""
    idx = list(parent).index(child)
    tail = child.tail or ""
    parent.remove(child)

    def append_text(s: str, at: int) -> None:
        if at == 0:
            parent.text = (parent.text or "") + s
        else:
            prev = parent[at - 1]
            prev.tail = (prev.tail or "") + s

    append_text(text, idx)
    for offset, kid in enumerate(kids):
        parent.insert(idx + offset, kid)
    if kids:
        kids[-1].tail = (kids[-1].tail or "") + tail
    else:
        append_text(tail, idx)


def _trim_url(url: str) -> str:
    while url and url[-1] in ".,;:!?":
        url = url[:-1]
    while url.endswith(")") and url.count(")") > url.count("("):
        url = url[:-1]
    return url


class LinkifyTreeprocessor(Treeprocessor):
    """
    Turns bare URLs and e-mail addresses in text nodes into <a> elements.

    Uses bleach's URL/e-mail patterns. Text inside <a>, <pre> and <code>
    is left alone; fenced and indented code never reaches the tree as text.
    """

    SKIP_TAGS = frozenset({"a", "pre", "code"})

    def run(self, root: etree.Element) -> None:
        self._linkify(root)

    def _linkify(self, el: etree.Element) -> None:
        head, links = self._split(el.text)
        el.text = head
        children: List[etree.Element] = list(links)
        for child in list(el):
            if child.tag not in self.SKIP_TAGS:
                self._linkify(child)
            tail, tail_links = self._split(child.tail)
            child.tail = tail
            children.append(child)
            children.extend(tail_links)
        el[:] = children

    def _split(self, text: Optional[str]) -> Tuple[Optional[str], List[etree.Element]]:
        if not text:
            return text, []

        head: Optional[str] = None
        links: List[etree.Element] = []
        pos = 0
        while True:
            url_m = URL_RE.search(text, pos)
            mail_m = EMAIL_RE.search(text, pos)
            if mail_m and (not url_m or mail_m.start() <= url_m.start()):
                start, found = mail_m.start(), mail_m.group(0)
                href = "mailto:" + found
            elif url_m:
                start, found = url_m.start(), _trim_url(url_m.group(0))
                href = found if PROTO_RE.search(found) else "http://" + found
            else:
                break
            if not found:
                break

            before = text[pos:start]
            if links:
                links[-1].tail = before
            else:
                head = before

            a = etree.Element("a")
            a.set("href", href)
            a.text = found
            links.append(a)
            pos = start + len(found)

        rest = text[pos:]
        if links:
            links[-1].tail = rest
            return head, links
        return text, []


class LinkPolicyTreeprocessor(Treeprocessor):
    """
    Enforces the link policy on the converted tree.

    Unsafe <a> elements are unwrapped to their content, unsafe <img>
    elements are replaced by their alt text, and every surviving link gets
    target/rel forced.
    """

    def __init__(self, md: markdown.Markdown, validator: LinkValidator) -> None:
        super().__init__(md)
        self.validator = validator

    def run(self, root: etree.Element) -> None:
        pairs = [(parent, child) for parent in root.iter() for child in parent]
        # Deepest first, so content moved out of an unwrapped link was
        # already checked.
        for parent, child in reversed(pairs):
            if child.tag == "a":
                self._check_link(parent, child)
            elif child.tag == "img":
                self._check_image(parent, child)

    def _check_link(self, parent: etree.Element, el: etree.Element) -> None:
        href = _decoded(el.get("href", ""))
        if not self.validator(href):
            LOGGER.debug("dropping unsafe link href=%r", href)
            _unwrap(parent, el, el.text or "", list(el))
            return
        el.set("target", LINK_TARGET)
        el.set("rel", LINK_REL)

    def _check_image(self, parent: etree.Element, el: etree.Element) -> None:
        src = _decoded(el.get("src", ""))
        if not self.validator(src):
            LOGGER.debug("dropping unsafe image src=%r", src)
            _unwrap(parent, el, el.get("alt", ""), [])


class SafeLinksExtension(Extension):
    """Escape raw HTML instead of passing it through, and apply the link policy."""

    def __init__(self, validator: LinkValidator = is_safe_link, linkify: bool = True, **kwargs: Any) -> None:
        self.validator = validator
        self.linkify = linkify
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")
        # Both run after "unescape" (priority 0) so backslash escapes are
        # resolved; new links go through the same policy as explicit ones.
        if self.linkify:
            md.treeprocessors.register(LinkifyTreeprocessor(md), "linkify", -5)
        md.treeprocessors.register(LinkPolicyTreeprocessor(md, self.validator), "link_policy", -10)


@dataclass(frozen=True)
class MarkupConfig:
    linkify: bool = True
    breaks: bool = True
    link_validator: LinkValidator = is_safe_link
    extensions: Tuple[str, ...] = ("fenced_code", "sane_lists")


class SafeMarkupRenderer:
    """
    Markdown -> HTML converter bound to one immutable MarkupConfig.

    A fresh Markdown instance is built per call; the renderer itself holds
    no per-call state and can be shared between threads.
    """

    def __init__(self, config: Optional[MarkupConfig] = None) -> None:
        self.config = config or MarkupConfig()

    def _converter(self) -> markdown.Markdown:
        extensions: List[Any] = [SafeLinksExtension(self.config.link_validator, linkify=self.config.linkify)]
        extensions.extend(self.config.extensions)
        if self.config.breaks:
            extensions.append("nl2br")
        return markdown.Markdown(extensions=extensions, output_format="html")

    def _plain(self, source: str) -> str:
        return f"<p>{html.escape(source, quote=False)}</p>"

    def render(self, text: Optional[str]) -> str:
        source = text if isinstance(text, str) else ""
        if _bracket_depth(source) > MAX_BRACKET_DEPTH:
            LOGGER.warning("markup brackets nested too deeply, rendering as plain text (chars=%d)", len(source))
            return self._plain(source)
        try:
            return self._converter().convert(source)
        except RecursionError:
            LOGGER.warning("markup too deeply nested, rendering as plain text (chars=%d)", len(source))
            return self._plain(source)


def configure(config: Optional[MarkupConfig] = None) -> SafeMarkupRenderer:
    return SafeMarkupRenderer(config)


_default_renderer = SafeMarkupRenderer()


def render_markdown_to_html(text: Optional[str]) -> str:
    return _default_renderer.render(text)
