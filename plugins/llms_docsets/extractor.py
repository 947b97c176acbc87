import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from plugins.llms_docsets.config import DEFAULT_MAIN_SELECTOR

# Removed from the main region of every page before conversion.
ALWAYS_IGNORED = (
    "h1",
    "header",
    "footer",
    "[role='banner']",
    "[role='contentinfo']",
    "a.headerlink",
)
# Never carry text worth keeping.
NON_CONTENT_TAGS = ("script", "style", "noscript", "template")
OUTLINE_HEADINGS = re.compile(r"^h[2-6]$")
EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


class ExtractionError(Exception):
    """A single page could not be turned into an entry."""


class MissingMainContentError(ExtractionError):
    def __init__(self, selector: str):
        super().__init__(f"Missing main selector <{selector}>")
        self.selector = selector


@dataclass
class ExtractedEntry:
    title: str
    description: Optional[str]
    body: str

    def render(self) -> str:
        parts = [f"# {self.title}"]
        if self.description:
            parts.append(f"> {self.description}")
        if self.body:
            parts.append(self.body)
        return "\n\n".join(parts).strip()


class SimpleMarkdownConverter(MarkdownConverter):
    """
    markdownify converter tuned for plain-text bundles: ATX headings,
    dash bullets, no images, and in-page anchors reduced to their text.
    """

    def __init__(self, **options):
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        options.setdefault("strip", ["img", "svg", "button"])
        super().__init__(**options)

    def convert_a(self, el, text, *args, **kwargs):
        href = (el.get("href") or "").strip()
        if not href or href.startswith("#") or href.lower().startswith("javascript:"):
            return text
        return super().convert_a(el, text, *args, **kwargs)


def _meta_content(doc: BeautifulSoup, name: str) -> Optional[str]:
    tag = doc.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def _remove(elements) -> None:
    for el in elements:
        # nested matches go away with their ancestor
        if not el.decomposed:
            el.decompose()


def _outline(main: Tag) -> str:
    lines = []
    for heading in main.find_all(OUTLINE_HEADINGS):
        text = " ".join(heading.get_text(" ", strip=True).split())
        if text:
            lines.append(f"{'#' * int(heading.name[1])} {text}")
    return "\n".join(lines)


def to_simple_markdown(html: str) -> str:
    markdown = SimpleMarkdownConverter().convert(html)
    markdown = "\n".join(line.rstrip() for line in markdown.splitlines())
    return EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()


def extract_entry(
    html: str,
    main_selector: str = DEFAULT_MAIN_SELECTOR,
    ignore_selectors: Iterable[str] = (),
    only_structure: bool = False,
) -> ExtractedEntry:
    """
    Turn one rendered page into an entry.

    The first <h1> of the main region becomes the title, the page's meta
    description the quoted summary, and the rest of the region the body.
    Raises MissingMainContentError if `main_selector` finds nothing.
    """
    doc = BeautifulSoup(html, "html.parser")
    main = doc.select_one(main_selector or DEFAULT_MAIN_SELECTOR)
    if main is None:
        raise MissingMainContentError(main_selector)

    h1 = main.find("h1")
    title = h1.get_text(" ", strip=True) if h1 is not None else ""
    if h1 is not None:
        h1.decompose()

    description = _meta_content(doc, "description")

    _remove(main.find_all(list(NON_CONTENT_TAGS)))
    for selector in (*ALWAYS_IGNORED, *ignore_selectors):
        _remove(main.select(selector))

    if only_structure:
        body = _outline(main)
    else:
        body = to_simple_markdown(main.decode_contents())

    return ExtractedEntry(title=title or "Untitled", description=description, body=body)


def read_page_meta(html: str, fallback: str) -> Tuple[str, str]:
    """Return (title, description) from a page's metadata."""
    doc = BeautifulSoup(html, "html.parser")
    title = _meta_content(doc, "title")
    if not title and doc.title and doc.title.string:
        title = doc.title.string.strip()
    return title or fallback, _meta_content(doc, "description") or ""
