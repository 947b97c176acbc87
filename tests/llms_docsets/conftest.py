from pathlib import Path
from typing import Optional

import pytest


def render_page(
    h1: Optional[str] = "Page",
    body: str = "<p>Content</p>",
    description: Optional[str] = None,
    meta_title: Optional[str] = None,
    main_tag: str = "main",
) -> str:
    meta = ""
    if meta_title:
        meta += f'<meta name="title" content="{meta_title}">'
    if description:
        meta += f'<meta name="description" content="{description}">'
    heading = f"<h1>{h1}</h1>" if h1 is not None else ""
    return (
        "<!doctype html><html><head>"
        f"<title>{h1 or 'Site'} - Example</title>{meta}"
        "</head><body>"
        "<nav><a href='/'>Home</a></nav>"
        f"<{main_tag}>{heading}{body}</{main_tag}>"
        "</body></html>"
    )


@pytest.fixture
def site_dir(tmp_path) -> Path:
    site = tmp_path / "site"
    site.mkdir()
    return site


@pytest.fixture
def write_page(site_dir):
    """Write a rendered page as <site>/<pathname>/index.html."""

    def _write(pathname: str, html: str) -> Path:
        page_dir = site_dir / pathname.strip("/")
        page_dir.mkdir(parents=True, exist_ok=True)
        out = page_dir / "index.html"
        out.write_text(html, encoding="utf-8")
        return out

    return _write
