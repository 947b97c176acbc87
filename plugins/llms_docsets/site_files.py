from pathlib import Path
from typing import Optional, Union


class SiteFiles:
    """
    Read/write access to the built site directory.

    Page lookups are explicit: `read_page` returns None for a page whose
    rendered HTML is absent instead of raising.
    """

    def __init__(self, site_dir: Union[str, Path]):
        self.site_dir = Path(site_dir).resolve()

    def resolve(self, rel_path: str) -> Path:
        target = (self.site_dir / rel_path.lstrip("/")).resolve()
        try:
            target.relative_to(self.site_dir)
        except ValueError:
            raise ValueError(f"'{rel_path}' resolves to a path outside the site directory")
        return target

    def page_html_path(self, pathname: str) -> Path:
        return self.resolve(pathname.strip("/")) / "index.html"

    def read_page(self, pathname: str) -> Optional[str]:
        path = self.page_html_path(pathname)
        if not path.is_file():
            return None
        return path.read_bytes().decode("utf-8", errors="replace")

    def read_text(self, rel_path: str) -> str:
        path = self.resolve(rel_path)
        if not path.is_file():
            raise FileNotFoundError(f"{path} not found")
        return path.read_text(encoding="utf-8")

    def write_text(self, rel_path: str, text: str) -> Path:
        path = self.resolve(rel_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(text)
        return path
