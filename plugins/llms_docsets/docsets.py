import logging
from pathlib import Path
from typing import Iterable, List
from urllib.parse import urljoin

from plugins.llms_docsets.config import DEFAULT_PAGE_SEPARATOR, DocSet
from plugins.llms_docsets.extractor import ExtractionError, extract_entry
from plugins.llms_docsets.matcher import matches
from plugins.llms_docsets.ranker import sort_paths
from plugins.llms_docsets.site_files import SiteFiles

log = logging.getLogger("mkdocs.plugins.llms_docsets")


def absolute_url(url: str, site_url: str) -> str:
    """Resolve a site-relative url against the site's base URL."""
    if not site_url:
        return url
    return urljoin(site_url.rstrip("/") + "/", url.lstrip("/"))


def select_pages(doc_set: DocSet, pathnames: Iterable[str]) -> List[str]:
    """Pages included by the doc set, in promote/demote order."""
    included = [pn for pn in pathnames if matches(pn, doc_set.include)]
    return sort_paths(included, doc_set.promote, doc_set.demote)


def build_bundle(
    doc_set: DocSet,
    pathnames: Iterable[str],
    site_files: SiteFiles,
    separator: str = DEFAULT_PAGE_SEPARATOR,
) -> str:
    entries: List[str] = []

    for pathname in select_pages(doc_set, pathnames):
        try:
            html = site_files.read_page(pathname)
            if html is None:
                log.debug(f"[llms_docsets] no rendered HTML for {pathname}; skipping")
                continue
            entry = extract_entry(
                html,
                doc_set.main_selector,
                doc_set.ignore_selectors,
                doc_set.only_structure,
            )
        except ExtractionError as e:
            log.warning(f"[llms_docsets] skipping {pathname} in '{doc_set.title}': {e}")
            continue
        except Exception as e:
            log.warning(
                f"[llms_docsets] skipping {pathname} in '{doc_set.title}': "
                f"{type(e).__name__}: {e}"
            )
            continue
        entries.append(entry.render())

    return separator.join(entries)


def write_doc_set(
    doc_set: DocSet,
    pathnames: Iterable[str],
    site_files: SiteFiles,
    separator: str = DEFAULT_PAGE_SEPARATOR,
) -> Path:
    content = build_bundle(doc_set, pathnames, site_files, separator)
    out_path = site_files.write_text(doc_set.url, content)
    log.info(f"[llms_docsets] DocSet \"{doc_set.title}\" generated at {out_path}")
    return out_path


def doc_set_summary(doc_set: DocSet, site_url: str) -> str:
    return f"- [{doc_set.title}]({absolute_url(doc_set.url, site_url)}): {doc_set.description}"
