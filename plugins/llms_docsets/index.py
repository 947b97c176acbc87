import logging
from typing import Dict, Iterable, List, Mapping, Optional

from plugins.llms_docsets.config import LlmsConfig
from plugins.llms_docsets.docsets import absolute_url
from plugins.llms_docsets.extractor import read_page_meta
from plugins.llms_docsets.ranker import collation_key
from plugins.llms_docsets.site_files import SiteFiles

log = logging.getLogger("mkdocs.plugins.llms_docsets")


def _segments(pathname: str) -> List[str]:
    return [s for s in pathname.split("/") if s]


def group_title(pathname: str, localized_sections: Mapping[str, str] = None) -> str:
    """
    Group a page under its parent path: "/a/b/c/" -> "a/b". A first segment
    listed in `localized_sections` is replaced by its display label.
    """
    parents = _segments(pathname)[:-1]
    if parents and localized_sections and parents[0] in localized_sections:
        parents[0] = localized_sections[parents[0]]
    return "/".join(parents)


def is_localized(pathname: str, localized_sections: Mapping[str, str] = None) -> bool:
    parents = _segments(pathname)[:-1]
    return bool(parents and localized_sections and parents[0] in localized_sections)


def page_sort_key(pathname: str, localized_sections: Mapping[str, str] = None):
    # localized groups after everything else, then by group, then by path
    return (
        is_localized(pathname, localized_sections),
        collation_key(group_title(pathname, localized_sections)),
        collation_key(pathname),
    )


def group_heading(group: str) -> str:
    parts = group.split("/")
    words = parts[-1].replace("-", " ").split(" ")
    label = " ".join(word[:1].upper() + word[1:] for word in words)
    return f"\n##{'#' * len(parts)} {label}\n"


def build_pages_section(
    pathnames: Iterable[str],
    site_files: SiteFiles,
    site_url: str,
    localized_sections: Mapping[str, str] = None,
) -> List[str]:
    lines: List[str] = []
    prev_group = ""

    ordered = sorted(set(pathnames), key=lambda pn: page_sort_key(pn, localized_sections))
    for pathname in ordered:
        try:
            html = site_files.read_page(pathname)
            if html is None:
                log.debug(f"[llms_docsets] no rendered HTML for {pathname}; left out of index")
                continue
            title, description = read_page_meta(html, fallback=pathname)
        except Exception as e:
            log.warning(f"[llms_docsets] left {pathname} out of index: {type(e).__name__}: {e}")
            continue

        group = group_title(pathname, localized_sections)
        if group != prev_group:
            lines.append(group_heading(group))
            prev_group = group

        line = f"- [{title}]({absolute_url(pathname, site_url)})"
        lines.append(f"{line}: {description}" if description else line)

    return lines


def build_index(
    config: LlmsConfig,
    doc_set_lines: List[str],
    pathnames: Iterable[str],
    site_files: SiteFiles,
    site_url: str = "",
) -> str:
    """Assemble the generated part of llms.txt."""
    pathnames = list(pathnames)
    lines: List[str] = []

    if doc_set_lines:
        lines.append("## Documentation Sets\n\n" + "\n".join(doc_set_lines))

    if pathnames:
        lines.append("\n## Pages\n")
        lines.extend(
            build_pages_section(pathnames, site_files, site_url, config.localized_sections)
        )

    if config.notes:
        lines.append("\n## Notes\n\n" + config.notes)

    if config.optional_links:
        links = []
        for link in config.optional_links:
            entry = f"- [{link.label}]({absolute_url(link.url, site_url)})"
            links.append(f"{entry}: {link.description}" if link.description else entry)
        lines.append("\n## Optional\n\n" + "\n".join(links))

    return "\n".join(line for line in lines if line)


def render_header(config: LlmsConfig) -> str:
    """llms.txt header block: title, quoted description, details."""
    parts = [f"# {config.title}"]
    if config.description:
        parts.append(f"> {config.description}")
    if config.details:
        parts.append(config.details.strip())
    return "\n\n".join(parts)


def inject_index(
    site_files: SiteFiles,
    index_file: str,
    placeholder: str,
    index_text: str,
    extra: Optional[Dict[str, str]] = None,
) -> None:
    """
    Substitute the generated index into the pre-existing index file.

    Raises FileNotFoundError if the file is missing. `extra` maps further
    optional tokens to their text.
    """
    content = site_files.read_text(index_file)

    if placeholder not in content:
        log.warning(f"[llms_docsets] placeholder {placeholder} not found in {index_file}")
    content = content.replace(placeholder, index_text, 1)

    for token, value in (extra or {}).items():
        content = content.replace(token, value, 1)

    site_files.write_text(index_file, content)
    log.info(f"[llms_docsets] {index_file} generated")
