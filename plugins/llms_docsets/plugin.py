import logging
from pathlib import Path
from typing import Iterable, List, Optional

from mkdocs.config import config_options as c
from mkdocs.exceptions import PluginError
from mkdocs.plugins import BasePlugin

from plugins.llms_docsets.config import (
    ConfigError,
    LlmsConfig,
    load_config_file,
    merge_options,
)
from plugins.llms_docsets.docsets import doc_set_summary, write_doc_set
from plugins.llms_docsets.index import build_index, inject_index, render_header
from plugins.llms_docsets.site_files import SiteFiles

log = logging.getLogger("mkdocs.plugins.llms_docsets")

# Plugin options that describe the llms.txt content (as opposed to file names).
CONTENT_KEYS = (
    "title",
    "description",
    "details",
    "notes",
    "page_separator",
    "optional_links",
    "doc_sets",
    "localized_sections",
)


class LlmsDocSetsPlugin(BasePlugin):
    """MkDocs plugin that writes doc set bundles and fills in llms.txt.

    Runs once in ``on_post_build``, after every page has been rendered to
    ``site_dir``. Pages are taken from ``on_post_page``; their content is
    read back from the rendered HTML, never from the Markdown sources.

    Configuration options (all optional, may also come from ``llms_config``):
    - llms_config (str): YAML/JSON file, relative to mkdocs.yml, holding the
      options below. Values set in mkdocs.yml win.
    - title, description, details (str): llms.txt header.
    - notes (str): free text for the "Notes" section.
    - page_separator (str): joins pages inside a bundle.
    - optional_links (list): ``{label, url, description}`` mappings.
    - doc_sets (list): ``{title, description, url, include, promote, demote,
      only_structure, main_selector, ignore_selectors}`` mappings.
    - localized_sections (dict): first path segment -> heading label; those
      groups are listed after all others.
    - index_file (str): pre-existing index file inside site_dir.
    - placeholder (str): token in ``index_file`` replaced by the index.
    - header_placeholder (str): token replaced by the header block.
    """

    config_scheme = (
        ("llms_config", c.Type(str, default="")),
        ("title", c.Type(str, default="")),
        ("description", c.Type(str, default="")),
        ("details", c.Type(str, default="")),
        ("notes", c.Type(str, default="")),
        ("page_separator", c.Type(str, default="")),
        ("optional_links", c.Type(list, default=[])),
        ("doc_sets", c.Type(list, default=[])),
        ("localized_sections", c.Type(dict, default={})),
        ("index_file", c.Type(str, default="llms.txt")),
        ("placeholder", c.Type(str, default="{generatedLLMS}")),
        ("header_placeholder", c.Type(str, default="{llmsHeader}")),
    )

    def __init__(self):
        super().__init__()
        self.llms: Optional[LlmsConfig] = None
        self.site_url = ""
        self._pages: List[str] = []

    def on_config(self, config, **kwargs):
        config_file_path = config.get("config_file_path")
        project_root = Path(config_file_path).resolve().parent if config_file_path else Path.cwd()

        file_options = {}
        if self.config["llms_config"]:
            try:
                file_options = load_config_file(project_root / self.config["llms_config"])
            except (FileNotFoundError, ConfigError) as e:
                raise PluginError(f"[llms_docsets] {e}") from e

        plugin_options = {key: self.config[key] for key in CONTENT_KEYS}
        try:
            self.llms = LlmsConfig.from_dict(merge_options(file_options, plugin_options))
        except ConfigError as e:
            raise PluginError(f"[llms_docsets] invalid configuration: {e}") from e

        self.site_url = config.get("site_url") or ""
        log.debug(f"[llms_docsets] configured {len(self.llms.doc_sets)} doc sets")
        return config

    def on_pre_build(self, config, **kwargs):
        self._pages = []

    def on_post_page(self, output, page, config, **kwargs):
        url = page.url or ""
        if url and not url.endswith("/"):
            # bundles are read from <path>/index.html; needs use_directory_urls
            log.debug(f"[llms_docsets] {url} is not a directory URL; skipping")
            return output
        self._pages.append("/" + url.lstrip("/"))
        return output

    def on_post_build(self, config, **kwargs):
        self.generate(config["site_dir"], self._pages, self.site_url)

    def generate(self, site_dir, pathnames: Iterable[str], site_url: str = "") -> str:
        """Write every doc set bundle, then inject the index into ``index_file``.

        Returns the generated index text. A failing doc set is logged and left
        out of the index; a missing ``index_file`` fails the build.
        """
        if self.llms is None:
            raise PluginError("[llms_docsets] plugin used before on_config")

        site_files = SiteFiles(site_dir)
        pathnames = list(dict.fromkeys(pathnames))

        summaries: List[str] = []
        for doc_set in self.llms.doc_sets:
            try:
                write_doc_set(doc_set, pathnames, site_files, self.llms.page_separator)
            except (OSError, ValueError) as e:
                log.error(f"[llms_docsets] failed to write DocSet \"{doc_set.title}\": {e}")
                continue
            summaries.append(doc_set_summary(doc_set, site_url))

        index_text = build_index(self.llms, summaries, pathnames, site_files, site_url)

        try:
            inject_index(
                site_files,
                self.config["index_file"],
                self.config["placeholder"],
                index_text,
                extra={self.config["header_placeholder"]: render_header(self.llms)},
            )
        except FileNotFoundError as e:
            raise PluginError(f"[llms_docsets] cannot generate {self.config['index_file']}: {e}") from e

        return index_text
