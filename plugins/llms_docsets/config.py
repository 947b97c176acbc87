import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import soupsieve
import yaml

DEFAULT_PAGE_SEPARATOR = "\n\n---\n\n"
DEFAULT_MAIN_SELECTOR = "main"


class ConfigError(ValueError):
    """Raised when the llms configuration is malformed."""


def _require_str(data: Dict[str, Any], key: str, owner: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{owner}: '{key}' is required and must be a non-empty string")
    return value


def _optional_str(data: Dict[str, Any], key: str, owner: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{owner}: '{key}' must be a string")
    return value


def _pattern_list(data: Dict[str, Any], key: str, owner: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{owner}: '{key}' must be a list of glob patterns")
    for item in value:
        if not isinstance(item, str) or not item:
            raise ConfigError(f"{owner}: '{key}' contains an invalid pattern {item!r}")
    return list(value)


def _check_selector(selector: str, owner: str) -> str:
    try:
        soupsieve.compile(selector)
    except soupsieve.SelectorSyntaxError as e:
        raise ConfigError(f"{owner}: invalid CSS selector {selector!r}: {e}") from e
    return selector


@dataclass
class OptionalLink:
    label: str
    url: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OptionalLink":
        if not isinstance(data, dict):
            raise ConfigError(f"optional link must be a mapping, got {data!r}")
        return cls(
            label=_require_str(data, "label", "optional link"),
            url=_require_str(data, "url", "optional link"),
            description=_optional_str(data, "description", "optional link"),
        )


@dataclass
class DocSet:
    """
    A named subset of site pages bundled into one text file.

    ``promote`` and ``demote`` are evaluated against the same page paths as
    ``include``; earlier patterns carry more weight.
    """

    title: str
    description: str
    url: str
    include: List[str]
    promote: List[str] = field(default_factory=list)
    demote: List[str] = field(default_factory=list)
    only_structure: bool = False
    main_selector: str = DEFAULT_MAIN_SELECTOR
    ignore_selectors: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocSet":
        if not isinstance(data, dict):
            raise ConfigError(f"doc set must be a mapping, got {data!r}")

        title = _require_str(data, "title", "doc set")
        owner = f"doc set '{title}'"

        include = _pattern_list(data, "include", owner)
        if not include:
            raise ConfigError(f"{owner}: 'include' must contain at least one pattern")

        only_structure = data.get("only_structure", False)
        if not isinstance(only_structure, bool):
            raise ConfigError(f"{owner}: 'only_structure' must be a boolean")

        main_selector = _optional_str(data, "main_selector", owner) or DEFAULT_MAIN_SELECTOR
        ignore_selectors = _pattern_list(data, "ignore_selectors", owner)

        return cls(
            title=title,
            description=_optional_str(data, "description", owner) or "",
            url=_require_str(data, "url", owner),
            include=include,
            promote=_pattern_list(data, "promote", owner),
            demote=_pattern_list(data, "demote", owner),
            only_structure=only_structure,
            main_selector=_check_selector(main_selector, owner),
            ignore_selectors=[_check_selector(s, owner) for s in ignore_selectors],
        )


@dataclass
class LlmsConfig:
    title: str
    description: Optional[str] = None
    details: Optional[str] = None
    notes: Optional[str] = None
    page_separator: str = DEFAULT_PAGE_SEPARATOR
    optional_links: List[OptionalLink] = field(default_factory=list)
    doc_sets: List[DocSet] = field(default_factory=list)
    # first path segment -> display label, e.g. {"de": "German Pages"}
    localized_sections: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LlmsConfig":
        if not isinstance(data, dict):
            raise ConfigError("llms configuration must be a mapping")

        optional_links = data.get("optional_links") or []
        doc_sets = data.get("doc_sets") or []
        if not isinstance(optional_links, list):
            raise ConfigError("'optional_links' must be a list")
        if not isinstance(doc_sets, list):
            raise ConfigError("'doc_sets' must be a list")

        localized = data.get("localized_sections") or {}
        if not isinstance(localized, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in localized.items()
        ):
            raise ConfigError("'localized_sections' must map path prefixes to labels")

        return cls(
            title=_require_str(data, "title", "llms config"),
            description=_optional_str(data, "description", "llms config"),
            details=_optional_str(data, "details", "llms config"),
            notes=_optional_str(data, "notes", "llms config"),
            page_separator=_optional_str(data, "page_separator", "llms config")
            or DEFAULT_PAGE_SEPARATOR,
            optional_links=[OptionalLink.from_dict(link) for link in optional_links],
            doc_sets=[DocSet.from_dict(doc_set) for doc_set in doc_sets],
            localized_sections={k.strip("/"): v for k, v in localized.items()},
        )


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load an llms config file; JSON for `.json`, YAML otherwise."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"llms_config not found at {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"unable to parse {path}: {e}") from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def merge_options(file_options: Dict[str, Any], plugin_options: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay non-empty plugin options on top of values from the config file."""
    merged = dict(file_options)
    for key, value in plugin_options.items():
        if value not in (None, "", [], {}):
            merged[key] = value
    return merged
