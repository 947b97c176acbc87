import json

import pytest

from plugins.llms_docsets.config import (
    DEFAULT_PAGE_SEPARATOR,
    ConfigError,
    DocSet,
    LlmsConfig,
    load_config_file,
    merge_options,
)

DOC_SET = {
    "title": "Complete",
    "description": "All pages",
    "url": "/llms-full.txt",
    "include": ["**"],
}


class TestDocSetValidation:
    def test_defaults(self):
        doc_set = DocSet.from_dict(DOC_SET)
        assert doc_set.promote == []
        assert doc_set.demote == []
        assert doc_set.only_structure is False
        assert doc_set.main_selector == "main"
        assert doc_set.ignore_selectors == []

    def test_all_fields(self):
        doc_set = DocSet.from_dict(
            {
                **DOC_SET,
                "promote": ["/"],
                "demote": ["/impressum/"],
                "only_structure": True,
                "main_selector": "article",
                "ignore_selectors": [".ad", "nav"],
            }
        )
        assert doc_set.promote == ["/"]
        assert doc_set.demote == ["/impressum/"]
        assert doc_set.only_structure is True
        assert doc_set.main_selector == "article"
        assert doc_set.ignore_selectors == [".ad", "nav"]

    @pytest.mark.parametrize("missing", ["title", "url", "include"])
    def test_required_fields(self, missing):
        data = {k: v for k, v in DOC_SET.items() if k != missing}
        with pytest.raises(ConfigError, match=missing):
            DocSet.from_dict(data)

    def test_empty_include_rejected(self):
        with pytest.raises(ConfigError, match="include"):
            DocSet.from_dict({**DOC_SET, "include": []})

    def test_pattern_list_must_be_list(self):
        with pytest.raises(ConfigError, match="promote"):
            DocSet.from_dict({**DOC_SET, "promote": "/"})

    def test_pattern_entries_must_be_strings(self):
        with pytest.raises(ConfigError, match="demote"):
            DocSet.from_dict({**DOC_SET, "demote": ["/a/", 3]})

    def test_only_structure_must_be_bool(self):
        with pytest.raises(ConfigError, match="only_structure"):
            DocSet.from_dict({**DOC_SET, "only_structure": "yes"})

    def test_invalid_selector_rejected(self):
        with pytest.raises(ConfigError, match="selector"):
            DocSet.from_dict({**DOC_SET, "ignore_selectors": ["div[["]})


class TestLlmsConfig:
    def test_separator_default(self):
        assert LlmsConfig.from_dict({"title": "T"}).page_separator == DEFAULT_PAGE_SEPARATOR
        assert LlmsConfig.from_dict({"title": "T", "page_separator": ""}).page_separator == DEFAULT_PAGE_SEPARATOR

    def test_nested_values(self):
        config = LlmsConfig.from_dict(
            {
                "title": "T",
                "optional_links": [{"label": "Maps", "url": "https://maps.example.com"}],
                "doc_sets": [DOC_SET],
                "localized_sections": {"/de/": "German Pages"},
            }
        )
        assert config.optional_links[0].label == "Maps"
        assert config.optional_links[0].description is None
        assert config.doc_sets[0].title == "Complete"
        assert config.localized_sections == {"de": "German Pages"}

    def test_title_required(self):
        with pytest.raises(ConfigError, match="title"):
            LlmsConfig.from_dict({"doc_sets": [DOC_SET]})

    def test_invalid_doc_set_surfaces(self):
        with pytest.raises(ConfigError):
            LlmsConfig.from_dict({"title": "T", "doc_sets": [{"title": "Broken"}]})

    def test_localized_sections_must_be_mapping(self):
        with pytest.raises(ConfigError, match="localized_sections"):
            LlmsConfig.from_dict({"title": "T", "localized_sections": ["de"]})


class TestConfigFile:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "llms.yml"
        path.write_text("title: Praxis\ndoc_sets:\n  - title: All\n    url: /all.txt\n    include: ['**']\n", encoding="utf-8")
        data = load_config_file(path)
        assert data["title"] == "Praxis"
        assert data["doc_sets"][0]["include"] == ["**"]

    def test_load_json(self, tmp_path):
        path = tmp_path / "llms_config.json"
        path.write_text(json.dumps({"title": "Praxis"}), encoding="utf-8")
        assert load_config_file(path) == {"title": "Praxis"}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "llms.yml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_file(tmp_path / "nope.yml")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{ not valid json ", encoding="utf-8")
        with pytest.raises(ConfigError, match="unable to parse"):
            load_config_file(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_merge_prefers_non_empty_plugin_options(self):
        merged = merge_options(
            {"title": "From file", "notes": "file notes"},
            {"title": "From mkdocs.yml", "notes": "", "doc_sets": []},
        )
        assert merged == {"title": "From mkdocs.yml", "notes": "file notes"}
