import textwrap
from pathlib import Path

import pytest

from templater.config import RenderOptions, load_options
from templater.errors import ConfigError


def write(path: Path, text: str) -> Path:
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


class TestRenderOptions:

    def test_defaults(self):
        options = RenderOptions()
        assert options.strict is False
        assert options.fatal_scope == "invocation"
        assert options.concurrency == 4
        assert options.asset_id_prefix == "rId"
        assert options.null_getter() == ""

    @pytest.mark.parametrize("kwargs", [
        {"fatal_scope": "document"},
        {"concurrency": 0},
        {"concurrency": True},
        {"concurrency": "2"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            RenderOptions(**kwargs)

    def test_from_dict(self):
        options = RenderOptions.from_dict({
            "strict": True,
            "fatal_scope": "unit",
            "concurrency": 2,
            "asset_id_prefix": "img",
            "null_value": "N/A",
        })
        assert options.strict is True
        assert options.fatal_scope == "unit"
        assert options.concurrency == 2
        assert options.asset_id_prefix == "img"
        assert options.null_getter() == "N/A"

    def test_from_empty_dict(self):
        assert RenderOptions.from_dict(None) == RenderOptions()

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigError, match="Unknown render option"):
            RenderOptions.from_dict({"stricct": True})

    def test_strict_must_be_bool(self):
        with pytest.raises(ConfigError):
            RenderOptions.from_dict({"strict": "yes"})


class TestLoadOptions:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_options(tmp_path / "absent.yaml") == RenderOptions()

    def test_yaml_file(self, tmp_path):
        path = write(tmp_path / "render.yaml", """
            strict: true
            fatal_scope: unit
            concurrency: 8
            null_value: "-"
        """)
        options = load_options(path)
        assert options.strict is True
        assert options.fatal_scope == "unit"
        assert options.concurrency == 8
        assert options.null_getter() == "-"

    def test_empty_file(self, tmp_path):
        assert load_options(write(tmp_path / "render.yaml", "")) == RenderOptions()

    def test_non_mapping_rejected(self, tmp_path):
        path = write(tmp_path / "render.yaml", """
            - strict
            - unit
        """)
        with pytest.raises(ConfigError, match="YAML must be a mapping"):
            load_options(path)
