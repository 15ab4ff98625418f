from __future__ import annotations

import pytest

from md2html.core import config as core_config


def test_load_toml_reads_tables(tmp_path):
    path = tmp_path / "c.toml"
    path.write_text('[document]\ntitle = "x"\n', encoding="utf-8")

    assert core_config.load_toml(path) == {"document": {"title": "x"}}


@pytest.mark.parametrize(
    ("setup", "message"),
    [
        (lambda p: None, "not found"),
        (lambda p: p.mkdir(), "is a directory"),
        (lambda p: p.write_text("[oops", encoding="utf-8"), "Failed to parse"),
        (lambda p: p.write_bytes(b"title = '\xff'\n"), "not UTF-8"),
    ],
)
def test_load_toml_errors(tmp_path, setup, message):
    path = tmp_path / "c.toml"
    setup(path)

    with pytest.raises(core_config.TomlConfigError, match=message):
        core_config.load_toml(path)


def test_overlay_defaults_replaces_leaf_values():
    defaults = {
        "document": {"title": "", "lang": "en"},
        "logging": {"level": "INFO"},
    }

    core_config.overlay_defaults(defaults, {"document": {"title": "T"}})

    assert defaults == {
        "document": {"title": "T", "lang": "en"},
        "logging": {"level": "INFO"},
    }


def test_overlay_defaults_reports_every_unknown_key():
    defaults = {"document": {"title": ""}, "logging": {"level": "INFO"}}

    with pytest.raises(core_config.TomlConfigError) as excinfo:
        core_config.overlay_defaults(
            defaults,
            {"document": {"colour": "red"}, "theme": {}, "logging": {}},
        )

    assert str(excinfo.value) == (
        "Unknown configuration key(s): document.colour, theme."
    )


def test_overlay_defaults_requires_tables():
    defaults = {"document": {"title": ""}}

    with pytest.raises(
        core_config.TomlConfigError, match="'document' must be a table"
    ):
        core_config.overlay_defaults(defaults, {"document": "flat"})
