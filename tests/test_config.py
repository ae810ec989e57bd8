"""Tests for configuration loading and validation."""

import pytest

from cyclomap.config import AnalysisConfig, Colorscale, load_config
from cyclomap.exceptions import ConfigFileError, ConfigurationError, InvalidConfigError


class TestAnalysisConfig:
    def test_defaults(self):
        config = AnalysisConfig()
        assert ".c" in config.extensions and ".hpp" in config.extensions
        assert config.default_policy == "keyword"
        assert config.colorscale is Colorscale.BLUES
        assert config.size_metric == "lines"

    def test_extensions_are_normalized(self):
        config = AnalysisConfig(extensions=("C", ".Cpp"))
        assert config.extensions == (".c", ".cpp")
        assert config.is_supported("dir/main.CPP")
        assert not config.is_supported("Makefile")

    def test_policy_lookup(self):
        config = AnalysisConfig(policies={"c": "return"})
        assert config.policies == {".c": "return"}
        assert config.policy_for("src/x.c") == "return"
        assert config.policy_for(".C") == "return"
        assert config.policy_for("src/x.cc") == "keyword"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"policies": {".c": "lines"}},
            {"default_policy": "fast"},
            {"size_metric": "bytes"},
            {"verbosity": "loud"},
            {"workers": 0},
            {"max_file_size_mb": 0},
            {"extensions": ()},
            {"colorscale": "rainbow"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            AnalysisConfig(**kwargs)

    def test_colorscale_parse_is_case_insensitive(self):
        assert Colorscale.parse("viridis") is Colorscale.VIRIDIS
        assert Colorscale.parse("YLORRD") is Colorscale.YLORRD
        assert AnalysisConfig(colorscale="reds").colorscale is Colorscale.REDS


class TestLoadConfig:
    def test_defaults_without_files(self, isolated_config):
        assert load_config() == AnalysisConfig()

    def test_project_file(self, isolated_config):
        (isolated_config / "cyclomap.toml").write_text(
            'colorscale = "Greens"\nworkers = 2\n\n[policies]\n".c" = "return"\n'
        )
        config = load_config()
        assert config.colorscale is Colorscale.GREENS
        assert config.workers == 2
        assert config.policy_for("a.c") == "return"

    def test_explicit_file_overrides_project_file(self, isolated_config):
        (isolated_config / "cyclomap.toml").write_text("workers = 2\n")
        explicit = isolated_config / "custom.toml"
        explicit.write_text("workers = 6\n")
        assert load_config(config_file=explicit).workers == 6

    def test_missing_explicit_file(self, isolated_config):
        with pytest.raises(ConfigFileError):
            load_config(config_file=isolated_config / "missing.toml")

    def test_unknown_key(self, isolated_config):
        (isolated_config / "cyclomap.toml").write_text("bogus = 1\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_invalid_toml(self, isolated_config):
        (isolated_config / "cyclomap.toml").write_text("workers = \n")
        with pytest.raises(ConfigFileError):
            load_config()

    def test_environment_variables(self, isolated_config, monkeypatch):
        monkeypatch.setenv("CYCLOMAP_WORKERS", "3")
        monkeypatch.setenv("CYCLOMAP_FOLLOW_SYMLINKS", "yes")
        monkeypatch.setenv("CYCLOMAP_SIZE_METRIC", "code")
        config = load_config()
        assert config.workers == 3
        assert config.follow_symlinks is True
        assert config.size_metric == "code"

    def test_bad_environment_value(self, isolated_config, monkeypatch):
        monkeypatch.setenv("CYCLOMAP_WORKERS", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_overrides_win_and_none_is_ignored(self, isolated_config, monkeypatch):
        monkeypatch.setenv("CYCLOMAP_WORKERS", "3")
        config = load_config(workers=5, colorscale=None)
        assert config.workers == 5
        assert config.colorscale is Colorscale.BLUES

    def test_policy_overrides_merge(self, isolated_config):
        (isolated_config / "cyclomap.toml").write_text('[policies]\n".c" = "return"\n')
        config = load_config(policies={".h": "return"})
        assert config.policies == {".c": "return", ".h": "return"}

    def test_verbosity_flags(self, isolated_config):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
