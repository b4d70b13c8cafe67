"""
Configuration Unit Tests
========================
"""

import pytest

from pdp11_symtab.config import SymtabConfig, get_default_config, set_default_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "PDP11_SYMTAB_STRICT_MAGIC",
        "PDP11_SYMTAB_MAX_NAME_LENGTH",
        "PDP11_SYMTAB_SOURCE_SUFFIX",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSymtabConfig:
    """Tests for SymtabConfig and its environment overrides."""

    def test_defaults(self):
        config = SymtabConfig()
        assert config.strict_magic is True
        assert config.max_name_length == 4096
        assert config.source_suffix == ".s"

    def test_from_env_defaults(self, clean_env):
        assert SymtabConfig.from_env() == SymtabConfig()

    @pytest.mark.parametrize("value, expected", [
        ("0", False),
        ("false", False),
        ("No", False),
        ("off", False),
        ("1", True),
        ("yes", True),
    ])
    def test_strict_magic(self, clean_env, value, expected):
        clean_env.setenv("PDP11_SYMTAB_STRICT_MAGIC", value)
        assert SymtabConfig.from_env().strict_magic is expected

    def test_max_name_length(self, clean_env):
        clean_env.setenv("PDP11_SYMTAB_MAX_NAME_LENGTH", "64")
        assert SymtabConfig.from_env().max_name_length == 64

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_max_name_length_ignored(self, clean_env, value):
        clean_env.setenv("PDP11_SYMTAB_MAX_NAME_LENGTH", value)
        assert SymtabConfig.from_env().max_name_length == 4096

    def test_source_suffix(self, clean_env):
        clean_env.setenv("PDP11_SYMTAB_SOURCE_SUFFIX", "asm")
        assert SymtabConfig.from_env().source_suffix == ".asm"
        clean_env.setenv("PDP11_SYMTAB_SOURCE_SUFFIX", ".c")
        assert SymtabConfig.from_env().source_suffix == ".c"


class TestDefaultConfig:
    """Tests for the process-wide default."""

    def test_set_and_get(self):
        config = SymtabConfig(max_name_length=10)
        set_default_config(config)
        assert get_default_config() is config

    def test_reset_reads_environment(self, clean_env):
        clean_env.setenv("PDP11_SYMTAB_STRICT_MAGIC", "off")
        set_default_config(None)
        assert get_default_config().strict_magic is False
