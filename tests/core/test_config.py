"""
Tests for configuration management.

This module tests loading, merging and accessing configuration values.
"""

import os
import json
import tempfile
import pytest
from unittest.mock import patch

import iconship.core.config as config_module
from iconship.core.config import (
    get_config,
    load_config,
    deep_merge,
    get_config_value,
    set_config_value
)

class TestConfig:
    """
    Tests for the config module.
    """

    def setup_method(self):
        """
        Set up test environment.
        """
        self.temp_dir = tempfile.TemporaryDirectory()
        self.user_config_path = os.path.join(self.temp_dir.name, "config.json")

        self.path_patcher = patch.object(config_module, "USER_CONFIG_PATH", self.user_config_path)
        self.path_patcher.start()
        config_module._config_cache = {}

    def teardown_method(self):
        """
        Clean up test environment.
        """
        self.path_patcher.stop()
        config_module._config_cache = {}
        self.temp_dir.cleanup()

    def test_default_config(self):
        """
        Test that the default configuration is loaded without a user file.
        """
        config = load_config()

        assert config["icon_service"]["base_url"] == "http://localhost:8088"
        assert config["feed"]["name"] == "NPM"
        assert config["package"]["version"] == "1.0.0"
        assert config["package"]["peer_requirements"] == {"react": ">= 16", "react-dom": ">= 16"}
        assert config["pipeline"]["collision_policy"] == "fail"
        assert config["server"]["port"] == 1000

    def test_user_config_is_deep_merged(self):
        """
        Test that a user file only overrides the keys it contains.
        """
        with open(self.user_config_path, "w") as f:
            json.dump({"feed": {"organization_url": "https://pkgs.example.com/org/"}}, f)

        config = load_config()

        assert config["feed"]["organization_url"] == "https://pkgs.example.com/org/"
        assert config["feed"]["name"] == "NPM"
        assert config["feed"]["upload_timeout"] == 120

    def test_deep_merge(self):
        """
        Test recursive merging of dictionaries.
        """
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        deep_merge(base, {"a": {"c": 20}, "d": {"e": 4}})

        assert base == {"a": {"b": 1, "c": 20}, "d": {"e": 4}}

    def test_get_config_value(self):
        """
        Test dot notation access and defaults.
        """
        assert get_config_value("fetcher.max_workers") == 8
        assert get_config_value("feed") == get_config()["feed"]
        assert get_config_value("nonexistent.key", "default-value") == "default-value"
        assert get_config_value("package.version.major", "x") == "x"

    def test_get_config_is_cached(self):
        """
        Test that the configuration is only loaded once unless reloaded.
        """
        first = get_config()

        with open(self.user_config_path, "w") as f:
            json.dump({"package": {"version": "2.0.0"}}, f)

        assert get_config() is first
        assert get_config(reload=True)["package"]["version"] == "2.0.0"

    def test_set_config_value_without_saving(self):
        """
        Test runtime overrides that are not written to disk.
        """
        set_config_value("pipeline.work_dir", "/tmp/iconship-test", save=False)

        assert get_config_value("pipeline.work_dir") == "/tmp/iconship-test"
        assert not os.path.exists(self.user_config_path)

    def test_set_config_value_with_saving(self):
        """
        Test that saved overrides end up in the user configuration file.
        """
        set_config_value("feed.project", "Artifactory")

        with open(self.user_config_path) as f:
            saved = json.load(f)

        assert saved["feed"]["project"] == "Artifactory"
        assert get_config_value("feed.project") == "Artifactory"
