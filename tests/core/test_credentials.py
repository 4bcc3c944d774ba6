"""
Tests for credential management.
"""

import pytest
from unittest.mock import patch

from iconship.core.credentials import get_credential, get_feed_token
from iconship.core.error_handler import ConfigurationError

class TestCredentials:
    """
    Tests for the credentials module.
    """

    def test_get_credential(self):
        """
        Test reading a credential from the environment.
        """
        with patch.dict("os.environ", {"ICONSHIP_TEST_SECRET": "  value  "}):
            assert get_credential("ICONSHIP_TEST_SECRET") == "value"

    def test_missing_required_credential(self):
        """
        Test that a missing required credential raises ConfigurationError.
        """
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ConfigurationError) as excinfo:
                get_credential("ICONSHIP_TEST_SECRET")

        assert excinfo.value.component == "credentials"
        assert excinfo.value.missing_keys == ["ICONSHIP_TEST_SECRET"]

    def test_missing_optional_credential(self):
        """
        Test that a missing optional credential returns None.
        """
        with patch.dict("os.environ", {"ICONSHIP_TEST_SECRET": "   "}, clear=True):
            assert get_credential("ICONSHIP_TEST_SECRET", required=False) is None

    def test_get_feed_token(self):
        """
        Test reading the artifact feed token.
        """
        with patch.dict("os.environ", {"ICONSHIP_FEED_TOKEN": "pat-123"}):
            assert get_feed_token() == "pat-123"

        with patch.dict("os.environ", {}, clear=True):
            assert get_feed_token(required=False) is None
            with pytest.raises(ConfigurationError):
                get_feed_token()
