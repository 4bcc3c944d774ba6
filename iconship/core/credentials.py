"""
Credential management for the artifact feed.

This module reads secrets from the environment only:
- Loading variables from a .env file if one exists
- Reading a credential from the environment
- Failing with a ConfigurationError when a required credential is missing

Secrets are never read from the JSON configuration files and never logged.
"""

import os
from typing import Optional
from dotenv import load_dotenv

from iconship.core.constants import FEED_TOKEN_ENV_VAR
from iconship.core.error_handler import ConfigurationError
from iconship.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()

def get_credential(key: str, required: bool = True) -> Optional[str]:
    """
    Get a credential from environment variables.

    Args:
        key (str): Environment variable name
        required (bool): Whether the credential is required

    Returns:
        Optional[str]: The credential value or None if not required and not found

    Raises:
        ConfigurationError: If the credential is required but not set
    """
    value = os.environ.get(key, "").strip()

    if not value:
        if required:
            logger.error(f"Required credential {key} is not set")
            raise ConfigurationError(
                f"Required credential {key} is not set",
                component="credentials",
                missing_keys=[key]
            )
        return None

    return value

def get_feed_token(required: bool = True) -> Optional[str]:
    """
    Get the personal access token used to upload to the artifact feed.

    Args:
        required (bool): Whether a missing token is an error

    Returns:
        Optional[str]: The access token

    Raises:
        ConfigurationError: If the token is required but not set
    """
    return get_credential(FEED_TOKEN_ENV_VAR, required=required)
