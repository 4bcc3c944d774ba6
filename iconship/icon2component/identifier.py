"""
Identifier derivation.

Turns an asset file name such as "arrow-left.svg" into the PascalCase name
("ArrowLeft") used both as the component symbol and as the base of its file
names, and guards against two assets of one run mapping to the same name.
"""

import re
from typing import Dict, Optional

from iconship.core.constants import (
    COLLISION_POLICY_FAIL,
    SUPPORTED_COLLISION_POLICIES,
    DEFAULT_COLLISION_POLICY,
    SVG_EXTENSION,
)
from iconship.core.error_handler import ConfigurationError, GenerationError
from iconship.core.logging_config import get_logger

logger = get_logger(__name__)

_EXTENSION_PATTERN = re.compile(rf"(?:{re.escape(SVG_EXTENSION)})+$", re.IGNORECASE)
_SEPARATOR_PATTERN = re.compile(r"[-_\s]+(.)?")


def derive(name: str) -> str:
    """
    Derive the PascalCase identifier for an asset name.

    Each run of hyphens, underscores or whitespace is dropped and the
    character after it upper-cased, the ".svg" suffix is stripped and the
    first character is upper-cased. Any other character passes through.
    Stripping last keeps derive(derive(name)) == derive(name).

    Args:
        name (str): Raw asset file name

    Returns:
        str: The identifier
    """
    base = _SEPARATOR_PATTERN.sub(lambda match: (match.group(1) or "").upper(), name)
    base = _EXTENSION_PATTERN.sub("", base)
    return base[:1].upper() + base[1:]


class IdentifierRegistry:
    """
    Hands out identifiers for the assets of one run and detects collisions.

    With the "fail" policy a second asset deriving to an identifier already
    handed out raises GenerationError. With the "suffix" policy it receives
    the identifier followed by the smallest number >= 2 that is still free.
    """

    def __init__(self, policy: str = DEFAULT_COLLISION_POLICY):
        if policy not in SUPPORTED_COLLISION_POLICIES:
            raise ConfigurationError(
                f"Unknown collision policy '{policy}'. Supported: {', '.join(SUPPORTED_COLLISION_POLICIES)}",
                component="identifier"
            )
        self.policy = policy
        self._owners: Dict[str, str] = {}

    def register(self, name: str) -> str:
        """
        Derive and reserve the identifier for an asset name.

        Args:
            name (str): Raw asset file name

        Returns:
            str: A run-unique identifier

        Raises:
            GenerationError: If the name yields an empty identifier, or on a
                collision under the "fail" policy
        """
        identifier = derive(name)

        if not identifier:
            raise GenerationError(f"Asset name '{name}' does not yield an identifier", asset_name=name)

        if identifier not in self._owners:
            self._owners[identifier] = name
            return identifier

        owner = self._owners[identifier]

        if self.policy == COLLISION_POLICY_FAIL:
            raise GenerationError(
                f"Assets '{owner}' and '{name}' both map to identifier '{identifier}'",
                asset_name=name
            )

        candidate = self._next_free(identifier)
        logger.warning(
            f"Identifier '{identifier}' of '{name}' is already used by '{owner}', using '{candidate}'"
        )
        self._owners[candidate] = name
        return candidate

    def owner_of(self, identifier: str) -> Optional[str]:
        return self._owners.get(identifier)

    def _next_free(self, identifier: str) -> str:
        counter = 2
        while f"{identifier}{counter}" in self._owners:
            counter += 1
        return f"{identifier}{counter}"
