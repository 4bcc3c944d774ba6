"""
Tests for identifier derivation.
"""

import pytest

from iconship.core.error_handler import ConfigurationError, GenerationError
from iconship.icon2component.identifier import derive, IdentifierRegistry

class TestDerive:
    """
    Tests for the derive function.
    """

    @pytest.mark.parametrize("name,expected", [
        ("arrow-left.svg", "ArrowLeft"),
        ("arrow_left.svg", "ArrowLeft"),
        ("arrow left.svg", "ArrowLeft"),
        ("home.svg", "Home"),
        ("home", "Home"),
        ("chevron--double__right.svg", "ChevronDoubleRight"),
        ("my  icon\tname.svg", "MyIconName"),
        ("Icon.SVG", "Icon"),
        ("icon.svg.svg", "Icon"),
        ("arrow-1.svg", "Arrow1"),
        ("-leading.svg", "Leading"),
        ("trailing-.svg", "Trailing"),
        ("alreadyPascal.svg", "AlreadyPascal"),
        ("@scope.svg", "@scope"),
        ("", ""),
    ])
    def test_derive(self, name, expected):
        """
        Test the derived identifier for a range of names.
        """
        assert derive(name) == expected

    @pytest.mark.parametrize("name", [
        "arrow-left.svg",
        "a.sv-g",
        "x_.svg",
        "foo-.svg.svg",
        "1-icon.svg",
        "@scope.svg",
    ])
    def test_derive_is_idempotent(self, name):
        """
        Test that deriving an identifier again does not change it.
        """
        identifier = derive(name)
        assert derive(identifier) == identifier


class TestIdentifierRegistry:
    """
    Tests for the IdentifierRegistry class.
    """

    def test_unique_names(self):
        """
        Test that distinct identifiers are handed out unchanged.
        """
        registry = IdentifierRegistry()

        assert registry.register("arrow-left.svg") == "ArrowLeft"
        assert registry.register("arrow-right.svg") == "ArrowRight"
        assert registry.owner_of("ArrowLeft") == "arrow-left.svg"
        assert registry.owner_of("Missing") is None

    @pytest.mark.parametrize("name", [".svg", "-.svg", "__", " .svg.svg"])
    def test_empty_identifier_rejected(self, name):
        """
        Test that a name with nothing left after derivation is rejected.
        """
        registry = IdentifierRegistry("suffix")

        with pytest.raises(GenerationError) as excinfo:
            registry.register(name)

        assert excinfo.value.asset_name == name
        assert registry.owner_of("") is None

    def test_collision_fails_by_default(self):
        """
        Test that a collision raises GenerationError under the fail policy.
        """
        registry = IdentifierRegistry("fail")
        registry.register("arrow-left.svg")

        with pytest.raises(GenerationError) as excinfo:
            registry.register("arrow_left.svg")

        assert excinfo.value.asset_name == "arrow_left.svg"
        assert "arrow-left.svg" in excinfo.value.message
        assert "ArrowLeft" in excinfo.value.message

    def test_collision_suffix_policy(self):
        """
        Test that the suffix policy appends the smallest free number.
        """
        registry = IdentifierRegistry("suffix")

        assert registry.register("arrow-left.svg") == "ArrowLeft"
        assert registry.register("arrow_left.svg") == "ArrowLeft2"
        assert registry.register("arrow left.svg") == "ArrowLeft3"
        assert registry.owner_of("ArrowLeft2") == "arrow_left.svg"

    def test_suffix_skips_taken_names(self):
        """
        Test that a suffix already taken by a real asset is skipped.
        """
        registry = IdentifierRegistry("suffix")

        registry.register("icon.svg")
        registry.register("icon2.svg")

        assert registry.register("icon.svg") == "Icon3"

    def test_unknown_policy(self):
        """
        Test that an unknown policy is a configuration error.
        """
        with pytest.raises(ConfigurationError):
            IdentifierRegistry("overwrite")
