"""
Naming utilities for safe code generation.

Handles case conversion, qualified-name construction for renamed fields
and identifier checks for the target language.
"""

import re
from enum import Enum
from typing import Iterable, Optional, Sequence, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName


_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class NameSanitizer:
    """Handles case conversion and identifier checks for one target language."""

    def __init__(self, reserved_words: Optional[Set[str]] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
        """
        self.reserved_words = reserved_words or set()

    def convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return self._to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return self._to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return self._to_pascal_case(name)
        raise ValueError(f"Unhandled naming case: {target_case}")

    def qualify(self, parts: Sequence[str], target_case: NamingCase) -> str:
        """
        Join name parts into one qualified name.

        ``("address", "city")`` becomes ``address_city`` in snake case,
        ``addressCity`` in camel case and ``AddressCity`` in pascal case.
        """
        joined = "_".join(self._to_snake_case(p) for p in parts if p)
        return self.convert_case(joined, target_case)

    def unique_name(self, base: str, used: Iterable[str]) -> str:
        """Append the smallest numeric suffix that makes ``base`` unused."""
        taken = set(used)
        if base not in taken:
            return base

        counter = 2
        while f"{base}{counter}" in taken:
            counter += 1
        return f"{base}{counter}"

    def is_valid_identifier(self, name: str) -> bool:
        """Whether ``name`` can be used unquoted as a property or type name."""
        return bool(_IDENTIFIER.match(name))

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        # Replace hyphens and spaces with underscores
        name = re.sub(r"[-\s]+", "_", name)

        # Insert underscore before uppercase letters
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)

        # Convert to lowercase and clean up multiple underscores
        name = name.lower()
        name = re.sub(r"_+", "_", name)

        return name.strip("_")

    def _to_camel_case(self, name: str) -> str:
        """Convert to camelCase."""
        snake = self._to_snake_case(name)
        parts = [p for p in snake.split("_") if p]

        if not parts:
            return name

        # First part lowercase, rest title case
        return parts[0].lower() + "".join(part.capitalize() for part in parts[1:])

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        snake = self._to_snake_case(name)
        return "".join(part.capitalize() for part in snake.split("_") if part)
