"""Interface for presenting lookup results to the user.

Defines the contract for displaying profiles, raw output, errors, warnings
and informational messages, allowing different UI implementations
(e.g., rich console, plain JSON).
"""

import abc
from typing import Any

from tierlookup.domain.models.profile import ProfileResult


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_profile(self, profile: ProfileResult, from_cache: bool = False, **kwargs: Any) -> None:
        """Displays a shaped player profile.

        Args:
            profile: The profile to render.
            from_cache: Whether the profile was served from the cache.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_output(self, output: str, **kwargs: Any) -> None:
        """Displays raw output (e.g. a JSON response) to the user.

        Args:
            output: The text to display unchanged.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user.

        Args:
            warning_message: The warning message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user.

        Args:
            info_message: The informational message string.
            **kwargs: Additional arguments for formatting.
        """
        pass
