"""Interfaces for text transforms.

A transform neutralizes volatile substrings (paths, timestamps, secrets)
before a snapshot is stored or compared. Transforms must be pure and
idempotent: ``t(t(x)) == t(x)``. The comparator accepts any
``Callable[[str], str]``; `TextTransform` is the base for the built-in ones.
"""

import abc
from collections.abc import Callable

# pylint: disable=too-few-public-methods

Transform = Callable[[str], str]


class TextTransform(abc.ABC):
    """Interface for idempotent text rewrites."""

    @abc.abstractmethod
    def apply(self, text: str) -> str:
        """Return `text` with volatile content replaced by stable placeholders.

        Args:
            text: Raw rendered text.

        Returns:
            The stabilized text.
        """

    def __call__(self, text: str) -> str:
        return self.apply(text)


class ChainTransform(TextTransform):
    """Apply several transforms in order."""

    def __init__(self, *transforms: Transform) -> None:
        self._transforms = transforms

    def apply(self, text: str) -> str:
        for transform in self._transforms:
            text = transform(text)
        return text

    def __len__(self) -> int:
        return len(self._transforms)
