"""Label table: records label definitions and the places that refer to them."""

from dataclasses import dataclass, field
from typing import Iterator, List

__all__ = ["LabelTable"]


@dataclass
class _Label:
    """A label's address and the memory locations waiting for it."""

    address: int = 0
    destinations: List[int] = field(default_factory=list)


class LabelTable:
    """Collects label definitions and references, then patches memory.

    References may come before or after the definition. A label that is
    referenced but never defined resolves to address 0.
    """

    def __init__(self):
        self._labels = {}

    def __len__(self):
        return len(self._labels)

    def __contains__(self, name):
        return name in self._labels

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def address(self, name):
        """Return the address currently recorded for ``name``."""
        try:
            return self._labels[name].address
        except KeyError:
            raise KeyError(f"unknown label {name!r}") from None

    def destinations(self, name):
        """Return the locations that refer to ``name``, in reference order."""
        try:
            return list(self._labels[name].destinations)
        except KeyError:
            raise KeyError(f"unknown label {name!r}") from None

    def reference(self, name, destination):
        """Record that the 32-bit field at ``destination`` holds ``name``'s address."""
        self._labels.setdefault(name, _Label()).destinations.append(destination)

    def define(self, name, address):
        """Set the address of ``name``, replacing any earlier definition."""
        self._labels.setdefault(name, _Label()).address = address

    def resolve(self, memory):
        """Write every label's address into each place that refers to it."""
        for label in self._labels.values():
            for destination in label.destinations:
                memory.write32(destination, label.address)

    def listing(self):
        """Return one line per label giving its name and address."""
        return [
            f"Label: {name} at 0x{label.address:8x}"
            for name, label in self._labels.items()
        ]

    def clear(self):
        """Forget all labels and references."""
        self._labels.clear()