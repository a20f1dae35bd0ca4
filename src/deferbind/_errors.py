from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class ResolutionError(RuntimeError):
    pass


class NotFoundError(ResolutionError, KeyError):
    """No definition and no deferred entry exists for an identifier.

    Also a ``KeyError`` so callers treating the container as a mapping can
    catch the usual lookup error.
    """

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        msg = f"Service {identifier!r} not found in the container."
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class CyclicResolutionError(ResolutionError):
    """An identifier re-entered its own resolution on the current call chain."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        msg = f"Cyclic resolution detected: {' -> '.join(self.chain)}"
        super().__init__(msg)
