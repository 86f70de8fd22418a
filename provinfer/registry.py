"""Token registry for object and enum types referenced during a pass."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from provinfer.annotator import get_annotated
from provinfer.errors import TokenResolutionError
from provinfer.introspect import type_name
from provinfer.token import Token

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE = "pkg"


def derive_token(t: type, package: str = DEFAULT_PACKAGE) -> Token:
    """Token a type registers itself under.

    An ``annotate`` hook calling ``set_token`` decides the module and name;
    otherwise they come from the defining module and the class name.
    """
    meta = get_annotated(t)
    if meta.token is not None:
        module, name = meta.token
    else:
        module = t.__module__.rsplit(".", 1)[-1]
        if module == "__main__":
            module = "index"
        name = t.__name__
    return Token.create(package, module, name)


class TokenRegistry:
    """Maps types to tokens and back, one type per token.

    Safe to share between threads running inference for different
    resources of the same provider.
    """

    def __init__(self, package: str = DEFAULT_PACKAGE) -> None:
        self.package = package
        self._lock = threading.Lock()
        self._by_type: dict[Any, Token] = {}
        self._by_token: dict[Token, Any] = {}

    def register(self, t: type) -> Token:
        """Return ``t``'s token, assigning it on first sight."""
        with self._lock:
            token = self._by_type.get(t)
        if token is not None:
            return token

        # derived outside the lock: it runs user annotate hooks
        token = derive_token(t, self.package)

        with self._lock:
            owner = self._by_token.get(token)
            if owner is not None and owner is not t:
                raise TokenResolutionError(
                    f"token {token} is claimed by both {type_name(owner)} and {type_name(t)}"
                )
            if t not in self._by_type:
                self._by_type[t] = token
                self._by_token[token] = t
                logger.debug("Registered %s as %s", type_name(t), token)
            return self._by_type[t]

    def resolve(self, token: Token | str) -> Any:
        """Return the type registered under ``token``."""
        if isinstance(token, str):
            token = Token.parse(token, package=self.package)
        with self._lock:
            try:
                return self._by_token[token]
            except KeyError:
                raise TokenResolutionError(f"no type registered as {token}") from None

    def tokens(self) -> list[Token]:
        """Registered tokens in registration order."""
        with self._lock:
            return list(self._by_token)

    def __contains__(self, t: object) -> bool:
        with self._lock:
            return t in self._by_type

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens())

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_token)
