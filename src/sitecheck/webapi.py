"""Minimal stand-ins for a few web-platform APIs.

Pages and helpers that expect ``File``, ``FormData``, ``TextEncoder`` and
``TextDecoder`` can run against these when no native implementation is around.
They cover only what page verification needs, not the full platform contracts.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, MutableMapping
from typing import Any

from sitecheck.logging import get_logger

logger = get_logger(__name__)

BlobPart = str | bytes | bytearray | memoryview


class TextEncoder:
    """UTF-8 string encoder."""

    encoding = "utf-8"

    def encode(self, text: str = "") -> bytes:
        return text.encode(self.encoding)


class TextDecoder:
    """Byte decoder that replaces malformed input instead of raising."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding.lower()

    def decode(self, data: bytes | bytearray | memoryview = b"") -> str:
        return bytes(data).decode(self.encoding, errors="replace")


def _encode_part(part: BlobPart) -> bytes:
    if isinstance(part, str):
        return TextEncoder().encode(part)
    return bytes(part)


class _StreamReader:
    """Reader that hands out the whole payload in a single chunk."""

    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self._done = False

    async def read(self) -> dict[str, Any]:
        if self._done:
            return {"done": True}
        self._done = True
        return {"done": False, "value": self._payload}


class _Stream:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    def get_reader(self) -> _StreamReader:
        return _StreamReader(self._payload)


class File:
    """In-memory file built from string and binary parts."""

    def __init__(
        self,
        bits: Iterable[BlobPart],
        filename: str,
        type: str = "",  # noqa: A002 - mirrors the platform attribute name
        last_modified: int | None = None,
    ) -> None:
        self.bits = list(bits)
        self.name = filename
        self.type = type
        self.last_modified = last_modified if last_modified is not None else int(time.time() * 1000)
        self.size = sum(len(_encode_part(bit)) for bit in self.bits)

    async def text(self) -> str:
        return "".join(
            bit if isinstance(bit, str) else TextDecoder().decode(bit) for bit in self.bits
        )

    async def array_buffer(self) -> bytes:
        return b"".join(_encode_part(bit) for bit in self.bits)

    def stream(self) -> _Stream:
        return _Stream(b"".join(_encode_part(bit) for bit in self.bits))


class FormData:
    """Ordered multi-value map of form fields."""

    def __init__(self) -> None:
        self._data: dict[str, list[Any]] = {}

    def append(self, name: str, value: Any) -> None:
        self._data.setdefault(name, []).append(value)

    def get(self, name: str) -> Any | None:
        values = self._data.get(name)
        return values[0] if values else None

    def get_all(self, name: str) -> list[Any]:
        return list(self._data.get(name, []))

    def has(self, name: str) -> bool:
        return name in self._data

    def delete(self, name: str) -> None:
        self._data.pop(name, None)

    def set(self, name: str, value: Any) -> None:
        self._data[name] = [value]

    def entries(self) -> Iterator[tuple[str, list[Any]]]:
        return iter(self._data.items())

    def keys(self) -> Iterator[str]:
        return iter(self._data.keys())

    def values(self) -> list[Any]:
        return [value for values in self._data.values() for value in values]


# File is always replaced; the others only fill gaps.
_ALWAYS_INSTALLED = {"File": File}
_INSTALLED_IF_MISSING = {
    "FormData": FormData,
    "TextEncoder": TextEncoder,
    "TextDecoder": TextDecoder,
}


def install_polyfills(namespace: MutableMapping[str, Any]) -> list[str]:
    """Install the stand-ins into ``namespace``.

    Args:
        namespace: Mapping to install into (a module ``__dict__``, a test
            environment's globals, ...).

    Returns:
        Names that were installed.
    """
    installed = []
    for name, value in _ALWAYS_INSTALLED.items():
        namespace[name] = value
        installed.append(name)
    for name, value in _INSTALLED_IF_MISSING.items():
        if name not in namespace:
            namespace[name] = value
            installed.append(name)

    logger.info("polyfills_installed", names=installed)
    return installed
