"""
Image Format Registry

Maps magic-byte prefixes to decode entry points so a host can open a
stream without knowing its format in advance. Nothing is registered at
import time; callers register formats explicitly:

    registry = FormatRegistry()
    register_format(registry)
    image = registry.decode(stream)
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, List, Optional, Tuple, Union

from .decoder import decode_dimensions, decode_image
from .errors import UnknownFormatError

logger = logging.getLogger(__name__)

WILDCARD = ord('?')


@dataclass(frozen=True)
class FormatEntry:
    """
    A registered format.

    Attributes:
        name: Format identifier
        magic: Prefix pattern; ``?`` matches any single byte
        decode: Full decode entry point
        decode_config: Header-only entry point
    """
    name: str
    magic: bytes
    decode: Callable[[BinaryIO], Any]
    decode_config: Callable[[BinaryIO], Any]

    def matches(self, prefix: bytes) -> bool:
        if len(prefix) < len(self.magic):
            return False
        return all(m == WILDCARD or m == b for m, b in zip(self.magic, prefix))


class FormatRegistry:
    """Ordered collection of formats; earlier registrations win."""

    def __init__(self):
        self._entries: List[FormatEntry] = []

    def register(
        self,
        name: str,
        magic: bytes,
        decode: Callable[[BinaryIO], Any],
        decode_config: Callable[[BinaryIO], Any],
    ) -> FormatEntry:
        """
        Add a format. Registering a name again replaces the earlier entry.

        Args:
            name: Format identifier
            magic: Prefix pattern with ``?`` as single-byte wildcard
            decode: Called with the stream to decode a full image
            decode_config: Called with the stream to read the header only
        """
        if not magic:
            raise ValueError("magic prefix must not be empty")
        entry = FormatEntry(name, bytes(magic), decode, decode_config)
        self._entries = [e for e in self._entries if e.name != name]
        self._entries.append(entry)
        logger.debug("Registered image format %s (magic %r)", name, entry.magic)
        return entry

    def unregister(self, name: str) -> None:
        self._entries = [e for e in self._entries if e.name != name]

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def match(self, prefix: bytes) -> Optional[FormatEntry]:
        """Return the first entry whose magic matches prefix, or None."""
        for entry in self._entries:
            if entry.matches(prefix):
                return entry
        return None

    def _prefix_length(self) -> int:
        return max((len(e.magic) for e in self._entries), default=0)

    def identify(self, source: Union[BinaryIO, bytes]) -> Tuple[Optional[FormatEntry], BinaryIO]:
        """
        Identify the format of source.

        Returns:
            Tuple of (matching entry or None, stream positioned at the
            start of the image). The stream is source itself when it can be
            peeked or rewound; otherwise it replays the bytes read to
            identify it.
        """
        _, entry, stream = self._identify(source)
        return entry, stream

    def _identify(self, source: Union[BinaryIO, bytes]) -> Tuple[bytes, Optional[FormatEntry], BinaryIO]:
        prefix, stream = _open_prefixed(source, self._prefix_length())
        return prefix, self.match(prefix), stream

    def sniff(self, stream: BinaryIO) -> Optional[FormatEntry]:
        """
        Identify the format of stream.

        Buffered streams are peeked and seekable streams are rewound. Other
        streams lose the bytes read here; use identify() for those.
        """
        entry, _ = self.identify(stream)
        return entry

    def _require(self, source: Union[BinaryIO, bytes]) -> Tuple[FormatEntry, BinaryIO]:
        prefix, entry, stream = self._identify(source)
        if entry is None:
            raise UnknownFormatError(f"no registered format matches prefix {prefix!r}")
        return entry, stream

    def decode(self, source: Union[BinaryIO, bytes]) -> Any:
        """Decode source with the first matching format."""
        entry, stream = self._require(source)
        return entry.decode(stream)

    def decode_config(self, source: Union[BinaryIO, bytes]) -> Any:
        """Read the header of source with the first matching format."""
        entry, stream = self._require(source)
        return entry.decode_config(stream)


class _PrefixedStream:
    """Read-only stream replaying bytes already taken from another stream."""

    def __init__(self, prefix: bytes, stream: BinaryIO):
        self._prefix = prefix
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data = self._prefix + self._stream.read()
            self._prefix = b''
            return data
        if not self._prefix:
            return self._stream.read(size)
        data = self._prefix[:size]
        self._prefix = self._prefix[size:]
        if len(data) < size:
            data += self._stream.read(size - len(data)) or b''
        return data


def _read_prefix(stream: BinaryIO, count: int) -> bytes:
    prefix = bytearray()
    while len(prefix) < count:
        chunk = stream.read(count - len(prefix))
        if not chunk:
            break
        prefix.extend(chunk)
    return bytes(prefix)


def _is_seekable(stream: BinaryIO) -> bool:
    seekable = getattr(stream, 'seekable', None)
    return seekable is not None and seekable()


def _open_prefixed(source: Union[BinaryIO, bytes], count: int) -> Tuple[bytes, BinaryIO]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        return data[:count], io.BytesIO(data)
    if count == 0:
        return b'', source

    # peek() may return fewer bytes than asked for
    if hasattr(source, 'peek'):
        prefix = source.peek(count)[:count]
        if len(prefix) >= count:
            return prefix, source

    if _is_seekable(source):
        pos = source.tell()
        prefix = _read_prefix(source, count)
        source.seek(pos)
        return prefix, source

    prefix = _read_prefix(source, count)
    return prefix, _PrefixedStream(prefix, source)


default_registry = FormatRegistry()

PNM_FORMAT = 'pnm'
PNM_MAGIC = b'P?'


def register_format(registry: Optional[FormatRegistry] = None) -> FormatEntry:
    """
    Register the PNM codec under magic ``P?``.

    Args:
        registry: Target registry; default_registry when omitted
    """
    if registry is None:
        registry = default_registry
    return registry.register(PNM_FORMAT, PNM_MAGIC, decode_image, decode_dimensions)
