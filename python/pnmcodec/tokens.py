"""
PNM Token Reader and Format Constants

Defines the six PNM variants and the lexer every decoding step uses:
- Whitespace/comment-delimited ASCII tokens (header fields, ASCII samples)
- Unsigned decimal integers
- Exact-length raw byte runs (binary payloads)
"""

import io
from enum import IntEnum
from typing import BinaryIO, Optional, Union

from .errors import MalformedTokenError, TruncatedPayloadError, UnknownFormatError
from .image import ColorModel

# Space, tab, LF, VT, FF, CR
WHITESPACE = frozenset(b' \t\n\x0b\x0c\r')
NEWLINES = frozenset(b'\n\r')
COMMENT = ord('#')

# Largest sample value an 8-bit channel can hold
MAX_SAMPLE_LIMIT = 255

# Header dimensions are 32-bit unsigned
MAX_DIMENSION = 2 ** 32 - 1

# Largest single read issued for a binary payload
RAW_CHUNK_SIZE = 64 * 1024

Source = Union[BinaryIO, bytes, bytearray, memoryview]


class Variant(IntEnum):
    """PNM wire forms, valued by the digit of their magic token."""

    BILEVEL_ASCII = 1     # P1
    GRAYSCALE_ASCII = 2   # P2
    RGB_ASCII = 3         # P3
    BILEVEL_BINARY = 4    # P4
    GRAYSCALE_BINARY = 5  # P5
    RGB_BINARY = 6        # P6

    @property
    def magic(self) -> bytes:
        return b'P%d' % self.value

    @property
    def is_binary(self) -> bool:
        return self.value >= 4

    @property
    def has_max_sample(self) -> bool:
        return self not in (Variant.BILEVEL_ASCII, Variant.BILEVEL_BINARY)

    @property
    def color_model(self) -> ColorModel:
        return _COLOR_MODELS[self.value % 3]

    @classmethod
    def from_magic(cls, token: bytes) -> 'Variant':
        """
        Look up the variant for a magic token.

        Raises:
            UnknownFormatError: If the token is not P1-P6
        """
        if len(token) == 2 and token[:1] == b'P' and token[1:] in b'123456':
            return cls(token[1] - ord('0'))
        raise UnknownFormatError(f"unknown PNM magic {token!r}")


_COLOR_MODELS = {
    1: ColorModel.BILEVEL,
    2: ColorModel.GRAYSCALE,
    0: ColorModel.RGB,
}


def is_space(byte: int) -> bool:
    """Check if byte is PNM whitespace."""
    return byte in WHITESPACE


def is_newline(byte: int) -> bool:
    """Check if byte ends a comment (LF or CR)."""
    return byte in NEWLINES


class TokenReader:
    """
    Sequential reader over a PNM byte stream.

    Holds at most one pushed-back byte: the whitespace byte that ended the
    previous token. Raw reads see that byte first, so the caller decides
    how much whitespace separates the header from a binary payload.

    Example:
        reader = TokenReader(b'P5\\n2 1\\n15\\n\\x0f\\x03')
        reader.next_token()       # b'P5'
        reader.next_uint()        # 2
    """

    def __init__(self, source: Source):
        """
        Initialize reader.

        Args:
            source: Binary stream with a read() method, or a bytes-like object
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream = source
        self._pending: Optional[int] = None
        self.offset = 0

    def _read_byte(self) -> Optional[int]:
        if self._pending is not None:
            byte = self._pending
            self._pending = None
        else:
            chunk = self._stream.read(1)
            if not chunk:
                return None
            byte = chunk[0]
        self.offset += 1
        return byte

    def _unread_byte(self, byte: int) -> None:
        self._pending = byte
        self.offset -= 1

    def skip_whitespace(self) -> None:
        """
        Consume whitespace up to the next non-whitespace byte.

        Stops quietly at end of stream; the next token read reports it.
        """
        while True:
            byte = self._read_byte()
            if byte is None:
                return
            if not is_space(byte):
                self._unread_byte(byte)
                return

    def next_token(self) -> bytes:
        """
        Read the next non-empty token.

        Comments (``#`` up to CR or LF) are discarded wherever they start,
        including in the middle of a token. The whitespace byte ending the
        token is left unconsumed.

        Returns:
            The token bytes

        Raises:
            MalformedTokenError: If the stream ends before any token byte
        """
        while True:
            self.skip_whitespace()
            token = bytearray()
            in_comment = False
            at_eof = False

            while True:
                byte = self._read_byte()
                if byte is None:
                    at_eof = True
                    break
                if in_comment:
                    if is_newline(byte):
                        self._unread_byte(byte)
                        break
                    continue
                if byte == COMMENT:
                    in_comment = True
                    continue
                if is_space(byte):
                    self._unread_byte(byte)
                    break
                token.append(byte)

            if token:
                return bytes(token)
            if at_eof:
                raise MalformedTokenError(
                    f"unexpected end of stream at offset {self.offset} while reading token"
                )

    def next_uint(self, what: str = "value") -> int:
        """
        Read the next token as a base-10 unsigned integer.

        Args:
            what: Name of the field being read, used in error messages

        Raises:
            MalformedTokenError: If the token is not all ASCII digits
        """
        token = self.next_token()
        if not token.isdigit():
            raise MalformedTokenError(
                f"expected unsigned integer for {what}, got {token!r}"
            )
        return int(token)

    def read_separator(self) -> int:
        """
        Consume the single whitespace byte between header and binary payload.

        Raises:
            TruncatedPayloadError: If the stream ends before the separator
            MalformedTokenError: If the byte is not whitespace
        """
        byte = self._read_byte()
        if byte is None:
            raise TruncatedPayloadError("stream ended before binary payload")
        if not is_space(byte):
            raise MalformedTokenError(
                f"expected whitespace before binary payload, got {bytes([byte])!r}"
            )
        return byte

    def read_raw(self, count: int) -> bytes:
        """
        Read exactly count bytes with no whitespace interpretation.

        Args:
            count: Number of bytes to read

        Raises:
            TruncatedPayloadError: If the stream yields fewer bytes
        """
        data = bytearray()
        if count > 0 and self._pending is not None:
            data.append(self._pending)
            self._pending = None

        # Bounded reads, so a short stream fails before a huge count is allocated
        while len(data) < count:
            chunk = self._stream.read(min(count - len(data), RAW_CHUNK_SIZE))
            if not chunk:
                break
            data.extend(chunk)

        self.offset += len(data)
        if len(data) < count:
            raise TruncatedPayloadError(
                f"expected {count} payload bytes, stream yielded {len(data)}"
            )
        return bytes(data)
