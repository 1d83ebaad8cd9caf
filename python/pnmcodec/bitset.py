"""
PNM Packed Bit Buffer

Fixed-size bit array used for bilevel rows. Bits are stored MSB first:
bit 0 of the buffer is the high bit of byte 0.
"""


class Bitset:
    """
    Addressable bits over a zero-initialized byte buffer.

    Indices outside [0, bit_count) are ignored by set() and read as
    unset by test(); row padding relies on this.

    Example:
        bits = Bitset(10)
        bits.set(0)
        bits.set(9)
        bits.to_bytes()  # b'\\x80\\x40'
    """

    def __init__(self, bit_count: int):
        """
        Initialize buffer.

        Args:
            bit_count: Number of addressable bits (rounded up to whole bytes)
        """
        if bit_count < 0:
            raise ValueError(f"Bitset requires non-negative size, got {bit_count}")
        self._bytes = bytearray((bit_count + 7) // 8)

    @classmethod
    def for_rows(cls, width: int, height: int) -> 'Bitset':
        """Allocate a buffer holding height rows of width bits, each padded to a byte."""
        return cls(row_bytes(width) * height * 8)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'Bitset':
        """Wrap a copy of packed bytes."""
        bits = cls(len(data) * 8)
        bits._bytes[:] = data
        return bits

    def __len__(self) -> int:
        return len(self._bytes) * 8

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._bytes) * 8

    def set(self, index: int) -> None:
        """Set the bit at index; out-of-range indices are a no-op."""
        if not self._in_range(index):
            return
        self._bytes[index >> 3] |= 0x80 >> (index & 7)

    def test(self, index: int) -> bool:
        """Return True if the bit at index is set; False when out of range."""
        if not self._in_range(index):
            return False
        return bool(self._bytes[index >> 3] & (0x80 >> (index & 7)))

    def to_bytes(self) -> bytes:
        """Return the packed buffer."""
        return bytes(self._bytes)


def row_bytes(width: int) -> int:
    """Bytes needed for one packed bilevel row."""
    return (width + 7) // 8
