import io

import pytest

from pnmcodec import DecodedImage, FormatRegistry, UnknownFormatError, register_format
from pnmcodec.registry import FormatEntry, default_registry
from samples import SAMPLES


@pytest.fixture
def registry() -> FormatRegistry:
    reg = FormatRegistry()
    register_format(reg)
    return reg


def test_new_registry_is_empty() -> None:
    assert FormatRegistry().names == []


def test_register_format(registry: FormatRegistry) -> None:
    assert registry.names == ["pnm"]
    entry = registry.match(b"P6")
    assert isinstance(entry, FormatEntry)
    assert entry.magic == b"P?"


@pytest.mark.parametrize("prefix, matched", [
    (b"P1", True),
    (b"P6\n", True),
    (b"P9", True),
    (b"P", False),
    (b"GIF8", False),
    (b"\x89PNG", False),
])
def test_wildcard_matching(registry: FormatRegistry, prefix: bytes, matched: bool) -> None:
    assert (registry.match(prefix) is not None) is matched


def test_sniff_rewinds_seekable_stream(registry: FormatRegistry) -> None:
    stream = io.BytesIO(SAMPLES["P5"])
    assert registry.sniff(stream) is not None
    assert stream.tell() == 0


def test_sniff_peeks_buffered_stream(registry: FormatRegistry) -> None:
    stream = io.BufferedReader(io.BytesIO(SAMPLES["P6"]))
    assert registry.sniff(stream) is not None
    image = registry.decode(stream)
    assert image.size == (3, 2)


@pytest.mark.parametrize("name", sorted(SAMPLES))
def test_decode_through_registry(registry: FormatRegistry, name: str) -> None:
    image = registry.decode(SAMPLES[name])
    assert isinstance(image, DecodedImage)
    assert registry.decode_config(SAMPLES[name]) == image.size


def test_unmatched_prefix(registry: FormatRegistry) -> None:
    with pytest.raises(UnknownFormatError):
        registry.decode(b"GIF89a")
    with pytest.raises(UnknownFormatError):
        FormatRegistry().decode_config(SAMPLES["P1"])


def test_matching_prefix_with_unknown_magic(registry: FormatRegistry) -> None:
    with pytest.raises(UnknownFormatError):
        registry.decode(b"P9\n1 1\n")


def test_reregistering_replaces_entry(registry: FormatRegistry) -> None:
    registry.register("pnm", b"P?", lambda s: "custom", lambda s: (0, 0))
    assert registry.names == ["pnm"]
    assert registry.decode(SAMPLES["P1"]) == "custom"


def test_earlier_registration_wins(registry: FormatRegistry) -> None:
    registry.register("p6-only", b"P6", lambda s: "p6", lambda s: (0, 0))
    assert registry.match(b"P6").name == "pnm"
    registry.unregister("pnm")
    assert registry.match(b"P6").name == "p6-only"
    assert registry.match(b"P5") is None


def test_empty_magic_rejected() -> None:
    with pytest.raises(ValueError):
        FormatRegistry().register("empty", b"", lambda s: None, lambda s: None)


def test_default_registry_requires_explicit_registration() -> None:
    assert "pnm" not in default_registry.names
    register_format()
    try:
        assert default_registry.decode_config(SAMPLES["P3"]) == (3, 2)
    finally:
        default_registry.unregister("pnm")


class OneByteRaw(io.RawIOBase):
    """Raw stream delivering a single byte per call."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        chunk = self._data[self._pos:self._pos + 1]
        buffer[:len(chunk)] = chunk
        self._pos += len(chunk)
        return len(chunk)


class ReadOnly:
    """Object with nothing but read()."""

    def __init__(self, data: bytes):
        self._stream = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)


def test_decode_buffered_stream_with_short_peek(registry: FormatRegistry) -> None:
    stream = io.BufferedReader(OneByteRaw(SAMPLES["P6"]))
    image = registry.decode(stream)
    assert image.size == (3, 2)


def test_decode_unbuffered_one_byte_stream(registry: FormatRegistry) -> None:
    assert registry.decode(OneByteRaw(SAMPLES["P4"])) == registry.decode(SAMPLES["P4"])


def test_decode_read_only_stream(registry: FormatRegistry) -> None:
    assert registry.decode(ReadOnly(SAMPLES["P6"])) == registry.decode(SAMPLES["P6"])
    assert registry.decode_config(ReadOnly(SAMPLES["P2"])) == (24, 7)


def test_identify_replays_consumed_prefix(registry: FormatRegistry) -> None:
    entry, stream = registry.identify(ReadOnly(SAMPLES["P5"]))
    assert entry.name == "pnm"
    assert stream.read() == SAMPLES["P5"]


def test_read_only_stream_with_unknown_prefix(registry: FormatRegistry) -> None:
    with pytest.raises(UnknownFormatError):
        registry.decode(ReadOnly(b"GIF89a"))
