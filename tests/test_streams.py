from io import BytesIO

import pytest

from gifframes.errors import StreamTruncatedError
from gifframes.streams import BitReader, ByteStream, block_split, skip_blocks


def stream(data):
    return ByteStream(BytesIO(data))


def test_bit_reader_lsb_first():
    reader = BitReader(b"\x44\x02\x05")
    assert [reader.read(3) for _ in range(4)] == [4, 0, 1, 1]
    assert reader.read(4) == 0
    assert reader.read(4) == 5
    assert not reader.exhausted


def test_bit_reader_codes_straddle_bytes():
    reader = BitReader(bytes([0xFF, 0x0F]))
    assert reader.read(12) == 0xFFF
    assert reader.read(4) == 0
    assert reader.exhausted


def test_bit_reader_reads_zeros_past_end():
    reader = BitReader(b"\xff")
    assert reader.read(6) == 0x3F
    assert reader.read(6) == 0x03
    assert reader.exhausted
    assert reader.read(12) == 0


def test_bit_reader_rejects_text():
    with pytest.raises(TypeError):
        BitReader("abc")


def test_byte_stream_read_exact():
    s = stream(b"\x01\x02\x03")
    assert s.read_exact(2) == b"\x01\x02"
    assert s.position == 2
    with pytest.raises(StreamTruncatedError):
        s.read_exact(2)


def test_byte_stream_unpack_single_value():
    s = stream(b"\x2a\x01\x00\x02\x00")
    assert s.unpack('B') == 0x2A
    assert s.unpack('<2H') == (1, 2)


def test_block_split_joins_payload():
    s = stream(b"\x02ab\x03cde\x00rest")
    assert block_split(s) == b"abcde"
    assert s.read(4) == b"rest"


def test_block_split_truncated_keeps_partial_data():
    with pytest.raises(StreamTruncatedError) as info:
        block_split(stream(b"\x02ab\x05cd"))
    assert info.value.data == b"abcd"


def test_block_split_missing_terminator():
    with pytest.raises(StreamTruncatedError) as info:
        block_split(stream(b"\x02ab"))
    assert info.value.data == b"ab"


def test_skip_blocks_stops_after_terminator():
    s = stream(b"\x01x\x02yz\x00\x3b")
    skip_blocks(s)
    assert s.read(1) == b"\x3b"


def test_skip_blocks_truncated():
    with pytest.raises(StreamTruncatedError):
        skip_blocks(stream(b"\x04ab"))
