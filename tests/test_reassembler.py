import random

import pytest

from minnowtcp.byte_stream import ByteStream, read
from minnowtcp.reassembler import Reassembler


def make(capacity):
    return Reassembler(ByteStream(capacity))


def assert_read_all(r, expected):
    assert read(r.output, len(expected)) == expected
    assert r.output.bytes_buffered == 0


def ins(index, data, last=False):
    return ("insert", index, data, last)


def counts(pushed, pending=None):
    return ("counts", pushed, pending)


def rd(data):
    return ("read", data)


def fin(value):
    return ("finished", value)


def run(capacity, steps):
    r = make(capacity)
    for kind, *args in steps:
        if kind == "insert":
            r.insert(*args)
        elif kind == "counts":
            want_pushed, want_pending = args
            assert r.output.bytes_pushed == want_pushed
            if want_pending is not None:
                assert r.bytes_pending == want_pending
        elif kind == "read":
            assert_read_all(r, args[0])
        elif kind == "finished":
            assert r.output.is_finished == args[0]
        elif kind == "closed":
            assert r.output.is_closed == args[0]
        else:
            raise AssertionError(f"unknown step {kind!r}")
    return r


SCENARIOS = {
    # capacity
    "all within capacity": (2, [
        ins(0, b"ab"), counts(2, 0), rd(b"ab"),
        ins(2, b"cd"), counts(4, 0), rd(b"cd"),
        ins(4, b"ef"), counts(6, 0), rd(b"ef"),
    ]),
    "insert beyond capacity": (2, [
        ins(0, b"ab"), counts(2, 0),
        ins(2, b"cd"), counts(2, 0),
        rd(b"ab"), counts(2, 0),
        ins(2, b"cd"), counts(4, 0), rd(b"cd"),
    ]),
    "overlapping inserts": (1, [
        ins(0, b"ab"), counts(1, 0),
        ins(0, b"ab"), counts(1, 0),
        rd(b"a"), counts(1, 0),
        ins(0, b"abc"), counts(2, 0),
        rd(b"b"), counts(2, 0),
    ]),
    "insert beyond capacity repeated with different data": (2, [
        ins(1, b"b"), counts(0, 1),
        ins(2, b"bX"), counts(0, 1),
        ins(0, b"a"), counts(2, 0), rd(b"ab"),
        ins(1, b"bc"), counts(3, 0), rd(b"c"),
    ]),
    "insert last beyond capacity": (2, [
        ins(1, b"bc", True), counts(0, 1),
        ins(0, b"a"), counts(2, 0), rd(b"ab"), fin(False),
        ins(1, b"bc", True), counts(3, 0), rd(b"c"), fin(True),
    ]),
    # duplicates
    "dup 1": (65000, [
        ins(0, b"abcd"), counts(4), rd(b"abcd"), fin(False),
        ins(0, b"abcd"), counts(4), rd(b""), fin(False),
    ]),
    "dup 2": (65000, [
        ins(0, b"abcd"), counts(4), rd(b"abcd"), fin(False),
        ins(4, b"abcd"), counts(8), rd(b"abcd"), fin(False),
        ins(0, b"abcd"), counts(8), rd(b""), fin(False),
        ins(4, b"abcd"), counts(8), rd(b""), fin(False),
    ]),
    "dup 4": (65000, [
        ins(0, b"abcd"), counts(4), rd(b"abcd"), fin(False),
        ins(0, b"abcdef"), counts(6), rd(b"ef"), fin(False),
    ]),
    # holes
    "holes 1": (65000, [ins(1, b"b"), counts(0), rd(b""), fin(False)]),
    "holes 2": (65000, [ins(1, b"b"), ins(0, b"a"), counts(2), rd(b"ab"), fin(False)]),
    "holes 3": (65000, [
        ins(1, b"b", True), counts(0), rd(b""), fin(False),
        ins(0, b"a"), counts(2), rd(b"ab"), fin(True),
    ]),
    "holes 4": (65000, [ins(1, b"b"), ins(0, b"ab"), counts(2), rd(b"ab"), fin(False)]),
    "holes 5": (65000, [
        ins(1, b"b"), counts(0), rd(b""), fin(False),
        ins(3, b"d"), counts(0), rd(b""), fin(False),
        ins(2, b"c"), counts(0), rd(b""), fin(False),
        ins(0, b"a"), counts(4), rd(b"abcd"), fin(False),
    ]),
    "holes 6": (65000, [
        ins(1, b"b"), counts(0), rd(b""), fin(False),
        ins(3, b"d"), counts(0), rd(b""), fin(False),
        ins(0, b"abc"), counts(4), rd(b"abcd"), fin(False),
    ]),
    "holes 7": (65000, [
        ins(1, b"b"), counts(0), rd(b""), fin(False),
        ins(3, b"d"), counts(0), rd(b""), fin(False),
        ins(0, b"a"), counts(2), rd(b"ab"), fin(False),
        ins(2, b"c"), counts(4), rd(b"cd"), fin(False),
        ins(4, b"", True), counts(4), rd(b""), fin(True),
    ]),
    # overlapping
    "overlapping assembled/unread section": (1000, [
        ins(0, b"a"), ins(0, b"ab"), counts(2), rd(b"ab"),
    ]),
    "overlapping assembled/read section": (1000, [
        ins(0, b"a"), rd(b"a"), ins(0, b"ab"), rd(b"b"), counts(2),
    ]),
    "overlapping unassembled section to fill hole": (1000, [
        ins(1, b"b"), rd(b""), ins(0, b"ab"), rd(b"ab"), counts(2, 0),
    ]),
    "overlapping unassembled section": (1000, [
        ins(1, b"b"), rd(b""), ins(1, b"bc"), rd(b""), counts(0, 2),
    ]),
    "overlapping unassembled section 2": (1000, [
        ins(2, b"c"), rd(b""), ins(1, b"bcd"), rd(b""), counts(0, 3),
    ]),
    "overlapping multiple unassembled sections": (1000, [
        ins(1, b"b"), ins(3, b"d"), rd(b""), ins(1, b"bcde"), rd(b""), counts(0, 4),
    ]),
    "insert over existing section": (1000, [
        ins(2, b"c"), ins(1, b"bcd"), rd(b""), counts(0, 3),
        ins(0, b"a"), rd(b"abcd"), counts(4, 0),
    ]),
    "insert within existing section": (1000, [
        ins(1, b"bcd"), ins(2, b"c"), rd(b""), counts(0, 3),
        ins(0, b"a"), rd(b"abcd"), counts(4, 0),
    ]),
    "hole filled with overlap": (20, [
        ins(5, b"fgh"), counts(0), rd(b""), fin(False),
        ins(0, b"abc"), counts(3),
        ins(0, b"abcdef"), counts(8, 0), rd(b"abcdefgh"),
    ]),
    "multiple overlaps": (1000, [
        ins(2, b"c"), ins(4, b"e"), rd(b""), counts(0, 2),
        ins(1, b"bcdef"), rd(b""), counts(0, 5),
        ins(0, b"a"), rd(b"abcdef"), counts(6, 0),
    ]),
    "overlap between two pending": (1000, [
        ins(1, b"bc"), ins(4, b"ef"), rd(b""), counts(0, 4),
        ins(2, b"cde"), rd(b""), counts(0, 5),
        ins(0, b"a"), rd(b"abcdef"), counts(6, 0),
    ]),
    "exact copy": (1000, [
        ins(1, b"b"), rd(b""), counts(0, 1),
        ins(1, b"b"), rd(b""), counts(0, 1),
        ins(0, b"a"), rd(b"ab"), counts(2, 0),
    ]),
    "yet another overlap test": (150, [
        ins(4, b"efgh"), counts(0, 4),
        ins(14, b"op"), counts(0, 6),
        ins(18, b"s"), counts(0, 7),
        ins(0, b"a"), counts(1, 7),
        ins(0, b"abcde"), counts(8, 3),
        ins(14, b"opqrst"), counts(8, 6),
        ins(14, b"op"), counts(8, 6),
        ins(8, b"ijklmn"), counts(20, 0),
    ]),
    "small capacity with overlapping insert": (2, [
        ins(1, b"bc"), rd(b""), counts(0, 1),
        ins(0, b"a"), rd(b"ab"), counts(2, 0),
    ]),
    "overlapping multiple unassembled sections 2": (1000, [
        ins(1, b"bcd"), ins(2, b"cde"), rd(b""), counts(0, 4),
        ins(0, b"a"), rd(b"abcde"), counts(5, 0),
    ]),
    # sequential
    "seq 1": (65000, [
        ins(0, b"abcd"), counts(4), rd(b"abcd"), fin(False),
        ins(4, b"efgh"), counts(8), rd(b"efgh"), fin(False),
    ]),
    "seq 2": (65000, [
        ins(0, b"abcd"), counts(4), fin(False),
        ins(4, b"efgh"), counts(8), rd(b"abcdefgh"), fin(False),
    ]),
    "zero-valued byte in substring": (16, [
        ins(9, bytes([0x30, 0x0D, 0x62, 0x00, 0x61, 0x00, 0x00])),
        counts(0), rd(b""), fin(False),
        ins(0, bytes([0x0D, 0x0A, 0x63, 0x61, 0x0A, 0x66])), counts(6),
        ins(0, bytes([0x0D, 0x0A, 0x63, 0x61, 0x0A, 0x66, 0x65, 0x20, 0x62, 0x30])),
        counts(16, 0),
        rd(bytes([0x0D, 0x0A, 0x63, 0x61, 0x0A, 0x66, 0x65, 0x20,
                  0x62, 0x30, 0x0D, 0x62, 0x00, 0x61, 0x00, 0x00])),
    ]),
    # single
    "construction": (65000, [counts(0, 0), fin(False)]),
    "insert a @ 0": (65000, [ins(0, b"a"), counts(1), rd(b"a"), fin(False)]),
    "insert a @ 0 [last]": (65000, [ins(0, b"a", True), counts(1), rd(b"a"), fin(True)]),
    "insert b @ 0 [last]": (65000, [ins(0, b"b", True), counts(1), rd(b"b"), fin(True)]),
    "empty stream": (65000, [ins(0, b"", True), counts(0), fin(True)]),
    "insert empty string @ 0": (65000, [ins(0, b""), counts(0), fin(False)]),
    "insert after first unacceptable": (1, [ins(3, b"g"), counts(0, 0), fin(False)]),
    "insert before first unassembled": (1, [
        ins(0, b"b"), rd(b"b"), counts(1), ins(0, b"b"), counts(1), fin(False),
    ]),
    "insert after close ignored": (10, [
        ins(0, b"ab", True), ins(2, b"cd"), counts(2), ("closed", True),
    ]),
}


@pytest.mark.parametrize("capacity, steps", list(SCENARIOS.values()), ids=list(SCENARIOS))
def test_scenario(capacity, steps):
    run(capacity, steps)


def test_dup_3_random_substrings():
    rng = random.Random(3)
    data = b"abcdefgh"
    r = run(65000, [ins(0, data), counts(8), rd(data), fin(False)])
    for _ in range(1000):
        start = rng.randint(0, 8)
        end = rng.randint(start, 8)
        r.insert(start, data[start:end])
        assert r.output.bytes_pushed == 8
        assert_read_all(r, b"")
        assert not r.output.is_finished


def test_seq_3():
    steps = [step for i in range(100) for step in (counts(4 * i), ins(4 * i, b"abcd"), fin(False))]
    run(65000, steps + [rd(b"abcd" * 100), fin(False)])


def test_seq_4():
    steps = [
        step
        for i in range(100)
        for step in (counts(4 * i), ins(4 * i, b"abcd"), fin(False), rd(b"abcd"))
    ]
    run(65000, steps)


@pytest.mark.parametrize("rep", range(32))
def test_win(rep):
    rng = random.Random(rep)
    nsegs, max_seg_len = 128, 2048
    segments = []
    offset = 0
    for _ in range(nsegs):
        size = 1 + rng.randrange(max_seg_len - 1)
        back = min(offset, 1 + rng.randrange(1023))
        segments.append((offset - back, size + back))
        offset += size
    rng.shuffle(segments)
    data = rng.randbytes(offset)

    r = make(nsegs * max_seg_len)
    for start, size in segments:
        r.insert(start, data[start : start + size], start + size == offset)

    assert_read_all(r, data)
    assert r.output.is_finished