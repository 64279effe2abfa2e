import pytest
from hypothesis import given, strategies as st

from quill_nrepl.bencode import FramingError, IncompleteFrame, decode, decode_all, encode


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, b"i0e"),
        (-42, b"i-42e"),
        ("spam", b"4:spam"),
        ("", b"0:"),
        ("é", b"2:\xc3\xa9"),
        (b"\x00\xff", b"2:\x00\xff"),
        ([1, "a"], b"li1e1:ae"),
        ((), b"le"),
        ({"op": "eval", "id": "1"}, b"d2:id1:12:op4:evale"),
        ({"b": {"a": []}}, b"d1:bd1:aleee"),
    ],
)
def test_encode(value, expected):
    assert encode(value) == expected


def test_dict_keys_are_sorted_by_bytes():
    msg = {"zulu": 1, "alpha": 2, "Beta": 3}
    assert encode(msg) == b"d4:Betai3e5:alphai2e4:zului1ee"


@pytest.mark.parametrize("value", [True, 1.5, None, {1: "x"}, object()])
def test_encode_rejects_unsupported_values(value):
    with pytest.raises(FramingError):
        encode(value)


def test_decode_returns_remainder():
    value, rest = decode(b"i7e4:spam")
    assert value == 7
    assert rest == b"4:spam"


def test_decode_keys_bytes_by_default_and_str_when_keywordized():
    data = b"d2:op4:evale"
    assert decode(data)[0] == {b"op": b"eval"}
    assert decode(data, keywordize_keys=True)[0] == {"op": b"eval"}


def test_string_fn_applies_to_values_not_keys():
    value, _ = decode(b"d4:codel1:xee", string_fn=lambda b: b.decode().upper())
    assert value == {b"code": ["X"]}


@pytest.mark.parametrize(
    "data",
    [b"i12", b"4:sp", b"l1:a", b"d2:op", b"d2:op4:eval", b"12", b""],
)
def test_decode_incomplete(data):
    with pytest.raises(IncompleteFrame):
        decode(data)


@pytest.mark.parametrize(
    "data",
    [b"x", b"i1x2e", b"i-0e", b"i03e", b"ie", b"4x:spam", b"di1ei2ee", b"1a"],
)
def test_decode_malformed(data):
    with pytest.raises(FramingError):
        decode(data)


def test_decode_all_keeps_partial_tail():
    data = encode({"op": "clone"}) + encode({"op": "describe"}) + b"d2:op"
    values, rest = decode_all(data, keywordize_keys=True, string_fn=bytes.decode)
    assert values == [{"op": "clone"}, {"op": "describe"}]
    assert rest == b"d2:op"


def test_decode_all_raises_on_garbage_after_complete_values():
    with pytest.raises(FramingError):
        decode_all(b"i1e?")


bencode_values = st.recursive(
    st.integers() | st.text(),
    lambda children: st.lists(children, max_size=5) | st.dictionaries(st.text(), children, max_size=5),
    max_leaves=20,
)


@given(bencode_values)
def test_round_trip(value):
    decoded, rest = decode(encode(value), keywordize_keys=True, string_fn=lambda b: b.decode("utf-8"))
    assert decoded == value
    assert rest == b""


@given(st.lists(st.dictionaries(st.text(min_size=1), st.integers() | st.text(), max_size=4), max_size=5), st.data())
def test_split_stream_decodes_identically(messages, data):
    stream = b"".join(encode(m) for m in messages)
    cut = data.draw(st.integers(min_value=0, max_value=len(stream)))

    whole, whole_rest = decode_all(stream)
    first, rest = decode_all(stream[:cut])
    second, final_rest = decode_all(rest + stream[cut:])

    assert first + second == whole
    assert final_rest == whole_rest == b""
