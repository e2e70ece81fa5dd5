import pytest

from rediswire.protocol import FormatError, format_command, format_command_argv


def parse(data):
    assert data.startswith(b"*")
    head, _, rest = data.partition(b"\r\n")
    count = int(head[1:])
    args = []
    for _ in range(count):
        header, _, rest = rest.partition(b"\r\n")
        assert header.startswith(b"$")
        length = int(header[1:])
        args.append(rest[:length])
        assert rest[length : length + 2] == b"\r\n"
        rest = rest[length + 2 :]
    assert rest == b""
    return args


def test_plain_command_wire_bytes():
    assert format_command("SET foo bar") == b"*3\r\n$3\r\nSET\r\n$3\r\nfoo\r\n$3\r\nbar\r\n"


def test_empty_format():
    assert format_command("") == b"*0\r\n"


def test_string_interpolation_keeps_spaces_inside_argument():
    out = format_command("SET %s %s", "foo", "hello world")
    assert parse(out) == [b"SET", b"foo", b"hello world"]


def test_binary_interpolation_is_binary_safe():
    out = format_command("SET %b %b", b"foo", b"a\0b\r\n")
    assert parse(out) == [b"SET", b"foo", b"a\0b\r\n"]


def test_binary_accepts_bytearray_and_memoryview():
    out = format_command("SET %b %b", bytearray(b"k"), memoryview(b"v"))
    assert parse(out) == [b"SET", b"k", b"v"]


def test_string_interpolation_stops_at_nul():
    assert parse(format_command("SET %s", b"a\0b")) == [b"SET", b"a"]


def test_empty_string_argument_is_kept():
    assert parse(format_command("SET key %s", "")) == [b"SET", b"key", b""]


def test_percent_escape():
    assert parse(format_command("ECHO %%")) == [b"ECHO", b"%"]


def test_trailing_percent_is_literal():
    assert parse(format_command("GET %")) == [b"GET", b"%"]


def test_repeated_spaces_collapse():
    assert format_command("  SET  foo   bar ") == format_command("SET foo bar")


def test_interpolation_joined_with_literal_text():
    assert parse(format_command("GET key:%s:x", "a")) == [b"GET", b"key:a:x"]


def test_unicode_is_utf8_encoded():
    assert parse(format_command("GET %s", "é")) == [b"GET", "é".encode("utf-8")]


def test_bytes_format_matches_str_format():
    assert format_command(b"GET %s", b"k") == format_command("GET %s", "k")


@pytest.mark.parametrize("spec", ["%d", "%i", "%ld", "%lld", "%hd", "%hhd", "%u", "%lu"])
def test_integer_conversions(spec):
    assert parse(format_command("INCRBY k " + spec, 7)) == [b"INCRBY", b"k", b"7"]


def test_zero_padded_integer():
    assert parse(format_command("GET %05d", 42))[1] == b"00042"


def test_left_justified_integer():
    arg = parse(format_command("GET %-5d", 42))[1]
    assert len(arg) == 5
    assert arg.rstrip() == b"42"


def test_plus_flag():
    arg = parse(format_command("GET %+d", 5))[1]
    assert arg.startswith(b"+")
    assert int(arg) == 5


def test_negative_integer():
    assert int(parse(format_command("GET %d", -12))[1]) == -12


def test_hex_and_octal():
    assert int(parse(format_command("GET %x", 255))[1], 16) == 255
    assert int(parse(format_command("GET %X", 255))[1], 16) == 255
    assert int(parse(format_command("GET %o", 8))[1], 8) == 8


def test_alternate_forms():
    hex_arg = parse(format_command("GET %#x", 255))[1]
    assert hex_arg.startswith(b"0x")
    assert int(hex_arg, 16) == 255
    oct_arg = parse(format_command("GET %#o", 8))[1]
    assert oct_arg.startswith(b"0")
    assert int(oct_arg, 8) == 8


def test_zero_precision_zero_value_is_empty():
    assert parse(format_command("GET %.0d", 0)) == [b"GET", b""]


def test_unsigned_wraps_negative():
    value = int(parse(format_command("GET %u", -1))[1])
    assert value >= 0
    assert value % 2**32 == (-1) % 2**32


def test_char_sized_signed_wraps():
    value = int(parse(format_command("GET %hhd", 255))[1])
    assert -128 <= value < 128
    assert value % 256 == 255


@pytest.mark.parametrize("spec", ["%f", "%e", "%E", "%g", "%G", "%F"])
def test_float_conversions_round_trip(spec):
    assert float(parse(format_command("SET k " + spec, 1.5))[2]) == 1.5


def test_float_precision():
    arg = parse(format_command("SET k %.2f", 3.14159))[2]
    assert arg.split(b".")[1] == b"14"
    assert float(arg) == pytest.approx(3.14)


@pytest.mark.parametrize("value", [1.5, -0.25, 0.0, 1e300, 5e-324])
def test_hex_float_round_trip(value):
    arg = parse(format_command("SET k %a", value))[2]
    assert arg.lower().startswith((b"0x", b"-0x"))
    assert float.fromhex(arg.decode()) == value


def test_hex_float_upper_and_precision():
    arg = parse(format_command("SET k %.2A", 1.0))[2]
    assert arg == arg.upper()
    assert len(arg.split(b".")[1].split(b"P")[0]) == 2
    assert float.fromhex(arg.decode()) == 1.0


def test_integer_argument_to_float_conversion():
    assert float(parse(format_command("SET k %f", 3))[2]) == 3.0


@pytest.mark.parametrize("fmt", ["GET %q", "GET %lf", "GET %hf", "GET %*d", "GET %hhs"])
def test_invalid_conversion_raises(fmt):
    with pytest.raises(FormatError):
        format_command(fmt, 1)


def test_missing_argument_raises():
    with pytest.raises(FormatError):
        format_command("SET %s %s", "only-one")


def test_wrong_type_for_integer_raises():
    with pytest.raises(TypeError):
        format_command("GET %d", "x")


def test_wrong_type_for_string_raises():
    with pytest.raises(TypeError):
        format_command("GET %s", 12)


def test_overlong_directive_consumes_argument():
    args = parse(format_command("%0000000000000d %s", 5, "x"))
    assert len(args) == 2
    assert args[-1] == b"x"


def test_format_string_stops_at_nul():
    assert format_command("GET k\0ignored") == format_command("GET k")


def test_argv_round_trip():
    values = [b"SET", b"key with space", b"\r\n\0", b""]
    assert parse(format_command_argv(values)) == values


def test_argv_accepts_str_and_generators():
    out = format_command_argv(word for word in ["SET", "foo", "bar"])
    assert out == format_command("SET foo bar")


def test_argv_empty():
    assert format_command_argv([]) == b"*0\r\n"


def test_argv_matches_format_command():
    assert format_command_argv([b"SET", b"k", b"v"]) == format_command("SET %b %b", b"k", b"v")


def test_argv_rejects_other_types():
    with pytest.raises(TypeError):
        format_command_argv(["SET", 1])