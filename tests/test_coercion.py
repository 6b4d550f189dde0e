"""Tests for converting raw property strings into typed values."""

from __future__ import annotations

import math

import discord
import pytest

from templatebot.coercion import PresenceState, PropertyCoercer, ValueKind, coerce
from templatebot.errors import MalformedValue, UnsupportedKind


@pytest.mark.parametrize(
    ("raw", "kind", "expected"),
    [
        ("hello world", ValueKind.TEXT, "hello world"),
        ("", ValueKind.TEXT, ""),
        ("123", ValueKind.INTEGER, 123),
        ("-42", ValueKind.INTEGER, -42),
        ("+7", ValueKind.INTEGER, 7),
        ("9223372036854775807", ValueKind.LONG, 2**63 - 1),
        ("-32768", ValueKind.SHORT, -32768),
        ("127", ValueKind.BYTE, 127),
        ("1.5", ValueKind.DOUBLE, 1.5),
        ("2e3", ValueKind.DOUBLE, 2000.0),
        ("-.5d", ValueKind.DOUBLE, -0.5),
        ("0.25f", ValueKind.FLOAT, 0.25),
        ("abc", ValueKind.CHARACTER, "a"),
    ],
)
def test_coerce_valid_values(raw: str, kind: ValueKind, expected: object) -> None:
    assert coerce(raw, kind) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("TRUE", True), ("TrUe", True), ("false", False), ("yes", False), ("", False)],
)
def test_boolean_is_lenient(raw: str, expected: bool) -> None:
    """Anything other than "true" is read as False instead of failing."""
    assert coerce(raw, ValueKind.BOOLEAN) is expected


def test_float_is_rounded_to_single_precision() -> None:
    value = coerce("0.1", ValueKind.FLOAT)

    assert value == pytest.approx(0.1)
    assert value != 0.1


def test_special_floating_point_values() -> None:
    assert coerce("Infinity", ValueKind.DOUBLE) == math.inf
    assert coerce("-Infinity", ValueKind.FLOAT) == -math.inf
    assert math.isnan(coerce("NaN", ValueKind.DOUBLE))


def test_color_is_parsed_as_hex_rgb() -> None:
    color = coerce("ff0000", ValueKind.COLOR)

    assert isinstance(color, discord.Colour)
    assert color.value == 0xFF0000
    assert coerce("5865F2", ValueKind.COLOR).value == 0x5865F2


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("online", PresenceState.ONLINE),
        ("IDLE", PresenceState.IDLE),
        ("dnd", PresenceState.DND),
        ("Invisible", PresenceState.INVISIBLE),
        ("offline", PresenceState.OFFLINE),
        ("away", PresenceState.UNKNOWN),
        ("", PresenceState.UNKNOWN),
    ],
)
def test_presence_tokens(raw: str, expected: PresenceState) -> None:
    assert coerce(raw, ValueKind.PRESENCE) is expected


@pytest.mark.parametrize(
    ("raw", "kind"),
    [
        ("abc", ValueKind.INTEGER),
        ("12.5", ValueKind.INTEGER),
        (" 12", ValueKind.INTEGER),
        ("1_000", ValueKind.INTEGER),
        ("", ValueKind.LONG),
        ("2147483648", ValueKind.INTEGER),
        ("128", ValueKind.BYTE),
        ("-32769", ValueKind.SHORT),
        ("9223372036854775808", ValueKind.LONG),
        ("abc", ValueKind.DOUBLE),
        ("1e", ValueKind.DOUBLE),
        ("1e39", ValueKind.FLOAT),
        ("", ValueKind.CHARACTER),
        ("zz0000", ValueKind.COLOR),
        ("0xff0000", ValueKind.COLOR),
        ("1234567", ValueKind.COLOR),
    ],
)
def test_malformed_values_fail(raw: str, kind: ValueKind) -> None:
    with pytest.raises(MalformedValue):
        coerce(raw, kind)


def test_unknown_kind_is_unsupported() -> None:
    coercer = PropertyCoercer({ValueKind.TEXT: str})

    assert not coercer.supports(ValueKind.BOOLEAN)
    with pytest.raises(UnsupportedKind):
        coercer.coerce("true", ValueKind.BOOLEAN)


def test_registered_converter_extends_coercion() -> None:
    coercer = PropertyCoercer()
    coercer.register("csv", lambda raw: raw.split(","))

    assert coercer.coerce("a,b,c", "csv") == ["a", "b", "c"]
    # 既定の変換表はそのまま
    assert coercer.coerce("10", ValueKind.INTEGER) == 10


def test_converter_value_error_becomes_malformed_value() -> None:
    coercer = PropertyCoercer()
    coercer.register("port", int)

    with pytest.raises(MalformedValue):
        coercer.coerce("http", "port")
