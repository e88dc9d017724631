"""Tests for Dto wire encoding."""

import json
import logging
from datetime import date
from enum import Enum
from typing import Optional

import pytest
from httpx import URL
from pydantic import Field

from xconnect import Dto, MultipartFile


class CreateUser(Dto):
    wire_keys = {"secret_password": "password"}

    name: str
    email: str
    secret_password: str
    nickname: Optional[str] = None


class Color(Enum):
    RED = "red"


class Address(Dto):
    city: str


class Profile(Dto):
    color: Color
    homepage: URL
    address: Address
    tags: list[str]
    born: date


class Nullable(Dto):
    emit_null = True

    note: Optional[str] = None


class Aliased(Dto):
    user_id: int = Field(alias="userId")


class Overridden(Dto):
    wire_keys = {"user_id": "uid"}

    user_id: int = Field(alias="userId")


class Search(Dto):
    q: str
    page: int
    exact: bool
    ratio: float
    filters: Optional[Address] = None


class Empty(Dto):
    note: Optional[str] = None


class TestWireMap:
    """Tests for Dto.to_wire_map."""

    def test_declared_order_and_renaming(self):
        user = CreateUser(name="x", email="x@y.z", secret_password="s")

        wire = user.to_wire_map()

        assert wire is not None
        assert list(wire) == ["name", "email", "password"]
        assert wire["password"] == "s"

    def test_unset_optional_is_omitted(self):
        wire = CreateUser(name="x", email="x@y.z", secret_password="s").to_wire_map()

        assert "nickname" not in wire

    def test_set_optional_is_emitted(self):
        wire = CreateUser(
            name="x", email="x@y.z", secret_password="s", nickname="xx"
        ).to_wire_map()

        assert wire["nickname"] == "xx"

    def test_values_are_normalized(self):
        profile = Profile(
            color=Color.RED,
            homepage=URL("https://example.com/me"),
            address=Address(city="Oslo"),
            tags=["a", "b"],
            born=date(1990, 1, 2),
        )

        assert dict(profile.to_wire_map()) == {
            "color": "red",
            "homepage": "https://example.com/me",
            "address": {"city": "Oslo"},
            "tags": ["a", "b"],
            "born": "1990-01-02",
        }

    def test_wire_map_is_read_only(self):
        wire = Address(city="Oslo").to_wire_map()

        with pytest.raises(TypeError):
            wire["city"] = "Bergen"  # type: ignore[index]

    def test_empty_record_yields_none(self):
        assert Empty().to_wire_map() is None

    def test_alias_is_used_as_wire_key(self):
        assert dict(Aliased(user_id=1).to_wire_map()) == {"userId": 1}

    def test_wire_keys_take_precedence_over_alias(self):
        assert dict(Overridden(userId=1).to_wire_map()) == {"uid": 1}

    def test_duplicate_wire_keys_are_rejected(self):
        with pytest.raises(TypeError, match="wire key `b`"):

            class Clash(Dto):
                wire_keys = {"a": "b"}

                a: int
                b: int

    def test_explicit_wire_map_is_normalized(self):
        class Custom(Dto):
            def wire_map(self):
                return {"color": Color.RED, "skip": None}

        assert dict(Custom().to_wire_map()) == {"color": "red"}

    def test_encoding_failure_is_logged_and_yields_none(self, caplog):
        class Broken(Dto):
            def wire_map(self):
                raise RuntimeError("boom")

        with caplog.at_level(logging.WARNING, logger="xconnect"):
            assert Broken().to_wire_map() is None
            assert Broken().to_data() is None

        assert "Encoding Broken failed" in caplog.text


class TestNullPolicy:
    """Tests for explicit None handling."""

    def test_explicit_none_is_omitted_by_default(self):
        assert Empty(note=None).to_data() is None

    def test_explicit_none_is_emitted_when_enabled(self):
        assert Nullable(note=None).to_data() == b'{"note":null}'

    def test_unset_optional_is_omitted_even_when_enabled(self):
        assert Nullable().to_data() is None


class TestToData:
    """Tests for Dto.to_data and Dto.to_string."""

    def test_compact_json(self):
        user = CreateUser(name="x", email="x@y.z", secret_password="s")

        assert user.to_data() == b'{"name":"x","email":"x@y.z","password":"s"}'

    def test_never_empty_object(self):
        assert Empty().to_data() is None

    def test_non_ascii_is_kept(self):
        assert Address(city="Tromsø").to_data() == "{\"city\":\"Tromsø\"}".encode("utf-8")

    def test_bytes_and_files_are_json_friendly(self):
        class Attachment(Dto):
            raw: bytes
            file: MultipartFile

        attachment = Attachment(
            raw=b"\x00\x01", file=MultipartFile(b"abc", "a.txt", "text/plain")
        )

        assert json.loads(attachment.to_data()) == {"raw": "AAE=", "file": "a.txt"}

    def test_to_string(self):
        assert Address(city="Oslo").to_string() == '{"city":"Oslo"}'

    def test_to_string_of_empty_record(self):
        assert Empty().to_string() == repr(Empty())

    def test_nan_is_not_sent(self, caplog):
        class Measure(Dto):
            v: float

        with caplog.at_level(logging.WARNING, logger="xconnect"):
            assert Measure(v=float("nan")).to_data() is None

        assert "Encoding Measure failed" in caplog.text


class TestQueryParams:
    """Tests for Dto.to_query_params."""

    def test_scalars_are_stringified(self):
        search = Search(q="a b", page=2, exact=True, ratio=0.5)

        assert search.to_query_params() == {
            "q": "a b",
            "page": "2",
            "exact": "true",
            "ratio": "0.5",
        }

    def test_nested_record_is_json(self):
        search = Search(q="a", page=1, exact=False, ratio=1.0, filters=Address(city="Oslo"))

        params = search.to_query_params()

        assert params["exact"] == "false"
        assert params["filters"] == '{"city":"Oslo"}'

    def test_empty_record(self):
        assert Empty().to_query_params() is None

    def test_infinite_float_in_nested_value(self, caplog):
        class Range(Dto):
            bounds: list[float]

        with caplog.at_level(logging.WARNING, logger="xconnect"):
            assert Range(bounds=[0.0, float("inf")]).to_query_params() is None

        assert "Encoding Range as query failed" in caplog.text
