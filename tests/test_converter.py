"""Tests for response decoding and decoding diagnostics."""

import logging
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from xconnect._utils import (
    ErrorReporter,
    decode_payload,
    decode_response,
    format_decoding_error,
    pretty_error,
)
from xconnect.models import (
    DataCorruptedError,
    DecodingError,
    KeyNotFoundError,
    ResponseSource,
    TypeMismatchError,
    UnknownDecodingError,
    ValueNotFoundError,
)


class User(BaseModel):
    id: int
    name: str
    nickname: Optional[str] = None


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_bytes_are_returned_verbatim(self):
        data = b"\xff\x00 not json"

        assert decode_payload(data, bytes) is data

    def test_str_is_utf8_text(self):
        assert decode_payload("Tromsø".encode("utf-8"), str) == "Tromsø"

    def test_invalid_utf8_str_is_none(self):
        assert decode_payload(b"\xff\xfe", str) is None

    def test_model(self):
        assert decode_payload(b'{"id":1,"name":"a"}', User) == User(id=1, name="a")

    def test_list_of_models(self):
        users = decode_payload(b'[{"id":1,"name":"a"},{"id":2,"name":"b"}]', list[User])

        assert [user.id for user in users] == [1, 2]

    def test_scalar(self):
        assert decode_payload(b"42", int) == 42


class TestDecodingErrors:
    """Tests for mapping validation failures to DecodingError variants."""

    def test_missing_key(self):
        with pytest.raises(KeyNotFoundError) as exc_info:
            decode_payload(b'{"id":1}', User, 200)

        error = exc_info.value
        assert error.key == "name"
        assert error.coding_path == ("name",)
        assert error.status_code == 200

    def test_nested_path(self):
        with pytest.raises(KeyNotFoundError) as exc_info:
            decode_payload(b'[{"id":1}]', list[User])

        assert exc_info.value.coding_path == (0, "name")
        assert exc_info.value.path_description == "0 → name"

    def test_type_mismatch(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            decode_payload(b'{"id":"x","name":"a"}', User)

        assert exc_info.value.coding_path == ("id",)
        assert exc_info.value.expected_type == "int"

    def test_null_value(self):
        with pytest.raises(ValueNotFoundError) as exc_info:
            decode_payload(b'{"id":null,"name":"a"}', User)

        assert exc_info.value.expected_type == "int"

    def test_corrupted_json(self):
        with pytest.raises(DataCorruptedError) as exc_info:
            decode_payload(b"not json", User)

        assert exc_info.value.path_description == "Root"

    def test_other_validation_failures(self):
        with pytest.raises(UnknownDecodingError):
            decode_payload(b"5", Annotated[int, Field(gt=10)])

    def test_all_variants_are_decoding_errors(self):
        with pytest.raises(DecodingError):
            decode_payload(b"{}", User)


class TestDecodeResponse:
    """Tests for decode_response."""

    def test_builds_typed_response(self):
        response = decode_response(
            b'{"id":1,"name":"a"}',
            200,
            User,
            headers={"X-Request-ID": "r1"},
            url="https://api.example.com/v1/users/1",
        )

        assert response.payload == User(id=1, name="a")
        assert response.status_code == 200
        assert response.success
        assert response.header_items == (("X-Request-ID", "r1"),)
        assert response.url == "https://api.example.com/v1/users/1"
        assert response.content == b'{"id":1,"name":"a"}'

    def test_defaults_to_bytes(self):
        response = decode_response(b"raw", 204)

        assert response.payload == b"raw"
        assert response.source is ResponseSource.NETWORK


class TestPrettyErrors:
    """Tests for decoding diagnostics."""

    def test_key_not_found(self):
        error = KeyNotFoundError("Field required", coding_path=("user", "name"))

        assert format_decoding_error(error) == "\n".join(
            [
                "❌ Key Not Found Error",
                "------------------------",
                "Missing Key: name",
                "Location: user → name",
                "Details: Field required",
                "",
                '💡 Solution: Please ensure the JSON contains the required key "name"',
            ]
        )

    def test_type_mismatch(self):
        error = TypeMismatchError("bad int", coding_path=("id",), expected_type="int")

        message = format_decoding_error(error)

        assert message.splitlines()[0] == "❌ Type Mismatch Error"
        assert "Expected Type: int" in message
        assert "Location: id" in message
        assert message.endswith("💡 Solution: Please ensure the value matches the expected type")

    def test_data_corrupted_has_no_expected_type(self):
        error = DataCorruptedError("Invalid JSON", expected_type="User")

        message = format_decoding_error(error)

        assert "Expected Type" not in message
        assert "Location: Root" in message
        assert message.endswith("💡 Solution: Please verify the data format is valid")

    def test_value_not_found(self):
        message = format_decoding_error(ValueNotFoundError("null", expected_type="str"))

        assert message.endswith("💡 Solution: Please check if the value is null or missing")

    def test_other_errors(self):
        assert pretty_error(RuntimeError("boom")) == "❌ Error\n------------------------\nboom"

    def test_reporter_logs_message(self, caplog):
        reporter = ErrorReporter(logging.getLogger("xconnect.tests"), level=logging.WARNING)
        error = UnknownDecodingError("weird")

        with caplog.at_level(logging.WARNING, logger="xconnect.tests"):
            message = reporter.report(error)

        assert message == format_decoding_error(error)
        assert "❌ Unknown Decoding Error" in caplog.text
        assert "💡 Solution: Please check the data structure and format" in caplog.text
