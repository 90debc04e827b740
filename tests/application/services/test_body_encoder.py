# tests/application/services/test_body_encoder.py
import pytest

from application.ports.http_client import BODY_FORM, BODY_MULTIPART, BODY_RAW
from application.services.body_encoder import BodyEncoder, media_type
from domain.exceptions import AttachmentError, SerializationError
from domain.project import FORM_DATA, URL_ENCODED


class TestMediaType:
    def test_defaults_to_json(self):
        assert media_type({}) == "application/json"

    def test_parameters_and_case_ignored(self):
        assert media_type({"content-type": "Application/X-WWW-Form-Urlencoded; charset=utf-8"}) == URL_ENCODED


class TestBodyEncoder:
    def test_json_body_sent_verbatim(self):
        encoded = BodyEncoder().encode({"Content-Type": "application/json"}, '{"a": 1}')
        assert encoded.body.kind == BODY_RAW
        assert encoded.body.raw == '{"a": 1}'
        assert encoded.headers == {"Content-Type": "application/json"}

    def test_missing_body_sends_nothing(self):
        encoded = BodyEncoder().encode({}, None)
        assert encoded.body.kind == BODY_RAW
        assert encoded.body.raw is None

    def test_form_body_becomes_fields(self):
        encoded = BodyEncoder().encode({"Content-Type": URL_ENCODED}, '{"user": "a", "pass": "b"}')
        assert encoded.body.kind == BODY_FORM
        assert encoded.body.fields == [("user", "a"), ("pass", "b")]
        assert encoded.content_type == URL_ENCODED

    def test_form_body_must_be_string_object(self):
        with pytest.raises(SerializationError):
            BodyEncoder().encode({"Content-Type": URL_ENCODED}, '{"count": 3}')

    def test_form_body_must_be_json(self):
        with pytest.raises(SerializationError):
            BodyEncoder().encode({"Content-Type": URL_ENCODED}, "user=a")

    def test_form_without_body_raises(self):
        with pytest.raises(SerializationError):
            BodyEncoder().encode({"Content-Type": URL_ENCODED}, None)

    def test_multipart_reads_file_parts(self, tmp_path):
        # Arrange
        upload = tmp_path / "report.csv"
        upload.write_bytes(b"a,b\n1,2\n")
        body = '{"title": "Q1", "file": "@%s"}' % upload.as_posix()

        # Act
        encoded = BodyEncoder().encode({"Content-Type": FORM_DATA, "Accept": "*/*"}, body)

        # Assert
        assert encoded.body.kind == BODY_MULTIPART
        assert encoded.body.fields == [("title", "Q1")]
        assert len(encoded.body.files) == 1
        part = encoded.body.files[0]
        assert part.name == "file"
        assert part.filename == "report.csv"
        assert part.content == b"a,b\n1,2\n"
        # the transport sets the header with its own boundary
        assert encoded.headers == {"Accept": "*/*"}

    def test_multipart_missing_file_raises(self, tmp_path):
        body = '{"file": "@%s"}' % (tmp_path / "missing.bin").as_posix()
        with pytest.raises(AttachmentError) as excinfo:
            BodyEncoder().encode({"Content-Type": FORM_DATA}, body)
        assert "missing.bin" in str(excinfo.value)
