"""Submission payload validation tests."""

import pytest

from arsenal.core.exceptions import ValidationError
from arsenal.services.submission_schema import is_http_url, validate_payload


def _errors(data, **kw):
    with pytest.raises(ValidationError) as exc:
        validate_payload(data, **kw)
    return exc.value.details


def test_minimal_payload_is_normalised(payload):
    clean = validate_payload(payload, default_author="Ada Author")
    assert clean["name"] == "Test Project"
    assert clean["author"] == "Ada Author"
    assert clean["tags"] == []
    assert clean["theatre"] is None
    assert "media" not in clean


def test_explicit_author_wins(payload):
    clean = validate_payload({**payload, "author": "Grace"}, default_author="Ada")
    assert clean["author"] == "Grace"


def test_missing_author_without_default(payload):
    assert "author" in _errors(payload)


def test_required_fields():
    errors = _errors({}, default_author="Ada")
    assert set(errors) == {"name", "description", "link", "language"}


def test_description_minimum_length(payload):
    assert "description" in _errors({**payload, "description": "too short"}, default_author="A")


@pytest.mark.parametrize("link", ["github.com/test", "ftp://example.com/x", "https://", "javascript:alert(1)"])
def test_link_must_be_http_url(payload, link):
    assert "link" in _errors({**payload, "link": link}, default_author="A")


@pytest.mark.parametrize("field, value", [
    ("name", "N" * 201),
    ("link", "https://example.com/" + "p" * 500),
    ("repo", "https://github.com/" + "r" * 300),
    ("language", "L" * 51),
])
def test_column_length_limits(payload, field, value):
    errors = _errors({**payload, field: value}, default_author="A")
    assert set(errors) == {field}


def test_lengths_at_the_limit_are_accepted(payload):
    clean = validate_payload({**payload, "language": "L" * 50, "name": "N" * 200},
                             default_author="A")
    assert len(clean["language"]) == 50


def test_enums(payload):
    errors = _errors({**payload, "theatre": "APAC", "product": "Cortex Anything"}, default_author="A")
    assert set(errors) == {"theatre", "product"}


def test_lists_of_strings(payload):
    clean = validate_payload({**payload, "tags": [" soar ", "", "xql"]}, default_author="A")
    assert clean["tags"] == ["soar", "xql"]
    assert "technical_stack" in _errors({**payload, "technical_stack": "python"}, default_author="A")


def test_media(payload):
    media = {"type": "youtube", "url": "https://youtu.be/abc", "alt": "Demo"}
    assert validate_payload({**payload, "media": media}, default_author="A")["media"] == media
    assert "media" in _errors({**payload, "media": {"type": "gif", "url": "x", "alt": ""}},
                              default_author="A")


def test_non_object_payload():
    with pytest.raises(ValidationError):
        validate_payload("name=x")


def test_is_http_url():
    assert is_http_url("http://example.com")
    assert not is_http_url("mailto:someone@example.com")
