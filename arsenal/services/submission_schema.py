"""
Submission payload validation.

The ``submissions.data`` column stores the proposed project fields as
opaque JSON.  Drafts may be partial; before a submission enters review the
payload is checked here and normalised into the exact field set that
approval copies into a ``projects`` row.

Rules:
    name         required, ≤ 200 chars
    description  required, ≥ 10 chars
    link         required, absolute http(s) URL, ≤ 500 chars
    language     required, ≤ 50 chars
    author       required (falls back to the submitter's name)
    repo, usecase                      optional strings (repo ≤ 300 chars)
    theatre      optional, one of THEATRES
    product      optional, one of PRODUCTS
    tags, technical_stack              optional lists of strings
    media        optional {type: image|youtube, url, alt}
"""

from urllib.parse import urlparse

from arsenal.core.exceptions import ValidationError
from arsenal.models.project import FIELD_LENGTHS, PRODUCTS
from arsenal.models.user import THEATRES

MEDIA_TYPES = ("image", "youtube")
MIN_DESCRIPTION_LENGTH = 10

_OPTIONAL_TEXT = ("repo", "usecase")
_LIST_FIELDS = ("tags", "technical_stack")


def _text(data: dict, field: str) -> str:
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        return str(value).strip()
    return value.strip()


def is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_payload(data, default_author: str | None = None) -> dict:
    """Validate a submission payload and return its normalised form.

    Raises:
        ValidationError: with ``details`` mapping each bad field to a reason.
    """
    if not isinstance(data, dict):
        raise ValidationError("Submission data must be a JSON object")

    errors: dict[str, str] = {}
    clean: dict = {}

    name = _text(data, "name")
    if not name:
        errors["name"] = "Project name is required"
    elif len(name) > FIELD_LENGTHS["name"]:
        errors["name"] = f"Project name must be at most {FIELD_LENGTHS['name']} characters"
    clean["name"] = name

    description = _text(data, "description")
    if len(description) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = (
            f"Description needs to be at least {MIN_DESCRIPTION_LENGTH} characters"
        )
    clean["description"] = description

    link = _text(data, "link")
    if not link or not is_http_url(link):
        errors["link"] = "Must be a valid URL"
    elif len(link) > FIELD_LENGTHS["link"]:
        errors["link"] = f"Must be at most {FIELD_LENGTHS['link']} characters"
    clean["link"] = link

    language = _text(data, "language")
    if not language:
        errors["language"] = "Primary language is required"
    elif len(language) > FIELD_LENGTHS["language"]:
        errors["language"] = f"Must be at most {FIELD_LENGTHS['language']} characters"
    clean["language"] = language

    author = _text(data, "author") or (default_author or "").strip()
    if not author:
        errors["author"] = "Author name is required"
    clean["author"] = author

    for field in _OPTIONAL_TEXT:
        value = _text(data, field)
        limit = FIELD_LENGTHS.get(field)
        if limit is not None and len(value) > limit:
            errors[field] = f"Must be at most {limit} characters"
        clean[field] = value or None

    theatre = _text(data, "theatre")
    if theatre and theatre not in THEATRES:
        errors["theatre"] = f"Must be one of: {', '.join(THEATRES)}"
    clean["theatre"] = theatre or None

    product = _text(data, "product")
    if product and product not in PRODUCTS:
        errors["product"] = f"Must be one of: {', '.join(PRODUCTS)}"
    clean["product"] = product or None

    for field in _LIST_FIELDS:
        value = data.get(field) or []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            errors[field] = "Must be a list of strings"
            value = []
        clean[field] = [v.strip() for v in value if v.strip()]

    media = data.get("media")
    if media is not None:
        if (
            not isinstance(media, dict)
            or media.get("type") not in MEDIA_TYPES
            or not isinstance(media.get("url"), str) or not media.get("url")
            or not isinstance(media.get("alt"), str)
        ):
            errors["media"] = "media must be {type: image|youtube, url, alt}"
        else:
            clean["media"] = {"type": media["type"], "url": media["url"], "alt": media["alt"]}

    if errors:
        raise ValidationError("Submission data is invalid", details=errors)
    return clean
