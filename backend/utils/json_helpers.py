import json
import logging
import re
from typing import Any

from utils.errors import ParseError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def parse_document(raw: bytes | str, location: str, path: str = "") -> Any:
    """Decode a JSON document, raising ParseError on malformed content."""
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8-sig")
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Malformed document at %s: %s", location, e)
        raise ParseError(f"Failed to parse {location}: {e}", path=path) from e


def segment_name(label: str, code: str) -> str:
    """Build the '{Label}-{Code}' segment name, spaces in the label become '_'."""
    return "%s-%s" % (_WHITESPACE.sub("_", label), code)


def segment_code(name: str) -> str:
    """Code embedded in a segment name: the suffix after the last '-'."""
    return name.rsplit("-", 1)[-1]
