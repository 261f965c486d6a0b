"""
Decoding errors

All errors raised while turning an uploaded document into a Guide derive
from GuideDecodeError, so callers can catch one type and still tell the
kinds apart through ``code``.
"""


class GuideDecodeError(Exception):
    """Base class for EPG decoding failures"""
    code = "DECODE_ERROR"


class MalformedXMLError(GuideDecodeError):
    """Raised when the tokenizer rejects the markup"""
    code = "MALFORMED_XML"


class TimestampFormatError(GuideDecodeError, ValueError):
    """Raised when a start/stop attribute is not a YYYYMMDDhhmmss value"""
    code = "TIMESTAMP_FORMAT"

    def __init__(self, value: str, attribute: str | None = None):
        self.value = value
        self.attribute = attribute
        where = f" in '{attribute}' attribute" if attribute else ""
        super().__init__(f"Invalid timestamp{where}: '{value}' (expected YYYYMMDDhhmmss)")


class SchemaMismatchError(GuideDecodeError):
    """Raised when an element is structurally incompatible with the model"""
    code = "SCHEMA_MISMATCH"


class DecodeTimeoutError(GuideDecodeError):
    """Raised when decoding an upload exceeds the configured timeout"""
    code = "DECODE_TIMEOUT"


class StreamReadError(GuideDecodeError):
    """Raised when the input stream cannot be read"""
    code = "STREAM_READ"
