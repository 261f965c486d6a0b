"""
EPG Decoder Service

Streams an XMLTV document through lxml's pull parser and decodes the first
``<tv>`` element into a Guide. Programmes are decoded one by one as their
end tag is seen and released from the tree right after.
"""
from typing import BinaryIO, TypeVar
import io
import logging
import threading

from lxml import etree # type: ignore

from app.exceptions import (
    DecodeTimeoutError,
    MalformedXMLError,
    SchemaMismatchError,
    StreamReadError,
)
from app.models import (
    Broadcast,
    Catchup,
    Category,
    ContentRating,
    Credits,
    Description,
    EpisodeNumber,
    Format,
    Guide,
    Icon,
    Replay,
    SeasonNumber,
    SeriesId,
    SeriesInfo,
    SeriesName,
    TextValue,
    Title,
)
from app.utils.timestamps import parse_xmltv_timestamp


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

GUIDE_TAG = 'tv'
BROADCAST_TAG = 'programme'

# Attributes of <programme>; a child element with one of these names is a schema error
BROADCAST_ATTRIBUTES = ('channel', 'id', 'start', 'stop')
TIMESTAMP_ATTRIBUTES = ('start', 'stop')

# element name -> (model field, leaf type)
BROADCAST_TEXT_FIELDS: dict[str, tuple[str, type[TextValue]]] = {
    'catchup': ('catchup', Catchup),
    'category': ('category', Category),
    'cna-rating': ('rating', ContentRating),
    'desc': ('description', Description),
    'format': ('format', Format),
    'replay': ('replay', Replay),
    'title': ('title', Title),
}

SERIES_TEXT_FIELDS: dict[str, tuple[str, type[TextValue]]] = {
    'episode-num': ('episode_num', EpisodeNumber),
    'season-num': ('season_num', SeasonNumber),
    'series-id': ('series_id', SeriesId),
    'series-name': ('series_name', SeriesName),
}

T = TypeVar('T', bound=TextValue)


def decode_guide(
    stream: BinaryIO | bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    cancel_event: threading.Event | None = None
) -> Guide:
    """
    Decode an XMLTV document into a Guide

    The stream is read forward once. Decoding stops at the end tag of the
    first <tv> element; anything after it is not inspected.

    Args:
        stream: Binary file-like object (or raw bytes) with the XML document
        chunk_size: Number of bytes fed to the tokenizer per read
        cancel_event: When set, decoding stops before the next read

    Returns:
        Guide with broadcasts in document order. A document without any
        element, or without a <tv> element, yields an empty Guide.

    Raises:
        MalformedXMLError: If the markup is not well-formed
        TimestampFormatError: If a start/stop attribute is not YYYYMMDDhhmmss
        SchemaMismatchError: If an element does not fit the modeled type
        StreamReadError: If reading the stream fails
        DecodeTimeoutError: If cancel_event was set while decoding
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)

    # Internal DTD entities are expanded, external ones are never loaded
    parser = etree.XMLPullParser(
        events=('start', 'end'),
        resolve_entities='internal',
        no_network=True,
    )

    root: etree._Element | None = None
    broadcasts: list[Broadcast] = []
    element_seen = False

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise DecodeTimeoutError("Decoding abandoned after timeout")

        try:
            data = stream.read(chunk_size)
        except (OSError, ValueError) as e:
            raise StreamReadError(f"Failed to read upload: {e}") from e
        if not data:
            break

        try:
            parser.feed(data)
            syntax_error = None
        except etree.XMLSyntaxError as e:
            syntax_error = e

        # Events produced before a syntax error are still delivered
        for event, element in parser.read_events():
            element_seen = True

            if root is None:
                if event == 'start' and _local_name(element) == GUIDE_TAG:
                    logger.debug("Found <tv> root element, decoding broadcasts...")
                    root = element
                continue

            if event != 'end':
                continue

            if element is root:
                logger.debug(f"Decoded {len(broadcasts)} broadcasts")
                return Guide(broadcasts=broadcasts)

            if element.getparent() is root and _local_name(element) == BROADCAST_TAG:
                broadcasts.append(_decode_broadcast(element))
                _release(element)

        if syntax_error is not None:
            raise MalformedXMLError(f"Malformed XML: {syntax_error}") from syntax_error

    if not element_seen:
        # Blank input, or only a declaration, comments or processing instructions
        logger.debug("Document has no elements, returning empty guide")
        return Guide()

    try:
        parser.close()
    except etree.XMLSyntaxError as e:
        raise MalformedXMLError(f"Malformed XML: {e}") from e

    logger.debug("No <tv> element found, returning empty guide")
    return Guide()


def _decode_broadcast(element: etree._Element) -> Broadcast:
    """Decode a complete <programme> element"""
    fields: dict[str, object] = {
        'channel': _get_attribute(element, 'channel'),
        'id': _get_attribute(element, 'id'),
    }

    for name in TIMESTAMP_ATTRIBUTES:
        raw = _get_attribute(element, name)
        fields[name] = parse_xmltv_timestamp(raw, name) if raw is not None else None

    for child in _child_elements(element):
        name = _local_name(child)

        if name in BROADCAST_ATTRIBUTES:
            raise SchemaMismatchError(
                f"<{BROADCAST_TAG}> '{name}' must be an attribute, found a child element"
            )

        if name in BROADCAST_TEXT_FIELDS:
            field, value_type = BROADCAST_TEXT_FIELDS[name]
            fields[field] = _decode_text(child, value_type)
        elif name == 'credits':
            fields['credits'] = Credits()
        elif name == 'icon':
            fields['icon'] = _decode_icon(child)
        elif name == 'series':
            fields['series'] = _decode_series(child)

    return Broadcast(**fields)


def _decode_series(element: etree._Element) -> SeriesInfo:
    """Decode a <series> element"""
    fields: dict[str, TextValue] = {}

    for child in _child_elements(element):
        name = _local_name(child)
        if name in SERIES_TEXT_FIELDS:
            field, value_type = SERIES_TEXT_FIELDS[name]
            fields[field] = _decode_text(child, value_type)

    return SeriesInfo(**fields)


def _decode_icon(element: etree._Element) -> Icon:
    """Decode an <icon> element"""
    for child in _child_elements(element):
        if _local_name(child) == 'src':
            raise SchemaMismatchError("<icon> 'src' must be an attribute, found a child element")

    return Icon(src=_get_attribute(element, 'src'))


def _decode_text(element: etree._Element, value_type: type[T]) -> T:
    """Decode a leaf element holding character data only"""
    parts = [element.text or '']

    for child in element:
        if child.tag is etree.Entity:
            raise MalformedXMLError(
                f"<{_local_name(element)}> contains unresolved entity reference {child.text}"
            )
        # Comments and processing instructions are skipped, their tails kept
        if isinstance(child.tag, str):
            raise SchemaMismatchError(
                f"<{_local_name(element)}> expects text content, "
                f"found nested <{_local_name(child)}> element"
            )
        parts.append(child.tail or '')

    return value_type(text=''.join(parts))


def _child_elements(element: etree._Element) -> list[etree._Element]:
    """Child elements, without comments or processing instructions"""
    return [child for child in element if isinstance(child.tag, str)]


def _get_attribute(element: etree._Element, name: str) -> str | None:
    """Get attribute value by local name, ignoring its namespace"""
    value = element.get(name)
    if value is not None:
        return value

    for key, value in element.attrib.items():
        if etree.QName(key).localname == name:
            return value
    return None


def _local_name(element: etree._Element) -> str:
    """Element tag without namespace"""
    return etree.QName(element).localname


def _release(element: etree._Element) -> None:
    """Free a decoded element and its already processed siblings"""
    element.clear(keep_tail=True)
    parent = element.getparent()
    while element.getprevious() is not None:
        del parent[0]
