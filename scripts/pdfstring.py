"""Text encoding for PDF string and name objects.

Field names (/T) and text values (/V) are stored as PDF strings, usually
UTF-16BE prefixed with a byte order mark. PDF 2.0 also allows UTF-16LE and
UTF-8 with their own marks. Some producers append a NUL terminator, which is
cut off here.
"""

import codecs

from pypdf.generic import (
    ByteStringObject,
    NameObject,
    TextStringObject,
    decode_pdfdocencoding,
)

BOM = codecs.BOM_UTF16_BE  # b"\xfe\xff"

UTF16_BOMS = {
    codecs.BOM_UTF16_BE: "utf-16-be",
    codecs.BOM_UTF16_LE: "utf-16-le",
}
BOMS = (*UTF16_BOMS, codecs.BOM_UTF8)


def _decode_utf16(body, encoding):
    if len(body) % 2:
        body += b"\x00"
    # Cut at the first zero code unit, not the first zero byte
    for i in range(0, len(body), 2):
        if body[i:i + 2] == b"\x00\x00":
            body = body[:i]
            break
    try:
        return body.decode(encoding)
    except UnicodeDecodeError:
        return None


def decode_text(raw):
    """Decode raw PDF string bytes, or return None if they are not text."""
    for bom, encoding in UTF16_BOMS.items():
        if raw.startswith(bom):
            return _decode_utf16(raw[len(bom):], encoding)

    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):].split(b"\x00", 1)[0]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    raw = raw.split(b"\x00", 1)[0]
    try:
        return decode_pdfdocencoding(raw)
    except UnicodeDecodeError:
        return None


def encode_text(text):
    """Encode text as BOM-prefixed UTF-16BE bytes."""
    return BOM + text.encode("utf-16-be")


def string_bytes(obj):
    """Raw bytes of a pypdf string object, None for any other object."""
    if isinstance(obj, ByteStringObject):
        return bytes(obj)
    if isinstance(obj, TextStringObject):
        return obj.get_encoded_bytes()
    return None


def text_value(obj):
    raw = string_bytes(obj)
    if raw is None:
        return None
    if isinstance(obj, TextStringObject) and not raw.startswith(BOMS):
        # pypdf already decoded it, including unmarked UTF-16
        return str(obj).split("\x00", 1)[0]
    return decode_text(raw)


def text_object(text):
    """Build a string object holding `text` in its UTF-16BE encoding."""
    return ByteStringObject(encode_text(text))


def name_value(obj):
    """A name object's value without the leading slash."""
    if isinstance(obj, NameObject):
        return obj[1:] if obj.startswith("/") else str(obj)
    return None


def name_object(value):
    return NameObject("/" + value)
