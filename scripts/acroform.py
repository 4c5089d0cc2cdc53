"""Read and fill the interactive fields of an AcroForm PDF.

    form = Form.load("w9.pdf")
    form.get_field_names()
    form.get_state("topmostSubform[0].Page1[0].f1_01[0]")
    form.fill({"f1_01": "Sophie Martin", "c1_1": "true"})
    form.save("w9_filled.pdf")

Fields are discovered once, when the form is loaded, by walking the
/AcroForm /Fields tree breadth-first. Types and states are decoded from the
live field dictionaries on every call; setters write straight into the
document held by the reader, and `save` serializes it with its changes.
"""

import io
import logging
from collections import deque
from pathlib import Path

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
)

from fieldtypes import (
    OFF_STATE,
    ON_STATE,
    FieldFlags,
    FieldType,
    appearance_states,
    classify,
    decode_state,
    field_flags,
    kid_widgets,
    radio_options,
    resolve,
)
from formerrors import (
    DictionaryKeyNotFound,
    DocumentIoError,
    FieldError,
    FieldNotFound,
    FieldValueError,
    InternalError,
    InvalidSelection,
    NoSuchReference,
    NotAReference,
    TooManySelected,
    TypeMismatch,
    UnexpectedType,
)
from fuzzy import match_key
from pdfstring import name_object, text_object, text_value

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field discovery
# ---------------------------------------------------------------------------

def dereference(reader, ref):
    """Resolve `ref` strictly: it must be a reference to an existing object."""
    if not isinstance(ref, IndirectObject):
        raise NotAReference(f"Expected an indirect reference, got {type(ref).__name__}")
    try:
        obj = reader.get_object(ref)
    except PyPdfError as exc:
        raise NoSuchReference(ref.idnum, ref.generation) from exc
    if obj is None or isinstance(obj, NullObject):
        raise NoSuchReference(ref.idnum, ref.generation)
    return obj


def _require(dictionary, key):
    if key not in dictionary:
        raise DictionaryKeyNotFound(key)
    return dictionary.get(key)


def _require_dict(obj, what):
    if not isinstance(obj, DictionaryObject):
        raise UnexpectedType(f"{what} is {type(obj).__name__}, expected a dictionary")
    return obj


def locate_acroform(reader):
    """Follow trailer /Root -> /AcroForm -> /Fields.

    Returns the AcroForm dictionary and its /Fields array.
    """
    catalog = _require_dict(dereference(reader, _require(reader.trailer, "/Root")), "/Root")
    acroform = _require_dict(dereference(reader, _require(catalog, "/AcroForm")), "/AcroForm")
    fields = _require(acroform, "/Fields")
    if isinstance(fields, IndirectObject):
        fields = dereference(reader, fields)
    if not isinstance(fields, ArrayObject):
        raise UnexpectedType(f"/Fields is {type(fields).__name__}, expected an array")
    return acroform, fields


def full_name(field):
    """Dot-joined /T names from the outermost ancestor down to `field`.

    Returns None when the field has no /T of its own, when a name cannot be
    decoded, or when the /Parent chain is broken or cyclic.
    """
    segments = []
    seen = set()
    current = field
    while True:
        if id(current) in seen:
            logger.debug("Cycle in /Parent chain of %r", field.get("/T"))
            return None
        seen.add(id(current))

        if "/T" in current:
            segment = text_value(resolve(current.get("/T")))
            if segment is None:
                return None
            segments.append(segment)
        elif current is field:
            return None

        if "/Parent" not in current:
            break
        current = resolve(current.get("/Parent"))
        if not isinstance(current, DictionaryObject):
            return None

    return ".".join(reversed(segments))


def discover_fields(reader, fields):
    """Breadth-first walk of the field tree, returning {full name: reference}."""
    index = {}
    queue = deque(fields)
    visited = set()
    while queue:
        ref = queue.popleft()
        field = dereference(reader, ref)
        key = (ref.idnum, ref.generation)
        if key in visited:
            logger.debug("Skipping already visited object %d %d R", *key)
            continue
        visited.add(key)
        if not isinstance(field, DictionaryObject):
            continue

        if "/FT" in field:
            name = full_name(field)
            if name is None:
                logger.debug("Skipping field %d %d R without a usable name", *key)
            else:
                index[name] = ref

        kids = resolve(field.get("/Kids"))
        if isinstance(kids, ArrayObject):
            queue.extend(kids)
    return index


# ---------------------------------------------------------------------------
# Form
# ---------------------------------------------------------------------------

class Form:
    """A PDF whose AcroForm fields can be read and filled by name."""

    def __init__(self, reader):
        self._reader = reader
        self._acroform, fields = locate_acroform(reader)
        self._fields = discover_fields(reader, fields)

    @classmethod
    def load(cls, source):
        """Load a form from bytes, a file path or a binary stream."""
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        try:
            reader = PdfReader(source)
        except (OSError, PyPdfError) as exc:
            raise DocumentIoError(f"Failed to read PDF: {exc}") from exc
        return cls(reader)

    def __len__(self):
        return len(self._fields)

    def __contains__(self, name):
        return name in self._fields

    def get_field_names(self):
        return list(self._fields)

    def get_field(self, name):
        """The live field dictionary for `name`."""
        try:
            ref = self._fields[name]
        except KeyError:
            raise FieldNotFound(name) from None
        field = resolve(ref)
        if not isinstance(field, DictionaryObject):
            raise InternalError(f"Field {name!r} no longer resolves to a dictionary")
        return field

    def get_type(self, name):
        return classify(self.get_field(name))

    def get_all_types(self):
        return {name: self.get_type(name) for name in self._fields}

    def get_flags(self, name):
        flags = field_flags(self.get_field(name))
        return FieldFlags(flags & (FieldFlags.READ_ONLY | FieldFlags.REQUIRED | FieldFlags.NO_EXPORT))

    def get_state(self, name):
        field = self.get_field(name)
        return decode_state(classify(field), field)

    # -----------------------------------------------------------------------
    # Setters. Each one validates before its first write, so a rejected
    # value leaves the field dictionary as it was.
    # -----------------------------------------------------------------------

    def _expect(self, name, field, *expected):
        field_type = classify(field)
        if field_type not in expected:
            wanted = " or ".join(t.value for t in expected)
            raise TypeMismatch(f"Field {name!r} is a {field_type.value} field, not {wanted}")
        return field_type

    def set_text(self, name, text):
        field = self.get_field(name)
        self._expect(name, field, FieldType.TEXT)
        field[NameObject("/V")] = text_object(text)
        self._invalidate_appearance(field)

    def _invalidate_appearance(self, field):
        if "/AP" in field:
            del field["/AP"]
        for kid in kid_widgets(field):
            widget = resolve(kid)
            if isinstance(widget, DictionaryObject) and "/T" not in widget and "/AP" in widget:
                del widget["/AP"]
        self._acroform[NameObject("/NeedAppearances")] = BooleanObject(True)

    def set_radio(self, name, choice):
        field = self.get_field(name)
        self._expect(name, field, FieldType.RADIO)
        options = radio_options(field)
        if choice not in options:
            raise InvalidSelection(f"{choice!r} is not an option of {name!r}: {options}")

        for kid in kid_widgets(field):
            widget = resolve(kid)
            if not isinstance(widget, DictionaryObject):
                continue
            state = choice if choice in appearance_states(widget) else OFF_STATE
            widget[NameObject("/AS")] = name_object(state)
        field[NameObject("/V")] = name_object(choice)

    def set_check_box(self, name, is_checked):
        field = self.get_field(name)
        self._expect(name, field, FieldType.CHECKBOX)
        state = ON_STATE if is_checked else OFF_STATE
        field[NameObject("/V")] = name_object(state)
        field[NameObject("/AS")] = name_object(state)

    def set_choice(self, name, choices):
        field = self.get_field(name)
        field_type = self._expect(name, field, FieldType.LISTBOX, FieldType.COMBOBOX)
        if isinstance(choices, str):
            choices = [choices]
        choices = list(choices)

        state = decode_state(field_type, field)
        invalid = [choice for choice in choices if choice not in state.options]
        if invalid:
            raise InvalidSelection(f"{invalid} not among the options of {name!r}: {state.options}")
        if not state.multiselect and len(choices) > 1:
            raise TooManySelected(f"{name!r} accepts a single selection, got {len(choices)}")

        if not choices:
            value = NullObject()
        elif len(choices) == 1:
            value = text_object(choices[0])
        else:
            value = ArrayObject(text_object(choice) for choice in choices)
        field[NameObject("/V")] = value

    # -----------------------------------------------------------------------
    # Bulk fill
    # -----------------------------------------------------------------------

    def fill(self, values):
        """Set every field whose name resolves to a key of `values`.

        Radio, check box and text fields are filled; push buttons and choice
        fields are left alone. Stops at the first rejected value with a
        FieldError. Returns the names of the fields that were set.
        """
        filled = []
        for name in self.get_field_names():
            key = match_key(name, values)
            if key is None:
                continue
            value = values[key]
            field_type = self.get_type(name)
            try:
                if field_type is FieldType.RADIO:
                    self.set_radio(name, value)
                elif field_type is FieldType.CHECKBOX:
                    self.set_check_box(name, value.lower() == "true")
                elif field_type is FieldType.TEXT:
                    self.set_text(name, value)
                elif field_type in (FieldType.BUTTON, FieldType.LISTBOX, FieldType.COMBOBOX):
                    logger.debug("Not filling %s field %r", field_type.value, name)
                    continue
                else:
                    raise InternalError(f"Unhandled field type {field_type!r}")
            except FieldValueError as exc:
                raise FieldError(name, value, exc) from exc
            filled.append(name)
        return filled

    # -----------------------------------------------------------------------
    # Output
    # -----------------------------------------------------------------------

    def save(self, target):
        """Write the document, with its changes, to a path or binary stream."""
        try:
            writer = PdfWriter(clone_from=self._reader)
            if isinstance(target, (str, Path)):
                with open(target, "wb") as f:
                    writer.write(f)
            else:
                writer.write(target)
        except (OSError, PyPdfError) as exc:
            raise DocumentIoError(f"Failed to write PDF: {exc}") from exc

    def to_bytes(self):
        buf = io.BytesIO()
        self.save(buf)
        return buf.getvalue()
