"""AcroForm field types, flag bits and state decoding.

A field's type is never stored: it is derived from the /FT tag and the /Ff
flag bits each time it is asked for, so it always reflects the live
dictionary. The same goes for the decoded state.
"""

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import ClassVar

from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    StreamObject,
)

from formerrors import InternalError
from pdfstring import name_value, text_value


def resolve(obj):
    """Recursively resolve indirect references."""
    while isinstance(obj, IndirectObject):
        obj = obj.get_object()
    return obj


# ---------------------------------------------------------------------------
# Flags (PDF 32000-1, tables 221, 226 and 230)
# ---------------------------------------------------------------------------

class FieldFlags(IntFlag):
    READ_ONLY = 1 << 0
    REQUIRED = 1 << 1
    NO_EXPORT = 1 << 2


class ButtonFlags(IntFlag):
    NO_TOGGLE_TO_OFF = 1 << 14
    RADIO = 1 << 15
    PUSHBUTTON = 1 << 16
    RADIO_IN_UNISON = 1 << 25


class ChoiceFlags(IntFlag):
    COMBO = 0x20000
    EDIT = 0x40000
    SORT = 0x80000
    MULTISELECT = 0x200000
    DO_NOT_SPELLCHECK = 0x800000
    COMMIT_ON_CHANGE = 0x8000000


ON_STATE = "Yes"
OFF_STATE = "Off"


class FieldType(str, Enum):
    BUTTON = "button"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    LISTBOX = "listbox"
    COMBOBOX = "combobox"
    TEXT = "text"


def field_flags(field):
    """The /Ff integer of a field dictionary, 0 when absent or malformed."""
    flags = resolve(field.get("/Ff", 0))
    if isinstance(flags, int):
        return flags
    return 0


def classify(field):
    ft = resolve(field.get("/FT"))
    flags = field_flags(field)
    if ft == "/Btn":
        # Radio wins over pushbutton when a producer sets both
        if flags & ButtonFlags.RADIO:
            return FieldType.RADIO
        if flags & ButtonFlags.PUSHBUTTON:
            return FieldType.BUTTON
        return FieldType.CHECKBOX
    if ft == "/Ch":
        if flags & ChoiceFlags.COMBO:
            return FieldType.COMBOBOX
        return FieldType.LISTBOX
    return FieldType.TEXT


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ButtonState:
    field_type: ClassVar[FieldType] = FieldType.BUTTON

    def as_dict(self):
        return {}


@dataclass(frozen=True)
class RadioState:
    field_type: ClassVar[FieldType] = FieldType.RADIO
    selected: str = ""
    options: tuple = ()

    def as_dict(self):
        return {"selected": self.selected, "options": list(self.options)}


@dataclass(frozen=True)
class CheckBoxState:
    field_type: ClassVar[FieldType] = FieldType.CHECKBOX
    is_checked: bool = False

    def as_dict(self):
        return {"is_checked": self.is_checked}


@dataclass(frozen=True)
class _ChoiceState:
    selected: tuple = ()
    options: tuple = ()
    multiselect: bool = False

    def as_dict(self):
        return {
            "selected": list(self.selected),
            "options": list(self.options),
            "multiselect": self.multiselect,
        }


@dataclass(frozen=True)
class ListBoxState(_ChoiceState):
    field_type: ClassVar[FieldType] = FieldType.LISTBOX


@dataclass(frozen=True)
class ComboBoxState(_ChoiceState):
    field_type: ClassVar[FieldType] = FieldType.COMBOBOX


@dataclass(frozen=True)
class TextState:
    field_type: ClassVar[FieldType] = FieldType.TEXT
    text: str = ""

    def as_dict(self):
        return {"text": self.text}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def appearance_states(widget):
    """Names of the normal appearance states (/AP /N keys) of a widget."""
    widget = resolve(widget)
    if not isinstance(widget, DictionaryObject):
        return []
    ap = resolve(widget.get("/AP"))
    if not isinstance(ap, DictionaryObject):
        return []
    normal = resolve(ap.get("/N"))
    # A single appearance stream has no states to choose from
    if not isinstance(normal, DictionaryObject) or isinstance(normal, StreamObject):
        return []
    states = []
    for key in normal.keys():
        state = name_value(key)
        if state is not None:
            states.append(state)
    return states


def kid_widgets(field):
    kids = resolve(field.get("/Kids"))
    if not isinstance(kids, ArrayObject):
        return []
    return list(kids)


def radio_options(field):
    options = []
    for kid in kid_widgets(field):
        for state in appearance_states(kid):
            if state not in options:
                options.append(state)
    return options


def _current_value(field):
    """/V if present, else /AS, else None."""
    if "/V" in field:
        return resolve(field.get("/V"))
    if "/AS" in field:
        return resolve(field.get("/AS"))
    return None


def _radio_selection(field):
    value = _current_value(field)
    selected = name_value(value)
    if selected is None:
        selected = text_value(value)
    return selected or ""


def _selected_choices(value):
    value = resolve(value)
    if isinstance(value, ArrayObject):
        items = [text_value(resolve(item)) for item in value]
    else:
        items = [text_value(value)]
    return [item for item in items if item is not None]


def _choice_options(opt):
    opt = resolve(opt)
    if not isinstance(opt, ArrayObject):
        return []
    options = []
    for entry in opt:
        entry = resolve(entry)
        if isinstance(entry, ArrayObject):
            # [export value, display text]
            text = text_value(resolve(entry[1])) if len(entry) >= 2 else None
        else:
            text = text_value(entry)
        if text:
            options.append(text)
    return options


def decode_state(field_type, field):
    """Decode the current state of `field` as the variant for `field_type`."""
    if field_type is FieldType.BUTTON:
        return ButtonState()
    if field_type is FieldType.RADIO:
        return RadioState(
            selected=_radio_selection(field),
            options=tuple(radio_options(field)),
        )
    if field_type is FieldType.CHECKBOX:
        return CheckBoxState(is_checked=name_value(_current_value(field)) == ON_STATE)
    if field_type in (FieldType.LISTBOX, FieldType.COMBOBOX):
        state_cls = ComboBoxState if field_type is FieldType.COMBOBOX else ListBoxState
        return state_cls(
            selected=tuple(_selected_choices(field.get("/V"))),
            options=tuple(_choice_options(field.get("/Opt"))),
            multiselect=bool(field_flags(field) & ChoiceFlags.MULTISELECT),
        )
    if field_type is FieldType.TEXT:
        return TextState(text=text_value(resolve(field.get("/V"))) or "")
    raise InternalError(f"Unhandled field type {field_type!r}")
