"""Exceptions raised while loading and filling AcroForm documents."""


class FormError(Exception):
    """Base class for every error raised by the form engine."""


# ---------------------------------------------------------------------------
# Load errors: the AcroForm field tree could not be located
# ---------------------------------------------------------------------------

class LoadError(FormError):
    pass


class DocumentIoError(LoadError):
    """The PDF could not be read or written."""


class DictionaryKeyNotFound(LoadError):
    """A key needed to reach the form fields is missing."""

    def __init__(self, key, message=None):
        self.key = key
        super().__init__(message or f"Required key {key} not found")


class FieldNotFound(DictionaryKeyNotFound):
    """No field with this name was discovered."""

    def __init__(self, name):
        super().__init__(name, f"No such field: {name!r}")
        self.name = name


class NoSuchReference(LoadError):
    """An indirect reference points at no object."""

    def __init__(self, idnum, generation=0):
        self.idnum = idnum
        self.generation = generation
        super().__init__(f"Reference {idnum} {generation} R points to no object")


class NotAReference(LoadError):
    pass


class UnexpectedType(LoadError):
    pass


class InternalError(FormError):
    """A field that passed discovery is no longer usable."""


# ---------------------------------------------------------------------------
# Value errors: a mutation was rejected and nothing was written
# ---------------------------------------------------------------------------

class FieldValueError(FormError, ValueError):
    pass


class TypeMismatch(FieldValueError):
    """The setter does not match the field's type."""


class InvalidSelection(FieldValueError):
    """One or more selected values are not valid options."""


class TooManySelected(FieldValueError):
    """Several values were selected on a single-select field."""


class FieldError(FormError):
    """A bulk fill failed on one field."""

    def __init__(self, field, value, cause):
        self.field = field
        self.value = value
        self.cause = cause
        super().__init__(f"Cannot set field {field!r} to {value!r}: {cause}")
