#!/usr/bin/env python3
"""Extract the fillable fields of an AcroForm PDF: names, types and states.

Usage:
    python extract.py <input.pdf> [--field NAME] [--pretty]

Outputs JSON to stdout:
{
    "file": "form.pdf",
    "num_fields": 2,
    "fields": [
        {
            "name": "topmostSubform[0].Page1[0].f1_01[0]",
            "type": "text",                 # button, radio, checkbox, listbox, combobox, text
            "state": {"text": ""},
            "readonly": false,
            "required": false
        }
    ]
}
"""

import argparse
import json
import sys
from pathlib import Path

from acroform import Form
from fieldtypes import FieldFlags
from formerrors import FieldNotFound, LoadError


def describe_field(form, name):
    flags = form.get_flags(name)
    state = form.get_state(name)
    return {
        "name": name,
        "type": state.field_type.value,
        "state": state.as_dict(),
        "readonly": bool(flags & FieldFlags.READ_ONLY),
        "required": bool(flags & FieldFlags.REQUIRED),
    }


def extract_fields(pdf_path, field_name=None):
    """Load a PDF and describe its fields (or only `field_name`)."""
    form = Form.load(str(pdf_path))
    names = [field_name] if field_name is not None else form.get_field_names()
    fields = [describe_field(form, name) for name in names]
    return {
        "file": str(pdf_path),
        "num_fields": len(fields),
        "fields": fields,
    }


def main():
    parser = argparse.ArgumentParser(description="Extract AcroForm fields from a PDF")
    parser.add_argument("pdf", help="Path to PDF file")
    parser.add_argument("--field", default=None, help="Describe only this field")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    if not Path(args.pdf).exists():
        print(json.dumps({"error": f"File not found: {args.pdf}"}), file=sys.stderr)
        sys.exit(1)

    try:
        result = extract_fields(args.pdf, args.field)
    except FieldNotFound as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)
    except LoadError as e:
        print(json.dumps({"error": f"Not a fillable form: {e}"}), file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    print(json.dumps(result, indent=indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
