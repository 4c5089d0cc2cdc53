#!/usr/bin/env python3
"""Fill an AcroForm PDF from a flat JSON mapping of field names to values.

Usage:
    python fill.py <input.pdf> <values.json> <output.pdf>

The values.json format is either a flat mapping or the same mapping under
"fields":
{
    "f1_01": "Sophie Martin",           # text field, matched by its last segment
    "Page1[0].c1_1[0]": "true",         # checkbox: "true" (any case) checks it
    "Gender": "Female"                  # radio: one of the field's options
}

Keys do not have to be full field names: a field is matched by its full name,
then with [n] indexes stripped and leading segments dropped in turn.
Choice and push button fields are not filled.
"""

import argparse
import json
import sys
from pathlib import Path

from acroform import Form
from formerrors import FieldError, LoadError


def load_values(values_path):
    """Read the JSON mapping; non-string values are kept as their JSON text."""
    with open(values_path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict) and isinstance(data.get("fields"), dict):
        data = data["fields"]
    if not isinstance(data, dict):
        raise ValueError("values file must hold a JSON object")
    return {
        str(key): value if isinstance(value, str) else json.dumps(value)
        for key, value in data.items()
    }


def fill_pdf(input_path, values_path, output_path):
    values = load_values(values_path)
    form = Form.load(str(input_path))
    filled = form.fill(values)
    form.save(str(output_path))
    return {
        "status": "success",
        "output": str(output_path),
        "fields_filled": len(filled),
        "filled": filled,
    }


def main():
    parser = argparse.ArgumentParser(description="Fill an AcroForm PDF")
    parser.add_argument("input_pdf", help="Path to input PDF")
    parser.add_argument("values", help="Path to JSON mapping of field names to values")
    parser.add_argument("output_pdf", help="Path for output PDF")
    args = parser.parse_args()

    if not Path(args.input_pdf).exists():
        print(json.dumps({"error": f"Input PDF not found: {args.input_pdf}"}), file=sys.stderr)
        sys.exit(1)
    if not Path(args.values).exists():
        print(json.dumps({"error": f"Values file not found: {args.values}"}), file=sys.stderr)
        sys.exit(1)

    try:
        result = fill_pdf(args.input_pdf, args.values, args.output_pdf)
    except FieldError as e:
        print(json.dumps({
            "error": "Field rejected value",
            "field": e.field,
            "value": e.value,
            "reason": type(e.cause).__name__,
        }, ensure_ascii=False), file=sys.stderr)
        sys.exit(1)
    except (LoadError, ValueError) as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, ensure_ascii=False))


if __name__ == "__main__":
    main()
