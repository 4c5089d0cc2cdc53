#!/usr/bin/env python3
"""Verify that a filled PDF holds the values it was filled with.

Every field of the PDF is matched against the values file with the same
rules fill.py uses, then its decoded state is compared with the expected
value.

Usage:
    python verify.py <filled.pdf> <values.json> [--pretty]

Outputs a JSON report with pass/fail for each matched field and exits 1 if
anything failed.
"""

import argparse
import json
import sys
from pathlib import Path

from acroform import Form
from fieldtypes import FieldType
from fill import load_values
from formerrors import LoadError
from fuzzy import match_key


def check_field(form, name, expected):
    """Compare one field's state with its expected value; None if not fillable."""
    state = form.get_state(name)
    field_type = state.field_type
    if field_type is FieldType.TEXT:
        actual = state.text
        ok = actual == expected
    elif field_type is FieldType.CHECKBOX:
        actual = state.is_checked
        ok = actual == (expected.lower() == "true")
    elif field_type is FieldType.RADIO:
        actual = state.selected
        ok = actual == expected
    elif field_type in (FieldType.BUTTON, FieldType.LISTBOX, FieldType.COMBOBOX):
        return None
    else:
        raise ValueError(f"Unhandled field type {field_type!r}")

    result = {
        "field": name,
        "type": field_type.value,
        "status": "pass" if ok else "fail",
        "expected": expected,
        "actual": actual,
    }
    if not ok:
        result["reason"] = "Value mismatch"
    return result


def verify_fill(filled_pdf_path, values_path):
    """Run full verification."""
    values = load_values(values_path)
    form = Form.load(str(filled_pdf_path))

    report = {
        "file": str(filled_pdf_path),
        "results": [],
        "summary": {"total": 0, "pass": 0, "fail": 0},
    }

    matched_keys = set()
    for name in form.get_field_names():
        key = match_key(name, values)
        if key is None:
            continue
        matched_keys.add(key)
        result = check_field(form, name, values[key])
        if result is not None:
            report["results"].append(result)

    for key in values:
        if key not in matched_keys:
            report["results"].append({
                "field": key,
                "status": "fail",
                "reason": "Field not found in PDF",
                "expected": values[key],
            })

    for r in report["results"]:
        report["summary"]["total"] += 1
        report["summary"][r["status"]] += 1

    report["all_passed"] = report["summary"]["fail"] == 0

    return report


def main():
    parser = argparse.ArgumentParser(description="Verify PDF fill accuracy")
    parser.add_argument("filled_pdf", help="Path to filled PDF")
    parser.add_argument("values", help="Path to JSON mapping of field names to values")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    args = parser.parse_args()

    if not Path(args.filled_pdf).exists():
        print(json.dumps({"error": f"File not found: {args.filled_pdf}"}), file=sys.stderr)
        sys.exit(1)
    if not Path(args.values).exists():
        print(json.dumps({"error": f"Values file not found: {args.values}"}), file=sys.stderr)
        sys.exit(1)

    try:
        report = verify_fill(args.filled_pdf, args.values)
    except (LoadError, ValueError) as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    indent = 2 if args.pretty else None
    print(json.dumps(report, indent=indent, ensure_ascii=False))

    sys.exit(0 if report["all_passed"] else 1)


if __name__ == "__main__":
    main()
