"""Pytest configuration and shared fixtures for acrofill tests."""

import io
import json
import subprocess
import sys
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

# Add scripts to path
ACROFILL_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ACROFILL_ROOT / "scripts"))

SCRIPTS = ACROFILL_ROOT / "scripts"

from acroform import Form  # noqa: E402


# ---------------------------------------------------------------------------
# Hand-built PDFs
# ---------------------------------------------------------------------------

def pdf_text(text):
    """A PDF hex string holding `text` as BOM-prefixed UTF-16BE."""
    return "<FEFF" + text.encode("utf-16-be").hex().upper() + ">"


def build_pdf(objects, root="1 0 R"):
    """Assemble PDF bytes from {object number: body}, computing the xref table."""
    out = bytearray(b"%PDF-1.7\n")
    offsets = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += f"{num} 0 obj\n{objects[num]}\nendobj\n".encode("latin-1")

    size = max(objects) + 1
    xref_pos = len(out)
    out += f"xref\n0 {size}\n".encode()
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        if num in offsets:
            out += f"{offsets[num]:010d} 00000 n \n".encode()
        else:
            out += b"0000000000 00000 f \n"
    out += f"trailer\n<< /Size {size} /Root {root} >>\nstartxref\n{xref_pos}\n%%EOF\n".encode()
    return bytes(out)


def widget(x, y, w=100, h=20):
    return f"/Type /Annot /Subtype /Widget /P 3 0 R /Rect [{x} {y} {x + w} {y + h}]"


WIDGETS = [11, 12, 21, 22, 23, 30, 40, 50, 60]


def sample_objects():
    """Objects of a one-page form with one field of every type.

    topmostSubform[0].Name[0]   text, value "Jane"
    topmostSubform[0].Agree[0]  checkbox, off
    Gender                      radio (Male, Female, Other), Male selected
    Colors                      single-select listbox, Red selected
    Toppings                    multiselect listbox, Cheese and Olives selected
    City                        combobox, Paris selected
    Reset                       push button
    """
    annots = " ".join(f"{n} 0 R" for n in WIDGETS)
    return {
        1: "<< /Type /Catalog /Pages 2 0 R /AcroForm 4 0 R >>",
        2: "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        3: f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Annots [{annots}] >>",
        4: "<< /Fields [10 0 R 20 0 R 30 0 R 40 0 R 50 0 R 60 0 R] >>",
        10: f"<< /T {pdf_text('topmostSubform[0]')} /Kids [11 0 R 12 0 R] >>",
        11: (
            f"<< /FT /Tx /T {pdf_text('Name[0]')} /Parent 10 0 R /V {pdf_text('Jane')} "
            f"/AP << /N 90 0 R >> {widget(50, 700, 200)} >>"
        ),
        12: (
            f"<< /FT /Btn /T {pdf_text('Agree[0]')} /Parent 10 0 R /V /Off /AS /Off "
            f"/AP << /N << /Yes 90 0 R /Off 90 0 R >> >> {widget(50, 660, 20)} >>"
        ),
        20: f"<< /FT /Btn /Ff 49152 /T {pdf_text('Gender')} /V /Male /Kids [21 0 R 22 0 R 23 0 R] >>",
        21: f"<< /Parent 20 0 R /AS /Male /AP << /N << /Male 90 0 R /Off 90 0 R >> >> {widget(50, 620, 20)} >>",
        22: f"<< /Parent 20 0 R /AS /Off /AP << /N << /Female 90 0 R /Off 90 0 R >> >> {widget(80, 620, 20)} >>",
        23: f"<< /Parent 20 0 R /AS /Off /AP << /N << /Other 90 0 R /Off 90 0 R >> >> {widget(110, 620, 20)} >>",
        30: (
            f"<< /FT /Ch /T {pdf_text('Colors')} /Opt [(Red) (Green) [(b) (Blue)] ()] "
            f"/V (Red) {widget(50, 560, 100, 40)} >>"
        ),
        40: (
            f"<< /FT /Ch /Ff 2097152 /T {pdf_text('Toppings')} "
            f"/Opt [(Cheese) (Ham) (Olives)] /V [(Cheese) (Olives)] {widget(200, 560, 100, 40)} >>"
        ),
        50: (
            f"<< /FT /Ch /Ff 131072 /T {pdf_text('City')} /Opt [(Paris) (Berlin)] "
            f"/V (Paris) {widget(50, 520)} >>"
        ),
        60: f"<< /FT /Btn /Ff 65536 /T {pdf_text('Reset')} {widget(50, 480)} >>",
        90: "<< /Length 3 >>\nstream\nq Q\nendstream",
    }


def sample_pdf(overrides=None):
    """Bytes of the sample form; `overrides` replaces objects by number (None drops one)."""
    objects = sample_objects()
    for num, body in (overrides or {}).items():
        if body is None:
            objects.pop(num, None)
        else:
            objects[num] = body
    return build_pdf(objects)


TEXT = "topmostSubform[0].Name[0]"
CHECKBOX = "topmostSubform[0].Agree[0]"
RADIO = "Gender"
LISTBOX = "Colors"
MULTI = "Toppings"
COMBO = "City"
BUTTON = "Reset"


# ---------------------------------------------------------------------------
# reportlab-generated form
# ---------------------------------------------------------------------------

def reportlab_pdf():
    """A form as written by a real producer (reportlab's acroForm)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    form = c.acroForm
    c.drawString(50, 745, "Name:")
    form.textfield(name="name", x=120, y=735, width=200, height=20, value="")
    form.textfield(name="Имя", x=120, y=695, width=200, height=20, value="")
    c.drawString(50, 665, "Subscribe:")
    form.checkbox(name="subscribe", x=120, y=655, size=20, checked=False)
    c.drawString(50, 625, "Size:")
    form.radio(name="size", value="small", selected=True, x=120, y=615, size=20)
    form.radio(name="size", value="large", selected=False, x=160, y=615, size=20)
    c.drawString(50, 585, "City:")
    form.choice(name="city", value="Paris", options=["Paris", "Berlin", "Madrid"],
                x=120, y=575, width=120, height=20)
    c.drawString(50, 545, "Languages:")
    form.listbox(name="langs", value=["en", "de"], options=["en", "fr", "de"],
                 x=120, y=485, width=120, height=60, fieldFlags="multiSelect")
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def sample_form():
    return Form.load(sample_pdf())


@pytest.fixture
def sample_pdf_path(tmp_path):
    path = tmp_path / "sample.pdf"
    path.write_bytes(sample_pdf())
    return path


@pytest.fixture
def reportlab_pdf_path(tmp_path):
    path = tmp_path / "reportlab.pdf"
    path.write_bytes(reportlab_pdf())
    return path


@pytest.fixture
def tmp_output(tmp_path):
    return tmp_path


# --- Helpers used across test files ---

def run_extract(pdf_path, extra_args=None):
    """Run extract.py and return parsed JSON output."""
    cmd = [sys.executable, str(SCRIPTS / "extract.py"), str(pdf_path), "--pretty"]
    if extra_args:
        cmd.extend(extra_args)
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    assert result.returncode == 0, f"extract.py failed on {pdf_path}:\n{result.stderr}"
    return json.loads(result.stdout)


def run_fill(input_pdf, values_path, output_pdf):
    """Run fill.py and return the completed process."""
    cmd = [
        sys.executable, str(SCRIPTS / "fill.py"),
        str(input_pdf), str(values_path), str(output_pdf),
    ]
    return subprocess.run(cmd, capture_output=True, text=True, timeout=60)


def run_verify(filled_pdf, values_path):
    """Run verify.py and return (report, exitcode)."""
    cmd = [
        sys.executable, str(SCRIPTS / "verify.py"),
        str(filled_pdf), str(values_path), "--pretty",
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    return json.loads(result.stdout), result.returncode


def make_values(tmp_path, values):
    """Write a values JSON file and return its path."""
    values_path = tmp_path / "values.json"
    values_path.write_text(json.dumps(values))
    return values_path
