#!/usr/bin/env python3
"""Client upload parsing and registration exports."""

from __future__ import annotations

import io
import zipfile
from datetime import date
from typing import Dict, List, Optional

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import UPLOAD_COLUMN_MAP, UPLOAD_EXTENSIONS, UPLOAD_REQUIRED_COLUMNS
from eligibility import normalize_mobile


class UploadError(ValueError):
    """Raised when an uploaded client file cannot be used."""


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _read_frame(filename: str, content: bytes) -> pd.DataFrame:
    extension = file_extension(filename)
    if extension not in UPLOAD_EXTENSIONS:
        raise UploadError("Please upload a CSV or Excel file")
    try:
        if extension == "csv":
            return pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False, skip_blank_lines=True)
        return pd.read_excel(io.BytesIO(content), dtype=str, engine="openpyxl").fillna("")
    except (
        ValueError,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
        zipfile.BadZipFile,
        InvalidFileException,
    ) as exc:
        raise UploadError(f"Could not read {filename}: {exc}") from exc


def _cell(value: object) -> str:
    return str(value if value is not None else "").strip().replace('"', "")


def parse_client_upload(filename: str, content: bytes) -> List[Dict[str, str]]:
    """Map an uploaded sheet to ``registered_clients`` rows.

    Headers are matched case-insensitively; unknown columns are ignored and
    rows without customer id, name or mobile number are dropped.
    """
    df = _read_frame(filename, content)
    if df.empty:
        raise UploadError("File must contain header and data rows")

    rename = {}
    for header in df.columns:
        key = str(header).strip().lower()
        if key in UPLOAD_COLUMN_MAP:
            rename[header] = UPLOAD_COLUMN_MAP[key]
    missing = [column for column in UPLOAD_REQUIRED_COLUMNS if column not in rename.values()]
    if missing:
        raise UploadError(f"Missing required columns: {', '.join(missing)}")
    df = df[list(rename)].rename(columns=rename)

    clients = []
    for record in df.to_dict(orient="records"):
        client = {column: _cell(value) for column, value in record.items()}
        if "mobile_number" in client:
            client["mobile_number"] = normalize_mobile(client["mobile_number"])
        if all(client.get(column) for column in UPLOAD_REQUIRED_COLUMNS):
            clients.append(client)

    if not clients:
        raise UploadError("No valid client records found in the file")

    # last row wins when a customer id repeats inside one file
    deduped = {client["customer_id"]: client for client in clients}
    return list(deduped.values())


def export_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    return f"{prefix}_{(today or date.today()).isoformat()}.{extension}"


def export_frame(frame: pd.DataFrame, columns: Dict[str, str]) -> pd.DataFrame:
    """Select and rename ``columns`` (source -> label), blank for missing ones."""
    data = {}
    for source, label in columns.items():
        if source in frame.columns:
            data[label] = frame[source].fillna("").astype(str)
        else:
            data[label] = [""] * len(frame)
    return pd.DataFrame(data)


def registrations_to_excel(frame: pd.DataFrame, sheet_name: str) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return output.getvalue()


def registrations_to_pdf(frame: pd.DataFrame, title: str, generated_on: Optional[date] = None) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(title, styles["Title"]),
        Paragraph(f"Generated on: {(generated_on or date.today()).strftime('%d/%m/%Y')}", styles["Normal"]),
        Paragraph(f"Total Records: {len(frame)}", styles["Normal"]),
        Spacer(1, 6 * mm),
    ]

    rows = [list(frame.columns)] + frame.fillna("").astype(str).values.tolist()
    table = Table(rows, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.Color(220 / 255, 53 / 255, 69 / 255)),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    story.append(table)
    doc.build(story)
    return buffer.getvalue()
