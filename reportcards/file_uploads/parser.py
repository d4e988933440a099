import io
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from reportcards.errors import UploadRejected
from reportcards.file_uploads.validation import validate_rows
from reportcards.utils.files import (
    check_upload,
    file_extension,
    subject_name_from_filename,
)


logger = logging.getLogger(__name__)


@dataclass
class ParsedFile:
    filename: str
    subject_name: str
    result: object

    @property
    def is_valid(self):
        return self.result.is_valid

    def to_dict(self):
        data = self.result.to_dict()
        data["filename"] = self.filename
        data["subject_name"] = self.subject_name
        return data


def _clean_cell(value):
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def _read_csv(buffer):
    try:
        return pd.read_csv(buffer, dtype=object, keep_default_na=False, encoding="utf-8-sig")
    except UnicodeDecodeError:
        # Excel "CSV (Comma delimited)" exports are cp1252
        buffer.seek(0)
        return pd.read_csv(buffer, dtype=object, keep_default_na=False, encoding="cp1252")


def read_table(content, filename):
    """
    Read the first sheet (or the CSV table) into a DataFrame of raw cells.

    Blank cells come back as "" and every row carries every header, because
    column inference works from the header keys.
    """
    buffer = io.BytesIO(content)

    try:
        if file_extension(filename) == "csv":
            df = _read_csv(buffer)
        else:
            df = pd.read_excel(buffer, sheet_name=0, dtype=object, engine="openpyxl")
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except Exception as e:
        logger.warning("Could not read %s: %s", filename, e)
        raise UploadRejected(
            f"Failed to parse file {filename}. Please check the file format.",
            filename=filename
        ) from e

    df.columns = [str(col) for col in df.columns]
    df = df.astype(object).where(pd.notna(df), "")

    # header cells left blank by the sheet author carry no data
    unnamed = [
        col for col in df.columns
        if col.startswith("Unnamed:") and (df[col] == "").all()
    ]
    df = df.drop(columns=unnamed)

    # fully blank lines are not rows
    if not df.empty:
        blank = df.apply(lambda row: all(str(v).strip() == "" for v in row), axis=1)
        df = df[~blank]

    return df


def read_rows(content, filename):
    df = read_table(content, filename)

    headers = list(df.columns)
    rows = [
        {header: _clean_cell(value) for header, value in zip(headers, values)}
        for values in df.itertuples(index=False, name=None)
    ]

    return headers, rows


def parse_upload(filename, content, term, academic_year, subject_name=None, matcher=None):
    """Check, read and validate one uploaded score file."""
    try:
        check_upload(filename, len(content))
    except UploadRejected as e:
        logger.warning("Rejected %s: %s", filename, e.message)
        raise

    headers, rows = read_rows(content, filename)
    result = validate_rows(
        rows,
        term=term,
        academic_year=academic_year,
        headers=headers,
        matcher=matcher,
    )

    logger.info(
        "Parsed %s: %s row(s), %s record(s), %s error(s)",
        filename, len(rows), len(result.records), len(result.errors)
    )

    return ParsedFile(
        filename=filename,
        subject_name=subject_name or subject_name_from_filename(filename),
        result=result,
    )
