import csv
import io
import pandas as pd
from fastapi import HTTPException, UploadFile
from openpyxl import load_workbook
from pydantic import BaseModel

ALLOWED_EXTENSIONS = ["xlsx", "xls", "csv", "tsv"]
CSV_ENCODINGS = ["utf-8", "utf-8-sig", "utf-16", "cp1252", "latin-1"]


class SheetRows(BaseModel):
    rows: list[dict]
    # 1-based data row number of each entry in rows, blank rows still counted
    numbers: list[int]


def _extension(upload_file: UploadFile) -> str:
    if not upload_file.filename or "." not in upload_file.filename:
        raise HTTPException(detail="File must have .xlsx/.xls/.csv/.tsv extension", status_code=400)

    ext = upload_file.filename.rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(detail="Only .xlsx, .xls, .csv or .tsv files are allowed", status_code=400)
    return ext


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value)) or str(value).strip() == ""


def _read_xlsx(raw: bytes) -> list[tuple[int, dict]]:
    try:
        wb = load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading or parsing the Excel file: {e}")

    # first sheet only, cells keep their native type (numbers stay numbers)
    ws = wb.worksheets[0]
    header = None
    out = []
    number = 0
    for values in ws.iter_rows(values_only=True):
        if header is None:
            if all(_is_blank(v) for v in values):
                continue
            header = ["" if v is None else str(v) for v in values]
            continue
        number += 1
        out.append((number, {h: v for h, v in zip(header, values) if h}))
    wb.close()
    return out


def _read_xls(raw: bytes) -> list[tuple[int, dict]]:
    try:
        df = pd.read_excel(io.BytesIO(raw), sheet_name=0, dtype=object, engine="xlrd")
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading or parsing the Excel file: {e}")
    return _numbered(df)


def _read_csv(raw: bytes) -> list[tuple[int, dict]]:
    for enc in CSV_ENCODINGS:
        try:
            text = raw.decode(enc)
        except UnicodeDecodeError:
            continue
        try:
            df = pd.read_csv(
                io.StringIO(text),
                sep=None,          # auto detect , ; or \t
                engine="python",
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=False,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error):
            continue
        return _numbered(df)

    raise HTTPException(status_code=400, detail="Unable to parse file.")


def _numbered(df: pd.DataFrame) -> list[tuple[int, dict]]:
    df = df.reset_index(drop=True)
    return [(int(i) + 1, row) for i, row in zip(df.index, df.to_dict(orient="records"))]


def read_spreadsheet(upload_file: UploadFile) -> SheetRows:
    """
    Reads the uploaded sheet into {header: cell} dicts numbered by their
    data row (first row under the header is 1). Blank rows are dropped
    but keep their place in the numbering.
    """
    ext = _extension(upload_file)

    upload_file.file.seek(0)
    raw = upload_file.file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="The selected file is empty.")

    # xlsx is a zip archive
    if ext == "xlsx" or raw[:2] == b"PK":
        numbered = _read_xlsx(raw)
    elif ext == "xls":
        numbered = _read_xls(raw)
    else:
        numbered = _read_csv(raw)

    numbered = [(n, row) for n, row in numbered if not all(_is_blank(v) for v in row.values())]
    if not numbered:
        raise HTTPException(status_code=400, detail="The selected file is empty or has no data rows.")

    return SheetRows(rows=[row for _, row in numbered], numbers=[n for n, _ in numbered])
