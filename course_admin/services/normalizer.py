import math
import re
from typing import Any, Mapping, Sequence

from pydantic import BaseModel


CANONICAL_FIELDS = (
    "dept",
    "semester",
    "coursetype",
    "coursecode",
    "coursename",
    "coursenature",
    "facultyid",
    "regulation",
    "degree",
    "academicyear",
    "hodapproval",
)

REQUIRED_FIELDS = ("coursecode", "coursename")

# normalized header -> canonical field
HEADER_ALIASES = {field: field for field in CANONICAL_FIELDS}
HEADER_ALIASES.update({
    "department": "dept",
    "sem": "semester",
    "type": "coursetype",
    "code": "coursecode",
    "course": "coursename",
    "name": "coursename",
    "title": "coursename",
    "coursetitle": "coursename",
    "nature": "coursenature",
    "faculty": "facultyid",
    "facultycode": "facultyid",
    "reg": "regulation",
    "year": "academicyear",
    "acadyear": "academicyear",
    "hod": "hodapproval",
})

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


class RowDiagnostic(BaseModel):
    row: int
    data: dict[str, str]
    error: str


class NormalizedBatch(BaseModel):
    rows: list[dict[str, str]]
    # 1-based source row number of each entry in rows
    numbers: list[int]
    rejected: list[RowDiagnostic]


def normalize_header(header: Any) -> str:
    """
    "Course Code"  -> "coursecode"
    "course_code"  -> "coursecode"
    "Academic-Year" -> "academicyear"
    """
    if header is None:
        return ""
    return _NON_ALNUM_RE.sub("", str(header).lower())


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        # spreadsheet numbers come back as floats: 2021.0 -> "2021"
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def normalize_row(row: Mapping[Any, Any]) -> dict[str, str]:
    out = {field: "" for field in CANONICAL_FIELDS}
    for header, value in row.items():
        field = HEADER_ALIASES.get(normalize_header(header))
        if not field:
            continue
        if out[field]:
            continue
        out[field] = to_text(value)
    return out


def normalize_rows(
    rows: Sequence[Mapping[Any, Any]],
    numbers: Sequence[int] | None = None,
) -> NormalizedBatch:
    """
    Maps raw rows onto the canonical field set, rejecting rows without a course code or name.
    numbers are the 1-based source row numbers; defaults to the position in rows.
    """
    if numbers is None:
        numbers = range(1, len(rows) + 1)

    good: list[dict[str, str]] = []
    kept_numbers: list[int] = []
    rejected: list[RowDiagnostic] = []

    for number, row in zip(numbers, rows):
        canonical = normalize_row(row)
        missing = [f for f in REQUIRED_FIELDS if not canonical[f]]
        if missing:
            rejected.append(
                RowDiagnostic(
                    row=number,
                    data={str(k): to_text(v) for k, v in row.items()},
                    error=f"Missing required value(s): {', '.join(missing)}",
                )
            )
            continue
        good.append(canonical)
        kept_numbers.append(number)

    return NormalizedBatch(rows=good, numbers=kept_numbers, rejected=rejected)
