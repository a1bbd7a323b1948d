"""Spreadsheet parsing and an in-memory editing session.

A workbook is read into sheets of ``(headers, rows)`` where every cell is a
string and every row is exactly as wide as the header row.  ``SheetEditor``
holds the editing state for one opened file: the working copy of every sheet,
the last saved copy used by ``reset``, and the active cell for keyboard
navigation.  Saving writes back to the originating path when one is known and
otherwise hands back the encoded bytes for download.
"""
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd
from openpyxl import Workbook

logger = logging.getLogger("hr.sheets")

SPREADSHEET_SUFFIXES = {".xlsx", ".xls", ".xlsm", ".csv"}
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


class SheetError(ValueError):
    """Raised when a file cannot be read as a spreadsheet."""


@dataclass
class ParsedSheet:
    name: str
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def copy(self) -> "ParsedSheet":
        return ParsedSheet(name=self.name, headers=list(self.headers), rows=[list(row) for row in self.rows])

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "headers": list(self.headers), "rows": [list(row) for row in self.rows]}


@dataclass
class ParsedFile:
    file_name: str
    sheets: list[ParsedSheet]
    path: Path | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "fileName": self.file_name,
            "writable": self.path is not None,
            "sheets": [sheet.to_dict() for sheet in self.sheets],
        }


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:  # NaN
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def _frame_to_sheet(name: str, frame: pd.DataFrame) -> ParsedSheet:
    grid = [[_cell_text(cell) for cell in row] for row in frame.itertuples(index=False, name=None)]
    return _grid_to_sheet(name, grid)


def _grid_to_sheet(name: str, grid: list[list[str]]) -> ParsedSheet:
    """First row is the header; later rows are trimmed or padded to its width."""
    if not grid:
        return ParsedSheet(name=name)
    headers = grid[0]
    width = len(headers)
    rows = []
    for row in grid[1:]:
        normalised = list(row[:width])
        normalised.extend([""] * (width - len(normalised)))
        rows.append(normalised)
    return ParsedSheet(name=name, headers=headers, rows=rows)


def _read_csv_grid(handle: Path | io.BytesIO) -> list[list[str]]:
    raw = handle.read_bytes() if isinstance(handle, Path) else handle.getvalue()
    text = raw.decode("utf-8-sig")
    return [row for row in csv.reader(io.StringIO(text, newline="")) if row]


def parse_workbook(source: Path | bytes, filename: str | None = None) -> ParsedFile:
    """Read a CSV or Excel workbook into string sheets."""

    path = source if isinstance(source, Path) else None
    name = filename or (path.name if path else "upload.xlsx")
    suffix = Path(name).suffix.lower()
    if suffix not in SPREADSHEET_SUFFIXES:
        raise SheetError(f"Unsupported spreadsheet type: {suffix or name}")

    handle: Path | io.BytesIO = path if path is not None else io.BytesIO(source)  # type: ignore[arg-type]
    try:
        if suffix == ".csv":
            sheets = [_grid_to_sheet(Path(name).stem or "Sheet1", _read_csv_grid(handle))]
        else:
            frames = pd.read_excel(handle, sheet_name=None, header=None, dtype=object)
            sheets = [_frame_to_sheet(str(sheet_name), frame) for sheet_name, frame in frames.items()]
    except (ValueError, OSError, ImportError, csv.Error) as exc:
        raise SheetError(f"Could not read {name}: {exc}") from exc

    logger.debug("Parsed %s into %d sheet(s)", name, len(sheets))
    return ParsedFile(file_name=name, sheets=sheets, path=path)


def sheet_to_csv(sheet: ParsedSheet) -> str:
    """Every cell quoted, embedded quotes doubled, rows joined by newlines."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(sheet.headers)
    writer.writerows(sheet.rows)
    return buffer.getvalue().rstrip("\n")


def build_workbook(sheets: list[ParsedSheet]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for sheet in sheets or [ParsedSheet(name="Sheet1")]:
        worksheet = workbook.create_sheet(title=sheet.name[:31] or "Sheet1")
        worksheet.append(sheet.headers)
        for row in sheet.rows:
            worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def encode_sheets(sheets: list[ParsedSheet], file_name: str, fmt: str | None = None) -> tuple[bytes, str]:
    """Encode sheets as CSV (first sheet only) or xlsx based on ``fmt`` or the file suffix."""

    target = (fmt or Path(file_name).suffix.lstrip(".") or "xlsx").lower()
    if target == "csv":
        first = sheets[0] if sheets else ParsedSheet(name="Sheet1")
        return sheet_to_csv(first).encode("utf-8"), CSV_MEDIA_TYPE
    return build_workbook(sheets), XLSX_MEDIA_TYPE


@dataclass
class SaveResult:
    file_name: str
    content: bytes
    media_type: str
    written_to: Path | None = None


class SheetEditor:
    """Editing session over one parsed file."""

    def __init__(self, parsed: ParsedFile) -> None:
        if not parsed.sheets:
            parsed.sheets = [ParsedSheet(name="Sheet1")]
        self._parsed = parsed
        self._sheets = [sheet.copy() for sheet in parsed.sheets]
        self._saved = [sheet.copy() for sheet in parsed.sheets]
        self._index = 0
        self.active_cell: tuple[int, int] | None = None
        self.has_changes = False

    @property
    def title(self) -> str:
        name = self._parsed.file_name
        suffix = Path(name).suffix
        if suffix.lower() in {".xlsx", ".xls", ".csv"}:
            return name[: -len(suffix)]
        return name

    @property
    def sheet_names(self) -> list[str]:
        return [sheet.name for sheet in self._sheets]

    @property
    def current(self) -> ParsedSheet:
        return self._sheets[self._index]

    @property
    def headers(self) -> list[str]:
        return self.current.headers

    @property
    def rows(self) -> list[list[str]]:
        return self.current.rows

    @property
    def sheets(self) -> list[ParsedSheet]:
        return [sheet.copy() for sheet in self._sheets]

    def switch_sheet(self, index: int) -> ParsedSheet:
        if not 0 <= index < len(self._sheets):
            raise IndexError(f"sheet index {index} out of range")
        self._index = index
        self.active_cell = None
        return self.current

    # ------------------------------------------------------------------
    # editing
    # ------------------------------------------------------------------
    def update_cell(self, row: int, col: int, value: str) -> None:
        self.current.rows[row][col] = value
        self.has_changes = True

    def update_header(self, col: int, value: str) -> None:
        self.current.headers[col] = value
        self.has_changes = True

    def add_row(self) -> None:
        self.current.rows.append([""] * len(self.current.headers))
        self.has_changes = True

    def add_column(self) -> None:
        sheet = self.current
        sheet.headers.append(f"Kolom {len(sheet.headers) + 1}")
        for row in sheet.rows:
            row.append("")
        self.has_changes = True

    def remove_row(self, index: int) -> None:
        del self.current.rows[index]
        self.has_changes = True

    def remove_column(self, index: int) -> bool:
        sheet = self.current
        if len(sheet.headers) <= 1:
            return False
        del sheet.headers[index]
        for row in sheet.rows:
            if index < len(row):
                del row[index]
        self.has_changes = True
        return True

    def reset(self) -> None:
        """Restore the current sheet to its last saved state."""

        self._sheets[self._index] = self._saved[self._index].copy()
        self.active_cell = None
        self.has_changes = False

    # ------------------------------------------------------------------
    # keyboard navigation
    # ------------------------------------------------------------------
    def activate(self, row: int, col: int) -> None:
        self.active_cell = (row, col)

    def navigate(self, key: str, shift: bool = False) -> tuple[int, int] | None:
        if self.active_cell is None:
            return None
        if key == "Escape":
            self.active_cell = None
            return None

        row, col = self.active_cell
        width = len(self.current.headers)
        height = len(self.current.rows)
        if key == "Tab":
            next_col = col - 1 if shift else col + 1
            if 0 <= next_col < width:
                self.active_cell = (row, next_col)
            elif not shift and row < height - 1:
                self.active_cell = (row + 1, 0)
        elif key == "Enter":
            next_row = row - 1 if shift else row + 1
            if 0 <= next_row < height:
                self.active_cell = (next_row, col)
        return self.active_cell

    # ------------------------------------------------------------------
    # output
    # ------------------------------------------------------------------
    def export_csv(self) -> tuple[str, str]:
        """Return ``(filename, content)`` for the current sheet."""

        return f"{self.title or 'export'}.csv", sheet_to_csv(self.current)

    def save(self) -> SaveResult:
        sheets = self.sheets
        content, media_type = encode_sheets(sheets, self._parsed.file_name)
        written_to: Path | None = None
        if self._parsed.path is not None:
            self._parsed.path.write_bytes(content)
            written_to = self._parsed.path
            logger.info("Saved %s", written_to)

        self._saved = [sheet.copy() for sheet in sheets]
        self._parsed.sheets = [sheet.copy() for sheet in sheets]
        self.has_changes = False
        return SaveResult(
            file_name=self._parsed.file_name,
            content=content,
            media_type=media_type,
            written_to=written_to,
        )
