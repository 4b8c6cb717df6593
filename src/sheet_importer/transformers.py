"""Ready-made transformers for extracted tables.

Any callable taking a Table works as a transformer; these cover the common
cases of counting rows, building record dicts and building a DataFrame.
"""

from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from sheet_importer.converters.column_codec import to_label, to_number
from sheet_importer.converters.date_normalizer import normalize
from sheet_importer.models.data_models import InvalidDateError, Table


def count_rows(table: Table) -> int:
    """Number of non-blank rows in the table."""
    return len(table)


def column_names(table: Table, header_row: Optional[int] = None) -> Dict[int, str]:
    """Map column numbers to names.

    Names come from the header row when given (falling back to the column
    label for empty header cells), otherwise from the column labels.
    Repeated names get a numeric suffix the way pandas does it, so
    "Name", "Name" becomes "Name", "Name.1" and no column is lost.

    Args:
        table: Extracted table
        header_row: Row number holding the header, if any

    Returns:
        Mapping of column number to name
    """
    if not table:
        return {}

    first_row = next(iter(table.values()))
    header = table.get(header_row, {}) if header_row is not None else {}

    names: Dict[int, str] = {}
    seen: Dict[str, int] = {}
    for column in first_row:
        base = header.get(column) or to_label(column)
        name = base
        while name in seen:
            seen[base] += 1
            name = f"{base}.{seen[base]}"
        seen.setdefault(name, 0)
        names[column] = name

    return names


def to_records(table: Table, header_row: Optional[int] = None) -> List[Dict[str, str]]:
    """Convert a table to a list of dicts.

    Args:
        table: Extracted table
        header_row: Row number holding the header; it is left out of the records

    Returns:
        One dict per row, keyed by header text or column label
    """
    names = column_names(table, header_row)
    return [
        {names[column]: value for column, value in row.items()}
        for row_number, row in table.items()
        if row_number != header_row
    ]


def to_dataframe(table: Table, header: bool = False) -> pd.DataFrame:
    """Convert a table to a pandas DataFrame.

    Args:
        table: Extracted table
        header: Use the first kept row as column names

    Returns:
        DataFrame indexed by original row number
    """
    if not table:
        return pd.DataFrame()

    header_row = next(iter(table)) if header else None
    names = column_names(table, header_row)

    body = {
        row_number: row for row_number, row in table.items()
        if row_number != header_row
    }
    frame = pd.DataFrame(
        [list(row.values()) for row in body.values()],
        index=list(body),
        columns=[names[column] for column in names],
    )
    frame.index.name = "row"
    return frame


def normalize_dates(table: Table, columns: Iterable[Any]) -> Table:
    """Return a copy of the table with dates in the given columns as ISO text.

    Cells that are not recognized dates, or are invalid dates, keep their
    original text.

    Args:
        table: Extracted table
        columns: Column numbers or labels to normalize

    Returns:
        New table with the same row and column keys
    """
    targets = {
        column if isinstance(column, int) else to_number(column)
        for column in columns
    }

    result: Table = {}
    for row_number, row in table.items():
        new_row = dict(row)
        for column in targets & new_row.keys():
            try:
                iso = normalize(new_row[column])
            except InvalidDateError:
                iso = None
            if iso is not None:
                new_row[column] = iso
        result[row_number] = new_row

    return result
