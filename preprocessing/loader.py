# CSV loading with per-column type inference
# Empty fields and '?' are missing. A column is numeric when every present
# cell parses as a finite real; otherwise it is nominal over its values in
# order of first appearance. The last column becomes the class.

import csv
import math
from pathlib import Path

from .cleaner import coerce_class_type
from .dataset import Dataset, NUMERIC, NOMINAL
from .errors import InvalidInput, InvalidState

MISSING_TOKENS = ('', '?')


def _parse_number(text):
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _read_rows(path):
    """Read header and data rows, enforcing a rectangular layout."""
    try:
        with open(path, 'r', encoding='utf-8-sig', newline='') as f:
            reader = csv.reader(f)
            header = None
            rows = []
            for row in reader:
                if header is None:
                    if not row:
                        raise InvalidInput(f"{path}: line 1 is blank; expected the header")
                    header = [h.strip() for h in row]
                    continue
                if not row:
                    continue
                if len(row) != len(header):
                    raise InvalidInput(
                        f"{path}: line {reader.line_num} has {len(row)} field(s), "
                        f"header has {len(header)}"
                    )
                rows.append([cell.strip() for cell in row])
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise InvalidInput(f"Cannot read CSV '{path}': {e}") from e

    if header is None or not any(header):
        raise InvalidInput(f"{path}: header line is missing")
    empty = [i for i, h in enumerate(header) if not h]
    if empty:
        raise InvalidInput(f"{path}: empty attribute name(s) at column(s) {empty}")
    seen = set()
    dupes = [h for h in header if h in seen or seen.add(h)]
    if dupes:
        raise InvalidInput(f"{path}: duplicate attribute name(s) in header: {dupes}")
    return header, rows


def infer_column(name, cells):
    """
    Return (kind, values, domain) for one column of raw cells.

    A single unparseable cell in an otherwise numeric column (at least two
    numeric cells) is treated as corruption rather than as a nominal column.
    """
    present = [c for c in cells if c not in MISSING_TOKENS]
    parsed = [_parse_number(c) for c in present]
    failures = [c for c, v in zip(present, parsed) if v is None]

    if not failures:
        values = [None if c in MISSING_TOKENS else _parse_number(c) for c in cells]
        return NUMERIC, values, None

    if len(failures) == 1 and len(present) - 1 >= 2:
        raise InvalidInput(
            f"Attribute '{name}': value '{failures[0]}' is not numeric "
            f"but every other value in the column is"
        )

    domain = list(dict.fromkeys(present))
    values = [None if c in MISSING_TOKENS else c for c in cells]
    return NOMINAL, values, domain


def load_csv(path, relation=None, coerce_class=True):
    """
    Load a CSV file into a Dataset.

    Args:
        path: CSV file whose first line holds the attribute names
        relation: relation name (defaults to the file stem)
        coerce_class: re-type a numeric class column as nominal

    Raises:
        InvalidInput if the file cannot be read or is not rectangular
    """
    path = Path(path)
    header, rows = _read_rows(path)

    columns = []
    for j, name in enumerate(header):
        kind, values, domain = infer_column(name, [row[j] for row in rows])
        columns.append((name, kind, values, domain))

    try:
        dataset = Dataset.from_columns(columns, relation or path.stem)
    except InvalidState as e:
        raise InvalidInput(f"{path}: {e}") from e

    if coerce_class:
        dataset, _ = coerce_class_type(dataset)
    return dataset
