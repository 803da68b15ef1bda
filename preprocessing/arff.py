# ARFF serialization
# Writes the cleaned dataset in the attribute-relation text format and
# reads it back through scipy.io.arff for training and round-trip checks.

import io
from pathlib import Path

import numpy as np
from scipy.io import arff

from .dataset import Dataset, NUMERIC, NOMINAL, output_violations
from .errors import InvalidInput, InvalidState

MISSING = '?'

_NEEDS_QUOTES = set(" \t\r\n,'\"{}%\\")
_ESCAPES = {'\\': '\\\\', "'": "\\'", '\n': '\\n', '\r': '\\r', '\t': '\\t'}


def quote(token):
    """Single-quote a name or nominal value when it would not parse bare."""
    token = str(token)
    if token in ('', MISSING) or any(c in _NEEDS_QUOTES for c in token):
        return "'" + "".join(_ESCAPES.get(c, c) for c in token) + "'"
    return token


def format_number(value):
    """Positional decimal with at least one digit after the point."""
    return np.format_float_positional(float(value), unique=True, trim='0')


# --- writing -------------------------------------------------------------

def dumps_arff(dataset):
    attrs = dataset.attributes
    lines = [f"@relation {quote(dataset.relation)}"]
    for attr in attrs:
        if attr.is_numeric:
            lines.append(f"@attribute {quote(attr.name)} numeric")
        else:
            domain = ",".join(quote(v) for v in attr.domain)
            lines.append(f"@attribute {quote(attr.name)} {{{domain}}}")
    lines.append("@data")

    columns = []
    for attr in attrs:
        if attr.is_numeric:
            columns.append([
                MISSING if np.isnan(v) else format_number(v)
                for v in dataset.values(attr.name)
            ])
        else:
            quoted = [quote(v) for v in attr.domain]
            columns.append([
                MISSING if c < 0 else quoted[c] for c in dataset.codes(attr.name)
            ])
    for row in zip(*columns):
        lines.append(",".join(row))
    return "\n".join(lines) + "\n"


def write_arff(dataset, path, check=True):
    """
    Write `dataset` to `path`.

    With `check` (the default) every output invariant is verified first and
    InvalidState is raised listing the violations.
    """
    if check:
        problems = output_violations(dataset)
        if problems:
            raise InvalidState(
                "Refusing to write ARFF, dataset invariants violated:\n  - "
                + "\n  - ".join(problems)
            )
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        f.write(dumps_arff(dataset))
    return path


# --- reading -------------------------------------------------------------

def _decode(value):
    return value.decode('utf-8') if isinstance(value, bytes) else str(value)


def _from_scipy(data, meta):
    """Convert scipy's record array and metadata into a Dataset."""
    names = meta.names()
    if not names:
        raise InvalidInput("No @attribute declarations found")

    columns = []
    for name, kind in zip(names, meta.types()):
        if kind == 'numeric':
            values = [None if np.isnan(v) else float(v) for v in data[name]]
            columns.append((name, NUMERIC, values, None))
        elif kind == 'nominal':
            domain = list(meta[name][1])
            values = [None if v == MISSING.encode() else _decode(v) for v in data[name]]
            columns.append((name, NOMINAL, values, domain))
        else:
            raise InvalidInput(f"Attribute '{name}': unsupported attribute type '{kind}'")

    relation = (meta.name or 'dataset').strip("'\"")
    try:
        return Dataset.from_columns(columns, relation)
    except (InvalidState, ValueError) as e:
        raise InvalidInput(str(e)) from e


def _read(f, source):
    try:
        data, meta = arff.loadarff(f)
    except arff.ArffError as e:
        raise InvalidInput(f"{source}: {e}") from e
    except StopIteration as e:
        raise InvalidInput(f"{source}: no @data section") from e
    except IndexError as e:
        raise InvalidInput(f"{source}: a data row has fewer fields than declared attributes") from e
    except (ValueError, NotImplementedError) as e:
        raise InvalidInput(f"{source}: {e}") from e
    return _from_scipy(data, meta)


def loads_arff(text):
    return _read(io.StringIO(text), 'ARFF text')


def load_arff(path):
    """Read an ARFF file into a Dataset (the last attribute is the class)."""
    path = Path(path)
    try:
        f = open(path, 'r', encoding='utf-8')
    except OSError as e:
        raise InvalidInput(f"Cannot read ARFF '{path}': {e}") from e
    with f:
        return _read(f, path)
