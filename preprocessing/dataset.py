# Dataset model
# Typed column-oriented table backed by a pandas DataFrame.
# Numeric attributes are float64 columns with NaN as the missing marker.
# Nominal attributes are Categorical columns: categories are the domain,
# the category code is the domain index and code -1 is missing.
# The class attribute is always the last column.

import numpy as np
import pandas as pd
from pandas.api.types import is_float_dtype

from .errors import InvalidState

NUMERIC = 'numeric'
NOMINAL = 'nominal'


class Attribute:
    """Read-only description of one column."""

    def __init__(self, index, name, kind, domain=None):
        self.index = index
        self.name = name
        self.kind = kind
        self.domain = list(domain) if domain is not None else []

    @property
    def is_numeric(self):
        return self.kind == NUMERIC

    @property
    def is_nominal(self):
        return self.kind == NOMINAL

    @property
    def num_values(self):
        return len(self.domain)

    def __eq__(self, other):
        if not isinstance(other, Attribute):
            return NotImplemented
        return (self.index, self.name, self.kind, self.domain) == \
            (other.index, other.name, other.kind, other.domain)

    def __repr__(self):
        if self.is_nominal:
            return f"Attribute([{self.index}] {self.name} nominal {self.domain})"
        return f"Attribute([{self.index}] {self.name} numeric)"


def numeric_column(values):
    """Build a numeric column; None and NaN become missing."""
    return pd.Series(
        [np.nan if v is None else v for v in values], dtype='float64'
    ).to_numpy()


def nominal_column(values, domain):
    """Build a nominal column from domain strings; None becomes missing."""
    domain = [str(v) for v in domain]
    unknown = {v for v in values if v is not None and v not in domain}
    if unknown:
        raise InvalidState(f"Values {sorted(unknown)} are not in the domain {domain}")
    return pd.Categorical(values, categories=domain)


def nominal_from_codes(codes, domain):
    """Build a nominal column from domain indices; -1 is missing."""
    codes = np.asarray(codes, dtype=int)
    domain = [str(v) for v in domain]
    if len(domain) == 0:
        if (codes >= 0).any():
            raise InvalidState("Domain index given for an empty domain")
        return pd.Categorical([None] * len(codes), categories=pd.Index([], dtype=object))
    return pd.Categorical.from_codes(codes, categories=domain)


class Dataset:
    """
    Immutable-by-convention table with a relation name and a class column.

    Operations never modify the wrapped frame in place: transformations
    build a new frame and wrap it with `replace`.
    """

    def __init__(self, frame, relation='dataset'):
        _check_schema(frame)
        self._frame = frame
        self.relation = str(relation)

    @classmethod
    def from_columns(cls, columns, relation='dataset'):
        """
        Build a dataset from (name, kind, values, domain) tuples.

        Nominal values are domain strings or None; numeric values are
        numbers or None. The last tuple becomes the class attribute.
        """
        data = {}
        for name, kind, values, domain in columns:
            if name in data:
                raise InvalidState(f"Duplicate attribute name: '{name}'")
            if kind == NUMERIC:
                data[name] = numeric_column(values)
            elif kind == NOMINAL:
                data[name] = nominal_column(list(values), domain)
            else:
                raise InvalidState(f"Unknown attribute kind '{kind}' for '{name}'")
        return cls(pd.DataFrame(data), relation)

    # --- schema -----------------------------------------------------------

    @property
    def frame(self):
        """The underlying DataFrame. Treat it as read-only."""
        return self._frame

    @property
    def names(self):
        return [str(c) for c in self._frame.columns]

    @property
    def num_attributes(self):
        return self._frame.shape[1]

    @property
    def num_rows(self):
        return self._frame.shape[0]

    def __len__(self):
        return self.num_rows

    @property
    def class_index(self):
        return self.num_attributes - 1

    @property
    def class_name(self):
        return self.names[-1]

    @property
    def class_attribute(self):
        return self.attribute(self.class_name)

    @property
    def feature_names(self):
        return self.names[:-1]

    @property
    def attributes(self):
        return [self.attribute(name) for name in self.names]

    def attribute(self, name):
        if name not in self._frame.columns:
            raise KeyError(f"No attribute named '{name}'")
        index = self._frame.columns.get_loc(name)
        col = self._frame[name]
        if isinstance(col.dtype, pd.CategoricalDtype):
            return Attribute(index, name, NOMINAL, [str(c) for c in col.cat.categories])
        return Attribute(index, name, NUMERIC)

    def is_numeric(self, name):
        return self.attribute(name).is_numeric

    def is_nominal(self, name):
        return self.attribute(name).is_nominal

    def numeric_features(self):
        return [n for n in self.feature_names if self.is_numeric(n)]

    def nominal_features(self):
        return [n for n in self.feature_names if self.is_nominal(n)]

    # --- cell access ------------------------------------------------------

    def values(self, name):
        """Float array of a numeric column (NaN = missing)."""
        if not self.is_numeric(name):
            raise InvalidState(f"Attribute '{name}' is not numeric")
        return self._frame[name].to_numpy(dtype=float, copy=True)

    def codes(self, name):
        """Domain-index array of a nominal column (-1 = missing)."""
        if not self.is_nominal(name):
            raise InvalidState(f"Attribute '{name}' is not nominal")
        return self._frame[name].cat.codes.to_numpy(dtype=int, copy=True)

    def labels(self, name):
        """Domain strings of a nominal column, None where missing."""
        domain = self.attribute(name).domain
        return [domain[c] if c >= 0 else None for c in self.codes(name)]

    def missing_mask(self, name):
        return self._frame[name].isna().to_numpy()

    def missing_count(self, name=None):
        if name is None:
            return int(self._frame.isna().sum().sum())
        return int(self._frame[name].isna().sum())

    def zero_count(self, name):
        if not self.is_numeric(name):
            return 0
        return int((self._frame[name] == 0.0).sum())

    # --- transformation ---------------------------------------------------

    def replace(self, frame=None, relation=None):
        """Return a new dataset with a different frame and/or relation name."""
        return Dataset(
            self._frame.copy() if frame is None else frame,
            self.relation if relation is None else relation,
        )

    def copy(self):
        return self.replace()

    def equals(self, other, tol=1e-9):
        """Cell-wise equality, numeric cells compared within `tol`."""
        if self.attributes != other.attributes or self.num_rows != other.num_rows:
            return False
        for name in self.names:
            if self.is_nominal(name):
                if not np.array_equal(self.codes(name), other.codes(name)):
                    return False
                continue
            a, b = self.values(name), other.values(name)
            if not np.array_equal(np.isnan(a), np.isnan(b)):
                return False
            mask = ~np.isnan(a)
            if not np.all(np.abs(a[mask] - b[mask]) <= tol):
                return False
        return True

    def __repr__(self):
        return (f"Dataset(relation={self.relation!r}, rows={self.num_rows}, "
                f"attributes={self.num_attributes}, class={self.class_name!r})")


def _check_schema(frame):
    if not isinstance(frame, pd.DataFrame):
        raise InvalidState(f"Expected a DataFrame, got {type(frame).__name__}")
    if frame.shape[1] == 0:
        raise InvalidState("A dataset needs at least one attribute (the class)")
    if not frame.columns.is_unique:
        dupes = frame.columns[frame.columns.duplicated()].tolist()
        raise InvalidState(f"Duplicate attribute names: {dupes}")
    for name in frame.columns:
        dtype = frame[name].dtype
        if not (isinstance(dtype, pd.CategoricalDtype) or is_float_dtype(dtype)):
            raise InvalidState(
                f"Attribute '{name}' has dtype {dtype}; expected float64 or category"
            )


# --- invariant checks -----------------------------------------------------

def missing_feature_cells(dataset):
    """Per-attribute count of missing non-class cells (only non-zero entries)."""
    counts = {}
    for name in dataset.feature_names:
        n = dataset.missing_count(name)
        if n:
            counts[name] = n
    return counts


def out_of_range_columns(dataset):
    """Numeric non-class attributes with a non-missing value outside [0, 1]."""
    bad = []
    for name in dataset.numeric_features():
        v = dataset.values(name)
        v = v[~dataset.missing_mask(name)]
        if v.size and (not np.isfinite(v).all() or v.min() < 0.0 or v.max() > 1.0):
            bad.append(name)
    return bad


def duplicate_row_count(dataset):
    return int(dataset.frame.duplicated(keep='first').sum())


def output_violations(dataset):
    """
    Check every invariant required of a fully cleaned dataset.

    Returns a list of human-readable problems (empty when the dataset is
    ready to be written).
    """
    problems = []
    cls = dataset.class_attribute
    if not cls.is_nominal:
        problems.append(f"Class attribute '{cls.name}' is numeric; expected nominal")
    else:
        if cls.num_values < 2:
            problems.append(
                f"Class attribute '{cls.name}' has {cls.num_values} value(s); expected at least 2"
            )
        n_missing_class = dataset.missing_count(cls.name)
        if n_missing_class:
            problems.append(f"{n_missing_class} row(s) have a missing class value")

    missing = missing_feature_cells(dataset)
    if missing:
        problems.append(f"Missing values survived imputation: {missing}")

    nominal = dataset.nominal_features()
    if nominal:
        problems.append(f"Non-class nominal attributes were not encoded: {nominal}")

    out_of_range = out_of_range_columns(dataset)
    if out_of_range:
        problems.append(f"Numeric attributes outside [0, 1]: {out_of_range}")

    for name in dataset.numeric_features():
        v = dataset.values(name)
        if np.isinf(v).any():
            problems.append(f"Infinite values in attribute '{name}'")

    dupes = duplicate_row_count(dataset)
    if dupes:
        problems.append(f"{dupes} duplicate row(s) present")

    return problems
