# Dataset cleaning passes
# Each pass is a pure function Dataset -> (Dataset, PassReport).
# Cleaner runs them in a fixed order and checks the invariants
# that must hold at every pass boundary.

import re

import numpy as np
import pandas as pd

from .dataset import (
    NOMINAL, nominal_from_codes, missing_feature_cells, out_of_range_columns,
    duplicate_row_count,
)
from .errors import InvalidState, EmptyDataset
from .report import PassReport

# Attributes where a literal zero is physiologically impossible
DEFAULT_ZERO_AS_MISSING_NAMES = [
    'age', 'blood_pressure', 'cholesterol_level', 'bmi', 'triglyceride_level',
    'fasting_blood_sugar', 'crp_level', 'homocysteine_level',
    # legacy aliases (UCI / Kaggle heart datasets)
    'chol', 'cholesterol', 'trestbps', 'restingbp', 'thalach', 'maxhr', 'max_heart_rate',
]

DEFAULT_HIGH_CARDINALITY_THRESHOLD = 50

REFERENCE_POLICIES = ['first', 'last']

DEFAULT_CLEANING_CONFIG = {
    'zero_as_missing_names': list(DEFAULT_ZERO_AS_MISSING_NAMES),
    'zero_heuristic_fallback': True,
    'high_cardinality_threshold': DEFAULT_HIGH_CARDINALITY_THRESHOLD,
    'encoding_reference_policy': 'first',
}


def canonical_name(name):
    """Lower-case a name and fold spaces/hyphens into underscores."""
    return re.sub(r'[\s\-]+', '_', str(name).strip().lower())


def render_label(value):
    """Render a numeric class value as a domain string (3.0 -> '3')."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def finite_mean(values):
    """Arithmetic mean that stays finite when the running sum would overflow."""
    with np.errstate(over='ignore', invalid='ignore'):
        mean = float(np.mean(values))
    if not np.isfinite(mean):
        mean = float(np.sum(values / values.size))
    return mean


def scale_unit(values, lo, hi):
    """Map [lo, hi] onto [0, 1]; halves the operands when hi - lo overflows."""
    if np.isfinite(hi - lo):
        return (values - lo) / (hi - lo)
    return (values / 2 - lo / 2) / (hi / 2 - lo / 2)


def _postcondition(problems, pass_name):
    if problems:
        raise InvalidState(
            f"Postcondition failed after {pass_name}:\n  - " + "\n  - ".join(problems)
        )


# --- pass 0: class-type coercion ----------------------------------------

def coerce_class_type(dataset):
    """Re-type a numeric class attribute as nominal over its sorted observed values."""
    report = PassReport('coerce_class', "Class-Type Coercion")
    name = dataset.class_name

    if dataset.is_nominal(name):
        domain = dataset.class_attribute.domain
        report.add(f"class '{name}' already nominal with {len(domain)} value(s): {{{','.join(domain)}}}")
        report.count('coerced', 0)
        return dataset, report

    values = dataset.values(name)
    observed = sorted(set(values[~np.isnan(values)].tolist()))
    domain = [render_label(v) for v in observed]
    index = {v: i for i, v in enumerate(observed)}
    codes = [-1 if np.isnan(v) else index[v] for v in values]

    frame = dataset.frame.copy()
    frame[name] = nominal_from_codes(codes, domain)
    out = dataset.replace(frame)

    report.add(f"class '{name}' re-typed numeric -> nominal {{{','.join(domain)}}}")
    report.count('coerced', 1)
    _postcondition([] if out.is_nominal(name) else [f"class '{name}' is still numeric"],
                   report.title)
    return out, report


# --- pass 1: suspicious zeros -------------------------------------------

def select_zero_as_missing(dataset, names=None, heuristic_fallback=True):
    """
    Pick the numeric feature columns in which a zero means "not measured".

    Named columns win; the heuristic (a column holding both zero and
    non-zero values) is only consulted when no named column is present.
    """
    names = DEFAULT_ZERO_AS_MISSING_NAMES if names is None else names
    wanted = {canonical_name(n) for n in names}
    numeric = dataset.numeric_features()

    selected = [c for c in numeric if canonical_name(c) in wanted]
    if selected or not heuristic_fallback:
        return selected, 'named'

    heuristic = []
    for c in numeric:
        v = dataset.values(c)
        v = v[~np.isnan(v)]
        if (v == 0.0).any() and (v != 0.0).any():
            heuristic.append(c)
    return heuristic, 'heuristic'


def zeros_to_missing(dataset, names=None, heuristic_fallback=True):
    report = PassReport('zeros_to_missing', "Suspicious Zero -> Missing")
    selected, policy = select_zero_as_missing(dataset, names, heuristic_fallback)

    if not selected:
        report.add("no attribute selected; nothing replaced")
        report.count('replaced', 0)
        return dataset, report

    report.add(f"selection policy: {policy} ({len(selected)} attribute(s))")
    frame = dataset.frame.copy()
    total = 0
    for name in selected:
        v = dataset.values(name)
        zero = v == 0.0
        n = int(zero.sum())
        v[zero] = np.nan
        frame[name] = v
        total += n
        report.column(name, replaced=n)
        report.add(f"{name}: replaced {n} zero(s) with missing")

    report.add(f"total: replaced {total} zero(s) with missing")
    report.count('replaced', total)
    return dataset.replace(frame), report


# --- pass 2: duplicates -------------------------------------------------

def remove_duplicates(dataset):
    """Keep the first occurrence of every distinct row (class included)."""
    report = PassReport('remove_duplicates', "Duplicate Removal")
    original = dataset.num_rows
    keep = ~dataset.frame.duplicated(keep='first')
    frame = dataset.frame.loc[keep].reset_index(drop=True)
    out = dataset.replace(frame)

    removed = original - out.num_rows
    report.add(f"original: {original}")
    report.add(f"unique:   {out.num_rows}")
    report.add(f"removed:  {removed}")
    report.count('original', original)
    report.count('unique', out.num_rows)
    report.count('removed', removed)

    if out.num_rows == 0:
        raise EmptyDataset(f"No rows left after duplicate removal (relation '{dataset.relation}')")
    dupes = duplicate_row_count(out)
    _postcondition([f"{dupes} duplicate row(s) remain"] if dupes else [], report.title)
    return out, report


# --- pass 3: imputation -------------------------------------------------

def impute_missing(dataset):
    """Fill numeric features with their mean and nominal features with their mode."""
    report = PassReport('impute_missing', "Missing Value Imputation")
    frame = dataset.frame.copy()
    total = 0

    for name in dataset.feature_names:
        attr = dataset.attribute(name)
        if attr.is_numeric:
            v = dataset.values(name)
            missing = dataset.missing_mask(name)
            n = int(missing.sum())
            if missing.all() and n:
                mean = 0.0
                report.warn(f"'{name}' has no observed values; imputing 0")
            else:
                mean = finite_mean(v[~missing]) if (~missing).any() else 0.0
            v[missing] = mean
            frame[name] = v
            report.column(name, filled=n, mean=mean)
            report.add(f"{name}: filled {n} missing value(s) with mean {mean:.4f}")
        else:
            codes = dataset.codes(name)
            missing = codes < 0
            n = int(missing.sum())
            if attr.num_values == 0:
                if n:
                    raise InvalidState(f"Nominal attribute '{name}' has an empty domain and missing cells")
                continue
            counts = np.bincount(codes[~missing], minlength=attr.num_values)
            mode = int(np.argmax(counts))
            codes[missing] = mode
            frame[name] = nominal_from_codes(codes, attr.domain)
            report.column(name, filled=n, mode=attr.domain[mode])
            report.add(f"{name}: filled {n} missing value(s) with mode '{attr.domain[mode]}'")
        total += n

    report.add(f"total: filled {total} missing value(s)")
    report.count('filled', total)
    out = dataset.replace(frame)
    remaining = missing_feature_cells(out)
    _postcondition([f"missing values remain: {remaining}"] if remaining else [], report.title)
    return out, report


# --- pass 4: min-max normalization --------------------------------------

def normalize_min_max(dataset):
    """Scale every numeric feature to [0, 1]; constant columns collapse to 0."""
    report = PassReport('normalize', "Min-Max Normalization")
    frame = dataset.frame.copy()
    constant = 0

    for name in dataset.numeric_features():
        v = dataset.values(name)
        present = ~dataset.missing_mask(name)
        if not present.any():
            report.add(f"{name}: no values to normalize")
            continue
        lo, hi = float(v[present].min()), float(v[present].max())
        if lo == hi:
            v[present] = 0.0
            constant += 1
            report.column(name, min=lo, max=hi, constant=True)
            report.add(f"{name}: min={lo:.4f} max={hi:.4f} (constant, set to 0)")
            report.warn(f"'{name}' is constant ({lo:g}); normalized to 0")
        else:
            v[present] = np.clip(scale_unit(v[present], lo, hi), 0.0, 1.0)
            report.column(name, min=lo, max=hi, constant=False)
            report.add(f"{name}: min={lo:.4f} max={hi:.4f}")
        frame[name] = v

    report.count('normalized', len(dataset.numeric_features()))
    report.count('constant', constant)
    out = dataset.replace(frame)
    bad = out_of_range_columns(out)
    _postcondition([f"values outside [0, 1] in {bad}"] if bad else [], report.title)
    return out, report


# --- pass 5: categorical -> binary ---------------------------------------

def encode_nominal(dataset, high_cardinality_threshold=DEFAULT_HIGH_CARDINALITY_THRESHOLD,
                   reference='first'):
    """
    Replace every nominal feature by binary indicator columns named `A=v`.

    One column per non-reference domain value, in domain order, placed where
    the source attribute was. Attributes with more than
    `high_cardinality_threshold` values are dropped instead.
    """
    if reference not in REFERENCE_POLICIES:
        raise ValueError(f"Unknown reference policy '{reference}'. Allowed: {REFERENCE_POLICIES}")

    report = PassReport('encode_nominal', "Categorical -> Binary Encoding")
    columns = {}
    dropped = []
    encoded = 0
    produced_total = 0

    for name in dataset.feature_names:
        attr = dataset.attribute(name)
        if attr.is_numeric:
            columns[name] = dataset.frame[name].to_numpy(dtype=float, copy=True)
            continue

        if attr.num_values > high_cardinality_threshold:
            dropped.append(name)
            report.column(name, dropped=True, num_values=attr.num_values)
            report.add(f"{name}: dropped ({attr.num_values} values > {high_cardinality_threshold})")
            report.warn(
                f"dropped high-cardinality attribute '{name}' "
                f"({attr.num_values} values > {high_cardinality_threshold})"
            )
            continue

        codes = dataset.codes(name)
        ref = 0 if reference == 'first' else attr.num_values - 1
        produced = []
        for j, value in enumerate(attr.domain):
            if j == ref:
                continue
            new_name = f"{name}={value}"
            if new_name in columns or new_name in dataset.names:
                raise InvalidState(
                    f"Encoding '{name}' would produce '{new_name}', which already exists"
                )
            col = (codes == j).astype(float)
            col[codes < 0] = np.nan
            columns[new_name] = col
            produced.append(new_name)

        encoded += 1
        produced_total += len(produced)
        report.column(name, produced=produced, reference=attr.domain[ref] if attr.domain else None)
        if produced:
            report.add(
                f"{name}: {attr.num_values} values -> {len(produced)} binary column(s) "
                f"[{', '.join(produced)}] (reference '{attr.domain[ref]}')"
            )
        else:
            report.add(f"{name}: single value, no columns produced")
            report.warn(f"'{name}' has a single value and was removed by encoding")

    class_name = dataset.class_name
    if class_name in columns:
        raise InvalidState(f"Encoded column name collides with class attribute '{class_name}'")
    frame = pd.DataFrame(columns, index=dataset.frame.index)
    frame[class_name] = dataset.frame[class_name]

    report.count('encoded', encoded)
    report.count('produced', produced_total)
    report.count('dropped', len(dropped))
    out = dataset.replace(frame)

    problems = []
    leftover = out.nominal_features()
    if leftover:
        problems.append(f"nominal attributes remain: {leftover}")
    if out.names[-1] != class_name:
        problems.append(f"class '{class_name}' is no longer last")
    _postcondition(problems, report.title)
    return out, report


# --- orchestration ------------------------------------------------------

class Cleaner:
    """Runs the cleaning passes in order and keeps their reports."""

    PASS_ORDER = [
        'coerce_class', 'zeros_to_missing', 'remove_duplicates',
        'impute_missing', 'normalize', 'encode_nominal',
    ]

    def __init__(self, config=None, verbose=False):
        self.config = dict(DEFAULT_CLEANING_CONFIG)
        self.config.update(config or {})
        self.verbose = verbose
        self.reports = []

    def _log(self, msg):
        if self.verbose:
            print(msg)

    def _passes(self):
        cfg = self.config
        return {
            'coerce_class': coerce_class_type,
            'zeros_to_missing': lambda ds: zeros_to_missing(
                ds, cfg['zero_as_missing_names'], cfg['zero_heuristic_fallback']),
            'remove_duplicates': remove_duplicates,
            'impute_missing': impute_missing,
            'normalize': normalize_min_max,
            'encode_nominal': lambda ds: encode_nominal(
                ds, cfg['high_cardinality_threshold'], cfg['encoding_reference_policy']),
        }

    def clean(self, dataset):
        """Run every pass; the first failing pass aborts the rest."""
        self.reports = []
        passes = self._passes()
        for name in self.PASS_ORDER:
            dataset, report = passes[name](dataset)
            self.reports.append(report)
            self._log("\n" + report.render())
        return dataset

    def report(self, name):
        for r in self.reports:
            if r.name == name:
                return r
        raise KeyError(f"No report for pass '{name}'")
