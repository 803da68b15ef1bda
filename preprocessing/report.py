# Preprocessing reports
# PassReport is the structured value every cleaning pass returns;
# the module-level functions render dataset summaries for the console.

import warnings

from .errors import NonFatalWarning


class PassReport:
    """Line-oriented report of one cleaning pass."""

    def __init__(self, name, title):
        self.name = name
        self.title = title
        self.lines = []
        self.counts = {}
        self.columns = {}
        self.warnings = []

    def add(self, line):
        self.lines.append(line)

    def count(self, key, value):
        self.counts[key] = value

    def column(self, name, **details):
        self.columns.setdefault(name, {}).update(details)

    def warn(self, message):
        """Record a non-fatal condition and emit it as a NonFatalWarning."""
        self.warnings.append(message)
        warnings.warn(message, NonFatalWarning, stacklevel=3)

    @property
    def summary(self):
        if not self.counts:
            return "done"
        return ", ".join(f"{k}={v}" for k, v in self.counts.items())

    def render(self):
        out = [f"=== {self.title} ==="]
        out.extend(f"  {line}" for line in self.lines)
        for message in self.warnings:
            out.append(f"  WARNING: {message}")
        return "\n".join(out)

    def to_dict(self):
        return {
            'name': self.name,
            'title': self.title,
            'lines': list(self.lines),
            'counts': dict(self.counts),
            'columns': {k: dict(v) for k, v in self.columns.items()},
            'warnings': list(self.warnings),
        }

    def __repr__(self):
        return f"PassReport({self.name!r}, {self.summary})"


def dataset_summary(dataset, title="Dataset Summary"):
    lines = [
        f"=== {title} ===",
        f"Relation: {dataset.relation}",
        f"Number of instances: {dataset.num_rows}",
        f"Number of attributes: {dataset.num_attributes}",
        f"Class attribute: {dataset.class_name}",
        "Attribute list:",
    ]
    for attr in dataset.attributes:
        if attr.is_nominal:
            lines.append(f"  [{attr.index}] {attr.name} (nominal | numValues={attr.num_values})")
        else:
            lines.append(f"  [{attr.index}] {attr.name} (numeric)")
    return "\n".join(lines)


def missing_zero_report(dataset, title="Missing / Zero Value Report"):
    lines = [f"=== {title} ==="]
    for attr in dataset.attributes:
        missing = dataset.missing_count(attr.name)
        zeros = dataset.zero_count(attr.name) if attr.is_numeric else 0
        lines.append(
            f"Attribute: {attr.name:<20s} | Missing: {missing:5d} | Zero values (numeric only): {zeros:5d}"
        )
    lines.append(f"Total missing cells: {dataset.missing_count()}")
    return "\n".join(lines)


def final_status(dataset, reports=(), title="Final Status"):
    n_numeric = sum(1 for a in dataset.attributes if a.is_numeric)
    n_nominal = dataset.num_attributes - n_numeric
    lines = [
        f"=== {title} ===",
        f"Rows: {dataset.num_rows}",
        f"Attributes: {dataset.num_attributes} ({n_numeric} numeric, {n_nominal} nominal)",
        f"Remaining missing values: {dataset.missing_count()}",
        f"Class attribute: {dataset.class_name} "
        f"(values: {', '.join(dataset.class_attribute.domain)})",
    ]
    for report in reports:
        lines.append(f"[OK] {report.title}: {report.summary}")
    warnings_seen = [w for report in reports for w in report.warnings]
    if warnings_seen:
        lines.append(f"Warnings ({len(warnings_seen)}):")
        lines.extend(f"  - {w}" for w in warnings_seen)
    return "\n".join(lines)
