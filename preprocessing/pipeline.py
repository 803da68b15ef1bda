# Preprocessing pipeline: CSV -> cleaned Dataset -> ARFF

from pathlib import Path

from .arff import write_arff
from .cleaner import Cleaner
from .loader import load_csv
from .report import dataset_summary, missing_zero_report, final_status


def default_output_path(input_csv):
    """Swap a trailing .csv for .arff (or append .arff)."""
    path = Path(input_csv)
    if path.suffix.lower() == '.csv':
        return path.with_suffix('.arff')
    return path.with_name(path.name + '.arff')


def preprocess(input_csv, output_arff=None, config=None, verbose=True):
    """
    Load, clean and write a dataset.

    Args:
        input_csv: path of the raw CSV
        output_arff: destination (defaults to the input path with .arff)
        config: the 'preprocessing' config section (defaults apply for missing keys)
        verbose: print summaries and per-pass reports

    Returns:
        dict with the output path, cleaned dataset, pass reports and the
        rendered before/after summaries
    """
    output_arff = Path(output_arff) if output_arff else default_output_path(input_csv)

    def _log(msg):
        if verbose:
            print(msg)

    raw = load_csv(input_csv)
    before = dataset_summary(raw, "Dataset Summary (raw)")
    missing_before = missing_zero_report(raw, "Missing / Zero Value Report (raw)")
    _log(before)
    _log("\n" + missing_before)

    cleaner = Cleaner(config, verbose=verbose)
    cleaned = cleaner.clean(raw)

    after = dataset_summary(cleaned, "Dataset Summary (cleaned)")
    status = final_status(cleaned, cleaner.reports)
    _log("\n" + after)
    _log("\n" + status)

    write_arff(cleaned, output_arff)
    _log(f"\nARFF saved: {output_arff}")

    return {
        'input_path': str(input_csv),
        'output_path': str(output_arff),
        'raw': raw,
        'dataset': cleaned,
        'reports': cleaner.reports,
        'summary_before': before,
        'missing_before': missing_before,
        'summary_after': after,
        'final_status': status,
    }
