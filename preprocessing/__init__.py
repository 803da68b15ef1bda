# Preprocessing package
# Tabular cleaning engine: CSV loading, cleaning passes, ARFF output

from .errors import PreprocessingError, InvalidInput, InvalidState, EmptyDataset, NonFatalWarning
from .dataset import Dataset, Attribute, NUMERIC, NOMINAL, output_violations
from .loader import load_csv
from .cleaner import (
    Cleaner, coerce_class_type, zeros_to_missing, remove_duplicates,
    impute_missing, normalize_min_max, encode_nominal, DEFAULT_CLEANING_CONFIG,
)
from .arff import write_arff, load_arff, dumps_arff, loads_arff
from .report import PassReport, dataset_summary, missing_zero_report, final_status
from .pipeline import preprocess, default_output_path

__all__ = [
    'PreprocessingError',
    'InvalidInput',
    'InvalidState',
    'EmptyDataset',
    'NonFatalWarning',
    'Dataset',
    'Attribute',
    'NUMERIC',
    'NOMINAL',
    'output_violations',
    'load_csv',
    'Cleaner',
    'coerce_class_type',
    'zeros_to_missing',
    'remove_duplicates',
    'impute_missing',
    'normalize_min_max',
    'encode_nominal',
    'DEFAULT_CLEANING_CONFIG',
    'write_arff',
    'load_arff',
    'dumps_arff',
    'loads_arff',
    'PassReport',
    'dataset_summary',
    'missing_zero_report',
    'final_status',
    'preprocess',
    'default_output_path',
]
