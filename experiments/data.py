# Data loading utilities for training
# Turns the preprocessed ARFF artifact into a feature matrix and class codes

import numpy as np
import pandas as pd

from preprocessing.arff import load_arff


def load_dataset(arff_path):
    """Load the preprocessed ARFF artifact."""
    print(f"Loading dataset: {arff_path}")
    return load_arff(arff_path)


def dataset_to_xy(dataset):
    """
    Split a cleaned dataset into features and target.

    Returns:
        X: DataFrame of numeric features
        y: Series of class indices (0..K-1 in class-domain order)
        labels: list of class names, index-aligned with y's codes
    """
    cls = dataset.class_attribute
    if not cls.is_nominal:
        raise ValueError(f"Class attribute '{cls.name}' must be nominal")

    nominal = dataset.nominal_features()
    if nominal:
        raise ValueError(f"Features must be numeric; found nominal attributes: {nominal}")

    X = pd.DataFrame(
        {name: dataset.values(name) for name in dataset.feature_names},
        index=pd.RangeIndex(dataset.num_rows),
    )
    y = pd.Series(dataset.codes(cls.name), name=cls.name)
    return X, y, list(cls.domain)


def validate_data_integrity(X, y, labels):
    """
    Validate data integrity before training.

    Checks:
    - No NaN/infinite values in features
    - No missing class values
    - At least two classes present
    """
    errors = []

    nan_cols = X.columns[X.isnull().any()].tolist()
    if nan_cols:
        errors.append(f"NaN values found in features: {nan_cols}")

    for col in X.columns:
        if not np.isfinite(X[col].to_numpy(dtype=float, na_value=0.0)).all():
            errors.append(f"Infinite values found in feature: {col}")

    missing_y = int((y < 0).sum())
    if missing_y:
        errors.append(f"Missing values found in target ({y.name}): {missing_y} missing")

    present = sorted(set(y[y >= 0].tolist()))
    if len(present) < 2:
        errors.append(f"Need at least two classes, found {[labels[i] for i in present]}")

    if errors:
        raise ValueError("Data integrity check failed:\n  - " + "\n  - ".join(errors))

    return True
