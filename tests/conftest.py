import csv

import pytest
import numpy as np

from experiments.config_schema import build_config
from preprocessing.dataset import Dataset, NUMERIC, NOMINAL

HEART_HEADER = [
    "age", "sex", "chest_pain", "blood_pressure", "cholesterol_level", "smoking", "heart_disease",
]

CHEST_PAIN = ["typical", "atypical", "non-anginal", "asymptomatic"]


@pytest.fixture(scope="session")
def seed():
    return 42


@pytest.fixture
def write_csv(tmp_path):
    def _write(header, rows, name="data.csv"):
        p = tmp_path / name
        with open(p, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return p
    return _write


@pytest.fixture
def heart_rows(seed):
    """
    40 deterministic patients plus two exact duplicates.

    Includes:
      - zeros in blood_pressure (row 3) and cholesterol_level (row 8)
      - missing cells as '?' (rows 5 and 20) and as an empty field (row 12)
      - a 0/1 numeric class that must be coerced to nominal
    """
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(40):
        label = i % 2
        age = int(rng.integers(35, 50) + 20 * label)
        sex = "Male" if rng.random() < 0.5 + 0.2 * label else "Female"
        pain = CHEST_PAIN[int(rng.integers(0, 4))]
        bp = int(rng.integers(110, 130) + 20 * label)
        chol = int(rng.integers(180, 220) + 40 * label)
        smoking = "Yes" if rng.random() < 0.3 + 0.4 * label else "No"
        rows.append([str(age), sex, pain, str(bp), str(chol), smoking, str(label)])

    rows[3][3] = "0"
    rows[8][4] = "0"
    rows[5][1] = "?"
    rows[12][4] = ""
    rows[20][0] = "?"

    rows.append(list(rows[0]))
    rows.append(list(rows[1]))
    return rows


@pytest.fixture
def heart_csv(write_csv, heart_rows):
    return write_csv(HEART_HEADER, heart_rows, name="heart_disease.csv")


@pytest.fixture
def small_dataset():
    """Three numeric/nominal features and a two-valued class, with gaps."""
    return Dataset.from_columns([
        ("x", NUMERIC, [10.0, None, 30.0, 20.0], None),
        ("color", NOMINAL, ["red", "green", None, "red"], ["red", "green", "blue"]),
        ("y", NOMINAL, ["no", "yes", "no", "yes"], ["no", "yes"]),
    ], relation="small")


@pytest.fixture
def fast_models():
    """Model suites small enough for unit-test cross-validation."""
    return {
        "classification": [
            {"name": "Decision Tree", "type": "decision_tree", "params": {"min_samples_leaf": 2}},
        ],
        "baseline": [
            {"name": "Decision Tree (Baseline)", "type": "decision_tree", "params": {}},
            {"name": "Random Forest (Baseline)", "type": "random_forest", "params": {"n_estimators": 10}},
            {"name": "Naive Bayes (Baseline)", "type": "naive_bayes", "params": {}},
            {"name": "SVM (Baseline)", "type": "svm", "params": {}},
            {"name": "k-NN k=3 (Baseline)", "type": "knn", "params": {"n_neighbors": 3}},
        ],
        "improved": [
            {"name": "Decision Tree (Improved)", "type": "decision_tree",
             "params": {"min_samples_leaf": 5, "ccp_alpha": 0.005}},
            {"name": "Random Forest (Improved)", "type": "random_forest",
             "params": {"n_estimators": 20, "max_features": "log2"}},
            {"name": "k-NN k=5 (Improved)", "type": "knn", "params": {"n_neighbors": 5}},
        ],
        "improvement": [
            {"name": "Cost-Sensitive Random Forest", "type": "cost_sensitive_random_forest",
             "params": {"n_estimators": 10}},
        ],
    }


@pytest.fixture
def base_config(tmp_path, fast_models):
    return build_config({
        "data": {
            "dataset_path": str(tmp_path / "heart_disease.csv"),
            "output_path": str(tmp_path / "out" / "heart_disease_preprocessed.arff"),
        },
        "cross_validation": {"cv_folds": 3, "cv_seed": 1},
        "evaluation": {"max_workers": 2},
        "models": fast_models,
    })


@pytest.fixture
def freeze_time(monkeypatch):
    """
    Make run_dir deterministic by freezing datetime.now().
    """
    import datetime as dt

    class _FixedDT:
        @staticmethod
        def now():
            return dt.datetime(2026, 1, 4, 12, 34, 56)

    monkeypatch.setattr("experiments.io.datetime", _FixedDT)
    return _FixedDT


@pytest.fixture
def write_yaml(tmp_path):
    import yaml
    def _write(cfg, name="temp.yaml"):
        p = tmp_path / name
        with open(p, "w") as f:
            yaml.safe_dump(cfg, f, default_flow_style=False)
        return str(p)
    return _write
