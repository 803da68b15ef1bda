import copy

import numpy as np
import pandas as pd
import pytest
from sklearn.tree import DecisionTreeClassifier

from experiments.cv import run_stratified_cv, compute_metrics, _validate_cv_split
from experiments.data import dataset_to_xy, validate_data_integrity
from experiments.evaluation import (
    evaluate_models, compare_suites, best_result, format_result, format_summary_table,
    format_comparison,
)
from preprocessing.cleaner import Cleaner
from preprocessing.dataset import Dataset, NUMERIC, NOMINAL
from preprocessing.loader import load_csv


@pytest.fixture
def separable(seed):
    rng = np.random.default_rng(seed)
    y = pd.Series([0, 1] * 15, name="target")
    X = pd.DataFrame({
        "signal": y * 0.8 + rng.random(30) * 0.1,
        "noise": rng.random(30),
    })
    return X, y, ["absent", "present"]


def test_stratified_cv_metrics_shape(separable):
    X, y, labels = separable
    res = run_stratified_cv(DecisionTreeClassifier(random_state=1), X, y, labels, n_splits=5, seed=1)

    assert res["accuracy"] > 0.9
    assert res["labels"] == labels
    cm = np.array(res["confusion_matrix"])
    assert cm.shape == (2, 2)
    assert cm.sum() == len(y)
    assert cm.sum(axis=1).tolist() == [15, 15]
    assert [row["label"] for row in res["per_class"]] == labels
    assert all(row["support"] == 15 for row in res["per_class"])
    assert isinstance(res["runtime_ms"], int) and res["runtime_ms"] >= 0
    assert res["n_folds"] == 5 and res["seed"] == 1
    for key in ("precision", "recall", "f1", "kappa"):
        assert -1.0 <= res[key] <= 1.0


def test_stratified_cv_is_deterministic(separable):
    X, y, labels = separable
    model = DecisionTreeClassifier(random_state=1)
    a = run_stratified_cv(model, X, y, labels, n_splits=3, seed=1)
    b = run_stratified_cv(model, X, y, labels, n_splits=3, seed=1)
    a.pop("runtime_ms")
    b.pop("runtime_ms")
    assert a == b


def test_confusion_matrix_uses_full_class_domain():
    y_true = np.array([0, 0, 1, 1])
    y_pred = np.array([0, 1, 1, 1])
    scores = np.array([[0.9, 0.1, 0.0], [0.4, 0.6, 0.0], [0.2, 0.8, 0.0], [0.1, 0.9, 0.0]])
    res = compute_metrics(y_true, y_pred, scores, ["a", "b", "c"])
    assert res["confusion_matrix"] == [[1, 1, 0], [0, 2, 0], [0, 0, 0]]
    assert res["accuracy"] == pytest.approx(0.75)
    assert np.isnan(res["per_class"][2]["roc_auc"])
    assert res["per_class"][0]["roc_auc"] == pytest.approx(1.0)


def test_validate_cv_split_detects_overlap(separable):
    X, y, _ = separable
    with pytest.raises(ValueError, match="CV LEAK"):
        _validate_cv_split(np.array([0, 1, 2]), np.array([2, 3]), X, y)


def test_validate_cv_split_detects_nan(separable):
    X, y, _ = separable
    X = X.copy()
    X.iloc[0, 0] = np.nan
    with pytest.raises(ValueError, match="NaN in X_train"):
        _validate_cv_split(np.array([0, 1]), np.array([2, 3]), X, y)


def test_dataset_to_xy(heart_csv):
    ds = Cleaner().clean(load_csv(heart_csv))
    X, y, labels = dataset_to_xy(ds)
    assert list(X.columns) == ds.feature_names
    assert labels == ["0", "1"]
    assert y.tolist() == ds.codes("heart_disease").tolist()
    assert validate_data_integrity(X, y, labels)


def test_dataset_to_xy_rejects_nominal_features(small_dataset):
    with pytest.raises(ValueError, match="Features must be numeric"):
        dataset_to_xy(small_dataset)


def test_validate_data_integrity_single_class():
    X = pd.DataFrame({"a": [0.0, 1.0]})
    y = pd.Series([0, 0], name="y")
    with pytest.raises(ValueError, match="at least two classes"):
        validate_data_integrity(X, y, ["p", "q"])


def test_evaluate_models_isolates_failures(separable, base_config):
    X, y, labels = separable
    X_before = X.copy()
    specs = [
        {"name": "tree", "type": "decision_tree", "params": {}},
        {"name": "broken", "type": "decision_tree", "params": {"criterion": "not_a_criterion"}},
        {"name": "nb", "type": "naive_bayes", "params": {}},
        {"name": "svm", "type": "svm", "params": {}},
    ]
    results = evaluate_models(specs, X, y, labels, base_config, verbose=False)

    assert [r["model"] for r in results] == ["tree", "broken", "nb", "svm"]
    assert "error" in results[1]
    assert all("error" not in r for r in (results[0], results[2], results[3]))
    assert results[0]["type"] == "decision_tree"
    pd.testing.assert_frame_equal(X, X_before)

    table = format_summary_table("SUITE", results)
    assert "FAILED" in table and "tree" in table
    assert "FAILED" in format_result(results[1])
    assert "Confusion Matrix" in format_result(results[0])


def test_evaluate_models_all_suites_on_heart(heart_csv, base_config):
    ds = Cleaner().clean(load_csv(heart_csv))
    X, y, labels = dataset_to_xy(ds)
    for suite, specs in base_config["models"].items():
        results = evaluate_models(specs, X, y, labels, base_config, verbose=False)
        errors = [r for r in results if "error" in r]
        assert errors == [], suite
        for r in results:
            assert 0.0 <= r["accuracy"] <= 1.0


def _fake(model, type_, acc, ms=10):
    return {"model": model, "type": type_, "accuracy": acc, "f1": acc, "runtime_ms": ms}


def test_compare_suites_and_best():
    baseline = [_fake("DT", "decision_tree", 0.70), _fake("RF", "random_forest", 0.80),
                {"model": "SVM", "type": "svm", "error": "boom"}]
    improved = [_fake("DT+", "decision_tree", 0.75, ms=20), _fake("kNN5", "knn", 0.60)]
    rows = compare_suites(baseline, improved)
    assert len(rows) == 1
    assert rows[0]["accuracy_gain"] == pytest.approx(0.05)
    assert rows[0]["runtime_ratio"] == pytest.approx(2.0)
    assert "decision_tree" in format_comparison(rows)

    assert best_result(baseline + improved)["model"] == "RF"
    assert best_result([{"model": "x", "type": "svm", "error": "e"}]) is None
