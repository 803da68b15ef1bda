# Cross-validation utilities
# Stratified K-fold with pooled out-of-fold predictions

import time

import numpy as np
from sklearn.base import clone
from sklearn.model_selection import StratifiedKFold
from sklearn.metrics import (
    accuracy_score, precision_recall_fscore_support, cohen_kappa_score,
    confusion_matrix, roc_auc_score, average_precision_score,
)


def _validate_cv_split(train_idx, val_idx, X, y):
    """
    Validate CV split integrity.

    Assertions:
    - Train/val indices are disjoint
    - No NaN/infinite values in split data
    """
    train_set = set(train_idx)
    val_set = set(val_idx)
    if not train_set.isdisjoint(val_set):
        overlap = train_set.intersection(val_set)
        raise ValueError(f"CV LEAK: Train/val indices overlap! {len(overlap)} shared indices")

    X_train = X.iloc[train_idx]
    X_val = X.iloc[val_idx]

    if X_train.isnull().any().any():
        raise ValueError("CV split contains NaN in X_train")
    if X_val.isnull().any().any():
        raise ValueError("CV split contains NaN in X_val")
    if (y.iloc[train_idx] < 0).any() or (y.iloc[val_idx] < 0).any():
        raise ValueError("CV split contains missing class values")

    if not np.isfinite(X_train.values).all():
        raise ValueError("CV split contains infinite values in X_train")
    if not np.isfinite(X_val.values).all():
        raise ValueError("CV split contains infinite values in X_val")

    return True


def _class_scores(model, X_val, n_classes):
    """Per-class scores (n_samples x n_classes) for ROC/PR curves."""
    scores = np.zeros((len(X_val), n_classes))
    classes = np.asarray(model.classes_, dtype=int)
    if hasattr(model, 'predict_proba'):
        try:
            scores[:, classes] = model.predict_proba(X_val)
            return scores
        except AttributeError:
            pass
    decision = np.asarray(model.decision_function(X_val))
    if decision.ndim == 1:
        scores[:, classes[1]] = decision
        scores[:, classes[0]] = -decision
    else:
        scores[:, classes] = decision
    return scores


def _safe_curve_score(fn, truth, scores):
    if truth.all() or not truth.any():
        return float('nan')
    return float(fn(truth, scores))


def compute_metrics(y_true, y_pred, scores, labels):
    """Weighted and per-class metrics from pooled predictions."""
    k = len(labels)
    idx = list(range(k))
    precision, recall, f1, _ = precision_recall_fscore_support(
        y_true, y_pred, labels=idx, average='weighted', zero_division=0
    )
    p_cls, r_cls, f_cls, support = precision_recall_fscore_support(
        y_true, y_pred, labels=idx, average=None, zero_division=0
    )

    per_class = []
    for i, label in enumerate(labels):
        truth = y_true == i
        per_class.append({
            'label': label,
            'support': int(support[i]),
            'precision': float(p_cls[i]),
            'recall': float(r_cls[i]),
            'f1': float(f_cls[i]),
            'roc_auc': _safe_curve_score(roc_auc_score, truth, scores[:, i]),
            'pr_auc': _safe_curve_score(average_precision_score, truth, scores[:, i]),
        })

    return {
        'accuracy': float(accuracy_score(y_true, y_pred)),
        'precision': float(precision),
        'recall': float(recall),
        'f1': float(f1),
        'kappa': float(cohen_kappa_score(y_true, y_pred, labels=idx)),
        'confusion_matrix': confusion_matrix(y_true, y_pred, labels=idx).tolist(),
        'labels': list(labels),
        'per_class': per_class,
    }


def run_stratified_cv(model, X, y, labels, n_splits=10, seed=1):
    """
    Run stratified K-fold cross-validation and pool the out-of-fold predictions.

    Args:
        model: unfitted estimator (cloned for every fold)
        X: DataFrame of numeric features
        y: Series of class indices
        labels: class names, index-aligned with y
        n_splits: number of folds
        seed: shuffling seed

    Returns dict with accuracy, weighted precision/recall/f1, kappa,
    confusion_matrix, per_class metrics, runtime_ms, n_folds and seed.
    """
    start = time.perf_counter()
    cv = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=seed)

    y_arr = y.to_numpy(dtype=int)
    y_pred = np.empty_like(y_arr)
    scores = np.zeros((len(y_arr), len(labels)))

    for train_idx, val_idx in cv.split(X, y_arr):
        _validate_cv_split(train_idx, val_idx, X, y)

        fold_model = clone(model)
        fold_model.fit(X.iloc[train_idx], y_arr[train_idx])
        X_val = X.iloc[val_idx]
        y_pred[val_idx] = fold_model.predict(X_val)
        scores[val_idx] = _class_scores(fold_model, X_val, len(labels))

    results = compute_metrics(y_arr, y_pred, scores, labels)
    results['runtime_ms'] = int(round((time.perf_counter() - start) * 1000))
    results['n_folds'] = n_splits
    results['seed'] = seed
    return results
