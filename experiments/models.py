# Model building utilities

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin, clone
from sklearn.ensemble import RandomForestClassifier
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier


SUPPORTED_MODELS = [
    'decision_tree', 'random_forest', 'naive_bayes', 'svm', 'knn',
    'cost_sensitive_random_forest',
]

# Models that support random_state parameter
MODELS_WITH_RANDOM_STATE = [
    'decision_tree', 'random_forest', 'svm', 'cost_sensitive_random_forest',
]

# Models that are deterministic (no random_state needed)
DETERMINISTIC_MODELS = ['naive_bayes', 'knn']

DEFAULT_COST_MATRIX = [[0.0, 1.0], [5.0, 0.0]]

DEFAULT_MODEL_SUITES = {
    'classification': [
        {'name': 'Decision Tree', 'type': 'decision_tree', 'params': {'min_samples_leaf': 2}},
    ],
    'baseline': [
        {'name': 'Decision Tree (Baseline)', 'type': 'decision_tree', 'params': {'min_samples_leaf': 2}},
        {'name': 'Random Forest (Baseline)', 'type': 'random_forest', 'params': {'n_estimators': 100}},
        {'name': 'Naive Bayes (Baseline)', 'type': 'naive_bayes', 'params': {}},
        {'name': 'SVM (Baseline)', 'type': 'svm', 'params': {}},
        {'name': 'k-NN k=3 (Baseline)', 'type': 'knn', 'params': {'n_neighbors': 3}},
    ],
    'improved': [
        {'name': 'Decision Tree (Improved)', 'type': 'decision_tree',
         'params': {'min_samples_leaf': 5, 'ccp_alpha': 0.005}},
        {'name': 'Random Forest (Improved)', 'type': 'random_forest',
         'params': {'n_estimators': 200, 'max_features': 'log2'}},
        {'name': 'Naive Bayes (Improved)', 'type': 'naive_bayes', 'params': {'var_smoothing': 1e-3}},
        {'name': 'k-NN k=5 (Improved)', 'type': 'knn', 'params': {'n_neighbors': 5}},
    ],
    'improvement': [
        {'name': 'Cost-Sensitive Random Forest', 'type': 'cost_sensitive_random_forest',
         'params': {'n_estimators': 100}},
    ],
}


class CostSensitiveClassifier(ClassifierMixin, BaseEstimator):
    """
    Wrap a probabilistic classifier and predict the minimum expected-cost class.

    cost_matrix[i][j] is the cost of predicting class j when the truth is
    class i; classes are the integer labels 0..K-1 in class-domain order.
    """

    def __init__(self, estimator=None, cost_matrix=None):
        self.estimator = estimator
        self.cost_matrix = cost_matrix

    def fit(self, X, y):
        cost = np.asarray(
            DEFAULT_COST_MATRIX if self.cost_matrix is None else self.cost_matrix, dtype=float
        )
        base = self.estimator if self.estimator is not None else RandomForestClassifier()
        self.estimator_ = clone(base).fit(X, y)
        self.classes_ = self.estimator_.classes_

        labels = np.asarray(self.classes_)
        if cost.ndim != 2 or cost.shape[0] != cost.shape[1]:
            raise ValueError(f"cost matrix must be square, got shape {cost.shape}")
        if not np.issubdtype(labels.dtype, np.integer) or labels.max() >= cost.shape[0]:
            raise ValueError(
                f"cost matrix of shape {cost.shape} does not cover classes {labels.tolist()}"
            )
        self.cost_ = cost[np.ix_(labels, labels)]
        return self

    def predict_proba(self, X):
        return self.estimator_.predict_proba(X)

    def predict(self, X):
        expected_cost = self.predict_proba(X) @ self.cost_
        return self.classes_[np.argmin(expected_cost, axis=1)]


def build_model(model_type, params=None, seed=1, cost_matrix=None):
    """
    Build and return an unfitted classifier by type name.

    Note: Naive Bayes and k-NN are deterministic and don't use random_state.
    Tree-based models and the SVM get random_state=seed for reproducibility.
    """
    params = dict(params or {})

    if model_type == 'decision_tree':
        return DecisionTreeClassifier(random_state=seed, **params)

    elif model_type == 'random_forest':
        return RandomForestClassifier(random_state=seed, **params)

    elif model_type == 'naive_bayes':
        return GaussianNB(**params)

    elif model_type == 'svm':
        # linear kernel, like an SMO-trained support vector classifier
        params.setdefault('kernel', 'linear')
        return SVC(random_state=seed, **params)

    elif model_type == 'knn':
        return KNeighborsClassifier(**params)

    elif model_type == 'cost_sensitive_random_forest':
        return CostSensitiveClassifier(
            estimator=RandomForestClassifier(random_state=seed, **params),
            cost_matrix=cost_matrix,
        )

    else:
        raise ValueError(
            f"Unknown model type: '{model_type}'. "
            f"Supported: {SUPPORTED_MODELS}"
        )


def get_model_info(model_type):
    """Get information about a model type."""
    if model_type not in SUPPORTED_MODELS:
        raise ValueError(f"Unknown model type: '{model_type}'. Supported: {SUPPORTED_MODELS}")
    return {
        'type': model_type,
        'supports_random_state': model_type in MODELS_WITH_RANDOM_STATE,
        'is_deterministic': model_type in DETERMINISTIC_MODELS,
    }
