# Config schema validation
# Default pipeline configuration, merging of user overrides, and validation

import copy

from preprocessing.cleaner import DEFAULT_CLEANING_CONFIG, REFERENCE_POLICIES

from .models import SUPPORTED_MODELS, DEFAULT_MODEL_SUITES

DEFAULT_CONFIG = {
    'data': {
        'dataset_path': 'datasets/heart_disease.csv',
        'output_path': 'datasets/heart_disease_preprocessed.arff',
    },
    'preprocessing': copy.deepcopy(DEFAULT_CLEANING_CONFIG),
    'cross_validation': {
        'cv_folds': 10,
        'cv_seed': 1,
    },
    'evaluation': {
        'max_workers': None,
        # rows = actual, cols = predicted; false negatives cost 5x
        'cost_matrix': [[0.0, 1.0], [5.0, 0.0]],
    },
    'models': copy.deepcopy(DEFAULT_MODEL_SUITES),
}

MODEL_SUITES = ['classification', 'baseline', 'improved', 'improvement']


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _merge(base, overrides):
    """Recursively merge dict overrides into base (lists are replaced)."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict) and key != 'models':
            _merge(base[key], value)
        elif key == 'models' and isinstance(value, dict):
            base.setdefault('models', {}).update(copy.deepcopy(value))
        else:
            base[key] = copy.deepcopy(value)
    return base


def build_config(overrides=None):
    """Return DEFAULT_CONFIG updated with `overrides`, validated."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        _merge(config, overrides)
    validate_config(config)
    return config


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config):
    """
    Validate pipeline configuration.

    Raises:
        ConfigValidationError listing every problem found
    """
    errors = []

    unknown = [k for k in config if k not in DEFAULT_CONFIG]
    if unknown:
        errors.append(f"Unknown config section(s): {unknown}")

    for section in DEFAULT_CONFIG:
        if not isinstance(config.get(section), dict):
            errors.append(f"Missing required section: '{section}'")
    if errors:
        raise ConfigValidationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    pre = config['preprocessing']
    names = pre.get('zero_as_missing_names')
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        errors.append("preprocessing.zero_as_missing_names must be a list of strings")
    if not isinstance(pre.get('zero_heuristic_fallback'), bool):
        errors.append("preprocessing.zero_heuristic_fallback must be a boolean")
    threshold = pre.get('high_cardinality_threshold')
    if not _is_int(threshold) or threshold < 1:
        errors.append("preprocessing.high_cardinality_threshold must be a positive integer")
    policy = pre.get('encoding_reference_policy')
    if policy not in REFERENCE_POLICIES:
        errors.append(f"Invalid encoding_reference_policy '{policy}'. Allowed: {REFERENCE_POLICIES}")

    cv = config['cross_validation']
    if not _is_int(cv.get('cv_folds')):
        errors.append("cross_validation.cv_folds must be an integer")
    elif cv['cv_folds'] < 2:
        errors.append("cross_validation.cv_folds must be >= 2")
    if not _is_int(cv.get('cv_seed')):
        errors.append("cross_validation.cv_seed must be an integer")

    ev = config['evaluation']
    workers = ev.get('max_workers')
    if workers is not None and (not _is_int(workers) or workers < 1):
        errors.append("evaluation.max_workers must be null or a positive integer")
    errors.extend(_validate_cost_matrix(ev.get('cost_matrix')))

    for suite, specs in config['models'].items():
        if suite not in MODEL_SUITES:
            errors.append(f"Unknown model suite '{suite}'. Allowed: {MODEL_SUITES}")
            continue
        errors.extend(_validate_model_specs(suite, specs))

    if errors:
        raise ConfigValidationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    return True


def _validate_cost_matrix(matrix):
    if matrix is None:
        return []
    msg = "evaluation.cost_matrix must be a square list of non-negative numbers"
    if not isinstance(matrix, list) or not matrix:
        return [msg]
    n = len(matrix)
    for row in matrix:
        if not isinstance(row, list) or len(row) != n:
            return [msg]
        for v in row:
            if isinstance(v, bool) or not isinstance(v, (int, float)) or v < 0:
                return [msg]
    return []


def _validate_model_specs(suite, specs):
    errors = []
    if not isinstance(specs, list):
        return [f"models.{suite} must be a list of model specs"]
    seen = set()
    for i, spec in enumerate(specs):
        if not isinstance(spec, dict) or 'name' not in spec or 'type' not in spec:
            errors.append(f"models.{suite}[{i}] must have 'name' and 'type'")
            continue
        if spec['type'] not in SUPPORTED_MODELS:
            errors.append(f"Invalid model type '{spec['type']}'. Allowed: {SUPPORTED_MODELS}")
        if spec['name'] in seen:
            errors.append(f"Duplicate model name '{spec['name']}' in models.{suite}")
        seen.add(spec['name'])
        if not isinstance(spec.get('params', {}), dict):
            errors.append(f"models.{suite}[{i}].params must be a mapping")
    return errors
