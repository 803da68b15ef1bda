# Experiments package
# Classifier training and cross-validated evaluation on the preprocessed data

from .config_schema import DEFAULT_CONFIG, build_config, validate_config, ConfigValidationError
from .io import load_config, load_pipeline_config, save_results, create_run_dir
from .data import load_dataset, dataset_to_xy, validate_data_integrity
from .models import build_model, CostSensitiveClassifier, SUPPORTED_MODELS
from .cv import run_stratified_cv, compute_metrics
from .evaluation import evaluate_models, compare_suites, best_result

__all__ = [
    'DEFAULT_CONFIG',
    'build_config',
    'validate_config',
    'ConfigValidationError',
    'load_config',
    'load_pipeline_config',
    'save_results',
    'create_run_dir',
    'load_dataset',
    'dataset_to_xy',
    'validate_data_integrity',
    'build_model',
    'CostSensitiveClassifier',
    'SUPPORTED_MODELS',
    'run_stratified_cv',
    'compute_metrics',
    'evaluate_models',
    'compare_suites',
    'best_result',
]
