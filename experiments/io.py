# I/O utilities for experiment pipeline
# Config loading, result saving, run directory management

import os
import json
import hashlib
from datetime import datetime

import yaml

from .config_schema import build_config


def load_config(config_path):
    """Load YAML configuration file."""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Config file is empty or invalid: {config_path}")
    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return config


def load_pipeline_config(config_path=None):
    """Defaults merged with the YAML file at config_path (if any), validated."""
    overrides = load_config(config_path) if config_path else None
    return build_config(overrides)


def config_hash(config):
    """Generate deterministic hash of config for run naming."""
    config_str = json.dumps(config, sort_keys=True, default=str)
    return hashlib.md5(config_str.encode()).hexdigest()[:8]


def dataset_hash(dataset):
    """Fingerprint of a dataset's schema and content."""
    frame = dataset.frame
    content = f"{frame.shape}_{list(frame.columns)}_{frame.to_json()}"
    return hashlib.md5(content.encode()).hexdigest()[:12]


def create_run_dir(config, output_dir='runs', name='pipeline'):
    """Create unique run directory for experiment outputs."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    cfg_hash = config_hash(config)
    run_dir = os.path.join(output_dir, f"{name}_{timestamp}_{cfg_hash}")
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def save_results(run_dir, config, results, dataset=None, timings=None):
    """Write config.yaml and metrics.json into run_dir."""
    with open(os.path.join(run_dir, 'config.yaml'), 'w') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    results_json = {
        'seed': config['cross_validation']['cv_seed'],
        'cv_folds': config['cross_validation']['cv_folds'],
        'timestamp': datetime.now().isoformat(),
        'stages': {stage: list(stage_results) for stage, stage_results in results.items()},
    }
    if dataset is not None:
        results_json['dataset'] = {
            'relation': dataset.relation,
            'dataset_hash': dataset_hash(dataset),
            'rows': dataset.num_rows,
            'attributes': dataset.num_attributes,
            'class_attribute': dataset.class_name,
        }
    if timings is not None:
        results_json['timings_ms'] = dict(timings)

    with open(os.path.join(run_dir, 'metrics.json'), 'w') as f:
        json.dump(results_json, f, indent=2, default=_json_default)

    print(f"Results saved to: {run_dir}")
    return run_dir


def _json_default(value):
    # NaN AUCs and numpy scalars
    if hasattr(value, 'item'):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
