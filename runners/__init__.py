# Experiment Runners Package
# Command-line scripts for preprocessing, evaluation and the full pipeline

from . import run_preprocess
from . import run_evaluation
from . import run_pipeline

__all__ = [
    'run_preprocess',
    'run_evaluation',
    'run_pipeline',
]
