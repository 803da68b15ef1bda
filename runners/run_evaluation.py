# Evaluation runner
# Cross-validates the configured model suites on a preprocessed ARFF

import argparse
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from experiments.io import load_pipeline_config, create_run_dir, save_results
from experiments.data import load_dataset, dataset_to_xy, validate_data_integrity
from experiments.evaluation import (
    evaluate_models, format_result, format_summary_table,
    compare_suites, format_comparison, best_result,
)


def prepare_data(dataset):
    """Feature matrix, class codes and labels, integrity-checked."""
    X, y, labels = dataset_to_xy(dataset)
    validate_data_integrity(X, y, labels)
    print(f"Dataset shape: {X.shape}")
    counts = {labels[k]: int(v) for k, v in y.value_counts().sort_index().items()}
    print(f"Class distribution: {counts}")
    return X, y, labels


def run_suite(title, model_specs, X, y, labels, config, verbose=True):
    """Evaluate one suite and print its detail blocks and summary table."""
    cv = config['cross_validation']
    print(f"{title}: {len(model_specs)} model(s), "
          f"{cv['cv_folds']}-fold stratified CV, seed={cv['cv_seed']}")

    results = evaluate_models(model_specs, X, y, labels, config, verbose=verbose)

    if verbose:
        for r in results:
            print("\n" + format_result(r))
    print("\n" + format_summary_table(title.upper(), results))
    return results


def report_comparison(baseline, improved):
    rows = compare_suites(baseline, improved)
    if rows:
        print("\n" + format_comparison(rows))

    best = best_result(list(baseline) + list(improved))
    if best is not None:
        print(f"\nBest model: {best['model']} (accuracy={best['accuracy']:.4f}, f1={best['f1']:.4f})")
    return rows


def run_evaluation(arff_path=None, config=None, output_dir=None, verbose=True):
    """
    Evaluate the baseline and improved suites on an ARFF file.

    Returns:
        dict of suite name -> list of result records
    """
    config = config or load_pipeline_config()
    arff_path = arff_path or config['data']['output_path']

    dataset = load_dataset(arff_path)
    X, y, labels = prepare_data(dataset)

    results = {}
    for suite in ('baseline', 'improved'):
        results[suite] = run_suite(
            f"{suite.capitalize()} models", config['models'].get(suite, []),
            X, y, labels, config, verbose=verbose,
        )
    report_comparison(results['baseline'], results['improved'])

    if output_dir:
        run_dir = create_run_dir(config, output_dir, name='evaluation')
        save_results(run_dir, config, results, dataset=dataset)

    return results


def main():
    parser = argparse.ArgumentParser(description='Evaluate baseline and improved models')
    parser.add_argument('arff', nargs='?', default=None, help='Preprocessed ARFF path')
    parser.add_argument('--config', '-c', type=str, default=None, help='Path to YAML config')
    parser.add_argument('--output-dir', type=str, default=None, help='Save metrics.json here')
    parser.add_argument('--quiet', action='store_true', help='Only print summary tables')
    args = parser.parse_args()

    config = load_pipeline_config(args.config)
    run_evaluation(args.arff, config, output_dir=args.output_dir, verbose=not args.quiet)


if __name__ == '__main__':
    main()
