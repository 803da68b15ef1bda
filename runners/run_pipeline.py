# Main Pipeline - runs the full experiment from raw CSV to model comparison
# Four timed stages: preprocessing, classification, evaluation, improvement
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import time
import traceback
from datetime import datetime

from experiments.io import load_pipeline_config, create_run_dir, save_results
from experiments.data import load_dataset
from runners.run_preprocess import print_header, print_step, run_preprocess
from runners.run_evaluation import prepare_data, run_suite, report_comparison

STAGES = [
    ('preprocessing', 'Step 1: Data Preprocessing'),
    ('classification', 'Step 2: Classification'),
    ('evaluation', 'Step 3: Model Evaluation'),
    ('improvement', 'Step 4: Improvement Experiments'),
]

BAR_LENGTH = 30


def progress_bar(percentage, length=BAR_LENGTH):
    filled = int(round(percentage / 100.0 * length))
    filled = max(0, min(length, filled))
    return "[" + "#" * filled + "." * (length - filled) + "]"


def format_runtime_summary(timings, total_ms):
    """Per-stage runtime table (ms and s) followed by the percentage breakdown."""
    lines = [
        "=" * 80,
        " RUNTIME SUMMARY BY MODULE",
        "=" * 80,
        f"  {'Module':<50s} | {'Time (ms)':>12s} | {'Time (s)':>8s}",
        "-" * 80,
    ]
    for key, label in STAGES:
        ms = timings.get(key, 0)
        lines.append(f"  {label:<50s} | {ms:>12d} | {ms / 1000.0:>8.2f}")
    lines.append("-" * 80)
    lines.append(f"  {'TOTAL':<50s} | {total_ms:>12d} | {total_ms / 1000.0:>8.2f}")

    lines.extend(["", "=" * 80, " RUNTIME PERCENTAGE BREAKDOWN", "=" * 80])
    if total_ms > 0:
        for key, label in STAGES:
            pct = timings.get(key, 0) * 100.0 / total_ms
            lines.append(f"  {label:<35s} {pct:6.2f}% {progress_bar(pct)}")
    else:
        lines.append("  (total runtime below timer resolution)")
    return "\n".join(lines)


def _elapsed_ms(start):
    return int(round((time.perf_counter() - start) * 1000))


def run_full_pipeline(input_csv=None, output_arff=None, config=None, verbose=True, output_dir=None):
    """
    Preprocess then train and evaluate, timing each stage.

    Preprocessing errors propagate (nothing downstream can run without the
    artifact). Failures in later stages are reported and the remaining
    stages still run.

    Returns:
        dict with 'results' (stage -> result records), 'timings' (stage -> ms),
        'total_ms', 'status' (stage -> OK/FAILED/SKIPPED), 'output_path'
        and 'run_dir' (None unless output_dir is given)
    """
    config = config or load_pipeline_config()
    total_start = time.perf_counter()
    timings = {}
    status = {}
    results = {}

    print_header("HEART DISEASE DATA MINING - COMPLETE PIPELINE")
    print(f"Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    # 1. Preprocessing
    print_step(1, "DATA PREPROCESSING")
    start = time.perf_counter()
    prep = run_preprocess(input_csv, output_arff, config, verbose=verbose)
    timings['preprocessing'] = _elapsed_ms(start)
    status['preprocessing'] = 'OK'
    print(f"\n[OK] Preprocessing completed in {timings['preprocessing']} ms")

    data = None
    try:
        dataset = load_dataset(prep['output_path'])
        data = prepare_data(dataset)
    except Exception as e:
        print(f"[ERROR] Could not prepare training data: {e}")
        traceback.print_exc()

    # 2. Classification
    print_step(2, "CLASSIFICATION")
    start = time.perf_counter()
    if data is None:
        status['classification'] = 'SKIPPED'
    else:
        try:
            results['classification'] = run_suite(
                "Classification", config['models']['classification'], *data, config, verbose=verbose)
            status['classification'] = _suite_status(results['classification'])
        except Exception as e:
            print(f"[ERROR] Classification failed: {e}")
            traceback.print_exc()
            status['classification'] = 'FAILED'
    timings['classification'] = _elapsed_ms(start)
    print(f"\n[{status['classification']}] Classification completed in {timings['classification']} ms")

    # 3. Evaluation: baseline vs improved
    print_step(3, "MODEL EVALUATION (Baseline vs Improved)")
    start = time.perf_counter()
    if data is None:
        status['evaluation'] = 'SKIPPED'
    else:
        try:
            results['baseline'] = run_suite(
                "Baseline models", config['models']['baseline'], *data, config, verbose=verbose)
            results['improved'] = run_suite(
                "Improved models", config['models']['improved'], *data, config, verbose=verbose)
            report_comparison(results['baseline'], results['improved'])
            status['evaluation'] = _suite_status(results['baseline'] + results['improved'])
        except Exception as e:
            print(f"[ERROR] Evaluation failed: {e}")
            traceback.print_exc()
            status['evaluation'] = 'FAILED'
    timings['evaluation'] = _elapsed_ms(start)
    print(f"\n[{status['evaluation']}] Evaluation completed in {timings['evaluation']} ms")

    # 4. Improvement experiments
    print_step(4, "IMPROVEMENT EXPERIMENTS")
    start = time.perf_counter()
    if data is None:
        status['improvement'] = 'SKIPPED'
    else:
        try:
            results['improvement'] = run_suite(
                "Improvement experiments", config['models']['improvement'], *data, config, verbose=verbose)
            status['improvement'] = _suite_status(results['improvement'])
        except Exception as e:
            print(f"[ERROR] Improvement experiments failed: {e}")
            traceback.print_exc()
            status['improvement'] = 'FAILED'
    timings['improvement'] = _elapsed_ms(start)
    print(f"\n[{status['improvement']}] Improvement experiments completed in {timings['improvement']} ms")

    total_ms = _elapsed_ms(total_start)

    print_header("PIPELINE EXECUTION COMPLETE")
    print(format_runtime_summary(timings, total_ms))

    print("\nSteps:")
    for key, label in STAGES:
        print(f"  - {label}: {status[key]}")
    print("\nOutput files:")
    print(f"  - {prep['output_path']}")

    run_dir = None
    if output_dir:
        run_dir = create_run_dir(config, output_dir)
        save_results(run_dir, config, results, dataset=prep['dataset'], timings=timings)

    return {
        'results': results,
        'timings': timings,
        'total_ms': total_ms,
        'status': status,
        'output_path': prep['output_path'],
        'run_dir': run_dir,
    }


def _suite_status(suite_results):
    if suite_results and all('error' in r for r in suite_results):
        return 'FAILED'
    return 'OK'


def main():
    parser = argparse.ArgumentParser(description='Run full pipeline')
    parser.add_argument('input', nargs='?', default=None, help='Input CSV path')
    parser.add_argument('output', nargs='?', default=None, help='Output ARFF path')
    parser.add_argument('--config', '-c', type=str, default=None, help='Path to YAML config')
    parser.add_argument('--output-dir', type=str, default=None, help='Save metrics.json here')
    parser.add_argument('--quiet', action='store_true', help='Suppress pass reports and model details')
    args = parser.parse_args()

    config = load_pipeline_config(args.config)
    run_full_pipeline(args.input, args.output, config, verbose=not args.quiet, output_dir=args.output_dir)


if __name__ == '__main__':
    main()
