# Parallel model evaluation and result tables
# Every model is cross-validated in its own worker on a private copy of
# the data; a failing model yields an error record and the rest continue.

import os
from concurrent.futures import ThreadPoolExecutor, as_completed

from .cv import run_stratified_cv
from .models import build_model


def _evaluate_one(spec, X, y, labels, config):
    cv_cfg = config['cross_validation']
    model = build_model(
        spec['type'],
        spec.get('params'),
        seed=cv_cfg['cv_seed'],
        cost_matrix=config['evaluation'].get('cost_matrix'),
    )
    result = run_stratified_cv(
        model, X, y, labels, n_splits=cv_cfg['cv_folds'], seed=cv_cfg['cv_seed']
    )
    result['model'] = spec['name']
    result['type'] = spec['type']
    return result


def evaluate_models(model_specs, X, y, labels, config, verbose=True):
    """
    Cross-validate every model spec in parallel.

    Returns a list of result dicts in the order of `model_specs`. Failed
    models are represented by {'model', 'type', 'error'} records.
    """
    max_workers = config['evaluation'].get('max_workers') or os.cpu_count() or 1
    max_workers = max(1, min(max_workers, len(model_specs) or 1))

    results = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_spec = {
            executor.submit(_evaluate_one, spec, X.copy(), y.copy(), list(labels), config): spec
            for spec in model_specs
        }
        for future in as_completed(future_to_spec):
            spec = future_to_spec[future]
            try:
                results.append(future.result())
            except Exception as e:
                results.append({
                    'model': spec['name'],
                    'type': spec['type'],
                    'error': f"{type(e).__name__}: {e}",
                })
                if verbose:
                    print(f"Error in model '{spec['name']}': {e}")

    order = {spec['name']: i for i, spec in enumerate(model_specs)}
    results.sort(key=lambda r: order[r['model']])
    return results


# --- formatting ----------------------------------------------------------

def format_confusion_matrix(result):
    labels = result['labels']
    width = max([len(str(l)) for l in labels] + [len(str(v)) for row in result['confusion_matrix'] for v in row] + [5])
    letters = [chr(ord('a') + i) if i < 26 else f"c{i}" for i in range(len(labels))]
    lines = [" ".join(f"{l:>{width}}" for l in letters) + "   <-- classified as"]
    for i, row in enumerate(result['confusion_matrix']):
        cells = " ".join(f"{v:>{width}}" for v in row)
        lines.append(f"{cells} | {letters[i]} = {labels[i]}")
    return "\n".join(lines)


def format_class_details(result):
    lines = [f"{'Class':<15s} | {'Precision':>9s} | {'Recall':>9s} | {'F1':>9s} | {'ROC AUC':>9s} | {'PRC AUC':>9s}"]
    for row in result['per_class']:
        lines.append(
            f"{str(row['label']):<15s} | {row['precision']:9.4f} | {row['recall']:9.4f} | "
            f"{row['f1']:9.4f} | {row['roc_auc']:9.4f} | {row['pr_auc']:9.4f}"
        )
    return "\n".join(lines)


def format_result(result):
    """Detailed block for one model."""
    lines = ["-" * 70, f"Model: {result['model']}", "-" * 70]
    if 'error' in result:
        lines.append(f"FAILED: {result['error']}")
        return "\n".join(lines)
    lines.extend([
        f"Accuracy            : {result['accuracy'] * 100:.4f}%",
        f"Precision (Weighted): {result['precision']:.4f}",
        f"Recall (Weighted)   : {result['recall']:.4f}",
        f"F1-Score (Weighted) : {result['f1']:.4f}",
        f"Kappa Statistic     : {result['kappa']:.4f}",
        f"Runtime             : {result['runtime_ms']} ms",
        "",
        "Per-class details:",
        format_class_details(result),
        "",
        "Confusion Matrix:",
        format_confusion_matrix(result),
    ])
    return "\n".join(lines)


def format_summary_table(title, results):
    lines = [
        "=" * 90,
        title,
        "=" * 90,
        f"{'Model':<35s} | {'Accuracy':<10s} | {'Precision':<10s} | {'Recall':<10s} | "
        f"{'F1-Score':<10s} | {'Runtime (ms)':<12s}",
        "-" * 90,
    ]
    for r in results:
        if 'error' in r:
            lines.append(f"{r['model']:<35s} | FAILED: {r['error']}")
            continue
        lines.append(
            f"{r['model']:<35s} | {r['accuracy']:<10.4f} | {r['precision']:<10.4f} | "
            f"{r['recall']:<10.4f} | {r['f1']:<10.4f} | {r['runtime_ms']:<12d}"
        )
    lines.append("=" * 90)
    return "\n".join(lines)


def compare_suites(baseline, improved):
    """Pair baseline and improved results by model type."""
    base_by_type = {r['type']: r for r in baseline if 'error' not in r}
    rows = []
    for r in improved:
        if 'error' in r or r['type'] not in base_by_type:
            continue
        b = base_by_type[r['type']]
        rows.append({
            'type': r['type'],
            'baseline_model': b['model'],
            'improved_model': r['model'],
            'baseline_accuracy': b['accuracy'],
            'improved_accuracy': r['accuracy'],
            'accuracy_gain': r['accuracy'] - b['accuracy'],
            'runtime_ratio': (r['runtime_ms'] / b['runtime_ms']) if b['runtime_ms'] else float('nan'),
        })
    return rows


def format_comparison(rows):
    lines = [
        "-" * 90,
        "MODEL-BY-MODEL IMPROVEMENTS",
        "-" * 90,
        f"{'Model Type':<30s} | {'Baseline Acc':<12s} | {'Improved Acc':<12s} | "
        f"{'Accuracy Gain':<14s} | {'Runtime Ratio':<13s}",
        "-" * 90,
    ]
    for row in rows:
        lines.append(
            f"{row['type']:<30s} | {row['baseline_accuracy']:<12.4f} | {row['improved_accuracy']:<12.4f} | "
            f"{row['accuracy_gain']:<+14.4f} | {row['runtime_ratio']:<12.2f}x"
        )
    lines.append("-" * 90)
    return "\n".join(lines)


def best_result(results):
    ok = [r for r in results if 'error' not in r]
    if not ok:
        return None
    return max(ok, key=lambda r: (r['accuracy'], r['f1']))
