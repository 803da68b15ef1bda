# Preprocessing runner
# Raw CSV -> cleaned, normalized, encoded ARFF

import argparse
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from preprocessing import preprocess, default_output_path
from experiments.io import load_pipeline_config


def print_header(title):
    print("\n" + "=" * 70)
    print(f" {title}")
    print("=" * 70)


def print_step(step_num, description):
    print(f"\n[STEP {step_num}] {description}")
    print("-" * 50)


def resolve_paths(config, input_csv=None, output_arff=None):
    """
    Pick the input and output paths.

    An explicit input without an output writes next to the input
    (.csv -> .arff); with no input at all both paths come from config.
    """
    if input_csv:
        return str(input_csv), str(output_arff or default_output_path(input_csv))
    data = config['data']
    return data['dataset_path'], str(output_arff or data['output_path'])


def run_preprocess(input_csv=None, output_arff=None, config=None, verbose=True):
    """
    Run the preprocessing stage.

    Args:
        input_csv: raw CSV path (defaults to data.dataset_path)
        output_arff: ARFF destination
        config: full pipeline config (defaults when None)
        verbose: print dataset summaries and pass reports

    Returns:
        dict returned by preprocessing.preprocess
    """
    config = config or load_pipeline_config()
    input_csv, output_arff = resolve_paths(config, input_csv, output_arff)

    print(f"Input CSV:   {input_csv}")
    print(f"Output ARFF: {output_arff}")

    result = preprocess(input_csv, output_arff, config['preprocessing'], verbose=verbose)

    ds = result['dataset']
    print(f"\n[OK] Preprocessed {ds.num_rows} rows, {ds.num_attributes} attributes")
    print(f"[OK] Output file: {result['output_path']}")
    return result


def main():
    parser = argparse.ArgumentParser(description='Preprocess a heart-disease CSV into ARFF')
    parser.add_argument('input', nargs='?', default=None, help='Input CSV path')
    parser.add_argument('output', nargs='?', default=None, help='Output ARFF path')
    parser.add_argument('--config', '-c', type=str, default=None, help='Path to YAML config')
    parser.add_argument('--quiet', action='store_true', help='Suppress pass reports')
    args = parser.parse_args()

    config = load_pipeline_config(args.config)
    print_header("DATA PREPROCESSING")
    run_preprocess(args.input, args.output, config, verbose=not args.quiet)


if __name__ == '__main__':
    main()
