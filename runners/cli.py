# Command-line entry point: heartdm preprocess | run

import argparse
import sys

from preprocessing.errors import PreprocessingError
from experiments.config_schema import ConfigValidationError
from experiments.io import load_pipeline_config
from runners.run_preprocess import print_header, run_preprocess
from runners.run_pipeline import run_full_pipeline


def build_parser():
    parser = argparse.ArgumentParser(
        prog='heartdm',
        description='Heart disease data mining: preprocessing and classifier evaluation',
    )
    sub = parser.add_subparsers(dest='command', required=True)

    for name, help_text in (
        ('preprocess', 'Clean a CSV and write the ARFF artifact'),
        ('run', 'Preprocess, then train and evaluate all model suites'),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument('input', nargs='?', default=None,
                       help='Input CSV (default: data.dataset_path from config)')
        p.add_argument('output', nargs='?', default=None,
                       help='Output ARFF (default: input path with .arff)')
        p.add_argument('--config', '-c', type=str, default=None, help='Path to YAML config')
        p.add_argument('--quiet', action='store_true', help='Suppress pass reports')
        if name == 'run':
            p.add_argument('--output-dir', type=str, default=None,
                           help='Save config.yaml and metrics.json in a run directory here')
    return parser


def main(argv=None):
    """Parse arguments, run the command and return the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_pipeline_config(args.config)
        if args.command == 'preprocess':
            print_header("DATA PREPROCESSING")
            run_preprocess(args.input, args.output, config, verbose=not args.quiet)
        else:
            run_full_pipeline(args.input, args.output, config,
                              verbose=not args.quiet, output_dir=args.output_dir)
    except PreprocessingError as e:
        print(f"error: {type(e).__name__}: {_one_line(e)}", file=sys.stderr)
        return e.exit_code
    except ConfigValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


def _one_line(exc):
    return " ".join(str(exc).split())


if __name__ == '__main__':
    sys.exit(main())
