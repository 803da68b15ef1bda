import os

from runners.cli import main


def test_preprocess_default_output(heart_csv, capsys):
    assert main(["preprocess", str(heart_csv), "--quiet"]) == 0
    assert heart_csv.with_suffix(".arff").exists()
    assert "[OK] Output file:" in capsys.readouterr().out


def test_preprocess_explicit_output(heart_csv, tmp_path):
    target = tmp_path / "out" / "clean.arff"
    assert main(["preprocess", str(heart_csv), str(target), "--quiet"]) == 0
    assert target.read_text().startswith("@relation heart_disease\n")


def test_invalid_input_exit_code(write_csv, capsys):
    path = write_csv(["a", "b", "y"], [["1", "x", "0"], ["2", "1"]])
    assert main(["preprocess", str(path), "--quiet"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("error: InvalidInput:")
    assert len(err.strip().splitlines()) == 1


def test_empty_dataset_exit_code(write_csv, capsys):
    path = write_csv(["a", "b", "y"], [])
    assert main(["preprocess", str(path), "--quiet"]) == 1
    assert "EmptyDataset" in capsys.readouterr().err


def test_invalid_state_exit_code(write_csv, capsys):
    # a single class value cannot be written
    path = write_csv(["a", "y"], [["1", "1"], ["2", "1"], ["3", "1"]])
    assert main(["preprocess", str(path), "--quiet"]) == 2
    err = capsys.readouterr().err
    assert "InvalidState" in err
    assert len(err.strip().splitlines()) == 1


def test_config_error_exit_code(heart_csv, write_yaml, capsys):
    cfg = write_yaml({"cross_validation": {"cv_folds": 1}})
    assert main(["preprocess", str(heart_csv), "-c", cfg]) == 1
    assert "Config validation failed" in capsys.readouterr().err


def test_missing_config_file(heart_csv, tmp_path):
    assert main(["preprocess", str(heart_csv), "--config", str(tmp_path / "nope.yaml")]) == 1


def test_paths_from_config(heart_csv, tmp_path, write_yaml):
    target = tmp_path / "from_config.arff"
    cfg = write_yaml({"data": {"dataset_path": str(heart_csv), "output_path": str(target)}})
    assert main(["preprocess", "-c", cfg, "--quiet"]) == 0
    assert target.exists()


def test_run_command(heart_csv, tmp_path, write_yaml, fast_models, capsys):
    cfg = write_yaml({
        "cross_validation": {"cv_folds": 3, "cv_seed": 1},
        "evaluation": {"max_workers": 2},
        "models": fast_models,
    })
    runs = tmp_path / "runs"
    assert main(["run", str(heart_csv), "-c", cfg, "--quiet", "--output-dir", str(runs)]) == 0

    out = capsys.readouterr().out
    assert "RUNTIME PERCENTAGE BREAKDOWN" in out
    run_dirs = os.listdir(runs)
    assert len(run_dirs) == 1
    assert os.path.exists(os.path.join(runs, run_dirs[0], "metrics.json"))
