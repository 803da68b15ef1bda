import numpy as np
import pytest

from preprocessing.loader import load_csv, infer_column
from preprocessing.dataset import NUMERIC, NOMINAL
from preprocessing.errors import InvalidInput


def test_numeric_and_nominal_inference_with_class_coercion(write_csv):
    path = write_csv(["a", "b", "y"], [["1", "x", "0"], ["2", "y", "1"], ["3", "x", "0"]])
    ds = load_csv(path)

    assert ds.attribute("a").kind == NUMERIC
    assert ds.values("a").tolist() == [1.0, 2.0, 3.0]
    assert ds.attribute("b").domain == ["x", "y"]
    assert ds.class_name == "y"
    assert ds.class_attribute.is_nominal
    assert ds.class_attribute.domain == ["0", "1"]
    assert ds.codes("y").tolist() == [0, 1, 0]


def test_relation_defaults_to_file_stem(write_csv):
    path = write_csv(["a", "y"], [["1", "p"], ["2", "q"]], name="heart_disease.csv")
    assert load_csv(path).relation == "heart_disease"
    assert load_csv(path, relation="custom").relation == "custom"


def test_missing_tokens(write_csv):
    path = write_csv(["a", "b", "y"], [["1", "?", "p"], ["", "x", "q"], ["3", "", "p"]])
    ds = load_csv(path)
    assert np.isnan(ds.values("a")[1])
    assert ds.labels("b") == [None, "x", None]
    assert ds.attribute("b").domain == ["x"]


def test_numeric_class_domain_is_sorted(write_csv):
    path = write_csv(["a", "y"], [["1", "3"], ["2", "1"], ["3", "2"], ["4", "1.5"]])
    ds = load_csv(path)
    assert ds.class_attribute.domain == ["1", "1.5", "2", "3"]
    assert ds.labels("y") == ["3", "1", "2", "1.5"]


def test_class_coercion_can_be_disabled(write_csv):
    path = write_csv(["a", "y"], [["1", "0"], ["2", "1"]])
    ds = load_csv(path, coerce_class=False)
    assert ds.class_attribute.is_numeric


def test_nominal_domain_in_first_appearance_order(write_csv):
    path = write_csv(["c", "y"], [["blue", "p"], ["red", "q"], ["blue", "p"], ["green", "q"]])
    assert load_csv(path).attribute("c").domain == ["blue", "red", "green"]


def test_crlf_and_bom(tmp_path):
    path = tmp_path / "crlf.csv"
    path.write_bytes("\ufeffa,y\r\n1,p\r\n2,q\r\n".encode("utf-8"))
    ds = load_csv(path)
    assert ds.names == ["a", "y"]
    assert ds.num_rows == 2


def test_ragged_row_rejected(write_csv):
    path = write_csv(["a", "b", "y"], [["1", "x", "0"], ["2", "1"]])
    with pytest.raises(InvalidInput, match="line 3 has 2 field"):
        load_csv(path)


def test_duplicate_header_rejected(write_csv):
    path = write_csv(["a", "a", "y"], [["1", "2", "0"]])
    with pytest.raises(InvalidInput, match="duplicate attribute name"):
        load_csv(path)


def test_empty_file_rejected(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_text("")
    with pytest.raises(InvalidInput, match="header line is missing"):
        load_csv(path)


def test_blank_first_line_rejected(tmp_path):
    path = tmp_path / "blank.csv"
    path.write_text("\na,y\n1,0\n2,1\n")
    with pytest.raises(InvalidInput, match="line 1 is blank"):
        load_csv(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(InvalidInput, match="Cannot read CSV"):
        load_csv(tmp_path / "nope.csv")


def test_single_bad_cell_in_numeric_column_is_corruption(write_csv):
    path = write_csv(["a", "y"], [["1", "p"], ["2", "q"], ["abc", "p"], ["4", "q"]])
    with pytest.raises(InvalidInput, match="'abc' is not numeric"):
        load_csv(path)


def test_infer_column_mixed_values_become_nominal():
    kind, values, domain = infer_column("c", ["1", "abc", "def", "?"])
    assert kind == NOMINAL
    assert domain == ["1", "abc", "def"]
    assert values == ["1", "abc", "def", None]


def test_infer_column_all_missing_is_numeric():
    kind, values, domain = infer_column("c", ["?", ""])
    assert kind == NUMERIC
    assert values == [None, None]
    assert domain is None


def test_heart_fixture_loads(heart_csv):
    ds = load_csv(heart_csv)
    assert ds.num_rows == 42
    assert ds.class_name == "heart_disease"
    assert ds.class_attribute.domain == ["0", "1"]
    assert ds.nominal_features() == ["sex", "chest_pain", "smoking"]
    assert ds.missing_count() == 3
    assert ds.zero_count("blood_pressure") == 1
