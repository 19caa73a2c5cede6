import math, os

import polars as pl
import pytest

import colstat
import make_csv

def test_column_stats_numeric():
    r = colstat.column_stats(pl.Series("v", [1, 2, 3, 4]))
    assert r["type"] == "Number"
    assert (r["count"], r["nulls"], r["unique"]) == (4, 0, 4)
    assert (r["min"], r["max"], r["sum"]) == (1, 4, 10)
    assert r["mean"] == 2.5
    assert math.isclose(r["stdev"], 1.2909944487358056)
    assert r["longest"] is None

def test_column_stats_nulls_excluded():
    r = colstat.column_stats(pl.Series("v", [1.0, None, 3.0, None, 5.0]))
    assert r["count"] == 3
    assert r["nulls"] == 2
    assert r["mean"] == 3.0
    assert r["unique"] == 3

def test_column_stats_text_narrows():
    r = colstat.column_stats(pl.Series("s", ["pear", "apple", None, "fig", "apple"]))
    assert r["type"] == "Text"
    assert not r["is_numeric"]
    assert (r["count"], r["nulls"], r["unique"]) == (4, 1, 3)
    assert (r["min"], r["max"]) == ("apple", "pear")
    assert r["longest"] == 5
    assert r["mean"] is None and r["sum"] is None and r["stdev"] is None

def test_column_stats_strict_numeric():
    with pytest.raises(colstat.TypeMismatchError):
        colstat.column_stats(pl.Series("s", ["a", "b"]), strict_numeric=True)
    # numeric columns are unaffected
    assert colstat.column_stats(pl.Series("v", [2]), strict_numeric=True)["stdev"] is None

def test_column_stats_skip_unique():
    r = colstat.column_stats(pl.Series("v", [1, 1, 2]), skip_unique=True)
    assert r["unique"] is None
    assert "Unique:" not in "\n".join(colstat.format_stats("v", r))

def test_load_table_errors(tmp_path):
    with pytest.raises(colstat.FileLoadError, match="not found"):
        colstat.load_table(str(tmp_path / "missing.csv"), "a")
    with pytest.raises(colstat.FileLoadError):
        colstat.load_table(str(tmp_path), "a")
    empty = tmp_path / "empty.csv"
    empty.write_text("")
    with pytest.raises(colstat.FileLoadError):
        colstat.load_table(str(empty), "a")

def test_load_table_malformed_csv(tmp_path):
    ragged = tmp_path / "ragged.csv"
    ragged.write_text("a,b\n1,2\n3,4,5\n")
    with pytest.raises(colstat.FileLoadError):
        colstat.load_table(str(ragged), "a")
    bad_utf8 = tmp_path / "bad.csv"
    bad_utf8.write_bytes(b"a\n\xff\xfe\n")
    with pytest.raises(colstat.FileLoadError):
        colstat.load_table(str(bad_utf8), "a")

def test_load_table_other_columns_cannot_fail(tmp_path):
    path = tmp_path / "late_type_change.csv"
    # column a turns non-numeric after the 100-row inference window
    path.write_text("a,b\n" + "1,2\n" * 150 + "x,2\n")
    df = colstat.load_table(str(path), "b")
    assert df.columns == ["b"]
    r = colstat.run(colstat.InvocationRequest(str(path), "b"))
    assert (r["count"], r["mean"]) == (151, 2.0)
    with pytest.raises(colstat.FileLoadError):
        colstat.run(colstat.InvocationRequest(str(path), "a"))

def test_load_table_missing_column_lists_header(tmp_path):
    path = tmp_path / "d.csv"
    path.write_text("a,b\n1,2\n")
    with pytest.raises(colstat.ColumnNotFoundError, match="available: 'a', 'b'"):
        colstat.load_table(str(path), "zz")

def test_regex_like_column_name(tmp_path):
    path = tmp_path / "d.csv"
    path.write_text("a,^a$\n1,10\n2,20\n")
    r = colstat.run(colstat.InvocationRequest(str(path), "^a$"))
    assert (r["count"], r["min"], r["max"]) == (2, 10, 20)
    assert colstat.column_stats(pl.Series("^a$", [5, 7]))["sum"] == 12

def test_integer_sum_does_not_wrap():
    r = colstat.column_stats(pl.Series("v", [2**63 - 1, 1]))
    assert r["sum"] > 0
    assert r["sum"] == float(2**63)
    assert colstat.fmt_value(r["sum"]) == "9,223,372,036,854,775,808"

def test_boolean_column_has_no_longest():
    r = colstat.column_stats(pl.Series("flag", [True, False, None]))
    assert r["type"] == "Boolean"
    assert (r["count"], r["nulls"], r["min"], r["max"]) == (2, 1, False, True)
    assert r["longest"] is None
    assert not any(line.startswith("Longest:") for line in colstat.format_stats("flag", r))

def test_nan_treated_as_missing():
    r = colstat.column_stats(pl.Series("v", [1.0, float("nan"), 3.0]))
    assert (r["count"], r["nulls"]) == (2, 1)
    assert (r["min"], r["max"], r["sum"], r["mean"]) == (1.0, 3.0, 4.0, 2.0)
    assert r["unique"] == 2

def test_select_column_missing():
    df = pl.DataFrame({"a": [1], "b": [2]})
    with pytest.raises(colstat.ColumnNotFoundError, match="'zz'"):
        colstat.select_column(df, "zz")
    assert colstat.select_column(df, "b").to_list() == [2]

def test_run_generated_file_matches_python(tmp_path):
    path = tmp_path / "gen.csv"
    cols = make_csv.write_csv(path, 2_000, num_cols=2, str_cols=1, null_rate=0.1, seed=7)
    values = [x for x in cols[1] if x is not None]
    r = colstat.run(colstat.InvocationRequest(str(path), "n1", infer_schema_length=0))
    assert r["count"] == len(values)
    assert r["nulls"] == 2_000 - len(values)
    assert r["min"] == min(values) and r["max"] == max(values)
    assert math.isclose(r["mean"], sum(values) / len(values), rel_tol=1e-9, abs_tol=1e-6)

def test_run_missing_column_on_large_file(tmp_path):
    path = tmp_path / "big.csv"
    make_csv.write_csv(path, 50_000, num_cols=1, str_cols=1, seed=3)
    with pytest.raises(colstat.ColumnNotFoundError):
        colstat.run(colstat.InvocationRequest(str(path), "n9"))

def test_fmt_value():
    assert colstat.fmt_value(None) == "N/A"
    assert colstat.fmt_value(float("nan")) == "N/A"
    assert colstat.fmt_value(1234567) == "1,234,567"
    assert colstat.fmt_value(3.0) == "3"
    assert colstat.fmt_value(2.5) == "2.5000"
    assert colstat.fmt_value(1.23456, precision=2) == "1.23"
    assert colstat.fmt_value(True) == "True"
    assert colstat.fmt_value("abc") == "abc"

def test_parse_request_validation():
    req = colstat.parse_request(["-f", "x.csv", "-c", "col"])
    assert req == colstat.InvocationRequest("x.csv", "col")
    with pytest.raises(colstat.UsageError):
        colstat.parse_request(["-f", "", "-c", "col"])
    with pytest.raises(colstat.UsageError):
        colstat.parse_request(["-f", "x.csv", "-c", ""])
    with pytest.raises(colstat.UsageError):
        colstat.parse_request(["-f", "x.csv", "-c", "a", "-d", "::"])
    with pytest.raises(colstat.UsageError):
        colstat.parse_request(["-f", "x.csv"])

def test_main_help_and_exit_codes(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        colstat.main(["-f", str(tmp_path / "nope.csv"), "-c", "a", "--help"])
    assert exc.value.code == 0
    assert colstat.main(["-c", "a"]) == 2
    assert colstat.main(["-f", str(tmp_path / "nope.csv"), "-c", "a"]) == 1
    err = capsys.readouterr().err
    assert "UsageError:" in err and "FileLoadError:" in err

def test_main_prints_report(tmp_path, capsys):
    path = tmp_path / "d.csv"
    path.write_text("v\n1\n2\n3\n4\n")
    assert colstat.main(["-f", str(path), "-c", "v"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "--- Statistics for 'v' (Number) ---"
    assert "Count:    4" in out
    assert "Mean:     2.5000" in out

def test_make_csv_is_deterministic(tmp_path):
    a, b = tmp_path / "a.csv", tmp_path / "b.csv"
    make_csv.write_csv(a, 100, 2, 2, 0.2, 42)
    make_csv.write_csv(b, 100, 2, 2, 0.2, 42)
    assert a.read_text() == b.read_text()
    assert a.read_text().splitlines()[0] == "n0,n1,s0,s1"
    assert os.path.getsize(a) > 0
