import subprocess, sys, re, os, tempfile

HERE = os.path.dirname(os.path.abspath(__file__))
SCRIPT = os.path.join(HERE, "colstat.py")

def _run(*args):
    return subprocess.run([sys.executable, SCRIPT, *args], capture_output=True, text=True)

def _write_tmp(text: str, suffix: str = ".csv") -> str:
    with tempfile.NamedTemporaryFile("w", delete=False, suffix=suffix) as f:
        f.write(text); return f.name

def test_numeric_column_report():
    path = _write_tmp("id,amount\na,1\nb,2\nc,3\nd,4\n")
    try:
        r = _run("-f", path, "-c", "amount")
        assert r.returncode == 0, r.stderr
        assert "--- Statistics for 'amount' (Number) ---" in r.stdout
        assert re.search(r'Count:\s+4\n', r.stdout)
        assert re.search(r'Min:\s+1\n', r.stdout)
        assert re.search(r'Max:\s+4\n', r.stdout)
        assert re.search(r'Mean:\s+2\.5000\n', r.stdout)
        assert re.search(r'Sum:\s+10\n', r.stdout)
        assert r.stderr == ""
    finally:
        os.remove(path)

def test_missing_cells_excluded():
    path = _write_tmp("a,b\n1,x\n,y\n3,z\n,w\n")
    try:
        r = _run("--file", path, "--column", "a")
        assert r.returncode == 0, r.stderr
        assert re.search(r'Count:\s+2\n', r.stdout)
        assert re.search(r'Nulls:\s+2\n', r.stdout)
        assert re.search(r'Mean:\s+2\n', r.stdout)
    finally:
        os.remove(path)

def test_column_not_found():
    path = _write_tmp("a,b\n1,2\n")
    try:
        r = _run("-f", path, "-c", "nope")
        assert r.returncode == 1
        assert "ColumnNotFoundError" in r.stderr
        assert "'nope'" in r.stderr
        assert r.stdout == ""
    finally:
        os.remove(path)

def test_missing_file():
    missing = os.path.join(tempfile.gettempdir(), "colstat-does-not-exist.csv")
    r = _run("-f", missing, "-c", "a")
    assert r.returncode == 1
    assert r.stderr.startswith("FileLoadError:")

def test_help_exits_zero_without_opening_file():
    missing = os.path.join(tempfile.gettempdir(), "colstat-does-not-exist.csv")
    r = _run("-f", missing, "-c", "a", "--help")
    assert r.returncode == 0
    assert "usage: colstat" in r.stdout
    assert "FileLoadError" not in r.stderr

def test_help_alone():
    r = _run("-h")
    assert r.returncode == 0
    assert "--column" in r.stdout

def test_missing_required_options():
    missing = os.path.join(tempfile.gettempdir(), "colstat-does-not-exist.csv")
    for args in (("-c", "a"), ("-f", missing), ()):
        r = _run(*args)
        assert r.returncode == 2
        assert "UsageError:" in r.stderr
        # usage error comes before any attempt to load
        assert "FileLoadError" not in r.stderr

def test_text_column_strict_numeric():
    path = _write_tmp("name,v\nbob,1\nalice,2\n")
    try:
        r = _run("-f", path, "-c", "name")
        assert r.returncode == 0, r.stderr
        assert "(Text)" in r.stdout
        assert re.search(r'Min:\s+alice\n', r.stdout)
        assert re.search(r'Longest:\s+5\n', r.stdout)
        assert "Mean:" not in r.stdout
        r = _run("-f", path, "-c", "name", "--strict-numeric")
        assert r.returncode == 1
        assert "TypeMismatchError" in r.stderr
    finally:
        os.remove(path)

def test_delimiter_precision_skip_unique():
    path = _write_tmp("x;y\n1.5;a\n2.25;b\n", suffix=".txt")
    try:
        r = _run("-f", path, "-c", "x", "-d", ";", "--precision", "2", "--skip-unique")
        assert r.returncode == 0, r.stderr
        assert re.search(r'Mean:\s+1\.88\n', r.stdout)
        assert "Unique:" not in r.stdout
    finally:
        os.remove(path)

def test_verbose_reports_to_stderr():
    path = _write_tmp("a\n1\n2\n")
    try:
        r = _run("-f", path, "-c", "a", "-v")
        assert r.returncode == 0, r.stderr
        assert "Loaded file=" in r.stderr
        assert "rows=2" in r.stderr
        assert "Loaded" not in r.stdout
    finally:
        os.remove(path)

def test_other_column_type_change_does_not_fail():
    # column a stops being numeric after the inference window; only b is asked for
    path = _write_tmp("a,b\n" + "1,2\n" * 150 + "x,2\n")
    try:
        r = _run("-f", path, "-c", "b")
        assert r.returncode == 0, r.stderr
        assert re.search(r'Count:\s+151\n', r.stdout)
        assert re.search(r'Mean:\s+2\n', r.stdout)
    finally:
        os.remove(path)

def test_malformed_csv_is_file_load_error():
    path = _write_tmp("a,b\n1,2\n3,4,5\n")
    try:
        r = _run("-f", path, "-c", "a")
        assert r.returncode == 1
        assert r.stderr.startswith("FileLoadError:")
    finally:
        os.remove(path)

def test_int64_sum_does_not_wrap():
    path = _write_tmp("a\n9223372036854775807\n1\n")
    try:
        r = _run("-f", path, "-c", "a")
        assert r.returncode == 0, r.stderr
        assert re.search(r'Sum:\s+9,223,372,036,854,775,808\n', r.stdout)
    finally:
        os.remove(path)
