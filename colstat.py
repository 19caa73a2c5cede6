#!/usr/bin/env python3
import sys, os, math, argparse, time
from typing import List, NamedTuple, Optional

import polars as pl
import psutil

__version__ = "0.1.0"

MB = 1024 * 1024
GB = 1024 * MB

def human(n: int) -> str:
    if n >= GB: return f"{n/GB:.1f} GB"
    if n >= MB: return f"{n/MB:.1f} MB"
    return f"{n} B"

def _mb(n_bytes: Optional[int]) -> str:
    if not n_bytes:
        return "N/A"
    return f"{n_bytes/1024/1024:.1f} MB"

# ---- Errors ----
class ColStatError(Exception):
    exit_code = 1

class UsageError(ColStatError):
    exit_code = 2

class FileLoadError(ColStatError):
    pass

class ColumnNotFoundError(ColStatError):
    pass

class TypeMismatchError(ColStatError):
    pass

class InvocationRequest(NamedTuple):
    file_path: str
    column_name: str
    strict_numeric: bool = False
    skip_unique: bool = False
    infer_schema_length: int = 100
    delimiter: str = ","
    precision: int = 4
    verbose: bool = False

# ---- Load / select ----
def _missing_column(name: str, names: List[str]) -> ColumnNotFoundError:
    available = ", ".join(repr(c) for c in names)
    return ColumnNotFoundError(f"column '{name}' not found (available: {available})")

def load_table(path: str, column: str, *, infer_schema_length: int = 100, delimiter: str = ",") -> pl.DataFrame:
    """Read the CSV fully into memory and return the requested column as a frame.

    Every other column is read as String, so only the requested column's
    type can fail the load. Ragged rows and bad encoding still fail it.
    Any I/O or parse failure becomes FileLoadError.
    """
    if not os.path.exists(path):
        raise FileLoadError(f"file not found: {path}")
    if os.path.isdir(path):
        raise FileLoadError(f"not a file: {path}")
    infer = infer_schema_length or None  # 0 -> scan every row
    try:
        names = pl.scan_csv(path, has_header=True, separator=delimiter,
                            infer_schema_length=infer).collect_schema().names()
    except pl.exceptions.NoDataError:
        raise FileLoadError(f"empty CSV file: {path}")
    except (OSError, pl.exceptions.PolarsError) as e:
        raise FileLoadError(f"could not read {path}: {e}")
    if column not in names:
        raise _missing_column(column, names)
    try:
        df = pl.read_csv(
            path,
            has_header=True,
            separator=delimiter,
            infer_schema_length=infer,
            schema_overrides={name: pl.String for name in names if name != column},
        )
    except (OSError, pl.exceptions.PolarsError) as e:
        raise FileLoadError(f"could not read {path}: {e}")
    # by position: pl.col() would treat a name like ^...$ as a regex
    return df.select(pl.nth(names.index(column)))

def select_column(df: pl.DataFrame, name: str) -> pl.Series:
    try:
        return df.get_column(name)
    except pl.exceptions.ColumnNotFoundError:
        raise _missing_column(name, df.columns)

# ---- Aggregation ----
def type_label(dtype) -> str:
    if dtype.is_numeric(): return "Number"
    if dtype == pl.Boolean: return "Boolean"
    return "Text"

def column_stats(series: pl.Series, *, strict_numeric: bool = False, skip_unique: bool = False) -> dict:
    """Run the fixed aggregate set over one column in a single select.

    Numeric columns get count/nulls/unique/min/max/sum/mean/stdev. Other
    columns narrow to count/nulls/unique/min/max (plus longest for text),
    unless strict_numeric is set, in which case they raise TypeMismatchError.
    Nulls (empty cells) and NaN are excluded from everything except ``nulls``.
    """
    dtype = series.dtype
    is_numeric = dtype.is_numeric()
    is_bool = dtype == pl.Boolean
    if strict_numeric and not is_numeric:
        raise TypeMismatchError(
            f"column '{series.name}' has type {dtype}; numeric statistics need a numeric column"
        )
    c = pl.first()  # single-column frame
    if dtype.is_float():
        c = c.fill_nan(None)
    exprs = [
        c.count().alias("count"),            # non-null count only
        c.null_count().alias("nulls"),
        c.min().alias("min"),
        c.max().alias("max"),
    ]
    if not skip_unique:
        exprs.append(c.drop_nulls().n_unique().alias("unique"))
    if is_numeric:
        exprs.extend([
            c.cast(pl.Float64).sum().alias("sum"),   # Float64 so Int64 sums cannot wrap
            c.mean().alias("mean"),
            c.std().alias("stdev"),
        ])
    elif not is_bool:
        exprs.append(c.cast(pl.Utf8).str.len_chars().max().alias("longest"))
    row = series.to_frame().select(exprs).row(0, named=True)
    return {
        "type": type_label(dtype),
        "count": int(row["count"]),
        "nulls": int(row["nulls"]),
        "unique": None if skip_unique else int(row["unique"]),
        "min": row["min"],
        "max": row["max"],
        "sum": row.get("sum"),
        "mean": row.get("mean"),
        "stdev": row.get("stdev"),
        "longest": int(row["longest"] or 0) if "longest" in row else None,
        "is_numeric": is_numeric,
    }

def run(request: InvocationRequest) -> dict:
    t0 = time.time()
    df = load_table(request.file_path, request.column_name,
                    infer_schema_length=request.infer_schema_length, delimiter=request.delimiter)
    if request.verbose:
        size = os.stat(request.file_path).st_size
        rss = psutil.Process(os.getpid()).memory_info().rss
        print(f"Loaded file={human(size)} | rows={df.height:,} | "
              f"{time.time() - t0:.2f}s | RSS {_mb(rss)}", file=sys.stderr)
    series = select_column(df, request.column_name)
    result = column_stats(series, strict_numeric=request.strict_numeric, skip_unique=request.skip_unique)
    if request.verbose:
        print(f"Aggregated '{request.column_name}' ({series.dtype}) in {time.time() - t0:.2f}s total", file=sys.stderr)
    return result

# ---- Report ----
def fmt_value(x, precision: int = 4) -> str:
    if x is None or (isinstance(x, float) and (math.isinf(x) or math.isnan(x))):
        return "N/A"
    if isinstance(x, bool):
        return str(x)
    # Integers without decimal places, other floats with `precision` decimals; thousands separators
    if isinstance(x, int) or (isinstance(x, float) and x.is_integer()):
        return f"{int(x):,}"
    if isinstance(x, float):
        return f"{x:,.{precision}f}"
    return str(x)

def format_stats(column: str, r: dict, precision: int = 4) -> List[str]:
    def pr(label: str, value: str) -> str:
        return f"{label.ljust(10)}{value}"
    lines = [f"--- Statistics for '{column}' ({r['type']}) ---"]
    lines.append(pr("Count:", f"{r['count']:,}"))
    lines.append(pr("Nulls:", f"{r['nulls']:,}"))
    if r["unique"] is not None:
        lines.append(pr("Unique:", f"{r['unique']:,}"))
    lines.append(pr("Min:", fmt_value(r["min"], precision)))
    lines.append(pr("Max:", fmt_value(r["max"], precision)))
    if r["is_numeric"]:
        lines.append(pr("Sum:", fmt_value(r["sum"], precision)))
        lines.append(pr("Mean:", fmt_value(r["mean"], precision)))
        lines.append(pr("StDev:", fmt_value(r["stdev"], precision)))
    elif r["longest"] is not None:
        lines.append(pr("Longest:", str(r["longest"])))
    return lines

def print_stats(column: str, r: dict, precision: int = 4):
    for line in format_stats(column, r, precision):
        print(line)

# ---- CLI ----
class _ArgParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)

def build_parser() -> argparse.ArgumentParser:
    ap = _ArgParser(
        prog="colstat",
        description="Summary statistics for one column of a CSV file",
        epilog="Example: colstat -f data.csv -c 'Amount Received'",
    )
    ap.add_argument("-f", "--file", required=True, help="Path to the CSV file")
    ap.add_argument("-c", "--column", required=True, help="Name of the column to analyze")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--strict-numeric", action="store_true", help="Fail on non-numeric columns instead of narrowing to count/min/max")
    ap.add_argument("--skip-unique", action="store_true", help="Skip distinct-value counting")
    ap.add_argument("--infer-schema-length", type=int, default=100, help="Rows sampled to infer column types (default 100, 0 = all rows)")
    ap.add_argument("-d", "--delimiter", default=",", help="Field separator (default ',')")
    ap.add_argument("--precision", type=int, default=4, help="Decimal places for non-integral values (default 4)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Print load timing and memory to stderr")
    return ap

def parse_request(argv: Optional[List[str]] = None) -> InvocationRequest:
    args = build_parser().parse_args(argv)
    if not args.file:
        raise UsageError("argument -f/--file: must not be empty")
    if not args.column:
        raise UsageError("argument -c/--column: must not be empty")
    if len(args.delimiter.encode("utf-8")) != 1:
        raise UsageError("argument -d/--delimiter: must be a single byte")
    if args.infer_schema_length < 0:
        raise UsageError("argument --infer-schema-length: must be >= 0")
    if args.precision < 0:
        raise UsageError("argument --precision: must be >= 0")
    return InvocationRequest(
        file_path=args.file,
        column_name=args.column,
        strict_numeric=args.strict_numeric,
        skip_unique=args.skip_unique,
        infer_schema_length=args.infer_schema_length,
        delimiter=args.delimiter,
        precision=args.precision,
        verbose=args.verbose,
    )

def main(argv: Optional[List[str]] = None) -> int:
    try:
        request = parse_request(argv)
    except UsageError as e:
        build_parser().print_usage(sys.stderr)
        print(f"UsageError: {e}", file=sys.stderr)
        return e.exit_code
    try:
        result = run(request)
    except ColStatError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return e.exit_code
    print_stats(request.column_name, result, request.precision)
    return 0

if __name__ == "__main__":
    sys.exit(main())
