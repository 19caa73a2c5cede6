#!/usr/bin/env python3
import csv, random, sys
from pathlib import Path
from typing import List, Optional

# Usage: python make_csv.py out.csv rows num_cols str_cols null_rate seed
# Example: python make_csv.py /tmp/mixed.csv 1_000_000 3 2 0.05 1337
# Columns are named n0..nN (numeric) then s0..sM (text).

LETTERS = "abcdefxyz"

def header(num_cols: int, str_cols: int) -> List[str]:
    return [f"n{i}" for i in range(num_cols)] + [f"s{j}" for j in range(str_cols)]

def write_csv(out, rows: int, num_cols: int = 1, str_cols: int = 0,
              null_rate: float = 0.0, seed: int = 1337, delimiter: str = ",") -> List[List[Optional[float]]]:
    """Write a deterministic mixed CSV and return the numeric columns as written.

    Empty cells are returned as None so callers can derive expected stats.
    """
    rng = random.Random(seed)
    rr, ri, ru, choice = rng.random, rng.randint, rng.uniform, rng.choice
    numeric: List[List[Optional[float]]] = [[] for _ in range(num_cols)]
    with Path(out).open("w", newline="") as f:
        w = csv.writer(f, delimiter=delimiter)
        w.writerow(header(num_cols, str_cols))
        for _ in range(rows):
            row = []
            for i in range(num_cols):
                if rr() < null_rate:
                    row.append("")
                    numeric[i].append(None)
                    continue
                # ints and 6-decimal floats mixed, so polars infers Float64
                cell = str(ri(-10**6, 10**6)) if rr() < 0.5 else f"{ru(-1e6, 1e6):.6f}"
                row.append(cell)
                numeric[i].append(float(cell))
            for _ in range(str_cols):
                if rr() < null_rate:
                    row.append("")
                else:
                    row.append("".join(choice(LETTERS) for _ in range(ri(3, 10))))
            w.writerow(row)
    return numeric

def main():
    if len(sys.argv) != 7:
        print("Usage: python make_csv.py out.csv rows num_cols str_cols null_rate seed", file=sys.stderr)
        sys.exit(2)
    out, rows, nnum, nstr, null_rate, seed = (
        sys.argv[1], int(sys.argv[2].replace('_','')), int(sys.argv[3]),
        int(sys.argv[4]), float(sys.argv[5]), int(sys.argv[6])
    )
    write_csv(out, rows, nnum, nstr, null_rate, seed)
    print(f"wrote {rows:,} rows x {nnum + nstr} columns to {out}", file=sys.stderr)

if __name__ == "__main__":
    main()
