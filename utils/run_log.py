"""
Append one summary row per run to a CSV for easy comparison across days.
"""
import csv
import os

COLUMNS = [
    'anchor', 'observations', 'population_before', 'population_after',
    'born', 'died', 'survived', 'period', 'events', 'pushed',
]


def append_summary(output_csv, summary):
    # ensure output directory exists
    out_dir = os.path.dirname(output_csv)
    if out_dir and not os.path.isdir(out_dir):
        os.makedirs(out_dir, exist_ok=True)

    write_header = not os.path.isfile(output_csv)
    with open(output_csv, 'a', newline='') as f:
        writer = csv.writer(f)
        if write_header:
            writer.writerow(COLUMNS)
        writer.writerow([summary.get(col) for col in COLUMNS])
