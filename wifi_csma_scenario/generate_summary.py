#!/usr/bin/env python3
"""
Generate Summary - Trace analysis entry point

Usage:
    wifi-csma-summary <path_to_trace.tr> [--csv] [--excel] [--output-dir DIR]

Example:
    wifi-csma-summary results/results1.tr --csv --excel
"""

import argparse
import os
import sys

from .analysis.export import print_summary, save_summary_csv, save_summary_excel, save_summary_txt
from .analysis.trace import generate_summary
from .utils.constants import EchoDefaults


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description='Summarise an ns-3 ASCII trace of the LAN')
    parser.add_argument('trace_file', help='ASCII trace file (.tr)')
    parser.add_argument('--echo-port', type=int, default=EchoDefaults.PORT,
                        help='UDP port of the echo servers')
    parser.add_argument('--output-dir', default=None,
                        help='Directory for summary files (default: next to the trace)')
    parser.add_argument('--csv', action='store_true', help='Also write trace_summary.csv')
    parser.add_argument('--excel', action='store_true', help='Also write trace_summary.xlsx')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    trace_file = args.trace_file

    if not os.path.exists(trace_file):
        print(f"Error: File not found: {trace_file}")
        return 1

    print(f"Processing: {trace_file}")
    print("=" * 60)

    summary = generate_summary(trace_file, echo_port=args.echo_port)

    # Print to console
    print_summary(summary)

    # Save to files
    output_dir = args.output_dir or os.path.dirname(os.path.abspath(trace_file))
    os.makedirs(output_dir, exist_ok=True)
    save_summary_txt(summary, os.path.join(output_dir, 'trace_summary.txt'))
    if args.csv:
        save_summary_csv(summary, os.path.join(output_dir, 'trace_summary.csv'))
    if args.excel:
        save_summary_excel(summary, os.path.join(output_dir, 'trace_summary.xlsx'))

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
