"""Trace analysis modules."""
from .trace import (
    TraceEvent, parse_trace_line, parse_trace_file, generate_summary,
    calculate_interarrival_stats, calculate_packet_loss
)
from .export import save_summary_txt, save_summary_csv, save_summary_excel, print_summary
