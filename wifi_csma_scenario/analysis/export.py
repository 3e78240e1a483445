#!/usr/bin/env python3
"""
Export Functions

Functions for exporting trace summary data to various formats.
"""

import csv

import openpyxl
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side


def _summary_lines(summary):
    """Text lines shared by the console and text file reports"""
    lines = []
    lines.append("=" * 70)
    lines.append(" " * 22 + "LAN TRACE SUMMARY")
    lines.append("=" * 70)
    lines.append("")

    ev = summary['events']
    lines.append("EVENTS:")
    lines.append(f"  Enqueue           : {ev['enqueue']}")
    lines.append(f"  Dequeue           : {ev['dequeue']}")
    lines.append(f"  Receive           : {ev['receive']}")
    lines.append(f"  Drop              : {ev['drop']}")
    lines.append(f"  Transmit          : {ev['transmit']}")
    lines.append(f"  ARP Received      : {summary['arp_packets']}")
    lines.append("")

    udp = summary['udp']
    lines.append("UDP ECHO:")
    lines.append(f"  Requests Received : {udp['requests']}")
    lines.append(f"  Replies Received  : {udp['replies']}")
    lines.append(f"  Payload Bytes     : {udp['bytes']}")
    lines.append(f"  Throughput        : {udp['throughput_bps'] / 1000:.2f} kbps")
    lines.append(f"  Drop Rate         : {summary['drops']['rate']:.2f}%")
    lines.append("")

    lines.append("TOTAL:")
    lines.append(f"  First Event       : {summary['first_time']:.6f} s")
    lines.append(f"  Last Event        : {summary['last_time']:.6f} s")
    lines.append(f"  Duration          : {summary['duration']:.6f} s")
    lines.append(f"  Trace Events      : {summary['total_events']}")
    lines.append("")
    return lines


def print_summary(summary):
    """
    Print summary to console.

    Args:
        summary: Summary dict from generate_summary()
    """
    print()
    for line in _summary_lines(summary):
        print(line)


def save_summary_txt(summary, output_file):
    """
    Save summary to text file.

    Args:
        summary: Summary dict from generate_summary()
        output_file: Output file path
    """
    with open(output_file, 'w') as f:
        for line in _summary_lines(summary):
            f.write(line + "\n")

        if summary['flows']:
            f.write("=" * 90 + "\n")
            f.write("PER-FLOW METRICS\n")
            f.write("=" * 90 + "\n\n")

            f.write(f"{'Source':<22} {'Destination':<22} {'Kind':<8} {'Sent':>6} {'Recv':>6} {'Loss':>7} {'Gap':>10}\n")
            f.write(f"{'-'*22} {'-'*22} {'-'*8} {'-'*6} {'-'*6} {'-'*7} {'-'*10}\n")

            for fl in summary['flows']:
                src = f"{fl['src']}:{fl['src_port']}"
                dst = f"{fl['dst']}:{fl['dst_port']}"
                loss_str = f"{fl['loss_rate']:.1f}%"
                f.write(f"{src:<22} {dst:<22} {fl['kind']:<8} ")
                f.write(f"{fl['sent']:>6} {fl['received']:>6} {loss_str:>7} ")
                f.write(f"{fl['interarrival']['avg']:>8.2f}ms\n")
            f.write("\n")

        if summary['nodes']:
            f.write("PER-NODE METRICS\n")
            f.write(f"{'Node':<6} {'Sent':>6} {'Recv':>6} {'Drop':>6} {'Rx Bytes':>10}\n")
            for nd in summary['nodes']:
                f.write(f"{nd['name']:<6} {nd['sent']:>6} {nd['received']:>6} "
                        f"{nd['dropped']:>6} {nd['rx_bytes']:>10}\n")

        if summary.get('devices'):
            f.write("\nPER-DEVICE METRICS\n")
            f.write(f"{'Device':<10} {'Segment':<8} {'Address':<16} {'Sent':>6} {'Recv':>6} {'Drop':>6}\n")
            for dv in summary['devices']:
                label = f"{dv['name']}/{dv['device']}"
                f.write(f"{label:<10} {dv['segment'] or '-':<8} {dv['address'] or '-':<16} "
                        f"{dv['sent']:>6} {dv['received']:>6} {dv['dropped']:>6}\n")

    print(f"Summary saved to: {output_file}")


def save_summary_csv(summary, output_file):
    """
    Save summary to CSV file (Excel-compatible).

    Args:
        summary: Summary dict from generate_summary()
        output_file: Output file path
    """
    with open(output_file, 'w', newline='') as f:
        writer = csv.writer(f)

        writer.writerow(['LAN TRACE SUMMARY'])
        writer.writerow([])

        writer.writerow(['EVENTS'])
        writer.writerow(['Metric', 'Value', 'Unit'])
        for label, count in summary['events'].items():
            writer.writerow([label.capitalize(), count, 'events'])
        writer.writerow(['ARP Received', summary['arp_packets'], 'packets'])
        writer.writerow([])

        udp = summary['udp']
        writer.writerow(['UDP ECHO'])
        writer.writerow(['Metric', 'Value', 'Unit'])
        writer.writerow(['Requests Received', udp['requests'], 'packets'])
        writer.writerow(['Replies Received', udp['replies'], 'packets'])
        writer.writerow(['Payload Bytes', udp['bytes'], 'bytes'])
        writer.writerow(['Throughput', f"{udp['throughput_bps'] / 1000:.2f}", 'kbps'])
        writer.writerow(['Drop Rate', f"{summary['drops']['rate']:.2f}", '%'])
        writer.writerow([])

        writer.writerow(['TOTAL'])
        writer.writerow(['Duration', f"{summary['duration']:.6f}", 's'])
        writer.writerow(['Trace Events', summary['total_events'], ''])
        writer.writerow([])

        if summary['flows']:
            writer.writerow(['PER-FLOW METRICS'])
            writer.writerow(['Source', 'Src Port', 'Destination', 'Dst Port', 'Kind',
                             'Sent', 'Received', 'Loss%', 'Avg Gap (ms)', 'Jitter (ms)'])
            for fl in summary['flows']:
                writer.writerow([
                    fl['src'],
                    fl['src_port'],
                    fl['dst'],
                    fl['dst_port'],
                    fl['kind'],
                    fl['sent'],
                    fl['received'],
                    f"{fl['loss_rate']:.1f}",
                    f"{fl['interarrival']['avg']:.2f}",
                    f"{fl['interarrival']['jitter']:.2f}"
                ])

    print(f"CSV saved to: {output_file}")


def save_summary_excel(summary, output_file):
    """
    Save summary to Excel file with formatting.

    Args:
        summary: Summary dict from generate_summary()
        output_file: Output .xlsx path
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Trace Summary"

    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    subheader_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    subheader_font = Font(bold=True, color="FFFFFF", size=11)
    metric_font = Font(size=10)
    value_font = Font(size=10, bold=True)
    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    row = 1

    # Title
    ws.merge_cells(f'A{row}:C{row}')
    cell = ws[f'A{row}']
    cell.value = "LAN TRACE SUMMARY"
    cell.alignment = Alignment(horizontal='center')
    cell.fill = header_fill
    cell.font = Font(bold=True, color="FFFFFF", size=14)
    row += 2

    udp = summary['udp']
    sections = [
        ("EVENTS", [(label.capitalize(), count, "events")
                    for label, count in summary['events'].items()]),
        ("UDP ECHO", [
            ("Requests Received", udp['requests'], "packets"),
            ("Replies Received", udp['replies'], "packets"),
            ("Payload Bytes", udp['bytes'], "bytes"),
            ("Throughput", round(udp['throughput_bps'] / 1000, 2), "kbps"),
            ("Drop Rate", round(summary['drops']['rate'], 2), "%"),
        ]),
        ("TOTAL", [
            ("Duration", round(summary['duration'], 6), "s"),
            ("Trace Events", summary['total_events'], ""),
        ]),
    ]

    for title, metrics in sections:
        ws.merge_cells(f'A{row}:C{row}')
        cell = ws[f'A{row}']
        cell.value = title
        cell.font = subheader_font
        cell.fill = subheader_fill
        cell.alignment = Alignment(horizontal='center')
        row += 1

        for metric, value, unit in metrics:
            ws[f'A{row}'] = metric
            ws[f'B{row}'] = value
            ws[f'C{row}'] = unit
            ws[f'A{row}'].font = metric_font
            ws[f'B{row}'].font = value_font
            ws[f'B{row}'].alignment = Alignment(horizontal='right')
            for col in 'ABC':
                ws[f'{col}{row}'].border = border
            row += 1
        row += 1

    ws.column_dimensions['A'].width = 22
    ws.column_dimensions['B'].width = 14
    ws.column_dimensions['C'].width = 10

    if summary['flows']:
        flows_ws = wb.create_sheet("Flows")
        headers = ['Source', 'Src Port', 'Destination', 'Dst Port', 'Kind',
                   'Sent', 'Received', 'Loss %', 'Avg Gap (ms)', 'Jitter (ms)']
        flows_ws.append(headers)
        for cell in flows_ws[1]:
            cell.font = subheader_font
            cell.fill = subheader_fill
        for fl in summary['flows']:
            flows_ws.append([
                fl['src'], fl['src_port'], fl['dst'], fl['dst_port'], fl['kind'],
                fl['sent'], fl['received'], round(fl['loss_rate'], 2),
                round(fl['interarrival']['avg'], 3), round(fl['interarrival']['jitter'], 3)
            ])

    if summary['nodes']:
        nodes_ws = wb.create_sheet("Nodes")
        nodes_ws.append(['Node', 'Sent', 'Received', 'Dropped', 'Rx Bytes'])
        for cell in nodes_ws[1]:
            cell.font = subheader_font
            cell.fill = subheader_fill
        for nd in summary['nodes']:
            nodes_ws.append([nd['name'], nd['sent'], nd['received'], nd['dropped'], nd['rx_bytes']])

    wb.save(output_file)
    print(f"Excel saved to: {output_file}")
