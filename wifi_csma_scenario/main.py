#!/usr/bin/env python3
"""
Main Entry Point for the WiFi / CSMA / point-to-point scenario

Usage:
    wifi-csma-scenario [--nCsma N] [--nWifi N] [--tracing BOOL] [--verbose BOOL]

Examples:
    wifi-csma-scenario                          # 6 LAN hosts, 4 stations, tracing on
    wifi-csma-scenario --nCsma 3 --tracing false
    wifi-csma-scenario --dry-run                # print the description, no simulator
"""

import argparse
import os
import sys

from .analysis.export import print_summary, save_summary_csv, save_summary_txt
from .analysis.trace import generate_summary
from .config.config_loader import (
    ConfigurationError, apply_overrides, check_config, load_config, parse_bool
)
from .topology.addressing import AddressPoolExhausted
from .topology.ns3_runner import run_scenario
from .topology.scenario import UnresolvableEndpoint, build_scenario
from .utils.constants import TraceFormat
from .utils.logger import ScenarioLogger


def str2bool(value):
    """Parse a boolean flag value the way the simulator's command line does"""
    try:
        return parse_bool(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='WiFi stations and a CSMA LAN joined by a point-to-point link, '
                    'with UDP echo traffic'
    )
    parser.add_argument(
        '--nCsma', '--n-csma',
        dest='n_csma',
        type=int,
        help='Number of "extra" CSMA nodes/devices'
    )
    parser.add_argument(
        '--nWifi', '--n-wifi',
        dest='n_wifi',
        type=int,
        help='Number of wifi STA devices'
    )
    parser.add_argument(
        '--verbose',
        type=str2bool,
        nargs='?',
        const=True,
        help='Tell echo applications to log if true'
    )
    parser.add_argument(
        '--tracing',
        type=str2bool,
        nargs='?',
        const=True,
        help='Enable packet tracing on the LAN'
    )
    parser.add_argument(
        '--trace-file',
        help='Trace file name (relative names go to the results directory)'
    )
    parser.add_argument(
        '--stop-time',
        type=float,
        help='Simulation stop time in seconds'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to configuration file (default: packaged scenario_config.yaml)'
    )
    parser.add_argument(
        '--results-dir',
        help='Directory for traces and summaries'
    )
    parser.add_argument(
        '--log-dir',
        help='Directory for log files'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Build and print the scenario description without running ns-3'
    )
    parser.add_argument(
        '--describe',
        metavar='PATH',
        help='Write the scenario description as YAML'
    )
    parser.add_argument(
        '--summary',
        action='store_true',
        help='Analyse the ASCII trace after the run'
    )

    return parser.parse_args(argv)


def main(argv=None):
    """Main execution flow"""
    args = parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(e)
        return 2
    config = apply_overrides(
        config,
        n_csma=args.n_csma,
        n_wifi=args.n_wifi,
        verbose=args.verbose,
        tracing=args.tracing,
        trace_file=args.trace_file,
        stop_time=args.stop_time,
        log_level=args.log_level,
        results_dir=args.results_dir,
        log_dir=args.log_dir
    )

    # Create results directory
    os.makedirs(config.paths.results_dir, exist_ok=True)

    # Initialize logger
    logger = ScenarioLogger(
        name="scenario",
        log_dir=config.paths.log_dir,
        level=config.logging.level,
        log_format=config.logging.format
    )

    try:
        # Print configuration summary
        logger.separator()
        logger.info(f"Starting {config.name} - {config.description}")
        logger.info(f"Version: {config.version}")
        logger.separator()
        logger.info(f"LAN hosts: {config.topology.n_csma} (+ gateway)")
        logger.info(f"WiFi stations: {config.topology.n_wifi}")
        logger.info(f"Point-to-point: {config.network.p2p_data_rate}, {config.network.p2p_delay}")
        logger.info(f"LAN: {config.network.lan_data_rate}, {config.network.lan_delay_ns}ns")
        logger.info(f"Stop time: {config.run.stop_time}s, tracing: {config.run.tracing}")
        logger.separator()

        try:
            check_config(config, logger)
        except ConfigurationError as e:
            logger.error(f"Configuration rejected with {len(e.errors)} error(s)")
            return 2

        logger.info(f"Offered echo load: {config.offered_load_bps() / 1000:.2f} kbps")

        try:
            description = build_scenario(config, logger)
        except (AddressPoolExhausted, UnresolvableEndpoint) as e:
            logger.error(f"Scenario cannot be built: {e}")
            return 2

        if args.describe:
            with open(args.describe, 'w') as f:
                f.write(description.to_yaml())
            logger.info(f"Description written to {args.describe}")

        if args.dry_run:
            print(description.to_yaml())
            return 0

        try:
            result = run_scenario(description, config, logger)
        except KeyboardInterrupt:
            logger.info("\n\nSimulation interrupted by user")
            return 130
        except Exception as e:
            logger.exception(f"Error during simulation: {e}")
            raise

        if args.summary:
            if result.trace_file and config.run.trace_format == TraceFormat.ASCII:
                summary = generate_summary(result.trace_file, description=description)
                print_summary(summary)
                save_summary_txt(summary, os.path.join(config.paths.results_dir, 'trace_summary.txt'))
                save_summary_csv(summary, os.path.join(config.paths.results_dir, 'trace_summary.csv'))
            else:
                logger.warning("No ASCII trace to summarise (tracing off or pcap format)")

        return 0
    finally:
        logger.separator()
        logger.info("Scenario complete")
        logger.separator()
        logger.close()


if __name__ == '__main__':
    sys.exit(main())
