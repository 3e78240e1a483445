#!/usr/bin/env python3
"""
Structured logging utility for the scenario

Provides consistent logging across all modules.
"""

import logging
import os
from datetime import datetime
from typing import Optional


class ScenarioLogger:
    """
    Structured logger for scenario components.

    Provides different log methods for different event types.
    """

    def __init__(self, name: str, log_dir: Optional[str] = None, level: str = "INFO",
                 log_format: Optional[str] = None, console: bool = True):
        """
        Initialize logger.

        Args:
            name: Logger name (usually module name)
            log_dir: Directory to store log files (None = console only)
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            log_format: Custom log format string
            console: Also log to the console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.log_file = None

        # Re-creating a logger with the same name must not duplicate output
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        if log_format is None:
            log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        formatter = logging.Formatter(log_format)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = os.path.join(log_dir, f"{name}_{timestamp}.log")

            fh = logging.FileHandler(self.log_file)
            fh.setLevel(getattr(logging, level.upper()))
            fh.setFormatter(formatter)
            self.logger.addHandler(fh)

        if console:
            ch = logging.StreamHandler()
            ch.setLevel(getattr(logging, level.upper()))
            ch.setFormatter(formatter)
            self.logger.addHandler(ch)

    def debug(self, msg: str, **kwargs):
        """Log debug message"""
        self.logger.debug(msg, extra=kwargs)

    def info(self, msg: str, **kwargs):
        """Log info message"""
        self.logger.info(msg, extra=kwargs)

    def warning(self, msg: str, **kwargs):
        """Log warning message"""
        self.logger.warning(msg, extra=kwargs)

    def error(self, msg: str, **kwargs):
        """Log error message"""
        self.logger.error(msg, extra=kwargs)

    def exception(self, msg: str, **kwargs):
        """Log exception with traceback"""
        self.logger.exception(msg, extra=kwargs)

    def network_event(self, event: str, **kwargs):
        """Log wired network event (point-to-point, LAN, addressing)"""
        self.logger.info(f"[NETWORK] {event}", extra=kwargs)

    def wifi_event(self, event: str, **kwargs):
        """Log wireless segment event"""
        self.logger.info(f"[WIFI] {event}", extra=kwargs)

    def flow_event(self, event: str, **kwargs):
        """Log traffic flow event"""
        self.logger.info(f"[FLOW] {event}", extra=kwargs)

    def trace_event(self, event: str, **kwargs):
        """Log packet tracing event"""
        self.logger.info(f"[TRACE] {event}", extra=kwargs)

    def separator(self, char: str = "=", length: int = 70):
        """Log separator line"""
        self.logger.info(char * length)

    def close(self):
        """Detach and close all handlers"""
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()


def get_ns3_log_level(ns, verbose: bool):
    """
    Map the verbose flag to an ns-3 log level.

    Args:
        ns: ns-3 bindings namespace
        verbose: Echo applications log at INFO when True

    Returns:
        ns-3 LogLevel value, or None when logging stays off
    """
    if not verbose:
        return None
    return ns.LOG_LEVEL_INFO
