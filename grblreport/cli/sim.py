"""
CLI entry point for the grblreport-sim command.

Runs the reporter against a simulated machine. Query lines given on the
command line are dispatched first, then status frames are polled at a fixed
rate while a jog runs. Output goes to a serial port with --serial, otherwise
it is captured in memory and echoed to stdout.
"""

import argparse
import logging
import sys
import time

from grblreport import config as cfg
from grblreport.capabilities import Capabilities
from grblreport.config import TRACE
from grblreport.protocol.types import StatusCode
from grblreport.server.command_registry import dispatch_line
from grblreport.server.reporter import Reporter
from grblreport.server.simulation import SimulatedMachine
from grblreport.server.transports import MockSerialTransport, create_and_connect_transport
from grblreport.settings import Settings

logger = logging.getLogger(__name__)


def _flush_to_stdout(sink) -> None:
    if isinstance(sink, MockSerialTransport):
        text = sink.getvalue()
        if text:
            sys.stdout.write(text.replace("\r\n", "\n"))
            sys.stdout.flush()
        sink.clear()


def main(argv=None):
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(description="Grbl report simulator")
    parser.add_argument("--serial", help="Serial port (e.g., /dev/ttyUSB0 or COM3); stdout if omitted")
    parser.add_argument("--baudrate", type=int, default=cfg.SERIAL_BAUD, help="Serial baudrate")
    parser.add_argument("--rate-hz", type=float, default=cfg.STATUS_RATE_HZ, help="Status poll rate")
    parser.add_argument("--count", type=int, default=10, help="Status frames to send (0 = forever, -1 = none)")
    parser.add_argument("--feed", type=float, default=600.0, help="Simulated jog feed rate (mm/min)")
    parser.add_argument("--caps", default="", help="Comma separated capability options (e.g. variable_spindle,no_homing_init_lock)")
    parser.add_argument("queries", nargs="*", help="Query lines to run before polling (e.g. '$I' '$$' '$G')")

    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Enable quiet logging (WARNING level)")
    parser.add_argument("--log-level", choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Set specific log level")
    args = parser.parse_args(argv)

    if args.log_level:
        log_level = TRACE if args.log_level == "TRACE" else getattr(logging, args.log_level)
    elif args.verbose >= 3:
        log_level = TRACE
    elif args.verbose >= 2:
        log_level = logging.DEBUG
    elif args.verbose == 1:
        log_level = logging.INFO
    elif args.quiet:
        log_level = logging.WARNING
    elif cfg.TRACE_ENABLED:
        log_level = TRACE
    else:
        log_level = getattr(logging, cfg.LOG_LEVEL_DEFAULT, logging.WARNING)

    # Log to stderr so report output on stdout stays clean
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        if args.caps:
            capabilities = Capabilities.from_options(args.caps.split(","))
        else:
            capabilities = Capabilities.from_env()
    except ValueError as e:
        logger.error(f"Invalid capabilities: {e}")
        return 2

    transport_type = "serial" if args.serial else "mock"
    sink = create_and_connect_transport(transport_type, port=args.serial, baudrate=args.baudrate)
    if sink is None:
        logger.error("No output transport available")
        return 1

    settings = Settings()
    machine = SimulatedMachine(n_axis=settings.n_axis, steps_per_mm=float(settings.steps_per_mm[0]))
    reporter = Reporter(sink, machine, machine, settings=settings, capabilities=capabilities)

    try:
        reporter.init_message()
        _flush_to_stdout(sink)
        for line in args.queries:
            if not dispatch_line(reporter, line):
                logger.warning(f"Not a query command: {line!r}")
                reporter.status_message(StatusCode.INVALID_STATEMENT)
            _flush_to_stdout(sink)

        if args.count >= 0:
            machine.start_cycle(feed_rate=args.feed, line_number=1)
            period = 1.0 / args.rate_hz if args.rate_hz > 0 else 0.1
            sent = 0
            while args.count == 0 or sent < args.count:
                machine.step(period)
                reporter.realtime_status()
                _flush_to_stdout(sink)
                sent += 1
                time.sleep(period)
            machine.stop()
            reporter.realtime_status()
            _flush_to_stdout(sink)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        sink.disconnect()

    return 0


def main_entry():
    """Entry point for the grblreport-sim command."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
