"""
Ground Station CLI
==================

Usage:
  python -m cansat_ground listen --port /dev/ttyUSB0
  python -m cansat_ground replay test_data/test_data.txt --once
  python -m cansat_ground simulate --port /dev/ttyUSB1
  python -m cansat_ground plot telemetry.csv --out telemetry.png
  python -m cansat_ground command CX ON --port /dev/ttyUSB0
"""

import argparse
import logging
import sys
import time
from typing import Iterable, List, Optional

from .config import GroundStationConfig
from .radio.serial_link import SerialTransport
from .telecommand.command_builder import CommandBuilder, SimulationMode
from .telemetry.channel import channel
from .telemetry.generator import TelemetryGenerator
from .telemetry.plotting import load_telemetry_log, plot_telemetry
from .telemetry.processor import TelemetryProcessor
from .telemetry.producer import ReplaySource, SerialSource, TelemetryProducer
from .telemetry.sink import FileSink

logger = logging.getLogger(__name__)


def _add_serial_args(parser: argparse.ArgumentParser, defaults: GroundStationConfig):
    parser.add_argument("--port", default=defaults.serial.port, help="Serial device")
    parser.add_argument("--baud", type=int, default=defaults.serial.baudrate)


def _build_parser(defaults: GroundStationConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cansat-ground",
                                     description="CanSat ground station")
    parser.add_argument("--log-level", default=defaults.log_level,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command_name", required=True)

    listen = sub.add_parser("listen", help="Receive telemetry from the radio")
    _add_serial_args(listen, defaults)
    listen.add_argument("--telemetry-file", default=defaults.telemetry_file)
    listen.add_argument("--tick", type=float, default=defaults.tick_s)

    replay = sub.add_parser("replay", help="Replay a telemetry log")
    replay.add_argument("path")
    replay.add_argument("--interval", type=float, default=defaults.replay.interval_s)
    replay.add_argument("--once", action="store_true", help="Do not loop")
    replay.add_argument("--telemetry-file", default=None)
    replay.add_argument("--tick", type=float, default=defaults.tick_s)

    simulate = sub.add_parser("simulate", help="Send synthetic telemetry")
    _add_serial_args(simulate, defaults)
    simulate.add_argument("--team-id", type=int, default=defaults.generator.team_id)
    simulate.add_argument("--count", type=int, default=0, help="0 = forever")
    simulate.add_argument("--seed", type=int, default=None)

    plot = sub.add_parser("plot", help="Plot a telemetry log")
    plot.add_argument("path")
    plot.add_argument("--out", default="telemetry.png")

    command = sub.add_parser("command", help="Build and send a payload command")
    command.add_argument("name", help="CX, ST, SIM, SIMP, CAL, BCN or raw")
    command.add_argument("argument", nargs="?")
    command.add_argument("--team-id", type=int, default=defaults.team_id)
    command.add_argument("--address", type=lambda s: int(s, 0),
                         default=defaults.destination_address)
    command.add_argument("--port", default=None,
                         help="Send on this serial device instead of printing")
    command.add_argument("--baud", type=int, default=defaults.serial.baudrate)

    return parser


def run_consumer(processor: TelemetryProcessor, tick_s: float) -> int:
    """Drain and print outcomes until every producer has hung up."""
    try:
        while processor.connected:
            for outcome in processor.poll():
                print(outcome, flush=True)
            time.sleep(tick_s)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        processor.receiver.close()

    stats = processor.get_statistics()
    logger.info("Outcomes: %s, dropped packets: %d",
                stats['outcomes_by_type'], stats['dropped_packets'])
    return 0


def _consume(source: Iterable[bytes], name: str, telemetry_file: Optional[str],
             tick_s: float, max_history: int) -> int:
    sender, receiver = channel()
    sink = FileSink(telemetry_file) if telemetry_file else None
    processor = TelemetryProcessor(receiver, sink, max_history=max_history)

    producer = TelemetryProducer(source, sender, name=name)
    producer.start()
    try:
        return run_consumer(processor, tick_s)
    finally:
        if sink is not None:
            sink.close()


def _cmd_listen(args, config: GroundStationConfig) -> int:
    config.serial.port = args.port
    config.serial.baudrate = args.baud
    transport = SerialTransport(config.serial)
    try:
        status = _consume(SerialSource(transport), "reader", args.telemetry_file,
                          args.tick, config.max_history)
    finally:
        transport.close()
    if transport.error is not None:
        return 1
    return status


def _cmd_replay(args, config: GroundStationConfig) -> int:
    config.replay.path = args.path
    config.replay.interval_s = args.interval
    config.replay.loop = not args.once
    return _consume(ReplaySource(config.replay), "replay", args.telemetry_file,
                    args.tick, config.max_history)


def _cmd_simulate(args, config: GroundStationConfig) -> int:
    config.serial.port = args.port
    config.serial.baudrate = args.baud
    config.generator.team_id = args.team_id
    config.generator.seed = args.seed
    generator = TelemetryGenerator(config.generator)

    sent = 0
    with SerialTransport(config.serial) as transport:
        try:
            while args.count == 0 or generator.stats['generated'] < args.count:
                frame = generator.next_frame()
                if frame is not None:
                    transport.send(frame)
                    sent += 1
                time.sleep(generator.delay())
        except KeyboardInterrupt:
            logger.info("Interrupted")

    logger.info("Sent %d frames, %d artificially dropped",
                sent, generator.stats['dropped'])
    return 0


def _cmd_plot(args, config: GroundStationConfig) -> int:
    records = load_telemetry_log(args.path)
    if not plot_telemetry(records, args.out, title=args.path):
        return 1
    logger.info("Wrote %s (%d records)", args.out, len(records))
    return 0


def build_command(builder: CommandBuilder, name: str, argument: Optional[str]):
    """Map a command name and argument to a builder call."""
    name = name.upper()
    if name == 'CX':
        return builder.telemetry(_on_off(argument))
    if name == 'BCN':
        return builder.beacon(_on_off(argument))
    if name == 'ST':
        if argument is None:
            return builder.set_time()
        if argument.upper() == 'GPS':
            return builder.set_time('GPS')
        return builder.set_time(float(argument))
    if name == 'SIM':
        return builder.simulation(SimulationMode((argument or '').upper()))
    if name == 'SIMP':
        if argument is None:
            raise ValueError("SIMP needs a pressure in pascals")
        return builder.simulated_pressure(int(argument))
    if name == 'CAL':
        return builder.calibrate()
    return builder.raw_command(name, argument)


def _on_off(argument: Optional[str]) -> bool:
    value = (argument or '').upper()
    if value not in ('ON', 'OFF'):
        raise ValueError(f"expected ON or OFF, got {argument!r}")
    return value == 'ON'


def _cmd_command(args, config: GroundStationConfig) -> int:
    builder = CommandBuilder(args.team_id, args.address)
    try:
        result = build_command(builder, args.name, args.argument)
    except ValueError as e:
        logger.error("Invalid command: %s", e)
        return 2

    print(f"{result.text} -> {result.frame.serialise().hex(' ').upper()}")
    if args.port:
        config.serial.port = args.port
        config.serial.baudrate = args.baud
        with SerialTransport(config.serial) as transport:
            transport.send(result.frame)
        logger.info("Sent frame %d on %s", result.frame_id, args.port)
    return 0


_COMMANDS = {
    "listen": _cmd_listen,
    "replay": _cmd_replay,
    "simulate": _cmd_simulate,
    "plot": _cmd_plot,
    "command": _cmd_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    config = GroundStationConfig()
    args = _build_parser(config).parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return _COMMANDS[args.command_name](args, config)


if __name__ == "__main__":
    sys.exit(main())
