"""Talk to a line based device from the terminal.

    python -m lineio COM14 --baudrate 115200 --start STX --end ETX --dtr --rts
    python -m lineio /dev/ttyUSB0 --end LF --exchange --timeout 500
    python -m lineio --list

Every line typed on stdin is sent to the device. Received lines are printed,
or with ``--exchange`` each typed line waits for its reply.
"""
import argparse
import sys

from dotenv import load_dotenv


def build_parser():
    parser = argparse.ArgumentParser(prog="lineio", description=__doc__.splitlines()[0])
    parser.add_argument("port", nargs="?", help="serial port or pyserial URL (loop://)")
    parser.add_argument("--list", action="store_true", help="list serial ports and exit")
    parser.add_argument("--baudrate", type=int)
    parser.add_argument("--start", help="start marker: a character, a name (STX) or 0x02")
    parser.add_argument("--end", help="end marker: a character, a name (ETX) or 0x03")
    parser.add_argument("--no-start", action="store_true", help="lines have no start marker")
    parser.add_argument("--chunk-size", type=int)
    parser.add_argument("--exchange", action="store_true", help="wait for a reply per line")
    parser.add_argument("--timeout", type=int, help="exchange timeout in ms")
    parser.add_argument("--dtr", action="store_true", default=None)
    parser.add_argument("--rts", action="store_true", default=None)
    parser.add_argument("--log-level", default=None)
    return parser


def main(argv=None):
    # .env 파일에서 환경 변수 로드 (설정보다 먼저)
    load_dotenv()

    from .client.serial import LineIO_SerialClient, list_serial_ports
    from .config import get_environment, reload_lineio_config
    from .exceptions import ConnectionException, ExchangeTimeoutException
    from .logger import lineio_apply_logging_config
    from .utilities import parse_marker, printable

    parser = build_parser()
    args = parser.parse_args(argv)
    reload_lineio_config(environment=get_environment()).get_logger()
    if args.log_level:
        lineio_apply_logging_config(args.log_level.upper())

    if args.list:
        for _, label in list_serial_ports():
            print(label)
        return 0
    if not args.port:
        parser.error("a port is required")

    try:
        end = parse_marker(args.end)
        start = None if args.no_start else parse_marker(args.start)
    except ValueError as exc:
        parser.error(str(exc))
    if end is None and start is not None:
        parser.error("--start requires --end")

    def on_line(line):
        print(f"< {printable(line)}", flush=True)

    try:
        client = LineIO_SerialClient(
            args.port,
            baudrate=args.baudrate,
            dtr=args.dtr,
            rts=args.rts,
            end_marker=end,
            start_marker=start,
            chunk_size=args.chunk_size,
            timeout=args.timeout / 1000 if args.timeout else None,
            on_line=None if args.exchange else on_line,
        )
    except (ConnectionException, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1

    with client:
        for line in sys.stdin:
            if not client.is_open:
                print("connection closed", file=sys.stderr)
                return 1
            line = line.rstrip("\r\n")
            if not args.exchange:
                if not client.write_line(line):
                    print("write failed", file=sys.stderr)
                continue
            try:
                on_line(client.execute(line))
            except ExchangeTimeoutException:
                print("timeout", file=sys.stderr)
            except ConnectionException as exc:
                print(exc, file=sys.stderr)
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
