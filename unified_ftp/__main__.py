"""
unified-ftp - Main Entry Point

Command-line front end for TransferClient: one subcommand per remote file
operation, for either FTP or SFTP.
"""

import argparse
import logging
import sys

from .client import TransferClient
from .config import load_config
from .exceptions import TransferError
from .logger import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to configuration file")
    common.add_argument("--host", help="Server host")
    common.add_argument("--port", type=int, help="Server port (default: 21 for FTP, 22 for SFTP)")
    common.add_argument("--user", help="Username")
    common.add_argument("--password", help="Password")
    common.add_argument("--path", help="Remote working directory")
    common.add_argument(
        "--protocol",
        choices=["ftp", "sftp"],
        default=None,
        help="Protocol to use (default: ftp)",
    )
    common.add_argument("--timeout", type=int, help="Network timeout in seconds")
    common.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parser = argparse.ArgumentParser(
        description="unified-ftp - One client for FTP and SFTP file operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  unified-ftp ls --host 192.168.0.130 --port 2121 --path incoming
  unified-ftp put report.txt --protocol sftp --host myserver.com --user me --password secret
  unified-ftp get report.txt ./downloads --config config.ini
  unified-ftp mv a.txt b.txt --config config.ini
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("ls", parents=[common], help="List the working directory")

    put_parser = subparsers.add_parser("put", parents=[common], help="Upload a local file")
    put_parser.add_argument("source", help="Local file to upload")
    put_parser.add_argument("--name", help="Remote name (default: local base name)")

    get_parser = subparsers.add_parser("get", parents=[common], help="Download a remote file")
    get_parser.add_argument("source", help="Remote file name")
    get_parser.add_argument("destination", help="Local directory to write into")
    get_parser.add_argument("--name", help="Local file name (default: remote name)")

    rm_parser = subparsers.add_parser("rm", parents=[common], help="Delete a remote file")
    rm_parser.add_argument("name")

    mv_parser = subparsers.add_parser("mv", parents=[common], help="Rename a remote file")
    mv_parser.add_argument("name")
    mv_parser.add_argument("new_name")

    mkdir_parser = subparsers.add_parser("mkdir", parents=[common], help="Create a remote directory")
    mkdir_parser.add_argument("name")

    rmdir_parser = subparsers.add_parser("rmdir", parents=[common], help="Remove a remote directory")
    rmdir_parser.add_argument("name")

    type_parser = subparsers.add_parser(
        "type", parents=[common], help="Report whether a remote name is a file or directory"
    )
    type_parser.add_argument("name")

    return parser.parse_args(argv)


def run_command(args, client: TransferClient, conn) -> int:
    """Execute one subcommand against ``conn``."""
    if args.command == "ls":
        for name in client.list_directory(conn):
            print(name)
    elif args.command == "put":
        client.upload(conn, args.source, args.name)
        print(f"[OK] Uploaded {args.source}")
    elif args.command == "get":
        client.download(conn, args.source, args.destination, args.name)
        print(f"[OK] Downloaded {args.source}")
    elif args.command == "rm":
        client.delete_file(conn, args.name)
        print(f"[OK] Deleted {args.name}")
    elif args.command == "mv":
        client.rename_file(conn, args.name, args.new_name)
        print(f"[OK] Renamed {args.name} to {args.new_name}")
    elif args.command == "mkdir":
        client.make_directory(conn, args.name)
        print(f"[OK] Created {args.name}")
    elif args.command == "rmdir":
        client.remove_directory(conn, args.name)
        print(f"[OK] Removed {args.name}")
    elif args.command == "type":
        print(client.get_path_type(conn, args.name).value)
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.command is None:
        print("Usage: unified-ftp <command> [options]")
        print()
        print("Commands: ls, put, get, rm, mv, mkdir, rmdir, type")
        print()
        print("Run 'unified-ftp <command> --help' for more information.")
        return 1

    try:
        config = load_config(
            config_path=args.config,
            host=args.host,
            port=args.port,
            username=args.user,
            password=args.password,
            path=args.path,
            protocol=args.protocol,
            timeout=args.timeout,
            debug=args.verbose,
        )
        setup_logging(config.logging)

        from . import __version__

        conn = config.connection
        logger.info(
            "unified-ftp v%s: %s %s on %s", __version__, conn.protocol.name, args.command, conn.host
        )
        return run_command(args, TransferClient(config.transfer), conn)

    except TransferError as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"[ERROR] Configuration error: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
