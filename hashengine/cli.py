"""hashengine command-line interface.

Usage:
    hashengine algos [--crypto]
    hashengine hash [--algo ALGO] [FILE]
    hashengine hmac ALGO KEY [FILE]
    hashengine pbkdf2 ALGO PASSWORD SALT ITERATIONS [--length N] [--raw]
    hashengine hkdf ALGO IKM_HEX [--length N] [--info TEXT] [--salt-hex HEX] [--raw]

FILE defaults to standard input. Output is lowercase hex, or base64
of the raw bytes with --raw.

Exit Codes:
    0 - Success
    1 - I/O failure
    3 - Invalid arguments or unknown algorithm
"""

import argparse
import base64
import sys
from typing import Sequence

from hashengine import __version__
from hashengine.config import get_settings
from hashengine.core.errors import HashEngineError, StreamReadError
from hashengine.core.hash_engine import hash_engine, mac_engine
from hashengine.core.kdf_engine import kdf_engine
from hashengine.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INVALID = 3


def _source(path: str | None):
    if path is None or path == "-":
        return sys.stdin.buffer
    return path


def _emit(raw: bytes, as_raw: bool) -> None:
    print(base64.b64encode(raw).decode("ascii") if as_raw else raw.hex())


def cmd_algos(args: argparse.Namespace) -> int:
    names = mac_engine.algorithms() if args.crypto else hash_engine.algorithms()
    for name in names:
        print(name)
    return EXIT_OK


def cmd_hash(args: argparse.Namespace) -> int:
    algorithm = args.algorithm or get_settings().default_algorithm
    result = hash_engine.hash_file(_source(args.file), algorithm)
    _emit(result.digest, args.raw)
    return EXIT_OK


def cmd_hmac(args: argparse.Namespace) -> int:
    result = mac_engine.mac_file(_source(args.file), args.key.encode(), args.algorithm)
    _emit(result.tag, args.raw)
    return EXIT_OK


def cmd_pbkdf2(args: argparse.Namespace) -> int:
    password = args.password.encode()
    salt = args.salt.encode()
    if args.raw:
        result = kdf_engine.derive_pbkdf2(
            password, salt, args.iterations, args.length, algorithm=args.algorithm
        )
        _emit(result.derived_key, True)
    else:
        print(kdf_engine.pbkdf2_hex(
            password, salt, args.iterations, args.length, algorithm=args.algorithm
        ))
    return EXIT_OK


def cmd_hkdf(args: argparse.Namespace) -> int:
    try:
        ikm = bytes.fromhex(args.ikm_hex)
        salt = bytes.fromhex(args.salt_hex) if args.salt_hex else None
    except ValueError:
        print("Error: IKM and salt must be hexadecimal", file=sys.stderr)
        return EXIT_INVALID
    result = kdf_engine.derive_hkdf(
        input_key_material=ikm,
        length=args.length,
        info=args.info.encode(),
        salt=salt,
        algorithm=args.algorithm,
    )
    _emit(result.derived_key, args.raw)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashengine",
        description="Hashing, HMAC and key derivation",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("algos", help="List registered algorithms")
    p.add_argument("--crypto", action="store_true", help="Only HMAC/KDF capable algorithms")
    p.set_defaults(func=cmd_algos)

    p = sub.add_parser("hash", help="Hash a file or standard input")
    p.add_argument("-a", "--algo", dest="algorithm", default=None,
                   help="Algorithm (default from settings)")
    p.add_argument("file", nargs="?", help="File to hash (default: stdin)")
    p.add_argument("--raw", action="store_true", help="Print base64 of raw digest")
    p.set_defaults(func=cmd_hash)

    p = sub.add_parser("hmac", help="HMAC a file or standard input")
    p.add_argument("algorithm")
    p.add_argument("key")
    p.add_argument("file", nargs="?", help="File to authenticate (default: stdin)")
    p.add_argument("--raw", action="store_true", help="Print base64 of raw tag")
    p.set_defaults(func=cmd_hmac)

    p = sub.add_parser("pbkdf2", help="Derive a key with PBKDF2")
    p.add_argument("algorithm")
    p.add_argument("password")
    p.add_argument("salt")
    p.add_argument("iterations", type=int)
    p.add_argument("--length", type=int, default=0,
                   help="Hex digits (or bytes with --raw); 0 = one digest")
    p.add_argument("--raw", action="store_true", help="Print base64 of raw key")
    p.set_defaults(func=cmd_pbkdf2)

    p = sub.add_parser("hkdf", help="Derive a key with HKDF")
    p.add_argument("algorithm")
    p.add_argument("ikm_hex", help="Input keying material, hex")
    p.add_argument("--length", type=int, default=0, help="Bytes; 0 = one digest")
    p.add_argument("--info", default="", help="Context info string")
    p.add_argument("--salt-hex", default=None, help="Salt, hex")
    p.add_argument("--raw", action="store_true", help="Print base64 of raw key")
    p.set_defaults(func=cmd_hkdf)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level="DEBUG" if args.verbose else None)

    try:
        return args.func(args)
    except StreamReadError as e:
        logger.error("Read failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    except HashEngineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
