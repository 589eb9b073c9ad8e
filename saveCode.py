#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
saveCode.py - inspect and produce game share codes.

  saveCode.py alphabet            alphabet composition report
  saveCode.py decode CODE         every decode stage + restored snapshot (JSON)
  saveCode.py encode FILE         snapshot JSON file -> code ("-" reads stdin)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from savecode import __version__
from savecode.alphabet import ALPHABET, alphabet_report
from savecode.codec import code_stats, decode_stages, encode
from savecode.errors import SaveCodeError


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def _printable(text: str) -> str:
    # Dictionary markers are control characters.
    return text.encode("unicode_escape").decode("ascii")


def cmd_alphabet(_args: argparse.Namespace) -> int:
    for name, value in alphabet_report(ALPHABET).items():
        print(f"{name}: {value}")
    print(f"symbols: {''.join(ALPHABET)}")
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    stages = decode_stages(args.code)
    if "packed_text" in stages:
        print(f"packed text: {_printable(stages['packed_text'])}")
    if "dictionary" in stages:
        print(f"dictionary ({len(stages['dictionary'])} entries):")
        for i, entry in enumerate(stages["dictionary"]):
            print(f"  {i:2d}: {_printable(entry)}")
    if "token_text" in stages:
        print(f"token text: {_printable(stages['token_text'])}")
    if "json" in stages:
        print(f"json: {stages['json']}")
    if "error" in stages:
        eprint(f"ERROR: invalid code: {stages['error']}")
        return 1
    print(json.dumps(stages["snapshot"], ensure_ascii=False, indent=2))
    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    try:
        if args.file == "-":
            data = json.load(sys.stdin)
        else:
            with open(args.file, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, ValueError) as e:
        eprint(f"ERROR: cannot read snapshot: {e}")
        return 2
    if not isinstance(data, dict):
        eprint("ERROR: snapshot JSON must be an object")
        return 2
    try:
        code = encode(data)
        stats = code_stats(data) if args.stats else None
    except SaveCodeError as e:
        eprint(f"ERROR: {e}")
        return 1
    print(code)
    if stats is not None:
        for name, value in stats.items():
            if isinstance(value, float):
                print(f"{name}: {value:.1f}")
            else:
                print(f"{name}: {value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="saveCode.py: encode, decode and inspect game share codes.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log codec diagnostics to stderr.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("alphabet", help="Print the 128-symbol alphabet and its composition.")
    p.set_defaults(func=cmd_alphabet)

    p = sub.add_parser("decode", help="Decode a share code, printing every stage.")
    p.add_argument("code")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("encode", help="Encode a snapshot JSON file.")
    p.add_argument("file", help="Snapshot JSON path, or '-' for stdin.")
    p.add_argument("--stats", action="store_true", help="Print per-stage sizes after the code.")
    p.set_defaults(func=cmd_encode)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
