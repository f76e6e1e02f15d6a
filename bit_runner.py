#!/usr/bin/env python3
import os
import sys
import argparse

from bitvm import BitVMError, load_program, run_program


def parse_args(argv):
    parser = argparse.ArgumentParser(description="Run a bit-level Brainfuck program")
    parser.add_argument("program", help="program file")
    parser.add_argument("input", help="input string, fed to the program bit by bit")
    parser.add_argument("debug", nargs="?", default="off", help="trace every instruction: on/off")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    debug = args.debug in ("on", "ON", "1")

    try:
        code = load_program(args.program)
    except OSError:
        print(f"Failed to open program file: {args.program}", file=sys.stderr)
        return 1

    try:
        output = run_program(code, os.fsencode(args.input), debug=debug)
    except BitVMError as e:
        print(f"[EXCEPTION] {e}", file=sys.stderr)
        return 1

    print("[OUTPUT]:")
    sys.stdout.flush()
    sys.stdout.buffer.write(output + b"\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
