"""Check messaging tables and functions with placeholder users."""
import sys

from msgcheck.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["messaging", *sys.argv[1:]]))
