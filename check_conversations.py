"""Check messages, profiles and conversation lookups."""
import sys

from msgcheck.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["conversations", *sys.argv[1:]]))
