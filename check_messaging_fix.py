"""Check doctor/profile/message access and both messaging functions."""
import sys

from msgcheck.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["messaging-fix", *sys.argv[1:]]))
