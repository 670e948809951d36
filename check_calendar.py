"""Check the get_user_calendar_data function."""
import sys

from msgcheck.cli import main

if __name__ == "__main__":
    raise SystemExit(main(["calendar", *sys.argv[1:]]))
