"""Main function for xr_motion_classifier."""

import sys

from xr_motion_classifier.core import cli


def run_main() -> None:
    """Main entry point to xr_motion_classifier."""
    sys.exit(cli.main())


if __name__ == "__main__":
    run_main()
