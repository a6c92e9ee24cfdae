"""
Main entry point for the Web Transcoder.

This script parses command-line arguments and runs a single transcoding job,
metadata probe or executable check. See `web_transcoder.cli` for the options.
"""

import sys

from web_transcoder.cli import main


if __name__ == "__main__":
    sys.exit(main())
