"""
Command-line interface for the AWS Resource Picker.

This script provides a direct entry point for the resource picker.
It delegates to the main CLI module in the package.
"""

import sys
from resource_picker.cli import main

if __name__ == '__main__':
    sys.exit(main())
