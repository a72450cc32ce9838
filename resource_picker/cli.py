"""
Command-line interface for the AWS resource picker.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import __version__
from .app import ResourcePickerApp
from .config.manager import ConfigurationManager
from .models.exceptions import (
    ConfigurationError,
    AWSCredentialsError,
    AuthenticationError,
    StorageError,
    ResourcePickerError
)
from .models.resource import ResourceKind
from .services.error_handler import ErrorHandler


def validate_config_file(config_path: str) -> str:
    """
    Validate that the configuration file exists and is readable.

    Args:
        config_path: Path to configuration file

    Returns:
        str: Absolute path to configuration file

    Raises:
        argparse.ArgumentTypeError: If file doesn't exist or isn't readable
    """
    path = Path(config_path).expanduser()

    if not path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")

    if not path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration path is not a file: {config_path}")

    if not path.suffix.lower() in ['.yaml', '.yml', '.json']:
        raise argparse.ArgumentTypeError(f"Configuration file must be YAML or JSON: {config_path}")

    try:
        # Test if file is readable
        with open(path, 'r') as f:
            f.read(1)
    except PermissionError:
        raise argparse.ArgumentTypeError(f"Configuration file is not readable: {config_path}")
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error accessing configuration file: {e}")

    return str(path.absolute())


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog='aws-pick',
        description='AWS Resource Picker - Browse AWS resources, most recently used first',
        epilog='''
Examples:
  %(prog)s bucket
  %(prog)s parameter --profile prod --region eu-west-1
  %(prog)s function --config picker.yaml --verbose
  %(prog)s --create-sample-config picker.yaml
        ''',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'kind',
        nargs='?',
        choices=[kind.value for kind in ResourceKind],
        help='Kind of resource to pick'
    )

    parser.add_argument(
        '--config', '-c',
        type=validate_config_file,
        help='Path to configuration file (YAML or JSON format)'
    )

    # AWS options
    parser.add_argument(
        '--profile', '-p',
        type=str,
        help='AWS profile to use (remembered for later runs)'
    )

    parser.add_argument(
        '--region', '-r',
        type=str,
        help='AWS region to use (remembered for later runs)'
    )

    # Logging options
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose (DEBUG) logging on stderr'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Path to log file (overrides logging.file_path from the configuration)'
    )

    parser.add_argument(
        '--create-sample-config',
        metavar='PATH',
        type=str,
        help='Write a sample configuration file to PATH and exit'
    )

    # Version
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def print_remediation(error: Exception) -> None:
    """Print suggested next steps for an error to stderr."""
    for step in ErrorHandler().get_error_remediation_steps(error):
        print(f"  - {step}", file=sys.stderr)


def execute_pick(args: argparse.Namespace) -> int:
    """
    Run the picker based on CLI arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        int: Exit code (0 for success or cancel, non-zero for failure)
    """
    logger = logging.getLogger(__name__)
    app = ResourcePickerApp(args)

    try:
        app.initialize()
        selected = asyncio.run(app.run())
        if selected is None:
            logger.info("Nothing selected")
        return 0

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration Error: {e}", file=sys.stderr)
        print_remediation(e)
        return 1

    except AuthenticationError as e:
        logger.error(f"SSO login failed: {e}")
        print(f"SSO Login Error: {e}", file=sys.stderr)
        print_remediation(e)
        return 1

    except AWSCredentialsError as e:
        logger.error(f"AWS credentials error: {e}")
        print(f"AWS Credentials Error: {e}", file=sys.stderr)
        print_remediation(e)
        return 1

    except StorageError as e:
        logger.error(f"State file error: {e}")
        print(f"State File Error: {e}", file=sys.stderr)
        print_remediation(e)
        return 1

    except ResourcePickerError as e:
        logger.error(f"Picker error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        print("\nInterrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT

    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"Unexpected Error: {e}", file=sys.stderr)
        print("Please check the logs for more details.", file=sys.stderr)
        return 1

    finally:
        app.close()


def main() -> int:
    """
    Main entry point for the CLI application.

    Returns:
        int: Exit code
    """
    parser = create_argument_parser()

    try:
        args = parser.parse_args()
    except SystemExit as e:
        return e.code

    if args.create_sample_config:
        ConfigurationManager().create_sample_config(args.create_sample_config)
        print(f"Sample configuration written to {args.create_sample_config}")
        return 0

    if not args.kind:
        parser.print_usage(sys.stderr)
        print("aws-pick: error: a resource kind is required", file=sys.stderr)
        return 2

    return execute_pick(args)


if __name__ == '__main__':
    sys.exit(main())
