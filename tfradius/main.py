"""
Command-line interface for converting Terraform modules to Radius resource types.

The generated YAML goes to the output file, or to standard output when no
file is given; logging always goes to standard error.
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from tfradius.core.config import ConversionSettings
from tfradius.plugins.terraform import TerraformOrchestrator
from tfradius.plugins.terraform.exceptions import (
    AssemblyError,
    RecursionLimitError,
    SourceAcquisitionError,
    TerraformDataError,
    TerraformPluginError,
    UnsupportedTypeError,
    ValidationError,
    VariableExtractionError,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 1
EXIT_TERRAFORM_DATA = 2
EXIT_VARIABLE_EXTRACTION = 3
EXIT_UNSUPPORTED_TYPE = 4
EXIT_RECURSION_LIMIT = 5
EXIT_ASSEMBLY = 6
EXIT_PLUGIN = 7
EXIT_SOURCE = 8
EXIT_FILESYSTEM = 9
EXIT_UNEXPECTED = 10


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable INFO logging from every module if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,
    )

    if not verbose and not debug:
        # Quiet mode: warnings from the library, progress from the CLI
        logging.getLogger().setLevel(logging.WARNING)
        logging.getLogger(__name__).setLevel(logging.INFO)


def validate_inputs(source: str, output_file: Path | None) -> None:
    """Validate command line inputs.

    Raises:
        ValidationError: If inputs are invalid.
    """
    if not source or not source.strip():
        raise ValidationError("Module source must not be empty", field_name="source")

    if output_file is None:
        return

    if output_file.suffix.lower() not in {".yaml", ".yml"}:
        raise ValidationError(
            f"Output file must have .yaml or .yml extension, got: {output_file.suffix}",
            field_name="output_file",
            actual_value=output_file.suffix,
        )

    if output_file.exists() and output_file.is_dir():
        raise ValidationError(
            f"Output path is a directory: {output_file}", field_name="output_file"
        )


def build_settings(args: argparse.Namespace) -> ConversionSettings:
    """Merge CLI flags over environment settings.

    Raises:
        ValidationError: If a setting is out of range.
    """
    try:
        return ConversionSettings.from_env(
            namespace_override=args.namespace,
            resource_type_override=args.resource_type,
            max_type_depth=args.max_depth,
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid setting: {first.get('msg', e)}",
            field_name=field,
            actual_value=first.get("input"),
        ) from e


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="tfradius",
        description=(
            "Generate a Radius resource type schema from the input variables "
            "of a Terraform module"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a local module and print the schema
  tfradius ./modules/vpc

  # Convert a module straight from Git, at a tag
  tfradius https://github.com/terraform-aws-modules/terraform-aws-vpc \\
    --ref v5.8.1 -o types/vpc.yaml

  # Force the naming instead of inferring it
  tfradius ./modules/queue --namespace Acme.Messaging --resource-type queue

Environment:
  TFRADIUS_GIT_TOKEN       Access token for private HTTPS repositories
  TFRADIUS_GIT_TIMEOUT     Clone timeout in seconds (default: 300)
  TFRADIUS_MAX_TYPE_DEPTH  Deepest type nesting followed (default: 64)
        """,
    )

    parser.add_argument("source", help="Local module directory or Git URL")
    parser.add_argument(
        "-o",
        "--output",
        dest="output_file",
        type=Path,
        help="Path of the YAML file to write (default: standard output)",
    )
    parser.add_argument(
        "--namespace", help="Namespace to use verbatim (e.g. AWS.Network)"
    )
    parser.add_argument(
        "--resource-type",
        dest="resource_type",
        help="Resource type name to use verbatim (e.g. awsVpc)",
    )
    parser.add_argument("--ref", help="Git branch or tag to check out")
    parser.add_argument(
        "--max-depth",
        dest="max_depth",
        type=int,
        help="Deepest type nesting to follow before failing",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging from every component",
    )

    return parser.parse_args(argv)


def run_conversion(args: argparse.Namespace) -> int:
    """Execute one conversion and return the process exit code."""
    configure_logging(args.debug, args.verbose)

    try:
        validate_inputs(args.source, args.output_file)
        settings = build_settings(args)

        logger.info(f"Converting Terraform module: {args.source}")
        orchestrator = TerraformOrchestrator()
        definition = orchestrator.convert(
            args.source, args.output_file, settings, ref=args.ref
        )

        if args.output_file is None:
            sys.stdout.write(orchestrator.last_output or "")
            sys.stdout.flush()
        else:
            logger.info(f"Resource type saved to: {args.output_file}")

        logger.info(
            f"Generated {definition.namespace}/{definition.resource_type_name} "
            f"with {len(definition.properties)} properties"
        )
        return EXIT_OK

    except ValidationError as e:
        logger.error(f"Input validation failed: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        return EXIT_VALIDATION
    except TerraformDataError as e:
        logger.error(f"Terraform data error: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        return EXIT_TERRAFORM_DATA
    except VariableExtractionError as e:
        logger.error(f"Variable extraction error: {e}")
        return EXIT_VARIABLE_EXTRACTION
    except RecursionLimitError as e:
        logger.error(f"Type nesting limit exceeded: {e}")
        return EXIT_RECURSION_LIMIT
    except UnsupportedTypeError as e:
        logger.error(f"Unsupported type: {e}")
        return EXIT_UNSUPPORTED_TYPE
    except AssemblyError as e:
        logger.error(f"Schema assembly error: {e}")
        logger.info(f"Suggestion: {e.get_recovery_hint()}")
        return EXIT_ASSEMBLY
    except SourceAcquisitionError as e:
        logger.error(f"Cannot acquire module source: {e}")
        return EXIT_SOURCE
    except TerraformPluginError as e:
        logger.error(f"Terraform plugin error: {e}")
        return EXIT_PLUGIN
    except OSError as e:
        logger.error(f"File system error: {e}")
        return EXIT_FILESYSTEM
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        return EXIT_UNEXPECTED


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)
    return run_conversion(args)


if __name__ == "__main__":
    sys.exit(main())
