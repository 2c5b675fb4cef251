"""
Main entry point for rosa-network.
"""
import os
import sys
import argparse
import logging
from typing import List, Optional

import yaml

from rosa_network.cloud.factory import CloudProviderFactory
from rosa_network.cloud.provider import CloudProvider
from rosa_network.config.config import Config
from rosa_network.errors import NetworkResourcesError, ProviderError, StackTimeoutError
from rosa_network.network.catalog import TemplateCatalog
from rosa_network.network.models import SubmissionMode
from rosa_network.network.orchestrator import StackOrchestrator
from rosa_network.network.poller import StackLifecyclePoller, ensure_created
from rosa_network.network.resolver import (
    ParameterResolver,
    parameter_overrides_from_env,
    parse_param_flags,
    resolve_template_dir,
)
from rosa_network.utils.logging_utils import setup_logging_from_config

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_TIMEOUT = 2


def _positive_float(value: str) -> float:
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}")
    return number


def _non_negative_float(value: str) -> float:
    number = float(value)
    if not number >= 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(prog="rosa-network", description="Provision network resources for clusters")
    parser.add_argument("--config", type=str, default=None, help="Path to configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    # create network
    create = commands.add_parser("create", help="Create resources")
    create_resources = create.add_subparsers(dest="resource", required=True)
    network = create_resources.add_parser("network", help="Create network resources from a CloudFormation template")
    network.add_argument("--template", type=str, default=None, help="Name of the template to use")
    network.add_argument(
        "--template-dir",
        type=str,
        default=None,
        help="Directory holding the templates. Overrides the OCM_TEMPLATE_DIR environment variable",
    )
    network.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template parameter; repeat for multiple. Tags=Key1=Value1,Key2=Value2 sets stack tags",
    )
    network.add_argument(
        "--mode",
        type=str,
        choices=[mode.value for mode in SubmissionMode],
        default=SubmissionMode.AUTO.value,
        help="auto creates the stack, manual prints the equivalent AWS CLI command",
    )
    network.add_argument("--region", type=str, default=None, help="Region used when no Region parameter is given")
    network.add_argument(
        "--no-watch",
        action="store_true",
        help="Return once the create request is accepted instead of waiting for the stack to finish",
    )
    network.add_argument("--timeout", type=_non_negative_float, default=None, help="Seconds to wait for the stack")
    network.add_argument("--interval", type=_positive_float, default=None, help="Seconds between status checks")

    # describe stack
    describe = commands.add_parser("describe", help="Describe resources")
    describe_resources = describe.add_subparsers(dest="resource", required=True)
    stack = describe_resources.add_parser("stack", help="Show the status of a network stack")
    stack.add_argument("name", type=str, help="Stack name or ID")
    stack.add_argument("--region", type=str, default=None, help="Region of the stack")

    return parser.parse_args(argv)


def create_provider(config: Config, region: str) -> CloudProvider:
    """Create the AWS provider from configuration."""
    return CloudProviderFactory.create_provider("aws", {**config.aws, "region": region})


def run_create_network(config: Config, args) -> int:
    """Create network resources.

    Args:
        config: Configuration object.
        args: Command line arguments.

    Returns:
        Exit code.
    """
    logger = logging.getLogger("create_network")
    network_config = config.network

    template_name = args.template
    if not template_name:
        template_name = network_config["default_template"]
        logger.info(f"No template name provided in the command. Defaulting to {template_name}")

    template_dir = resolve_template_dir(args.template_dir, os.environ, network_config.get("template_dir"))
    logger.debug(f"Using template directory: {template_dir}")
    template = TemplateCatalog(template_dir).resolve(template_name)

    default_region = args.region or config.default_region()
    provider = None
    account_id = None

    mode = SubmissionMode(args.mode)
    overrides = parameter_overrides_from_env()
    name_supplied = "Name" in overrides or any(key == "Name" for key, _ in parse_param_flags(args.param))
    if mode is SubmissionMode.AUTO or not name_supplied:
        provider = create_provider(config, default_region)
        # Looked up by the resolver only after the supplied values validate.
        account_id = provider.get_account_id

    resolver = ParameterResolver(account_id, default_region, network_config.get("name_prefix", "rosa-network-stack"))
    resolved = resolver.resolve(template, args.param, overrides)

    result = StackOrchestrator(provider).submit(resolved, mode)
    print(result.message)
    if result.command:
        print(result.command)
        return EXIT_OK

    if args.no_watch:
        return EXIT_OK

    interval = args.interval if args.interval is not None else network_config.get("poll_interval", 5)
    timeout = args.timeout if args.timeout is not None else network_config.get("poll_timeout", 1800)
    poller = StackLifecyclePoller(provider.with_region(resolved.region), interval=interval)
    state = ensure_created(poller.wait(result.stack_id or result.stack_name, timeout=timeout))
    print(f"Stack {result.stack_name} is {state.status.value}")
    return EXIT_OK


def run_describe_stack(config: Config, args) -> int:
    """Print the status of a stack.

    Args:
        config: Configuration object.
        args: Command line arguments.

    Returns:
        Exit code.
    """
    provider = create_provider(config, args.region or config.default_region())
    state = provider.describe_stack(args.name)
    print(f"Stack {state.stack_name} is {state.status.value}")
    reasons = provider.get_stack_failure_reasons(args.name) if state.status.is_failure else state.reasons
    for reason in reasons:
        print(f"  {reason}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = Config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERR: failed to load configuration: {e}", file=sys.stderr)
        return EXIT_ERROR

    setup_logging_from_config(config.get("logging", {}), debug=args.debug)
    logger = logging.getLogger("main")

    try:
        if args.command == "create":
            return run_create_network(config, args)
        return run_describe_stack(config, args)
    except StackTimeoutError as e:
        print(f"ERR: {e}", file=sys.stderr)
        return EXIT_TIMEOUT
    except ProviderError as e:
        # Provider diagnostics are relayed as-is.
        print(str(e), file=sys.stderr)
        return EXIT_ERROR
    except NetworkResourcesError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERR: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
