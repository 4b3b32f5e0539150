#!/usr/bin/env python3
"""
Metamodel CLI

Command-line interface for computing and checking model identifiers.

Usage:
    metamodel [--format json|yaml|text] [--config PATH] <command> [options]

Commands:
    identify    Print the identity hash and identifier of a model
    inspect     Print the model snapshot (or canonical JSON bytes)
    verify      Check an identifier against a model
    decode      Show the envelope fields of an identifier
    prove       Build an inclusion proof for one identity leaf

Every model command takes ``--model PATH`` (a YAML/JSON definition). Without
it the configured ``output.model_path`` is used, and failing that the
built-in token model.

Exit status: 0 success, 1 identifier mismatch, 2 invalid input.
"""

from __future__ import annotations

import argparse
import json
import sys
from enum import Enum
from typing import Any, List, Optional

import yaml

from metamodel import __version__
from metamodel.config import ConfigError, get_config_manager
from metamodel.core import canonical_json_bytes
from metamodel.definition import load_model
from metamodel.errors import ModelError
from metamodel.identity import decode_identifier, encode_identifier, inclusion_proof, verify_identifier
from metamodel.model import Model
from metamodel.observability import ModelLayer, ModelLogger, configure_logging, get_correlation_id
from metamodel.token_model import build_token_model

_log = ModelLogger(__name__, ModelLayer.CLI)


class OutputFormat(Enum):
    """Output format options."""
    JSON = "json"
    YAML = "yaml"
    TEXT = "text"


class CLIError(Exception):
    """CLI error with exit code."""
    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def format_output(data: Any, fmt: OutputFormat = OutputFormat.JSON) -> str:
    """Format data for output."""
    if fmt == OutputFormat.JSON:
        return json.dumps(data, indent=2, default=str)
    elif fmt == OutputFormat.YAML:
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    elif isinstance(data, dict):
        return "\n".join(f"{k}: {v}" for k, v in data.items())
    return str(data)


class MetamodelCLI:
    """Main CLI application."""

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="metamodel",
            description="Compute and verify content identifiers for Petri-net models",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.parser.add_argument(
            "--version", "-V",
            action="version",
            version=f"metamodel {__version__}",
        )
        self.parser.add_argument(
            "--format", "-f",
            choices=[f.value for f in OutputFormat],
            default=None,
            help="Output format (default: configured output.format)",
        )
        self.parser.add_argument("--config", "-c", help="YAML configuration file")
        self.parser.add_argument(
            "--log-level",
            choices=["debug", "info", "warning", "error", "critical"],
            help="Log level (default: configured observability.log_level)",
        )
        self.parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress error messages",
        )

        self.subparsers = self.parser.add_subparsers(dest="command", help="Commands")
        self._register_commands()

    def _register_commands(self) -> None:
        identify = self.subparsers.add_parser("identify", help="Print identity hash and identifier")
        self._add_model_option(identify)

        inspect = self.subparsers.add_parser("inspect", help="Print the model snapshot")
        self._add_model_option(inspect)
        inspect.add_argument("--canonical", action="store_true", help="Emit canonical JSON bytes")

        verify = self.subparsers.add_parser("verify", help="Check an identifier against a model")
        self._add_model_option(verify)
        verify.add_argument("identifier", help="Claimed identifier (b...)")

        decode = self.subparsers.add_parser("decode", help="Show identifier envelope fields")
        decode.add_argument("identifier", help="Identifier (b...)")

        prove = self.subparsers.add_parser("prove", help="Build an inclusion proof for one leaf")
        self._add_model_option(prove)
        target = prove.add_mutually_exclusive_group(required=True)
        target.add_argument("index", nargs="?", type=int, help="Leaf index")
        target.add_argument("--leaf", help="Leaf text, e.g. '$owner-->transfer'")

    @staticmethod
    def _add_model_option(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--model", "-m", help="Model definition file (YAML or JSON)")

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 0

        try:
            mgr = get_config_manager()
            if parsed.config:
                mgr.load_from_file(parsed.config)
            else:
                mgr.load_defaults()
            if parsed.log_level:
                mgr.set("observability.log_level", parsed.log_level)
            configure_logging(mgr.get("observability.log_level"), mgr.get("observability.log_format"))
            get_correlation_id()

            fmt = OutputFormat(parsed.format or mgr.get("output.format"))
            result = self._dispatch(parsed)

            if isinstance(result, bytes):
                sys.stdout.write(result.decode("utf-8") + "\n")
            elif result is not None:
                print(format_output(result, fmt))

            return 0

        except CLIError as e:
            if not parsed.quiet:
                print(f"Error: {e}", file=sys.stderr)
            return e.exit_code

        except (ModelError, ConfigError, ValueError) as e:
            _log.error("command failed", error_code=getattr(e, "code", "invalid_input"), command=parsed.command)
            if not parsed.quiet:
                print(f"Error: {e}", file=sys.stderr)
            return 2

    def _dispatch(self, args: argparse.Namespace) -> Any:
        handler = getattr(self, f"_handle_{args.command}", None)
        if handler is None:
            raise CLIError(f"Unknown command: {args.command}", exit_code=2)
        return handler(args)

    def _model(self, args: argparse.Namespace) -> Model:
        path = getattr(args, "model", None) or get_config_manager().get("output.model_path")
        if path:
            return load_model(path)
        return build_token_model()

    def _handle_identify(self, args: argparse.Namespace) -> Any:
        model = self._model(args)
        digest = model.identity_hash()
        return {
            "name": model.name,
            "hash": digest.hex(),
            "identifier": encode_identifier(digest),
        }

    def _handle_inspect(self, args: argparse.Namespace) -> Any:
        snapshot = self._model(args).to_dict()
        if args.canonical:
            return canonical_json_bytes(snapshot)
        return snapshot

    def _handle_verify(self, args: argparse.Namespace) -> Any:
        model = self._model(args)
        actual = model.identifier()
        if not verify_identifier(model, args.identifier):
            raise CLIError(f"identifier mismatch: claimed {args.identifier}, model is {actual}", exit_code=1)
        return {"match": True, "identifier": actual}

    def _handle_decode(self, args: argparse.Namespace) -> Any:
        return decode_identifier(args.identifier).to_dict()

    def _handle_prove(self, args: argparse.Namespace) -> Any:
        leaves = self._model(args).leaves()
        if args.leaf is not None:
            if args.leaf not in leaves:
                raise CLIError(f"leaf not in model: {args.leaf!r}", exit_code=2)
            index = leaves.index(args.leaf)
        else:
            index = args.index
        return inclusion_proof(leaves, index)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    cli = MetamodelCLI()
    return cli.run(argv)


if __name__ == "__main__":
    sys.exit(main())
