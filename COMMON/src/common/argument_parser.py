"""
Shared argument parsing utilities for consistent CLI interfaces across scripts.

Scripts describe themselves with a SCRIPT_INFO dictionary and their arguments
with an ARGUMENTS dictionary; this module builds the argparse parser and the
help epilog from those definitions.

Usage:
    from common.argument_parser import ScriptArgumentParser

    SCRIPT_INFO = {
        'name': 'My Script',
        'description': 'What this script does',
        'examples': ['/photos --dry-run']
    }

    ARGUMENTS = {
        'source': {'positional': True, 'help': 'Source directory'},
        'verbose': {'short': '-v', 'action': 'store_true', 'help': 'Verbose'}
    }

    parser = ScriptArgumentParser(SCRIPT_INFO, ARGUMENTS)
    args = parser.parse_args()
"""

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

# Keys copied straight from an argument definition into add_argument()
_PASSTHROUGH_KEYS = ("dest", "action", "type", "choices", "metavar", "required")


def _escape(text: str) -> str:
    """Escape '%' so argparse's %-formatting leaves strftime patterns alone."""
    return text.replace("%", "%%")


class ScriptArgumentParser:
    """
    Standardized argument parser that generates CLI interfaces from configuration.
    """

    def __init__(self, script_info: Dict[str, Any], arguments: Dict[str, Any]):
        """
        Initialize the argument parser.

        Args:
            script_info: Script metadata with 'name', 'description', 'examples'
            arguments: Argument definitions keyed by argument name. Each value
                holds 'help' plus optional 'positional', 'flag', 'short',
                'action', 'type', 'default', 'choices', 'metavar', 'required'.
        """
        self.script_info = script_info
        self.arguments = arguments
        self._parser: Optional[argparse.ArgumentParser] = None

    @staticmethod
    def _flag_for(key: str, arg_def: Dict[str, Any]) -> str:
        return arg_def.get("flag", f"--{key.replace('_', '-')}")

    def create_help_text(self) -> str:
        """Generate the usage/examples epilog from argument definitions."""
        positionals = [k for k, d in self.arguments.items() if d.get("positional")]
        options = [
            (k, d) for k, d in self.arguments.items() if not d.get("positional")
        ]

        usage = " ".join(k.upper() for k in positionals)
        lines = ["Usage patterns:", f"  %(prog)s {usage} [OPTIONS]"]

        if positionals:
            lines.append("")
            lines.append("Required arguments:")
            for key in positionals:
                help_text = _escape(self.arguments[key]["help"])
                lines.append(f"  {key.upper():<14} {help_text}")

        if options:
            lines.append("")
            lines.append("Optional arguments:")
            for key, arg_def in options:
                flag_text = self._flag_for(key, arg_def)
                if arg_def.get("short"):
                    flag_text += f", {arg_def['short']}"
                help_text = arg_def["help"]
                if arg_def.get("default") is not None:
                    help_text += f" (default: {arg_def['default']})"
                lines.append(f"  {flag_text:<18} {_escape(help_text)}")

        examples = self.script_info.get("examples") or []
        if examples:
            lines.append("")
            lines.append("Examples:")
            for example in examples:
                lines.append(f"  %(prog)s {_escape(example)}")

        return "\n".join(lines)

    def create_argument_parser(self) -> argparse.ArgumentParser:
        """Create and configure the argument parser from argument definitions."""
        parser = argparse.ArgumentParser(
            prog=self.script_info.get("prog"),
            description=self.script_info["description"],
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self.create_help_text(),
        )

        for key, arg_def in self.arguments.items():
            help_text = _escape(arg_def["help"])
            if arg_def.get("positional"):
                # Positional with a named alternative, e.g. SOURCE or --source
                parser.add_argument(key, nargs="?", help=help_text)
                parser.add_argument(
                    f"--{key}",
                    dest=f"{key}_option",
                    help=f"{help_text} (alternative to positional)",
                )
                continue

            names = [self._flag_for(key, arg_def)]
            if arg_def.get("short"):
                names.append(arg_def["short"])

            kwargs: Dict[str, Any] = {"help": help_text, "dest": key}
            for option in _PASSTHROUGH_KEYS:
                if arg_def.get(option) is not None:
                    kwargs[option] = arg_def[option]
            if arg_def.get("default") is not None:
                kwargs["default"] = arg_def["default"]

            parser.add_argument(*names, **kwargs)

        return parser

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command line arguments (``sys.argv`` when ``args`` is None)."""
        if self._parser is None:
            self._parser = self.create_argument_parser()
        return self._parser.parse_args(args)

    def error(self, message: str):
        """Print error message and exit with status 2 (like argparse default)."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(2)

    def print_header(self) -> None:
        """Print a standardized script header using script info."""
        print("=" * 80)
        print(f"=== [{self.script_info['name']}] - {self.script_info['description']}")
        print("=" * 80)
        print()

    def validate_required_args(self, args: argparse.Namespace) -> Dict[str, Any]:
        """
        Resolve positional/named alternatives and check required positionals.

        Positional ``source`` may be given as ``SOURCE`` or ``--source``; the
        resolved value is stored under ``source``. Exits with status 2 when a
        positional is missing or given twice with different values.
        """
        resolved = dict(vars(args))
        missing = []

        for key, arg_def in self.arguments.items():
            if not arg_def.get("positional"):
                continue
            positional_value = resolved.get(key)
            option_value = resolved.pop(f"{key}_option", None)
            if positional_value and option_value and positional_value != option_value:
                self.error(f"{key} given twice: {positional_value!r} and {option_value!r}")
            value = positional_value or option_value
            if value:
                resolved[key] = value
            else:
                missing.append(key)

        if missing:
            self.error(f"Required arguments missing: {', '.join(missing)}")

        return resolved

    def setup_logging(
        self,
        resolved_args: Dict[str, Any],
        script_name: str,
        config: Any = None,
        packages: Sequence[str] = (),
    ) -> logging.Logger:
        """Create the per-run script logger honouring --verbose and --quiet."""
        from common.logging import ScriptLogging, timestamped_name

        debug_mode = bool(resolved_args.get("verbose")) and not resolved_args.get(
            "quiet"
        )
        return ScriptLogging.get_script_logger(
            name=timestamped_name(script_name),
            debug=debug_mode,
            config=config,
            quiet=bool(resolved_args.get("quiet")),
            packages=packages,
        )

    def display_configuration(
        self, resolved_args: Dict[str, Any], config_map: Dict[str, str]
    ) -> None:
        """Print the labelled configuration values unless in quiet mode."""
        if resolved_args.get("quiet"):
            return

        for arg_key, display_label in config_map.items():
            value = resolved_args.get(arg_key)
            if value:
                print(f"{display_label}: {value}")

        if resolved_args.get("dry_run"):
            print("Mode: DRY RUN (simulation only)")

        print()


def create_standard_arguments() -> Dict[str, Any]:
    """
    Create the standard set of arguments shared by all scripts.

    Returns:
        Dictionary of standard argument definitions.
    """
    return {
        "verbose": {
            "short": "-v",
            "action": "store_true",
            "help": "Enable verbose/debug output",
        },
        "quiet": {
            "short": "-q",
            "action": "store_true",
            "help": "Suppress non-error output",
        },
        "dry_run": {
            "flag": "--dry-run",
            "action": "store_true",
            "help": "Show what would be done without making changes",
        },
    }


def merge_arguments(*arg_dicts: Dict[str, Any]) -> Dict[str, Any]:
    """Merge argument dictionaries, later ones taking precedence."""
    result: Dict[str, Any] = {}
    for arg_dict in arg_dicts:
        result.update(arg_dict)
    return result
