#!/usr/bin/env python3
"""
Fare Interpreter CLI
Command line interface for checking riders against fare-exemption grammars.
"""
import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel

from config import load_config, InterpreterConfig
from exceptions import InterpreterError
from fare_interpreter.logging_setup import setup_logging
from fare_interpreter import ui
from grammar import GrammarEngine


console = Console()
logger = logging.getLogger("FareInterpreterCLI")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MALFORMED = 2


def build_engine(config: InterpreterConfig) -> GrammarEngine:
    return GrammarEngine(
        grammars_path=config.grammar.grammars_path,
        cache_enabled=config.grammar.cache_enabled,
        cache_max_entries=config.grammar.cache_max_entries,
    )


def run_check(
    engine: GrammarEngine,
    config: InterpreterConfig,
    inputs: List[str],
    grammar_id: Optional[str] = None,
    strict: bool = False,
) -> int:
    """Print one verdict per input and return the exit status."""
    grammar_id = grammar_id or config.grammar.default_grammar
    context = engine.get_context(grammar_id)
    messages = engine.get_grammar(grammar_id).messages
    fare = config.fare.display()

    status = EXIT_OK
    for text in inputs:
        result = context.evaluate_detailed(text)
        if result.malformed and strict:
            ui.print_malformed(result)
            status = EXIT_MALFORMED
            continue
        ui.print_verdict(result, messages, fare)

    return status


def run_list(engine: GrammarEngine) -> int:
    ui.print_grammar_table(engine.list_grammars())
    return EXIT_OK


def run_show(engine: GrammarEngine, grammar_id: str) -> int:
    context = engine.get_context(grammar_id)
    console.print(Panel.fit(context.describe(), title=grammar_id, border_style="cyan"))
    return EXIT_OK


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fare Interpreter CLI")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    check_parser = subparsers.add_parser("check", help="Check riders against a grammar")
    check_parser.add_argument("inputs", nargs="+", help="Rider descriptions, e.g. 韶关的老人")
    check_parser.add_argument("--grammar", help="Grammar id (defaults to the configured grammar)")
    check_parser.add_argument(
        "--strict", action="store_true", help="Report malformed input instead of charging the fare"
    )

    subparsers.add_parser("list", help="List loaded grammars")

    show_parser = subparsers.add_parser("show", help="Show a grammar's predicate tree")
    show_parser.add_argument("grammar_id", help="Grammar id")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    try:
        config = load_config(args.config)
        setup_logging(config.system.log_level)
        engine = build_engine(config)

        if args.command == "check":
            return run_check(engine, config, args.inputs, args.grammar, args.strict)
        if args.command == "list":
            return run_list(engine)
        return run_show(engine, args.grammar_id)

    except InterpreterError as e:
        logger.debug("CLI error: %s", e.to_dict())
        console.print(Panel.fit(f"Error: {e.message}", border_style="red"))
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
