"""
REPL (Read-Eval-Print Loop) for interactive queries.

Provides command-line interface to the engine: load CSV files as tables,
then run SELECT queries against them.
"""

import argparse
import logging
import sys
import select
from typing import List, Optional

from pydantic import ValidationError

from .config import EngineSettings
from .storage.csv_loader import load_csv
from .storage.database import Database
from .parser.parser import SQLParser
from .executor.executor import QueryExecutor
from .formatter import format_table_result, format_schema, format_load_result
from .utils.exceptions import TinyLakeError, SQLSyntaxError

logger = logging.getLogger(__name__)


def has_pending_input():
    """Check if there's input waiting in stdin (indicates paste)."""
    if not sys.stdin.isatty():
        return True
    try:
        r, _, _ = select.select([sys.stdin], [], [], 0)
        return bool(r)
    except (ValueError, OSError, TypeError):
        return False


def read_line_raw(prompt, suppress_if_pending=False):
    """
    Read a line using raw stdin to avoid readline interference.

    This prevents issues with paste operations where prompts
    can get mixed into the input buffer.
    """
    # Suppress prompt during paste operations
    if suppress_if_pending and has_pending_input():
        prompt = ""
    sys.stdout.write(prompt)
    sys.stdout.flush()
    line = sys.stdin.readline()
    if not line:  # EOF
        raise EOFError()
    return line.rstrip('\n\r')


def print_banner():
    """Print welcome banner."""
    print("=" * 60)
    print("  TinyLake - Interactive Query Shell")
    print("=" * 60)
    print("Type queries or special commands:")
    print("  Multi-line input supported - end with semicolon (;)")
    print("  .help     - Show help")
    print("  .load PATH [NAME] - Load a CSV file as a table")
    print("  .exit or .quit - Exit REPL")
    print("=" * 60)
    print()


def print_help():
    """Print help message."""
    print("\n--- Help ---")
    print("Query syntax:")
    print("  SELECT expr, ... FROM table [WHERE condition] [GROUP BY expr, ...]")
    print("  Operators: + - * /  > < =  AND OR")
    print("  Aggregates: COUNT(*) COUNT(x) SUM(x) AVG(x) MAX(x) MIN(x)")
    print("\nSpecial Commands:")
    print("  .help     - Show this help")
    print("  .load PATH [NAME] - Load a CSV file (name defaults to file stem)")
    print("  .tables   - List all tables")
    print("  .schema TABLE - Show schema for TABLE")
    print("  .stats    - Show database statistics")
    print("  .exit / .quit - Exit REPL")
    print()


def load_table(database: Database, path: str, name: Optional[str] = None):
    """Load a CSV file into the database, replacing a table of the same name."""
    table = load_csv(path, table_name=name)
    return database.add_table(table, replace=True)


def handle_special_command(command: str, database: Database) -> bool:
    """
    Handle special REPL commands (starting with .).

    Args:
        command: Command string
        database: Database instance

    Returns:
        True if should continue REPL, False to exit
    """
    parts = command.strip().rstrip(';').split()
    name = parts[0].lower()

    if name in ['.exit', '.quit']:
        print("Goodbye!")
        return False

    elif name == '.help':
        print_help()

    elif name == '.load':
        if len(parts) not in (2, 3):
            print("Usage: .load PATH [NAME]\n")
            return True
        try:
            table = load_table(database, parts[1], parts[2] if len(parts) == 3 else None)
            print(format_load_result(table) + "\n")
        except (TinyLakeError, OSError, ValueError) as e:
            print(f"Error: {e}\n")

    elif name == '.tables':
        tables = database.list_tables()
        if tables:
            print("\nTables:")
            for table in tables:
                row_count = database.get_table(table).row_count()
                print(f"  - {table} ({row_count} rows)")
        else:
            print("\nNo tables.")
        print()

    elif name == '.schema':
        if len(parts) < 2:
            print("Usage: .schema TABLE_NAME")
        else:
            table_name = parts[1]
            try:
                table = database.get_table(table_name)
                print(f"\nSchema for table '{table_name}':")
                for line in format_schema(table):
                    print(line)
                print()
            except TinyLakeError as e:
                print(f"Error: {e}\n")

    elif name == '.stats':
        stats = database.get_stats()
        print(f"\nDatabase Statistics:")
        print(f"  Name: {stats['name']}")
        print(f"  Tables: {stats['table_count']}")
        for table_name, table_stats in stats['tables'].items():
            print(f"    - {table_name}:")
            print(f"        Rows: {table_stats['row_count']}")
            print(f"        Columns: {table_stats['column_count']}")
            print(f"        Nulls: {table_stats['null_count']}")
        print()

    else:
        print(f"Unknown command: {name}")
        print("Type .help for available commands\n")

    return True


def run_query(sql: str, parser: SQLParser, executor: QueryExecutor) -> str:
    """
    Parse, execute and format one query.

    Raises:
        TinyLakeError: If parsing or execution fails
    """
    query = parser.parse(sql.strip().rstrip(';'))
    return format_table_result(executor.execute(query))


def repl(database: Optional[Database] = None, settings: Optional[EngineSettings] = None):
    """
    Run the interactive REPL.

    Reads queries, executes them, and displays results.
    Supports multi-line input - continues reading until semicolon is found.
    """
    print_banner()

    # Initialize components
    settings = settings or EngineSettings()
    database = database or Database("interactive")
    parser = SQLParser()
    executor = QueryExecutor(database, settings.coercion_policy)

    # Main loop
    while True:
        try:
            # Read command (possibly multi-line)
            sql_lines = []
            is_continuation = False

            while True:
                try:
                    if is_continuation:
                        # Suppress continuation prompt during paste
                        line = read_line_raw("    -> ", suppress_if_pending=True).strip()
                    else:
                        line = read_line_raw("tinylake> ").strip()
                except EOFError:
                    print("\nGoodbye!")
                    return

                # Accumulate non-empty lines
                if line:
                    sql_lines.append(line)

                    # Check if this is a special command
                    if line.startswith('.'):
                        break

                    # Check if statement is complete (ends with semicolon)
                    if line.endswith(';'):
                        break

                    # Continue reading
                    is_continuation = True
                else:
                    # Empty line with no accumulated content
                    if not sql_lines:
                        break
                    # Empty line in middle of statement, continue
                    is_continuation = True

            # Join all lines into complete query
            sql = ' '.join(sql_lines)

            if not sql:
                continue

            # Handle special commands
            if sql.startswith('.'):
                if not handle_special_command(sql, database):
                    break
                continue

            try:
                print(run_query(sql, parser, executor))
                print()
            except SQLSyntaxError as e:
                print(f"Syntax Error: {e}\n")
            except TinyLakeError as e:
                print(f"Error ({type(e).__name__}): {e}\n")

        except KeyboardInterrupt:
            print("\n\nInterrupted. Type .exit to quit.\n")
            continue
        except Exception:
            logger.exception("Unexpected error")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinylake",
        description="Interactive SELECT queries over CSV files.",
    )
    parser.add_argument(
        "--load",
        action="append",
        default=[],
        metavar="[NAME=]PATH",
        help="Load a CSV file before starting (repeatable)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Propagate operand errors in binary expressions instead of treating them as NULL",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: WARNING)")
    parser.add_argument(
        "-c", "--command",
        default=None,
        help="Run one query, print the result and exit",
    )
    return parser


def _split_load_spec(spec: str, default_name: Optional[str]):
    if '=' in spec:
        name, path = spec.split('=', 1)
        return name, path
    return default_name, spec


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        settings = EngineSettings.from_env(
            coercion_policy="strict" if args.strict else None,
            log_level=args.log_level,
        )
    except ValidationError as e:
        print(f"Error: invalid settings: {e}", file=sys.stderr)
        return 2
    settings.configure_logging()

    database = Database("interactive")
    for i, spec in enumerate(args.load):
        # The first --load entry, when unnamed, takes the configured default table name
        default_name = settings.default_table if i == 0 else None
        name, path = _split_load_spec(spec, default_name)
        try:
            load_table(database, path, name)
        except (TinyLakeError, OSError, ValueError) as e:
            print(f"Error loading {path}: {e}", file=sys.stderr)
            return 1

    if args.command is not None:
        executor = QueryExecutor(database, settings.coercion_policy)
        try:
            print(run_query(args.command, SQLParser(), executor))
        except TinyLakeError as e:
            print(f"Error ({type(e).__name__}): {e}", file=sys.stderr)
            return 1
        return 0

    repl(database, settings)
    return 0


# Entry point for running as module
if __name__ == "__main__":
    sys.exit(main())
