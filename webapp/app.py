"""
Flask web application exposing the query engine as a JSON API.

Endpoints:
- GET  /api/tables              list tables with row counts
- GET  /api/tables/<name>       schema and a preview of the first rows
- POST /api/query {"sql": ...}  run a query, return columns and rows

Tables are loaded from CSV files named in TINYLAKE_CSV
(comma-separated NAME=PATH or PATH entries) when run directly.
"""

from flask import Flask, request, jsonify
import logging
import math
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from tinylake.config import EngineSettings
from tinylake.storage.csv_loader import load_csv
from tinylake.storage.database import Database
from tinylake.parser.parser import SQLParser
from tinylake.executor.executor import QueryExecutor
from tinylake.utils.exceptions import TinyLakeError, TableNotFoundError
from tinylake.utils.row_utils import table_to_records, table_to_rows

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10


def _json_cell(value):
    # JSON has no inf/nan
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


def _error(e: TinyLakeError, status: int = 400):
    return jsonify({'error': str(e), 'kind': type(e).__name__}), status


def create_app(database: Database = None, settings: EngineSettings = None) -> Flask:
    """
    Build the Flask app around a database.

    Args:
        database: Catalog to query (empty if omitted)
        settings: Engine settings (defaults from the environment)
    """
    app = Flask(__name__)
    database = database if database is not None else Database("web")
    settings = settings or EngineSettings.from_env()
    parser = SQLParser()
    executor = QueryExecutor(database, settings.coercion_policy)

    @app.route('/api/tables', methods=['GET'])
    def list_tables():
        """List loaded tables."""
        return jsonify([
            {'name': name, 'row_count': database.get_table(name).row_count()}
            for name in database.list_tables()
        ])

    @app.route('/api/tables/<name>', methods=['GET'])
    def describe_table(name):
        """Schema plus the first rows of a table."""
        try:
            table = database.get_table(name)
        except TableNotFoundError as e:
            return _error(e, 404)
        preview = [
            {col: _json_cell(value) for col, value in row.items()}
            for row in table_to_rows(table, limit=PREVIEW_ROWS)
        ]
        return jsonify({
            'name': table.name,
            'row_count': table.row_count(),
            'fields': [f.to_dict() for f in table.fields],
            'preview': preview,
        })

    @app.route('/api/query', methods=['POST'])
    def run_query():
        """Parse and execute a query."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        sql = data.get('sql')
        if not isinstance(sql, str) or not sql.strip():
            return jsonify({'error': "Request body must contain a non-empty 'sql' string"}), 400

        try:
            query = parser.parse(sql.strip().rstrip(';'))
            result = executor.execute(query)
        except TableNotFoundError as e:
            return _error(e, 404)
        except TinyLakeError as e:
            logger.info("Query failed: %s", e)
            return _error(e)

        return jsonify({
            'query': str(query),
            'columns': result.column_names,
            'rows': [[_json_cell(v) for v in record] for record in table_to_records(result)],
            'row_count': result.num_rows,
        })

    return app


def load_from_env(database: Database, sources: str) -> None:
    """Load each NAME=PATH (or PATH) entry of a comma-separated list."""
    for entry in filter(None, (part.strip() for part in sources.split(','))):
        name, _, path = entry.rpartition('=')
        database.add_table(load_csv(path, table_name=name or None), replace=True)


if __name__ == '__main__':
    settings = EngineSettings.from_env()
    settings.configure_logging()
    db = Database("web")
    load_from_env(db, os.environ.get('TINYLAKE_CSV', ''))
    app = create_app(db, settings)
    print("\n" + "="*60)
    print("TinyLake Query API Running!")
    print("POST queries to http://localhost:5000/api/query")
    print("="*60 + "\n")
    app.run(debug=True, port=5000)
