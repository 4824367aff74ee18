"""Unit tests for ResultSet and row materialization."""

import pandas as pd
import pytest
from sqlite_plugin.cancellation import CancellationToken
from sqlite_plugin.cursor import IterChunk, column_names, materialize
from sqlite_plugin.exceptions import CancellationError
from sqlite_plugin.result import ResultSet


class TestResultSet:

    def test_create_tags_result(self):
        result = ResultSet.create([{'a': 1}])
        assert result.kind == 'Data'
        assert result.format == 'Database'
        assert result.payload == [{'a': 1}]
        assert result.columns == ['a']
        assert result.id

    def test_ids_are_fresh(self):
        ids = {ResultSet.create([]).id for _ in range(10)}
        assert len(ids) == 10

    def test_to_dict(self):
        result = ResultSet.create([{'a': 1, 'b': 'x'}])
        assert result.to_dict() == {
            'id': result.id,
            'kind': 'Data',
            'format': 'Database',
            'payload': [{'a': 1, 'b': 'x'}],
        }

    def test_to_dataframe(self):
        result = ResultSet.create([{'name': 'Alice', 'value': 10}, {'name': 'Bob', 'value': 20}])
        df = result.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ['name', 'value']
        assert df.to_dict('list') == {'name': ['Alice', 'Bob'], 'value': [10, 20]}

    def test_to_dataframe_empty_keeps_columns(self):
        df = ResultSet.create([], columns=['name', 'value']).to_dataframe()
        assert df.empty
        assert list(df.columns) == ['name', 'value']

    def test_duplicate_columns_collapsed(self):
        result = ResultSet.create([{'a': 2}], columns=['a', 'a'])
        assert result.columns == ['a']


class TestMaterialize:

    def test_rows_in_cursor_order(self, create_mock_cursor):
        cursor = create_mock_cursor(description=[('id',), ('name',)],
                                    rows=[(2, 'b'), (1, 'a'), (3, 'c')])
        assert materialize(cursor) == [
            {'id': 2, 'name': 'b'},
            {'id': 1, 'name': 'a'},
            {'id': 3, 'name': 'c'},
        ]

    def test_values_passed_through(self, create_mock_cursor):
        blob = b'\x00\x01'
        cursor = create_mock_cursor(description=[('n',), ('b',), ('f',)], rows=[(None, blob, 1.5)])
        record = materialize(cursor)[0]
        assert record['n'] is None
        assert record['b'] is blob
        assert record['f'] == 1.5

    def test_duplicate_column_last_wins(self, create_mock_cursor):
        cursor = create_mock_cursor(description=[('a',), ('a',)], rows=[(1, 2)])
        assert materialize(cursor) == [{'a': 2}]
        assert column_names(cursor) == ['a', 'a']

    def test_no_result_columns(self, create_mock_cursor):
        cursor = create_mock_cursor(description=None)
        assert materialize(cursor) == []
        cursor.fetchmany.assert_not_called()

    def test_cancel_before_drain(self, create_mock_cursor):
        token = CancellationToken()
        token.cancel()
        cursor = create_mock_cursor(description=[('a',)], rows=[(1,)])
        with pytest.raises(CancellationError):
            materialize(cursor, token)

    def test_cancel_mid_iteration_raises_on_next_row(self, create_mock_cursor):
        token = CancellationToken()
        cursor = create_mock_cursor(description=[('a',)], rows=[(1,), (2,), (3,)])
        rows = IterChunk(cursor, cancellation=token)

        assert next(rows) == (1,)
        token.cancel()
        with pytest.raises(CancellationError):
            next(rows)
