"""Tests for CSV export: column schema, list packing and write/read fidelity."""
import csv

import pytest

from collections_explorer.analyzer.records import (
    ImportRecord,
    ObjectCreationRecord,
    StreamChainRecord,
    VariableDeclRecord,
    column_names,
)
from collections_explorer.report.context import AnalysisKind, ReportContext
from collections_explorer.report.exporter import (
    decode_list,
    encode_list,
    export_reports,
    read_info,
    write_info,
)


def _header(path):
    with open(path, newline='', encoding='utf-8') as f:
        return next(csv.reader(f))


class TestListPacking:
    """List-valued fields survive packing into a single cell."""

    @pytest.mark.parametrize('values', [
        ['a', 'b'],
        ['x | y', 'plain'],
        ['say "hi"', ''],
        ['line one\nline two', 'a,b'],
        [''],
    ])
    def test_decode_inverts_encode(self, values):
        assert decode_list(encode_list(values)) == values

    def test_empty_list_and_single_empty_string_differ(self):
        assert encode_list([]) == ''
        assert encode_list(['']) != ''
        assert decode_list(encode_list([])) == []

    def test_plain_items_joined_by_pipe(self):
        assert encode_list(['String', 'Integer']) == 'String|Integer'


class TestWriteInfo:
    """Header first, then one row per record in input order."""

    def test_header_is_record_fields(self, tmp_path):
        output = tmp_path / 'object_creation.csv'
        write_info(output, [], ObjectCreationRecord)

        assert _header(output) == [
            'class_name', 'object_type', 'full_object_type',
            'argument_types', 'arguments', 'line', 'col',
        ]

    def test_object_creations_read_back_unchanged(self, tmp_path):
        records = [
            ObjectCreationRecord('Foo', 'ArrayList', 'java.util.ArrayList', ['String'], ['10'], 3, 20),
            ObjectCreationRecord('Foo', 'Pair', 'Pair', ['A', 'B'], ['"a|b"', 'x -> {\n  return x;\n}'], 7, 9),
            ObjectCreationRecord('Bar', 'Widget', 'Widget', [], [''], -1, -1),
        ]
        output = tmp_path / 'object_creation.csv'

        assert write_info(output, records, ObjectCreationRecord) == 3
        assert read_info(output, ObjectCreationRecord) == records

    def test_stream_chains_read_back_unchanged(self, tmp_path):
        records = [
            StreamChainRecord(
                'ClassA', 'demo',
                'map.values().stream().filter(x -> x.equals("a,b")).collect(Collectors.joining("|"))',
                ['joining', 'values', 'stream', 'filter', 'collect'],
                'java.util.stream.Stream<java.lang.Integer>', 12, 9,
            ),
        ]
        output = tmp_path / 'stream_api_usage.csv'
        write_info(output, records, StreamChainRecord)
        assert read_info(output, StreamChainRecord) == records

    @pytest.mark.parametrize('record', [
        ImportRecord('A', 'demo', '*', 'java.util', 2, 1),
        VariableDeclRecord('A', 'Map<String, List<Integer>>', 'index', 5, 34),
    ])
    def test_scalar_records_read_back_unchanged(self, tmp_path, record):
        output = tmp_path / 'report.csv'
        write_info(output, [record], type(record))
        assert read_info(output, type(record)) == [record]


class TestExportReports:
    """One file per configured kind, named after the kind."""

    def test_only_configured_kinds_are_written(self, tmp_path):
        context = ReportContext.for_kinds([AnalysisKind.IMPORT, AnalysisKind.STREAM_USAGE])
        written = export_reports(context, tmp_path / 'reports')

        assert [p.name for p in written] == ['import_declaration.csv', 'stream_api_usage.csv']
        assert sorted(p.name for p in (tmp_path / 'reports').iterdir()) == [
            'import_declaration.csv', 'stream_api_usage.csv',
        ]
        assert _header(written[1]) == list(column_names(StreamChainRecord))

    def test_no_kinds_writes_nothing(self, tmp_path):
        assert export_reports(ReportContext.for_kinds([]), tmp_path) == []
        assert list(tmp_path.iterdir()) == []

    def test_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        written = export_reports(ReportContext.for_kinds([AnalysisKind.VARIABLE_DECLARATION]))
        assert [p.name for p in written] == ['variable_declaration.csv']
        assert (tmp_path / 'variable_declaration.csv').exists()
