"""Tests for CSV inference."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemalyze.csvtostructure import CsvParser
from schemalyze.errors import OptionError, ParseError
from schemalyze.request import AnalysisRequest


def _request(content, **options):
    return AnalysisRequest(file_format='csv', content=content, schema_name='Rows', parser_options=options)


def _field_types(structure):
    return {child.name: child.type for child in structure.item.children}


class TestCsvParser(unittest.TestCase):
    """Test cases for CSV parsing."""

    def setUp(self):
        self.parser = CsvParser()

    def test_header_and_types(self):
        """Columns are named by the header and typed by their values."""
        structure = self.parser.parse(_request("id,name,price,active\n1,Widget,2.50,true\n2,Gadget,3,false"))
        self.assertTrue(structure.is_array)
        self.assertEqual(structure.name, 'Rows')
        self.assertEqual(_field_types(structure), {
            'id': 'integer', 'name': 'string', 'price': 'number', 'active': 'boolean'})

    def test_no_header(self):
        """Without a header, columns are named field1..N."""
        structure = self.parser.parse(_request("1,A\n2,B", hasHeader='false'))
        self.assertEqual(_field_types(structure), {'field1': 'integer', 'field2': 'string'})

    def test_leading_zeros_stay_text(self):
        """Cells are read as text, so pandas does not coerce them."""
        structure = self.parser.parse(_request("code\n007\n010"))
        self.assertEqual(_field_types(structure), {'code': 'integer'})

    def test_delimiter_and_quotes(self):
        """Quoted cells may contain the delimiter."""
        structure = self.parser.parse(_request('id;desc\n1;"a; b"\n2;c', delimiter=';'))
        self.assertEqual(structure.item.child_names, ['id', 'desc'])

    def test_blank_cells(self):
        """Blank cells do not widen a column's type."""
        structure = self.parser.parse(_request("id,qty\n1,\n2,5"))
        self.assertEqual(_field_types(structure)['qty'], 'integer')

    def test_duplicate_header_names(self):
        """Repeated header names are made unique."""
        structure = self.parser.parse(_request("a,a\n1,2"))
        self.assertEqual(len(set(structure.item.child_names)), 2)

    def test_skip_lines(self):
        """Leading lines can be skipped."""
        structure = self.parser.parse(_request("exported by tool\nid,name\n1,A", skipLines='1'))
        self.assertEqual(structure.item.child_names, ['id', 'name'])

    def test_skip_lines_beyond_content(self):
        """Skipping every line is an option error."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request("id\n1", skipLines='5'))

    def test_header_only(self):
        """A header without rows yields untyped columns and a warning."""
        warnings = []
        structure = self.parser.parse(_request("id,name\n"), warnings)
        self.assertEqual(_field_types(structure), {'id': 'null', 'name': 'null'})
        self.assertEqual(len(warnings), 1)

    def test_long_rows_are_skipped(self):
        """Rows with extra fields are skipped with a warning."""
        warnings = []
        structure = self.parser.parse(_request("a,b\n1,2\n3,4,5\n6,7"), warnings)
        self.assertEqual(structure.item.child_names, ['a', 'b'])
        self.assertEqual(len(warnings), 1)

    def test_empty_content(self):
        """Empty content is a parse error."""
        with self.assertRaises(ParseError):
            self.parser.parse(_request(""))

    def test_multi_character_delimiter(self):
        """The delimiter must be a single character."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request("a||b", delimiter='||'))

    def test_merge_adds_optional_columns(self):
        """Columns present in only one sample become optional."""
        first = self.parser.parse(_request("id,name\n1,A"))
        second = self.parser.parse(_request("id,email\n2,b@example.com"))
        merged = self.parser.merge_samples([first, second])
        fields = {child.name: child.required for child in merged.item.children}
        self.assertEqual(fields, {'id': True, 'name': False, 'email': False})


if __name__ == '__main__':
    unittest.main()
