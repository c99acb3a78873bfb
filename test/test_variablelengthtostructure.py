"""Tests for delimited and tag-value record inference."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemalyze.errors import OptionError, ParseError
from schemalyze.request import AnalysisRequest
from schemalyze.variablelengthtostructure import VariableLengthParser, split_delimited


def _request(content, **options):
    return AnalysisRequest(file_format='variable-length', content=content, schema_name='Products',
                           parser_options=options)


def _field_types(structure):
    return {child.name: child.type for child in structure.item.children}


class TestDelimited(unittest.TestCase):
    """Test cases for delimited records."""

    def setUp(self):
        self.parser = VariableLengthParser()

    def test_single_line_without_header(self):
        """Fields are named field1..N and typed from their values."""
        structure = self.parser.parse(_request("1|Product A|19.99|true"))
        self.assertTrue(structure.is_array)
        self.assertEqual(structure.name, 'Products')
        self.assertEqual(structure.item.name, 'item')
        self.assertEqual(_field_types(structure), {
            'field1': 'integer', 'field2': 'string', 'field3': 'number', 'field4': 'boolean'})

    def test_header_names(self):
        """The header line names the fields when hasHeader is set."""
        content = "id|name|price\n1|Widget|2.50\n2|Gadget|3"
        structure = self.parser.parse(_request(content, hasHeader='true'))
        self.assertEqual(structure.item.child_names, ['id', 'name', 'price'])
        self.assertEqual(_field_types(structure)['price'], 'number')

    def test_blank_header_names_are_synthesized(self):
        """Blank header cells get positional names."""
        structure = self.parser.parse(_request("id||name\n1|x|y", hasHeader='true'))
        self.assertEqual(structure.item.child_names, ['id', 'field2', 'name'])

    def test_duplicate_header(self):
        """A repeated header name is a parse error."""
        with self.assertRaises(ParseError):
            self.parser.parse(_request("id|id\n1|2", hasHeader='true'))

    def test_quoted_delimiter(self):
        """Delimiters inside quotes do not split and quotes are dropped."""
        self.assertEqual(split_delimited('a|"b|c"| d ', '|', '"'), ['a', 'b|c', 'd'])
        structure = self.parser.parse(_request('1|"Smith|Jones"|x'))
        self.assertEqual(len(structure.item.children), 3)

    def test_custom_delimiter(self):
        """Escaped tab delimiters are resolved."""
        structure = self.parser.parse(_request("1\tA", delimiter='\\t'))
        self.assertEqual(structure.item.child_names, ['field1', 'field2'])

    def test_field_count_mismatch_is_a_warning(self):
        """Lines with a different field count are reported, not rejected."""
        warnings = []
        structure = self.parser.parse(_request("1|A|B\n2|C"), warnings)
        self.assertEqual(len(structure.item.children), 3)
        self.assertEqual(len(warnings), 1)
        self.assertIn('Line 2', warnings[0])

    def test_skip_lines(self):
        """Leading lines can be skipped."""
        structure = self.parser.parse(_request("generated 2024\n1|A", skipLines='1'))
        self.assertEqual(_field_types(structure), {'field1': 'integer', 'field2': 'string'})

    def test_skip_lines_beyond_content(self):
        """Skipping every line is an option error."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request("1|A", skipLines='1'))

    def test_non_numeric_skip_lines(self):
        """skipLines must be an integer."""
        with self.assertRaises(OptionError) as ctx:
            self.parser.parse(_request("1|A", skipLines='two'))
        self.assertEqual(ctx.exception.option_name, 'skipLines')

    def test_multi_character_delimiter(self):
        """Delimited mode needs a single-character delimiter."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request("1||A", delimiter='||'))

    def test_empty_content(self):
        """Content without data lines is a parse error."""
        with self.assertRaises(ParseError):
            self.parser.parse(_request("\n\n"))

    def test_merge_widens_types(self):
        """Merging samples widens disagreeing columns to string."""
        first = self.parser.parse(_request("1|Product A|19.99|true"))
        second = self.parser.parse(_request("ABC|Product B|20|false"))
        merged = self.parser.merge_samples([first, second])
        self.assertEqual(_field_types(merged), {
            'field1': 'string', 'field2': 'string', 'field3': 'number', 'field4': 'boolean'})

    def test_merge_single_sample(self):
        """Merging one sample returns it unchanged."""
        structure = self.parser.parse(_request("1|A"))
        self.assertEqual(self.parser.merge_samples([structure]), structure)


class TestTagValue(unittest.TestCase):
    """Test cases for TAG=VALUE records."""

    def setUp(self):
        self.parser = VariableLengthParser()

    def test_tag_value_fields(self):
        """Tags name the fields and values type them."""
        structure = self.parser.parse(_request("ID=1|NAME=Widget|PRICE=9.99|INSTOCK=true", tagValuePairs='true'))
        self.assertEqual(_field_types(structure), {
            'ID': 'integer', 'NAME': 'string', 'PRICE': 'number', 'INSTOCK': 'boolean'})

    def test_merged_samples_mark_missing_tags_optional(self):
        """A tag missing from one sample is optional after merging."""
        first = self.parser.parse(_request("ID=1|NAME=X", tagValuePairs='true'))
        second = self.parser.parse(_request("ID=2|NAME=Y|EXTRA=Z", tagValuePairs='true'))
        merged = self.parser.merge_samples([first, second])
        fields = {child.name: child for child in merged.item.children}
        self.assertEqual(list(fields), ['ID', 'NAME', 'EXTRA'])
        self.assertTrue(fields['ID'].required)
        self.assertTrue(fields['NAME'].required)
        self.assertFalse(fields['EXTRA'].required)

    def test_missing_tag_within_sample(self):
        """A tag absent from some records of a sample is optional."""
        structure = self.parser.parse(_request("ID=1|NAME=X\nID=2", tagValuePairs='true'))
        fields = {child.name: child for child in structure.item.children}
        self.assertTrue(fields['ID'].required)
        self.assertFalse(fields['NAME'].required)

    def test_custom_separators(self):
        """Pair and tag separators can be changed, including multi-character ones."""
        structure = self.parser.parse(_request("ID:1;;NAME:X", tagValuePairs='true', delimiter=';;',
                                               tagValueDelimiter=':'))
        self.assertEqual(structure.item.child_names, ['ID', 'NAME'])

    def test_invalid_pair_is_a_warning(self):
        """Pairs without a separator are reported and skipped."""
        warnings = []
        structure = self.parser.parse(_request("ID=1|garbage|NAME=X", tagValuePairs='true'), warnings)
        self.assertEqual(structure.item.child_names, ['ID', 'NAME'])
        self.assertTrue(any('garbage' in w for w in warnings))

    def test_invalid_boolean_option(self):
        """tagValuePairs must be true or false."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request("ID=1", tagValuePairs='maybe'))


if __name__ == '__main__':
    unittest.main()
