"""Tests for BeanIO hint generation."""

import copy
import os
import sys
import unittest

from jsonschema import Draft7Validator

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemalyze.schemaoptimizer import SchemaOptimizer
from schemalyze.structure import FileFormat


def _record_schema():
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "Orders",
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "ORDER_ID": {"type": "integer"},
                "customer-name": {"type": "string"},
                "amount": {"type": "number"},
                "lines": {"type": "array", "items": {"type": "object", "properties": {"sku": {"type": "string"}}}},
            },
        },
    }


class TestSchemaOptimizer(unittest.TestCase):
    """Test cases for the schema optimizer."""

    def setUp(self):
        self.optimizer = SchemaOptimizer()

    def test_disabled_hints_leave_schema_unchanged(self):
        """Without hints the result equals the input."""
        schema = _record_schema()
        result = self.optimizer.optimize(schema, FileFormat.CSV, False)
        self.assertEqual(result, schema)
        self.assertIsNot(result, schema)

    def test_input_is_not_modified(self):
        """The optimizer works on a copy."""
        schema = _record_schema()
        original = copy.deepcopy(schema)
        self.optimizer.optimize(schema, FileFormat.CSV, True)
        self.assertEqual(schema, original)

    def test_beanio_block(self):
        """The document gets stream format and generation flags."""
        result = self.optimizer.optimize(_record_schema(), FileFormat.FIXED_LENGTH, True)
        self.assertEqual(result['x-beanio'], {'streamFormat': 'fixedlength', 'generatePOJO': True, 'useBuilders': True})
        self.assertEqual(result['x-fixed-length'], {'format': 'fixedlength'})

    def test_field_hints(self):
        """Every property gets a Java name and type handler, nested ones included."""
        result = self.optimizer.optimize(_record_schema(), FileFormat.CSV, True)
        properties = result['items']['properties']
        self.assertEqual(properties['ORDER_ID']['x-java-field'], 'orderId')
        self.assertEqual(properties['customer-name']['x-beanio-field'], {
            'name': 'customer-name', 'javaName': 'customerName', 'typeHandler': 'java.lang.String'})
        self.assertEqual(properties['amount']['x-beanio-field']['typeHandler'], 'java.math.BigDecimal')
        self.assertEqual(properties['lines']['x-beanio-field']['typeHandler'], 'java.util.List')
        self.assertEqual(properties['lines']['items']['properties']['sku']['x-java-field'], 'sku')

    def test_csv_positions(self):
        """Record-level properties are numbered in order."""
        result = self.optimizer.optimize(_record_schema(), 'csv', True, {'delimiter': ';', 'hasHeader': 'false'})
        self.assertEqual(result['x-csv'], {'delimiter': ';', 'hasHeader': False})
        positions = [p['x-csv-position'] for p in result['items']['properties'].values()]
        self.assertEqual(positions, [0, 1, 2, 3])
        self.assertNotIn('x-csv-position', result['items']['properties']['lines']['items']['properties']['sku'])

    def test_variable_length_hints(self):
        """Delimited records get the configured delimiter."""
        result = self.optimizer.optimize(_record_schema(), FileFormat.VARIABLE_LENGTH, True, {'delimiter': '\\t'})
        self.assertEqual(result['x-beanio']['streamFormat'], 'delimited')
        self.assertEqual(result['x-variable-length'], {'delimiter': '\t', 'format': 'delimited', 'tagValuePairs': False})
        self.assertEqual(result['items']['properties']['amount']['x-csv-position'], 2)

    def test_fixed_length_positions(self):
        """Fixed-length records number their fields with x-field-position."""
        result = self.optimizer.optimize(_record_schema(), FileFormat.FIXED_LENGTH, True)
        self.assertEqual(result['items']['properties']['customer-name']['x-field-position'], 1)

    def test_object_root_formats(self):
        """JSON and XML documents get their own blocks."""
        schema = {"type": "object", "properties": {"id": {"type": "integer"}}}
        json_result = self.optimizer.optimize(schema, FileFormat.JSON, True)
        self.assertEqual(json_result['x-json'], {'prettyPrint': True})
        xml_result = self.optimizer.optimize(schema, FileFormat.XML, True, {'preserveNamespaces': 'false'})
        self.assertEqual(xml_result['x-xml'], {'preserveNamespaces': False, 'includeAttributes': True})
        self.assertEqual(xml_result['properties']['id']['x-beanio-field']['typeHandler'], 'java.lang.Integer')

    def test_idempotent(self):
        """Optimizing twice equals optimizing once."""
        once = self.optimizer.optimize(_record_schema(), FileFormat.CSV, True)
        twice = self.optimizer.optimize(once, FileFormat.CSV, True)
        self.assertEqual(once, twice)

    def test_additive(self):
        """No key of the input is removed or changed."""
        schema = _record_schema()
        result = self.optimizer.optimize(schema, FileFormat.CSV, True)
        for key, value in schema.items():
            if key != 'items':
                self.assertEqual(result[key], value)
        for name, prop in schema['items']['properties'].items():
            self.assertEqual(result['items']['properties'][name]['type'], prop['type'])
        Draft7Validator.check_schema(result)


if __name__ == '__main__':
    unittest.main()
