"""Tests for XML document inference."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from schemalyze.errors import OptionError, ParseError
from schemalyze.request import AnalysisRequest
from schemalyze.xmltostructure import XmlParser

CUSTOMER_1 = """<?xml version="1.0" encoding="UTF-8"?>
<customer id="100">
    <name>John Doe</name>
    <age>42</age>
    <email>john@example.com</email>
</customer>"""

CUSTOMER_2 = """<customer id="101">
    <name>Jane Roe</name>
    <age>37</age>
    <phone>555-1234</phone>
</customer>"""

ORDERS = """<orders>
    <order number="1"><total>10.50</total></order>
    <order number="2"><total>7</total></order>
    <!-- trailing comment -->
</orders>"""


def _request(content, detect_arrays=None, **options):
    return AnalysisRequest(file_format='xml', content=content, detect_arrays=detect_arrays, parser_options=options)


class TestXmlParser(unittest.TestCase):
    """Test cases for XML parsing."""

    def setUp(self):
        self.parser = XmlParser()

    def test_elements_and_attributes(self):
        """Child elements become fields and attributes are kept."""
        structure = self.parser.parse(_request(CUSTOMER_1))
        self.assertEqual(structure.name, 'customer')
        self.assertEqual(structure.type, 'object')
        self.assertEqual([(c.name, c.type) for c in structure.children], [
            ('name', 'string'), ('age', 'integer'), ('email', 'string')])
        attribute = structure.find_attribute('id')
        self.assertEqual(attribute.type, 'integer')
        self.assertTrue(attribute.required)

    def test_exclude_attributes(self):
        """includeAttributes=false drops attributes."""
        structure = self.parser.parse(_request(CUSTOMER_1, includeAttributes='false'))
        self.assertFalse(structure.has_attributes)

    def test_repeated_elements_become_arrays(self):
        """Repeated siblings are grouped into an array with one item."""
        structure = self.parser.parse(_request(ORDERS))
        order = structure.find_child('order')
        self.assertTrue(order.is_array)
        self.assertEqual(order.max_occurs, -1)
        self.assertEqual(order.item.name, 'item')
        self.assertEqual(order.item.child_names, ['total'])
        self.assertIsNotNone(order.item.find_attribute('number'))
        self.assertEqual(structure.array_paths(), ['orders.order'])

    def test_array_detection_disabled(self):
        """Without array detection the first occurrence is used."""
        structure = self.parser.parse(_request(ORDERS, detect_arrays=False))
        order = structure.find_child('order')
        self.assertEqual(order.type, 'object')
        self.assertEqual(structure.array_paths(), [])

    def test_text_with_attributes(self):
        """Elements with attributes and text get a '#text' child."""
        structure = self.parser.parse(_request('<price currency="EUR">9.99</price>'))
        self.assertEqual(structure.type, 'object')
        self.assertEqual(structure.children[0].name, '#text')
        self.assertEqual(structure.children[0].type, 'number')

    def test_empty_leaf_is_string(self):
        """Empty leaves are strings."""
        structure = self.parser.parse(_request('<root><comment/></root>'))
        self.assertEqual(structure.find_child('comment').type, 'string')

    def test_text_only_root_is_primitive(self):
        """A root with only text is a primitive node."""
        structure = self.parser.parse(_request('<count>12</count>'))
        self.assertEqual(structure.type, 'integer')

    def test_namespaces_preserved(self):
        """Prefixes stay in names and become namespaces."""
        content = '<ns:order xmlns:ns="urn:orders" ns:ref="A1"><ns:id>5</ns:id></ns:order>'
        structure = self.parser.parse(_request(content))
        self.assertEqual(structure.name, 'ns:order')
        self.assertEqual(structure.namespace, 'ns')
        self.assertEqual(structure.children[0].name, 'ns:id')
        self.assertEqual(structure.attributes[0].name, 'ns:ref')
        self.assertEqual(structure.attributes[0].namespace, 'ns')

    def test_xml_namespace_attributes(self):
        """Attributes in the built-in xml namespace keep their prefix."""
        structure = self.parser.parse(_request('<note xml:lang="en"><body>Hi</body></note>'))
        self.assertEqual(structure.attributes[0].name, 'xml:lang')
        self.assertEqual(structure.attributes[0].namespace, 'xml')
        structure = self.parser.parse(_request('<note xml:lang="en"/>', preserveNamespaces='false'))
        self.assertEqual(structure.attributes[0].name, 'lang')

    def test_namespaces_stripped(self):
        """preserveNamespaces=false keeps local names only."""
        content = '<ns:order xmlns:ns="urn:orders"><ns:id>5</ns:id></ns:order>'
        structure = self.parser.parse(_request(content, preserveNamespaces='false'))
        self.assertEqual(structure.name, 'order')
        self.assertIsNone(structure.namespace)
        self.assertEqual(structure.child_names, ['id'])

    def test_cdata(self):
        """CDATA sections are strings marked as CDATA."""
        content = '<root><body><![CDATA[42]]></body><size>42</size></root>'
        structure = self.parser.parse(_request(content))
        body = structure.find_child('body')
        self.assertEqual(body.type, 'string')
        self.assertEqual(body.description, 'CDATA')
        self.assertEqual(structure.find_child('size').type, 'integer')
        plain = self.parser.parse(_request(content, detectCDATA='false'))
        self.assertEqual(plain.find_child('body').type, 'integer')

    def test_invalid_option(self):
        """Boolean options must be true or false."""
        with self.assertRaises(OptionError):
            self.parser.parse(_request(CUSTOMER_1, preserveNamespaces='yes'))

    def test_malformed(self):
        """Malformed markup is a parse error."""
        with self.assertRaises(ParseError):
            self.parser.parse(_request('<root><open></root>'))
        with self.assertRaises(ParseError):
            self.parser.parse(_request(''))

    def test_bytes_content(self):
        """Byte content is decoded using the XML declaration."""
        content = '<?xml version="1.0" encoding="ISO-8859-1"?><city>Zürich</city>'.encode('iso-8859-1')
        request = AnalysisRequest(file_format='xml', content_bytes=content)
        self.assertEqual(self.parser.parse(request).type, 'string')

    def test_merge_customers(self):
        """Merging samples picks up every element and marks one-sided ones optional."""
        merged = self.parser.merge_samples([
            self.parser.parse(_request(CUSTOMER_1)),
            self.parser.parse(_request(CUSTOMER_2)),
        ])
        fields = {c.name: c.required for c in merged.children}
        self.assertEqual(fields, {'name': True, 'age': True, 'email': False, 'phone': False})
        self.assertTrue(merged.find_attribute('id').required)

    def test_merge_single_occurrence_with_array(self):
        """An element repeated in one sample and single in another is an array."""
        single = '<orders><order number="3"><total>1</total><note>x</note></order></orders>'
        merged = self.parser.merge_samples([
            self.parser.parse(_request(ORDERS)),
            self.parser.parse(_request(single)),
        ])
        order = merged.find_child('order')
        self.assertTrue(order.is_array)
        self.assertEqual(order.item.child_names, ['total', 'note'])
        self.assertEqual(order.item.find_child('total').type, 'number')
        self.assertFalse(order.item.find_child('note').required)


if __name__ == '__main__':
    unittest.main()
