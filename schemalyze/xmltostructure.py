"""
Infers a structure tree from an XML document.

Elements become objects, leaf text becomes primitive fields, attributes are
kept as element attributes, and repeated sibling elements can be grouped
into arrays.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from lxml import etree

from schemalyze.errors import ParseError
from schemalyze.structure import (ITEM_NAME, OBJECT, STRING, TEXT_NAME, ElementAttribute, FileFormat,
                                  StructureElement, array_element)
from schemalyze.structuremerge import merge_structure_list
from schemalyze.typeinference import infer_type

logger = logging.getLogger(__name__)

FORMAT = FileFormat.XML.code
CDATA_DESCRIPTION = "CDATA"
XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


class XmlParser:
    """Parser for XML documents."""

    file_format = FileFormat.XML
    implemented = True

    def can_handle(self, request) -> bool:
        return request is not None and request.file_format == self.file_format

    def available_options(self) -> Dict[str, str]:
        return {
            'preserveNamespaces': "Keep namespace prefixes in element names (default: true)",
            'includeAttributes': "Include XML attributes in the structure (default: true)",
            'detectCDATA': "Mark CDATA sections as string fields (default: true)",
            'encoding': "Character encoding of byte content (default: taken from the XML declaration)",
        }

    def parse(self, request, warnings: Optional[List[str]] = None) -> StructureElement:
        """
        Infer the element tree of one document.

        Args:
            request: The analysis request holding the content and options.
            warnings: Not used by this parser; accepted for a uniform call signature.

        Returns:
            StructureElement: The root element; an object unless it only holds text.

        Raises:
            OptionError: If a boolean option is not 'true' or 'false'.
            ParseError: If the document is empty or not well-formed.
        """
        settings = _Settings(
            preserve_namespaces=request.get_bool_option('preserveNamespaces', True),
            include_attributes=request.get_bool_option('includeAttributes', True),
            detect_cdata=request.get_bool_option('detectCDATA', True),
            detect_arrays=request.detect_arrays if request.detect_arrays is not None else True)
        root = self._read_document(request)
        structure = _element_to_structure(root, settings)
        logger.debug("Parsed XML document with root '%s' and %d elements", structure.name, structure.count_elements())
        return structure

    def merge_samples(self, structures: Sequence[StructureElement]) -> StructureElement:
        return merge_structure_list(structures, FORMAT)

    def _read_document(self, request):
        if request.content is not None:
            data = request.content.encode('utf-8')
            encoding = 'utf-8'
        else:
            data = request.content_bytes
            encoding = request.encoding if request.has_option('encoding') else None
        if not data.strip():
            raise ParseError("XML content is empty", FORMAT)
        parser = etree.XMLParser(encoding=encoding, remove_comments=True, remove_pis=True,
                                 strip_cdata=False, resolve_entities=False, no_network=True)
        try:
            return etree.fromstring(data, parser)
        except etree.XMLSyntaxError as e:
            raise ParseError(f"Malformed XML: {e.msg}", FORMAT, e.lineno) from e


@dataclass
class _Settings:
    preserve_namespaces: bool
    include_attributes: bool
    detect_cdata: bool
    detect_arrays: bool


def _qualified_name(element, tag: str, settings: _Settings, is_attribute: bool = False) -> Tuple[str, Optional[str]]:
    """Element or attribute name, with its namespace prefix when prefixes are preserved."""
    qname = etree.QName(tag)
    if not settings.preserve_namespaces or not qname.namespace:
        return qname.localname, None
    if not is_attribute:
        prefix = element.prefix
    else:
        # attributes never use the default namespace; the xml prefix is bound implicitly
        if qname.namespace == XML_NAMESPACE:
            prefix = 'xml'
        else:
            prefix = next((p for p, uri in element.nsmap.items() if p and uri == qname.namespace), None)
    if not prefix:
        return qname.localname, None
    return f"{prefix}:{qname.localname}", prefix


def _attributes(element, settings: _Settings) -> Tuple[ElementAttribute, ...]:
    if not settings.include_attributes:
        return ()
    result = []
    for key, value in element.attrib.items():
        name, prefix = _qualified_name(element, key, settings, is_attribute=True)
        attribute_type = infer_type(value)
        result.append(ElementAttribute(name=name, type=attribute_type if value.strip() else STRING,
                                       required=True, namespace=prefix))
    return tuple(result)


def _is_cdata(element) -> bool:
    return b'<![CDATA[' in etree.tostring(element, with_tail=False)


def _element_to_structure(element, settings: _Settings) -> StructureElement:
    name, prefix = _qualified_name(element, element.tag, settings)
    attributes = _attributes(element, settings)
    children = [child for child in element if isinstance(child.tag, str)]
    text = (element.text or '').strip()

    if not children:
        if settings.detect_cdata and text and _is_cdata(element):
            text_type, description = STRING, CDATA_DESCRIPTION
        else:
            text_type, description = (infer_type(text) if text else STRING), None
        if not attributes:
            return StructureElement(name=name, type=text_type, namespace=prefix, description=description)
        text_children = (StructureElement(name=TEXT_NAME, type=text_type, description=description),) if text else ()
        return StructureElement(name=name, type=OBJECT, attributes=attributes,
                                children=text_children, namespace=prefix)

    groups: Dict[str, List] = {}
    for child in children:
        child_name, _ = _qualified_name(child, child.tag, settings)
        groups.setdefault(child_name, []).append(child)

    members = []
    for child_name, occurrences in groups.items():
        first = _element_to_structure(occurrences[0], settings)
        if settings.detect_arrays and len(occurrences) > 1:
            item = StructureElement(name=ITEM_NAME, type=first.type, attributes=first.attributes,
                                    children=first.children, description=first.description)
            members.append(array_element(child_name, item, namespace=first.namespace, min_occurs=1))
        else:
            members.append(first)
    return StructureElement(name=name, type=OBJECT, attributes=attributes,
                            children=tuple(members), namespace=prefix)
