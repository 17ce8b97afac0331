"""
SVG Document

Loads SVG files into an lxml tree for querying and writes them back by
patching the root <svg> start tag in the original text. Everything outside
the rewritten attributes, entity and character references included, is
copied through unchanged.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from lxml import etree

REWRITTEN_ATTRIBUTES = ('viewBox', 'width', 'height')

XML_DECLARATION_RE = re.compile(r'^\s*<\?xml[^>]*\?>')

# Markup that may contain text looking like a start tag, followed by start tags
MARKUP_RE = re.compile(
    r'<!--.*?-->'
    r'|<!\[CDATA\[.*?\]\]>'
    r'|<\?.*?\?>'
    r'|<!DOCTYPE[^\[>]*(?:\[.*?\]\s*)?>'
    r'|<(?P<name>[^\s/>!?]+)(?P<attrs>(?:\s+[^\s=/>]+\s*=\s*(?:"[^"]*"|\'[^\']*\'))*)',
    re.DOTALL,
)
ATTRIBUTE_RE = re.compile(r'(\s+)([^\s=/>]+)(\s*=\s*)(?:"([^"]*)"|\'([^\']*)\')')


@dataclass
class SvgDocument:
    """A parsed SVG file plus the source text it was parsed from."""
    tree: etree._ElementTree
    source: str
    root_attributes: Dict[str, Optional[str]] = field(default_factory=dict)


def load_svg_content(svg_path):
    """Load SVG content from file."""
    with open(svg_path, 'r', encoding='utf-8') as f:
        return f.read()


def make_parser():
    return etree.XMLParser(
        resolve_entities=False,
        remove_blank_text=False,
        remove_comments=False,
        remove_pis=False,
        strip_cdata=False,
        huge_tree=True,
    )


def protect_references(markup):
    """Escape every '&' so references parse as literal text.

    Undeclared entities such as &nbsp; then parse, and no reference is
    decoded into the tree.
    """
    return markup.replace('&', '&amp;')


def parse_svg_document(svg_content: str) -> SvgDocument:
    """Parse SVG markup into an SvgDocument.

    lxml refuses unicode input that carries an encoding declaration, so the
    declaration is dropped from the parser input. The source text itself is
    kept whole for serialization.
    """
    body = svg_content.lstrip('\ufeff')
    match = XML_DECLARATION_RE.match(body)
    if match:
        body = body[match.end():]

    root = etree.fromstring(protect_references(body), make_parser())
    document = SvgDocument(tree=root.getroottree(), source=svg_content)

    svg_root = find_svg_root(document)
    if svg_root is not None:
        document.root_attributes = {name: svg_root.get(name) for name in REWRITTEN_ATTRIBUTES}
    return document


def load_svg_document(svg_path) -> SvgDocument:
    """Read and parse an SVG file. Syntax errors propagate to the caller."""
    return parse_svg_document(load_svg_content(svg_path))


def find_svg_root(document: SvgDocument) -> Optional[etree._Element]:
    """Return the first <svg> element in document order, or None."""
    return next(document.tree.getroot().iter('{*}svg'), None)


def find_path_elements(document: SvgDocument):
    """Return every <path> element in document order."""
    return list(document.tree.getroot().iter('{*}path'))


def find_svg_start_tag(source):
    """Return the match for the first <svg ...> start tag in source."""
    for match in MARKUP_RE.finditer(source):
        name = match.group('name')
        if name and name.split(':')[-1] == 'svg':
            return match
    raise ValueError('<svg> start tag not found in source')


def rewrite_attributes(attrs, updates):
    """Set attributes in a start tag's attribute text, keeping the others as written."""
    pending = dict(updates)

    def replace(match):
        name = match.group(2)
        if name not in pending:
            return match.group(0)
        quote = '"' if match.group(4) is not None else "'"
        return f"{match.group(1)}{name}{match.group(3)}{quote}{pending.pop(name)}{quote}"

    attrs = ATTRIBUTE_RE.sub(replace, attrs)
    for name, value in pending.items():
        attrs += f' {name}="{value}"'
    return attrs


def serialize_svg_document(document: SvgDocument) -> str:
    """Return the source text with the changed root attributes patched in."""
    svg_root = find_svg_root(document)
    if svg_root is None:
        return document.source

    updates = {}
    for name in REWRITTEN_ATTRIBUTES:
        value = svg_root.get(name)
        if value is not None and value != document.root_attributes.get(name):
            updates[name] = value
    if not updates:
        return document.source

    source = document.source
    match = find_svg_start_tag(source)
    start, end = match.span('attrs')
    return source[:start] + rewrite_attributes(match.group('attrs'), updates) + source[end:]


def write_svg_document(document: SvgDocument, svg_path):
    """Overwrite svg_path with the serialized document."""
    with open(svg_path, 'w', encoding='utf-8') as f:
        f.write(serialize_svg_document(document))
