import re
from typing import Any
from typing import Final
from typing import Self

from lxml import etree
from pydantic import Field

from imbue.one_testing.errors import InvalidXPathError
from imbue.one_testing.errors import XPathNotFoundError
from imbue.one_testing.errors import XPathValueParseError
from imbue.one_testing.errors import XmlDocumentParseError
from imbue.one_testing.frozen_model import FrozenModel
from imbue.one_testing.primitives import MAX_RESOURCE_ID
from imbue.one_testing.primitives import ResourceId
from imbue.one_testing.primitives import ResourceKind
from imbue.one_testing.pure import pure

# Same rules as an unsigned base-10 parse: digits only, no sign, no whitespace.
_UNSIGNED_INT_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9]+")

# The text is always handed to lxml as UTF-8, so any declared encoding must go.
_XML_DECLARATION_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*<\?xml[^>]*\?>")


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


def _parse_root(text: str) -> etree._Element:
    try:
        undeclared_text = _XML_DECLARATION_PATTERN.sub("", text, count=1)
        return etree.fromstring(undeclared_text.encode("utf-8"), parser=_make_parser())
    except etree.XMLSyntaxError as e:
        raise XmlDocumentParseError(f"Resource document is not well-formed XML: {e}") from e


@pure
def _stringify_xpath_result(result: Any) -> str | None:
    if isinstance(result, list):
        if not result:
            return None
        first = result[0]
        if isinstance(first, etree._Element):
            return "".join(first.itertext())
        return str(first)
    if isinstance(result, bool):
        return "true" if result else "false"
    if isinstance(result, float) and result.is_integer():
        return str(int(result))
    return str(result)


class XmlDocument(FrozenModel):
    """The XML body returned by an OpenNebula info call for a single resource."""

    text: str = Field(description="Raw XML text of the document")

    @classmethod
    def parse(cls, text: str) -> Self:
        """Build a document, failing early with XmlDocumentParseError if the text is not well formed."""
        _parse_root(text)
        return cls(text=text)

    @property
    def root_tag(self) -> str:
        return _parse_root(self.text).tag

    def xpath_text(self, path: str) -> str | None:
        """Return the string value of the first node matching path, or None when nothing matches.

        Element matches yield their text content, attribute and text() matches
        their value. Scalar expressions such as count() always produce a value.
        """
        root = _parse_root(self.text)
        try:
            result = root.xpath(path)
        except etree.XPathError as e:
            raise InvalidXPathError(path, str(e)) from e
        return _stringify_xpath_result(result)


def extract_int(document: XmlDocument, path: str) -> int:
    """Read the unsigned integer stored at path.

    Raises XPathNotFoundError when path matches nothing, and
    XPathValueParseError when it matches something that is not an unsigned
    integer in range (an empty element included).
    """
    raw_value = document.xpath_text(path)
    if raw_value is None:
        raise XPathNotFoundError(path)
    if _UNSIGNED_INT_PATTERN.fullmatch(raw_value) is None:
        raise XPathValueParseError(path, raw_value)
    value = int(raw_value)
    if value > MAX_RESOURCE_ID:
        raise XPathValueParseError(path, raw_value)
    return value


def extract_resource_id(document: XmlDocument, kind: ResourceKind | str) -> ResourceId:
    """Extract the ID of a resource from its info document, e.g. /VM/ID for a virtual machine."""
    return ResourceId(extract_int(document, f"/{kind}/ID"))
