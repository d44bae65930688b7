#!/usr/bin/env python3
"""
HTML to JSON Converter

Converts an HTML document into JSON that mirrors element nesting. Every element
is keyed by its tag name, or by ``tag#id`` when it carries an id attribute.
"""

import json
import sys
import logging
import argparse
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union

from bs4 import BeautifulSoup, Tag, NavigableString
from bs4 import FeatureNotFound, ParserRejectedMarkup
from bs4.element import PreformattedString

from html_source import AcquisitionError, get_html


logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "parser": "html.parser",  # options: html.parser | lxml (keeps the first of repeated attributes)
    "indent": 4,
    "ensure_ascii": False,
    "timeout": 30,
}

HELP_TEXT = """
HJ - HTML to JSON converter

Usage:
  hj [HTMLfilePath|URL]     - Read HTML from file or URL and convert to JSON
  cat file.html | hj -      - Read HTML from stdin and convert to JSON
  hj --help                 - Show this help message

Options:
  -c, --config FILE         - JSON config file (parser, indent, ensure_ascii, timeout)
  --parser NAME             - Tree builder: html.parser (default) or lxml
  -o, --output FILE         - Write JSON to FILE instead of stdout
  -v, --verbose             - Debug logging on stderr

Examples:
  hj index.html
  hj https://example.com
  cat test.html | hj -
"""


class HTMLToJSONError(Exception):
    """Base class for conversion failures."""


class ParseError(HTMLToJSONError):
    """The markup parser rejected the input."""


class SerializeError(HTMLToJSONError):
    """The converted structure could not be encoded as JSON."""


@dataclass
class Element:
    """Converted element. The id is folded into the wrapper key, not emitted."""

    attributes: Dict[str, str] = field(default_factory=dict)
    child: Union[None, str, List["ElementWrapper"]] = None
    identifier: str = ""

    def to_json(self) -> Dict[str, Any]:
        return ElementWrapper("", self).to_json()[""]


@dataclass
class ElementWrapper:
    """Single-entry mapping from generated key to element."""

    key: str
    element: Element

    def to_json(self) -> Dict[str, Any]:
        # Explicit stack: nesting depth is bounded by the document, not the interpreter.
        root: Dict[str, Any] = {}
        pending = [(self, root)]
        while pending:
            wrapper, target = pending.pop()
            element = wrapper.element
            value: Dict[str, Any] = {}
            if element.attributes:
                value["attributes"] = dict(element.attributes)
            if isinstance(element.child, list):
                items: List[Dict[str, Any]] = []
                for child in element.child:
                    item: Dict[str, Any] = {}
                    items.append(item)
                    pending.append((child, item))
                value["child"] = items
            elif element.child is not None:
                value["child"] = element.child
            target[wrapper.key] = value
        return root


# Result of walking one node: absent, trimmed text, or a keyed element.
WalkResult = Union[None, str, ElementWrapper]


def generate_element_key(tag_name: str, element_id: str) -> str:
    """Build the JSON key for an element from its tag name and id."""
    if element_id:
        return tag_name + "#" + element_id
    return tag_name


def merge_siblings(wrappers: List[ElementWrapper]) -> Dict[str, Any]:
    """
    Collapse sibling wrappers into one mapping.

    Siblings sharing a key overwrite each other, the last one wins. That loss
    is part of the format, so callers wanting every sibling should read the
    ``child`` list instead.
    """
    merged: Dict[str, Any] = {}
    for wrapper in wrappers:
        merged[wrapper.key] = wrapper.element.to_json()
    return merged


def _is_text_node(node) -> bool:
    # Comments, doctypes, CDATA and processing instructions all subclass
    # PreformattedString; script/style text does not.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


class _OpenElement:
    """An element whose children are still being visited."""

    def __init__(self, elem: Tag):
        self.name = elem.name
        self.nodes = iter(elem.children)
        self.children: List[ElementWrapper] = []
        self.text_parts: List[str] = []
        self.element = Element()

        for name, value in elem.attrs.items():
            if value is None:
                value = ""
            if name == "id":
                self.element.identifier = value
            else:
                self.element.attributes[name] = value

    def close(self) -> ElementWrapper:
        # Element children win over loose text in mixed content.
        if self.children:
            self.element.child = self.children
        elif self.text_parts:
            self.element.child = "".join(self.text_parts)

        key = generate_element_key(self.name, self.element.identifier)
        return ElementWrapper(key=key, element=self.element)


class HTMLToJSON:
    """Walks a parsed HTML tree and shapes it into keyed JSON."""

    def __init__(self, html_content: str, config: Optional[Dict[str, Any]] = None):
        merged_config = dict(DEFAULT_CONFIG)
        if config:
            merged_config.update(config)
        self.config = merged_config

        parser = self.config["parser"]
        try:
            self.soup = BeautifulSoup(html_content, parser, multi_valued_attributes=None)
        except (FeatureNotFound, ParserRejectedMarkup) as e:
            raise ParseError(f"failed to parse HTML: {e}") from e
        logger.debug("Parsed %d characters with %s", len(html_content), parser)

    def walk(self, node) -> WalkResult:
        """Convert one node. ``None`` means it contributes nothing to its parent."""
        if isinstance(node, BeautifulSoup):
            # Only the first top-level element is represented.
            for child in node.children:
                if isinstance(child, Tag):
                    return self.walk(child)
            return None

        if isinstance(node, Tag):
            return self._walk_element(node)

        if _is_text_node(node):
            text = node.strip()
            return text or None

        return None

    def _walk_element(self, root: Tag) -> ElementWrapper:
        # Depth-first with an explicit stack of open elements; each frame
        # resumes its own child iterator after a nested element closes.
        stack = [_OpenElement(root)]
        while True:
            frame = stack[-1]
            for child in frame.nodes:
                if isinstance(child, Tag):
                    stack.append(_OpenElement(child))
                    break
                if _is_text_node(child):
                    text = child.strip()
                    if text:
                        frame.text_parts.append(text)
            else:
                stack.pop()
                wrapper = frame.close()
                if not stack:
                    return wrapper
                stack[-1].children.append(wrapper)

    def transform(self) -> Optional[Dict[str, Any]]:
        """Return the document as plain JSON-ready data, or None when it has no element."""
        result = self.walk(self.soup)
        if result is None:
            return None
        return result.to_json()

    def to_json(self) -> str:
        """Serialize the document using the configured indentation."""
        structure = self.transform()
        # json's encoder recurses per container, so very deep documents can
        # still exceed the interpreter limit here.
        try:
            return json.dumps(
                structure,
                indent=self.config["indent"],
                ensure_ascii=self.config["ensure_ascii"],
            )
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializeError(f"failed to convert to JSON: {e}") from e


def html_to_json(html_content: str, config: Optional[Dict[str, Any]] = None) -> str:
    """Convert raw HTML text into indented JSON text."""
    return HTMLToJSON(html_content, config=config).to_json()


def show_help(stream=None):
    print(HELP_TEXT, file=stream or sys.stdout)


def _load_config(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        config = json.load(f)
    if not isinstance(config, dict):
        raise ValueError(f"config file must contain a JSON object: {path}")
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(prog='hj', description='Convert HTML to JSON', add_help=False)
    parser.add_argument('source', nargs='?', default='', help='HTML file path, URL, or - for stdin')
    parser.add_argument('-h', '--help', action='store_true', help='Show help')
    parser.add_argument('-c', '--config', help='JSON config file path')
    parser.add_argument('--parser', help='BeautifulSoup tree builder')
    parser.add_argument('-o', '--output', help='Output JSON file (optional, defaults to stdout)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging on stderr')
    args, extra = parser.parse_known_args(argv)

    # Unrecognised tokens are not usage errors: the first one is taken as
    # the source when no positional was given, the rest are ignored.
    source = args.source or (extra[0] if extra else "")

    if args.help or not source:
        show_help()
        return 0

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(levelname)s %(name)s: %(message)s")
    if extra:
        logger.debug("Ignoring extra arguments: %s", extra)

    config: Dict[str, Any] = {}
    try:
        if args.config:
            config.update(_load_config(args.config))
        if args.parser:
            config["parser"] = args.parser

        timeout = config.get("timeout", DEFAULT_CONFIG["timeout"])
        html_content = get_html(source, timeout=timeout)
        json_output = html_to_json(html_content, config=config)

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(json_output + "\n")
            print(f"Output saved to: {args.output}", file=sys.stderr)
        else:
            print(json_output)
    except (AcquisitionError, HTMLToJSONError, OSError, ValueError) as e:
        logger.debug("Conversion of %s failed", source, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info("Converted %s", source)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
