"""Vue single-file component block extraction."""

import re
from dataclasses import dataclass, field
from typing import Dict, List

SCRIPT_PATTERN = re.compile(r'<script\b([^>]*)>([\s\S]*?)</script>', re.IGNORECASE)
STYLE_PATTERN = re.compile(r'<style\b([^>]*)>([\s\S]*?)</style>', re.IGNORECASE)
ATTR_PATTERN = re.compile(r'([\w-]+)(?:\s*=\s*("(.*?)"|\'(.*?)\'|[^\s"\'>]+))?')


@dataclass
class SfcBlock:
    """A <script> or <style> block of a component."""
    content: str
    attrs: Dict[str, str] = field(default_factory=dict)
    start_line: int = 1

    @property
    def src(self) -> str:
        return self.attrs.get('src', '').strip()

    @property
    def lang(self) -> str:
        return self.attrs.get('lang', '').strip().lower()


@dataclass
class SfcDescriptor:
    """Blocks found in a .vue file."""
    scripts: List[SfcBlock] = field(default_factory=list)
    styles: List[SfcBlock] = field(default_factory=list)


def parse_attrs(raw: str) -> Dict[str, str]:
    """Parse tag attributes; valueless attributes map to an empty string."""
    attrs = {}
    for match in ATTR_PATTERN.finditer(raw or ''):
        key = match.group(1)
        if match.group(3) is not None:
            value = match.group(3)
        elif match.group(4) is not None:
            value = match.group(4)
        else:
            value = match.group(2) or ''
        attrs[key] = value
    return attrs


def parse_sfc(content: str) -> SfcDescriptor:
    """Locate top-level script and style blocks by tag boundaries."""
    descriptor = SfcDescriptor()
    for pattern, blocks in ((SCRIPT_PATTERN, descriptor.scripts), (STYLE_PATTERN, descriptor.styles)):
        for match in pattern.finditer(content):
            blocks.append(SfcBlock(
                content=match.group(2) or '',
                attrs=parse_attrs(match.group(1)),
                start_line=content.count('\n', 0, match.start()) + 1
            ))
    return descriptor
