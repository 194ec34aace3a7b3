"""
Recursive descent parser for the template markup used in etymologies.

Grammar:
    content         ::= (template | wikilink | text)*
    template        ::= "{{" name ("|" param)* "}}"
    param           ::= (template | wikilink | param_char)*
    wikilink        ::= "[[" target ("#" anchor)? ("|" display)? "]]"
    name            ::= name_char+

Terminal sets:
    name_char       ::= [^|{}]
    param_char      ::= [^|{}]
    target_char     ::= [^#|\\]]
    anchor_char     ::= [^|\\]]

Inside a parameter, a wikilink is replaced by its display text and a nested
mention/link template ({{m|en|word}}, {{l|en|word}}) by its word, so that
{{compound|en|[[rain]]|{{l|en|bow}}}} yields the arguments rain, bow.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Wikilink:
    """A parsed wikilink: [[target#anchor|display]]"""

    target: str
    anchor: Optional[str] = None
    display: Optional[str] = None

    def text(self) -> str:
        """Return display text if present, otherwise target."""
        return self.display if self.display is not None else self.target


@dataclass
class Template:
    """A parsed template: {{name|param1|param2|...}}"""

    name: str
    params: list[str] = field(default_factory=list)

    def get_positional(self) -> list[str]:
        """Return only positional parameters (no '=' in them)."""
        return [p for p in self.params if "=" not in p and p.strip()]

    def get_named(self, key: str) -> Optional[str]:
        prefix = f"{key}="
        for p in self.params:
            if p.startswith(prefix):
                return p[len(prefix):]
        return None

    def language_args(self, lang: str = "en") -> Optional[list[str]]:
        """
        Positional arguments after the language code.

        Returns None when the first positional argument is not `lang`.
        """
        positional = self.get_positional()
        if not positional or positional[0].strip().lower() != lang:
            return None
        return positional[1:]


class WikitextParser:
    """
    Recursive descent parser collecting templates from wikitext.

    Usage:
        parser = WikitextParser(text)
        templates = parser.parse()
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)

    # Primitives

    def at_end(self) -> bool:
        return self.pos >= self.length

    def match(self, expected: str) -> bool:
        return self.text.startswith(expected, self.pos)

    def consume(self) -> str:
        ch = self.text[self.pos]
        self.pos += 1
        return ch

    def consume_if(self, expected: str) -> bool:
        if self.match(expected):
            self.pos += len(expected)
            return True
        return False

    def consume_until(self, terminators: str) -> str:
        start = self.pos
        while not self.at_end() and self.text[self.pos] not in terminators:
            if self.match("{{") or self.match("[["):
                break
            self.pos += 1
        return self.text[start:self.pos]

    # Productions

    def parse(self) -> list[Template]:
        """Parse the whole text and return top-level templates in order."""
        self.pos = 0
        templates = []
        while not self.at_end():
            if self.match("{{"):
                template = self.parse_template()
                if template is not None:
                    templates.append(template)
            elif self.match("[["):
                self.parse_wikilink()
            else:
                self.pos += 1
        return templates

    def parse_template(self) -> Optional[Template]:
        if not self.consume_if("{{"):
            return None

        name_chars = []
        while not self.at_end() and not (self.match("|") or self.match("}}")):
            if self.match("{{"):
                self.skip_template()
                continue
            name_chars.append(self.consume())

        params = []
        while not self.at_end() and self.consume_if("|"):
            params.append(self.parse_param())

        self.consume_if("}}")
        return Template(name="".join(name_chars).strip(), params=params)

    def parse_param(self) -> str:
        parts = []
        while not self.at_end():
            if self.match("|") or self.match("}}"):
                break
            if self.match("{{"):
                template = self.parse_template()
                if template is not None:
                    parts.append(self._template_to_text(template))
            elif self.match("[["):
                wikilink = self.parse_wikilink()
                if wikilink is not None:
                    parts.append(wikilink.text())
            else:
                parts.append(self.consume())
        return "".join(parts).strip()

    def _template_to_text(self, template: Template) -> str:
        """Text a nested template contributes to its parent's parameter."""
        name = template.name.lower()
        if name in ("m", "l", "mention", "link") and len(template.params) >= 2:
            return template.params[1].strip()
        return ""

    def parse_wikilink(self) -> Optional[Wikilink]:
        if not self.consume_if("[["):
            return None

        target = self.consume_until("#|]")
        anchor = None
        display = None
        if self.consume_if("#"):
            anchor = self.consume_until("|]")
        if self.consume_if("|"):
            parts = []
            while not self.at_end() and not self.match("]]"):
                if self.match("{{"):
                    self.skip_template()
                elif self.match("[["):
                    nested = self.parse_wikilink()
                    if nested is not None:
                        parts.append(nested.text())
                else:
                    parts.append(self.consume())
            display = "".join(parts) or None
        self.consume_if("]]")

        return Wikilink(target=target, anchor=anchor, display=display)

    def skip_template(self) -> None:
        """Skip over a template without building the structure."""
        if not self.consume_if("{{"):
            return
        depth = 1
        while not self.at_end() and depth > 0:
            if self.match("{{"):
                depth += 1
                self.pos += 2
            elif self.match("}}"):
                depth -= 1
                self.pos += 2
            else:
                self.pos += 1


def find_templates(text: str, *names: str) -> list[Template]:
    """Find all templates with the given names (case-insensitive), in order."""
    wanted = {n.lower() for n in names}
    return [t for t in WikitextParser(text).parse() if t.name.lower() in wanted]


def find_language_template(text: str, names, lang: str = "en") -> Optional[Template]:
    """Return the first template with one of `names` for language `lang`."""
    for template in find_templates(text, *names):
        if template.language_args(lang) is not None:
            return template
    return None


def parse_template_params(content: str) -> list[str]:
    """
    Parse the parameters of a template body (the text inside {{ }}).

    Args:
        content: Template content like "en|un|happy"

    Returns:
        List of parameter strings
    """
    templates = WikitextParser("{{_|" + content + "}}").parse()
    return templates[0].params if templates else []
