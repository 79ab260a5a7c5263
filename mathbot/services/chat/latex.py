"""
LaTeX Markup Cleanup

Some models wrap math in square brackets ("[ $$x^2$$ ]") even when told not
to, which breaks KaTeX rendering in the browser. The relay runs every
streamed fragment through CLEANUP_RULES before forwarding it.

The transform is per fragment: a bracketed expression split across two
upstream fragments is left as is. Buffering to repair it would hold tokens
back from the client.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern

# One level of nested braces: {a}, {x^{2}}
_BRACED = r"\{(?:[^{}]|\{[^{}]*\})*\}"

# Environments whose surrounding brackets are stripped
RECOGNIZED_ENVIRONMENTS = (
    r"matrix|pmatrix|bmatrix|Bmatrix|vmatrix|Vmatrix|smallmatrix"
    r"|array|cases|aligned|align\*?|equation\*?|gathered"
)


@dataclass(frozen=True)
class LatexRule:
    """A single regex rewrite applied to a fragment"""
    name: str
    pattern: Pattern[str]
    replacement: str

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


CLEANUP_RULES: List[LatexRule] = [
    # [ $$...$$ ] -> $$...$$
    LatexRule(
        name="display_math",
        pattern=re.compile(r"\[\s*\$\$(.*?)\$\$\s*\]", re.DOTALL),
        replacement=r"$$\1$$",
    ),
    # [ $...$ ] -> $...$
    LatexRule(
        name="inline_math",
        pattern=re.compile(r"\[\s*\$([^$]+?)\$\s*\]"),
        replacement=r"$\1$",
    ),
    # [ \begin{bmatrix}...\end{bmatrix} ] -> \begin{bmatrix}...\end{bmatrix}
    LatexRule(
        name="environment",
        pattern=re.compile(
            r"\[\s*(\\begin\{(" + RECOGNIZED_ENVIRONMENTS + r")\}.*?\\end\{\2\})\s*\]",
            re.DOTALL,
        ),
        replacement=r"\1",
    ),
    # \\ \\ -> \\
    LatexRule(
        name="duplicate_row_break",
        pattern=re.compile(r"\\\\(?:\s*\\\\)+"),
        replacement=r"\\\\",
    ),
    LatexRule(
        name="fraction",
        pattern=re.compile(r"\[\s*(\\frac" + _BRACED + _BRACED + r")\s*\]"),
        replacement=r"\1",
    ),
    LatexRule(
        name="root",
        pattern=re.compile(r"\[\s*(\\sqrt(?:\[[^\[\]]*\])?" + _BRACED + r")\s*\]"),
        replacement=r"\1",
    ),
    LatexRule(
        name="sum_or_integral",
        pattern=re.compile(
            r"\[\s*(\\(?:sum|int)_(?:" + _BRACED + r"|\w)\^(?:" + _BRACED + r"|\w)[^\[\]]*?)\s*\]"
        ),
        replacement=r"\1",
    ),
]


def apply_rules(text: str, rules: List[LatexRule]) -> str:
    """Apply each rule once, in order"""
    for rule in rules:
        text = rule.apply(text)
    return text


def clean_latex(text: str) -> str:
    """
    Strip stray brackets around math in a single fragment.

    The rule list is re-applied until the text stops changing, so
    clean_latex(clean_latex(s)) == clean_latex(s). Every rule shortens
    the text when it matches, which bounds the loop.
    """
    if "[" not in text and "\\\\" not in text:
        return text

    previous = None
    while previous != text:
        previous = text
        text = apply_rules(text, CLEANUP_RULES)
    return text
