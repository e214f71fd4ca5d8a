"""Compiled, read-only access to the language pattern tables.

A PatternRegistry is built once and handed to every component that needs
language knowledge. Nothing below mutates after construction, so one
instance can be shared freely across threads.
"""

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..exceptions import UnsupportedLanguageError
from ..logging_config import get_logger
from .languages import ALIASES, DEFAULT_LANGUAGE, LANGUAGES, LanguagePatternTable

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompiledTable:
    """A pattern table with every regex compiled once."""

    table: LanguagePatternTable
    keyword_res: Tuple[Tuple[str, re.Pattern], ...]
    import_res: Tuple[Tuple[str, re.Pattern], ...]
    syntax_res: Tuple[re.Pattern, ...]
    specific_res: Tuple[re.Pattern, ...]
    function_res: Tuple[re.Pattern, ...]
    declaration_res: Tuple[re.Pattern, ...]
    debug_res: Tuple[re.Pattern, ...]
    decision_re: Optional[re.Pattern]
    mask_re: Optional[re.Pattern]

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def uses_braces(self) -> bool:
        return self.table.block_style == "brace"


def _word_re(word: str) -> re.Pattern:
    # Lookarounds instead of \b so markers such as "#include" still anchor
    return re.compile(rf"(?<!\w){re.escape(word)}(?!\w)", re.IGNORECASE)


def _operator_source(op: str) -> str:
    if op == "?":
        # Ternary only: skip ?. ?? and optional-parameter ?:
        return r"(?<!\?)\?(?![.?:])"
    return re.escape(op)


def _compile_decisions(table: LanguagePatternTable) -> Optional[re.Pattern]:
    parts = [rf"\b{re.escape(kw)}\b" for kw in table.decision_keywords]
    parts.extend(_operator_source(op) for op in table.decision_operators)
    if not parts:
        return None
    return re.compile("|".join(parts))


def _compile_mask(table: LanguagePatternTable) -> Optional[re.Pattern]:
    comments = []
    for pattern, flags in table.comment_patterns:
        comments.append(f"(?s:{pattern})" if flags & re.DOTALL else pattern)
    strings = list(table.string_patterns)
    alternatives = []
    if comments:
        alternatives.append(f"(?P<comment>{'|'.join(comments)})")
    if strings:
        alternatives.append(f"(?P<string>{'|'.join(strings)})")
    if not alternatives:
        return None
    return re.compile("|".join(alternatives))


def compile_table(table: LanguagePatternTable) -> CompiledTable:
    return CompiledTable(
        table=table,
        keyword_res=tuple((kw, _word_re(kw)) for kw in table.keywords),
        import_res=tuple((imp, _word_re(imp)) for imp in table.imports),
        syntax_res=tuple(re.compile(p, re.MULTILINE) for p in table.syntax),
        specific_res=tuple(re.compile(p, re.MULTILINE) for p in table.specific),
        function_res=tuple(re.compile(p) for p in table.function_patterns),
        declaration_res=tuple(re.compile(p) for p in table.declaration_patterns),
        debug_res=tuple(re.compile(p) for p in table.debug_patterns),
        decision_re=_compile_decisions(table),
        mask_re=_compile_mask(table),
    )


class PatternRegistry:
    """Language lookup over compiled pattern tables.

    Args:
        languages: Table definitions keyed by language id
        default_language: Id reported when classification finds nothing
    """

    def __init__(
        self,
        languages: Optional[Mapping[str, LanguagePatternTable]] = None,
        default_language: str = DEFAULT_LANGUAGE,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        source = LANGUAGES if languages is None else languages
        self._tables: Dict[str, CompiledTable] = {
            name: compile_table(table) for name, table in source.items()
        }
        self._aliases = dict(ALIASES if aliases is None else aliases)

        if default_language not in self._tables:
            raise UnsupportedLanguageError(default_language, self.names)
        self.default_language = default_language

        # Extensions claimed by exactly one table
        claims: Dict[str, list] = {}
        for name, table in source.items():
            for ext in table.extensions:
                claims.setdefault(ext.lower(), []).append(name)
        self._extensions = {ext: names[0] for ext, names in claims.items() if len(names) == 1}

        logger.debug(f"Compiled {len(self._tables)} language tables")

    @property
    def names(self) -> list:
        return list(self._tables)

    def __contains__(self, language: object) -> bool:
        return isinstance(language, str) and self.resolve(language) is not None

    def __iter__(self) -> Iterator[CompiledTable]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def resolve(self, language: Optional[str]) -> Optional[str]:
        """Canonical id for a language name or alias, or None if unknown."""
        if not language:
            return None
        key = language.strip().lower()
        if key in self._tables:
            return key
        alias = self._aliases.get(key)
        if alias in self._tables:
            return alias
        return None

    def get(self, language: str) -> CompiledTable:
        """Compiled table for a language id.

        Raises:
            UnsupportedLanguageError: If no table matches
        """
        resolved = self.resolve(language)
        if resolved is None:
            raise UnsupportedLanguageError(language, self.names)
        return self._tables[resolved]

    def language_for_filename(self, filename: str) -> Optional[str]:
        """Language whose table alone claims the file's extension."""
        suffixes = PurePath(filename).suffixes
        if not suffixes:
            return None
        # ".d.ts" style compound suffixes first
        if len(suffixes) > 1:
            compound = "".join(suffixes[-2:]).lower()
            if compound in self._extensions:
                return self._extensions[compound]
        return self._extensions.get(suffixes[-1].lower())
