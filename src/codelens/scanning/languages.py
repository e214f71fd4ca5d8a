"""Language pattern tables: the single source of truth for all language patterns.

Adding a new language:
  1. Add a LanguagePatternTable entry to LANGUAGES below.
  2. That's it. The PatternRegistry compiles it and every component picks it up.
"""

import re as _re
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class LanguagePatternTable:
    """Everything the analyzers need to know about a language."""

    name: str
    extensions: tuple[str, ...]

    # Classification signals, weighted x2, x3, x4 and x5 respectively.
    keywords: tuple[str, ...] = ()
    imports: tuple[str, ...] = ()
    syntax: tuple[str, ...] = ()
    specific: tuple[str, ...] = ()
    weight: float = 1.0

    # Comment and string syntax. Each comment pattern is (pattern, flags).
    comment_patterns: tuple[tuple[str, int], ...] = ()
    string_patterns: tuple[str, ...] = ()
    # Prefixes that mark a whole line as comment (after stripping).
    comment_prefixes: tuple[str, ...] = ()

    # Function declaration regexes. Group 1 is the function name.
    function_patterns: tuple[str, ...] = ()

    # Variable declaration regexes. Group 1 is the variable name.
    declaration_patterns: tuple[str, ...] = ()

    # Decision points for cyclomatic complexity. Keywords match on word
    # boundaries, operators literally.
    decision_keywords: tuple[str, ...] = ()
    decision_operators: tuple[str, ...] = ()

    loop_keywords: tuple[str, ...] = ("for", "while", "do")

    # "brace" counts {} for nesting and block ends, "indent" uses indentation.
    block_style: Literal["brace", "indent"] = "brace"

    # Protected block opener and the keywords of its handlers.
    try_keyword: str = "try"
    handler_keywords: tuple[str, ...] = ("catch",)

    # Debug output calls reported as custom smells.
    debug_patterns: tuple[str, ...] = ()

    # Declarations that make a literal a named constant.
    constant_markers: tuple[str, ...] = ("const", "final")

    null_literals: tuple[str, ...] = ("null",)


# ── Re-usable building blocks ──────────────────────────────────────

_C_LINE_COMMENT = (r"//[^\n]*", 0)
_C_BLOCK_COMMENT = (r"/\*.*?\*/", _re.DOTALL)
_HASH_COMMENT = (r"#[^\n]*", 0)
_TRIPLE_DQ_STR = (r'""".*?"""', _re.DOTALL)
_TRIPLE_SQ_STR = (r"'''.*?'''", _re.DOTALL)

_DOUBLE_QUOTE_STR = r'"(?:\\.|[^"\\\n])*"'
_SINGLE_QUOTE_STR = r"'(?:\\.|[^'\\\n])*'"
_BACKTICK_STR = r"`(?:\\.|[^`\\])*`"

_C_COMMENT_PREFIXES = ("//", "/*", "*")

_C_FAMILY_DECISIONS = ("if", "for", "while", "case", "catch")
_C_FAMILY_OPERATORS = ("&&", "||", "?")

_JS_DECLARATIONS = (
    r"\b(?:let|const|var)\s+([A-Za-z_$][\w$]*)\s*(?:=|;|$)",
)
_C_DECLARATIONS = (
    r"^\s*(?:const\s+|static\s+|unsigned\s+|signed\s+|long\s+|short\s+)*"
    r"(?:int|long|short|char|float|double|bool|size_t|auto)\s*\*?\s+([A-Za-z_]\w*)\s*(?:=|;|\[)",
)

_C_FAMILY_KEYWORDS = (
    "int", "float", "double", "char", "void", "struct", "union", "enum", "typedef", "const",
    "volatile", "static", "extern", "register", "auto", "signed", "unsigned", "short", "long",
    "if", "else", "for", "while", "do", "switch", "case", "default", "break", "continue",
    "goto", "return", "sizeof", "NULL",
)


# ── Language definitions ───────────────────────────────────────────

LANGUAGES = {
    "javascript": LanguagePatternTable(
        name="javascript",
        extensions=(".js", ".mjs", ".cjs", ".jsx"),
        keywords=(
            "function", "var", "let", "const", "class", "extends", "import", "export", "async",
            "await", "yield", "constructor", "super", "this", "prototype", "static", "get", "set",
            "new", "delete", "typeof", "instanceof", "in", "of", "with", "try", "catch", "finally",
            "throw", "switch", "case", "default", "break", "continue", "do", "while", "for", "if",
            "else", "return", "debugger", "void", "null", "undefined", "true", "false",
        ),
        imports=(
            "import", "require", "module.exports", "export default", "export const",
            "export function",
        ),
        syntax=(
            r"function\s+\w+\s*\(",
            r"=>\s*{",
            r"console\.log\(",
            r"\.addEventListener\(",
            r"document\.",
            r"window\.",
            r"//.*",
            r"/\*[\s\S]*?\*/",
            r"\bPromise\b",
            r"\basync\b.*\bawait\b",
        ),
        specific=(
            r"\$\(",
            r"React\.",
            r"useState\(",
            r"process\.env",
            r"module\.exports",
            r"require\(.+\)",
            r"export\s+(?:default|const|function|class)",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(
            r"\bfunction\s*\*?\s*([A-Za-z_$][\w$]*)\s*\(",
            r"\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|[A-Za-z_$][\w$]*\s*=>)",
            r"^\s*([A-Za-z_$][\w$]*)\s*:\s*(?:async\s+)?function\s*\(",
        ),
        declaration_patterns=_JS_DECLARATIONS,
        decision_keywords=_C_FAMILY_DECISIONS,
        decision_operators=_C_FAMILY_OPERATORS,
        debug_patterns=(r"\bconsole\.(?:log|debug|info|warn|error)\s*\(",),
        null_literals=("null", "undefined"),
        # const is the ordinary declaration keyword here
        constant_markers=(),
    ),
    "typescript": LanguagePatternTable(
        name="typescript",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        keywords=(
            "interface", "type", "enum", "namespace", "implements", "extends", "public",
            "private", "protected", "readonly", "abstract", "declare", "as", "any", "unknown",
            "never", "void", "number", "string", "boolean", "symbol", "bigint", "infer", "keyof",
            "typeof", "asserts", "is", "from", "global", "module", "require", "import", "export",
            "const", "let", "var", "function", "class", "super", "this", "new", "return", "if",
            "else", "for", "while", "do", "switch", "case", "default", "break", "continue", "try",
            "catch", "finally", "throw", "yield", "await", "static", "get", "set",
        ),
        imports=("import", "export", "from", "require"),
        syntax=(
            r":\s*(?:string|number|boolean|void|any|unknown|never|symbol|bigint)",
            r"interface\s+\w+",
            r"type\s+\w+\s*=",
            r"function\s+\w+\s*\([^)]*\)\s*:\s*\w+",
            r"\w+\s*:\s*\w+(?:\[\])?",
            r"readonly\s+\w+",
            r"abstract\s+class",
            r"declare\s+(?:module|global|function|const|let|var|class|interface|type)",
        ),
        specific=(
            r"React\.FC",
            r"useState<\w+>",
            r"as\s+\w+",
            r"implements\s+\w+",
            r"enum\s+\w+",
            r"namespace\s+\w+",
            r"type\s+\w+\s*=",
            r"interface\s+\w+",
            r"import\s+type\s+\{.*\}",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(
            r"\bfunction\s*\*?\s*([A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*\(",
            r"\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*(?::\s*[^=]+)?=>|[A-Za-z_$][\w$]*\s*=>)",
            r"^\s*(?:public|private|protected)\s+(?:static\s+)?(?:async\s+)?([A-Za-z_$][\w$]*)\s*\(",
        ),
        declaration_patterns=_JS_DECLARATIONS,
        decision_keywords=_C_FAMILY_DECISIONS,
        decision_operators=_C_FAMILY_OPERATORS,
        debug_patterns=(r"\bconsole\.(?:log|debug|info|warn|error)\s*\(",),
        null_literals=("null", "undefined"),
        # const is the ordinary declaration keyword here
        constant_markers=(),
    ),
    "python": LanguagePatternTable(
        name="python",
        extensions=(".py", ".pyw"),
        keywords=(
            "def", "class", "import", "from", "as", "if", "elif", "else", "for", "while", "try",
            "except", "finally", "with", "lambda", "return", "yield", "global", "nonlocal",
            "assert", "del", "pass", "break", "continue", "raise", "True", "False", "None", "self",
            "print", "in", "is", "not", "and", "or",
        ),
        imports=("import", "from"),
        syntax=(
            r"def\s+\w+\s*\(",
            r"class\s+\w+\s*\(?\w*\)?:",
            r"print\(.+\)",
            r"#.*$",
            r'"""[\s\S]*?"""',
            r"\bself\b",
            r":\s*\w+\s*=\s*\w+",
        ),
        specific=(
            r"if __name__ == ['\"]__main__['\"]:",
            r"@\w+",
            r"except\s+\w+\s+as\s+\w+",
            r"with\s+open\(.+\)\s+as\s+\w+:",
        ),
        comment_patterns=(_TRIPLE_DQ_STR, _TRIPLE_SQ_STR, _HASH_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=("#",),
        function_patterns=(r"^\s*(?:async\s+)?def\s+([A-Za-z_]\w*)\s*\(",),
        declaration_patterns=(r"^\s*([A-Za-z_]\w*)\s*(?::\s*[\w\[\], .]+)?\s*=(?!=)",),
        decision_keywords=("if", "elif", "for", "while", "except", "and", "or"),
        decision_operators=(),
        loop_keywords=("for", "while"),
        block_style="indent",
        handler_keywords=("except",),
        debug_patterns=(r"^\s*print\s*\(",),
        constant_markers=(),
        null_literals=("None",),
    ),
    "java": LanguagePatternTable(
        name="java",
        extensions=(".java",),
        keywords=(
            "public", "private", "protected", "class", "interface", "extends", "implements",
            "import", "package", "static", "final", "void", "int", "double", "float", "char",
            "boolean", "new", "return", "if", "else", "for", "while", "do", "switch", "case",
            "default", "break", "continue", "try", "catch", "finally", "throw", "throws", "this",
            "super", "synchronized", "volatile", "transient", "abstract", "native", "strictfp",
            "enum", "assert", "instanceof", "null", "true", "false",
        ),
        imports=("import", "package"),
        syntax=(
            r"public\s+class\s+\w+",
            r"static\s+void\s+main\s*\(",
            r"System\.out\.println\(",
            r"//.*",
            r"/\*[\s\S]*?\*/",
            r"@\w+",
            r"extends\s+\w+",
            r"implements\s+\w+",
        ),
        specific=(
            r"package\s+\w+(?:\.\w+)*",
            r"import\s+\w+(?:\.\w+)*;",
            r"throws\s+\w+",
            r"@Override",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(
            r"^\s*(?:(?:public|private|protected|static|final|abstract|synchronized)\s+)+"
            r"[\w<>\[\], ]+?\s+([A-Za-z_]\w*)\s*\([^)]*\)\s*(?:throws\s+[\w., ]+)?\s*\{?\s*$",
        ),
        declaration_patterns=(
            r"^\s*(?:final\s+)?(?:int|long|short|byte|double|float|char|boolean|String|var|[A-Z]\w*(?:<[^>]*>)?(?:\[\])?)\s+([a-z_]\w*)\s*(?:=|;)",
        ),
        decision_keywords=_C_FAMILY_DECISIONS,
        decision_operators=_C_FAMILY_OPERATORS,
        debug_patterns=(r"\bSystem\.(?:out|err)\.print(?:ln|f)?\s*\(",),
    ),
    "c": LanguagePatternTable(
        name="c",
        extensions=(".c", ".h"),
        keywords=_C_FAMILY_KEYWORDS + ("printf", "scanf", "main"),
        imports=("#include",),
        syntax=(
            r"#include\s+<\w+\.h>",
            r"int\s+main\s*\(",
            r"printf\(.+\)",
            r"//.*",
            r"/\*[\s\S]*?\*/",
            r"->",
        ),
        specific=(
            r"#define\s+\w+",
            r"typedef\s+struct",
            r"scanf\(.+\)",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(
            r"^\s*(?:static\s+|inline\s+|extern\s+)*(?:unsigned\s+|signed\s+)?"
            r"(?:void|int|long|short|char|float|double|bool|size_t|struct\s+\w+)\s*\**\s*"
            r"([A-Za-z_]\w*)\s*\([^;]*\)\s*\{?\s*$",
        ),
        declaration_patterns=_C_DECLARATIONS,
        decision_keywords=_C_FAMILY_DECISIONS[:-1],
        decision_operators=_C_FAMILY_OPERATORS,
        debug_patterns=(r"\bprintf\s*\(",),
        null_literals=("NULL",),
        handler_keywords=(),
        try_keyword="",
    ),
    "cpp": LanguagePatternTable(
        name="cpp",
        extensions=(".cpp", ".cc", ".cxx", ".hpp", ".hh", ".h"),
        keywords=_C_FAMILY_KEYWORDS + (
            "cout", "cin", "endl", "namespace", "using", "std", "class", "public", "private",
            "protected", "virtual", "override", "template", "typename", "this", "new", "delete",
            "try", "catch", "throw", "operator", "friend", "explicit", "mutable", "constexpr",
            "noexcept", "static_cast", "dynamic_cast", "reinterpret_cast", "const_cast", "typeid",
            "main",
        ),
        imports=("#include", "using namespace"),
        syntax=(
            r"#include\s+<\w+\.h>",
            r"int\s+main\s*\(",
            r"std::cout",
            r"std::cin",
            r"//.*",
            r"/\*[\s\S]*?\*/",
            r"->",
        ),
        specific=(
            r"#define\s+\w+",
            r"typedef\s+struct",
            r"cin\s*>>",
            r"cout\s*<<",
            r"using\s+namespace\s+std",
            r"template\s*<.*>",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(
            r"^\s*(?:static\s+|inline\s+|virtual\s+|constexpr\s+)*(?:unsigned\s+|signed\s+)?"
            r"(?:void|int|long|short|char|float|double|bool|size_t|auto|std::\w+(?:<[^>]*>)?|\w+::\w+)\s*[*&]*\s*"
            r"([A-Za-z_]\w*)\s*\([^;]*\)\s*(?:const\s*)?(?:noexcept\s*)?\{?\s*$",
        ),
        declaration_patterns=_C_DECLARATIONS,
        decision_keywords=_C_FAMILY_DECISIONS,
        decision_operators=_C_FAMILY_OPERATORS,
        debug_patterns=(r"\b(?:std::)?cout\s*<<", r"\bprintf\s*\("),
        constant_markers=("const", "constexpr"),
        null_literals=("NULL", "nullptr"),
    ),
    "go": LanguagePatternTable(
        name="go",
        extensions=(".go",),
        keywords=(
            "func", "package", "import", "var", "const", "type", "struct", "interface", "map",
            "chan", "go", "defer", "select", "range", "fallthrough", "goto", "if", "else", "for",
            "switch", "case", "default", "break", "continue", "return", "nil",
        ),
        imports=("import", "package"),
        syntax=(
            r"\bfunc\s+(?:\([^)]*\)\s*)?\w+\s*\(",
            r":=",
            r"fmt\.Print(?:ln|f)?\(",
            r"//.*",
        ),
        specific=(
            r"package\s+main",
            r"\bgo\s+func\b",
            r"\bchan\s+\w+",
            r"if\s+err\s*!=\s*nil",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_BACKTICK_STR, _DOUBLE_QUOTE_STR, _SINGLE_QUOTE_STR),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(r"\bfunc\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)\s*\(",),
        declaration_patterns=(r"\b([A-Za-z_]\w*)\s*:=", r"\bvar\s+([A-Za-z_]\w*)\b"),
        decision_keywords=("if", "for", "case", "select"),
        decision_operators=("&&", "||"),
        loop_keywords=("for",),
        debug_patterns=(r"\bfmt\.Print(?:ln|f)?\s*\(",),
        null_literals=("nil",),
        try_keyword="",
        handler_keywords=(),
    ),
    "rust": LanguagePatternTable(
        name="rust",
        extensions=(".rs",),
        keywords=(
            "fn", "let", "mut", "impl", "trait", "struct", "enum", "pub", "use", "mod", "crate",
            "match", "loop", "while", "for", "in", "if", "else", "return", "break", "continue",
            "unsafe", "where", "Some", "None", "Ok", "Err", "self", "Self",
        ),
        imports=("use", "extern crate"),
        syntax=(
            r"\bfn\s+\w+\s*(?:<[^>]*>)?\s*\(",
            r"\blet\s+mut\b",
            r"println!\(",
            r"->\s*\w+",
            r"//.*",
        ),
        specific=(
            r"\bimpl\s+\w+",
            r"\bmatch\s+\w+\s*\{",
            r"&mut\s+\w+",
            r"\w+!\(",
        ),
        comment_patterns=(_C_LINE_COMMENT, _C_BLOCK_COMMENT),
        string_patterns=(_DOUBLE_QUOTE_STR,),
        comment_prefixes=_C_COMMENT_PREFIXES,
        function_patterns=(r"\bfn\s+([A-Za-z_]\w*)\s*(?:<[^>]*>)?\s*\(",),
        declaration_patterns=(r"\blet\s+(?:mut\s+)?([A-Za-z_]\w*)\b",),
        decision_keywords=("if", "for", "while", "match", "loop"),
        decision_operators=("&&", "||", "?"),
        loop_keywords=("for", "while", "loop"),
        debug_patterns=(r"\b(?:println|dbg|eprintln)!\s*\(",),
        constant_markers=("const", "static"),
        null_literals=("None",),
        try_keyword="",
        handler_keywords=(),
    ),
}

DEFAULT_LANGUAGE = "javascript"

# Alternate spellings accepted wherever a language id is given
ALIASES = {
    "js": "javascript",
    "node": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "python3": "python",
    "c++": "cpp",
    "cxx": "cpp",
    "golang": "go",
    "rs": "rust",
    "c-like": "c",
    "clike": "c",
}
