"""
go.mod parsing.

Reads the directives of a go.mod file into a ModFile. The grammar follows the
Go toolchain's: one directive per line, `verb (` ... `)` blocks for the
directives that accept them, `//` comments, interpreted ("...") and raw
(`...`) strings, and `=>`, `[`, `]`, `,` as separate tokens.

Only the `require` entries matter for change detection; the other
directives are checked for shape so that a malformed file is reported
rather than half-read.
"""

import json
import re
from dataclasses import dataclass, field

from .errors import ManifestParseError
from .models import ModuleRequirement

# Directives that may appear as `verb ( ... )`
BLOCK_VERBS = {"require", "exclude", "replace", "retract", "tool", "godebug", "ignore"}
SINGLE_VERBS = {"module", "go", "toolchain"}

PUNCTUATION = {"(", ")", "[", "]", ",", "=>"}

GO_VERSION_RE = re.compile(r"^([1-9][0-9]*)\.(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))?([a-z]+[0-9]+)?$")
MODULE_VERSION_RE = re.compile(
    r"^v(0|[1-9][0-9]*)(?:\.(0|[1-9][0-9]*)(?:\.(0|[1-9][0-9]*)"
    r"(-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?)?)?$"
)


@dataclass
class Replacement:
    old_path: str
    old_version: str | None
    new_path: str
    new_version: str | None


@dataclass
class ModFile:
    """Parsed contents of a go.mod file."""

    path: str
    module: str | None = None
    go: str | None = None
    toolchain: str | None = None
    require: list[ModuleRequirement] = field(default_factory=list)
    exclude: list[tuple[str, str]] = field(default_factory=list)
    replace: list[Replacement] = field(default_factory=list)
    retract: list[tuple[str, str]] = field(default_factory=list)  # (low, high)
    tool: list[str] = field(default_factory=list)
    godebug: dict[str, str] = field(default_factory=dict)
    ignore: list[str] = field(default_factory=list)

    def requirements(self) -> dict[str, ModuleRequirement]:
        """Module path -> requirement. A repeated path keeps its last entry."""
        return {req.module: req for req in self.require}


@dataclass
class _Line:
    tokens: list[str]
    lineno: int
    comment: str = ""


def _tokenize(path: str, text: str, lineno: int) -> _Line:
    tokens: list[str] = []
    comment = ""
    i = 0
    n = len(text)

    while i < n:
        c = text[i]
        if c in " \t\r":
            i += 1
        elif text.startswith("//", i):
            comment = text[i + 2 :].strip()
            break
        elif text.startswith("=>", i):
            tokens.append("=>")
            i += 2
        elif c in "()[],":
            tokens.append(c)
            i += 1
        elif c == '"':
            j = i + 1
            while j < n and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            if j >= n:
                raise ManifestParseError(path, lineno, "unterminated quoted string")
            try:
                tokens.append(json.loads(text[i : j + 1]))
            except ValueError:
                raise ManifestParseError(path, lineno, f"invalid quoted string {text[i:j + 1]}") from None
            i = j + 1
        elif c == "`":
            j = text.find("`", i + 1)
            if j < 0:
                raise ManifestParseError(path, lineno, "unterminated raw string")
            tokens.append(text[i + 1 : j])
            i = j + 1
        else:
            j = i
            while j < n and text[j] not in " \t\r\"`()[]," and not text.startswith("//", j) and not text.startswith("=>", j):
                j += 1
            tokens.append(text[i:j])
            i = j

    return _Line(tokens=tokens, lineno=lineno, comment=comment)


def _is_indirect(comment: str) -> bool:
    return comment == "indirect" or comment.startswith("indirect;")


def canonical_version(version: str) -> str | None:
    """Canonical form of a module version, or None when it is not one.

    Shorthands are completed (v1 -> v1.0.0, v1.2 -> v1.2.0) and build
    metadata is dropped, except for the +incompatible marker.
    """
    m = MODULE_VERSION_RE.match(version)
    if not m:
        return None
    major, minor, patch, prerelease, build = m.groups()
    canonical = f"v{major}.{minor or 0}.{patch or 0}{prerelease or ''}"
    if build == "+incompatible":
        canonical += build
    return canonical


def _check_version(path: str, line: _Line, module: str, version: str) -> str:
    canonical = canonical_version(version)
    if canonical is None:
        raise ManifestParseError(
            path, line.lineno, f"invalid version {version!r} for {module}: must be of the form v1.2.3"
        )
    return canonical


def _is_local_path(target: str) -> bool:
    return target.startswith(("./", "../", "/")) or target in (".", "..") or re.match(r"^[A-Za-z]:[\\/]", target) is not None


class _Parser:
    def __init__(self, path: str):
        self.path = path
        self.mod = ModFile(path=path)

    def fail(self, line: _Line, message: str):
        raise ManifestParseError(self.path, line.lineno, message)

    def parse(self, content: str) -> ModFile:
        block_verb: str | None = None
        block_start: _Line | None = None

        for lineno, text in enumerate(content.splitlines(), 1):
            line = _tokenize(self.path, text, lineno)
            if not line.tokens:
                continue

            if block_verb is not None:
                if line.tokens == [")"]:
                    block_verb = None
                    continue
                if ")" in line.tokens or "(" in line.tokens:
                    self.fail(line, f"unexpected parenthesis in {block_verb} block")
                self.directive(block_verb, line.tokens, line)
                continue

            verb, args = line.tokens[0], line.tokens[1:]
            if verb in PUNCTUATION:
                self.fail(line, f"unexpected {verb!r}")
            if verb not in BLOCK_VERBS and verb not in SINGLE_VERBS:
                self.fail(line, f"unknown directive: {verb}")

            if args and args[0] == "(":
                if verb not in BLOCK_VERBS:
                    self.fail(line, f"{verb} does not accept a block")
                if args == ["(", ")"]:
                    continue
                if len(args) != 1:
                    self.fail(line, "syntax error: unexpected tokens after '('")
                block_verb, block_start = verb, line
                continue

            self.directive(verb, args, line)

        if block_verb is not None and block_start is not None:
            self.fail(block_start, f"unterminated {block_verb} block")

        return self.mod

    def directive(self, verb: str, args: list[str], line: _Line) -> None:
        handler = getattr(self, f"_{verb}")
        handler(args, line)

    def _module(self, args: list[str], line: _Line) -> None:
        if self.mod.module is not None:
            self.fail(line, "repeated module statement")
        if len(args) != 1:
            self.fail(line, "usage: module module/path")
        self.mod.module = args[0]

    def _go(self, args: list[str], line: _Line) -> None:
        if self.mod.go is not None:
            self.fail(line, "repeated go statement")
        if len(args) != 1:
            self.fail(line, "go directive expects exactly one argument")
        if not GO_VERSION_RE.match(args[0]):
            self.fail(line, f"invalid go version {args[0]!r}: must match format 1.23.0")
        self.mod.go = args[0]

    def _toolchain(self, args: list[str], line: _Line) -> None:
        if self.mod.toolchain is not None:
            self.fail(line, "repeated toolchain statement")
        if len(args) != 1:
            self.fail(line, "toolchain directive expects exactly one argument")
        self.mod.toolchain = args[0]

    def _require(self, args: list[str], line: _Line) -> None:
        if len(args) != 2:
            self.fail(line, "usage: require module/path v1.2.3")
        module, version = args
        self.mod.require.append(
            ModuleRequirement(
                module=module,
                version=_check_version(self.path, line, module, version),
                indirect=_is_indirect(line.comment),
            )
        )

    def _exclude(self, args: list[str], line: _Line) -> None:
        if len(args) != 2:
            self.fail(line, "usage: exclude module/path v1.2.3")
        module, version = args
        self.mod.exclude.append((module, _check_version(self.path, line, module, version)))

    def _replace(self, args: list[str], line: _Line) -> None:
        usage = "usage: replace module/path [v1.2.3] => other/module v1.4\n\t or replace module/path [v1.2.3] => ../local/directory"
        if "=>" not in args:
            self.fail(line, usage)
        arrow = args.index("=>")
        old, new = args[:arrow], args[arrow + 1 :]
        if len(old) not in (1, 2) or len(new) not in (1, 2):
            self.fail(line, usage)

        old_version = _check_version(self.path, line, old[0], old[1]) if len(old) == 2 else None
        if len(new) == 1:
            if not _is_local_path(new[0]):
                self.fail(line, "replacement module without version must be directory path (rooted or starting with ./ or ../)")
            new_version = None
        else:
            if _is_local_path(new[0]):
                self.fail(line, "replacement module directory path must not have version")
            new_version = _check_version(self.path, line, new[0], new[1])

        self.mod.replace.append(
            Replacement(old_path=old[0], old_version=old_version, new_path=new[0], new_version=new_version)
        )

    def _retract(self, args: list[str], line: _Line) -> None:
        if len(args) == 1 and args[0] not in PUNCTUATION:
            version = _check_version(self.path, line, "retract", args[0])
            self.mod.retract.append((version, version))
            return
        if len(args) == 5 and args[0] == "[" and args[2] == "," and args[4] == "]":
            low = _check_version(self.path, line, "retract", args[1])
            high = _check_version(self.path, line, "retract", args[3])
            self.mod.retract.append((low, high))
            return
        self.fail(line, "usage: retract v1.2.3 or retract [v1.2.3, v1.2.4]")

    def _tool(self, args: list[str], line: _Line) -> None:
        if len(args) != 1:
            self.fail(line, "tool directive expects exactly one argument")
        self.mod.tool.append(args[0])

    def _godebug(self, args: list[str], line: _Line) -> None:
        if len(args) != 1 or "=" not in args[0]:
            self.fail(line, "usage: godebug key=value")
        key, value = args[0].split("=", 1)
        if not key:
            self.fail(line, "usage: godebug key=value")
        self.mod.godebug[key] = value

    def _ignore(self, args: list[str], line: _Line) -> None:
        if len(args) != 1:
            self.fail(line, "ignore directive expects exactly one argument")
        self.mod.ignore.append(args[0])


def parse_modfile(path: str, content: str) -> ModFile:
    """Parse the text of a go.mod file.

    Raises:
        ManifestParseError: on any syntax error, naming `path` and the line
    """
    return _Parser(path).parse(content)


def parse_manifest(path: str, content: str) -> dict[str, ModuleRequirement]:
    """Module path -> required version entry of a go.mod file."""
    return parse_modfile(path, content).requirements()
