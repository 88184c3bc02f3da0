"""Map a raw process to the application name it is grouped under."""

from collections.abc import Iterator, Sequence
from enum import Enum
from pathlib import PureWindowsPath

from appmem.models import ProcessRecord

DEFAULT_LAUNCHERS: frozenset[str] = frozenset({"java", "javaw"})

JAR_FLAG = "-jar"

# Launch a main class from a module: -m <module>[/<mainclass>]
MODULE_FLAGS: frozenset[str] = frozenset({"-m", "--module"})
MODULE_PREFIX = "--module="

# Launcher flags whose value is passed as the next, separate token
VALUE_FLAGS: frozenset[str] = frozenset(
    {
        JAR_FLAG,
        *MODULE_FLAGS,
        "-cp",
        "-classpath",
        "--class-path",
        "-p",
        "--module-path",
        "--upgrade-module-path",
        "--add-modules",
        "--add-opens",
        "--add-exports",
        "--add-reads",
        "--patch-module",
        "--limit-modules",
        "--enable-native-access",
        "--source",
        "-d",
        "--describe-module",
    }
)

PATH_SEPARATORS = ("/", "\\")


class JavaBy(Enum):
    """How launcher processes are told apart."""

    AUTO = "auto"
    JAR = "jar"
    MAIN = "main"


class TokenKind(Enum):
    """Classification of a single launch argument."""

    FLAG = "flag"
    FLAG_VALUE = "flag-value"
    BARE = "bare"


def classify_arguments(arguments: Sequence[str]) -> Iterator[tuple[TokenKind, str]]:
    """
    Classify launch arguments left to right.

    A token starting with ``-`` is a flag. The token right after a flag in
    ``VALUE_FLAGS`` is that flag's value, whatever it looks like. Anything
    else is a bare token.
    """
    expecting_value = False
    for token in arguments:
        if expecting_value:
            expecting_value = False
            yield TokenKind.FLAG_VALUE, token
        elif token.startswith("-"):
            expecting_value = token in VALUE_FLAGS
            yield TokenKind.FLAG, token
        else:
            yield TokenKind.BARE, token


def _module_spec(kind: TokenKind, token: str, previous: str | None) -> str | None:
    """Return the ``<module>[/<mainclass>]`` value this token carries, if any."""
    if kind is TokenKind.FLAG_VALUE and previous in MODULE_FLAGS:
        return token
    if kind is TokenKind.FLAG and token.startswith(MODULE_PREFIX):
        return token[len(MODULE_PREFIX) :]
    return None


def find_jar_name(arguments: Sequence[str]) -> str | None:
    """
    Return the archive stem from ``-jar <path>``, if present.

    Only the launcher's own options are scanned: everything from the first
    bare token or module launch on belongs to the launched program.
    """
    previous: str | None = None
    for kind, token in classify_arguments(arguments):
        if kind is TokenKind.BARE or _module_spec(kind, token, previous) is not None:
            break
        if kind is TokenKind.FLAG_VALUE and previous == JAR_FLAG:
            return _archive_stem(token)
        previous = token if kind is TokenKind.FLAG else None
    return None


def find_main_class(arguments: Sequence[str]) -> str | None:
    """
    Return the entry point of a class or module launch.

    ``-m app/com.example.Main`` gives ``com.example.Main`` and ``-m app``
    gives ``app``. Otherwise the first bare token without a path separator
    is taken as the main class. Flag values are never entry points.
    """
    previous: str | None = None
    for kind, token in classify_arguments(arguments):
        module = _module_spec(kind, token, previous)
        if module is not None:
            return module.split("/", 1)[-1] or None
        if kind is TokenKind.BARE and token and not any(sep in token for sep in PATH_SEPARATORS):
            return token
        previous = token if kind is TokenKind.FLAG else None
    return None


def _archive_stem(path: str) -> str | None:
    """Strip directories and extension from an archive path."""
    # PureWindowsPath splits on both separators
    return PureWindowsPath(path).stem or None


def launcher_entry_point(arguments: Sequence[str], java_by: JavaBy) -> str | None:
    """Pick the entry point identifying a launcher process under ``java_by``."""
    if java_by is JavaBy.JAR:
        return find_jar_name(arguments)
    if java_by is JavaBy.MAIN:
        return find_main_class(arguments)
    return find_jar_name(arguments) or find_main_class(arguments)


def resolve_name(
    record: ProcessRecord,
    java_by: JavaBy = JavaBy.AUTO,
    launchers: frozenset[str] = DEFAULT_LAUNCHERS,
) -> str:
    """
    Resolve the display name a process is grouped under.

    Args:
        record: The process to name.
        java_by: Disambiguation mode for launcher processes.
        launchers: Command names that get argument-based disambiguation.

    Returns:
        ``"<runtime>: <entry point>"`` for recognised launcher processes,
        otherwise the plain command name.
    """
    if record.command_name not in launchers or not record.arguments:
        return record.command_name

    entry_point = launcher_entry_point(record.arguments, java_by)
    if entry_point is None:
        return record.command_name
    return f"{record.command_name}: {entry_point}"
