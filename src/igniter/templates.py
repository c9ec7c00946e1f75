"""Rendering of template files and template trees.

A file whose name ends in ``.template`` is rendered with a single
substitution pass: every ``{{.Field}}`` action is replaced by the named field
of the context. Other files are passed through unchanged.

Example:
    >>> render("motd.template", b"image={{.ReleaseImage}}", {"ReleaseImage": "X"})
    ('motd', b'image=X')
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Iterator

from igniter.errors import TemplateError

__all__ = ["TEMPLATE_SUFFIX", "TreeFile", "render", "decode_text", "file_mode", "walk_tree"]

TEMPLATE_SUFFIX = ".template"

_ACTION = re.compile(r"{{(.*?)}}", re.DOTALL)
_FIELD = re.compile(r"\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*")


@dataclass(frozen=True)
class TreeFile:
    """A file rendered from a template tree.

    Attributes:
        path: Target path, mirroring the source path below the tree root.
        mode: Permission bits for the target file.
        append: Whether the contents are appended to an existing file.
        data: Rendered contents.
    """

    path: str
    mode: int
    append: bool
    data: bytes


def render(name: str, data: bytes, context: Any) -> tuple[str, bytes]:
    """Render a file if its name marks it as a template.

    Args:
        name: The file name, possibly ending in ``.template``.
        data: The raw file contents.
        context: A mapping or object supplying the fields referenced by the
            template.

    Returns:
        The final name, with any template suffix removed, and the contents.

    Raises:
        TemplateError: If the template is malformed or references a field the
            context does not provide.
    """
    if not name.endswith(TEMPLATE_SUFFIX):
        return name, data

    name = name[: -len(TEMPLATE_SUFFIX)]
    text = decode_text(f"template {name}", data)
    fields = _parse(name, text)

    def substitute(match: re.Match) -> str:
        return _lookup(name, context, fields[match.start()])

    return name, _ACTION.sub(substitute, text).encode("utf-8")


def decode_text(description: str, data: bytes) -> str:
    """Decode UTF-8 file contents.

    Raises:
        TemplateError: If the contents are not valid UTF-8.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TemplateError(f"{description}: contents are not valid UTF-8: {e}") from e


def _parse(name: str, text: str) -> dict[int, str]:
    fields = {}
    end = 0
    for match in _ACTION.finditer(text):
        field = _FIELD.fullmatch(match.group(1))
        if field is None:
            raise TemplateError(f"template {name}: unsupported action {match.group(0)!r}")
        fields[match.start()] = field.group(1)
        end = match.end()

    if "{{" in text[end:]:
        line = text.count("\n", 0, text.index("{{", end)) + 1
        raise TemplateError(f"template {name}:{line}: unclosed action")
    return fields


def _lookup(name: str, context: Any, field: str) -> str:
    if isinstance(context, Mapping):
        if field not in context:
            raise TemplateError(f"template {name}: no field {field!r} in context")
        value = context[field]
    else:
        try:
            value = getattr(context, field)
        except AttributeError:
            raise TemplateError(
                f"template {name}: no field {field!r} in {type(context).__name__}"
            ) from None
    return str(value)


def file_mode(source: str) -> tuple[int, bool]:
    """Return the mode and append flag for a file in the template tree.

    Files in a ``bin`` directory are executable, ``motd`` is world readable
    and appended to the existing file, everything else is private.
    """
    path = PurePosixPath(source)
    if path.parent.name == "bin":
        return 0o555, False
    if path.name == "motd":
        return 0o644, True
    return 0o600, False


def walk_tree(source: Path, base: str, context: Any) -> Iterator[TreeFile]:
    """Render every file below a directory, depth first.

    Args:
        source: The directory (or single file) to walk.
        base: The target path corresponding to ``source``.
        context: The template context passed to :func:`render`.

    Yields:
        One :class:`TreeFile` per source file, in sorted path order.
    """
    if source.is_dir():
        for child in sorted(source.iterdir(), key=lambda p: p.name):
            yield from walk_tree(child, str(PurePosixPath(base) / child.name), context)
        return

    _, data = render(source.name, source.read_bytes(), context)
    mode, append = file_mode(source.as_posix())
    if base.endswith(TEMPLATE_SUFFIX):
        base = base[: -len(TEMPLATE_SUFFIX)]
    yield TreeFile(base, mode, append, data)
