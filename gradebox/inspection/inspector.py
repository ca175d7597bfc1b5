"""
Structural inspection of submitted classes.

An Inspector wraps one submission class and answers shape questions about
it without requiring the class to implement any particular interface:

    fields()         — instance state (non-constant data members)
    constants()      — UPPER_CASE or Final class-level values
    inner_classes()  — classes declared inside the class body
    methods()        — declared functions, minus constructors and
                       compiler/runtime-generated members

Members are read from the class's own namespace in declaration order.
Instance attributes only exist once an object is built, so `self.x = ...`
assignments are recovered from the class source with `ast` instead of
instantiating untrusted code.
"""

from __future__ import annotations

import ast
import importlib
import inspect
import re
import textwrap
import typing
from functools import cached_property
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import LoadError, SourceReadError, describe_exception
from ..log import get_logger
from ..reporting import Reporter
from .scanner import enforce_no_tokens

logger = get_logger("inspector")


# Name pattern of a constant: MAX, _LIMIT, HTTP_2
CONSTANT_NAME = re.compile(r"^_*[A-Z][A-Z0-9_]*$")

# Declared but not methods in the structural sense.
CONSTRUCTORS = frozenset({"__init__", "__new__"})

# Functions the interpreter itself places in a class namespace.
RUNTIME_MEMBERS = frozenset({"__annotate__", "__annotate_func__"})

_ACCESSOR_TYPES = (staticmethod, classmethod, property, cached_property)

LOOP_KEYWORDS = ("while", "for")


# =============================================================================
# TYPE RESOLUTION
# =============================================================================

def resolve_type(name: str) -> type:
    """
    Resolve a submission class by name.

    Accepted forms:
        "Main"                class Main in module Main
        "shapes:Circle"       class Circle in module shapes
        "shapes.Circle"       same, dotted
        "shapes:Outer.Inner"  nested class

    Raises:
        LoadError: If the module cannot be imported or the name is not a class
    """
    if not name or not name.strip():
        raise LoadError(name, "empty class name")

    if ":" in name:
        module_name, _, qualname = name.partition(":")
    elif "." in name:
        module_name, _, qualname = name.rpartition(".")
    else:
        module_name, qualname = name, name

    try:
        module = importlib.import_module(module_name)
    except Exception as exc:
        # Submission modules run arbitrary code on import.
        raise LoadError(name, describe_exception(exc)) from exc

    target: Any = module
    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise LoadError(name, f"module '{module_name}' has no class '{qualname}'") from exc

    if not inspect.isclass(target):
        raise LoadError(name, f"'{qualname}' is a {type(target).__name__}, not a class")
    return target


# =============================================================================
# MEMBER CLASSIFICATION
# =============================================================================

def _is_final(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return re.match(r"^(typing\.)?Final\b", annotation.strip()) is not None
    return annotation is typing.Final or typing.get_origin(annotation) is typing.Final


def _is_data(value: Any) -> bool:
    """True for plain class-level values (not routines, accessors or classes)."""
    return not (
        inspect.isroutine(value)
        or isinstance(value, _ACCESSOR_TYPES)
        or inspect.isclass(value)
        or inspect.isdatadescriptor(value)
    )


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_synthetic(func: Any, owner: type, owner_file: Optional[str]) -> bool:
    """Lambdas, code generated through exec() and functions borrowed from elsewhere."""
    if func.__name__ == "<lambda>":
        return True
    # Generated functions may be wrapped, e.g. dataclass __repr__ before 3.12.
    code = getattr(inspect.unwrap(func), "__code__", func.__code__)
    filename = code.co_filename
    if filename.startswith("<"):
        return True
    if owner_file is not None and Path(filename).resolve() != Path(owner_file).resolve():
        return True
    return not func.__qualname__.startswith(f"{owner.__qualname__}.")


def _body_assigned_names(class_node: ast.ClassDef) -> set[str]:
    """Names bound by assignments written directly in a class body."""
    names: set[str] = set()
    for node in class_node.body:
        if isinstance(node, ast.Assign):
            targets = list(node.targets)
        elif isinstance(node, (ast.AnnAssign, ast.AugAssign)):
            targets = [node.target]
        else:
            continue
        while targets:
            target = targets.pop(0)
            if isinstance(target, (ast.Tuple, ast.List)):
                targets.extend(target.elts)
            elif isinstance(target, ast.Name):
                names.add(target.id)
    return names


def _assigned_self_attributes(function: ast.AST) -> list[str]:
    """Names assigned as `<self>.<name>` anywhere inside a method body."""
    args = function.args.posonlyargs + function.args.args
    if not args:
        return []
    receiver = args[0].arg

    names: list[str] = []
    for node in ast.walk(function):
        if isinstance(node, ast.Assign):
            targets = list(node.targets)
        elif isinstance(node, (ast.AnnAssign, ast.AugAssign)):
            targets = [node.target]
        else:
            continue
        while targets:
            target = targets.pop(0)
            if isinstance(target, (ast.Tuple, ast.List)):
                targets.extend(target.elts)
            elif (
                isinstance(target, ast.Attribute)
                and isinstance(target.value, ast.Name)
                and target.value.id == receiver
            ):
                names.append(target.attr)
    return names


def _unique(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))


# =============================================================================
# INSPECTOR
# =============================================================================

class Inspector:
    """
    Capability probes over one submission class.

    Probes never mutate or instantiate the class. The only probe with a
    side effect is `has_no`, which aborts the run on a forbidden token.
    """

    def __init__(
        self,
        target: Union[str, type],
        workdir: Optional[Path] = None,
        reporter: Optional[Reporter] = None,
    ):
        if isinstance(target, str):
            target = resolve_type(target)
        elif not inspect.isclass(target):
            raise LoadError(repr(target), "not a class")
        self.target: type = target
        self.workdir = Path(workdir) if workdir is not None else Path.cwd()
        self.reporter = reporter if reporter is not None else Reporter()

    def __repr__(self) -> str:
        return f"Inspector({self.target.__module__}.{self.target.__qualname__})"

    @property
    def name(self) -> str:
        return self.target.__name__

    # -------------------------------------------------------------------------
    # Declared members
    # -------------------------------------------------------------------------

    def _declared(self) -> list[tuple[str, Any]]:
        return list(vars(self.target).items())

    def _annotations(self) -> dict[str, Any]:
        try:
            return dict(inspect.get_annotations(self.target))
        except Exception as exc:
            # Annotations of submission code may reference undefined names.
            logger.warning("Cannot read annotations of %s: %s", self.name, describe_exception(exc))
            return {}

    def _is_constant(self, name: str, annotations: dict[str, Any]) -> bool:
        if name in annotations and _is_final(annotations[name]):
            return True
        return CONSTANT_NAME.match(name) is not None

    @cached_property
    def _class_node(self) -> Optional[ast.ClassDef]:
        try:
            source = textwrap.dedent(inspect.getsource(self.target))
            tree = ast.parse(source)
        except (OSError, TypeError, SyntaxError) as exc:
            logger.debug("No source for %s: %s", self.name, describe_exception(exc))
            return None
        return next(
            (node for node in tree.body if isinstance(node, ast.ClassDef)), None
        )

    def _declared_data(self) -> list[str]:
        """
        Class-level data names the class body itself assigns.

        Metaclasses add their own bookkeeping (`_abc_impl` on ABCs,
        `_member_names_` on Enums); only names bound in the body count.
        Without source, every data member of the namespace is taken.
        """
        names = [name for name, value in self._declared() if _is_data(value)]
        if self._class_node is None:
            return names
        assigned = _body_assigned_names(self._class_node)
        return [name for name in names if name in assigned]

    def _instance_attributes(self) -> list[str]:
        if self._class_node is None:
            return []

        names: list[str] = []
        for node in self._class_node.body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                names.extend(_assigned_self_attributes(node))
        return names

    def fields(self) -> list[str]:
        """Non-constant data members, in declaration order."""
        annotations = self._annotations()
        candidates = list(annotations)
        candidates += self._declared_data()

        slots = vars(self.target).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        candidates += list(slots)
        candidates += self._instance_attributes()

        return _unique([
            name for name in candidates
            if not _is_dunder(name) and not self._is_constant(name, annotations)
        ])

    def constants(self) -> list[str]:
        """Class-level values named in UPPER_CASE or annotated Final."""
        annotations = self._annotations()
        candidates = [name for name in annotations if self._is_constant(name, annotations)]
        candidates += [
            name for name in self._declared_data()
            if self._is_constant(name, annotations)
        ]
        return _unique([name for name in candidates if not _is_dunder(name)])

    def inner_classes(self) -> list[str]:
        """Classes whose body sits inside this class's body."""
        prefix = f"{self.target.__qualname__}."
        return [
            name for name, value in self._declared()
            if inspect.isclass(value) and value.__qualname__ == prefix + name
        ]

    def methods(self) -> list[str]:
        """Declared functions, static and class methods, minus constructors."""
        owner_file = str(self.defining_file) if self.defining_file is not None else None
        names = []
        for name, value in self._declared():
            func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
            if not inspect.isfunction(func):
                continue
            if name in CONSTRUCTORS or name in RUNTIME_MEMBERS:
                continue
            if _is_synthetic(func, self.target, owner_file):
                continue
            names.append(name)
        return names

    def has_no_fields(self) -> bool:
        return not self.fields()

    def has_no_constants(self) -> bool:
        return not self.constants()

    def has_no_inner_classes(self) -> bool:
        return not self.inner_classes()

    def has_no_methods(self) -> bool:
        return not self.methods()

    # -------------------------------------------------------------------------
    # Source text
    # -------------------------------------------------------------------------

    @cached_property
    def defining_file(self) -> Optional[Path]:
        """File of the module that defines the class, if there is one."""
        try:
            filename = inspect.getsourcefile(self.target)
        except (OSError, TypeError):
            return None
        return Path(filename) if filename else None

    @property
    def source_path(self) -> Path:
        """The file named after the class in the working directory."""
        return self.workdir / f"{self.name}.py"

    @property
    def source_paths(self) -> list[Path]:
        """
        Every file the forbidden-token scan reads.

        `<workdir>/<Name>.py` first, then the defining module when that is
        a different file. A missing `<Name>.py` is skipped as long as the
        defining module can be scanned instead.
        """
        paths = [self.source_path]
        defining = self.defining_file
        if defining is not None and defining.resolve() != self.source_path.resolve():
            if not self.source_path.is_file():
                paths = []
            paths.append(defining)
        return paths

    def source_lines(self, path: Optional[Path] = None) -> list[str]:
        """
        Read a source file line by line (default: `source_path`).

        Raises:
            SourceReadError: If the file is missing or not valid UTF-8
        """
        path = self.source_path if path is None else path
        try:
            return path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(path, describe_exception(exc)) from exc

    def has_no(self, *keywords: str, whole_words: bool = False) -> bool:
        """
        Scan the source for forbidden tokens.

        Returns True if none is present and False if some source file
        cannot be read. A match in any file never returns: it reports the
        offending line and raises IntegrityViolation, which ends the
        evaluation run.
        """
        readable = True
        for path in self.source_paths:
            try:
                lines = self.source_lines(path)
            except SourceReadError as exc:
                self.reporter.comment(
                    f"Could not inspect file {exc.path} due to exception {exc.reason}"
                )
                readable = False
                continue
            enforce_no_tokens(lines, keywords, path, self.reporter, whole_words)
        return readable

    def has_no_loops(self) -> bool:
        """No `while`/`for` keyword anywhere, comprehensions included."""
        return self.has_no(*LOOP_KEYWORDS, whole_words=True)
