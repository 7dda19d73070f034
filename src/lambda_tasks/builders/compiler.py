"""Turns a target's Python source tree into a deployable bundle."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Set

from ..errors import CompileError

DEFAULT_EXCLUDES = (
    "dist",
    "__pycache__",
    "*.pyc",
    ".git",
    ".venv",
    "venv",
    ".pytest_cache",
    "tests",
    "lambda-config.yaml",
    "lambda-config.yml",
    "requirements*.txt",
)


@dataclass(frozen=True)
class Diagnostic:
    path: Path
    line: Optional[int]
    message: str

    def __str__(self) -> str:
        location = f"{self.path}:{self.line}" if self.line else str(self.path)
        return f"{location}: {self.message}"


class PythonCompiler:
    """
    Checks and copies the modules that make up a Lambda function.

    The source root is the directory holding the entry module. Release
    compilation refuses to produce a bundle while any module has a syntax
    error; dev compilation only reports the diagnostics.
    """

    def __init__(self, exclude: Sequence[str] = DEFAULT_EXCLUDES):
        self.exclude = tuple(exclude)

    def _ignore(self, directory: str, names: List[str]) -> Set[str]:
        ignored = set(shutil.ignore_patterns(*self.exclude)(directory, names))
        # Symlinked directories can point back up the tree.
        for name in names:
            path = Path(directory) / name
            if path.is_symlink() and path.is_dir():
                ignored.add(name)
        return ignored

    def _sources(self, source_root: Path) -> Iterator[Path]:
        stack = [source_root]
        while stack:
            directory = stack.pop()
            names = sorted(p.name for p in directory.iterdir())
            ignored = self._ignore(str(directory), names)
            for name in names:
                if name in ignored:
                    continue
                path = directory / name
                if path.is_dir():
                    stack.append(path)
                elif path.suffix == ".py":
                    yield path

    def compile_dev(self, entry_module: Path) -> List[Diagnostic]:
        """Compiles every module in memory and returns the syntax errors found."""
        entry_module = Path(entry_module)
        if not entry_module.is_file():
            raise CompileError(f"{entry_module} does not exist")

        diagnostics = []
        for path in sorted(self._sources(entry_module.parent)):
            try:
                compile(path.read_bytes(), str(path), "exec", dont_inherit=True)
            except SyntaxError as e:
                diagnostics.append(Diagnostic(path, e.lineno, e.msg))
            except ValueError as e:
                # Raised for source containing null bytes.
                diagnostics.append(Diagnostic(path, None, str(e)))
        return diagnostics

    def compile_release(self, entry_module: Path, output_dir: Path) -> Path:
        """Copies the source tree into output_dir once it compiles cleanly."""
        entry_module = Path(entry_module)
        diagnostics = self.compile_dev(entry_module)
        if diagnostics:
            raise CompileError(
                f"{len(diagnostics)} module(s) failed to compile", diagnostics
            )

        output_dir = Path(output_dir)
        shutil.copytree(
            entry_module.parent,
            output_dir,
            ignore=self._ignore,
            dirs_exist_ok=True,
        )
        return output_dir
