# tests/conftest.py
import os
from pathlib import Path
from typing import Dict, List
from unittest.mock import MagicMock

import pytest

from buildtask.core.ports import CompilerProcess, ResourceCompiler, ResourceLinker
from buildtask.shared.config import Settings

FORM1_CS = """\
using System;
using System.Windows.Forms;

namespace My.Ns
{
    public class Form1 : Form
    {
        public Form1() { }
    }
}
"""


def write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def set_mtime(path, mtime: float) -> None:
    os.utime(path, (mtime, mtime))


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the response file at a private temp directory."""
    rsp_dir = tmp_path / "rsp"
    rsp_dir.mkdir()
    return Settings(TEMP_DIR=str(rsp_dir), SYSTEM_LIBRARY_DIR=None, COMPILER_BIN=None)


@pytest.fixture(scope="function")
def mock_resource_compiler():
    """Resource compiler that writes an empty intermediate file."""
    compiler = MagicMock(spec=ResourceCompiler)

    def _compile(input_path, output_path, output_dir, base_dir):
        target = os.path.join(output_dir, output_path)
        Path(target).write_bytes(b"compiled")
        return target

    compiler.compile.side_effect = _compile
    return compiler


@pytest.fixture(scope="function")
def mock_linker():
    return MagicMock(spec=ResourceLinker)


@pytest.fixture(scope="function")
def captured() -> Dict[str, List]:
    """Response files seen by the fake compiler, in call order."""
    return {"args": [], "contents": []}


@pytest.fixture(scope="function")
def mock_compiler(captured):
    """
    Compiler process that records the response file contents and produces
    the output named by its /out option.
    """
    process = MagicMock(spec=CompilerProcess)

    def _run(executable, argument):
        assert argument.startswith('@"') and argument.endswith('"')
        path = argument[2:-1]
        text = Path(path).read_text(encoding="utf-8")
        captured["args"].append(argument)
        captured["contents"].append(text)
        for line in text.splitlines():
            if line.startswith('"/out:'):
                out = line[len('"/out:'):-1]
                os.makedirs(os.path.dirname(out), exist_ok=True)
                Path(out).write_bytes(b"MZ")
        return 0

    process.run.side_effect = _run
    return process


@pytest.fixture
def project(tmp_path) -> Path:
    """A small project tree with sources, a reference, a module and resources."""
    root = tmp_path / "proj"
    write(root / "src" / "a.cs", "class A {}")
    write(root / "src" / "b.cs", "class B {}")
    write(root / "lib" / "Ref.dll", "dll")
    write(root / "mod" / "M.netmodule", "module")
    write(root / "res" / "Strings.resx", "<root/>")
    write(root / "res" / "Form1.resx", "<root/>")
    write(root / "res" / "Form1.fr-FR.resx", "<root/>")
    write(root / "res" / "Form1.cs", FORM1_CS)
    write(root / "res" / "logo.png", "png")
    return root


@pytest.fixture
def unit_data(project) -> Dict:
    return {
        "output": "out/app.exe",
        "target": "exe",
        "define": "X",
        "main": "App.Main",
        "warnaserror": True,
        "base_dir": str(project),
        "sources": {"includes": ["src/*.cs"]},
        "references": {"includes": ["lib/*.dll"]},
        "modules": {"includes": ["mod/*.netmodule"]},
        "resources": [
            {"prefix": "App", "base_dir": "res", "includes": ["*.resx", "*.png"]},
        ],
        "arguments": [
            {"value": "/nowarn:618"},
            {"value": "/unsafe", "if": False},
        ],
    }
