# tests/test_compile_unit.py
"""
Tests for the compile use case: response file layout, resource naming and
bundling, the up-to-date short cut, and cleanup on every exit path.
"""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from buildtask.core.domain.exceptions import ToolchainError
from buildtask.core.domain.models import load_unit
from buildtask.core.use_cases.compile_unit import CompileUnit
from tests.conftest import set_mtime, write


@pytest.fixture
def use_case(mock_resource_compiler, mock_linker, mock_compiler, settings):
    return CompileUnit(
        resource_compiler=mock_resource_compiler,
        resource_linker=mock_linker,
        compiler_process=mock_compiler,
        settings=settings,
    )


def _leftovers(project: Path, settings) -> list:
    """Transient artifacts still on disk after a pass."""
    intermediates = sorted(p.name for p in (project / "res").glob("*.resources"))
    response_files = os.listdir(settings.TEMP_DIR)
    return intermediates + response_files


def test_response_file_layout(use_case, unit_data, project, captured) -> None:
    assert use_case.execute(load_unit(unit_data)) is True

    res = project / "res"
    expected = [
        "/nowarn:618",
        "/nologo",
        '"/target:exe"',
        '"/define:X"',
        f'"/out:{project / "out" / "app.exe"}"',
        '"/main:App.Main"',
        "/warnaserror",
        f'"/reference:{project / "lib" / "Ref.dll"}"',
        f'"/addmodule:{project / "mod" / "M.netmodule"}"',
        f'"/resource:{res / "My.Ns.Form1.resources"},My.Ns.Form1.resources"',
        f'"/resource:{res / "App.Strings.resources"},App.Strings.resources"',
        f'"/resource:{res / "logo.png"},App.logo.png"',
        f'"{project / "src" / "a.cs"}"',
        f'"{project / "src" / "b.cs"}"',
    ]
    assert captured["contents"][0].splitlines() == expected


def test_compiler_receives_single_response_file_argument(use_case, unit_data, mock_compiler, settings) -> None:
    use_case.execute(load_unit(unit_data))

    mock_compiler.run.assert_called_once()
    executable, argument = mock_compiler.run.call_args.args
    assert executable == "csc"
    assert argument.startswith(f'@"{settings.TEMP_DIR}')
    assert argument.endswith('.rsp"')


def test_localized_resources_are_linked_per_culture(use_case, unit_data, project, mock_linker) -> None:
    use_case.execute(load_unit(unit_data))

    satellite = project / "out" / "fr-FR" / "app.resources.dll"
    mock_linker.link.assert_called_once_with(
        [str(project / "res" / "My.Ns.Form1.fr-FR.resources")],
        str(satellite),
        "fr-FR",
    )
    assert satellite.parent.is_dir()


def test_definition_files_are_compiled_beside_their_source(use_case, unit_data, project, mock_resource_compiler) -> None:
    use_case.execute(load_unit(unit_data))

    res = str(project / "res")
    compiled = [c.args for c in mock_resource_compiler.compile.call_args_list]
    assert compiled == [
        (os.path.join(res, "Form1.fr-FR.resx"), "My.Ns.Form1.fr-FR.resources", res, res),
        (os.path.join(res, "Form1.resx"), "My.Ns.Form1.resources", res, res),
        (os.path.join(res, "Strings.resx"), "App.Strings.resources", res, res),
    ]


def test_transient_files_removed_after_success(use_case, unit_data, project, settings) -> None:
    use_case.execute(load_unit(unit_data))
    assert _leftovers(project, settings) == []
    assert use_case.response_file is None


def test_compiler_failure_cleans_up_and_raises(use_case, unit_data, project, settings, mock_compiler) -> None:
    mock_compiler.run.side_effect = None
    mock_compiler.run.return_value = 3

    with pytest.raises(ToolchainError) as exc:
        use_case.execute(load_unit(unit_data))

    assert exc.value.exit_code == 3
    assert _leftovers(project, settings) == []
    assert use_case.response_file is None


def test_resource_compiler_failure_cleans_up(use_case, unit_data, project, settings, mock_resource_compiler, mock_compiler) -> None:
    real_compile = mock_resource_compiler.compile.side_effect

    def _fail_on_strings(input_path, output_path, output_dir, base_dir):
        if input_path.endswith("Strings.resx"):
            # partial output left behind by the failing tool
            Path(output_dir, output_path).write_bytes(b"partial")
            raise ToolchainError("resgen", "bad resx", 1)
        return real_compile(input_path, output_path, output_dir, base_dir)

    mock_resource_compiler.compile.side_effect = _fail_on_strings

    with pytest.raises(ToolchainError):
        use_case.execute(load_unit(unit_data))

    mock_compiler.run.assert_not_called()
    assert _leftovers(project, settings) == []


def test_linker_failure_cleans_up(use_case, unit_data, project, settings, mock_linker, mock_compiler) -> None:
    mock_linker.link.side_effect = ToolchainError("al", "cannot link", 1)

    with pytest.raises(ToolchainError):
        use_case.execute(load_unit(unit_data))

    mock_compiler.run.assert_not_called()
    assert _leftovers(project, settings) == []


def test_second_run_is_a_no_op(use_case, unit_data, project, settings, mock_compiler) -> None:
    past = time.time() - 3600
    for p in project.rglob("*"):
        if p.is_file():
            set_mtime(p, past)

    assert use_case.execute(load_unit(unit_data)) is True
    assert (project / "out" / "app.exe").exists()

    assert use_case.execute(load_unit(unit_data)) is False
    assert mock_compiler.run.call_count == 1
    assert os.listdir(settings.TEMP_DIR) == []


def test_touched_source_triggers_rebuild(use_case, unit_data, project, mock_compiler) -> None:
    past = time.time() - 3600
    for p in project.rglob("*"):
        if p.is_file():
            set_mtime(p, past)
    use_case.execute(load_unit(unit_data))

    set_mtime(project / "src" / "b.cs", time.time() + 60)
    assert use_case.execute(load_unit(unit_data)) is True
    assert mock_compiler.run.call_count == 2


def test_system_library_references_are_promoted(use_case, unit_data, tmp_path, settings, captured) -> None:
    system_dir = tmp_path / "framework"
    write(system_dir / "System.Xml.dll", "dll")
    settings.SYSTEM_LIBRARY_DIR = str(system_dir)
    unit_data["references"] = {"includes": ["lib/*.dll", "System.Xml.dll", "Missing.dll"]}

    use_case.execute(load_unit(unit_data))

    lines = captured["contents"][0].splitlines()
    refs = [line for line in lines if line.startswith('"/reference:')]
    assert refs[-1] == f'"/reference:{system_dir / "System.Xml.dll"}"'
    assert not any("Missing.dll" in line for line in lines)


def test_local_reference_shadows_system_library(use_case, unit_data, project, tmp_path, settings, captured) -> None:
    system_dir = tmp_path / "framework"
    write(system_dir / "Ref.dll", "dll")
    write(project / "Ref.dll", "local")
    settings.SYSTEM_LIBRARY_DIR = str(system_dir)
    unit_data["references"] = {"includes": ["Ref.dll"]}

    use_case.execute(load_unit(unit_data))

    refs = [line for line in captured["contents"][0].splitlines() if line.startswith('"/reference:')]
    assert refs == [f'"/reference:{project / "Ref.dll"}"']


def test_language_options_and_compiler_override(use_case, unit_data, settings, mock_compiler, captured) -> None:
    settings.COMPILER_BIN = "vbnc"
    unit_data.update(language="vb", debug=True, warnaserror=False, define=None, main=None)
    unit_data["arguments"] = []
    unit_data["resources"] = []

    use_case.execute(load_unit(unit_data))

    assert mock_compiler.run.call_args.args[0] == "vbnc"
    lines = captured["contents"][0].splitlines()
    assert lines[:4] == ["/debug", '"/define:DEBUG=True,TRACE=True"', "/nologo", '"/target:exe"']
    assert "/warnaserror" not in lines


def test_group_without_prefix_uses_plain_names(use_case, unit_data, project, captured) -> None:
    unit_data["resources"] = [{"base_dir": "res", "dynamic_prefix": True, "includes": ["Strings.resx", "*.png"]}]

    use_case.execute(load_unit(unit_data))

    res = project / "res"
    lines = captured["contents"][0].splitlines()
    assert f'"/resource:{res / "Strings.resources"},Strings.resources"' in lines
    assert f'"/resource:{res / "logo.png"},logo.png"' in lines


def test_namespace_only_linkage_takes_class_from_file_name(use_case, unit_data, project, captured) -> None:
    write(project / "res" / "Strings.cs", "namespace Only.Ns\n{\n    enum Kind { A }\n}\n")

    use_case.execute(load_unit(unit_data))

    res = project / "res"
    lines = captured["contents"][0].splitlines()
    assert f'"/resource:{res / "Only.Ns.Strings.resources"},Only.Ns.Strings.resources"' in lines


def test_class_only_linkage_takes_namespace_from_prefix(use_case, unit_data, project, captured) -> None:
    write(project / "res" / "Strings.cs", "internal class StringTable\n{\n}\n")

    use_case.execute(load_unit(unit_data))

    res = project / "res"
    lines = captured["contents"][0].splitlines()
    assert f'"/resource:{res / "App.StringTable.resources"},App.StringTable.resources"' in lines


def test_up_to_date_output_creates_nothing(use_case, unit_data, project, settings, mock_compiler, mock_resource_compiler) -> None:
    past = time.time() - 3600
    for p in project.rglob("*"):
        if p.is_file():
            set_mtime(p, past)
    write(project / "out" / "app.exe", "MZ")

    assert use_case.execute(load_unit(unit_data)) is False
    mock_compiler.run.assert_not_called()
    mock_resource_compiler.compile.assert_not_called()
    assert os.listdir(settings.TEMP_DIR) == []


def test_verbose_unit_still_cleans_up(use_case, unit_data, project, settings) -> None:
    unit_data["verbose"] = True
    assert use_case.execute(load_unit(unit_data)) is True
    assert _leftovers(project, settings) == []


def test_localized_resources_from_every_group_share_one_satellite(use_case, unit_data, project, mock_linker) -> None:
    write(project / "res2" / "Other.resx", "<root/>")
    write(project / "res2" / "Other.fr-FR.resx", "<root/>")
    unit_data["resources"].append({"prefix": "App2", "base_dir": "res2", "includes": ["*.resx"]})

    use_case.execute(load_unit(unit_data))

    mock_linker.link.assert_called_once_with(
        [
            str(project / "res" / "My.Ns.Form1.fr-FR.resources"),
            str(project / "res2" / "App2.Other.fr-FR.resources"),
        ],
        str(project / "out" / "fr-FR" / "app.resources.dll"),
        "fr-FR",
    )
