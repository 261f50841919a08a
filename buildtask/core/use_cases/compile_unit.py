# buildtask/core/use_cases/compile_unit.py
from __future__ import annotations

import os
import tempfile
from contextlib import ExitStack
from typing import List, Optional, TextIO

from buildtask.core.domain.cultures import detect_culture
from buildtask.core.domain.exceptions import ToolchainError
from buildtask.core.domain.filesets import ResourceGroup
from buildtask.core.domain.models import CompilationUnit
from buildtask.core.ports import CompilerProcess, ResourceCompiler, ResourceLinker
from buildtask.core.resources.aggregator import CultureResourceAggregator
from buildtask.core.resources.languages import LanguageStrategy, get_language, write_flag, write_option
from buildtask.core.resources.linkage import CODEBEHIND_MARKERS, ResourceLinkageScanner
from buildtask.core.resources.naming import get_manifest_name
from buildtask.core.staleness import StalenessEvaluator
from buildtask.shared.config import Settings
from buildtask.shared.logging_setup import get_task_logger


def _remove_quietly(path: str, log) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        log.warning("cleanup_failed", path=path, error=str(e))


class CompileUnit:
    """
    Use Case: compiles one compilation unit with the external toolchain.

    Steps:
    1. Checks whether the output is stale; an up-to-date output is a no-op.
    2. Writes every compiler option into a transient response file.
    3. Compiles resource definitions, bundles localized ones per culture.
    4. Runs the compiler with the single argument @"<response file>".
    5. Always removes the response file and the compiled intermediates.
    """

    def __init__(
        self,
        resource_compiler: ResourceCompiler,
        resource_linker: ResourceLinker,
        compiler_process: CompilerProcess,
        settings: Settings,
    ):
        self.resource_compiler = resource_compiler
        self.resource_linker = resource_linker
        self.compiler_process = compiler_process
        self.settings = settings
        self.response_file: Optional[str] = None

    def execute(self, unit: CompilationUnit) -> bool:
        """
        Returns True when the compiler ran, False when the output was
        already up to date. Raises ToolchainError when any tool fails.
        """
        language = get_language(unit.language or self.settings.DEFAULT_LANGUAGE)
        log = get_task_logger(f"[{language.compiler}]")

        # collections without their own base directory use the unit's one
        unit.default_base_dirs()

        verdict = StalenessEvaluator(log).needs_compile(unit)
        if not verdict:
            log.debug("output_up_to_date", output=unit.output)
            return False

        with ExitStack() as cleanup:
            fd, self.response_file = tempfile.mkstemp(suffix=".rsp", dir=self.settings.temp_dir)
            cleanup.callback(self._discard_response_file, log)

            writer = os.fdopen(fd, "w", encoding="utf-8")
            cleanup.callback(writer.close)

            compiled_resources: List[str] = []
            cleanup.callback(self._discard_intermediates, compiled_resources, log)

            log.info("compiling", files=len(unit.sources.file_names), output=unit.output)

            self._write_options(writer, unit, language)
            self._write_references(writer, unit)
            self._write_resources(writer, unit, language, compiled_resources, log)

            for file_name in unit.sources.file_names:
                writer.write(f'"{file_name}"\n')

            # the compiler reads the file from disk
            writer.close()

            if unit.verbose:
                with open(self.response_file, "r", encoding="utf-8") as fh:
                    log.info("response_file_contents", path=self.response_file, contents=fh.read())

            executable = self.settings.COMPILER_BIN or language.compiler
            exit_code = self.compiler_process.run(executable, f'@"{self.response_file}"')
            if exit_code != 0:
                raise ToolchainError(executable, f"compilation of {unit.output} failed", exit_code)

        log.info("compiled", output=unit.output)
        return True

    # ------------------------------------------------------------------
    # Response file sections
    # ------------------------------------------------------------------
    def _write_options(self, writer: TextIO, unit: CompilationUnit, language: LanguageStrategy) -> None:
        language.write_options(writer, unit)

        for argument in unit.arguments:
            if argument.enabled and argument.value:
                writer.write(f"{argument.value}\n")

        # suppresses display of the sign-on banner
        write_flag(writer, "nologo")
        write_option(writer, "target", unit.target.value)
        if unit.define is not None:
            write_option(writer, "define", unit.define)
        write_option(writer, "out", unit.output)
        if unit.win32icon is not None:
            write_option(writer, "win32icon", unit.win32icon)
        if unit.main is not None:
            write_option(writer, "main", unit.main)
        if unit.warnaserror:
            write_flag(writer, "warnaserror")

    def _write_references(self, writer: TextIO, unit: CompilationUnit) -> None:
        self._promote_system_references(unit)
        for file_name in unit.references.file_names:
            write_option(writer, "reference", file_name)
        for file_name in unit.modules.file_names:
            write_option(writer, "addmodule", file_name)

    def _promote_system_references(self, unit: CompilationUnit) -> None:
        """Bare reference names missing locally resolve to the system library directory."""
        system_dir = self.settings.SYSTEM_LIBRARY_DIR
        if not system_dir:
            return
        references = unit.references
        for pattern in references.includes:
            if os.path.basename(pattern) != pattern:
                continue
            local_path = os.path.join(references.base_dir or unit.base_dir, pattern)
            full_path = os.path.join(system_dir, pattern)
            if not os.path.exists(local_path) and os.path.isfile(full_path):
                references.add(full_path)

    def _write_resources(
        self,
        writer: TextIO,
        unit: CompilationUnit,
        language: LanguageStrategy,
        compiled_resources: List[str],
        log,
    ) -> None:
        scanner = ResourceLinkageScanner(language, log)
        aggregator = CultureResourceAggregator(self.resource_linker, self.settings.SATELLITE_EXTENSION, log)

        for group in unit.resources:
            definitions, opaque = group.partition(self.settings.is_definition_file)

            for file_name in definitions:
                manifest_name = self.definition_manifest_name(group, file_name, scanner)
                resource_dir = os.path.dirname(file_name)
                intermediate = os.path.join(resource_dir, manifest_name)

                # tracked before compiling so a partial output is removed too
                compiled_resources.append(intermediate)
                self.resource_compiler.compile(file_name, manifest_name, resource_dir, resource_dir)

                if aggregator.add(file_name, intermediate) is None:
                    write_option(writer, "resource", f"{intermediate},{manifest_name}")

            for file_name in opaque:
                write_option(writer, "resource", f"{file_name},{get_manifest_name(group, file_name)}")

        # one satellite module per culture, spanning every group
        aggregator.flush(unit.output_dir, unit.output_base_name)

    def definition_manifest_name(self, group: ResourceGroup, file_name: str, scanner: ResourceLinkageScanner) -> str:
        """Manifest name of the compiled form of a resource definition file."""
        ext = self.settings.INTERMEDIATE_EXTENSION
        stem = os.path.splitext(os.path.basename(file_name))[0]
        manifest_name = stem + ext

        linkage = scanner.find_linkage(file_name)
        if linkage is None or not linkage.is_valid:
            return os.path.splitext(get_manifest_name(group, file_name))[0] + ext

        # the part of the name that the linkage replaces; culture stays in place
        actual_name = stem
        culture = detect_culture(file_name)
        if culture:
            actual_name = actual_name[: -(len(culture) + 1)]

        for marker in CODEBEHIND_MARKERS:
            if marker in manifest_name:
                manifest_name = manifest_name.replace(marker, "")
                actual_name = actual_name.replace(marker, "")
                break

        if not linkage.has_namespace_name:
            linkage.namespace_name = group.prefix
        if not linkage.has_class_name:
            linkage.class_name = actual_name

        return manifest_name.replace(actual_name, str(linkage), 1)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def _discard_intermediates(self, compiled_resources: List[str], log) -> None:
        for path in compiled_resources:
            _remove_quietly(path, log)

    def _discard_response_file(self, log) -> None:
        if self.response_file:
            _remove_quietly(self.response_file, log)
        self.response_file = None
