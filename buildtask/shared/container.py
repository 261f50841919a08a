# buildtask/shared/container.py
from dependency_injector import containers, providers

from buildtask.shared.config import settings

# --- Adapters ---
from buildtask.adapters.toolchain import AssemblyLinker, ResgenResourceCompiler, SubprocessCompilerProcess

# --- Use Cases ---
from buildtask.core.use_cases.compile_unit import CompileUnit


class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.
    Connects the toolchain adapters to the compile use case.
    """

    config = providers.Object(settings)

    # Toolchain gateways
    resource_compiler = providers.Singleton(
        ResgenResourceCompiler,
        executable=config.provided.RESGEN_BIN,
        timeout=config.provided.TOOL_TIMEOUT_SEC,
    )

    resource_linker = providers.Singleton(
        AssemblyLinker,
        executable=config.provided.LINKER_BIN,
        timeout=config.provided.TOOL_TIMEOUT_SEC,
    )

    compiler_process = providers.Singleton(
        SubprocessCompilerProcess,
        timeout=config.provided.TOOL_TIMEOUT_SEC,
    )

    # Use Cases
    # A fresh use case per unit: it caches the response file path of one pass.
    compile_unit_use_case = providers.Factory(
        CompileUnit,
        resource_compiler=resource_compiler,
        resource_linker=resource_linker,
        compiler_process=compiler_process,
        settings=config,
    )


# Global Container Instance
container = Container()
