from .compile_unit import CompileUnit

__all__ = ["CompileUnit"]
