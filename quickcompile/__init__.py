"""quickcompile: compile Python source into in-memory modules and call into them.

    from quickcompile import compile_source, create_instance, MethodSignature

    module = compile_source(source).unwrap()
    greeter = create_instance(module, "Greeter")
    greet = greeter.bind("greet", MethodSignature.func(str, str))
    greet("World")
"""

__version__ = "0.3.0"

from .core.errors import (
    ConstructionFailure,
    EmitFailure,
    LifetimeError,
    MethodNotFound,
    ParseFailure,
    QuickCompileError,
    TypeNotFound,
)
from .core.models import (
    CompilationOptions,
    CompilationPolicy,
    Diagnostic,
    DiagnosticSeverity,
    ModuleReference,
    OptimizationLevel,
    OutputKind,
)
from .compiler import (
    CompilationResult,
    DefaultMemoryCompiler,
    LoadedModule,
    MemoryCompiler,
    PythonCompilationProvider,
    compile_source,
)
from .runtime import (
    BoundCall,
    DynamicInstance,
    MethodSignature,
    bind_method,
    create_instance,
    invoke,
)

__all__ = [
    "__version__",
    # Errors
    "ConstructionFailure",
    "EmitFailure",
    "LifetimeError",
    "MethodNotFound",
    "ParseFailure",
    "QuickCompileError",
    "TypeNotFound",
    # Models
    "CompilationOptions",
    "CompilationPolicy",
    "Diagnostic",
    "DiagnosticSeverity",
    "ModuleReference",
    "OptimizationLevel",
    "OutputKind",
    # Compiler
    "CompilationResult",
    "DefaultMemoryCompiler",
    "LoadedModule",
    "MemoryCompiler",
    "PythonCompilationProvider",
    "compile_source",
    # Runtime
    "BoundCall",
    "DynamicInstance",
    "MethodSignature",
    "bind_method",
    "create_instance",
    "invoke",
]
