"""Schema check CLI command."""

from __future__ import annotations

from pathlib import Path

from ..registry import TypeRegistry, builtin_types
from ..rpc.methods import MethodSignature, MethodTable
from ..schema.source import load_schema_file
from ..utils.sizing import type_sizes


def check_file(file_path: Path) -> None:
    """Load a JSON schema source and print its types and methods.

    Args:
        file_path: Path to the schema source file

    Raises:
        SchemaError: If the schema does not load or validate
    """
    registry, methods = load_schema_file(file_path)

    builtins = builtin_types()
    user_types = [
        name for name, typedef in registry.items() if builtins.get(name) != typedef
    ]

    print("|" * 7, "scalecomm: schema check", "|" * 7)
    print(
        f"{len(user_types)} type{'s' if len(user_types) != 1 else ''} and "
        f"{len(methods)} method{'s' if len(methods) != 1 else ''} loaded from {file_path}."
    )
    print("Sizes are in bytes; variable-length types are marked as such.")
    print()

    print_types(registry, user_types)
    print_methods(methods)


def print_types(registry: TypeRegistry, names: list[str]) -> None:
    """Print one line per type: name, constructor and static size."""
    sizes = type_sizes(registry)

    print(f"{'-' * 27} Types {'-' * 27}")
    for name in sorted(names):
        constructor = registry.lookup(name).constructor
        size = sizes[name]
        size_desc = "variable" if size is None else f"{size} bytes"
        label = f"{name} ({constructor})"
        dots = "." * max(1, 61 - len(label) - len(size_desc))
        print(f"    {label}{dots}{size_desc}")
    print()


def print_methods(methods: MethodTable) -> None:
    """Print each method signature."""
    print(f"{'-' * 26} Methods {'-' * 26}")
    if not len(methods):
        print("    (none)")
    for name in sorted(methods.names()):
        print(f"    {format_signature(methods.lookup(name))}")
    print()


def format_signature(signature: MethodSignature) -> str:
    """Render a signature as ``name(param: Type, opt?: Type) -> Returns``."""
    params = ", ".join(
        f"{param.name}{'' if param.required else '?'}: {param.type}" for param in signature.params
    )
    return f"{signature.name}({params}) -> {signature.returns}"
