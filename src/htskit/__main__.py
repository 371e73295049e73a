"""CLI entry point for htskit.

Enables ``python -m htskit <command>`` usage.

Subcommands:
    doctor   - Environment check: core dependencies.
    version  - Print htskit version.
"""

from __future__ import annotations

import argparse
import importlib
import sys

CORE_DEPS = [
    ("pandas", "pandas"),
    ("numpy", "numpy"),
    ("pydantic", "pydantic"),
]


def _check_import(module_name: str) -> tuple[bool, str | None]:
    """Try importing a module and return (success, version_or_none)."""
    try:
        mod = importlib.import_module(module_name)
        version = getattr(mod, "__version__", getattr(mod, "VERSION", None))
        return True, str(version) if version is not None else "installed"
    except ImportError:
        return False, None


def _cmd_doctor() -> int:
    """Run environment diagnostics."""
    import htskit

    print(f"htskit {htskit.__version__}")
    print(f"Python {sys.version}")
    print()

    print("Core dependencies:")
    all_core_ok = True
    for display_name, module_name in CORE_DEPS:
        ok, version = _check_import(module_name)
        status = f"  {version}" if ok else "  NOT INSTALLED"
        marker = "ok" if ok else "MISSING"
        print(f"  [{marker:>7s}] {display_name}{status}")
        if not ok:
            all_core_ok = False

    print()
    if all_core_ok:
        print("All systems go.")
        return 0

    print("WARNING: Some core dependencies are missing. Install with:")
    print("  pip install htskit")
    return 1


def _cmd_version() -> int:
    """Print version string."""
    import htskit

    print(htskit.__version__)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="htskit",
        description="htskit: Hierarchical and grouped time series aggregation",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("doctor", help="Environment check: core dependencies")
    subparsers.add_parser("version", help="Print version")

    args = parser.parse_args(argv)

    if args.command == "doctor":
        return _cmd_doctor()
    elif args.command == "version":
        return _cmd_version()
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
