"""Invoke tasks for project management - all tools run from local .venv."""

import os
import sys
from pathlib import Path

from invoke import Context, task

SOURCE_DIRS = "COMMON/src MEDIASORT/src"
TEST_DIRS = "COMMON/tests MEDIASORT/tests"


def task_header(task_name: str, description: str, **kwargs):
    """Print a standard header for invoke tasks.

    Args:
        task_name: Name of the task
        description: Brief description of what the task does
        **kwargs: Task arguments to display
    """
    print("=" * 80)
    print(f"=== [{task_name}] {description}")
    print("=" * 80)

    cmd_parts = ["> invoke", task_name]
    for key, value in kwargs.items():
        if value is True:
            cmd_parts.append(f"--{key.replace('_', '-')}")
        elif value is not False and value is not None and value != "":
            cmd_parts.append(f"--{key.replace('_', '-')} {value}")

    print(" ".join(cmd_parts))
    print()


def get_venv_python():
    """Get the path to the virtual environment's python executable."""
    venv_path = Path(".venv")
    if os.name == "nt":  # Windows
        return venv_path / "Scripts" / "python.exe"
    return venv_path / "bin" / "python"


def ensure_venv(ctx: Context):
    """Ensure virtual environment exists before running tasks."""
    if not Path(".venv").exists():
        print("Virtual environment not found. Run 'python -m venv .venv' first.")
        sys.exit(1)


@task
def deps(ctx):
    """Install the project with its development dependencies."""
    task_header("deps", "Install project and dev dependencies")
    ensure_venv(ctx)
    ctx.run(f"{get_venv_python()} -m pip install -e .[dev]", pty=os.name != "nt")


@task
def clean(ctx):
    """Clean build artifacts, caches and script logs."""
    task_header("clean", "Clean build artifacts and caches")

    patterns = [".pytest_cache", "__pycache__", "*.egg-info", "build", "dist", "htmlcov"]
    for pattern in patterns:
        for path in Path(".").rglob(pattern):
            if ".venv" in path.parts:
                continue
            print(f"  Removing: {path}")
            ctx.run(
                f'rd /s /q "{path}"' if os.name == "nt" else f"rm -rf '{path}'",
                warn=True,
            )

    coverage_file = Path(".coverage")
    if coverage_file.exists():
        coverage_file.unlink()

    print("\n✓ Cleanup completed!")


@task
def lint(ctx):
    """Run linting tools."""
    task_header("lint", "Run linting tools (black, flake8)")
    ensure_venv(ctx)

    python_path = get_venv_python()

    print("Running black...")
    ctx.run(f"{python_path} -m black --check {SOURCE_DIRS} {TEST_DIRS}", warn=True)

    print("Running flake8...")
    ctx.run(
        f"{python_path} -m flake8 --max-line-length 88 {SOURCE_DIRS} {TEST_DIRS}",
        warn=True,
    )


@task
def format(ctx):
    """Format code with black."""
    task_header("format", "Format code with black")
    ensure_venv(ctx)
    ctx.run(f"{get_venv_python()} -m black {SOURCE_DIRS} {TEST_DIRS}")


@task
def test(ctx, coverage=True, verbose=False, test_path=""):
    """Run tests.

    Args:
        coverage: Generate coverage reports (disabled for specific tests)
        verbose: Run with verbose output
        test_path: Specific test file, class, or method to run
                  (e.g. 'MEDIASORT/tests/test_file_mover.py::test_same_file_is_noop')

    Examples:
        inv test                                              # All tests with coverage
        inv test --test-path="MEDIASORT/tests/test_cli.py"    # One test file
    """
    task_header(
        "test",
        f"Run specific test: {test_path}" if test_path else "Run tests with coverage",
        coverage=coverage,
        verbose=verbose,
        test_path=test_path,
    )
    ensure_venv(ctx)

    cmd = f"{get_venv_python()} -m pytest"
    if test_path:
        cmd += f" {test_path} -s"
    elif coverage:
        cmd += " --cov=common --cov=mediasort --cov-report=html --cov-report=term"
    if verbose:
        cmd += " -v"

    ctx.run(cmd, pty=os.name != "nt")


@task
def run(ctx, args="", env="dev"):
    """Run the media sorter.

    Args:
        args: Arguments to pass to mediasort (as a single string)
        env: Environment whose .env.<env> file is loaded (default: dev)

    Examples:
        invoke run --args "/path/to/photos --dry-run"
        invoke run --args "/path/to/photos --target /path/to/library" --env prod
    """
    ensure_venv(ctx)
    print(f"Running mediasort in {env} environment with args: {args}")
    ctx.run(f"{get_venv_python()} -m mediasort --env {env} {args}", pty=os.name != "nt")
