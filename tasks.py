"""Invoke tasks for testing, linting, and formatting.

Run tasks with: invoke TASK_NAME

Test Examples:
    invoke test              # Run all tests
    invoke test.coverage    # Terminal and XML coverage report
    invoke test.debug       # Run with debugger on failure
    invoke test.smoke       # Exercise a live registry

Linting Examples:
    invoke lint.flake8      # Check code style with flake8
    invoke lint.black       # Format code with black
"""

from invoke import Collection, task


@task(help={"verbose": "Show verbose output"})
def test(ctx, verbose=False):
    """Run all tests."""
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    ctx.run(cmd)


@task(help={"url": "Registry URL (default: $REGISTRY_API_URL or localhost:5000)"})
def smoke(ctx, url=None):
    """Run the client against a live registry.

    Example:
        invoke test.smoke --url https://registry.example.com
    """
    env = {"REGISTRY_API_URL": url} if url else {}
    ctx.run("uv run python -m tests.runners.util_registry", env=env)


@task(help={"file": "Specific test file to run", "name": "Test name or pattern"})
def specific(ctx, file=None, name=None):
    """Run specific test file, class, or function.

    Examples:
        invoke test.specific --file tests/unit/test_client.py
        invoke test.specific --file tests/unit/test_client.py --name TestTags
    """
    if not file and not name:
        print("Error: Please specify --file and/or --name")
        return

    cmd = "uv run pytest"
    if file:
        cmd += f" {file}"
    if name:
        cmd += f"::{name}"

    ctx.run(cmd)


@task
def coverage(ctx):
    """Coverage report in the terminal plus coverage.xml for CI."""
    ctx.run("uv run pytest --cov=registry_api --cov-report=term-missing --cov-report=xml")


@task
def debug(ctx):
    """Run tests with debugger (pdb) on failure."""
    ctx.run("uv run pytest --pdb")


@task(help={"pattern": "Test name or pattern to filter"})
def debug_logs(ctx, pattern=None):
    """Run tests with the registry_api loggers at DEBUG.

    Example:
        invoke test.debug-logs --pattern test_tags_v2_fallback_keeps_order
    """
    cmd = "uv run pytest --log-cli-level=DEBUG"
    if pattern:
        cmd += f" -k {pattern}"
    ctx.run(cmd)


@task(help={"src": "Path to check (default: registry_api)"})
def flake8(ctx, src="registry_api"):
    """Run flake8 style checker."""
    ctx.run(f"uv run flake8 {src} main.py")


@task(help={"check": "Check only, don't modify files"})
def black(ctx, check=False):
    """Format code with black."""
    cmd = "uv run black registry_api tests main.py"
    if check:
        cmd += " --check"
    ctx.run(cmd)


# Namespace for tests
test_ns = Collection("test")
test_ns.add_task(test, default=True)
test_ns.add_task(smoke)
test_ns.add_task(specific)
test_ns.add_task(coverage)
test_ns.add_task(debug)
test_ns.add_task(debug_logs)

# Namespace for linting
lint_ns = Collection("lint")
lint_ns.add_task(flake8)
lint_ns.add_task(black)

# Register namespaces at module level for invoke to discover
ns = Collection(test_ns, lint_ns)
