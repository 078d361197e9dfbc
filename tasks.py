# type: ignore
import os

from invoke import task


@task
def venv(ctx):
    """Create the virtualenv and install ledgerlock with its dev extras."""
    print("Initializing development environment with uv...")

    ctx.run("uv sync --extra dev")

    print("Development environment initialization complete!")


@task
def clean(ctx):
    """Delete untracked files (build output, caches) after a dry run and a prompt."""
    ctx.run("git clean -nfdx")

    response = input("Remove the files listed above? (y/n) [n]: ").strip().lower()
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """Run ruff and mypy over the package and the tests."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src tests", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run the test suite with coverage of the ledgerlock package."""
    ctx.run("pytest --cov=ledgerlock --cov-report=term-missing", pty=True)


@task
def build_package(ctx):
    """Build the ledgerlock sdist and wheel into dist/."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task(pre=[lint, test])
def release(ctx):
    """Build and upload ledgerlock to PyPI once lint and tests pass."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    build_package(ctx)
    ctx.run(f"uv publish --token {token}")
