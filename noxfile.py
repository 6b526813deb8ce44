"""Nox automation configuration for the RN2483 link.

Provides automated testing, linting, formatting, and build tasks.
"""

import nox

nox.options.sessions = ["lint", "tests"]
nox.options.reuse_existing_virtualenvs = True


@nox.session(python=["3.8", "3.9", "3.10", "3.11", "3.12"])
def tests(session):
    """Run the test suite."""
    session.install("-e", ".[dev]")
    session.run("pytest", *session.posargs)


@nox.session(python="3.10")
def coverage(session):
    """Run tests with coverage reporting."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=rn2483",
        "--cov-report=term-missing",
        "--cov-report=html",
        *session.posargs
    )


@nox.session(python="3.10")
def lint(session):
    """Run linters (flake8 and mypy)."""
    session.install("-e", ".[dev]")
    session.run("flake8", "rn2483", "tests")
    session.run("mypy", "rn2483", "--ignore-missing-imports")


@nox.session(python="3.10")
def format_check(session):
    """Check code formatting with black."""
    session.install("black")
    session.run("black", "--check", "rn2483", "tests", "noxfile.py")


@nox.session(python="3.10")
def build(session):
    """Build sdist and wheel."""
    session.install("build", "twine")
    session.run("python", "-m", "build")
    session.run("twine", "check", "dist/*")


@nox.session(python="3.10")
def tests_unit(session):
    """Run unit tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/unit", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_integration(session):
    """Run integration tests only."""
    session.install("-e", ".[dev]")
    session.run("pytest", "tests/integration", "-v", *session.posargs)


@nox.session(python="3.10")
def tests_link(session):
    """Run the command/response correlation tests only."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "tests/unit/test_command_executor.py",
        "tests/unit/test_response_router.py",
        "tests/unit/test_connection.py",
        "-v",
        *session.posargs
    )


@nox.session(python="3.10")
def ci(session):
    """Run full CI pipeline (tests + coverage + lint)."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=rn2483",
        "--cov-report=term-missing",
        "--cov-report=xml",
        "--cov-fail-under=80",
        "-v"
    )
    session.run("flake8", "rn2483", "tests")
    session.run("mypy", "rn2483", "--ignore-missing-imports")
