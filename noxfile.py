import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

# Common dependencies for test sessions
COMMON_DEPS = ["-e", ".[test]"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "SECRET_KEY",
    "QR_SECRET",
    "REDIS_URL",
    "LOG_LEVEL",
]


def _set_env(session):
    """
    Propagate configuration variables into the session.
    Also ensure the project root is on PYTHONPATH.
    """
    # Ensure imports from the project root work
    session.env["PYTHONPATH"] = str(Path.cwd())
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "app/", "tests/")
    session.run("black", "app/", "tests/")
    session.run("flake8", "app/", "tests/")
    session.run("mypy", "app/")


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests against in-memory SQLite.
    Pass positional args to target specific tests.
    Usage:
      nox -s unit             # runs all tests under tests/unit
      nox -s unit -- tests/unit/test_services/test_checkin.py
    """
    _set_env(session)
    session.install(*COMMON_DEPS)
    # Determine which tests to run: use posargs or default to whole unit suite
    tests = session.posargs or ["tests/unit"]
    # Reporting paths (relative)
    htmlcov_path = ".nox/htmlcov"
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
        "--cov=app",
        "--cov-report=term-missing",
        "--cov-report=html:" + htmlcov_path,
        "--cov-report=xml",
    )


@nox.session(name="integration")
def integration(session):
    """
    Run API tests through the FastAPI test client.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_api/test_checkin.py
    """
    _set_env(session)
    session.install(*COMMON_DEPS)
    tests = session.posargs or ["tests/integration"]
    session.run(
        "pytest",
        *tests,
        "--maxfail=1",
        "-vv",
        "--tb=short",
    )
