"""
Nox sessions for mintrange.

Sessions:
  - lint  : ruff + black + mypy over the package
  - unit  : the pytest suite (unit + hypothesis property tests)
  - cov   : the suite under coverage, with a terminal report

Pass extra args to pytest like:
  nox -s unit -- -k "updates and not props" -vv
"""

from __future__ import annotations

from pathlib import Path

import nox

nox.options.reuse_venv = True
nox.options.stop_on_first_error = False
nox.options.sessions = ["lint", "unit"]

REPO_ROOT = Path(__file__).resolve().parent
PY_PATHS = ["mintrange", "noxfile.py"]

TEST_PYTHONS = ["3.10", "3.11", "3.12"]


def _common_env(session: nox.Session) -> None:
    session.env.setdefault("PYTHONUNBUFFERED", "1")
    # Keep the developer's ledger settings out of the suite.
    for var in ("MINTRANGE_EVENT_LOG", "MINTRANGE_LOG_FORMAT"):
        session.env.pop(var, None)


def _install_test_stack(session: nox.Session) -> None:
    session.run("python", "-m", "pip", "install", "--upgrade", "pip", silent=True)
    session.install("-e", f"{REPO_ROOT}[test]")


@nox.session(name="lint", python="3.11")
def lint(session: nox.Session) -> None:
    """Static analysis: ruff, black (check), mypy."""
    _common_env(session)
    session.install("-e", f"{REPO_ROOT}[dev]")
    session.run("ruff", "check", *PY_PATHS)
    session.run("black", "--check", *PY_PATHS)
    session.run(
        "mypy",
        "--pretty",
        "--show-error-codes",
        "--ignore-missing-imports",
        "mintrange",
        "--exclude",
        "mintrange/tests",
    )


@nox.session(name="unit", python=TEST_PYTHONS)
def unit(session: nox.Session) -> None:
    """The full pytest suite."""
    _common_env(session)
    _install_test_stack(session)
    session.run("pytest", "-q", *session.posargs)


@nox.session(name="cov", python="3.11")
def cov(session: nox.Session) -> None:
    """Run the suite under coverage and print a report."""
    _common_env(session)
    _install_test_stack(session)
    session.install("coverage>=7.4.0")
    with session.chdir(str(REPO_ROOT)):
        session.run("coverage", "run", "--source", "mintrange", "-m", "pytest", "-q", *session.posargs)
        session.run("coverage", "report", "-m")
