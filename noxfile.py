import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (records, state machines, pure rules)."""
    _install(session)
    session.run("pytest", "-m", "domain")


@nox.session(python=PYTHON_VERSIONS)
def tests_application(session: nox.Session) -> None:
    """Run application-layer tests against a wired in-memory Marketplace."""
    _install(session)
    session.run("pytest", "-m", "application")


@nox.session(python=PYTHON_VERSIONS)
def tests_integration(session: nox.Session) -> None:
    """Run HTTP tests through the FastAPI app."""
    _install(session)
    session.run("pytest", "-m", "integration")
