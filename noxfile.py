"""Nox session definitions mirroring repository quality gates."""

from __future__ import annotations

import nox

nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Run lint and formatting checks without mutating files."""
    session.install("ruff")
    session.run("ruff", "check", "src", "tests")
    session.run("ruff", "format", "--check", "src", "tests")


@nox.session(name="lint-fix")
def lint_fix(session: nox.Session) -> None:
    """Apply ruff fixes and formatting."""
    session.install("ruff")
    session.run("ruff", "check", "--fix", "src", "tests")
    session.run("ruff", "format", "src", "tests")


@nox.session
def typecheck(session: nox.Session) -> None:
    """Run mypy on the pulseviz package with its dependencies installed."""
    session.install("mypy")
    session.install("-e", ".")
    session.run("mypy", "src")


@nox.session
def tests(session: nox.Session) -> None:
    """Run pytest against the test suite."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)


@nox.session(name="snapshot-smoke")
def snapshot_smoke(session: nox.Session) -> None:
    """Render one PNG per mode from a WAV passed after ``--``."""
    if not session.posargs:
        session.error("Usage: nox -s snapshot-smoke -- path/to/track.wav")
    session.install("-e", ".")
    track = session.posargs[0]
    for mode in ("bars", "radial", "wave", "particles"):
        session.run(
            "pulseviz-snapshot",
            track,
            "--mode",
            mode,
            "--seed",
            "7",
            "--out",
            f"{session.create_tmp()}/snapshot-{mode}.png",
        )
