#!/usr/bin/env python3
"""Run the geo attendance test suite.

Usage:
    python run_tests.py              # everything under app/
    python run_tests.py core         # geometry, scoring and policy units only
    python run_tests.py api -x       # extra arguments go straight to pytest
"""
import subprocess
import sys

SUITES = {
    "core": [
        "app/test_geo.py",
        "app/test_overlap.py",
        "app/test_policy.py",
        "app/test_classifier.py",
        "app/test_sampling.py",
    ],
    "services": [
        "app/sessions",
        "app/attendance",
        "app/rosters",
    ],
    "api": ["app/test_api.py"],
}


def run_tests(argv=None) -> int:
    """Run the selected suite and return pytest's exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    targets = []
    if argv and argv[0] in SUITES:
        targets = SUITES[argv.pop(0)]

    completed = subprocess.run(
        [sys.executable, "-m", "pytest", "-q", *targets, *argv],
        check=False,
    )
    suite = " ".join(targets) or "all suites"
    if completed.returncode == 0:
        print(f"\n✅ Tests passed ({suite})")
    else:
        print(f"\n❌ Tests failed with exit code {completed.returncode} ({suite})")
    return completed.returncode


if __name__ == "__main__":
    raise SystemExit(run_tests())
