#!/usr/bin/env python3
"""
Test runner for the link page API.

Extra arguments go straight to pytest, e.g. `./run_tests.py -k reorder`.
The suite runs against a throwaway SQLite file with rate limiting off.
"""

import os
import subprocess
import sys


def run_tests(extra_args):
    """Run the test suite"""
    print("Running Link Page tests")
    print("=" * 40)

    os.chdir(os.path.dirname(os.path.abspath(__file__)))

    env = dict(os.environ)
    env.setdefault("DATABASE_URL", "sqlite:///./test.db")
    env.setdefault("RATE_LIMIT_BACKEND", "null")

    try:
        subprocess.run(
            [sys.executable, "-m", "pytest", "tests/", "--tb=short", *extra_args],
            check=True,
            env=env,
        )
        print("\nAll tests passed")
        return 0

    except subprocess.CalledProcessError as e:
        print(f"\nTests failed with exit code {e.returncode}")
        return e.returncode
    except FileNotFoundError:
        print("pytest not found. Install with: pip install -e '.[test]'")
        return 1
    finally:
        if os.path.exists("test.db"):
            os.remove("test.db")


if __name__ == "__main__":
    sys.exit(run_tests(sys.argv[1:]))
