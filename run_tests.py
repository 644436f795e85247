#!/usr/bin/env python3
"""
Simple test runner for the math battle engine.

Provides a straightforward way to run the pytest suite or a single test
module without remembering paths.
"""

import sys
import subprocess
import argparse


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and handle errors."""
    print(f"=== {description} ===")
    print(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        print(result.stdout)
        if result.stderr:
            print("STDERR:", result.stderr)
        print(f"{description} completed successfully\n")
        return True
    except subprocess.CalledProcessError as e:
        print(f"{description} failed with exit code {e.returncode}")
        print("STDOUT:", e.stdout)
        print("STDERR:", e.stderr)
        print()
        return False


def run_unit_tests(verbose: bool = True) -> bool:
    """Run all tests."""
    cmd = [sys.executable, "-m", "pytest", "tests/"]
    if verbose:
        cmd.append("-v")
    return run_command(cmd, "Unit Tests")


def run_specific_test(test_name: str, verbose: bool = True) -> bool:
    """Run every test module whose file name matches test_name."""
    cmd = [sys.executable, "-m", "pytest", "tests/", "-k", test_name]
    if verbose:
        cmd.append("-v")
    return run_command(cmd, f"Test: {test_name}")


def main():
    """Main test runner function."""
    parser = argparse.ArgumentParser(
        description="Simple test runner for the math battle engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py                       # Run all tests
  python run_tests.py --quiet               # Run tests with minimal output
  python run_tests.py --test battle_manager # Run tests matching a name
        """
    )

    parser.add_argument(
        "--test",
        help="Run tests matching a name (e.g., 'shop' or 'battle_manager')"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Run with minimal output"
    )

    args = parser.parse_args()
    verbose = not args.quiet

    if args.test:
        success = run_specific_test(args.test, verbose)
    else:
        success = run_unit_tests(verbose)

    if success:
        print("All tests passed!")
        sys.exit(0)
    else:
        print("Some tests failed. See output above for details.")
        sys.exit(1)


if __name__ == "__main__":
    main()
