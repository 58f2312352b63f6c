#!/usr/bin/env python
"""Test runner for harness-ai."""

import sys
import subprocess
import argparse


def main():
    """Run tests with various options."""
    parser = argparse.ArgumentParser(description="Run harness-ai tests")
    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument("--integration", action="store_true", help="Run integration tests only")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    
    args = parser.parse_args()
    
    # Build pytest command
    cmd = ["pytest", "tests"]
    
    # Integration tests are marked; everything else is a unit test
    if args.unit and not args.integration:
        cmd.extend(["-m", "not integration"])
    elif args.integration and not args.unit:
        cmd.extend(["-m", "integration"])
    
    # Add verbosity
    if args.verbose:
        cmd.append("-vv")
    
    # Add coverage
    if args.coverage:
        cmd.extend([
            "--cov=harness_ai",
            "--cov-report=term-missing",
            "--cov-report=html"
        ])
    
    # Run tests
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=".")
    
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
