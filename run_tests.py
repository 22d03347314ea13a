#!/usr/bin/env python3
"""
Test runner script for the series solver.
Run this to execute all tests with nice formatting.
"""

import unittest
import sys
import os

# Add the current directory to the path so the package imports without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

def run_tests():
    """Discover and run all tests"""
    loader = unittest.TestLoader()
    start_dir = os.path.dirname(os.path.abspath(__file__))
    suite = loader.discover(os.path.join(start_dir, 'tests'), pattern='test_*.py', top_level_dir=start_dir)

    # Run the tests with verbose output
    runner = unittest.TextTestRunner(verbosity=2, buffer=True)
    result = runner.run(suite)

    # Print summary
    print("\n" + "="*50)
    if result.wasSuccessful():
        print("🎉 All tests passed!")
    else:
        print("❌ Some tests failed:")
        print(f"  - Failures: {len(result.failures)}")
        print(f"  - Errors: {len(result.errors)}")

    print(f"Total tests run: {result.testsRun}")
    print("="*50)

    return result.wasSuccessful()

if __name__ == '__main__':
    success = run_tests()
    sys.exit(0 if success else 1)
