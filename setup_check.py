#!/usr/bin/env python3
"""
Setup verification script for the repository.

Run this to verify that everything is properly set up.
"""

import sys
from pathlib import Path

def check_python_version():
    """Check Python version."""
    print("Checking Python version...")
    if sys.version_info < (3, 9):
        print("❌ Python 3.9+ required")
        return False
    print(f"✅ Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    return True

def check_imports():
    """Check if all required packages can be imported."""
    print("\nChecking imports...")
    required = [
        "numpy",
        "pandas",
        "matplotlib",
        "tqdm",
    ]

    all_ok = True
    for package in required:
        try:
            __import__(package)
            print(f"✅ {package}")
        except ImportError:
            print(f"❌ {package} not found - run: pip install -e .")
            all_ok = False

    return all_ok

def check_package_modules():
    """Check if package modules can be imported."""
    print("\nChecking package modules...")
    modules = [
        "lsystem_trees.errors",
        "lsystem_trees.grammar",
        "lsystem_trees.interpreter",
        "lsystem_trees.inference",
        "lsystem_trees.rendering",
        "configs.grammars",
        "configs.experiment_config",
    ]

    all_ok = True
    for module in modules:
        try:
            __import__(module)
            print(f"✅ {module}")
        except ImportError as e:
            print(f"❌ {module} - {e}")
            all_ok = False

    return all_ok

def check_files(root=None):
    """Check if required files exist."""
    print("\nChecking required files...")
    root = Path(__file__).parent if root is None else Path(root)
    required_files = [
        "pyproject.toml",
        "lsystem_trees/__init__.py",
        "lsystem_trees/grammar.py",
        "lsystem_trees/interpreter.py",
        "lsystem_trees/inference.py",
        "lsystem_trees/rendering.py",
        "experiments/run_experiment.py",
        "configs/grammars.py",
        "configs/experiment_config.py",
    ]

    all_ok = True
    for file_name in required_files:
        file_path = root / file_name
        if file_path.exists() and file_path.is_file():
            print(f"✅ {file_name}")
        else:
            print(f"❌ {file_name} not found")
            all_ok = False

    return all_ok

def quick_functionality_test():
    """Quick test of basic functionality."""
    print("\nRunning quick functionality tests...")

    try:
        import numpy as np
        from lsystem_trees import StochasticGrammar, render, infer_depth
        from configs.grammars import TREE_GRAMMAR
        from configs.experiment_config import ExperimentConfig

        rng = np.random.default_rng(0)

        print("  Testing grammar expansion...", end=" ")
        grammar = StochasticGrammar(TREE_GRAMMAR)
        statement = grammar.expand(grammar.axiom, 3, rng=rng)
        assert set(statement) <= grammar.alphabet
        print("✅")

        print("  Testing turtle rendering...", end=" ")
        segments = render(statement, ExperimentConfig().initial_state(), rng=rng)
        assert all(s.index == i for i, s in enumerate(segments))
        print("✅")

        print("  Testing depth inference...", end=" ")
        estimate = infer_depth(grammar.count_leaves(statement), 3, 200, grammar, rng=rng)
        assert abs(sum(estimate.posterior.values()) - 1.0) < 1e-9
        print("✅")

        return True

    except Exception as e:
        print(f"❌ Error: {e}")
        return False

def main():
    """Run all checks."""
    print("=" * 60)
    print("REPOSITORY SETUP VERIFICATION")
    print("=" * 60)

    checks = [
        ("Python Version", check_python_version),
        ("Required Packages", check_imports),
        ("Required Files", check_files),
        ("Package Modules", check_package_modules),
        ("Functionality", quick_functionality_test),
    ]

    results = []
    for name, check_func in checks:
        results.append(check_func())

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)

    if all(results):
        print("✅ All checks passed!")
        print("\nYou're ready to run experiments:")
        print("  python experiments/run_experiment.py")
        print("\nOr a short run:")
        print("  python experiments/run_experiment.py --config quick")
        return 0
    else:
        print("❌ Some checks failed")
        print("\nTroubleshooting:")
        print("1. Install dependencies: pip install -e .")
        print("2. Ensure you're in the repository root directory")
        print("3. Check Python version (3.9+ required)")
        return 1

if __name__ == "__main__":
    sys.exit(main())
