"""
Demo script for the multivariate amputation package.

This script demonstrates basic usage of amputate() on a generated complete
dataset and shows how the resolved configuration can be inspected and reused.
"""

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from src.pipeline.amputation import (
    amputate, generate_data, evaluate_amputation, missing_data_pattern, score_separation
)
from numpy.random import default_rng


def demo_basic_amputation():
    """
    Ampute a single variable completely at random.

    This demonstrates:
    - Generating complete data
    - Amputing with one pattern under MCAR
    - Inspecting the realized missingness
    """
    print("=" * 70)
    print("DEMO: Basic MCAR Amputation")
    print("=" * 70)
    print()

    data, _ = generate_data(n=100, p=4, continuous_pct=1.0, integer_pct=0.0, rng=default_rng(1))
    result = amputate(data, proportion=0.3, patterns=[0, 1, 1, 1], mechanism="MCAR", rng=default_rng(42))

    print("Missing values per variable:")
    print("-" * 70)
    print(result.amp.isna().sum().to_string())
    print()
    return result


def demo_resolved_configuration():
    """
    Inspect the default configuration with run=False, edit it and rerun.
    """
    print("=" * 70)
    print("DEMO: Editing the Default Configuration")
    print("=" * 70)
    print()

    data, _ = generate_data(n=500, p=3, continuous_pct=1.0, integer_pct=0.0, rng=default_rng(2))
    config = amputate(data, run=False).config
    print("Default patterns:")
    print(config.patterns.to_string())
    print()

    patterns = config.patterns.to_numpy()
    patterns[:, 1] = 0
    weights = config.weights.to_numpy()
    weights[1, 0] = 2.0
    weights[2, 0] = 0.5
    result = amputate(
        data, patterns=patterns, frequencies=[0.3, 0.3, 0.4], weights=weights,
        type=["RIGHT", "TAIL", "LEFT"], rng=default_rng(42)
    )
    print("Missing data patterns after amputation:")
    print("-" * 70)
    print(missing_data_pattern(result.amp).to_string(index=False))
    print()
    return result


def demo_mechanisms():
    """
    Compare realized missingness across mechanisms and probability models.
    """
    print("=" * 70)
    print("DEMO: Comparing Mechanisms")
    print("=" * 70)
    print()

    data, _ = generate_data(n=1000, p=4, continuous_pct=1.0, integer_pct=0.0, rng=default_rng(3))
    scenarios = {
        'MCAR': dict(mechanism="MCAR"),
        'MAR continuous': dict(mechanism="MAR", continuous=True),
        'MAR discrete': dict(mechanism="MAR", continuous=False),
        'MNAR continuous': dict(mechanism="MNAR", continuous=True),
    }

    for name, scenario in scenarios.items():
        result = amputate(data, proportion=0.4, rng=default_rng(42), **scenario)
        metrics = evaluate_amputation(result)
        print(f"  {name:20s}: case_prop={metrics['case_prop']:.3f}  score_gap={metrics['score_gap']:.3f}")
        if result.scores is not None:
            separation = score_separation(result)
            print(separation.to_string(index=False))
        print()


def main():
    """
    Main demo function that runs all demonstrations.
    """
    print()
    print("Multivariate Amputation - Demo Script")
    print()
    print("For full-scale studies, use 'run_amputation.py'.")
    print()

    demo_basic_amputation()
    print("\n" + "=" * 70 + "\n")
    demo_resolved_configuration()
    print("\n" + "=" * 70 + "\n")
    demo_mechanisms()

    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
