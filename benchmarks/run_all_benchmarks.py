"""Run all performance benchmarks and generate report."""

import json
from pathlib import Path

from benchmark_join import run_all_join_benchmarks


def convert_to_native(obj):
    """Convert numpy types to native Python types."""
    if isinstance(obj, dict):
        return {k: convert_to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_to_native(item) for item in obj]
    elif hasattr(obj, "item"):  # numpy scalar
        return obj.item()
    else:
        return obj


def main():
    """Run all benchmarks and save results."""
    print("=" * 60)
    print("REGIONSMITH PERFORMANCE BENCHMARK SUITE")
    print("=" * 60)
    print()

    all_results = {}

    print("\n[1/1] Spatial Join Benchmarks")
    print("-" * 60)
    all_results["join"] = run_all_join_benchmarks()

    output_file = Path("benchmarks/results.json")
    output_file.parent.mkdir(exist_ok=True)
    with open(output_file, "w") as f:
        json.dump(convert_to_native(all_results), f, indent=2)

    print(f"\n✓ Results saved to {output_file}")

    print("\n" + "=" * 60)
    print("BENCHMARK SUMMARY")
    print("=" * 60)

    join_results = all_results["join"]["join_scalability"]
    print("\nPoint-in-polygon join (36 polygons x 64 vertices):")
    print(f"  Small (1k points):     {join_results['small']['join_time_seconds']*1000:8.2f} ms")
    print(f"  Large (100k points):   {join_results['large']['join_time_seconds']*1000:8.2f} ms")
    print(
        f"  Large, 1 thread:       "
        f"{join_results['large_1thread']['join_time_seconds']*1000:8.2f} ms"
    )

    print("\n✓ All benchmarks completed successfully!")


if __name__ == "__main__":
    main()
