"""Example: Joining precipitation stations to ecoregions.

Demonstrates CRS normalization, region filtering, the point-in-polygon join
and per-region aggregation using in-memory data.
"""

import logging

import numpy as np
import pandas as pd

from regionsmith import PointSet, PolygonSet, SpatialJoinTask
from regionsmith.primitives.crs import describe_crs, transform_coordinates


def make_ecoregions() -> PolygonSet:
    """Three lon/lat ecoregions; the middle one has a lake (hole)."""
    west = np.array([[-110, 40], [-106, 40], [-106, 44], [-110, 44]])
    middle = np.array([[-106, 40], [-102, 40], [-102, 44], [-106, 44]])
    lake = np.array([[-104.5, 41.5], [-103.5, 41.5], [-103.5, 42.5], [-104.5, 42.5]])
    east = np.array([[-102, 40], [-98, 40], [-98, 44], [-102, 44]])
    return PolygonSet(
        rings=[[west], [middle, lake], [east]],
        attributes=pd.DataFrame(
            {"name": ["Mountains", "High Plains", "Prairie"], "code": [21, 25, 27]},
            index=["MT", "HP", "PR"],
        ),
        crs="EPSG:4326",
    )


def make_stations(n_stations: int = 400) -> PointSet:
    """Stations in a projected CRS, as they often arrive from another source."""
    rng = np.random.default_rng(42)
    lon = rng.uniform(-111, -97, n_stations)
    lat = rng.uniform(39, 45, n_stations)
    precip = 300 + 40 * (lon + 111) + rng.normal(0, 30, n_stations)
    coords = transform_coordinates(np.column_stack([lon, lat]), "EPSG:4326", "EPSG:5070")
    return PointSet(
        coordinates=coords,
        attributes=pd.DataFrame({"precip_mm": precip}),
        index=pd.Index([f"st{i:04d}" for i in range(n_stations)], name="station"),
        crs="EPSG:5070",
    )


def main():
    """Run ecoregion join example."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    print("=" * 60)
    print("Ecoregion Precipitation Join Example")
    print("=" * 60)

    ecoregions = make_ecoregions()
    stations = make_stations()
    print(f"\n1. Loaded {ecoregions!r}")
    print(f"   Loaded {stations!r}")
    print(
        f"   CRS: stations {describe_crs(stations.crs)}, "
        f"ecoregions {describe_crs(ecoregions.crs)}"
    )

    # The state boundary restricts stations before the join
    state = PolygonSet(
        rings=[[np.array([[-109, 41], [-99, 41], [-99, 43.5], [-109, 43.5]])]],
        attributes=pd.DataFrame({"state": ["Example"]}),
        crs="EPSG:4326",
    )

    print("\n2. Running normalize -> filter -> join -> flatten...")
    task = SpatialJoinTask(target_crs="EPSG:5070")
    table = task.run(stations, ecoregions, region=state)
    print(f"   {len(table)} stations inside the state boundary")
    print(f"   {table['name'].isna().sum()} stations fell in no ecoregion (the lake)")
    print(table.head())

    print("\n3. Mean precipitation by ecoregion (joined by ecoregion id):")
    summary = task.summarize(table, ecoregions, value_column="precip_mm")
    for eco_id, row in summary.iterrows():
        print(
            f"   {eco_id} {row['name']:12s} n={row['n_points']:3d} "
            f"mean={row['precip_mm_mean']:.1f} mm"
        )

    print("=" * 60)


if __name__ == "__main__":
    main()
