#!/usr/bin/env python3
"""
Simple example: Load one variable from a single CDF file

This example shows how to inspect a CDF file and open one of its variables,
together with its DEPEND_n variables, as an xarray Dataset.
"""

import xarray as xr

import xarray_cdf as xcdf

filename = "path/to/your/mms1_fgm_srvy_l2_20151016_v4.18.0.cdf"

# List the variables and their time axes
with xcdf.CDFFile(filename) as cdf:
    for name in cdf.variables():
        print(f"  - {name}: {cdf.record_count(name)} records, DEPEND_0={cdf.dependency_name(name, 0)}")

# Load one variable
ds = xcdf.open_cdf_dataset(filename, "mms1_fgm_b_gse_srvy_l2")
print("Dataset dimensions:", dict(ds.sizes))
print(f"Time range: {ds['Epoch'].values[0]} to {ds['Epoch'].values[-1]}")

# Same thing through xarray
ds = xr.open_dataset(filename, engine="cdf", variable="mms1_fgm_b_gse_srvy_l2")

# Records between two times (both ends inclusive)
rng, times = xcdf.time_record_range(
    filename, "Epoch", start="2015-10-16T13:00:00", end="2015-10-16T13:10:00"
)
if rng.is_empty:
    print(f"\nNo records: {rng.warning}")
else:
    print(f"\nRecords {rng.first}..{rng.last}: {xcdf.encode(times[0])[0]} to {xcdf.encode(times[-1])[0]}")

# Save to NetCDF
ds.to_netcdf("output.nc")
print("\nSaved to output.nc")
