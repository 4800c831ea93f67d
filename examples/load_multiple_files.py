#!/usr/bin/env python3
"""
Simple example: Read a variable across multiple CDF files

This example shows how to read one variable from a set of daily files,
restricted to a time window, with the different epoch representations.
"""

from pathlib import Path

import xarray_cdf as xcdf

# Files are read in the order given
data_dir = Path("path/to/data")
cdf_files = sorted(str(f) for f in data_dir.glob("mms1_fgm_srvy_l2_*.cdf"))
print(f"Found {len(cdf_files)} files")

reader = xcdf.MultiCDF(cdf_files)
print(f"Variables: {reader.variables()}")

# Method 1: Raw epoch values inside a time window
result = reader.read(
    "mms1_fgm_b_gse_srvy_l2",
    start="2015-10-16T13:00:00",
    end="2015-10-17T01:00:00",
)
print(f"\nRecords {result.record_range.first}..{result.record_range.last}")
print(f"Data shape: {result.data.shape}, epoch type: {result.epoch_type.value}")

# A window in a data gap or outside the files gives an empty result
for warning in result.warnings:
    print(f"Warning: {warning}")

# Method 2: Seconds relative to the first returned record
result = reader.read("mms1_fgm_b_gse_srvy_l2", epoch_output="seconds")
print(f"\nDuration: {result.depends[0][-1]:.3f} s")

# Method 3: Column layout (record axis last)
result = reader.read("mms1_fgm_b_gse_srvy_l2", layout="column")
print(f"\nColumn layout shape: {result.data.shape}")

# Method 4: Straight to an xarray Dataset, with validation while opening
ds = xcdf.open_cdf_dataset(
    cdf_files,
    "mms1_fgm_b_gse_srvy_l2",
    start="2015-10-16T13:00:00",
    validate=True,
)
print(ds)

# Save concatenated data
ds.to_netcdf("combined_output.nc")
print("\nSaved combined data to combined_output.nc")
