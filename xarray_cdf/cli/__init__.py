"""Command line tools for xarray-cdf: xcdf"""
