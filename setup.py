"""
Setup script for xarray-cdf
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")
else:
    long_description = "CDF epoch handling and time-windowed multi-file reads for xarray"

setup(
    name="xarray-cdf",
    version="0.1",
    description="CDF epoch time model and time-windowed multi-file CDF reader for xarray",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["xarray_cdf", "xarray_cdf.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Astronomy",
        "Topic :: Scientific/Engineering :: Physics",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.20",
        "xarray>=2022.3.0",
        "cdflib>=1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov",
            "scipy",
            "ruff>=0.8.0",
            "mypy>=1.13",
        ],
    },
    entry_points={
        "console_scripts": [
            "xcdf=xarray_cdf.cli.main:main",
        ],
        "xarray.backends": [
            "cdf=xarray_cdf.backend:CDFBackendEntrypoint",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
