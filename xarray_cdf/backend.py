"""
Xarray backend engine for CDF files
"""

from collections.abc import Iterable
from pathlib import Path

import xarray as xr
from xarray.backends import BackendEntrypoint

from .reader import CDFReadResult, read_cdf


def _dims(name: str, shape: tuple, record_dim: str, record_varying: bool, layout: str) -> tuple:
    """Dimension names for an array with no dimension of its own."""
    dims = [f"{name}_dim{j}" for j in range(len(shape))]
    if record_varying and dims:
        dims[-1 if layout == "column" else 0] = record_dim
    return tuple(dims)


def to_dataset(result: CDFReadResult) -> xr.Dataset:
    """Build an xarray Dataset from a :class:`CDFReadResult`

    The variable becomes a data variable. A one-dimensional dependency whose
    length matches the variable's axis becomes the coordinate of that axis;
    other dependencies are added as data variables.

    Parameters
    ----------
    result : CDFReadResult
        Output of :meth:`MultiCDF.read` or :func:`read_cdf`

    Returns
    -------
    dataset : xarray.Dataset
    """
    data = result.data
    layout = result.layout
    data_varying = result.record_varying[0] if result.record_varying else True
    row_shape = data.shape[::-1] if layout == "column" and data_varying else data.shape
    # axis i of the data belongs to DEPEND_(i + offset)
    offset = 0 if data_varying else 1

    axis_names = []
    for i, size in enumerate(row_shape):
        k = i + offset
        dep = result.depends[k] if k < len(result.depends) else None
        if dep is not None and dep.ndim == 1 and dep.shape[0] == size:
            axis_names.append(result.depend_names[k])
        elif k == 0:
            axis_names.append("record")
        else:
            axis_names.append(f"{result.variable}_dim{k}")

    if data_varying and axis_names:
        record_dim = axis_names[0]
    else:
        record_dim = result.depend_names[0] or "record"

    dims = tuple(axis_names[::-1]) if layout == "column" and data_varying else tuple(axis_names)
    coords = {}
    data_vars = {result.variable: xr.Variable(dims, data)}

    for k, (name, dep) in enumerate(zip(result.depend_names, result.depends, strict=True)):
        if dep is None or name == result.variable:
            continue
        if name in axis_names:
            coords[name] = xr.Variable((name,), dep)
            continue
        varying = result.record_varying[k + 1] if len(result.record_varying) > k + 1 else False
        data_vars[name] = xr.Variable(_dims(name, dep.shape, record_dim, varying, layout), dep)

    attrs = {
        "n_files": result.n_files,
        "epoch_type": result.epoch_type.value if result.epoch_type is not None else "",
        "first_record": result.record_range.first,
        "last_record": result.record_range.last,
        "layout": layout,
    }
    if result.warnings:
        attrs["warnings"] = "; ".join(str(w) for w in result.warnings)

    return xr.Dataset(data_vars, coords=coords, attrs=attrs)


def open_cdf_dataset(
    filenames: str | Path | Iterable[str | Path],
    variable: str,
    start=None,
    end=None,
    layout: str = "row",
    epoch_output: str = "datetime",
    validate: bool = False,
    drop_variables: Iterable[str] | None = None,
) -> xr.Dataset:
    """Open one variable from one or more CDF files as an xarray Dataset

    Parameters
    ----------
    filenames : str, Path or iterable of them
        A single file, a glob pattern, or files in record order
    variable : str
        Variable to read
    start, end : str, optional
        Time window ``yyyy-mm-ddThh:mm:ss[.fff]`` on the variable's DEPEND_0
    layout : {"row", "column"}, default "row"
        Axis order of record-varying arrays
    epoch_output : {"datetime", "raw", "seconds", "string"}, default "datetime"
        Representation of epoch-typed arrays
    validate : bool, default False
        Validate the files while opening them
    drop_variables : iterable of str, optional
        Variables to drop from the dataset

    Returns
    -------
    dataset : xarray.Dataset

    Examples
    --------
    >>> import xarray_cdf as xcdf
    >>> ds = xcdf.open_cdf_dataset("mms1_fgm_*.cdf", "mms1_fgm_b_gse_srvy_l2",
    ...                            start="2015-10-16T13:00:00", end="2015-10-16T13:10:00")
    >>> print(ds)
    """
    if isinstance(filenames, Path):
        filenames = [str(filenames)]
    elif not isinstance(filenames, str):
        filenames = [str(f) for f in filenames]

    result = read_cdf(
        filenames,
        variable,
        validate=validate,
        start=start,
        end=end,
        layout=layout,
        epoch_output=epoch_output,
    )
    ds = to_dataset(result)
    if drop_variables:
        ds = ds.drop_vars(list(drop_variables), errors="ignore")
    return ds


class CDFBackendEntrypoint(BackendEntrypoint):
    """Xarray backend entrypoint for CDF files"""

    description = "Backend for reading one variable and its dependencies from CDF files"

    def open_dataset(  # type: ignore[override]
        self,
        filename_or_obj: str | Path,
        *,
        drop_variables: tuple[str] | None = None,
        variable: str | None = None,
        start=None,
        end=None,
        layout: str = "row",
        epoch_output: str = "datetime",
        validate: bool = False,
    ) -> xr.Dataset:
        """Open a CDF variable as an xarray Dataset

        Parameters
        ----------
        filename_or_obj : str or Path
            Path to CDF file
        drop_variables : tuple of str, optional
            Variables to drop from the dataset
        variable : str
            Variable to read (required)
        start, end : str, optional
            Time window on the variable's DEPEND_0
        layout : str, default "row"
        epoch_output : str, default "datetime"
        validate : bool, default False

        Returns
        -------
        dataset : xarray.Dataset
        """
        if variable is None:
            raise ValueError("The cdf engine needs variable=<name>")
        return open_cdf_dataset(
            Path(filename_or_obj),
            variable,
            start=start,
            end=end,
            layout=layout,
            epoch_output=epoch_output,
            validate=validate,
            drop_variables=drop_variables,
        )

    def guess_can_open(self, filename_or_obj: str | Path) -> bool:  # type: ignore[override]
        """Guess if this backend can open the file from its .cdf extension"""
        try:
            return Path(filename_or_obj).suffix.lower() == ".cdf"
        except (TypeError, AttributeError):
            return False
