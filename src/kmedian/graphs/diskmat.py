from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)


def estimate_matrix_memory(nrows: int, ncols: int, dtype_size: int = 8) -> float:
    """Return the footprint (in GB) of an nrows×ncols matrix."""
    return (nrows * ncols * dtype_size) / (1024 ** 3)


class DiskMat:
    """Row-major matrix view backed by a file through :class:`numpy.memmap`.

    The file is created if missing and grown to ``offset + nrows * ncols * itemsize``
    bytes if it is smaller. Elements are read and written through the usual
    indexing syntax or the underlying ``mat`` array.
    """

    def __init__(
        self,
        nrows: int,
        ncols: int,
        path: Union[str, Path],
        offset: int = 0,
        delete_file: bool = False,
        dtype=np.float64,
        aligned: bool = False,
    ) -> None:
        if nrows <= 0 or ncols <= 0:
            raise ValueError("DiskMat dimensions must be positive.")
        self.dtype = np.dtype(dtype)
        if offset < 0:
            raise ValueError("offset must be non-negative.")
        if aligned and offset % self.dtype.itemsize:
            raise ValueError("offset is not aligned; invalid storage.")

        self.path = Path(path)
        self.nrows = nrows
        self.ncols = ncols
        self.offset = offset
        self.delete_file = delete_file

        nbytes = nrows * ncols * self.dtype.itemsize
        total = nbytes + offset
        logger.debug(
            f"Mapping {nrows}x{ncols} matrix at {self.path} "
            f"(~{estimate_matrix_memory(nrows, ncols, self.dtype.itemsize):.3f} GB)"
        )
        self.path.touch(exist_ok=True)
        if self.path.stat().st_size < total:
            os.truncate(self.path, total)
            logger.debug(f"Grew {self.path} to {total} bytes")

        self.mat = np.memmap(
            self.path, dtype=self.dtype, mode="r+", offset=offset, shape=(nrows, ncols)
        )

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nrows, self.ncols)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return np.asarray(self.mat)
        return np.asarray(self.mat, dtype=dtype)

    def __getitem__(self, key):
        return self.mat[key]

    def __setitem__(self, key, value) -> None:
        self.mat[key] = value

    def flush(self) -> None:
        if self.mat is not None:
            self.mat.flush()

    def close(self) -> None:
        if self.mat is None:
            return
        self.mat.flush()
        self.mat = None
        if self.delete_file:
            self.path.unlink(missing_ok=True)

    def __enter__(self) -> "DiskMat":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DiskMat(shape={self.shape}, path={str(self.path)!r}, dtype={self.dtype})"
