"""
Readers for the whitespace-separated box-size and lipid coordinate streams.

Each box stream holds one length per frame. Each coordinate stream holds
2 * nlipids records per frame, head and tail beads interleaved
(head_0, tail_0, head_1, tail_1, ...).
"""

import os
import numpy as np
from ..exceptions import TrajectoryParseError

# environment variable -> default location
DEFAULT_PATHS = {
    "WBCELLX": "./boxsizeX.out",
    "WBCELLY": "./boxsizeY.out",
    "WBCELLZ": "./boxsizeZ.out",
    "WBLIPIDX": "./LipidX.out",
    "WBLIPIDY": "./LipidY.out",
    "WBLIPIDZ": "./LipidZ.out",
}


def default_paths(environ=None) -> dict:
    """
    Input file locations, overridden by the WBCELL* / WBLIPID* environment
    variables.
    """
    if environ is None:
        environ = os.environ
    return {key: environ.get(key, path) for key, path in DEFAULT_PATHS.items()}


def read_scalar_stream(
    path : str,
    count : int) -> np.ndarray:
    """
    Read the first count whitespace-separated floats of a file.

    Raises:
        TrajectoryParseError: if the file holds fewer than count records or one
            of them is not a number.
    """
    with open(path, "r") as fp:
        tokens = fp.read().split()

    if len(tokens) < count:
        raise TrajectoryParseError(path, count, len(tokens))

    values = np.empty(count, dtype=np.float64)
    for i, token in enumerate(tokens[:count]):
        try:
            values[i] = float(token)
        except ValueError:
            raise TrajectoryParseError(
                path, count, i,
                message=f"{path}: record {i} ('{token}') is not a number.") from None
    return values


def read_box_dimensions(
    paths : dict,
    nframes : int) -> tuple:
    """Box lengths (lx, ly, lz), each (nframes,)."""
    return tuple(read_scalar_stream(paths[key], nframes)
                 for key in ("WBCELLX", "WBCELLY", "WBCELLZ"))


def read_lipid_coordinates(
    paths : dict,
    nframes : int,
    nlipids : int) -> tuple:
    """
    Head and tail positions, each (nframes, nlipids, 3).
    """
    count = 2 * nlipids * nframes
    coords = np.stack([read_scalar_stream(paths[key], count)
                       for key in ("WBLIPIDX", "WBLIPIDY", "WBLIPIDZ")], axis=-1)
    coords = coords.reshape(nframes, nlipids, 2, 3)
    return coords[:, :, 0, :].copy(), coords[:, :, 1, :].copy()


class LipidTrajectory:
    """
    Box lengths and head/tail bead positions of every frame.

    Attributes:
        lx, ly, lz (np.ndarray): (nframes,) box lengths.
        head, tail (np.ndarray): (nframes, nlipids, 3) bead positions.
    """

    def __init__(
        self,
        lx : np.ndarray,
        ly : np.ndarray,
        lz : np.ndarray,
        head : np.ndarray,
        tail : np.ndarray) -> None:
        self.lx = np.asarray(lx, dtype=np.float64)
        self.ly = np.asarray(ly, dtype=np.float64)
        self.lz = np.asarray(lz, dtype=np.float64)
        self.head = np.asarray(head, dtype=np.float64)
        self.tail = np.asarray(tail, dtype=np.float64)

        nframes = self.lx.shape[0]
        if self.ly.shape != (nframes,) or self.lz.shape != (nframes,):
            raise ValueError("lx, ly and lz must have one entry per frame")
        if self.head.ndim != 3 or self.head.shape[0] != nframes or self.head.shape[2] != 3:
            raise ValueError(f"head must be (nframes={nframes}, nlipids, 3), got {self.head.shape}")
        if self.tail.shape != self.head.shape:
            raise ValueError("head and tail must have the same shape")


    @classmethod
    def from_files(
        cls,
        config,
        paths : dict = None) -> "LipidTrajectory":
        """
        Read config.nframes frames of config.nlipids lipids from the box and
        coordinate streams (default_paths() when paths is None).
        """
        if paths is None:
            paths = default_paths()
        print(f"Reading {config.nframes} frames of {config.nlipids} lipids")
        lx, ly, lz = read_box_dimensions(paths, config.nframes)
        head, tail = read_lipid_coordinates(paths, config.nframes, config.nlipids)
        return cls(lx, ly, lz, head, tail)


    @property
    def nframes(self) -> int:
        return self.lx.shape[0]


    @property
    def nlipids(self) -> int:
        return self.head.shape[1]


    @property
    def lx_av(self) -> float:
        return float(self.lx.mean())


    @property
    def ly_av(self) -> float:
        return float(self.ly.mean())


    def frame(
        self,
        i : int) -> tuple:
        """(head, tail, lx, ly, lz) of frame i."""
        return self.head[i], self.tail[i], self.lx[i], self.ly[i], self.lz[i]


    def __len__(self) -> int:
        return self.nframes


    def __iter__(self):
        for i in range(self.nframes):
            yield self.frame(i)
