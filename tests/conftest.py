import numpy as np
import pytest
from BILAYERtools.io import LipidTrajectory


def flat_bilayer(ngrid=4, box=40.0, lz=100.0, amplitude=0.0, nframes=1, phase=0.0):
    """
    One top and one bottom lipid at every cell centre, heads at z = 70 / 30 and
    tails 10 A inward, all displaced by amplitude * cos(2 pi x / box + phase * frame).
    """
    centres = (np.arange(ngrid) + 0.5) * box / ngrid
    gx, gy = np.meshgrid(centres, centres, indexing='ij')
    x, y = gx.ravel(), gy.ravel()

    heads, tails = [], []
    for f in range(nframes):
        u = amplitude * np.cos(2 * np.pi * x / box + phase * f)
        head = np.concatenate([np.column_stack([x, y, 70.0 + u]),
                               np.column_stack([x, y, 30.0 + u])])
        tail = np.concatenate([np.column_stack([x, y, 60.0 + u]),
                               np.column_stack([x, y, 40.0 + u])])
        heads.append(head)
        tails.append(tail)

    return LipidTrajectory(
        lx=np.full(nframes, box),
        ly=np.full(nframes, box),
        lz=np.full(nframes, lz),
        head=np.array(heads),
        tail=np.array(tails))


def write_streams(directory, trajectory):
    """Write a trajectory as the six whitespace-separated input streams."""
    paths = {}
    for key, values in (("WBCELLX", trajectory.lx),
                        ("WBCELLY", trajectory.ly),
                        ("WBCELLZ", trajectory.lz)):
        path = directory / f"{key}.out"
        path.write_text("\n".join(f"{v:.10f}" for v in values) + "\n")
        paths[key] = str(path)

    # (frames, nl, 2, 3): head/tail interleaved per lipid
    beads = np.stack([trajectory.head, trajectory.tail], axis=2)
    for axis, key in enumerate(("WBLIPIDX", "WBLIPIDY", "WBLIPIDZ")):
        path = directory / f"{key}.out"
        path.write_text("\n".join(f"{v:.10f}" for v in beads[..., axis].ravel()) + "\n")
        paths[key] = str(path)
    return paths


@pytest.fixture
def bilayer_factory():
    return flat_bilayer


@pytest.fixture
def stream_writer():
    return write_streams
