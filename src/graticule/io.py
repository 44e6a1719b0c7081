"""
Data I/O utilities.

Handles saving rendered nets (GLB, CSV) with metadata sidecars and loading
them back. CSV data is in canonical long format:
line_name, family, line_index, point_index, x, y, z
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from pygltflib import (
    GLTF2, Scene, Node, Mesh as GLTFMesh, Primitive, Attributes, Accessor,
    BufferView, Buffer, Material, PbrMetallicRoughness,
    ARRAY_BUFFER, FLOAT, LINE_STRIP
)

from .calculator import LatLongNet
from .config import NetConfig, NetMetadata
from .render import NetGroup, LineObject, LineRenderer

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["line_name", "family", "line_index", "point_index", "x", "y", "z"]


def build_metadata(
    net: LatLongNet,
    group: NetGroup,
    config: NetConfig
) -> NetMetadata:
    """Collect export metadata for a rendered net."""
    return NetMetadata(
        net_name=group.name,
        plot_step=config.plot_step.to_dict(),
        lat_vect_length=net.lat_vect_length,
        long_vect_length=net.long_vect_length,
        n_latitude_lines=len(group.latitude_lines),
        n_longitude_lines=len(group.longitude_lines),
        n_points=group.n_points,
        bounds=group.bounds,
        generation_params={
            "algorithm": "latitude_longitude_net",
            **config.to_dict(),
            "computed": {
                "radius": config.radius,
                "scaled_radius": config.radius * config.scale_coefficient,
            }
        }
    )


def save_net_glb(
    group: NetGroup,
    path: Path,
    metadata: Optional[Dict[str, Any]] = None
) -> Path:
    """
    Export a rendered net to GLB.

    One parent node named after the group, one child node per line.
    Each line is a mesh with a single LINE_STRIP primitive.

    Args:
        group: Rendered net
        path: Output path (.glb)
        metadata: Optional dictionary embedded in glTF extras

    Returns:
        Path to exported file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    gltf = GLTF2(
        scene=0,
        scenes=[Scene(nodes=[0])],
        nodes=[Node(name=group.name, children=[])],
        meshes=[],
        materials=[],
        accessors=[],
        bufferViews=[],
        buffers=[]
    )

    blob = b""
    material_index: Dict[tuple, int] = {}

    for line in group.children:
        renderer = line.line_renderer
        vertices = renderer.positions.astype(np.float32)
        vertex_blob = vertices.tobytes()

        color = tuple(float(c) for c in renderer.color)
        if color not in material_index:
            material_index[color] = len(gltf.materials)
            gltf.materials.append(
                Material(
                    pbrMetallicRoughness=PbrMetallicRoughness(
                        baseColorFactor=list(color),
                        metallicFactor=0.0,
                        roughnessFactor=1.0
                    ),
                    alphaMode="BLEND" if color[3] < 1.0 else "OPAQUE",
                    doubleSided=True
                )
            )

        gltf.bufferViews.append(
            BufferView(
                buffer=0,
                byteOffset=len(blob),
                byteLength=len(vertex_blob),
                target=ARRAY_BUFFER
            )
        )
        gltf.accessors.append(
            Accessor(
                bufferView=len(gltf.bufferViews) - 1,
                componentType=FLOAT,
                count=len(vertices),
                type="VEC3",
                max=vertices.max(axis=0).tolist(),
                min=vertices.min(axis=0).tolist()
            )
        )
        gltf.meshes.append(
            GLTFMesh(
                name=line.name,
                primitives=[
                    Primitive(
                        attributes=Attributes(POSITION=len(gltf.accessors) - 1),
                        mode=LINE_STRIP,
                        material=material_index[color]
                    )
                ]
            )
        )
        gltf.nodes.append(
            Node(
                name=line.name,
                mesh=len(gltf.meshes) - 1,
                extras={"family": line.family, "index": line.index, "width": renderer.width}
            )
        )
        gltf.nodes[0].children.append(len(gltf.nodes) - 1)

        blob += vertex_blob

    gltf.buffers.append(Buffer(byteLength=len(blob)))

    if metadata:
        gltf.extras = metadata

    gltf.set_binary_blob(blob)
    gltf.save(str(path))

    logger.info(f"Exported GLB to {path} ({len(group.children)} lines, {group.n_points} points)")
    return path


def net_to_dataframe(group: NetGroup) -> pd.DataFrame:
    """Flatten a rendered net into one row per point."""
    frames = []
    for line in group.children:
        pts = line.line_renderer.positions
        frames.append(pd.DataFrame({
            "line_name": line.name,
            "family": line.family,
            "line_index": line.index,
            "point_index": np.arange(len(pts)),
            "x": pts[:, 0],
            "y": pts[:, 1],
            "z": pts[:, 2],
        }))
    if not frames:
        return pd.DataFrame(columns=CSV_COLUMNS)
    return pd.concat(frames, ignore_index=True)[CSV_COLUMNS]


def save_net_csv(group: NetGroup, path: Path) -> Path:
    """Save a rendered net as a long-format CSV of points."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = net_to_dataframe(group)
    df.to_csv(path, index=False)
    logger.info(f"Saved CSV: {path} ({len(df)} points)")
    return path


def load_net_csv(path: Path, name: Optional[str] = None) -> NetGroup:
    """
    Load a rendered net from CSV.

    Args:
        path: CSV written by save_net_csv
        name: Group name (defaults to filename)

    Returns:
        NetGroup with lines in file order
    """
    path = Path(path)
    df = pd.read_csv(path)
    logger.info(f"Loaded {len(df)} points from {path}")

    missing = [c for c in CSV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns {missing} in {path}")

    group = NetGroup(name=name or path.stem)
    for line_name, rows in df.groupby("line_name", sort=False):
        rows = rows.sort_values("point_index")
        renderer = LineRenderer()
        renderer.set_positions(rows[["x", "y", "z"]].to_numpy(dtype=np.float64))
        group.add(LineObject(
            name=str(line_name),
            line_renderer=renderer,
            family=str(rows["family"].iloc[0]),
            index=int(rows["line_index"].iloc[0])
        ))

    logger.info(f"Parsed {len(group.children)} lines")
    return group


def save_net(
    group: NetGroup,
    path: Path,
    metadata: Optional[NetMetadata] = None
) -> Path:
    """
    Save a rendered net by file extension, with metadata sidecar.

    Args:
        group: Rendered net
        path: Output path (.glb or .csv)
        metadata: NetMetadata (saved as .json sidecar)
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".glb":
        save_net_glb(group, path, metadata.to_dict() if metadata else None)
    elif suffix == ".csv":
        save_net_csv(group, path)
    else:
        raise ValueError(f"Unsupported net format: {path.suffix}")

    if metadata is not None:
        meta_path = path.with_suffix('.json')
        metadata.save(meta_path)
        logger.info(f"Saved metadata: {meta_path}")

    return path


def export_formats(
    group: NetGroup,
    output_dir: Path,
    formats: List[str],
    metadata: Optional[NetMetadata] = None,
    stem: str = "latlong_net"
) -> List[Path]:
    """Save the net once per requested format."""
    paths = []
    for fmt in formats:
        out = Path(output_dir) / fmt / f"{stem}.{fmt}"
        paths.append(save_net(group, out, metadata))
    return paths
