"""Settings for importing and rendering a mesh."""

from __future__ import annotations

from dataclasses import dataclass, field

from .axes import Axes


@dataclass
class Config:
    """Configuration for importing and rendering the mesh."""

    # Give materials a primitive color equal to their diffuse color.
    use_primitive_color: bool = False
    # Add vertex normals to the vertex data.
    use_normals: bool = False
    # Add texture coordinates to the vertex data.
    use_texcoords: bool = False
    # Add vertex colors to the vertex data.
    use_vertex_colors: bool = False
    # Fractional bits of precision for texture coordinates.
    texcoord_bits: int = 11
    # Amount to scale the model data.
    scale: float = 1.0
    # Order and sign of the axes.
    axes: Axes = field(default_factory=Axes)
    # Create animations.
    animate: bool = False