"""Conversion of a scene into a model file, driven by command-line flags."""

from __future__ import annotations

import contextlib
import dataclasses
import math
import os
import struct
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TextIO

from .axes import Axes
from .compile import compile_mesh
from .config import Config
from .expr import Expr
from .flags import BoolFlag, ExprFlag, Flag, FlagArgument, IntFlag, Parser, StringFlag, UsageError
from .importer import import_mesh
from .model import Model
from .scene import Scene

WORKSPACE_VARIABLE = "BUILD_WORKSPACE_DIRECTORY"


def _f32(x: float) -> float:
    (value,) = struct.unpack("<f", struct.pack("<f", x))
    return value


def _format_float(x: float) -> str:
    """Format a single-precision value with the fewest digits that read back."""
    if math.isnan(x):
        return "nan"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    value = _f32(x)
    candidate = value
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _f32(candidate) == value:
            break
    text = repr(candidate)
    return text[:-2] if text.endswith(".0") else text


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class AxesFlag(Flag):
    """A flag holding an axis orientation such as "x,-z,y"."""

    value: Axes = field(default_factory=Axes)

    def argument(self) -> FlagArgument:
        return FlagArgument.REQUIRED

    def parse(self, arg: str | None) -> None:
        if arg is None:
            raise UsageError("flag requires a parameter")
        try:
            self.value = Axes.parse(arg)
        except ValueError as ex:
            raise UsageError(f"invalid axes: {ex}") from None


@dataclass
class Args:
    """Parsed command-line arguments."""

    model: str = ""
    output: str = ""
    output_stats: str = ""
    meter: Expr | None = None
    scale: Expr | None = None
    config: Config = field(default_factory=Config)


def fix_path(path: str, wd: str | None) -> str:
    """Resolve a relative path against the working directory wd, if any."""
    if not path or not wd or path.startswith("/"):
        return path
    if not wd.endswith("/"):
        wd += "/"
    return wd + path


def parse_args(argv: Sequence[str] | None = None, workspace: str | None = None) -> Args:
    """Parse the flags (without the program name).

    Relative paths are resolved against workspace; when it is None the
    workspace directory is taken from the environment. Raises UsageError
    for invalid or missing flags.
    """
    if argv is None:
        import sys

        argv = sys.argv[1:]
    if workspace is None:
        workspace = os.environ.get(WORKSPACE_VARIABLE, "")

    parser = Parser()
    model = parser.add_flag(StringFlag(), "model", "input model file", "FILE")
    output = parser.add_flag(StringFlag(), "output", "output data file", "FILE")
    output_stats = parser.add_flag(
        StringFlag(), "output-stats", "write human-readable model information to FILE", "FILE"
    )
    use_primitive_color = parser.add_bool_flag("use-primitive-color", "use primitive color from material")
    use_normals = parser.add_bool_flag("use-normals", "use vertex normals")
    use_vertex_colors = parser.add_bool_flag("use-vertex-colors", "use vertex colors")
    use_texcoords = parser.add_bool_flag("use-texcoords", "use texture coordinates")
    meter = parser.add_flag(ExprFlag(), "meter", "length of a meter", "EXPR")
    scale = parser.add_flag(ExprFlag(), "scale", "amount to scale model", "EXPR")
    texcoord_bits = parser.add_flag(
        IntFlag(value=11), "texcoord-bits", "fractional bits of precision for texture coordinates"
    )
    axes = parser.add_flag(AxesFlag(), "axes", "remap axes, default 'x,y,z'", "AXES")
    animate = parser.add_bool_flag("animate", "convert animations")

    parser.parse_all(argv)

    if not model.value:
        raise UsageError("missing required flag -model")
    if scale.value is None:
        raise UsageError("missing required flag -scale")

    config = Config(
        use_primitive_color=use_primitive_color.value,
        use_normals=use_normals.value,
        use_texcoords=use_texcoords.value,
        use_vertex_colors=use_vertex_colors.value,
        texcoord_bits=texcoord_bits.value,
        axes=axes.value,
        animate=animate.value,
    )
    return Args(
        model=fix_path(model.value, workspace),
        output=fix_path(output.value, workspace),
        output_stats=fix_path(output_stats.value, workspace),
        meter=meter.value,
        scale=scale.value,
        config=config,
    )


def write_file(path: str | os.PathLike[str], data: bytes) -> None:
    """Write data to a file, replacing its contents."""
    with open(path, "wb") as fp:
        fp.write(data)


def _write_config(stats: TextIO, cfg: Config) -> None:
    print("Config:", file=stats)
    print(f"    Primitive color: {_format_bool(cfg.use_primitive_color)}", file=stats)
    print(f"    Normals: {_format_bool(cfg.use_normals)}", file=stats)
    print(f"    Texcoords: {_format_bool(cfg.use_texcoords)}", file=stats)
    print(f"    Vertex colors: {_format_bool(cfg.use_vertex_colors)}", file=stats)
    print(f"    Texcoord bits: {cfg.texcoord_bits}", file=stats)
    print(f"    Scale: {_format_float(cfg.scale)}", file=stats)
    print(f"    Axes: {cfg.axes.to_string()}", file=stats)
    print(f"    Animate: {_format_bool(cfg.animate)}", file=stats)
    print("", file=stats)


def convert_scene(args: Args, scene: Scene) -> Model:
    """Convert a scene as the arguments direct and return the compiled model.

    Writes the model file and the statistics file when their paths are set.
    Raises ValueError if the scale is not a positive number.
    """
    if args.scale is None:
        raise UsageError("missing required flag -scale")
    env: dict[str, float] = {}
    if args.meter is not None:
        env["meter"] = args.meter.eval(env)
    scale = args.scale.eval(env)
    if not math.isfinite(scale) or scale <= 0:
        raise ValueError("scale must be a positive number")
    cfg = dataclasses.replace(args.config, scale=_f32(scale))

    with contextlib.ExitStack() as stack:
        stats: TextIO | None = None
        if args.output_stats:
            stats = stack.enter_context(open(args.output_stats, "w", encoding="utf-8"))
            _write_config(stats, cfg)

        mesh = import_mesh(cfg, scene, stats)
        model = compile_mesh(mesh, cfg, stats)
        if stats is not None:
            print(f"Display list commands: {len(model.commands)}", file=stats)
            print(f"Vertexes: {len(model.vertexes)}", file=stats)
            print(f"Animations: {len(model.animations)}", file=stats)
            print(f"Frames: {len(model.frames)}", file=stats)

    if args.output:
        write_file(args.output, model.emit(cfg))
    return model