# n64model

A library for turning 3D scene data into the binary form used by a
Nintendo 64 engine: RSP display lists (`G_VTX`, `G_TRI1`, `G_TRI2`,
`G_MODIFYVTX`, `G_ENDDL`), big-endian vertex buffers and per-frame animation
data, all packed into one model file image.

The package has no runtime dependencies.

## Pipeline

1. **Describe a scene** with the dataclasses in `n64model.scene`: `Scene`,
   `SceneNode` (name, `Matrix4` transform, mesh indexes, children),
   `SceneMesh` (vertices, faces, material index, optional normals, texcoords
   and colors, bones), `SceneBone`, `VertexWeight`, and for animation
   `SceneAnimation`, `NodeAnim`, `VectorKey` and `QuatKey`.
2. **Import** it with `n64model.importer.import_mesh(cfg, scene, stats)`,
   which returns a `n64model.mesh.Mesh`. Positions are transformed by the node
   tree, the configured axes and scale, then rounded to 16-bit integers.
   Texture coordinates, vertex colors and normals are imported when the
   `Config` asks for them. With `animate` set, each animation is sampled at
   whole ticks (at most 100 frames), bones are evaluated, and frames with
   identical positions are shared. Frame 0 is always the bind pose. Problems
   with the scene, such as non-triangle faces or bad vertex indexes, raise
   `n64model.mesh.MeshError`.
3. **Compile** with `n64model.compile.compile_mesh(mesh, cfg, stats)`. It
   groups triangles into batches that fit the 32-entry vertex cache, reuses
   vertexes left in the cache by the previous batch, and produces one display
   list per material in a `n64model.model.Model`.
4. **Emit** with `Model.emit(cfg)`, which returns the bytes of the model file:
   the `Model` magic, a header, the animation and frame tables, up to four
   display lists, the vertex data and the frame data.

Passing a text stream as `stats` to `import_mesh` or `compile_mesh` writes
human-readable statistics to it; pass `None` to skip them.

```python
from n64model.config import Config
from n64model.scene import Scene, SceneMesh, SceneNode
from n64model.importer import import_mesh
from n64model.compile import compile_mesh

mesh = SceneMesh(vertices=[(0, 0, 0), (1, 0, 0), (0, 1, 0)], faces=[(0, 1, 2)])
scene = Scene(root=SceneNode(name="root", meshes=[0]), meshes=[mesh])

cfg = Config(scale=100.0)
model = compile_mesh(import_mesh(cfg, scene, None), cfg, None)
data = model.emit(cfg)      # bytes, starting with b"Model"
```

## Building blocks

- `n64model.axes.Axes` remaps axes given as strings such as `"x,-z,y"`:

  ```python
  from n64model.axes import Axes

  axes = Axes.parse("x, -z, y")
  axes.to_string()          # "X,-Z,Y"
  axes.apply((1, 2, 3))     # (1, -3, 2)
  ```

- `n64model.expr.parse` reads small arithmetic expressions with `+ - * /`,
  parentheses and named variables; `eval` raises `ExprEvalError` on division
  by zero, overflow or an undefined name:

  ```python
  from n64model.expr import parse

  parse("2 * meter").eval({"meter": 64.0})   # 128.0
  ```

- `n64model.gbi` encodes vertexes (`Vtx`) and commands (`Gfx.sp_vertex`,
  `Gfx.sp1_triangle`, `Gfx.sp2_triangle`, `Gfx.sp_modify_vertex`,
  `Gfx.sp_end_display_list`, `Gfx.dp_set_prim_color`).
- `n64model.displaylist.DisplayList` builds a display list over a
  `n64model.vertexcache.VertexCache`, pairing single triangles into
  two-triangle commands.
- `n64model.matrix` has `Matrix4` (use `a @ b` to compose) and `Quaternion`.
- `n64model.hashing` has a `Murmur3` hasher and bit-packing helpers;
  `n64model.quote.quote` quotes strings for error messages.

## Flags and conversion settings

`n64model.flags.Parser` handles flags written as `-name`, `--name`,
`-name=value` or `-name value`; boolean flags also accept `-no-name`, and
`-name=yes/no/on/off/true/false/1/0`. Errors raise `UsageError`.

`n64model.convert.parse_args(argv, workspace)` reads the converter's flags:
`-model`, `-output`, `-output-stats`, `-use-primitive-color`,
`-use-normals`, `-use-vertex-colors`, `-use-texcoords`, `-meter`, `-scale`,
`-texcoord-bits` (default 11), `-axes` and `-animate`. `-model` and `-scale`
are required. Relative paths are joined to `workspace`, or, when it is
`None`, to the directory in the `BUILD_WORKSPACE_DIRECTORY` environment
variable if that is set.

`n64model.convert.convert_scene(args, scene)` evaluates `-scale` (with
`meter` bound to the value of `-meter`, if given), raises `ValueError` unless
it is a positive number, imports and compiles the scene, writes the
statistics file and the model file when their paths are set, and returns the
`Model`.

```python
from n64model.convert import parse_args, convert_scene

args = parse_args(
    ["-model=robot", "-meter=64", "-scale=meter / 32", "-output=robot.bin", "-use-normals"],
    workspace="",
)
model = convert_scene(args, scene)   # scene built as above
```

## What it does not do

The package does not read 3D model files (such as glTF, FBX or OBJ) from
disk: scenes must be built in code with the `n64model.scene` classes. The
`-model` flag is checked and stored but `convert_scene` does not open it, and
there is no command-line converter; conversion runs through `parse_args` and
`convert_scene` from Python.

## Expression calculator

`n64model-expr` evaluates each argument in order. An argument of the form
`name = expr` stores its result under that name for later arguments:

```
n64model-expr "meter = 64" "scale = meter / 100" "scale * 3"
```

For each argument it prints the normalised expression and its result. It exits
with status 1 if any argument fails to parse or evaluate.

## Running the tests

```
pip install -e ".[test]"
pytest
```