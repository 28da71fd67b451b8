[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "n64model"
version = "0.1.0"
description = "Convert 3D scenes into Nintendo 64 RSP display lists, vertex buffers and animation frames."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "n64",
    "rsp",
    "display-list",
    "gbi",
    "3d-model",
    "vertex-cache",
    "animation",
    "expression",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
n64model-expr = "n64model.exprcalc:main"

[tool.hatch.build.targets.wheel]
packages = ["n64model"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
