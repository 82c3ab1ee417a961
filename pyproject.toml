[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "distdet"
version = "0.1.0"
description = "YOLO output decoding and monocular distance estimation from detected object heights"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["yolo", "object detection", "distance estimation", "non-maximum suppression", "monocular"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["distdet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
