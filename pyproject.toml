[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "easyview"
version = "0.1.0"
description = "Record execution traces of tiled parallel computations and browse them as interactive Gantt charts"
requires-python = ">=3.10"
dependencies = [
    "pygame",
]
keywords = ["trace", "gantt", "profiling", "parallel", "visualization", "tiling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: X11 Applications",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
easyview = "easyview.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["easyview"]

[tool.pytest.ini_options]
addopts = "-ra"
