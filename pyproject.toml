[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "digitnet"
version = "0.1.0"
description = "A small fully connected neural network for handwritten digit classification on MNIST or synthetic data"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["neural-network", "mnist", "digits", "classification", "machine-learning"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
digitnet = "digitnet.cli:main"
digitnet-gui = "digitnet.gui:main"

[tool.hatch.build.targets.wheel]
packages = ["digitnet"]

[tool.pytest.ini_options]
addopts = "-ra"
