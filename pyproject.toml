[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hammodem"
version = "0.1.0"
description = "Baseband modem building blocks for amateur radio: AX.25 AFSK, CW identification, DMR direct-mode transmit and calibration helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["ham radio", "amateur radio", "ax25", "afsk", "hdlc", "dmr", "nxdn", "pocsag", "cw", "modem", "dsp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hammodem"]

[tool.pytest.ini_options]
addopts = "-ra"
