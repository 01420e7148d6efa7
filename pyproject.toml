[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "solarplant"
version = "0.1.0"
description = "Collects live Ferroamp data, energy prices and weather forecasts for a home solar plant, forecasts production and consumption, and stores it all in SQLite."
requires-python = ">=3.10"
keywords = [
    "solar",
    "battery",
    "energy",
    "home-automation",
    "mqtt",
    "ferroamp",
    "energy-prices",
    "sqlite",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
]
dependencies = [
    "paho-mqtt>=2.0",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["solarplant"]

[tool.hatch.build.targets.sdist]
include = [
    "solarplant",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
