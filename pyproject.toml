[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apextux"
version = "0.1.0"
description = "Render clocks, prices, system statistics and images for the 128x40 OLED screen of SteelSeries Apex keyboards, shown in a simulator window"
requires-python = ">=3.11"
keywords = ["oled", "steelseries", "apex", "keyboard", "display", "framebuffer", "simulator"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Framework :: AsyncIO",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
]
dependencies = [
    "pillow",
    "psutil",
    "requests",
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
apextux = "apextux.app:main"

[tool.hatch.build.targets.wheel]
packages = ["apextux"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
ignore_missing_imports = true
