[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mbslave"
version = "0.1.0"
description = "Asyncio Modbus slave library for RTU, TCP and UDP, with frame codecs and two ready-made slave tools"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["modbus", "rtu", "tcp", "udp", "slave", "asyncio", "serial"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
mbslave-exchange = "mbslave.exchange:main"
mbslave-rnd = "mbslave.rnd:main"

[tool.hatch.build.targets.wheel]
packages = ["mbslave"]

[tool.pytest.ini_options]
addopts = "-ra"
