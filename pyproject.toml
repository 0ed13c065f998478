[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syswrap"
version = "0.1.0"
description = "Tracked wrappers for files, memory blocks, mappings and child processes on POSIX systems"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "process",
    "waitpid",
    "zombie",
    "memory",
    "mmap",
    "leak detection",
    "file descriptors",
    "monitoring",
    "worker pool",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Operating System",
    "Topic :: Software Development :: Debuggers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syswrap-file-tracker = "syswrap.filetracker:main"
syswrap-memory-pool = "syswrap.memory_pool:main"
syswrap-timed-wait = "syswrap.timed_wait:main"
syswrap-monitor = "syswrap.monitor:main"
syswrap-children = "syswrap.children:main"
syswrap-zombies = "syswrap.zombies:main"
syswrap-pool = "syswrap.pool:main"

[tool.hatch.build.targets.wheel]
packages = ["syswrap"]

[tool.pytest.ini_options]
addopts = "-ra"
