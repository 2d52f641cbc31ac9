[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "echoreactor"
version = "0.1.0"
description = "A reactor-style TCP echo server with a worker thread pool, an interactive client and a load benchmark"
requires-python = ">=3.10"
dependencies = []
keywords = ["reactor", "epoll", "echo", "tcp", "server", "thread-pool", "benchmark", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
echoreactor-server = "echoreactor.server:main"
echoreactor-client = "echoreactor.client:main"
echoreactor-bench = "echoreactor.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["echoreactor"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
