[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mnstr"
version = "0.1.0"
description = "Small WSGI API server for registering users and signing them in"
requires-python = ">=3.10"
keywords = ["wsgi", "api", "authentication", "users", "sessions", "bcrypt"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "sqlalchemy>=2.0",
    "bcrypt>=4.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
mnstr = "mnstr.server:main"

[tool.hatch.build.targets.wheel]
packages = ["mnstr"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
