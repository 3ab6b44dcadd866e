[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "femtrack"
version = "0.1.0"
description = "A WSGI workout-tracking API with bearer-token authentication over a DB-API connection"
requires-python = ">=3.10"
keywords = ["wsgi", "werkzeug", "workouts", "fitness", "rest", "api", "tokens"]
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
    "werkzeug",
    "bcrypt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["femtrack"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
