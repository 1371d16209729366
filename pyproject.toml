[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "figlabels"
version = "0.1.0"
description = "Find figure references and reference numerals in DOCX descriptions and drawing pages"
requires-python = ">=3.10"
keywords = ["docx", "figures", "reference numerals", "labels", "ocr", "drawings"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: Flask",
    "Topic :: Text Processing :: General",
]
dependencies = [
    "pillow",
    "flask",
    "defusedxml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
figlabels-web = "figlabels.web:main"

[tool.hatch.build.targets.wheel]
packages = ["figlabels"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
