from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup


def read_requirements() -> list[str]:
    requirements_file = Path("requirements.txt")
    if not requirements_file.exists():
        return []
    return [line.strip() for line in requirements_file.read_text(encoding="utf-8").splitlines() if line.strip()]


def build_extras() -> dict[str, list[str]]:
    extras_sets: dict[str, set[str]] = {
        "comms": {
            "python-osc",
        },
        "test": {
            "pytest",
            "python-osc",
        },
    }
    extras_sets["all"] = set().union(*extras_sets.values())
    return {name: sorted(packages) for name, packages in extras_sets.items()}


def read_long_description() -> str:
    readme = Path("README.md")
    return readme.read_text(encoding="utf-8") if readme.exists() else ""


setup(
    name="oscbridge",
    version="0.1.0",
    packages=find_packages(include=["oscbridge", "oscbridge.*"]),
    description="Minimal OSC message codec, UDP transport and handler dispatch service",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require=build_extras(),
    include_package_data=True,
)
