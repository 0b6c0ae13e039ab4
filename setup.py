"""
Setup script for cscview

cscview is pure Python; numpy and scipy carry the array storage and the
sparse interop. There is nothing to compile.
"""

from pathlib import Path
from setuptools import setup, find_packages


# Read version from src/cscview/__init__.py
def get_version():
    version_file = Path("src/cscview/__init__.py")
    if version_file.exists():
        for line in version_file.read_text().splitlines():
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"').strip("'")
    return "0.1.0"


# Read long description from README
def get_long_description():
    readme = Path("README.md")
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


setup(
    name="cscview",
    version=get_version(),
    description="Zero-copy compressed sparse column views over host-owned matrices",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.22",
        "scipy>=1.8",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    zip_safe=False,
)
