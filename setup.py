from setuptools import setup, find_packages
import pathlib, os

# Detect layout
use_src = pathlib.Path("src/csvbind").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="csv-bind",
    version="0.1.0",
    include_package_data=True,
    package_data={"csvbind": ["schemas/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "jinja2",
        "jsonschema",
        "pydantic>=2",
        "pyyaml",
        "typer",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["csvbind=csvbind.cli:app"],
    },
    **pkg_args
)
