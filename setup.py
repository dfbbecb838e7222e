#!/usr/bin/env python
from setuptools import setup, find_packages

with open("README.md") as readme_file:
    readme = readme_file.read()

with open("HISTORY.md") as history_file:
    history = history_file.read()

requirements = [
    "click",
    "dynaconf>=3.1.0",
    "jsonschema",
    "python-json-logger",
    "rich",
    "rich_click",
    "ruamel.yaml",
]

test_requirements = ["pytest"]

setup_requirements = ["setuptools", "wheel"]

extras = {
    "test": test_requirements,
    "setup": setup_requirements,
}

setup(
    name="maintain",
    version="0.1.0",
    description="Compose and run ordered maintenance scenarios.",
    long_description=readme + "\n\n" + history,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={"console_scripts": ["maintain=maintain.commands:cli"]},
    include_package_data=True,
    install_requires=requirements,
    tests_require=test_requirements,
    extras_require=extras,
    setup_requires=setup_requirements,
    python_requires=">=3.10",
    license="GNU General Public License v3",
    zip_safe=False,
    keywords="maintain backup scenarios",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
