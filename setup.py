#!/usr/bin/env python
"""Setup the package."""


from setuptools import find_packages, setup

import re
from os.path import dirname, join


def _read(*names, **kwargs):
    with open(
        join(dirname(__file__), *names), encoding=kwargs.get("encoding", "utf8")
    ) as fl:
        return fl.read()


test_req = [
    "pre-commit",
    "pytest>=5.0",
    "pytest-cov",
    "tox",
]

doc_req = ["numpydoc", "sphinx >= 1.3", "sphinx-rtd-theme"]

setup(
    name="ctest-tracing",
    version="0.1.0",
    license="BSL-1.0",
    description="Convert CTest console output into Chrome trace event JSON",
    long_description=re.compile("^.. start-badges.*^.. end-badges", re.M | re.S).sub(
        "", _read("README.rst")
    ),
    long_description_content_type="text/x-rst",
    author="Nick G",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Boost Software License 1.0 (BSL-1.0)",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Software Development :: Testing",
    ],
    keywords=["CTest", "tracing", "Chrome trace", "Perfetto"],
    install_requires=[
        "attrs",
        "cyclopts",
        "pyyaml",
        "rich",
    ],
    extras_require={"tests": test_req, "docs": doc_req, "dev": test_req + doc_req},
    entry_points={"console_scripts": ["ctest-tracing = ctest_tracing.cli:main"]},
)
