#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2024-2025 AMLFIP Developers
#
# SPDX-License-Identifier: BSD-3-Clause

import os

from setuptools import find_packages, setup  # type: ignore

requirements = [
    "click>=8.1,<9",
    "colorama>=0.4.6,<0.5",
    "cryptography>=42.0.0",
    "deepmerge>=1.1,<3",
    "fastjsonschema>=2.15.1,<3",
    "hexdump<3.4",
    "importlib_metadata>=4.8",
    "packaging>=23.2",
    "platformdirs>=3.9.1,<5",
    "pyyaml>=6.0,<7",
    "typing_extensions>=4.7",
]

version: dict = {}
with open(os.path.join("amlfip", "__version__.py")) as version_file:
    exec(version_file.read(), version)  # pylint: disable=exec-used

with open("README.md", "r") as f:
    long_description = f.read()

extras_require = {
    "tests": ["pytest>=7.0"],
}

setup(
    name="amlfip",
    version=version["__version__"],
    description="Firmware Image Package builder for Amlogic S905X (GXL) boot images",
    author="AMLFIP Developers",
    license="BSD-3-Clause",
    long_description=long_description,
    long_description_content_type="text/markdown",
    platforms="Windows, Linux, Mac OSX",
    python_requires=">=3.9",
    install_requires=requirements,
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS :: MacOS X",
        "License :: OSI Approved :: BSD License",
        "Topic :: Software Development :: Embedded Systems",
        "Topic :: Utilities",
    ],
    packages=find_packages(exclude=["tests.*", "tests"]),
    entry_points={
        "console_scripts": [
            "amlfip=amlfip.apps.amlfip:safe_main",
        ],
    },
    extras_require=extras_require,
)
