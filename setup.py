#!/usr/bin/env python
import setuptools
from setuptools import setup

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("./rlkit/VERSION", "r") as vf:
    version = vf.read().strip()

setup(
    name="rlkit",
    version=version,

    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.23.4",
        "pydantic>=2.0,<3",
        "pysam>=0.19",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },

    description="A read-likelihood matrix engine for genotyping: per-sample allele x read log-likelihood tables.",
    long_description=long_description,
    long_description_content_type="text/markdown",

    license="GPLv3",
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: POSIX",
    ],

    packages=setuptools.find_namespace_packages(include=["rlkit", "rlkit.*"]),
    package_data={
        "rlkit": ["VERSION", "data/params/*.json"],
    },
    include_package_data=True,
)
