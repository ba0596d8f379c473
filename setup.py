#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import find_packages, setup

setup(
    name="atrail",
    version="0.1.0",
    description="A-trail search for planar Eulerian graphs and meshes",
    author="",
    author_email="",
    url="",
    packages=find_packages(),
    include_package_data=True,
    install_requires=[
        # Graph handling, planarity and matching
        "numpy",
        "networkx>=3.0",
        # Eulerization (shortest paths)
        "scipy>=1.10.0",
        "tqdm>=4.65.0",
        # Visualization
        "matplotlib>=3.7.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "codecov",
        ],
    },
    entry_points={
        "console_scripts": [
            "atrail=atrail.cli:main",
        ],
    },
    python_requires=">=3.10",
)
