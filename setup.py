#!/usr/bin/env python3
"""
Setup script for dtnroute - congestion-aware epidemic routing for DTN simulators.

This package provides an epidemic router with delivery receipts and AIMD
congestion control, together with a tabular Q-learning engine with
Boltzmann exploration for learning-based routing experiments.
"""

from setuptools import setup, find_packages
import os

# Read the README file for long description
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "dtnroute - congestion-aware epidemic routing for delay-tolerant networks"

setup(
    name="dtnroute",
    version="0.1.0",
    author="dtnroute Development Team",
    description="Congestion-aware epidemic routing and tabular Q-learning for DTN simulators",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests*', 'docs*', '*.tests', '*.tests.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: System :: Networking",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=[
        # Core dependencies that are always needed
        "numpy>=1.26.3",
        "matplotlib>=3.8.2",
        "PyYAML>=6.0.1",
    ],
    extras_require={
        "dev": [
            "pytest>=8.3.4",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
        "test": [
            "pytest>=8.3.4",
        ],
    },
    include_package_data=True,
    zip_safe=False,
    keywords="delay tolerant networks, epidemic routing, congestion control, reinforcement learning, q-learning",
)
