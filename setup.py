#!/usr/bin/env python3
"""
Setup script for the pi-gaphi package.

This allows the package to be installed in development mode:
    pip install -e .

After installation:
    from pi_gaphi import analyze_recording
    from pi_gaphi.record_decoder import read_recording
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="pi-gaphi",
    version="1.0.0",
    author="Gait Analysis Team",
    description="Gait cycle phase identification from INDIP pressure insole recordings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pi_gaphi", "pi_gaphi.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=1.3.0",
        "pyyaml>=6.0",
        "scipy>=1.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "flake8>=5.0.0",
            "mypy>=0.990",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    keywords="gait analysis, pressure insole, gait phases, INDIP, biomechanics",
)
