#!/usr/bin/env python3
"""
packetrate - per-host packet rate statistics for capture files
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

setup(
    name="packetrate",
    version="1.0.0",
    author="Network Analysis Team",
    description="Reorder capture files and report per-host windowed packet/byte rate statistics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["packetrate", "packetrate.*", "common", "bin"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Networking :: Monitoring",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.8",
    install_requires=[
        "dpkt>=1.9.8",
        "pandas>=1.5.0",
        "PyYAML>=6.0",
        "tqdm>=4.65.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=22.0",
            "flake8>=5.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "packetrate=bin.packetrate_cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
