"""
Setup script for pagesmith.

This script configures the package for installation via pip.
Supports both development and production installations.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding='utf-8')

setup(
    name="pagesmith",
    version="1.0.0",
    description="In-memory PDF assembly engine: merge, split, compress and build PDFs from images",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="pagesmith Contributors",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pypdf>=5.0.0",
        "Pillow>=10.0.0",
        "reportlab>=4.0.0",
        "click>=8.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pagesmith=pagesmith.cli:cli",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Office/Business",
        "Topic :: Utilities",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    keywords="pdf merge split compress images watermark bookmarks cli",
    include_package_data=True,
    zip_safe=False,
)
