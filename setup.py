#!/usr/bin/env python3
"""
Setup script for the op-picker Python package.
"""

from pathlib import Path

from setuptools import find_packages, setup


# Read requirements from requirements.txt
def read_requirements():
  requirements_file = Path(__file__).parent / "requirements.txt"
  if requirements_file.exists():
    with open(requirements_file) as f:
      return [line.strip() for line in f if line.strip() and not line.startswith("#")]
  return []


# Read version from __init__.py
def get_version():
  init_file = Path(__file__).parent / "op_picker" / "__init__.py"
  if init_file.exists():
    with open(init_file) as f:
      for line in f:
        if line.startswith("__version__"):
          return line.split("=")[1].strip().strip('"').strip("'")
  return "1.0.0"


setup(
  name="op-picker",
  version=get_version(),
  description="Timed clipboard access to 1Password secrets through fzf",
  long_description="Pick 1Password items with fzf, copy a secret to the clipboard for a bounded window "
  "and restore the previous clipboard content, with a cached op session and user extensions.",
  author="op-picker developers",
  python_requires=">=3.9",
  packages=find_packages(exclude=["tests", "tests.*"]),
  install_requires=read_requirements(),
  extras_require={
    "test": ["pytest>=7"],
  },
  entry_points={
    "console_scripts": [
      "op-picker=op_picker.cli:main",
    ]
  },
  classifiers=[
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: MIT License",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Topic :: Security",
    "Topic :: Utilities",
  ],
  keywords="1password op fzf clipboard secrets cli",
  zip_safe=False,
)
