#!/usr/bin/env python3
import os
import re

from setuptools import setup

# Read the version without importing the package, whose dependencies may not be installed yet.
with open(os.path.join(os.path.dirname(__file__), "pyhttpfs", "__init__.py")) as py:
    version_match = re.search(r'__version__ = "(.+?)"', py.read())
    assert version_match
    version = version_match.group(1)

setup(version=version)
