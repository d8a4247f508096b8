from setuptools import setup, find_packages
from codecs import open
from os import path

here = path.abspath(path.dirname(__file__))
name = "omnidef"
exec(open(path.join(here, "omnidef", "version.py")).read())


# Get the long description from the README file
with open(path.join(here, "README.rst"), encoding="utf-8") as f:
    long_description = f.read()

try:
    with open(path.join(here, "requirements.txt"), encoding="utf-8") as f:
        pinned_reqs = f.readlines()
except FileNotFoundError:
    pinned_reqs = []


setup(
    name=name,
    version=__version__,
    python_requires=">=3.8",
    description="Software definitions for omnibus-style packaging",
    long_description=long_description,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: Software Development :: Build Tools",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
    ],
    keywords=[
        "autotools",
        "build",
        "make",
        "omnibus",
        "packaging",
    ],
    packages=find_packages(exclude=["contrib", "docs", "tests"]),
    install_requires=pinned_reqs or [
        "bz2file",
        "click>=8.1",
        "colorama",
        "fasteners",
        "psutil",
        "requests",
        "tqdm",
    ],
    extras_require={
        "test": ["coverage"],
    },
    entry_points={
        "console_scripts": [
            "omnidef=omnidef.__main__:main",
        ],
    },
)
