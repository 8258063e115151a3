from pathlib import Path

from setuptools import setup, find_packages

# Version lives in src/chunklog/_version.py
version_ns = {}
exec((Path(__file__).parent / "src" / "chunklog" / "_version.py").read_text(encoding="utf-8"),
     version_ns)

setup(
    name="chunklog",
    version=version_ns["__version__"],
    description="Structured, colorized logging — chunk-compiled messages rendered to the terminal and to rotating log files",
    author="Dustin",
    author_email="6962246+djdarcy@users.noreply.github.com",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "rich>=13.0",
    ],
    extras_require={
        "test": ["pytest>=7.0", "pytest-cov"],
    },
    entry_points={
        "console_scripts": [
            "chunklog=chunklog.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Logging",
    ],
    python_requires=">=3.10",
)
