from setuptools import setup, find_packages

setup(
    name="monkey-lang",
    version="0.1.0",
    description="Monkey — tree-walking interpreter for a small C-like expression language",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "monkey=monkey.cli:main",
        ],
    },
)
